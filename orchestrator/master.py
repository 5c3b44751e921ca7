"""
MasterOrchestrator — Runs the report generation pipeline for one CSV
upload: ingest rows, map fields, fill the template, store the session.

Usage:
    from orchestrator.master import MasterOrchestrator
    result = MasterOrchestrator(templates, sessions).run(csv_path, "application_profile")
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from agents.errors import ValidationError
from agents.field_mapper import build_field_map
from agents.ingestion import ApplicationRecord, CsvSource, IngestionAgent, IngestionResult
from agents.report import GeneratedReport, ReportAssembler
from agents.templates import ReportTemplate, TemplateStore
from orchestrator.sessions import SessionStore, new_session_id

logger = logging.getLogger(__name__)


@dataclass
class FailedRecord:
    application_id: str
    application_name: str
    error: str

    def as_dict(self) -> Dict[str, str]:
        return {
            "applicationId": self.application_id,
            "applicationName": self.application_name,
            "error": self.error,
        }


@dataclass
class GenerationResult:
    """Aggregated output of one generation request."""
    session_id: str = ""
    template_id: str = ""
    status: str = "pending"
    total_duration_seconds: float = 0.0
    generated_at: str = ""

    ingestion: Optional[IngestionResult] = None
    reports: List[GeneratedReport] = field(default_factory=list)
    failed: List[FailedRecord] = field(default_factory=list)

    agent_logs: List[Dict[str, Any]] = field(default_factory=list)

    def summary_dict(self) -> Dict[str, Any]:
        """Serialisable summary for API responses."""
        return {
            "message": f"Generated {len(self.reports)} reports successfully",
            "sessionId": self.session_id,
            "reports": [report.summary() for report in self.reports],
            "failed": [item.as_dict() for item in self.failed],
            "templateId": self.template_id,
            "generatedAt": self.generated_at,
        }


class MasterOrchestrator:
    """Execute Ingestion → Field mapping → Assembly → Session storage."""

    def __init__(
        self,
        templates: TemplateStore,
        sessions: SessionStore,
        assembler: Optional[ReportAssembler] = None,
    ) -> None:
        self.templates = templates
        self.sessions = sessions
        self.assembler = assembler or ReportAssembler()

    def run(self, csv_source: CsvSource, template_id: str) -> GenerationResult:
        if not template_id:
            raise ValidationError("Template ID is required")

        start = time.perf_counter()
        template = self.templates.get(template_id)

        ingestion_agent = IngestionAgent()
        ingestion: IngestionResult = ingestion_agent.run(csv_source)
        if not ingestion.records:
            raise ValidationError("No valid application data found in CSV file")

        result = GenerationResult(
            session_id=new_session_id(),
            template_id=template.id,
            status="running",
            ingestion=ingestion,
        )
        result.agent_logs.append(ingestion_agent.log.as_dict())

        total = len(ingestion.records)
        for position, record in enumerate(ingestion.records, start=1):
            logger.info(
                "Generating report %d/%d for %s", position, total, record.application_name
            )
            try:
                result.reports.append(self.generate_one(template, record))
            except Exception as exc:
                logger.exception(
                    "Error generating report for %s", record.application_name
                )
                result.failed.append(FailedRecord(
                    application_id=record.application_id,
                    application_name=record.application_name,
                    error=str(exc),
                ))

        self.sessions.put(result.session_id, result.reports)

        result.status = "completed" if not result.failed else "partial"
        result.generated_at = datetime.now(timezone.utc).isoformat()
        result.total_duration_seconds = round(time.perf_counter() - start, 3)
        logger.info(
            "Session %s: %d report(s), %d failed in %.2fs",
            result.session_id, len(result.reports), len(result.failed),
            result.total_duration_seconds,
        )
        return result

    def generate_one(self, template: ReportTemplate, record: ApplicationRecord) -> GeneratedReport:
        fields = build_field_map(record)
        return self.assembler.assemble(
            template,
            fields,
            application_id=record.application_id,
            application_name=fields.application_name,
            organization_name=record.organization_name or "Organization",
        )
