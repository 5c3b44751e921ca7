"""
ReportAssembler — Fill a report template with mapped field values.

Every ``{field_name}`` token in a section's content is replaced by the
matching value; tokens without a value stay verbatim so they remain
visible for manual correction in the editor.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from agents.errors import ValidationError
from agents.field_mapper import FieldMap
from agents.rendering import render_report_html
from agents.templates import ReportTemplate

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\{([A-Za-z0-9_]+)\}")


@dataclass(frozen=True)
class ReportSection:
    title: str
    content: str = ""

    @classmethod
    def from_any(cls, value: Any) -> "ReportSection":
        if isinstance(value, ReportSection):
            return value
        if isinstance(value, Mapping):
            content = value.get("content")
            return cls(
                title=str(value.get("title") or ""),
                content="" if content is None else str(content),
            )
        return cls(title=str(getattr(value, "title", "")),
                   content=str(getattr(value, "content", "") or ""))

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "content": self.content}


@dataclass
class GeneratedReport:
    """One editable report produced from a single application record."""
    id: str
    title: str
    application_name: str
    organization_name: str
    sections: List[ReportSection] = field(default_factory=list)
    html_content: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def application_id(self) -> str:
        return self.metadata.get("applicationId", "")

    @property
    def template_id(self) -> str:
        return self.metadata.get("templateId", "")

    def render_html(self, generated_on: Optional[date] = None) -> str:
        return render_report_html(
            self.organization_name,
            self.title,
            self.application_id,
            self.sections,
            generated_on=generated_on,
        )

    def with_edits(
        self,
        sections: Optional[Iterable[Any]] = None,
        title: Optional[str] = None,
    ) -> "GeneratedReport":
        """Return a copy with sections/title replaced and HTML regenerated."""
        updated = replace(
            self,
            sections=(
                [ReportSection.from_any(s) for s in sections]
                if sections is not None else list(self.sections)
            ),
            title=title if title else self.title,
            metadata=dict(self.metadata),
        )
        updated.html_content = updated.render_html()
        return updated

    def with_section_content(self, index: int, content: str) -> "GeneratedReport":
        if not 0 <= index < len(self.sections):
            raise ValidationError(f"sectionIndex {index} is out of range")
        sections = list(self.sections)
        sections[index] = ReportSection(sections[index].title, content)
        return self.with_edits(sections=sections)

    def summary(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "applicationName": self.application_name,
            "organizationName": self.organization_name,
            "applicationId": self.application_id,
        }

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = self.summary()
        body["generatedAt"] = self.metadata.get("generatedAt", "")
        body["sections"] = [s.to_dict() for s in self.sections]
        return body


def substitute_placeholders(content: str, values: Mapping[str, str]) -> str:
    """Replace ``{name}`` tokens in a single pass; unknown names stay as-is."""
    if not content:
        return ""
    return PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), content)


def make_report_id(application_id: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9_-]", "_", application_id.strip()) or "app"
    return f"report_{slug}_{uuid.uuid4().hex[:8]}"


class ReportAssembler:
    """Turn a template plus field values into a GeneratedReport."""

    def assemble(
        self,
        template: ReportTemplate,
        fields: Union[FieldMap, Mapping[str, str]],
        application_id: str = "",
        application_name: Optional[str] = None,
        organization_name: Optional[str] = None,
    ) -> GeneratedReport:
        values = fields.as_dict() if isinstance(fields, FieldMap) else dict(fields)

        sections = [
            ReportSection(
                title=section.title,
                content=substitute_placeholders(section.content or "", values),
            )
            for section in template.sections
        ]

        app_name = application_name or values.get("application_name") or "Unnamed Application"
        org_name = organization_name or values.get("organization_name") or "Organization"

        report = GeneratedReport(
            id=make_report_id(application_id),
            title=f"{app_name} - {template.name}",
            application_name=app_name,
            organization_name=org_name,
            sections=sections,
            metadata={
                "templateId": template.id,
                "generatedAt": datetime.now(timezone.utc).isoformat(),
                "applicationId": application_id,
            },
        )
        report.html_content = report.render_html()
        logger.debug("Assembled report %s (%d sections)", report.id, len(sections))
        return report
