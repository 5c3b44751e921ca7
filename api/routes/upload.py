"""
Upload routes — accept a CSV, run the generation pipeline, and store
the resulting reports under a new session.  Also handles logo uploads
and a CSV parsing check.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.concurrency import run_in_threadpool

from agents.errors import ValidationError
from agents.ingestion import IngestionAgent
from agents.templates import TemplateStore
from api.deps import get_session_store, get_template_store
from config.settings import (
    LOGO_UPLOAD_DIR,
    MAX_CSV_SIZE_BYTES,
    MAX_LOGO_SIZE_BYTES,
    UPLOAD_DIR,
)
from orchestrator.master import MasterOrchestrator
from orchestrator.sessions import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_csv_upload(file: Optional[UploadFile]) -> bytes:
    """Validate type and size of an uploaded CSV and return its bytes."""
    if file is None:
        raise ValidationError("CSV file is required")
    name = (file.filename or "").lower()
    if not (name.endswith(".csv") or file.content_type == "text/csv"):
        raise ValidationError("Only CSV files are allowed")

    content = await file.read()
    if len(content) > MAX_CSV_SIZE_BYTES:
        raise ValidationError(
            f"File too large. Maximum size is {MAX_CSV_SIZE_BYTES // (1024 * 1024)} MB."
        )
    return content


async def save_logo_upload(file: UploadFile) -> Path:
    """Store an uploaded logo image under the logo directory."""
    if not (file.content_type or "").startswith("image/"):
        raise ValidationError("Only image files are allowed")
    content = await file.read()
    if len(content) > MAX_LOGO_SIZE_BYTES:
        raise ValidationError(
            f"Logo too large. Maximum size is {MAX_LOGO_SIZE_BYTES // (1024 * 1024)} MB."
        )
    suffix = Path(file.filename or "").suffix.lower()[:8]
    path = LOGO_UPLOAD_DIR / f"{uuid.uuid4().hex}{suffix}"
    path.write_bytes(content)
    return path


@router.post("/generate-reports")
async def generate_reports(
    csvFile: Optional[UploadFile] = File(None),
    templateId: Optional[str] = Form(None),
    templates: TemplateStore = Depends(get_template_store),
    sessions: SessionStore = Depends(get_session_store),
):
    """Generate one report per CSV row and open a new session for them.

    Rows that fail to generate are listed under ``failed``; the rest are
    stored and summarised under ``reports``.
    """
    # ── Validate ─────────────────────────────────────────────────────
    if not templateId:
        raise ValidationError("Template ID is required")
    content = await read_csv_upload(csvFile)
    logger.info("Processing CSV file: %s for template: %s", csvFile.filename, templateId)

    # ── Run pipeline ─────────────────────────────────────────────────
    orchestrator = MasterOrchestrator(templates, sessions)
    result = await run_in_threadpool(orchestrator.run, content, templateId)

    # ── Response ─────────────────────────────────────────────────────
    return result.summary_dict()


@router.post("/debug/csv")
async def debug_csv(csvFile: Optional[UploadFile] = File(None)):
    """Parse a CSV without generating reports and show the first record."""
    content = await read_csv_upload(csvFile)
    agent = IngestionAgent()
    ingestion = await run_in_threadpool(agent.run, content)
    first = ingestion.records[0].as_dict() if ingestion.records else None
    return {
        "message": "CSV parsed successfully",
        "recordCount": len(ingestion.records),
        "skippedRows": ingestion.skipped_rows,
        "firstRecord": first,
    }


@router.post("/upload-logo")
async def upload_logo(logo: Optional[UploadFile] = File(None)):
    """Store a logo for later exports; pass ``logoPath`` back to the export route."""
    if logo is None:
        raise ValidationError("No logo file provided")
    path = await save_logo_upload(logo)
    return {
        "message": "Logo uploaded successfully",
        "logoPath": path.name,
        "logoUrl": f"/uploads/{path.relative_to(UPLOAD_DIR).as_posix()}",
        "filename": logo.filename,
    }
