"""
Download routes — HTML preview, legacy PDF download, and the PDF/DOCX
export with logo and stakeholder options.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import HTMLResponse, Response
from starlette.concurrency import run_in_threadpool

from agents.export import (
    MEDIA_TYPES,
    DocumentExporter,
    ExportOptions,
    export_filename,
    parse_stakeholder_audience,
)
from agents.report import GeneratedReport
from api.deps import get_exporter, get_session_store
from api.routes.upload import save_logo_upload
from config.settings import LOGO_UPLOAD_DIR
from orchestrator.sessions import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _attachment(report: GeneratedReport, fmt: str, content: bytes) -> Response:
    return Response(
        content=content,
        media_type=MEDIA_TYPES[fmt],
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(report, fmt)}"'
        },
    )


@router.get("/reports/{session_id}/{report_id}/preview", response_class=HTMLResponse)
async def preview_report(
    session_id: str, report_id: str, sessions: SessionStore = Depends(get_session_store)
):
    """Return the report's current HTML snapshot."""
    report = sessions.get_report(session_id, report_id)
    return HTMLResponse(report.html_content)


@router.get("/reports/{session_id}/{report_id}/download")
async def download_report(
    session_id: str,
    report_id: str,
    sessions: SessionStore = Depends(get_session_store),
    exporter: DocumentExporter = Depends(get_exporter),
):
    """PDF of the report without logo or audience options."""
    report = sessions.get_report(session_id, report_id)
    logger.info("Generating PDF for report: %s", report.title)
    content = await run_in_threadpool(exporter.export, report, ExportOptions(format="pdf"))
    return _attachment(report, "pdf", content)


@router.post("/reports/{session_id}/{report_id}/export")
async def export_report(
    session_id: str,
    report_id: str,
    format: str = Form("pdf"),
    useDefaultLogo: str = Form("false"),
    stakeholderAudience: str = Form(""),
    customInstructions: str = Form(""),
    logoPath: Optional[str] = Form(None),
    customLogo: Optional[UploadFile] = File(None),
    sessions: SessionStore = Depends(get_session_store),
    exporter: DocumentExporter = Depends(get_exporter),
):
    """Export as PDF or DOCX.

    A ``customLogo`` upload is used for this export only; ``logoPath``
    refers to a logo stored earlier through ``/upload-logo``.
    """
    report = sessions.get_report(session_id, report_id)

    uploaded: Optional[Path] = None
    if customLogo is not None and customLogo.filename:
        uploaded = await save_logo_upload(customLogo)
    logo_path = uploaded
    if logo_path is None and logoPath:
        logo_path = LOGO_UPLOAD_DIR / Path(logoPath).name

    options = ExportOptions(
        format=format,
        use_default_logo=useDefaultLogo.strip().lower() == "true",
        logo_path=logo_path,
        stakeholder_audience=parse_stakeholder_audience(stakeholderAudience),
        custom_instructions=customInstructions,
    )

    try:
        content = await run_in_threadpool(exporter.export, report, options)
    finally:
        if uploaded is not None:
            uploaded.unlink(missing_ok=True)

    return _attachment(report, options.format, content)
