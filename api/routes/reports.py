"""
Report routes — read a session's reports, apply inline edits, and
rewrite sections with the AI enhancer.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from agents.enhance import ContentEnhancer, EnhancementContext
from agents.errors import UpstreamError, ValidationError
from api.deps import get_enhancer, get_session_store
from api.schemas import EnhanceRequest, ReportUpdate
from orchestrator.sessions import SessionStore

router = APIRouter()


@router.get("/reports/{session_id}")
async def list_reports(session_id: str, sessions: SessionStore = Depends(get_session_store)):
    """Every report of a session, sections included for the editor."""
    reports = sessions.get(session_id)
    return {
        "sessionId": session_id,
        "reports": [report.to_dict() for report in reports],
    }


@router.put("/reports/{session_id}/{report_id}")
async def update_report(
    session_id: str,
    report_id: str,
    body: ReportUpdate,
    sessions: SessionStore = Depends(get_session_store),
):
    """Replace sections and/or title and regenerate the HTML snapshot."""
    sections = (
        [s.model_dump() for s in body.sections] if body.sections is not None else None
    )
    report = sessions.update_report(
        session_id,
        report_id,
        lambda current: current.with_edits(sections=sections, title=body.title),
    )
    return {
        "message": "Report updated successfully",
        "report": {
            "id": report.id,
            "title": report.title,
            "sections": [s.to_dict() for s in report.sections],
        },
    }


@router.post("/reports/{session_id}/{report_id}/ai-enhance")
async def ai_enhance(
    session_id: str,
    report_id: str,
    body: EnhanceRequest,
    sessions: SessionStore = Depends(get_session_store),
    enhancer: ContentEnhancer = Depends(get_enhancer),
):
    """Rewrite section text with the LLM.

    With ``sectionIndex`` the enhanced text is also saved into that section.
    """
    report = sessions.get_report(session_id, report_id)
    if not enhancer.available:
        raise UpstreamError("AI service not configured", status_code=503)
    if body.section_index is not None and not 0 <= body.section_index < len(report.sections):
        raise ValidationError(f"sectionIndex {body.section_index} is out of range")

    app_data = body.application_data
    context = EnhancementContext(
        application_name=(app_data.application_name if app_data else "") or report.application_name,
        organization_name=(app_data.organization_name if app_data else "") or report.organization_name,
        application_id=(app_data.application_id if app_data else "") or report.application_id,
    )
    enhanced = await run_in_threadpool(
        enhancer.enhance,
        body.section_title,
        body.original_content,
        body.user_request,
        context,
    )

    if body.section_index is not None:
        sessions.update_report(
            session_id,
            report_id,
            lambda current: current.with_section_content(body.section_index, enhanced),
        )

    return {"enhancedContent": enhanced, "message": "Content enhanced successfully"}
