"""
Template routes — list report templates and fetch one definition.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from agents.templates import TemplateStore
from api.deps import get_template_store

router = APIRouter()


@router.get("/templates")
async def list_templates(templates: TemplateStore = Depends(get_template_store)):
    """Metadata (id, name, description, avgPages) for every template."""
    return {"templates": templates.list()}


@router.get("/templates/{template_id}")
async def get_template(template_id: str, templates: TemplateStore = Depends(get_template_store)):
    """Full template definition including sections and placeholders."""
    return templates.get(template_id).to_dict()
