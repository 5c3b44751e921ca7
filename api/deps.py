"""
Request dependencies — hand the shared collaborators stored on
``app.state`` to route handlers.  Tests swap them through
``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Request

from agents.enhance import ContentEnhancer
from agents.export import DocumentExporter
from agents.templates import TemplateStore
from orchestrator.sessions import SessionStore


def get_template_store(request: Request) -> TemplateStore:
    return request.app.state.templates


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_exporter(request: Request) -> DocumentExporter:
    return request.app.state.exporter


def get_enhancer(request: Request) -> ContentEnhancer:
    return request.app.state.enhancer
