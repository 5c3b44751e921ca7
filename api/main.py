"""
FastAPI application — main entry point.

Run with:  uvicorn api.main:app --reload --port 3001
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from agents.enhance import ContentEnhancer, LLMContentEnhancer
from agents.export import DocumentExporter
from agents.templates import BUILTIN_TEMPLATES, TemplateStore
from api.deps import get_enhancer, get_template_store
from api.errors import register_exception_handlers
from api.middleware import RequestLoggingMiddleware, UsageTrackingMiddleware
from api.routes.download import router as download_router
from api.routes.reports import router as reports_router
from api.routes.templates import router as templates_router
from api.routes.upload import router as upload_router
from config.settings import (
    BRAND_NAME,
    ENVIRONMENT,
    LLM_PROVIDER,
    UPLOAD_DIR,
    is_llm_enabled,
)
from orchestrator.sessions import InMemorySessionStore

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-7s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger("API")
if is_llm_enabled():
    logger.info("✨ AI enhancement available (%s)", LLM_PROVIDER)
else:
    logger.info("⚙️ AI enhancement disabled (No LLM configured)")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s backend starting", BRAND_NAME)
    yield
    # Sessions live only as long as the process.
    app.state.sessions.clear()


# ── App ──────────────────────────────────────────────────────────────
app = FastAPI(
    title=f"{BRAND_NAME} API",
    description="Upload an application-inventory CSV, generate enterprise "
                "architecture reports from templates, edit them, and export "
                "PDF or DOCX documents.",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.templates = TemplateStore()
app.state.sessions = InMemorySessionStore()
app.state.exporter = DocumentExporter()
app.state.enhancer = LLMContentEnhancer()

register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────────────
app.add_middleware(UsageTrackingMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Static files (uploaded logos) ────────────────────────────────────
app.mount("/uploads", StaticFiles(directory=str(UPLOAD_DIR)), name="uploads")

# ── Routes ───────────────────────────────────────────────────────────
app.include_router(templates_router, prefix="/api", tags=["Templates"])
app.include_router(upload_router, prefix="/api", tags=["Upload & Generate"])
app.include_router(reports_router, prefix="/api", tags=["Reports"])
app.include_router(download_router, prefix="/api", tags=["Downloads"])


@app.get("/", tags=["Health"])
async def root():
    """Liveness endpoint."""
    return {"status": "healthy", "service": BRAND_NAME}


@app.get("/api/health", tags=["Health"])
async def health_check(
    templates: TemplateStore = Depends(get_template_store),
    enhancer: ContentEnhancer = Depends(get_enhancer),
):
    """Liveness plus template availability and configuration flags."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "templates": {tid: templates.exists(tid) for tid in BUILTIN_TEMPLATES},
        "environment": {
            "llmConfigured": enhancer.available,
            "llmProvider": LLM_PROVIDER,
            "environment": ENVIRONMENT,
        },
    }
