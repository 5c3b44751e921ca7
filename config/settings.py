"""
Centralized configuration for the DocWriter report service.
All settings are read from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# ── Paths ────────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
TEMPLATES_DIR = Path(os.getenv("TEMPLATES_DIR", str(DATA_DIR / "templates")))
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(DATA_DIR / "uploads")))
LOGO_UPLOAD_DIR = UPLOAD_DIR / "logos"
ASSETS_DIR = BASE_DIR / "assets"
DEFAULT_LOGO_PATH = Path(os.getenv("DEFAULT_LOGO_PATH", str(ASSETS_DIR / "logo.png")))
UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
LOGO_UPLOAD_DIR.mkdir(parents=True, exist_ok=True)

# ── Server ───────────────────────────────────────────────────────────────
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "3001"))
STREAMLIT_PORT = int(os.getenv("STREAMLIT_PORT", "8501"))
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

# ── Limits ───────────────────────────────────────────────────────────────
MAX_CSV_SIZE_MB = int(os.getenv("MAX_CSV_SIZE_MB", "10"))
MAX_CSV_SIZE_BYTES = MAX_CSV_SIZE_MB * 1024 * 1024
MAX_LOGO_SIZE_MB = int(os.getenv("MAX_LOGO_SIZE_MB", "5"))
MAX_LOGO_SIZE_BYTES = MAX_LOGO_SIZE_MB * 1024 * 1024

# ── LLM (optional, used by AI enhance) ──────────────────────────────────
# Azure OpenAI variables are honoured as fallbacks for older deployments.
_AZURE_KEY = os.getenv("AZURE_OPENAI_API_KEY", "")
_AZURE_ENDPOINT = os.getenv("AZURE_OPENAI_ENDPOINT", "")

LLM_PROVIDER = os.getenv(
    "LLM_PROVIDER", "azure" if (_AZURE_KEY and _AZURE_ENDPOINT) else "none"
).lower()
LLM_API_KEY = os.getenv("LLM_API_KEY", _AZURE_KEY)
LLM_MODEL = os.getenv(
    "LLM_MODEL", os.getenv("AZURE_OPENAI_DEPLOYMENT_NAME", "gpt-4o-mini")
)
LLM_ENDPOINT = os.getenv(
    "LLM_ENDPOINT", _AZURE_ENDPOINT or "https://api.openai.com/v1/chat/completions"
)
LLM_API_VERSION = os.getenv(
    "LLM_API_VERSION", os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview")
)
LLM_TIMEOUT = int(os.getenv("LLM_TIMEOUT", "60"))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "800"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))

LLM_PROVIDERS = ("azure", "openai", "gemini", "ollama")


def llm_configured(provider: str, api_key: str) -> bool:
    """A known provider with a key; a local Ollama server needs none."""
    return provider in LLM_PROVIDERS and bool(api_key or provider == "ollama")


def is_llm_enabled() -> bool:
    """Check if LLM is configured and enabled."""
    return llm_configured(LLM_PROVIDER, LLM_API_KEY)

# ── Branding ─────────────────────────────────────────────────────────────
BRAND_NAME = os.getenv("BRAND_NAME", "AI DocWriter")
BRAND_COLOR = os.getenv("BRAND_COLOR", "#2563EB")
REPORT_OWNER = os.getenv("REPORT_OWNER", "Enterprise Architecture")

# ── Usage tracking ───────────────────────────────────────────────────────
ENABLE_USAGE_TRACKING = os.getenv("ENABLE_USAGE_TRACKING", "false").lower() == "true"
