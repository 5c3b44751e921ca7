"""
TemplateStore — Load report templates from JSON files on disk.

Each template lives in ``{TEMPLATES_DIR}/{id}.json`` and has the shape
``{id, name, description, avgPages, sections: [{title, content}],
placeholders: []}``.  Parsed templates are immutable and cached.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from agents.errors import TemplateMalformed, TemplateNotFound
from config.settings import TEMPLATES_DIR

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "name", "sections")
BUILTIN_TEMPLATES = ("application_profile", "business_profile", "demand_profile")
_TEMPLATE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class TemplateSection:
    title: str
    content: str = ""


@dataclass(frozen=True)
class ReportTemplate:
    id: str
    name: str
    description: str = ""
    avg_pages: int = 0
    sections: Tuple[TemplateSection, ...] = field(default_factory=tuple)
    placeholders: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any, source: str = "template") -> "ReportTemplate":
        if not isinstance(data, dict):
            raise TemplateMalformed(f"{source} is not a JSON object")
        missing = [key for key in REQUIRED_FIELDS if not data.get(key)]
        if missing:
            raise TemplateMalformed(
                f"{source} is missing required fields", details=missing
            )
        if not isinstance(data["sections"], list):
            raise TemplateMalformed(f"{source}: 'sections' must be a list")

        sections = []
        for index, section in enumerate(data["sections"]):
            if not isinstance(section, dict) or "title" not in section:
                raise TemplateMalformed(
                    f"{source}: section {index} must be an object with a title"
                )
            content = section.get("content")
            sections.append(TemplateSection(
                title=str(section["title"]),
                content="" if content is None else str(content),
            ))

        try:
            avg_pages = int(data.get("avgPages") or 0)
        except (TypeError, ValueError):
            avg_pages = 0

        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            avg_pages=avg_pages,
            sections=tuple(sections),
            placeholders=tuple(str(p) for p in data.get("placeholders") or ()),
        )

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "avgPages": self.avg_pages,
        }

    def to_dict(self) -> Dict[str, Any]:
        body = self.summary()
        body["sections"] = [
            {"title": s.title, "content": s.content} for s in self.sections
        ]
        body["placeholders"] = list(self.placeholders)
        return body


class TemplateStore:
    """Read-only, cached access to the JSON template directory."""

    def __init__(self, templates_dir: Optional[Path] = None) -> None:
        self.templates_dir = Path(templates_dir or TEMPLATES_DIR)
        self._cache: Dict[str, ReportTemplate] = {}
        self._lock = threading.Lock()

    def path_for(self, template_id: str) -> Path:
        return self.templates_dir / f"{template_id}.json"

    def exists(self, template_id: str) -> bool:
        return bool(_TEMPLATE_ID.match(template_id)) and self.path_for(template_id).is_file()

    def get(self, template_id: str) -> ReportTemplate:
        """Return the template with the given id.

        Raises TemplateNotFound or TemplateMalformed.
        """
        cached = self._cache.get(template_id)
        if cached is not None:
            return cached

        if not self.exists(template_id):
            raise TemplateNotFound("Template not found", details=template_id)

        with self._lock:
            cached = self._cache.get(template_id)
            if cached is None:
                cached = self._load(self.path_for(template_id))
                self._cache[template_id] = cached
        return cached

    def list(self) -> List[Dict[str, Any]]:
        """Metadata for every well-formed template, sorted by id."""
        summaries = []
        if not self.templates_dir.is_dir():
            return summaries
        for path in sorted(self.templates_dir.glob("*.json")):
            try:
                summaries.append(self.get(path.stem).summary())
            except (TemplateMalformed, TemplateNotFound) as exc:
                logger.warning("Skipping template %s: %s", path.name, exc.message)
        return summaries

    def _load(self, path: Path) -> ReportTemplate:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise TemplateMalformed(
                f"Template {path.stem} is not valid JSON", details=str(exc)
            ) from exc
        template = ReportTemplate.from_dict(data, source=f"Template {path.stem}")
        logger.info("Loaded template %s (%d sections)", template.id, len(template.sections))
        return template
