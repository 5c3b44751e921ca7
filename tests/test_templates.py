"""
Test: TemplateStore — Loading, caching, and rejection of unknown or
malformed templates.
"""

import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from agents.errors import TemplateMalformed, TemplateNotFound
from agents.templates import BUILTIN_TEMPLATES, ReportTemplate, TemplateStore


def _write(directory: Path, name: str, payload) -> None:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    (directory / f"{name}.json").write_text(text, encoding="utf-8")


@pytest.fixture
def store(tmp_path):
    _write(tmp_path, "basic", {
        "id": "basic",
        "name": "Basic Report",
        "description": "A small template",
        "avgPages": 2,
        "sections": [
            {"title": "Intro", "content": "Hello {application_name}"},
            {"title": "Empty", "content": None},
        ],
        "placeholders": ["application_name"],
    })
    _write(tmp_path, "broken", "{not json")
    _write(tmp_path, "headless", {"id": "headless", "sections": []})
    return TemplateStore(tmp_path)


class TestTemplateStore:
    def test_get(self, store):
        template = store.get("basic")
        assert template.name == "Basic Report"
        assert template.avg_pages == 2
        assert [s.title for s in template.sections] == ["Intro", "Empty"]
        assert template.sections[1].content == ""

    def test_get_is_cached(self, store):
        assert store.get("basic") is store.get("basic")

    def test_unknown_template(self, store):
        with pytest.raises(TemplateNotFound) as info:
            store.get("nonexistent")
        assert info.value.status_code == 404

    def test_path_traversal_is_not_found(self, store):
        with pytest.raises(TemplateNotFound):
            store.get("../basic")

    def test_invalid_json(self, store):
        with pytest.raises(TemplateMalformed) as info:
            store.get("broken")
        assert info.value.status_code == 500

    def test_missing_required_fields(self, store):
        with pytest.raises(TemplateMalformed) as info:
            store.get("headless")
        assert "name" in info.value.details

    def test_list_skips_malformed(self, store):
        assert store.list() == [{
            "id": "basic",
            "name": "Basic Report",
            "description": "A small template",
            "avgPages": 2,
        }]

    def test_exists(self, store):
        assert store.exists("basic")
        assert not store.exists("missing")

    def test_missing_directory(self, tmp_path):
        assert TemplateStore(tmp_path / "nowhere").list() == []


class TestReportTemplate:
    def test_section_must_have_title(self):
        with pytest.raises(TemplateMalformed):
            ReportTemplate.from_dict({"id": "x", "name": "X", "sections": [{"content": "c"}]})

    def test_sections_must_be_list(self):
        with pytest.raises(TemplateMalformed):
            ReportTemplate.from_dict({"id": "x", "name": "X", "sections": "nope"})

    def test_to_dict_round_trips_shape(self):
        data = {
            "id": "x", "name": "X", "description": "", "avgPages": 1,
            "sections": [{"title": "A", "content": "a"}], "placeholders": [],
        }
        assert ReportTemplate.from_dict(data).to_dict() == data


class TestShippedTemplates:
    def setup_method(self):
        self.store = TemplateStore()

    def test_all_builtins_load(self):
        for template_id in BUILTIN_TEMPLATES:
            template = self.store.get(template_id)
            assert template.id == template_id
            assert template.sections

    def test_catalogue(self):
        summaries = {t["id"]: t for t in self.store.list()}
        assert summaries["application_profile"]["avgPages"] == 12
        assert summaries["business_profile"]["avgPages"] == 7
        assert summaries["demand_profile"]["avgPages"] == 10
