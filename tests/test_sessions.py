"""
Test: InMemorySessionStore — Isolation between sessions, lookups and
atomic report updates.
"""

import re
import sys
import threading
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from agents.errors import NotFoundError, ValidationError
from agents.report import GeneratedReport, ReportSection
from orchestrator.sessions import InMemorySessionStore, new_session_id


def _report(report_id: str, content: str = "text") -> GeneratedReport:
    report = GeneratedReport(
        id=report_id,
        title=f"{report_id} title",
        application_name="App",
        organization_name="Org",
        sections=[ReportSection("Intro", content)],
        metadata={"applicationId": report_id},
    )
    report.html_content = report.render_html()
    return report


class TestInMemorySessionStore:
    def setup_method(self):
        self.store = InMemorySessionStore()
        self.store.put("s1", [_report("r1"), _report("r2")])
        self.store.put("s2", [_report("r1")])

    def teardown_method(self):
        self.store.clear()

    def test_read_after_write(self):
        assert [r.id for r in self.store.get("s1")] == ["r1", "r2"]

    def test_unknown_session(self):
        with pytest.raises(NotFoundError) as info:
            self.store.get("missing")
        assert info.value.message == "Session not found"

    def test_unknown_report(self):
        with pytest.raises(NotFoundError) as info:
            self.store.get_report("s1", "r9")
        assert info.value.message == "Report not found"

    def test_unknown_session_on_update(self):
        with pytest.raises(NotFoundError):
            self.store.update_report("missing", "r1", lambda r: r)

    def test_sessions_are_isolated(self):
        self.store.update_report("s1", "r1", lambda r: r.with_edits(title="Edited"))
        assert self.store.get_report("s1", "r1").title == "Edited"
        assert self.store.get_report("s2", "r1").title == "r1 title"

    def test_get_returns_a_copy(self):
        reports = self.store.get("s1")
        reports.clear()
        assert len(self.store.get("s1")) == 2

    def test_update_is_visible_to_later_reads(self):
        updated = self.store.update_report(
            "s1", "r2", lambda r: r.with_section_content(0, "new")
        )
        assert updated.sections[0].content == "new"
        assert self.store.get_report("s1", "r2").sections[0].content == "new"
        assert "<p>new</p>" in self.store.get_report("s1", "r2").html_content

    def test_failed_mutation_leaves_report_untouched(self):
        with pytest.raises(ValidationError):
            self.store.update_report("s1", "r1", lambda r: r.with_section_content(5, "x"))
        assert self.store.get_report("s1", "r1").sections[0].content == "text"

    def test_concurrent_updates_keep_one_consistent_report(self):
        def worker(n):
            for _ in range(20):
                self.store.update_report(
                    "s1", "r1", lambda r, n=n: r.with_edits(title=f"writer {n}")
                )

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        reports = self.store.get("s1")
        assert [r.id for r in reports] == ["r1", "r2"]
        assert re.fullmatch(r"writer \d", reports[0].title)

    def test_clear(self):
        self.store.clear()
        assert len(self.store) == 0
        assert "s1" not in self.store


def test_session_id_format():
    assert re.fullmatch(r"session_\d+_[0-9a-f]{9}", new_session_id())
    assert new_session_id() != new_session_id()
