"""
Test: DocumentExporter — PDF and DOCX renditions, logo handling,
stakeholder formatting and error wrapping.
"""

import io
import json
import sys
from pathlib import Path

import pytest
from docx import Document
from PIL import Image

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from agents.errors import ExportError, ValidationError
from agents.export import (
    DocumentExporter,
    DocumentRenderer,
    ExportOptions,
    content_blocks,
    export_filename,
    format_stakeholder_audience,
    load_logo,
    parse_stakeholder_audience,
)
from agents.report import GeneratedReport, ReportSection


@pytest.fixture
def report():
    report = GeneratedReport(
        id="report_APP-001_abcd1234",
        title="Customer Hub - Application Profile Report",
        application_name="Customer Hub",
        organization_name="Contoso",
        sections=[
            ReportSection("Executive Summary", "Customer Hub is **critical**.\nSecond line"),
            ReportSection("Dependencies", "1. CRM (REST)\n2. Billing (SOAP)"),
            ReportSection("Notes", "- first\n• second\n<i>tagged</i>"),
        ],
        metadata={"templateId": "application_profile", "applicationId": "APP-001"},
    )
    report.html_content = report.render_html()
    return report


@pytest.fixture
def logo_file(tmp_path):
    path = tmp_path / "logo.png"
    Image.new("RGB", (800, 200), (37, 99, 235)).save(path)
    return path


def _docx_headings(data: bytes):
    doc = Document(io.BytesIO(data))
    return [
        p.text for p in doc.paragraphs
        if p.style.name == "Title" or p.style.name.startswith("Heading")
    ]


class TestStakeholderFormatting:
    @pytest.mark.parametrize("names, expected", [
        ([], ""),
        (["A"], "A"),
        (["A", "B"], "A and B"),
        (["A", "B", "C"], "A, B, and C"),
    ])
    def test_format(self, names, expected):
        assert format_stakeholder_audience(names) == expected

    def test_input_not_mutated(self):
        names = ["A", "B", "C"]
        format_stakeholder_audience(names)
        assert names == ["A", "B", "C"]

    @pytest.mark.parametrize("raw, expected", [
        (None, []),
        ("", []),
        (json.dumps(["Board", "Finance"]), ["Board", "Finance"]),
        ("Board, Finance ,", ["Board", "Finance"]),
        (["Board", " "], ["Board"]),
    ])
    def test_parse(self, raw, expected):
        assert parse_stakeholder_audience(raw) == expected


class TestExportOptions:
    def test_unsupported_format(self):
        with pytest.raises(ValidationError):
            ExportOptions(format="pptx")

    def test_format_normalized(self):
        assert ExportOptions(format=" DOCX ").format == "docx"


class TestHelpers:
    def test_content_blocks(self):
        blocks = content_blocks("Intro\n\n1. One\n- dash\n• dot\n<b>tag</b>")
        assert blocks == [
            ("paragraph", "", "Intro"),
            ("numbered", "1.", "One"),
            ("bullet", "•", "dash"),
            ("bullet", "•", "dot"),
            ("paragraph", "", "tag"),
        ]

    def test_export_filename(self, report):
        assert export_filename(report, "pdf") == "Customer_Hub_Report.pdf"

    def test_logo_is_shrunk_to_fit(self, logo_file):
        logo = load_logo(logo_file)
        assert (logo.width, logo.height) == (200, 50)
        assert Image.open(io.BytesIO(logo.data)).format == "PNG"

    def test_small_logo_not_enlarged(self, tmp_path):
        path = tmp_path / "small.png"
        Image.new("RGBA", (40, 20)).save(path)
        logo = load_logo(path)
        assert (logo.width, logo.height) == (40, 20)


class TestDocumentExporter:
    def setup_method(self):
        self.exporter = DocumentExporter()

    def test_pdf(self, report):
        data = self.exporter.export(report, ExportOptions(format="pdf"))
        assert data.startswith(b"%PDF")

    def test_pdf_is_reproducible(self, report):
        options = ExportOptions(format="pdf", stakeholder_audience=["Board"])
        assert self.exporter.export(report, options) == self.exporter.export(report, options)

    def test_pdf_with_logo_and_audience(self, report, logo_file):
        options = ExportOptions(
            format="pdf", logo_path=logo_file, stakeholder_audience=["A", "B"]
        )
        assert self.exporter.export(report, options).startswith(b"%PDF")

    def test_docx_structure(self, report):
        options = ExportOptions(format="docx", stakeholder_audience=["A", "B", "C"])
        data = self.exporter.export(report, options)
        doc = Document(io.BytesIO(data))
        texts = [p.text for p in doc.paragraphs]

        assert _docx_headings(data) == [
            "Contoso",
            "Customer Hub - Application Profile Report",
            "Stakeholder Audience",
            "Executive Summary",
            "Dependencies",
            "Notes",
        ]
        assert "A, B, and C" in texts
        assert "1. CRM (REST)" in texts
        assert "tagged" in texts
        assert "Stakeholder Audience: A, B, and C" in texts
        bold = [r.text for p in doc.paragraphs for r in p.runs if r.bold]
        assert "critical" in bold

    def test_docx_same_structure_each_time(self, report):
        options = ExportOptions(format="docx")
        first = self.exporter.export(report, options)
        second = self.exporter.export(report, options)
        assert _docx_headings(first) == _docx_headings(second)

    def test_docx_with_logo(self, report, logo_file):
        data = self.exporter.export(report, ExportOptions(format="docx", logo_path=logo_file))
        assert len(Document(io.BytesIO(data)).inline_shapes) == 1

    def test_export_does_not_mutate_report(self, report):
        before = [s.to_dict() for s in report.sections]
        self.exporter.export(report, ExportOptions(format="docx"))
        assert [s.to_dict() for s in report.sections] == before

    def test_uploaded_logo_wins(self, logo_file, tmp_path):
        default = tmp_path / "default.png"
        Image.new("RGB", (10, 10)).save(default)
        exporter = DocumentExporter(default_logo_path=default)
        logo = exporter.resolve_logo(
            ExportOptions(logo_path=logo_file, use_default_logo=True)
        )
        assert logo.width == 200

    def test_default_logo(self, tmp_path):
        default = tmp_path / "default.png"
        Image.new("RGB", (10, 10)).save(default)
        exporter = DocumentExporter(default_logo_path=default)
        assert exporter.resolve_logo(ExportOptions(use_default_logo=True)).width == 10
        assert exporter.resolve_logo(ExportOptions()) is None

    def test_unreadable_logo_is_skipped(self, report, tmp_path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not an image")
        options = ExportOptions(format="pdf", logo_path=bad)
        assert self.exporter.resolve_logo(options) is None
        assert self.exporter.export(report, options).startswith(b"%PDF")

    def test_renderer_failure_becomes_export_error(self, report):
        class BrokenRenderer(DocumentRenderer):
            def render(self, report, options, logo=None):
                raise RuntimeError("renderer exploded")

        exporter = DocumentExporter(renderers={"pdf": BrokenRenderer()})
        with pytest.raises(ExportError) as info:
            exporter.export(report, ExportOptions(format="pdf"))
        assert info.value.details == "renderer exploded"
        assert info.value.status_code == 500

    def test_missing_renderer(self, report):
        exporter = DocumentExporter(renderers={"pdf": DocumentExporter().renderers["pdf"]})
        with pytest.raises(ValidationError):
            exporter.export(report, ExportOptions(format="docx"))
