"""
Document export — PDF (ReportLab Platypus) and DOCX (python-docx)
renditions of a generated report.

Renderers implement `DocumentRenderer`; `DocumentExporter` picks one by
format, resolves the logo, and wraps library failures in ExportError.
Exports never mutate the report they are given.
"""

from __future__ import annotations

import io
import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from PIL import Image as PILImage, UnidentifiedImageError
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    HRFlowable,
    Image,
    KeepTogether,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor

from agents.errors import DocWriterError, ExportError, ValidationError
from agents.rendering import format_report_date
from agents.report import GeneratedReport
from config.settings import BRAND_COLOR, BRAND_NAME, DEFAULT_LOGO_PATH, REPORT_OWNER

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("pdf", "docx")
MEDIA_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
LOGO_MAX_SIZE = (200, 80)

_TAG = re.compile(r"<[^>]*>")
_BOLD = re.compile(r"\*\*(.*?)\*\*")
_NUMBERED = re.compile(r"^(\d+)\.\s*")
_BULLET = re.compile(r"^[•-]\s*")

# ── Color System ─────────────────────────────────────────────────────
PRIMARY_TEXT = colors.HexColor("#1e40af")
BODY_TEXT = colors.HexColor("#333333")
MUTED_TEXT = colors.HexColor("#64748b")
RULE_COLOR = colors.HexColor("#e2e8f0")
PANEL_BG = colors.HexColor("#f8fafc")
AUDIENCE_BG = colors.HexColor("#eff6ff")

try:
    BRAND_RGB = colors.HexColor(BRAND_COLOR)
except ValueError:
    BRAND_RGB = colors.HexColor("#2563eb")


@dataclass
class ExportOptions:
    """Per-export formatting choices."""
    format: str = "pdf"
    use_default_logo: bool = False
    logo_path: Optional[Path] = None
    stakeholder_audience: List[str] = field(default_factory=list)
    custom_instructions: str = ""   # accepted, not rendered

    def __post_init__(self) -> None:
        self.format = (self.format or "pdf").strip().lower()
        if self.format not in EXPORT_FORMATS:
            raise ValidationError(
                f"Unsupported export format '{self.format}'",
                details=f"Use one of: {', '.join(EXPORT_FORMATS)}",
            )
        if self.logo_path is not None:
            self.logo_path = Path(self.logo_path)
        self.stakeholder_audience = [
            str(s).strip() for s in self.stakeholder_audience if str(s).strip()
        ]


@dataclass
class LogoImage:
    data: bytes
    width: int
    height: int


# ── Helpers ──────────────────────────────────────────────────────────

def format_stakeholder_audience(stakeholders: Sequence[str]) -> str:
    """Join audience names: ``A``, ``A and B``, ``A, B, and C``."""
    names = list(stakeholders or [])
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return " and ".join(names)
    return ", ".join(names[:-1]) + ", and " + names[-1]


def parse_stakeholder_audience(raw: Any) -> List[str]:
    """Accept a list, a JSON-encoded list, or a comma separated string."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, (list, tuple)):
        return [str(s).strip() for s in raw if str(s).strip()]
    text = str(raw)
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, list):
        return [str(s).strip() for s in parsed if str(s).strip()]
    return [s.strip() for s in text.split(",") if s.strip()]


def export_filename(report: GeneratedReport, fmt: str) -> str:
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', report.application_name)}_Report.{fmt}"


def load_logo(path: Path) -> LogoImage:
    """Shrink an image to fit inside 200×80 (never enlarged) as PNG."""
    with PILImage.open(path) as img:
        img.load()
        if img.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            img = img.convert("RGBA")
        img.thumbnail(LOGO_MAX_SIZE)
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return LogoImage(buffer.getvalue(), img.width, img.height)


def content_blocks(content: str) -> List[Tuple[str, str, str]]:
    """Split section text into ``(kind, marker, text)`` blocks.

    kind is ``numbered``, ``bullet`` or ``paragraph``; HTML tags are
    stripped and blank lines dropped.
    """
    blocks = []
    for line in _TAG.sub("", content or "").split("\n"):
        line = line.strip()
        if not line:
            continue
        numbered = _NUMBERED.match(line)
        if numbered:
            blocks.append(("numbered", f"{numbered.group(1)}.", line[numbered.end():]))
        elif _BULLET.match(line):
            blocks.append(("bullet", "•", _BULLET.sub("", line, count=1)))
        else:
            blocks.append(("paragraph", "", line))
    return blocks


def _rl_markup(text: str) -> str:
    escaped = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    return _BOLD.sub(r"<b>\1</b>", escaped)


# ── Renderers ────────────────────────────────────────────────────────

class DocumentRenderer(ABC):
    """Turns a report into the bytes of one document format."""

    media_type: str = "application/octet-stream"

    @abstractmethod
    def render(
        self,
        report: GeneratedReport,
        options: ExportOptions,
        logo: Optional[LogoImage] = None,
    ) -> bytes:
        ...


class StyleManager:
    """Typography for the PDF rendition."""

    def __init__(self) -> None:
        base = getSampleStyleSheet()
        self.organization = ParagraphStyle(
            "Organization", parent=base["Title"],
            fontName="Helvetica-Bold", fontSize=26, leading=32,
            textColor=BRAND_RGB, alignment=TA_CENTER, spaceAfter=6,
        )
        self.title = ParagraphStyle(
            "ReportTitle", parent=base["Heading1"],
            fontName="Helvetica-Bold", fontSize=20, leading=26,
            textColor=PRIMARY_TEXT, alignment=TA_CENTER, spaceAfter=6,
        )
        self.subtitle = ParagraphStyle(
            "Subtitle", parent=base["Normal"],
            fontName="Helvetica", fontSize=12, leading=16,
            textColor=MUTED_TEXT, alignment=TA_CENTER,
        )
        self.h2 = ParagraphStyle(
            "SectionTitle", parent=base["Heading2"],
            fontName="Helvetica-Bold", fontSize=15, leading=20,
            textColor=PRIMARY_TEXT, spaceBefore=18, spaceAfter=4,
        )
        self.h3 = ParagraphStyle(
            "PanelTitle", parent=base["Heading3"],
            fontName="Helvetica-Bold", fontSize=12, leading=16,
            textColor=BODY_TEXT, spaceAfter=4,
        )
        self.body = ParagraphStyle(
            "Body", parent=base["Normal"],
            fontName="Helvetica", fontSize=11, leading=16,
            textColor=BODY_TEXT, spaceAfter=6, alignment=TA_LEFT,
        )
        self.bullet = ParagraphStyle(
            "Bullet", parent=self.body, leftIndent=18, bulletIndent=6,
        )
        self.footer = ParagraphStyle(
            "Footer", parent=base["Normal"],
            fontName="Helvetica", fontSize=9, leading=12,
            textColor=MUTED_TEXT, alignment=TA_CENTER,
        )


class PdfRenderer(DocumentRenderer):
    """A4 PDF via ReportLab, margins 20 mm top/bottom and 15 mm sides."""

    media_type = MEDIA_TYPES["pdf"]

    def __init__(self) -> None:
        self.sty = StyleManager()

    def render(self, report, options, logo=None) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            leftMargin=15 * mm,
            rightMargin=15 * mm,
            title=report.title,
            author=BRAND_NAME,
            invariant=1,
        )
        audience = format_stakeholder_audience(options.stakeholder_audience)
        today = format_report_date()

        story: List[Any] = []
        self._build_header(story, report, logo)
        if audience:
            self._build_audience(story, audience, doc.width)
        self._build_metadata(story, report, today, doc.width)
        for section in report.sections:
            self._build_section(story, section)

        story.append(Spacer(1, 30))
        story.append(HRFlowable(width="100%", thickness=0.5, color=RULE_COLOR))
        story.append(Spacer(1, 8))
        story.append(Paragraph(
            _rl_markup(f"This report was generated on {today} by {BRAND_NAME}"),
            self.sty.footer,
        ))
        if audience:
            story.append(Paragraph(
                _rl_markup(f"Stakeholder Audience: {audience}"), self.sty.footer
            ))

        doc.build(story, onFirstPage=self._draw_page, onLaterPages=self._draw_page)
        return buffer.getvalue()

    # ── section builders ─────────────────────────────────────────────
    def _build_header(self, story, report, logo) -> None:
        if logo is not None:
            # 96 dpi pixels → points
            image = Image(
                io.BytesIO(logo.data),
                width=logo.width * 0.75,
                height=logo.height * 0.75,
            )
            image.hAlign = "CENTER"
            story.append(image)
            story.append(Spacer(1, 12))
        story.append(Paragraph(_rl_markup(report.organization_name), self.sty.organization))
        story.append(Paragraph(_rl_markup(report.title), self.sty.title))
        story.append(Paragraph(
            _rl_markup(f"Application Owner: {report.application_id}"), self.sty.subtitle
        ))
        story.append(Paragraph(
            _rl_markup(f"Report Owner: {REPORT_OWNER}"), self.sty.subtitle
        ))
        story.append(Spacer(1, 10))
        story.append(HRFlowable(width="100%", thickness=2, color=BRAND_RGB))
        story.append(Spacer(1, 16))

    def _build_audience(self, story, audience: str, width: float) -> None:
        panel = Table(
            [[Paragraph("Stakeholder Audience", self.sty.h3)],
             [Paragraph(_rl_markup(audience), self.sty.body)]],
            colWidths=[width],
        )
        panel.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, -1), AUDIENCE_BG),
            ("LINEBEFORE", (0, 0), (0, -1), 3, BRAND_RGB),
            ("LEFTPADDING", (0, 0), (-1, -1), 12),
            ("TOPPADDING", (0, 0), (-1, -1), 6),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ]))
        story.append(panel)
        story.append(Spacer(1, 16))

    def _build_metadata(self, story, report, today: str, width: float) -> None:
        rows = [
            ("Application Name:", report.application_name),
            ("Organization:", report.organization_name),
            ("Generated Date:", today),
            ("Template:", report.template_id),
        ]
        data = [
            [Paragraph(f"<b>{label}</b>", self.sty.body),
             Paragraph(_rl_markup(value), self.sty.body)]
            for label, value in rows
        ]
        table = Table(data, colWidths=[width * 0.3, width * 0.7])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, -1), PANEL_BG),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#d1d5db")),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("PADDING", (0, 0), (-1, -1), 6),
        ]))
        story.append(Paragraph("Report Information", self.sty.h3))
        story.append(table)
        story.append(Spacer(1, 8))

    def _build_section(self, story, section) -> None:
        heading = [
            Paragraph(_rl_markup(section.title), self.sty.h2),
            HRFlowable(width="100%", thickness=1, color=RULE_COLOR, spaceAfter=8),
        ]
        body = []
        for kind, marker, text in content_blocks(section.content):
            if kind == "paragraph":
                body.append(Paragraph(_rl_markup(text), self.sty.body))
            else:
                body.append(Paragraph(_rl_markup(text), self.sty.bullet, bulletText=marker))
        # Keep a heading with at least its first paragraph.
        story.append(KeepTogether(heading + body[:1]))
        story.extend(body[1:])

    def _draw_page(self, canvas, doc) -> None:
        canvas.saveState()
        width, height = doc.pagesize
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(MUTED_TEXT)
        canvas.drawString(doc.leftMargin, height - 12 * mm, BRAND_NAME)
        canvas.drawRightString(width - doc.rightMargin, height - 12 * mm, f"{REPORT_OWNER} Report")
        canvas.drawCentredString(width / 2, 10 * mm, f"Page {doc.page}")
        canvas.restoreState()


class DocxRenderer(DocumentRenderer):
    """Word document via python-docx."""

    media_type = MEDIA_TYPES["docx"]

    def render(self, report, options, logo=None) -> bytes:
        doc = Document()
        audience = format_stakeholder_audience(options.stakeholder_audience)
        today = format_report_date()

        if logo is not None:
            para = doc.add_paragraph()
            para.alignment = WD_ALIGN_PARAGRAPH.CENTER
            para.add_run().add_picture(io.BytesIO(logo.data), width=Inches(logo.width / 96))

        heading = doc.add_heading(report.organization_name, level=0)
        heading.alignment = WD_ALIGN_PARAGRAPH.CENTER
        heading = doc.add_heading(report.title, level=1)
        heading.alignment = WD_ALIGN_PARAGRAPH.CENTER

        if audience:
            doc.add_heading("Stakeholder Audience", level=2)
            doc.add_paragraph(audience)

        for section in report.sections:
            doc.add_heading(section.title, level=2)
            for kind, marker, text in content_blocks(section.content):
                if kind == "bullet":
                    para = doc.add_paragraph(style="List Bullet")
                else:
                    para = doc.add_paragraph()
                    if kind == "numbered":
                        para.add_run(f"{marker} ")
                self._add_runs(para, text)

        footer = doc.add_paragraph(f"This report was generated on {today} by {BRAND_NAME}")
        footer.alignment = WD_ALIGN_PARAGRAPH.CENTER
        self._style_footer(footer)
        if audience:
            footer = doc.add_paragraph(f"Stakeholder Audience: {audience}")
            footer.alignment = WD_ALIGN_PARAGRAPH.CENTER
            self._style_footer(footer)

        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()

    @staticmethod
    def _add_runs(para, text: str) -> None:
        """Add text to a paragraph, turning ``**x**`` into bold runs."""
        for index, chunk in enumerate(_BOLD.split(text)):
            if chunk:
                para.add_run(chunk).bold = index % 2 == 1

    @staticmethod
    def _style_footer(para) -> None:
        for run in para.runs:
            run.font.size = Pt(9)
            run.font.color.rgb = RGBColor(0x6B, 0x72, 0x80)


# ── Exporter ─────────────────────────────────────────────────────────

class DocumentExporter:
    """Dispatch an export to the renderer for the requested format."""

    def __init__(
        self,
        renderers: Optional[Dict[str, DocumentRenderer]] = None,
        default_logo_path: Optional[Path] = None,
    ) -> None:
        self.renderers = renderers or {"pdf": PdfRenderer(), "docx": DocxRenderer()}
        self.default_logo_path = Path(default_logo_path or DEFAULT_LOGO_PATH)

    def export(self, report: GeneratedReport, options: ExportOptions) -> bytes:
        renderer = self.renderers.get(options.format)
        if renderer is None:
            raise ValidationError(f"Unsupported export format '{options.format}'")

        logo = self.resolve_logo(options)
        logger.info(
            "Exporting %s for report %s (logo=%s, audience=%d)",
            options.format.upper(), report.id, logo is not None,
            len(options.stakeholder_audience),
        )
        try:
            return renderer.render(report, options, logo=logo)
        except DocWriterError:
            raise
        except Exception as exc:
            logger.exception("Export of %s failed", report.id)
            raise ExportError("Failed to export document", details=str(exc)) from exc

    def resolve_logo(self, options: ExportOptions) -> Optional[LogoImage]:
        """Uploaded logo first, then the default one; unreadable images are skipped."""
        path = None
        if options.logo_path is not None and options.logo_path.is_file():
            path = options.logo_path
        elif options.use_default_logo and self.default_logo_path.is_file():
            path = self.default_logo_path
        if path is None:
            return None
        try:
            return load_logo(path)
        except (OSError, UnidentifiedImageError, ValueError) as exc:
            logger.warning("Failed to process logo %s: %s", path.name, exc)
            return None
