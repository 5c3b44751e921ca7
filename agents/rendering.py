"""
HTML rendering for generated reports.

`render_report_html` is the one place the report's HTML snapshot is
built; both report generation and report editing call it so preview and
PDF output always agree.
"""

from __future__ import annotations

import html
from datetime import date
from typing import Iterable, Optional

from config.settings import BRAND_NAME, REPORT_OWNER

_STYLE = """\
        body {
            font-family: 'Arial', sans-serif;
            line-height: 1.6;
            margin: 0;
            padding: 40px;
            background-color: #ffffff;
            color: #333;
        }
        .header {
            text-align: center;
            margin-bottom: 40px;
            border-bottom: 3px solid #2563eb;
            padding-bottom: 20px;
        }
        .organization-name {
            color: #2563eb;
            font-size: 2.5rem;
            font-weight: bold;
            margin-bottom: 10px;
        }
        .report-title {
            font-size: 2rem;
            color: #1e40af;
            margin: 10px 0;
        }
        .subtitle {
            font-size: 1.2rem;
            color: #64748b;
            margin: 5px 0;
        }
        .section {
            margin: 30px 0;
            page-break-inside: avoid;
        }
        .section-title {
            font-size: 1.5rem;
            color: #1e40af;
            margin-bottom: 15px;
            padding-bottom: 8px;
            border-bottom: 2px solid #e2e8f0;
        }
        .section-content {
            margin-left: 10px;
            line-height: 1.8;
        }
        .footer {
            margin-top: 50px;
            text-align: center;
            color: #6b7280;
            font-size: 0.9rem;
            border-top: 1px solid #e5e7eb;
            padding-top: 20px;
        }
"""


def format_report_date(day: Optional[date] = None) -> str:
    """``October 18, 2026`` style date used in report footers."""
    day = day or date.today()
    return f"{day.strftime('%B')} {day.day}, {day.year}"


def _paragraphs(content: str) -> str:
    return "".join(
        f"<p>{html.escape(line)}</p>"
        for line in (content or "").split("\n")
        if line.strip()
    )


def render_report_html(
    organization_name: str,
    title: str,
    application_id: str,
    sections: Iterable,
    generated_on: Optional[date] = None,
) -> str:
    """Build the standalone HTML document for a report.

    `sections` may hold ReportSection objects or ``{title, content}`` dicts.
    """
    blocks = []
    for section in sections:
        if isinstance(section, dict):
            sec_title, content = section.get("title", ""), section.get("content", "")
        else:
            sec_title, content = section.title, section.content
        blocks.append(
            '        <div class="section">\n'
            f'            <h2 class="section-title">{html.escape(sec_title or "")}</h2>\n'
            '            <div class="section-content">\n'
            f"                {_paragraphs(content)}\n"
            "            </div>\n"
            "        </div>\n"
        )

    esc_title = html.escape(title or "")
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '    <meta charset="UTF-8">\n'
        '    <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"    <title>{esc_title}</title>\n"
        "    <style>\n"
        f"{_STYLE}"
        "    </style>\n"
        "</head>\n"
        "<body>\n"
        '    <div class="header">\n'
        f'        <div class="organization-name">{html.escape(organization_name or "")}</div>\n'
        f'        <h1 class="report-title">{esc_title}</h1>\n'
        f'        <div class="subtitle">Application Owner: {html.escape(application_id or "")}</div>\n'
        f'        <div class="subtitle">Report Owner: {html.escape(REPORT_OWNER)}</div>\n'
        "    </div>\n\n"
        f"{''.join(blocks)}\n"
        '    <div class="footer">\n'
        f"        <p>This report was generated on {format_report_date(generated_on)} "
        f"by {html.escape(BRAND_NAME)}</p>\n"
        "    </div>\n"
        "</body>\n"
        "</html>\n"
    )
