"""
AI DocWriter — Streamlit Frontend

Five-step workflow: choose a domain, pick a report template, upload the
application inventory CSV, edit the generated sections, and export them
as PDF or DOCX.

Run with:  streamlit run frontend/app.py --server.port 8501
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root is on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

import streamlit as st

from agents.enhance import EnhancementContext, LLMContentEnhancer
from agents.errors import DocWriterError
from agents.export import (
    MEDIA_TYPES,
    DocumentExporter,
    ExportOptions,
    export_filename,
)
from agents.templates import TemplateStore
from config.settings import BRAND_COLOR, BRAND_NAME, LOGO_UPLOAD_DIR, is_llm_enabled
from orchestrator.master import MasterOrchestrator
from orchestrator.sessions import InMemorySessionStore

DOMAINS = [
    ("Lifecycle (Proj)", "Project lifecycle management and reporting for enterprise initiatives"),
    ("Lifecycle (ALM)", "Application lifecycle management for software development projects"),
    ("Lifecycle (APM)", "Application performance monitoring and optimization reporting"),
    ("Lifecycle (DT 2.0 Design)", "Digital twin design-phase reporting and documentation"),
    ("Lifecycle (DT 2.0 Deploy)", "Digital twin deployment and implementation reporting"),
]

STAKEHOLDERS = [
    "Executive Leadership",
    "Architecture Board",
    "Business Owners",
    "IT Operations",
    "Security & Compliance",
    "Finance",
]

STEPS = ["Domain", "Template", "Data Source", "Edit Reports", "Export"]

# ── Page config ──────────────────────────────────────────────────────
st.set_page_config(
    page_title=f"{BRAND_NAME}",
    page_icon="📝",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown(f"""
<style>
    .main-header {{
        text-align: center;
        padding: 24px 0;
    }}
    .main-header h1 {{
        font-size: 2.3rem;
        font-weight: 700;
        color: {BRAND_COLOR};
        margin: 0;
    }}
    .main-header p {{
        color: #8b949e;
        font-size: 1.05rem;
        margin-top: 8px;
    }}
    .step-indicator {{
        padding: 6px 14px;
        border-radius: 8px;
        margin: 4px 0;
        border-left: 3px solid {BRAND_COLOR};
    }}
</style>
""", unsafe_allow_html=True)


# ── Shared core objects (one per browser session) ────────────────────
def _init_state() -> None:
    defaults = {
        "step": 0,
        "domain": None,
        "template_id": None,
        "session_id": None,
        "failed": [],
        "templates": TemplateStore(),
        "sessions": InMemorySessionStore(),
        "exporter": DocumentExporter(),
        "enhancer": LLMContentEnhancer(),
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def _go(step: int) -> None:
    st.session_state["step"] = step
    st.rerun()


_init_state()
templates: TemplateStore = st.session_state["templates"]
sessions: InMemorySessionStore = st.session_state["sessions"]

# ── Sidebar — Progress ───────────────────────────────────────────────
with st.sidebar:
    st.markdown(f"**{BRAND_NAME}**")
    st.caption("Enterprise architecture report generation")
    st.markdown("---")
    for index, label in enumerate(STEPS):
        marker = "✅" if index < st.session_state["step"] else (
            "▶️" if index == st.session_state["step"] else "⬜"
        )
        st.markdown(
            f'<div class="step-indicator">{marker} {index + 1}. {label}</div>',
            unsafe_allow_html=True,
        )
    st.markdown("---")
    if is_llm_enabled():
        st.success("AI enhancement available", icon="✅")
    else:
        st.info("AI enhancement disabled", icon="ℹ️")
        st.caption("Set LLM_API_KEY (or the AZURE_OPENAI_* variables) to enable it.")
    if st.session_state["step"] > 0 and st.button("↩️ Start over", use_container_width=True):
        for key in ("domain", "template_id", "session_id"):
            st.session_state[key] = None
        st.session_state["failed"] = []
        _go(0)

st.markdown(f"""
<section class="main-header">
    <h1>📝 {BRAND_NAME}</h1>
    <p>Application inventory in • Architecture reports out</p>
</section>
""", unsafe_allow_html=True)

step = st.session_state["step"]

# ═══════════════════════════════════════════════════════════════════════
# STEP 1 — Domain
# ═══════════════════════════════════════════════════════════════════════
if step == 0:
    st.markdown("### Choose Your Domain")
    cols = st.columns(len(DOMAINS))
    for col, (name, description) in zip(cols, DOMAINS):
        with col:
            st.markdown(f"**{name}**")
            st.caption(description)
            if st.button("Select", key=f"domain_{name}", use_container_width=True):
                st.session_state["domain"] = name
                _go(1)

# ═══════════════════════════════════════════════════════════════════════
# STEP 2 — Template
# ═══════════════════════════════════════════════════════════════════════
elif step == 1:
    st.markdown("### Select Report Template")
    st.caption(f"Based on your domain: {st.session_state['domain']}")
    for summary in templates.list():
        with st.container(border=True):
            left, right = st.columns([4, 1])
            with left:
                st.markdown(f"**{summary['name']}**  ·  Avg. {summary['avgPages']} pages")
                st.caption(summary["description"])
            with right:
                if st.button("Use template", key=f"tpl_{summary['id']}", use_container_width=True):
                    st.session_state["template_id"] = summary["id"]
                    _go(2)

# ═══════════════════════════════════════════════════════════════════════
# STEP 3 — Data Source
# ═══════════════════════════════════════════════════════════════════════
elif step == 2:
    st.markdown("### Upload Application Data")
    uploaded_file = st.file_uploader("Application inventory CSV", type=["csv"])
    if uploaded_file is not None:
        st.success(f"✅ Uploaded: **{uploaded_file.name}** ({uploaded_file.size / 1024:.1f} KB)")
        if st.button("🚀 Generate Reports", type="primary", use_container_width=True):
            orchestrator = MasterOrchestrator(templates, sessions)
            try:
                with st.spinner("Generating reports..."):
                    result = orchestrator.run(uploaded_file.getvalue(), st.session_state["template_id"])
            except DocWriterError as exc:
                st.error(f"❌ {exc.message}")
            else:
                st.session_state["session_id"] = result.session_id
                st.session_state["failed"] = [item.as_dict() for item in result.failed]
                _go(3)

# ═══════════════════════════════════════════════════════════════════════
# STEP 4 — Edit Reports
# ═══════════════════════════════════════════════════════════════════════
elif step == 3:
    session_id = st.session_state["session_id"]
    reports = sessions.get(session_id)
    st.markdown(f"### Review & Edit ({len(reports)} report(s))")
    for item in st.session_state["failed"]:
        st.warning(f"Skipped {item['applicationName']}: {item['error']}")

    enhancer: LLMContentEnhancer = st.session_state["enhancer"]
    labels = {report.id: report.title for report in reports}
    report_id = st.selectbox("Report", list(labels), format_func=labels.get)
    report = sessions.get_report(session_id, report_id)

    title = st.text_input("Title", value=report.title, key=f"title_{report.id}")
    edited = []
    for index, section in enumerate(report.sections):
        with st.expander(section.title, expanded=index == 0):
            content = st.text_area(
                "Content", value=section.content, height=180,
                key=f"content_{report.id}_{index}",
            )
            edited.append({"title": section.title, "content": content})
            if enhancer.available:
                request = st.text_input(
                    "Ask AI to improve this section",
                    key=f"ai_{report.id}_{index}",
                    placeholder="e.g. make it more concise",
                )
                if st.button("✨ Enhance", key=f"ai_btn_{report.id}_{index}") and request:
                    context = EnhancementContext(
                        application_name=report.application_name,
                        organization_name=report.organization_name,
                        application_id=report.application_id,
                    )
                    try:
                        with st.spinner("Enhancing..."):
                            enhanced = enhancer.enhance(section.title, content, request, context)
                    except DocWriterError as exc:
                        st.error(f"❌ {exc.message}")
                    else:
                        sessions.update_report(
                            session_id, report.id,
                            lambda current, i=index: current.with_section_content(i, enhanced),
                        )
                        st.session_state.pop(f"content_{report.id}_{index}", None)
                        st.rerun()

    col_save, col_preview, col_next = st.columns(3)
    with col_save:
        if st.button("💾 Save changes", use_container_width=True):
            sessions.update_report(
                session_id, report.id,
                lambda current: current.with_edits(sections=edited, title=title),
            )
            st.success("Report updated successfully")
    with col_preview:
        show_preview = st.toggle("Preview HTML")
    with col_next:
        if st.button("➡️ Continue to export", type="primary", use_container_width=True):
            _go(4)
    if show_preview:
        st.html(sessions.get_report(session_id, report.id).html_content)

# ═══════════════════════════════════════════════════════════════════════
# STEP 5 — Export
# ═══════════════════════════════════════════════════════════════════════
else:
    session_id = st.session_state["session_id"]
    reports = sessions.get(session_id)
    exporter: DocumentExporter = st.session_state["exporter"]

    st.markdown("### 📥 Export Reports")
    fmt = st.radio("Format", ["pdf", "docx"], horizontal=True, format_func=str.upper)
    audience = st.multiselect("Stakeholder audience", STAKEHOLDERS)
    use_default_logo = st.checkbox("Use default logo")
    custom_logo = st.file_uploader("Custom logo", type=["png", "jpg", "jpeg", "gif"])
    instructions = st.text_area("Custom instructions", height=80)

    logo_path = None
    if custom_logo is not None:
        logo_path = LOGO_UPLOAD_DIR / f"streamlit_{Path(custom_logo.name).name}"
        logo_path.write_bytes(custom_logo.getvalue())

    options = ExportOptions(
        format=fmt,
        use_default_logo=use_default_logo,
        logo_path=logo_path,
        stakeholder_audience=audience,
        custom_instructions=instructions,
    )
    for report in reports:
        with st.container(border=True):
            st.markdown(f"**{report.title}**")
            try:
                data = exporter.export(report, options)
            except DocWriterError as exc:
                st.error(f"❌ {exc.message}")
                continue
            st.download_button(
                f"⬇️ Download {fmt.upper()}",
                data=data,
                file_name=export_filename(report, fmt),
                mime=MEDIA_TYPES[fmt],
                key=f"dl_{report.id}_{fmt}",
                use_container_width=True,
            )
    if st.button("⬅️ Back to editing"):
        _go(3)
