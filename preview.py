
import sys
import os
from pathlib import Path

# Ensure project root is in path
sys.path.insert(0, os.getcwd())

from agents.export import DocumentExporter, ExportOptions, export_filename
from agents.templates import TemplateStore
from orchestrator.master import MasterOrchestrator
from orchestrator.sessions import InMemorySessionStore


def main(template_id: str = "application_profile"):
    print("🚀 Starting Preview Generation...")

    # 1. Setup paths
    sample_csv = Path("tests/sample_applications.csv")
    if not sample_csv.exists():
        print(f"❌ Sample data not found at {sample_csv}")
        return

    output_dir = Path("preview_output")
    output_dir.mkdir(exist_ok=True)

    # 2. Run Pipeline
    orchestrator = MasterOrchestrator(TemplateStore(), InMemorySessionStore())
    result = orchestrator.run(sample_csv, template_id)
    print(f"Session {result.session_id}: {len(result.reports)} report(s), "
          f"{len(result.failed)} failed")

    # 3. Export every report in both formats
    exporter = DocumentExporter()
    for report in result.reports:
        for fmt in ("pdf", "docx"):
            options = ExportOptions(
                format=fmt,
                use_default_logo=True,
                stakeholder_audience=["Executive Leadership", "Architecture Board"],
            )
            path = output_dir / export_filename(report, fmt)
            path.write_bytes(exporter.export(report, options))
            print(f"✅ {path}")

    for item in result.failed:
        print(f"❌ {item.application_name}: {item.error}")


if __name__ == "__main__":
    main(*sys.argv[1:2])
