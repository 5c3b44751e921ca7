from .ingestion import ApplicationRecord, IngestionAgent
from .field_mapper import FieldMap, build_field_map
from .templates import ReportTemplate, TemplateStore
from .report import GeneratedReport, ReportAssembler, ReportSection
from .export import DocumentExporter, ExportOptions

__all__ = [
    "ApplicationRecord",
    "IngestionAgent",
    "FieldMap",
    "build_field_map",
    "ReportTemplate",
    "TemplateStore",
    "GeneratedReport",
    "ReportAssembler",
    "ReportSection",
    "DocumentExporter",
    "ExportOptions",
]
