"""
IngestionAgent — Parse an uploaded application-inventory CSV into typed
ApplicationRecord rows, dropping rows without an application name.

Input:  pathlib.Path, raw bytes, or a binary file object
Output: IngestionResult dataclass
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Mapping, Union

import pandas as pd

from agents.base import BaseAgent
from agents.errors import IngestError

logger = logging.getLogger(__name__)

CsvSource = Union[str, Path, bytes, BinaryIO]


@dataclass(frozen=True)
class ApplicationRecord:
    """One inventoried application, as read from a CSV row."""
    organization_name: str = ""
    portal_type: str = ""
    application_owner: str = ""
    report_owner: str = ""
    application_id: str = ""
    application_name: str = ""
    application_description: str = ""
    application_status: str = ""
    application_category: str = ""
    application_tier: str = ""
    application_area: str = ""
    stream_leader: str = ""
    business_owner: str = ""
    application_location: str = ""
    dependency_1: str = ""
    interface_type_1: str = ""
    dependency_2: str = ""
    interface_type_2: str = ""
    dependency_3: str = ""
    interface_type_3: str = ""
    dependency_4: str = ""
    interface_type_4: str = ""
    application_tco: str = ""
    application_capex: str = ""
    application_opex: str = ""
    application_vendor: str = ""
    license_name: str = ""
    license_start_date: str = ""
    license_end_date: str = ""
    license_units: str = ""
    license_units_used: str = ""
    license_status: str = ""

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ApplicationRecord":
        """Build a record from a header-keyed row.

        Unknown columns are ignored and missing ones become "".
        """
        values = {}
        for name in cls.field_names():
            raw = row.get(name)
            values[name] = "" if raw is None else str(raw).strip()
        return cls(**values)

    def dependency_slots(self) -> List[tuple]:
        """(name, interface_type) for slots 1–4, in order."""
        return [
            (getattr(self, f"dependency_{i}"), getattr(self, f"interface_type_{i}"))
            for i in range(1, 5)
        ]

    def as_dict(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in self.field_names()}


@dataclass
class IngestionResult:
    """Structured output of the IngestionAgent."""
    records: List[ApplicationRecord] = field(default_factory=list)
    column_names: List[str] = field(default_factory=list)
    row_count: int = 0
    skipped_rows: int = 0


class IngestionAgent(BaseAgent):
    """Read a CSV and keep every row that names an application."""

    name = "IngestionAgent"

    def _execute(self, input_data: CsvSource) -> IngestionResult:
        frame = self._read(input_data)
        frame.columns = [str(col).strip() for col in frame.columns]
        frame = frame.fillna("")
        self._log(f"Loaded {len(frame):,} rows × {len(frame.columns)} columns")

        records: List[ApplicationRecord] = []
        skipped = 0
        for row in frame.to_dict(orient="records"):
            if not str(row.get("application_name", "")).strip():
                skipped += 1
                continue
            records.append(ApplicationRecord.from_row(row))

        if skipped:
            self._log(f"Skipped {skipped} row(s) without an application_name")
        self._record("accepted_rows", len(records))
        self._record("skipped_rows", skipped)

        return IngestionResult(
            records=records,
            column_names=list(frame.columns),
            row_count=len(frame),
            skipped_rows=skipped,
        )

    def _read(self, source: CsvSource) -> pd.DataFrame:
        data = self._load_bytes(source)
        options = dict(
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
            engine="python",
            index_col=False,
        )

        try:
            header = pd.read_csv(io.BytesIO(data), nrows=0, **options)
        except pd.errors.EmptyDataError:
            # No header at all: nothing to ingest.
            return pd.DataFrame()
        except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as exc:
            raise IngestError("CSV parsing failed", details=str(exc)) from exc
        width = len(header.columns)

        # Rows longer than the header (e.g. trailing commas) keep their
        # first `width` fields; the first column is never an index.
        try:
            return pd.read_csv(
                io.BytesIO(data),
                skip_blank_lines=True,
                on_bad_lines=lambda row: row[:width],
                **options,
            )
        except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as exc:
            raise IngestError("CSV parsing failed", details=str(exc)) from exc

    @staticmethod
    def _load_bytes(source: CsvSource) -> bytes:
        if isinstance(source, (bytes, bytearray)):
            return bytes(source)
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise IngestError(f"CSV not found: {path.name}")
            try:
                return path.read_bytes()
            except OSError as exc:
                raise IngestError("CSV could not be read", details=str(exc)) from exc
        content = source.read()
        return content.encode("utf-8") if isinstance(content, str) else content
