"""
Test: IngestionAgent — Verify row filtering, column handling and
parse failures for application inventory CSVs.
"""

import io
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from agents.errors import IngestError
from agents.ingestion import ApplicationRecord, IngestionAgent

SAMPLE_CSV = Path(__file__).parent / "sample_applications.csv"


class TestIngestionAgent:
    def setup_method(self):
        self.agent = IngestionAgent()
        assert SAMPLE_CSV.exists(), f"Sample CSV not found at {SAMPLE_CSV}"

    def test_loads_csv(self):
        result = self.agent.run(SAMPLE_CSV)
        assert result.row_count == 3
        assert len(result.column_names) == 32

    def test_skips_nameless_rows_and_keeps_order(self):
        result = self.agent.run(SAMPLE_CSV)
        assert [r.application_name for r in result.records] == [
            "Customer Hub",
            "Partner Gateway",
        ]
        assert result.skipped_rows == 1

    def test_whitespace_name_is_skipped(self):
        data = b"application_name,application_id\n   ,APP-1\nBilling,APP-2\n"
        result = self.agent.run(data)
        assert [r.application_id for r in result.records] == ["APP-2"]
        assert result.skipped_rows == 1

    def test_values_are_strings_and_stripped(self):
        data = b"application_name,application_tco,license_units\n  Ledger  ,0012,\n"
        record = self.agent.run(data).records[0]
        assert record.application_name == "Ledger"
        assert record.application_tco == "0012"
        assert record.license_units == ""

    def test_missing_and_unknown_columns(self):
        data = b"application_name,unrelated\nLedger,ignored\n"
        record = self.agent.run(data).records[0]
        assert record.organization_name == ""
        assert not hasattr(record, "unrelated")

    def test_bom_prefixed_header(self):
        data = "\ufeffapplication_name,application_id\nLedger,APP-9\n".encode("utf-8")
        record = self.agent.run(data).records[0]
        assert record.application_id == "APP-9"

    def test_accepts_file_object(self):
        stream = io.BytesIO(b"application_name\nLedger\n")
        assert len(self.agent.run(stream).records) == 1

    def test_empty_input_yields_no_records(self):
        result = self.agent.run(b"")
        assert result.records == []
        assert self.agent.log.status == "success"

    def test_header_only_yields_no_records(self):
        result = self.agent.run(b"application_name,application_id\n")
        assert result.records == []
        assert result.row_count == 0

    def test_trailing_commas_do_not_shift_columns(self):
        data = (
            b"application_id,application_name,application_status\n"
            b"A1,Alpha,Active,\n"
            b"A2,Beta,Retired,\n"
        )
        records = self.agent.run(data).records
        assert [(r.application_id, r.application_name, r.application_status) for r in records] == [
            ("A1", "Alpha", "Active"),
            ("A2", "Beta", "Retired"),
        ]

    def test_overlong_row_is_truncated_to_header(self):
        data = (
            b"application_id,application_name\n"
            b"A1,Alpha\n"
            b"A2,Beta,extra,more\n"
            b"A3,Gamma\n"
        )
        records = self.agent.run(data).records
        assert [(r.application_id, r.application_name) for r in records] == [
            ("A1", "Alpha"),
            ("A2", "Beta"),
            ("A3", "Gamma"),
        ]

    def test_short_row_fills_missing_fields(self):
        data = b"application_id,application_name,application_status\nA1,Alpha\n"
        record = self.agent.run(data).records[0]
        assert record.application_name == "Alpha"
        assert record.application_status == ""

    def test_undecodable_bytes_raise(self):
        with pytest.raises(IngestError) as info:
            self.agent.run(b"application_name\n\xff\xfe\xfa\n")
        assert info.value.message == "CSV parsing failed"
        assert info.value.details
        assert info.value.status_code == 400
        assert self.agent.log.status == "error"

    def test_missing_path_raises(self, tmp_path):
        with pytest.raises(IngestError):
            self.agent.run(tmp_path / "absent.csv")

    def test_agent_log_metadata(self):
        self.agent.run(SAMPLE_CSV)
        log = self.agent.log.as_dict()
        assert log["agent"] == "IngestionAgent"
        assert log["metadata"] == {"accepted_rows": 2, "skipped_rows": 1}
        assert log["duration"] >= 0


class TestApplicationRecord:
    def test_from_row_defaults(self):
        record = ApplicationRecord.from_row({"application_name": "Ledger"})
        assert record.application_name == "Ledger"
        assert all(
            value == "" for key, value in record.as_dict().items()
            if key != "application_name"
        )

    def test_field_names_cover_all_columns(self):
        names = ApplicationRecord.field_names()
        assert len(names) == 32
        assert names[0] == "organization_name"
        assert "license_status" in names

    def test_dependency_slots(self):
        record = ApplicationRecord.from_row({
            "dependency_1": "DB", "interface_type_1": "SOAP",
            "dependency_3": "API", "interface_type_3": "REST",
        })
        assert record.dependency_slots() == [
            ("DB", "SOAP"), ("", ""), ("API", "REST"), ("", ""),
        ]
