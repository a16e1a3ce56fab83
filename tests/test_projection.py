"""Tests for response-mode projection of findings."""

import pytest

from conftest import flat_finding, nested_finding
from core.models import ResponseMode
from core.projection import project_items, project_record
from core.schema import SchemaVersion


class TestDetailedMode:
    def test_returns_records_unchanged(self) -> None:
        records = [nested_finding("f-1"), nested_finding("f-2")]

        projected = project_items(records, ResponseMode.DETAILED)

        assert projected == records
        assert projected[0] is records[0]


class TestSummaryMode:
    def test_nested_record_maps_to_fixed_summary(self) -> None:
        record = nested_finding(
            "f-1",
            severity="critical",
            title="Broken access control",
            location={"file_path": "app/views.py", "line_number": 42, "method_name": "get"},
            remediation="check ownership",
        )

        assert project_record(record) == {
            "id": "f-1",
            "title": "Broken access control",
            "severity": "critical",
            "status": "open",
            "created_at": "2025-01-02T03:04:05Z",
            "location": {"file_path": "app/views.py", "line": 42},
        }

    def test_flat_record_maps_to_same_summary_shape(self) -> None:
        record = flat_finding("f-9", location={"file_path": "main.go", "line": 7})

        summary = project_record(record, version=SchemaVersion.V1)

        assert summary == {
            "id": "f-9",
            "title": "Finding f-9",
            "severity": "medium",
            "status": "open",
            "created_at": "2024-06-01T00:00:00Z",
            "location": {"file_path": "main.go", "line": 7},
        }

    @pytest.mark.parametrize(
        "record, version",
        [
            (nested_finding("f-1"), SchemaVersion.V2),
            (flat_finding("f-1"), SchemaVersion.V1),
        ],
    )
    def test_omits_location_when_record_has_none(self, record, version) -> None:
        summary = project_record(record, version=version)

        assert "location" not in summary

    def test_is_the_default_mode(self) -> None:
        [summary] = project_items([nested_finding("f-1")])

        assert "details" not in summary
        assert summary["id"] == "f-1"

    def test_passes_non_object_items_through(self) -> None:
        assert project_items(["odd"], ResponseMode.SUMMARY) == ["odd"]


class TestFieldSelection:
    def test_unknown_fields_are_dropped(self) -> None:
        [selected] = project_items(
            [nested_finding("f-1", severity="low")],
            ResponseMode.SUMMARY,
            fields=["id", "severity", "nonexistent_field"],
        )

        assert selected == {"id": "f-1", "severity": "low"}

    def test_resolves_summary_then_record_then_details(self) -> None:
        record = nested_finding("f-1", remediation="use parameterized queries")
        record["user_status"] = "accepted"

        selected = project_record(record, fields=["remediation", "user_status", "title"])

        assert list(selected) == ["remediation", "user_status", "title"]
        assert selected == {
            "remediation": "use parameterized queries",
            "user_status": "accepted",
            "title": "SQL Injection",
        }

    def test_summary_value_wins_over_raw_record(self) -> None:
        record = flat_finding("f-1", location={"file_path": "a.py", "line": 3})

        selected = project_record(record, fields=["location"], version=SchemaVersion.V1)

        assert selected == {"location": {"file_path": "a.py", "line": 3}}

    def test_empty_field_list_means_full_summary(self) -> None:
        record = nested_finding("f-1")

        assert project_record(record, fields=[]) == project_record(record)


def test_count_mode_is_never_projected() -> None:
    with pytest.raises(ValueError):
        project_items([nested_finding("f-1")], ResponseMode.COUNT)
