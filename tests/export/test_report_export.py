# tests/export/test_report_export.py
import csv
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from tatboard.dataloader.types import PipelineResult
from tatboard.errors import DataError
from tatboard.export.report_export import (
    AGENT_COLUMNS,
    RECORD_COLUMNS,
    format_minutes,
    format_percentage,
    render_summary,
    skipped_notice,
    write_agents_csv,
    write_records_csv,
    write_summary,
)
from tatboard.metrics.aggregator import aggregate
from tatboard.schemas.models import TeamMetrics, ValidatedRecord

UTC = timezone.utc


def _rec(patient: str, user: str, waiting: int = 5, handling: int = 15) -> ValidatedRecord:
    sent = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
    return ValidatedRecord(
        patient_code=patient,
        user_name=user,
        doctor_name="د. علي",
        sent_date=sent,
        delivered_date=sent + timedelta(minutes=waiting),
        approved_date=sent + timedelta(minutes=waiting + handling),
        waiting_time=waiting,
        handling_time=handling,
        total_turnaround=waiting + handling,
    )


def _result(records: tuple[ValidatedRecord, ...], skipped: int = 0) -> PipelineResult:
    agents, team = aggregate(records)
    return PipelineResult.success(records, agents, team, skipped_count=skipped)


def _read_csv(path: Path) -> list[dict[str, str]]:
    raw = path.read_bytes()
    assert raw.startswith(b"\xef\xbb\xbf")  # BOM for spreadsheet apps
    with path.open(encoding="utf-8-sig", newline="") as f:
        return list(csv.DictReader(f))


# ------------------------------------------------------------------------------
# Formatting helpers
# ------------------------------------------------------------------------------
@pytest.mark.parametrize(
    "value, expected",
    [(0, "0.0 دقيقة"), (7.25, "7.2 دقيقة"), (12.0, "12.0 دقيقة"), (3.96, "4.0 دقيقة")],
)
def test_format_minutes(value, expected):
    assert format_minutes(value) == expected


@pytest.mark.parametrize("value, expected", [(100.0, "100.0%"), (66.6667, "66.7%"), (0, "0.0%")])
def test_format_percentage(value, expected):
    assert format_percentage(value) == expected


def test_skipped_notice_mentions_count():
    assert skipped_notice(3) == "تم تجاهل 3 صف بسبب بيانات ناقصة أو تواريخ غير صالحة."


# ------------------------------------------------------------------------------
# Summary
# ------------------------------------------------------------------------------
def test_render_summary_success():
    text = render_summary(_result((_rec("P1", "سارة"),)))

    assert "متوسط وقت الانتظار: 5.0 دقيقة" in text
    assert "نسبة الالتزام بتعيين الطلبات: 100.0%" in text
    assert "9:00 (1 طلب)" in text
    assert "سارة | 1 | 15.0 | 100.0%" in text
    assert "تم تجاهل" not in text


def test_render_summary_lists_agents_in_sorted_order():
    records = (_rec("P1", "a"), _rec("P2", "b"), _rec("P3", "b"))
    lines = render_summary(_result(records)).splitlines()
    agent_lines = [ln for ln in lines if ln.startswith(("a |", "b |"))]
    assert agent_lines[0].startswith("b | 2")
    assert agent_lines[1].startswith("a | 1")


def test_render_summary_shows_skipped_notice():
    text = render_summary(_result((_rec("P1", "سارة"),), skipped=2))
    assert skipped_notice(2) in text


def test_render_summary_without_peaks_says_not_enough_data():
    records = (_rec("P1", "سارة"),)
    agents, _ = aggregate(records)
    team = TeamMetrics(average_waiting_time=5.0, assignment_sla=100.0, peak_hours=())
    text = render_summary(PipelineResult.success(records, agents, team, skipped_count=0))
    assert "أوقات الذروة: لا توجد بيانات كافية" in text


def test_render_summary_failure_shows_error_only():
    result = PipelineResult.failure("لا توجد بيانات في ورقة العمل ag-grid.", "NoRowsError")
    text = render_summary(result)
    assert "لا توجد بيانات في ورقة العمل ag-grid." in text
    assert "متوسط وقت الانتظار" not in text


def test_write_summary(tmp_path: Path):
    out = write_summary(_result((_rec("P1", "سارة"),)), tmp_path / "nested" / "summary.txt")
    assert out.exists()
    assert "سارة" in out.read_text(encoding="utf-8")


# ------------------------------------------------------------------------------
# CSV exports
# ------------------------------------------------------------------------------
def test_write_records_csv(tmp_path: Path):
    records = (_rec("P1", "سارة"), _rec("P2", "نورة", waiting=1, handling=2))
    out = write_records_csv(records, tmp_path / "records.csv")

    rows = _read_csv(out)
    assert list(rows[0]) == list(RECORD_COLUMNS)
    assert [r["patient_code"] for r in rows] == ["P1", "P2"]
    assert rows[1]["user_name"] == "نورة"
    assert rows[0]["sent_date"] == "2024-01-01T09:00:00+00:00"
    assert rows[1]["total_turnaround"] == "3"
    assert list(tmp_path.glob("*.tmp")) == []


def test_write_agents_csv(tmp_path: Path):
    records = (_rec("P1", "a", handling=10), _rec("P2", "a", handling=30))
    agents, _ = aggregate(records)
    rows = _read_csv(write_agents_csv(agents, tmp_path / "agents.csv"))

    assert list(rows[0]) == list(AGENT_COLUMNS)
    assert rows == [
        {
            "user_name": "a",
            "total_requests": "2",
            "average_handling_time": "20.0000",
            "handling_sla": "50.0000",
        }
    ]


def test_write_records_csv_accepts_empty_sequence(tmp_path: Path):
    out = write_records_csv([], tmp_path / "records.csv")
    assert _read_csv(out) == []


def test_write_records_csv_rejects_foreign_items(tmp_path: Path):
    with pytest.raises(DataError):
        bad = [{"patient_code": "P1"}]
        write_records_csv(bad, tmp_path / "records.csv")  # type: ignore[arg-type]


def test_write_agents_csv_rejects_mapping(tmp_path: Path):
    with pytest.raises(DataError):
        write_agents_csv({"a": 1}, tmp_path / "agents.csv")  # type: ignore[arg-type]


def test_render_summary_rejects_success_without_team():
    with pytest.raises(DataError):
        render_summary(PipelineResult())
