import json
from datetime import datetime, timedelta, timezone

import pytest

from tatboard.dataloader.types import PipelineResult
from tatboard.errors import DataError
from tatboard.metrics.aggregator import aggregate
from tatboard.metrics.metrics import _assert_no_nans, collect_metrics
from tatboard.schemas.models import ValidatedRecord

UTC = timezone.utc


def _rec(user: str, hour: int, waiting: int, handling: int) -> ValidatedRecord:
    sent = datetime(2024, 1, 1, hour, 0, tzinfo=UTC)
    return ValidatedRecord(
        patient_code=f"{user}-{hour}",
        user_name=user,
        doctor_name="د. منى",
        sent_date=sent,
        delivered_date=sent + timedelta(minutes=waiting),
        approved_date=sent + timedelta(minutes=waiting + handling),
        waiting_time=waiting,
        handling_time=handling,
        total_turnaround=waiting + handling,
    )


@pytest.fixture()
def success_result() -> PipelineResult:
    records = (_rec("a", 9, 5, 10), _rec("a", 9, 15, 30), _rec("b", 13, 1, 1))
    agents, team = aggregate(records)
    return PipelineResult.success(records, agents, team, skipped_count=2)


def test_collect_metrics_success(success_result):
    m = collect_metrics(success_result)

    assert m["ok"] is True
    assert m["total_rows"] == 5
    assert m["valid_rows"] == 3
    assert m["skipped_rows"] == 2
    assert m["team"]["average_waiting_time"] == pytest.approx(7.0)
    assert m["team"]["assignment_sla"] == pytest.approx(66.6667)
    assert m["team"]["peak_hours"] == [{"hour": 9, "count": 2}, {"hour": 13, "count": 1}]
    assert [a["user_name"] for a in m["agents"]] == ["a", "b"]
    assert m["agents"][0]["average_handling_time"] == pytest.approx(20.0)
    assert m["agents"][0]["handling_sla"] == pytest.approx(50.0)
    assert len(m["hourly_sent"]) == 24
    assert sum(m["hourly_sent"]) == 3
    assert m["timestamp"].endswith("Z")
    json.dumps(m, ensure_ascii=False)


def test_collect_metrics_failure():
    result = PipelineResult.failure("لا توجد بيانات في ورقة العمل ag-grid.", "NoRowsError")
    m = collect_metrics(result)
    assert m["ok"] is False
    assert m["error_kind"] == "NoRowsError"
    assert "ag-grid" in m["error"]
    assert "team" not in m


def test_collect_metrics_rejects_other_types():
    with pytest.raises(DataError):
        collect_metrics({"ok": True})  # type: ignore[arg-type]


@pytest.mark.parametrize("bad", [float("nan"), {"x": float("inf")}, [1.0, None]])
def test_assert_no_nans_detects_bad_values(bad):
    with pytest.raises(DataError):
        _assert_no_nans(bad)


def test_collect_metrics_rejects_success_without_team():
    with pytest.raises(DataError):
        collect_metrics(PipelineResult())
