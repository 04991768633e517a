from datetime import datetime, timezone

import pydantic
import pytest

from tatboard.schemas.models import (
    AgentMetrics,
    Config,
    PeakHour,
    SlaConfig,
    TeamMetrics,
    ValidatedRecord,
)

UTC = timezone.utc


def _record(**overrides) -> ValidatedRecord:
    data = dict(
        patient_code="P001",
        user_name="سارة",
        doctor_name="د. علي",
        sent_date=datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
        delivered_date=datetime(2024, 1, 1, 9, 5, tzinfo=UTC),
        approved_date=datetime(2024, 1, 1, 9, 20, tzinfo=UTC),
        waiting_time=5,
        handling_time=15,
        total_turnaround=20,
    )
    data.update(overrides)
    return ValidatedRecord(**data)


def test_validated_record_valid_and_frozen():
    r = _record()
    assert r.total_turnaround == r.waiting_time + r.handling_time
    with pytest.raises(pydantic.ValidationError):
        r.user_name = "other"  # type: ignore[misc]


@pytest.mark.parametrize(
    "overrides",
    [{"patient_code": ""}, {"waiting_time": -1}, {"unknown": 1}],
)
def test_validated_record_rejects_bad_fields(overrides):
    with pytest.raises(pydantic.ValidationError):
        _record(**overrides)


def test_metric_bounds_enforced():
    with pytest.raises(pydantic.ValidationError):
        AgentMetrics(user_name="a", total_requests=0, average_handling_time=1.0, handling_sla=0.0)
    with pytest.raises(pydantic.ValidationError):
        TeamMetrics(average_waiting_time=1.0, assignment_sla=100.5)
    with pytest.raises(pydantic.ValidationError):
        PeakHour(hour=24, count=1)


def test_config_defaults_match_business_constants():
    cfg = Config()
    assert cfg.sheet_name == "ag-grid"
    assert cfg.timezone == "UTC"
    assert cfg.sla == SlaConfig(handling_minutes=20, waiting_minutes=10, peak_hours_top=3)
    assert cfg.tzinfo().key == "UTC"
    assert "sla" in cfg.model_dump()


def test_config_rejects_unknown_timezone():
    with pytest.raises(pydantic.ValidationError):
        Config(timezone="Mars/Olympus")


def test_model_json_schemas_are_dicts():
    for model in (ValidatedRecord, AgentMetrics, TeamMetrics, Config):
        schema = model.model_json_schema()
        assert isinstance(schema, dict)
        assert "properties" in schema
