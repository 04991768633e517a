# src/tatboard/schemas/models.py
"""
@brief
Pydantic data models for the tatboard turnaround dashboard.

@details
Defines the canonical model types:
    - ValidatedRecord: one accepted service request with derived durations
    - AgentMetrics / PeakHour / TeamMetrics: aggregated service-level figures
    - Config: runtime configuration (from config.yaml), including nested sections

Domain models are frozen: once the pipeline has produced them they are never
mutated. They stay lightweight (field constraints only) so that
`.model_json_schema()` remains stable.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

HANDLING_SLA_MINUTES = 20
WAITING_SLA_MINUTES = 10
PEAK_HOURS_TOP = 3
DEFAULT_SHEET_NAME = "ag-grid"


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration and data contracts.

    @details
    Forbids unknown fields and preserves exact naming rules.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,
    }


class _FrozenModel(_StrictBaseModel):
    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "frozen": True,
    }


class ValidatedRecord(_FrozenModel):
    """
    @brief
    One service request that passed row validation.

    @details
    Timestamps are timezone-aware and expressed in the configured timezone.
    Durations are whole minutes and never negative.
    """

    patient_code: str = Field(..., min_length=1, description="Patient code")
    user_name: str = Field(..., min_length=1, description="Handling agent")
    doctor_name: str = Field(..., min_length=1, description="Referring doctor")
    sent_date: datetime = Field(..., description="Request sent")
    delivered_date: datetime = Field(..., description="Request delivered to the agent")
    approved_date: datetime = Field(..., description="Request approved")
    waiting_time: int = Field(..., ge=0, description="Minutes from sent to delivered")
    handling_time: int = Field(..., ge=0, description="Minutes from delivered to approved")
    total_turnaround: int = Field(..., ge=0, description="Minutes from sent to approved")


class AgentMetrics(_FrozenModel):
    user_name: str = Field(..., min_length=1)
    total_requests: int = Field(..., ge=1)
    average_handling_time: float = Field(..., ge=0.0, description="Mean handling minutes")
    handling_sla: float = Field(
        ..., ge=0.0, le=100.0, description="Percent of requests handled within the SLA"
    )


class PeakHour(_FrozenModel):
    hour: int = Field(..., ge=0, le=23)
    count: int = Field(..., ge=1)


class TeamMetrics(_FrozenModel):
    average_waiting_time: float = Field(..., ge=0.0, description="Mean waiting minutes")
    assignment_sla: float = Field(
        ..., ge=0.0, le=100.0, description="Percent of requests assigned within the SLA"
    )
    peak_hours: tuple[PeakHour, ...] = Field(
        default=(), description="Busiest sent hours, descending by count"
    )


# ------------------------------------------------------------
# Configuration
# ------------------------------------------------------------
class SlaConfig(_StrictBaseModel):
    """
    @brief
    Service-level thresholds.

    @details
    Defaults are the fixed business constants of the dashboard.
    """

    handling_minutes: int = Field(
        HANDLING_SLA_MINUTES, ge=0, description="Handling-time SLA threshold (minutes)"
    )
    waiting_minutes: int = Field(
        WAITING_SLA_MINUTES, ge=0, description="Waiting-time SLA threshold (minutes)"
    )
    peak_hours_top: int = Field(PEAK_HOURS_TOP, ge=1, le=24, description="Peak hours reported")


class IOPolicy(_StrictBaseModel):
    """
    @brief
    Controls runtime behavior for artifact writing.
    """

    write_artifacts: bool = Field(
        True, description="If False, only metrics.json is written."
    )
    write_plots: bool = Field(True, description="If False, PNG charts are not rendered.")


class VisualConfig(_StrictBaseModel):
    """
    @brief
    Visualization parameters for chart rendering.
    """

    width: float = Field(10.0, gt=0.0, description="Figure width in inches")
    height: float = Field(6.0, gt=0.0, description="Figure height in inches")
    dpi: int = Field(120, ge=10, description="Output figure DPI")


class Config(_StrictBaseModel):
    """
    @brief
    Full runtime configuration loaded from config.yaml.
    """

    sheet_name: str = Field(DEFAULT_SHEET_NAME, min_length=1, description="Required sheet")
    timezone: str = Field("UTC", description="IANA timezone name, e.g. 'Asia/Riyadh'")
    sla: SlaConfig = Field(default_factory=SlaConfig)
    output_dir: str | None = "data/output"
    io_policy: IOPolicy = Field(default_factory=IOPolicy)
    visual: VisualConfig = Field(default_factory=VisualConfig)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone: {value!r}") from e
        return value

    def tzinfo(self) -> ZoneInfo:
        """Resolved zone for naive timestamps and hour-of-day bucketing."""
        return ZoneInfo(self.timezone)


__all__ = [
    "AgentMetrics",
    "Config",
    "IOPolicy",
    "PeakHour",
    "SlaConfig",
    "TeamMetrics",
    "ValidatedRecord",
    "VisualConfig",
]
