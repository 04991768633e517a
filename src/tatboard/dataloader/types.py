# src/tatboard/dataloader/types.py
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tatboard.schemas.models import AgentMetrics, TeamMetrics, ValidatedRecord

RawRow = dict[str, Any]

UNEXPECTED_ERROR_KIND = "Unexpected"
UNEXPECTED_ERROR_MESSAGE = "حدث خطأ غير متوقع أثناء معالجة الملف."


class SkipReason(str, Enum):
    MISSING_FIELD = "missing_field"
    INVALID_DATE = "invalid_date"
    INVALID_INTERVAL = "invalid_interval"


@dataclass(frozen=True, slots=True)
class RowOutcome:
    """
    Result of validating one raw row: either a record or a skip reason.

    Fields:
        record: The validated record (None when skipped).
        reason: Why the row was skipped (None when accepted).
        field: Record field that caused the skip, if any.
    """

    record: ValidatedRecord | None = None
    reason: SkipReason | None = None
    field: str | None = None

    @property
    def skipped(self) -> bool:
        return self.record is None


@dataclass(frozen=True, slots=True)
class TransformResult:
    """
    Accepted records of one batch plus the skip tally.

    Fields:
        records: Validated records in source row order.
        skipped_count: Number of rows dropped by validation.
        skip_reasons: Skip count per SkipReason (diagnostics only).
    """

    records: tuple[ValidatedRecord, ...] = ()
    skipped_count: int = 0
    skip_reasons: Counter[SkipReason] = field(default_factory=Counter)

    @property
    def total_rows(self) -> int:
        return len(self.records) + self.skipped_count


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """
    Terminal artifact of one pipeline run.

    Exactly one of (success payload, error) is populated:
      - success: records, agents (descending by total_requests), team, skipped_count
      - failure: error (user-facing message) and error_kind (fatal error class name)
    """

    records: tuple[ValidatedRecord, ...] = ()
    agents: tuple[AgentMetrics, ...] = ()
    team: TeamMetrics | None = None
    skipped_count: int = 0
    total_rows: int = 0
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls,
        records: tuple[ValidatedRecord, ...],
        agents: tuple[AgentMetrics, ...],
        team: TeamMetrics,
        skipped_count: int,
    ) -> PipelineResult:
        return cls(
            records=tuple(records),
            agents=tuple(agents),
            team=team,
            skipped_count=skipped_count,
            total_rows=len(records) + skipped_count,
        )

    @classmethod
    def failure(cls, message: str, kind: str) -> PipelineResult:
        return cls(error=message, error_kind=kind)
