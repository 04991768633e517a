# src/tatboard/transformer/rows.py
from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import timezone, tzinfo
from typing import Any

from tatboard.dataloader.types import RowOutcome, SkipReason, TransformResult
from tatboard.normalizer.dates import minutes_between, normalize_date
from tatboard.schemas.columns import DATE_FIELDS, TEXT_FIELDS
from tatboard.schemas.models import ValidatedRecord

logger = logging.getLogger(__name__)

# (waiting, handling, turnaround) as (start field, end field)
_INTERVALS: dict[str, tuple[str, str]] = {
    "waiting_time": ("sent_date", "delivered_date"),
    "handling_time": ("delivered_date", "approved_date"),
    "total_turnaround": ("sent_date", "approved_date"),
}


def cell_text(value: Any) -> str:
    """
    @brief
    Coerce a cell value to stripped text.

    @details
    None and NaN become an empty string. Integral floats lose their trailing
    ".0" so numeric patient codes read back the way they were typed.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def transform_row(row: Mapping[str, Any], tz: tzinfo = timezone.utc) -> RowOutcome:
    """
    @brief
    Validate one raw row into a ValidatedRecord or a skip outcome.

    @details
    Row-level problems never raise: the first failing field decides the
    skip reason. Checks run in this order:
        (1) text fields present and non-empty
        (2) date fields parse
        (3) sent <= delivered <= approved (all three intervals non-negative)

    @params
        row : Mapping[str, Any]
            Raw row keyed by the report's column labels.
        tz : tzinfo
            Zone for naive timestamps.

    @returns
        RowOutcome carrying either the record or the skip reason.
    """
    values: dict[str, Any] = {}

    # (1) Text fields
    for name, column in TEXT_FIELDS.items():
        text = cell_text(row.get(column))
        if not text:
            return RowOutcome(reason=SkipReason.MISSING_FIELD, field=name)
        values[name] = text

    # (2) Date fields
    for name, column in DATE_FIELDS.items():
        raw = row.get(column)
        parsed = normalize_date(raw, tz)
        if parsed is None:
            reason = SkipReason.MISSING_FIELD if not cell_text(raw) else SkipReason.INVALID_DATE
            return RowOutcome(reason=reason, field=name)
        values[name] = parsed

    # (3) Durations double as ordering checks
    for name, (start, end) in _INTERVALS.items():
        minutes = minutes_between(values[start], values[end])
        if minutes is None:
            return RowOutcome(reason=SkipReason.INVALID_INTERVAL, field=name)
        values[name] = minutes

    return RowOutcome(record=ValidatedRecord(**values))


def transform_rows(rows: Iterable[Mapping[str, Any]], tz: tzinfo = timezone.utc) -> TransformResult:
    """
    @brief
    Fold every raw row through transform_row().

    @details
    Accepted records keep their source order; skipped rows are only counted.
    """
    records: list[ValidatedRecord] = []
    reasons: Counter[SkipReason] = Counter()

    for row in rows:
        outcome = transform_row(row, tz)
        if outcome.record is None:
            reasons[outcome.reason] += 1
            continue
        records.append(outcome.record)

    skipped = sum(reasons.values())
    if skipped:
        summary = ", ".join(f"{r.value}={n}" for r, n in reasons.items())
        logger.info("RowTransformer: skipped %d row(s) [%s]", skipped, summary)

    return TransformResult(records=tuple(records), skipped_count=skipped, skip_reasons=reasons)


__all__ = ["cell_text", "transform_row", "transform_rows"]
