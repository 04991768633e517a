# src/tatboard/metrics/metrics.py
from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from typing import Any

from tatboard.dataloader.types import PipelineResult
from tatboard.errors import DataError
from tatboard.metrics.aggregator import hourly_counts


def collect_metrics(result: PipelineResult) -> dict[str, Any]:
    """
    @brief
    Builds a JSON-serializable dictionary describing one pipeline run.

    @details
    Failure runs carry only the error; successful runs carry counts, team
    metrics, the sorted agent list and the 24-hour sent histogram.
    Floats are rounded to 4 decimals for stable output.
    """
    if not isinstance(result, PipelineResult):
        raise DataError(
            f"Expected PipelineResult, got {type(result).__name__}",
            source="metrics.collect_metrics",
        )

    # (1) Failure → minimal report
    if not result.ok:
        metrics: dict[str, Any] = {
            "timestamp": _utc_now_iso(),
            "ok": False,
            "error": result.error,
            "error_kind": result.error_kind,
        }
        json.dumps(metrics, ensure_ascii=False)
        return metrics

    team = result.team
    if team is None:
        raise DataError(
            "Successful PipelineResult carries no team metrics",
            source="metrics.collect_metrics",
            suggested_action="Build success results with PipelineResult.success().",
        )

    # (2) Success → full report
    metrics = {
        "timestamp": _utc_now_iso(),
        "ok": True,
        "total_rows": int(result.total_rows),
        "valid_rows": len(result.records),
        "skipped_rows": int(result.skipped_count),
        "team": {
            "average_waiting_time": _f(team.average_waiting_time),
            "assignment_sla": _f(team.assignment_sla),
            "peak_hours": [{"hour": p.hour, "count": p.count} for p in team.peak_hours],
        },
        "agents": [
            {
                "user_name": a.user_name,
                "total_requests": a.total_requests,
                "average_handling_time": _f(a.average_handling_time),
                "handling_sla": _f(a.handling_sla),
            }
            for a in result.agents
        ],
        "hourly_sent": hourly_counts(result.records),
    }

    # (3) Numeric integrity and serializability
    _assert_no_nans(metrics)
    json.dumps(metrics, ensure_ascii=False)
    return metrics


# ----------------- internal -----------------


def _assert_no_nans(obj: Any) -> None:
    """
    @brief
    Validates that object contains no NaN or infinite values.

    @details
    Recursively traverses dicts, lists, and tuples. Raises DataError on detection.
    """
    if obj is None:
        raise DataError("None encountered in metrics", source="metrics.collect_metrics")
    if isinstance(obj, float) and (math.isnan(obj) or math.isinf(obj)):
        raise DataError("NaN/Inf encountered in metrics", source="metrics.collect_metrics")
    if isinstance(obj, dict):
        for v in obj.values():
            _assert_no_nans(v)
    elif isinstance(obj, (list | tuple)):
        for v in obj:
            _assert_no_nans(v)


def _utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with a Z suffix, seconds precision."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _f(x: float) -> float:
    return round(float(x), 4)


__all__ = ["collect_metrics"]
