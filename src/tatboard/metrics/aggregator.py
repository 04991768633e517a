# src/tatboard/metrics/aggregator.py
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from tatboard.errors import NoValidRowsError
from tatboard.schemas.models import (
    HANDLING_SLA_MINUTES,
    PEAK_HOURS_TOP,
    WAITING_SLA_MINUTES,
    AgentMetrics,
    PeakHour,
    SlaConfig,
    TeamMetrics,
    ValidatedRecord,
)

HOURS_PER_DAY = 24


@dataclass(slots=True)
class _AgentAccumulator:
    total: int = 0
    handling_sum: int = 0
    handling_within_sla: int = 0


def hourly_counts(records: Sequence[ValidatedRecord]) -> list[int]:
    """
    @brief
    Requests sent per hour of day.

    @details
    Returns a fixed 24-slot list indexed by `sent_date.hour` (in the zone the
    records were normalized to).
    """
    counts = [0] * HOURS_PER_DAY
    for r in records:
        counts[r.sent_date.hour] += 1
    return counts


def peak_hours(counts: Sequence[int], top: int = PEAK_HOURS_TOP) -> tuple[PeakHour, ...]:
    """
    @brief
    Busiest hours, descending by count.

    @details
    Stable sort, so equal counts keep ascending hour order. The first `top`
    buckets are taken and empty buckets are dropped afterwards, which can leave
    fewer than `top` entries.
    """
    ranked = sorted(range(len(counts)), key=lambda h: counts[h], reverse=True)
    return tuple(PeakHour(hour=h, count=counts[h]) for h in ranked[:top] if counts[h] > 0)


def aggregate(
    records: Sequence[ValidatedRecord], sla: SlaConfig | None = None
) -> tuple[tuple[AgentMetrics, ...], TeamMetrics]:
    """
    @brief
    Fold validated records into per-agent and team-wide metrics.

    @details
    (1) Per agent (first-seen order): request count, mean handling time and the
        share of requests handled within the handling SLA.
    (2) Team: mean waiting time and the share of requests assigned within the
        waiting SLA.
    (3) Peak hours from the hour-of-day histogram of sent dates.
    Agents are returned sorted descending by request count (stable on ties).

    @params
        records : Sequence[ValidatedRecord]
            Complete validated batch; must not be empty.
        sla : SlaConfig | None
            Thresholds; defaults to the fixed business constants.

    @returns
        (agents, team)

    @raises
        NoValidRowsError
            If `records` is empty.
    """
    if not records:
        raise NoValidRowsError(source="metrics.aggregate")

    handling_limit = sla.handling_minutes if sla else HANDLING_SLA_MINUTES
    waiting_limit = sla.waiting_minutes if sla else WAITING_SLA_MINUTES
    top = sla.peak_hours_top if sla else PEAK_HOURS_TOP

    # (1) Keyed accumulators per agent plus team-wide sums
    per_agent: dict[str, _AgentAccumulator] = {}
    waiting_sum = 0
    waiting_within_sla = 0
    for r in records:
        acc = per_agent.setdefault(r.user_name, _AgentAccumulator())
        acc.total += 1
        acc.handling_sum += r.handling_time
        if r.handling_time <= handling_limit:
            acc.handling_within_sla += 1

        waiting_sum += r.waiting_time
        if r.waiting_time <= waiting_limit:
            waiting_within_sla += 1

    # (2) Finalize agents
    agents = [
        AgentMetrics(
            user_name=name,
            total_requests=acc.total,
            average_handling_time=acc.handling_sum / acc.total,
            handling_sla=acc.handling_within_sla / acc.total * 100.0,
        )
        for name, acc in per_agent.items()
    ]
    agents.sort(key=lambda a: a.total_requests, reverse=True)

    # (3) Team metrics
    n = len(records)
    team = TeamMetrics(
        average_waiting_time=waiting_sum / n,
        assignment_sla=waiting_within_sla / n * 100.0,
        peak_hours=peak_hours(hourly_counts(records), top),
    )
    return tuple(agents), team


__all__ = ["aggregate", "hourly_counts", "peak_hours"]
