# src/tatboard/export/report_export.py
from __future__ import annotations

import csv
import os
import tempfile
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from tatboard.dataloader.types import PipelineResult
from tatboard.errors import DataError, ExportError
from tatboard.metrics.logger import atomic_write_text
from tatboard.schemas.models import AgentMetrics, ValidatedRecord

RECORD_COLUMNS = (
    "patient_code",
    "user_name",
    "doctor_name",
    "sent_date",
    "delivered_date",
    "approved_date",
    "waiting_time",
    "handling_time",
    "total_turnaround",
)
AGENT_COLUMNS = ("user_name", "total_requests", "average_handling_time", "handling_sla")

# Dashboard labels
_TITLE = "لوحة متابعة زمن الإنجاز"
_AVG_WAITING = "متوسط وقت الانتظار"
_ASSIGNMENT_SLA = "نسبة الالتزام بتعيين الطلبات"
_PEAK_HOURS = "أوقات الذروة"
_NOT_ENOUGH_DATA = "لا توجد بيانات كافية"
_AGENTS_HEADER = (
    "اسم المستخدم",
    "إجمالي الطلبات",
    "متوسط وقت المعالجة (دقيقة)",
    "نسبة الالتزام بالمعالجة",
)


def format_minutes(value: float) -> str:
    return f"{value:.1f} دقيقة"


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"


def skipped_notice(count: int) -> str:
    return f"تم تجاهل {count} صف بسبب بيانات ناقصة أو تواريخ غير صالحة."


def render_summary(result: PipelineResult) -> str:
    """
    @brief
    Plain-text dashboard of one pipeline result.

    @details
    Mirrors the dashboard cards: the error message for failed runs, otherwise
    the skipped-rows notice (if any), team metrics, peak hours and the agent
    table, one agent per line.
    """
    if not result.ok:
        return f"{_TITLE}\n\n{result.error}\n"

    team = result.team
    if team is None:
        raise DataError(
            "Successful PipelineResult carries no team metrics",
            source="export.render_summary",
            suggested_action="Build success results with PipelineResult.success().",
        )

    lines = [_TITLE, ""]
    if result.skipped_count > 0:
        lines += [skipped_notice(result.skipped_count), ""]

    if team.peak_hours:
        peaks = "، ".join(f"{p.hour}:00 ({p.count} طلب)" for p in team.peak_hours)
    else:
        peaks = _NOT_ENOUGH_DATA

    lines += [
        f"{_AVG_WAITING}: {format_minutes(team.average_waiting_time)}",
        f"{_ASSIGNMENT_SLA}: {format_percentage(team.assignment_sla)}",
        f"{_PEAK_HOURS}: {peaks}",
        "",
        " | ".join(_AGENTS_HEADER),
    ]
    for a in result.agents:
        lines.append(
            f"{a.user_name} | {a.total_requests} | {a.average_handling_time:.1f} | "
            f"{format_percentage(a.handling_sla)}"
        )
    return "\n".join(lines) + "\n"


def write_summary(result: PipelineResult, out_path: Path) -> Path:
    out_path = Path(out_path)
    atomic_write_text(out_path, render_summary(result))
    return out_path


def write_records_csv(records: Iterable[ValidatedRecord], out_path: Path) -> Path:
    """
    @brief
    Exports validated records to CSV.

    @details
    Timestamps are serialized as ISO-8601 with offset; rows keep pipeline order.
    """
    rows = [_record_row(r) for r in _ensure_type(records, ValidatedRecord, "records")]
    return _write_csv(rows, RECORD_COLUMNS, Path(out_path))


def write_agents_csv(agents: Iterable[AgentMetrics], out_path: Path) -> Path:
    """Exports per-agent metrics to CSV, in the given (sorted) order."""
    rows = [
        {
            "user_name": a.user_name,
            "total_requests": a.total_requests,
            "average_handling_time": f"{a.average_handling_time:.4f}",
            "handling_sla": f"{a.handling_sla:.4f}",
        }
        for a in _ensure_type(agents, AgentMetrics, "agents")
    ]
    return _write_csv(rows, AGENT_COLUMNS, Path(out_path))


# ----------------- internal -----------------


def _ensure_type(items: Iterable[Any], cls: type, name: str) -> list[Any]:
    if isinstance(items, (str | bytes | Mapping)):
        raise DataError(
            f"Unsupported {name} container type.",
            source="export.report_export",
            suggested_action=f"Pass a sequence of {cls.__name__}.",
        )
    out = list(items)
    for item in out:
        if not isinstance(item, cls):
            raise DataError(
                f"Each item of {name} must be {cls.__name__}, got {type(item).__name__}",
                source="export.report_export",
            )
    return out


def _record_row(r: ValidatedRecord) -> dict[str, Any]:
    row = r.model_dump()
    for key in ("sent_date", "delivered_date", "approved_date"):
        row[key] = row[key].isoformat()
    return row


def _write_csv(rows: Sequence[Mapping[str, Any]], columns: Sequence[str], out_path: Path) -> Path:
    out_dir = out_path.parent
    out_dir.mkdir(parents=True, exist_ok=True)

    # Atomic write via temporary file replacement; utf-8-sig so spreadsheet apps show Arabic
    tmp_fd, tmp_name = tempfile.mkstemp(dir=str(out_dir), suffix=".tmp", text=True)
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8-sig", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(columns))
            writer.writeheader()
            for row in rows:
                writer.writerow(row)
        os.replace(tmp_name, out_path)
    except OSError as e:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise ExportError(
            f"Failed to write {out_path}: {e}",
            source="export.report_export",
            suggested_action="Check output directory permissions and disk space.",
        ) from e
    return out_path


__all__ = [
    "format_minutes",
    "format_percentage",
    "render_summary",
    "skipped_notice",
    "write_agents_csv",
    "write_records_csv",
    "write_summary",
]
