# src/tatboard/visualizer/plot.py
"""
Dashboard charts rendered to PNG.

Responsibilities:
- Turn a successful PipelineResult into the three dashboard charts:
  requests per agent, mean handling time per agent, requests sent per hour.
- Enforce headless backend (Agg) and figure export parameters (size, DPI).
- Return the written paths.

Chart text is kept in ASCII: matplotlib draws Arabic glyphs unshaped and
left-to-right, so agent names are the only Arabic on the canvas.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import matplotlib
import pandas as pd
import seaborn as sns

from tatboard.dataloader.types import PipelineResult
from tatboard.errors import DataError, VisualizationError
from tatboard.metrics.aggregator import HOURS_PER_DAY, hourly_counts
from tatboard.schemas.models import Config

# (1) Enforce headless backend for environments without display
matplotlib.use("Agg")

AGENTS_REQUESTS_PNG = "agents_requests.png"
AGENTS_HANDLING_PNG = "agents_handling.png"
HOURLY_SENT_PNG = "hourly_sent.png"


def _extract_visual_params(cfg: Config | Any) -> tuple[float, float, int]:
    """
    @brief
    Extract rendering parameters from configuration.

    @details
    Reads cfg.visual.{width, height, dpi} if available, otherwise falls back
    to defaults suitable for PNG export.
    """
    width, height, dpi = 10.0, 6.0, 120
    visual = getattr(cfg, "visual", None)
    if visual is not None:
        width = float(getattr(visual, "width", width))
        height = float(getattr(visual, "height", height))
        dpi = int(getattr(visual, "dpi", dpi))
    return width, height, dpi


def _agents_frame(result: PipelineResult) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "user_name": [a.user_name for a in result.agents],
            "total_requests": [a.total_requests for a in result.agents],
            "average_handling_time": [a.average_handling_time for a in result.agents],
        }
    )


def _hours_frame(result: PipelineResult) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "hour": [f"{h}:00" for h in range(HOURS_PER_DAY)],
            "count": hourly_counts(result.records),
        }
    )


def _save(fig: Any, out_path: Path, dpi: int) -> Path:
    from matplotlib import pyplot as plt

    try:
        fig.tight_layout()
        fig.savefig(out_path, dpi=dpi, bbox_inches="tight")
    except OSError as exc:
        raise VisualizationError(
            f"Failed to save figure {out_path}: {exc}",
            source="visualizer.plot._save",
            suggested_action="Check disk space and output directory permissions",
        ) from exc
    finally:
        plt.close(fig)
    return out_path.resolve()


def _bar_chart(
    df: pd.DataFrame, column: str, title: str, ylabel: str, color: str, size: tuple[float, float]
) -> Any:
    from matplotlib import pyplot as plt

    fig, ax = plt.subplots(figsize=size)
    sns.barplot(data=df, x="user_name", y=column, color=color, ax=ax)
    ax.set_title(title)
    ax.set_xlabel("agent")
    ax.set_ylabel(ylabel)
    ax.tick_params(axis="x", labelrotation=45)
    return fig


def _line_chart(df: pd.DataFrame, size: tuple[float, float]) -> Any:
    from matplotlib import pyplot as plt

    fig, ax = plt.subplots(figsize=size)
    color = sns.color_palette("muted")[4]
    sns.lineplot(data=df, x="hour", y="count", marker="o", sort=False, color=color, ax=ax)
    ax.fill_between(range(len(df)), df["count"], alpha=0.2, color=color)
    ax.set_title("Requests sent by hour")
    ax.set_xlabel("hour")
    ax.set_ylabel("requests")
    ax.tick_params(axis="x", labelrotation=90)
    return fig


def plot_dashboard(result: PipelineResult, cfg: Config | Any, out_dir: Path) -> dict[str, Path]:
    """
    @brief
    Render the dashboard charts of a successful run to PNG files.

    @details
    Steps:
        (1) Reject failed results (nothing to draw).
        (2) Ensure output directory exists.
        (3) Draw requests-per-agent and handling-time-per-agent bar charts.
        (4) Draw the hour-of-day line chart of sent requests.

    @params
        result : PipelineResult
            Successful pipeline result.
        cfg : Config | Any
            Configuration with an optional visual section.
        out_dir : Path
            Destination directory.

    @returns
        Mapping chart name → written PNG path.

    @raises
        DataError if the result is a failure; VisualizationError on I/O problems.
    """
    if not isinstance(result, PipelineResult) or not result.ok:
        raise DataError(
            "Cannot plot a failed pipeline result",
            source="visualizer.plot.plot_dashboard",
            suggested_action="Fix the input workbook and rerun",
        )

    out_dir = Path(out_dir)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise VisualizationError(
            f"Cannot create output directory: {out_dir} ({exc})",
            source="visualizer.plot.plot_dashboard",
            suggested_action="Check filesystem permissions or choose another output path",
        ) from exc

    width, height, dpi = _extract_visual_params(cfg)
    size = (width, height)
    palette = sns.color_palette("muted")
    agents = _agents_frame(result)

    paths: dict[str, Path] = {}
    fig = _bar_chart(
        agents, "total_requests", "Total requests per agent", "requests", palette[0], size
    )
    paths["agents_requests"] = _save(fig, out_dir / AGENTS_REQUESTS_PNG, dpi)

    fig = _bar_chart(
        agents,
        "average_handling_time",
        "Average handling time per agent",
        "minutes",
        palette[2],
        size,
    )
    paths["agents_handling"] = _save(fig, out_dir / AGENTS_HANDLING_PNG, dpi)

    fig = _line_chart(_hours_frame(result), size)
    paths["hourly_sent"] = _save(fig, out_dir / HOURLY_SENT_PNG, dpi)
    return paths


__all__ = ["plot_dashboard"]
