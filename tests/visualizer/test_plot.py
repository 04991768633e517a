# tests/visualizer/test_plot.py
from __future__ import annotations

from pathlib import Path

import pytest

from tatboard.dataloader.types import PipelineResult
from tatboard.errors import DataError, VisualizationError
from tatboard.pipeline import run_pipeline
from tatboard.schemas.models import Config, VisualConfig
from tatboard.visualizer.plot import (
    AGENTS_HANDLING_PNG,
    AGENTS_REQUESTS_PNG,
    HOURLY_SENT_PNG,
    _extract_visual_params,
    plot_dashboard,
)


@pytest.fixture()
def ok_result(make_workbook, make_row) -> PipelineResult:
    rows = [
        make_row(patient="P1", user="سارة"),
        make_row(patient="P2", user="سارة"),
        make_row(patient="P3", user="Omar"),
    ]
    result = run_pipeline(make_workbook(rows))
    assert result.ok
    return result


# ------------------------------
# Smoke: basic rendering
# ------------------------------
def test_plot_dashboard_writes_three_pngs(tmp_path: Path, ok_result) -> None:
    """
    @brief
    Smoke test for the three dashboard charts.

    @details
    Every chart is written as a non-empty PNG under the output directory,
    and all matplotlib figures are closed afterwards.
    """
    paths = plot_dashboard(ok_result, Config(), tmp_path / "charts")

    assert set(paths) == {"agents_requests", "agents_handling", "hourly_sent"}
    assert paths["agents_requests"].name == AGENTS_REQUESTS_PNG
    assert paths["agents_handling"].name == AGENTS_HANDLING_PNG
    assert paths["hourly_sent"].name == HOURLY_SENT_PNG
    for path in paths.values():
        data = path.read_bytes()
        assert len(data) > 64
        assert data[:4] == b"\x89PNG"

    import matplotlib.pyplot as plt

    assert plt.get_fignums() == []


def test_dpi_changes_image_size(tmp_path: Path, ok_result) -> None:
    low = Config(visual=VisualConfig(width=4, height=3, dpi=50))
    high = Config(visual=VisualConfig(width=4, height=3, dpi=150))

    small = plot_dashboard(ok_result, low, tmp_path / "low")["hourly_sent"]
    large = plot_dashboard(ok_result, high, tmp_path / "high")["hourly_sent"]

    assert large.stat().st_size > small.stat().st_size


# ------------------------------
# Parameters
# ------------------------------
def test_extract_visual_params_from_config():
    cfg = Config(visual=VisualConfig(width=8, height=5, dpi=90))
    assert _extract_visual_params(cfg) == (8.0, 5.0, 90)


def test_extract_visual_params_defaults_without_section():
    assert _extract_visual_params(object()) == (10.0, 6.0, 120)


# ------------------------------
# Errors
# ------------------------------
def test_failed_result_is_rejected(tmp_path: Path) -> None:
    failed = PipelineResult.failure("x", "NoRowsError")
    with pytest.raises(DataError):
        plot_dashboard(failed, Config(), tmp_path)


def test_unwritable_output_dir_raises(tmp_path: Path, ok_result) -> None:
    blocker = tmp_path / "file.txt"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(VisualizationError):
        plot_dashboard(ok_result, Config(), blocker / "charts")
