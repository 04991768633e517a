# scripts/run.py
from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Any

from tatboard.dataloader.config_loader import ConfigLoader
from tatboard.errors import ExportError, TatboardError
from tatboard.export.report_export import write_agents_csv, write_records_csv, write_summary
from tatboard.metrics.logger import write_metrics
from tatboard.metrics.metrics import collect_metrics
from tatboard.pipeline import run_file
from tatboard.visualizer.plot import (
    AGENTS_HANDLING_PNG,
    AGENTS_REQUESTS_PNG,
    HOURLY_SENT_PNG,
    plot_dashboard,
)

RECORDS_CSV = "records.csv"
AGENTS_CSV = "agents.csv"
SUMMARY_TXT = "summary.txt"

# Everything a run may leave besides metrics.json
RUN_ARTIFACTS = (
    RECORDS_CSV,
    AGENTS_CSV,
    SUMMARY_TXT,
    AGENTS_REQUESTS_PNG,
    AGENTS_HANDLING_PNG,
    HOURLY_SENT_PNG,
)


def _setup_logging() -> None:
    """
    @brief
    Initializes global logging configuration.

    @details
    Sets the default logging level to INFO and defines a simple console format.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _clear_previous_artifacts(out_dir: Path) -> None:
    """Remove outputs of an earlier run so the directory never mixes two results."""
    for name in RUN_ARTIFACTS:
        path = out_dir / name
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise ExportError(
                f"Cannot remove stale artifact {path}: {e}",
                source="scripts.run._clear_previous_artifacts",
                suggested_action="Check output directory permissions.",
            ) from e


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the dashboard pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="tatboard-run",
        description="Build the turnaround dashboard: load → validate → aggregate → export → plot",
    )
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Path to the exported requests workbook (.xlsx)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config YAML (default: built-in defaults)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for artifacts (default: config output_dir)",
    )
    return parser.parse_args(argv)


def run(config_path: Path | None, input_path: Path, output_dir: Path | None) -> dict[str, Any]:
    """
    @brief
    Executes the full dashboard pipeline and writes its artifacts.

    @details
    (1) Load configuration.
    (2) Run the pipeline on the workbook bytes.
    (3) Remove artifacts of a previous run, then always write metrics.json
        (it carries the error on failure).
    (4) On success, write records/agents CSV, the text summary and charts
        according to io_policy; on failure only the summary, holding the error.

    @returns
        Dictionary with the ok flag, error (if any) and artifact paths.

    @raises
        TatboardError
            On configuration or artifact-writing problems.
    """
    t0 = time.perf_counter()

    # (1) Configuration
    cfg = ConfigLoader().load(config_path)
    out_dir = output_dir or Path(cfg.output_dir or "data/output")
    out_dir.mkdir(parents=True, exist_ok=True)

    # (2) Pipeline
    logging.info("Processing workbook: %s", input_path)
    result = run_file(input_path, cfg)

    # (3) Metrics are written for every run; older artifacts never outlive it
    _clear_previous_artifacts(out_dir)
    artifacts: dict[str, Path | None] = {
        "metrics": write_metrics(collect_metrics(result), out_dir),
        "records_csv": None,
        "agents_csv": None,
        "summary": None,
    }

    if not result.ok:
        logging.error("Dashboard not produced: %s", result.error)
        if cfg.io_policy.write_artifacts:
            artifacts["summary"] = write_summary(result, out_dir / SUMMARY_TXT)
        return {"ok": False, "error": result.error, "artifacts": artifacts}

    if result.skipped_count:
        logging.warning("%d row(s) skipped (missing data or invalid dates)", result.skipped_count)

    # (4) Tabular and text artifacts
    if cfg.io_policy.write_artifacts:
        artifacts["records_csv"] = write_records_csv(result.records, out_dir / RECORDS_CSV)
        artifacts["agents_csv"] = write_agents_csv(result.agents, out_dir / AGENTS_CSV)
        artifacts["summary"] = write_summary(result, out_dir / SUMMARY_TXT)

    # (5) Charts
    if cfg.io_policy.write_plots:
        logging.info("Rendering charts…")
        artifacts.update(plot_dashboard(result, cfg, out_dir))

    logging.info("Pipeline finished in %.2f s", time.perf_counter() - t0)
    return {"ok": True, "error": None, "artifacts": artifacts}


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Returns numeric exit codes suitable for shell integration:
      0 – dashboard produced
      1 – controlled failure (fatal workbook error, config or export problem)
      2 – unexpected crash
    """
    _setup_logging()
    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    output_dir = Path(args.output) if args.output else None

    try:
        outcome = run(config_path, Path(args.input), output_dir)
    except TatboardError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2

    written = ", ".join(name for name, path in outcome["artifacts"].items() if path)
    logging.info("Artifacts written: %s", written or "none")
    return 0 if outcome["ok"] else 1


if __name__ == "__main__":
    sys.exit(main())
