# src/tatboard/pipeline.py
"""
Bytes → PipelineResult.

`run_pipeline` is a pure transformation: it reads nothing but its arguments and
returns a fresh immutable result. Fatal problems are folded into the result,
so callers branch on `result.ok` instead of catching exceptions.
"""

from __future__ import annotations

import itertools
import logging
import threading
from pathlib import Path

from tatboard.dataloader.types import (
    UNEXPECTED_ERROR_KIND,
    UNEXPECTED_ERROR_MESSAGE,
    PipelineResult,
)
from tatboard.dataloader.workbook_loader import WorkbookLoader
from tatboard.errors import (
    MissingColumnsError,
    MissingSheetError,
    NoRowsError,
    NoValidRowsError,
    TatboardError,
)
from tatboard.metrics.aggregator import aggregate
from tatboard.schemas.models import Config
from tatboard.transformer.rows import transform_rows

logger = logging.getLogger(__name__)

# Errors whose own message is shown to the user; anything else is "unexpected"
FATAL_ERRORS = (MissingSheetError, MissingColumnsError, NoRowsError, NoValidRowsError)


def run_pipeline(data: bytes, cfg: Config | None = None) -> PipelineResult:
    """
    @brief
    Validate, normalize and aggregate one uploaded workbook.

    @details
    (1) Read the required sheet and check its headers.
    (2) Transform every row independently; count the skipped ones.
    (3) Aggregate the accepted records into agent and team metrics.
    The four fatal validation errors become a failure result carrying their
    own message; anything else (unreadable bytes included) becomes the
    generic "unexpected" failure.

    @params
        data : bytes
            Raw workbook bytes.
        cfg : Config | None
            Runtime configuration; defaults apply when None.

    @returns
        PipelineResult (success or failure, never partial).
    """
    cfg = cfg or Config()
    try:
        rows = WorkbookLoader(cfg.sheet_name).load(data)
        batch = transform_rows(rows, cfg.tzinfo())
        agents, team = aggregate(batch.records, cfg.sla)
    except FATAL_ERRORS as e:
        logger.error("Pipeline failed: %s", e)
        return PipelineResult.failure(e.message, e.error_type)
    except TatboardError as e:
        logger.error("Pipeline failed while reading the workbook: %s", e)
        return PipelineResult.failure(UNEXPECTED_ERROR_MESSAGE, UNEXPECTED_ERROR_KIND)
    except Exception:
        logger.exception("Pipeline crashed with an unexpected error")
        return PipelineResult.failure(UNEXPECTED_ERROR_MESSAGE, UNEXPECTED_ERROR_KIND)

    logger.info(
        "Pipeline OK: kept=%d/%d, skipped=%d, agents=%d",
        len(batch.records),
        batch.total_rows,
        batch.skipped_count,
        len(agents),
    )
    return PipelineResult.success(batch.records, agents, team, batch.skipped_count)


def run_file(path: Path, cfg: Config | None = None) -> PipelineResult:
    """Read a workbook from disk and run the pipeline on its bytes."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        logger.error("Unable to read %s: %s", path, e)
        return PipelineResult.failure(UNEXPECTED_ERROR_MESSAGE, UNEXPECTED_ERROR_KIND)
    return run_pipeline(data, cfg)


class ResultSlot:
    """
    @brief
    Holds the single current result shown to a consumer.

    @details
    Each run starts with begin(), which clears the slot and hands out a token.
    publish() installs a result only if its token is still the latest one, so
    a slow run that was superseded by a newer file selection is discarded
    instead of overwriting the newer result.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens = itertools.count(1)
        self._latest = 0
        self._result: PipelineResult | None = None

    @property
    def current(self) -> PipelineResult | None:
        with self._lock:
            return self._result

    def begin(self) -> int:
        with self._lock:
            self._latest = next(self._tokens)
            self._result = None
            return self._latest

    def publish(self, token: int, result: PipelineResult) -> bool:
        with self._lock:
            if token != self._latest:
                logger.info(
                    "Discarding result of superseded run %d (latest=%d)", token, self._latest
                )
                return False
            self._result = result
            return True

    def run(self, data: bytes, cfg: Config | None = None) -> PipelineResult:
        """begin() → run_pipeline() → publish(), for synchronous callers."""
        token = self.begin()
        result = run_pipeline(data, cfg)
        self.publish(token, result)
        return result


__all__ = ["ResultSlot", "run_file", "run_pipeline"]
