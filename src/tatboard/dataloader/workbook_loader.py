# src/tatboard/dataloader/workbook_loader.py
from __future__ import annotations

import io
import logging
from collections.abc import Iterable

import pandas as pd

from tatboard.dataloader.types import RawRow
from tatboard.errors import DataError, MissingColumnsError, MissingSheetError, NoRowsError
from tatboard.schemas.columns import REQUIRED_COLUMNS
from tatboard.schemas.models import DEFAULT_SHEET_NAME

logger = logging.getLogger(__name__)


def validate_columns(columns: Iterable[str]) -> None:
    """
    @brief
    Ensure every required header is present.

    @raises
        MissingColumnsError
            Listing the missing labels in required order.
    """
    available = set(columns)
    missing = [c for c in REQUIRED_COLUMNS if c not in available]
    if missing:
        raise MissingColumnsError(missing, source="WorkbookLoader.validate_columns")


class WorkbookLoader:
    """
    Workbook bytes → list[RawRow].

    Rules:
      - Only the sheet named `sheet_name` is read; the first row is the header.
      - Cells are read untyped (dtype=object): dates stay datetimes, numbers stay
        numbers, empty cells become None and text like "NA" stays text.
      - Fully blank rows are not data rows.

    Fatal errors (raised immediately):
      - bytes are not a readable workbook → DataError
      - sheet absent                      → MissingSheetError
      - no data rows                      → NoRowsError
      - required headers absent           → MissingColumnsError
    """

    def __init__(self, sheet_name: str = DEFAULT_SHEET_NAME) -> None:
        self.sheet_name = sheet_name

    def load(self, data: bytes) -> list[RawRow]:
        df = self._read_sheet(data)
        rows = self._to_rows(df)
        logger.info(
            "WorkbookLoader: %d data row(s) in sheet %r", len(rows), self.sheet_name
        )
        return rows

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read_sheet(self, data: bytes) -> pd.DataFrame:
        if not isinstance(data, (bytes | bytearray | memoryview)):
            raise DataError(
                message=f"Invalid workbook payload: expected bytes, got {type(data).__name__}",
                source="WorkbookLoader._read_sheet",
                suggested_action="Pass the raw bytes of the uploaded file.",
            )

        try:
            with pd.ExcelFile(io.BytesIO(bytes(data))) as book:
                if self.sheet_name not in book.sheet_names:
                    raise MissingSheetError(self.sheet_name, source="WorkbookLoader._read_sheet")
                # Text such as "NA" or "null" is data; only empty cells are blank
                df = book.parse(
                    self.sheet_name, dtype=object, keep_default_na=False, na_values=[]
                )
        except DataError:
            raise
        except Exception as e:
            raise DataError(
                message=f"Unable to read workbook: {e}",
                source="WorkbookLoader._read_sheet",
                suggested_action="Upload an .xlsx workbook exported from the report screen.",
            ) from e

        df.columns = [c.strip() if isinstance(c, str) else c for c in df.columns]
        return df.map(_blank_to_none).dropna(how="all")

    def _to_rows(self, df: pd.DataFrame) -> list[RawRow]:
        # Empty sheet is reported before header checks: without rows there is nothing to check
        if df.empty:
            raise NoRowsError(self.sheet_name, source="WorkbookLoader._to_rows")

        validate_columns(str(c) for c in df.columns)

        cleaned = df.astype(object).where(pd.notna(df), None)
        return cleaned.to_dict(orient="records")


def _blank_to_none(value: object) -> object:
    return None if isinstance(value, str) and value == "" else value


__all__ = ["WorkbookLoader", "validate_columns"]
