# src/tatboard/errors.py
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone


class TatboardError(Exception):
    """Base class for all structured tatboard exceptions."""

    def __init__(
        self, message: str, source: str | None = None, suggested_action: str | None = None
    ):
        super().__init__(message)
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_type = self.__class__.__name__
        self.source = source or "unknown"
        self.suggested_action = suggested_action

    @property
    def message(self) -> str:
        """User-facing message without the diagnostic decorations of __str__."""
        return str(self.args[0])

    def __str__(self) -> str:
        base = f"[{self.error_type}] {self.args[0]}"
        if self.source:
            base += f" (source={self.source})"
        if self.suggested_action:
            base += f" | action: {self.suggested_action}"
        return base


class ConfigError(TatboardError):
    """Invalid or missing configuration (config.yaml)"""


class DataError(TatboardError):
    """Malformed or inconsistent input workbook"""


class MissingSheetError(DataError):
    """Required sheet absent from the workbook"""

    def __init__(self, sheet_name: str, source: str | None = None):
        super().__init__(
            f"لم يتم العثور على ورقة العمل {sheet_name} في الملف.",
            source=source,
            suggested_action=f"Export the report with a sheet named '{sheet_name}'.",
        )
        self.sheet_name = sheet_name


class MissingColumnsError(DataError):
    """One or more required headers absent from the sheet"""

    def __init__(self, missing: Iterable[str], source: str | None = None):
        self.missing = list(missing)
        super().__init__(
            f"الاعمدة التالية غير موجودة: {'، '.join(self.missing)}.",
            source=source,
            suggested_action="Add the missing columns to the header row.",
        )


class NoRowsError(DataError):
    """Sheet parsed but holds zero data rows"""

    def __init__(self, sheet_name: str, source: str | None = None):
        super().__init__(
            f"لا توجد بيانات في ورقة العمل {sheet_name}.",
            source=source,
            suggested_action="Upload a workbook that contains at least one request.",
        )
        self.sheet_name = sheet_name


class NoValidRowsError(DataError):
    """Every row failed validation"""

    def __init__(self, source: str | None = None):
        super().__init__(
            "لم يتم العثور على صفوف صالحة بعد التحقق من البيانات.",
            source=source,
            suggested_action="Check that names are filled in and dates are in order.",
        )


class ExportError(TatboardError):
    """Failure while writing report artifacts"""


class VisualizationError(TatboardError):
    """Plotting or rendering failure"""
