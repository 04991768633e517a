import io
import sys
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

# (1) Add repository root to sys.path to enable absolute imports of scripts/
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tatboard.schemas.columns import REQUIRED_COLUMNS  # noqa: E402


def request_row(
    patient: Any = "P001",
    user: Any = "سارة",
    doctor: Any = "د. علي",
    sent: Any = datetime(2024, 1, 1, 9, 0),
    delivered: Any = datetime(2024, 1, 1, 9, 5),
    approved: Any = datetime(2024, 1, 1, 9, 20),
) -> list[Any]:
    """One report row in REQUIRED_COLUMNS order (defaults: Scenario A)."""
    return [patient, user, doctor, sent, delivered, approved]


def build_workbook(
    rows: Sequence[Sequence[Any]],
    columns: Sequence[str] = REQUIRED_COLUMNS,
    sheet_name: str = "ag-grid",
    extra_sheets: dict[str, pd.DataFrame] | None = None,
) -> bytes:
    """Serialize rows into in-memory .xlsx bytes."""
    buf = io.BytesIO()
    df = pd.DataFrame(list(rows), columns=list(columns))
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
        for name, frame in (extra_sheets or {}).items():
            frame.to_excel(writer, sheet_name=name, index=False)
    return buf.getvalue()


@pytest.fixture()
def make_workbook() -> Callable[..., bytes]:
    return build_workbook


@pytest.fixture()
def make_row() -> Callable[..., list[Any]]:
    return request_row
