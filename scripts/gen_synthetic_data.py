# scripts/gen_synthetic_data.py
from __future__ import annotations

import random
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pandas as pd

from tatboard.normalizer.dates import SPREADSHEET_EPOCH
from tatboard.schemas.columns import (
    APPROVED_DATE,
    DELIVERED_DATE,
    DOCTOR_NAME,
    PATIENT_CODE,
    REQUIRED_COLUMNS,
    SENT_DATE,
    USER_NAME,
)
from tatboard.schemas.models import DEFAULT_SHEET_NAME

"""
Synthetic request-report generator (single run → single .xlsx workbook).

Design:
- Parameters are hard-coded as constants below (no CLI args).
- Requests are sent during working hours over DAYS days; each gets a random
  waiting time and handling time.
- Date cells use every encoding the pipeline accepts: native datetimes,
  serial day counts, ISO text, and text with Arabic-Indic digits.
- A share of rows is deliberately broken (blank doctor, garbage date,
  approved before delivered) to exercise the skip path.

Edit the constants in the "CONFIG" section to produce different datasets.
"""

# =========================
# CONFIG — EDIT THESE
# =========================
REQUESTS: int = 300
DAYS: int = 5
BROKEN_SHARE: float = 0.05
OUTPUT: str = f"data/input/synthetic_{DAYS}d_{REQUESTS}r.xlsx"

AGENTS: tuple[str, ...] = ("أحمد", "سارة", "محمد", "نورة", "خالد")
DOCTORS: tuple[str, ...] = ("د. علي", "د. منى", "د. يوسف")

WORK_START_HOUR: int = 7
WORK_END_HOUR: int = 19
MAX_WAITING_MIN: int = 30
MAX_HANDLING_MIN: int = 45

START_DAY: datetime = datetime(2024, 1, 1)
RANDOM_SEED: int = 42
# =========================

_ARABIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")


@dataclass(frozen=True, slots=True)
class RequestRow:
    patient_code: str
    user_name: str
    doctor_name: str
    sent: datetime
    delivered: datetime
    approved: datetime


def _random_request(idx: int) -> RequestRow:
    day = START_DAY + timedelta(days=random.randrange(DAYS))
    sent = day + timedelta(
        hours=random.randint(WORK_START_HOUR, WORK_END_HOUR - 1), minutes=random.randrange(60)
    )
    delivered = sent + timedelta(minutes=random.randint(0, MAX_WAITING_MIN))
    approved = delivered + timedelta(minutes=random.randint(1, MAX_HANDLING_MIN))
    return RequestRow(
        patient_code=f"P{idx:05d}",
        user_name=random.choice(AGENTS),
        doctor_name=random.choice(DOCTORS),
        sent=sent,
        delivered=delivered,
        approved=approved,
    )


def _encode(dt: datetime) -> Any:
    """Pick one of the accepted cell encodings at random."""
    kind = random.randrange(4)
    if kind == 0:
        return dt
    if kind == 1:
        naive_epoch = SPREADSHEET_EPOCH.replace(tzinfo=None)
        return round((dt - naive_epoch).total_seconds() / 86400.0, 8)
    if kind == 2:
        return dt.strftime("%Y-%m-%d %H:%M")
    return dt.strftime("%Y-%m-%d %H:%M").translate(_ARABIC_DIGITS)


def _to_cells(r: RequestRow) -> dict[str, Any]:
    return {
        PATIENT_CODE: r.patient_code,
        USER_NAME: r.user_name,
        DOCTOR_NAME: r.doctor_name,
        SENT_DATE: _encode(r.sent),
        DELIVERED_DATE: _encode(r.delivered),
        APPROVED_DATE: _encode(r.approved),
    }


def _break(cells: dict[str, Any], r: RequestRow) -> dict[str, Any]:
    kind = random.randrange(3)
    if kind == 0:
        cells[DOCTOR_NAME] = None
    elif kind == 1:
        cells[SENT_DATE] = "غير معروف"
    else:
        cells[APPROVED_DATE] = r.delivered - timedelta(minutes=5)
    return cells


def _validate_config_or_die() -> None:
    problems: list[str] = []
    if REQUESTS < 1:
        problems.append("REQUESTS must be >= 1")
    if DAYS < 1:
        problems.append("DAYS must be >= 1")
    if not 0.0 <= BROKEN_SHARE < 1.0:
        problems.append("BROKEN_SHARE must be in [0, 1)")
    if not 0 <= WORK_START_HOUR < WORK_END_HOUR <= 24:
        problems.append("WORK_START_HOUR/WORK_END_HOUR must satisfy 0 <= start < end <= 24")
    if problems:
        msg = "Invalid generator configuration:\n- " + "\n- ".join(problems)
        print(msg, file=sys.stderr)
        sys.exit(2)


def main() -> int:
    _validate_config_or_die()
    random.seed(RANDOM_SEED)

    rows: list[dict[str, Any]] = []
    broken = 0
    for idx in range(1, REQUESTS + 1):
        request = _random_request(idx)
        cells = _to_cells(request)
        if random.random() < BROKEN_SHARE:
            cells = _break(cells, request)
            broken += 1
        rows.append(cells)

    output = Path(OUTPUT)
    output.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(rows, columns=list(REQUIRED_COLUMNS))
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=DEFAULT_SHEET_NAME, index=False)

    print(f"[GEN] requests={REQUESTS}, days={DAYS}, broken={broken}, agents={len(AGENTS)}")
    print(f"[GEN] wrote: {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
