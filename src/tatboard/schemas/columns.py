# src/tatboard/schemas/columns.py
"""Header labels of the exported request report (fixed, Arabic)."""

from __future__ import annotations

PATIENT_CODE = "كود المريض"
USER_NAME = "اسم المستخدم"
DOCTOR_NAME = "اسم الطبيب"
SENT_DATE = "تاريخ الإرسال"
DELIVERED_DATE = "تاريخ التسليم"
APPROVED_DATE = "تاريخ الموافقة"

REQUIRED_COLUMNS: tuple[str, ...] = (
    PATIENT_CODE,
    USER_NAME,
    DOCTOR_NAME,
    SENT_DATE,
    DELIVERED_DATE,
    APPROVED_DATE,
)

# Record field → source column
TEXT_FIELDS: dict[str, str] = {
    "patient_code": PATIENT_CODE,
    "user_name": USER_NAME,
    "doctor_name": DOCTOR_NAME,
}
DATE_FIELDS: dict[str, str] = {
    "sent_date": SENT_DATE,
    "delivered_date": DELIVERED_DATE,
    "approved_date": APPROVED_DATE,
}
