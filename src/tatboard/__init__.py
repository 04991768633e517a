"""Turnaround-time dashboard: workbook ingestion, normalization and SLA metrics."""

__version__ = "0.1.0"
