# Overview: CSV export of listings with display column labels.

"""
CSV Export

Each export is an ordered list of (label, getter) columns. The header row
is the display labels; dates are written as YYYY-MM-DD.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any, Callable, Iterable

from numberflow.time_utils import parse_iso_datetime, to_date_str


Column = tuple[str, Callable[[Any], Any]]


def _attr(name: str) -> Callable[[Any], Any]:
    def getter(record):
        if isinstance(record, dict):
            return record.get(name)
        return getattr(record, name, None)
    return getter


def _snapshot_date(name: str) -> Callable[[Any], Any]:
    def getter(record):
        raw = (record.original_number_data or {}).get(name)
        return parse_iso_datetime(raw) if raw else None
    return getter


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return to_date_str(value)
    return value


NUMBER_COLUMNS: list[Column] = [
    ("Sr.No", _attr("sr_no")),
    ("Mobile", _attr("mobile")),
    ("Status", _attr("status")),
    ("Purchase From", _attr("purchase_from")),
    ("Purchase Price", _attr("purchase_price")),
    ("Sale Price", _attr("sale_price")),
    ("RTS Date", _attr("rts_date")),
    ("UPC Status", _attr("upc_status")),
    ("Assigned To", _attr("assigned_to")),
    ("Name", _attr("name")),
    ("Number Type", _attr("number_type")),
    ("Purchase Date", _attr("purchase_date")),
]

SALE_COLUMNS: list[Column] = [
    ("Sr.No", _attr("sr_no")),
    ("Mobile", _attr("mobile")),
    ("Sum", _attr("sum")),
    ("Purchase From", _attr("purchase_from")),
    ("Purchase Price", _attr("purchase_price")),
    ("Purchase Date", _snapshot_date("purchase_date")),
    ("Sold To", _attr("sold_to")),
    ("Sale Price", _attr("sale_price")),
    ("Sale Date", _attr("sale_date")),
]

PORT_OUT_COLUMNS: list[Column] = [
    ("Sr.No", _attr("sr_no")),
    ("Mobile", _attr("mobile")),
    ("Sum", _attr("sum")),
    ("Sold To", _attr("sold_to")),
    ("Sale Price", _attr("sale_price")),
    ("Sale Date", _attr("sale_date")),
    ("Port Out Date", _attr("port_out_date")),
    ("Payment Status", _attr("payment_status")),
    ("UPC Status", _attr("upc_status")),
]

# Failed import rows go back in the upload's own layout plus the reason
FAILED_ROW_COLUMNS = (
    "Mobile",
    "Status",
    "NumberType",
    "UploadStatus",
    "PurchaseFrom",
    "PurchasePrice",
    "SalePrice",
    "PurchaseDate",
    "RTSDate",
    "SafeCustodyDate",
    "CurrentLocation",
    "LocationType",
    "Notes",
)


def to_csv(records: Iterable[Any], columns: list[Column], summary: dict | None = None) -> str:
    """
    Header row of labels, one row per record, and an optional summary row
    whose cells are looked up by label.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow([label for label, _ in columns])
    for record in records:
        writer.writerow([_cell(getter(record)) for _, getter in columns])
    if summary is not None:
        writer.writerow([_cell(summary.get(label)) for label, _ in columns])
    return buffer.getvalue()


def sales_report_csv(sales: list) -> str:
    """Sales rows followed by a TOTAL row of purchase and sale amounts."""
    summary = {
        "Sr.No": "TOTAL",
        "Purchase Price": sum(s.purchase_price or 0 for s in sales),
        "Sale Price": sum(s.sale_price or 0 for s in sales),
    }
    return to_csv(sales, SALE_COLUMNS, summary=summary)


def failed_rows_to_csv(failed_records: Iterable[dict]) -> str:
    """Failed import rows ({"record": {...}, "reason": str}) with a Reason column."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow([*FAILED_ROW_COLUMNS, "Reason"])
    for failed in failed_records:
        record = failed.get("record") or {}
        writer.writerow([*(record.get(col, "") for col in FAILED_ROW_COLUMNS), failed.get("reason", "")])
    return buffer.getvalue()
