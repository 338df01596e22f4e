# Overview: Flask API routes for CSV export and number import; parses input and returns files/JSON.

"""
Import / Export Routes

Exports are served as text/csv attachments whose header row is the
display column labels. Imports accept a CSV (or .xlsx) upload, or JSON
rows, and hand the rows to the bulk number import.
"""

import csv
import io

from flask import Blueprint, Response, g, jsonify, request

from ..decorators import require_auth, require_capability
from ..extensions import db
from ..permissions import EXPORT_DATA, IMPORT_NUMBERS, VIEW_PORT_OUTS, VIEW_SALES
from ..services import export_service, number_service, sale_service
from ..services.activity_service import log_user_activity
from ..services.listing import ALL, exact, filter_by_predicate
from ..validation import ValidationError
from .helpers import json_body, mutation_response


data_transfer_bp = Blueprint("data_transfer", __name__, url_prefix="/api")


def csv_attachment(body: str, filename: str) -> Response:
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _parse_ids(raw: str | None) -> list[int] | None:
    if not raw:
        return None
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise ValidationError({"ids": "ids must be a comma-separated list of integers"})


@data_transfer_bp.get("/exports/numbers")
@require_auth
@require_capability(EXPORT_DATA)
def export_numbers_route():
    """
    Export the caller's numbers.

    Query parameters:
    - ids: comma-separated ids to export only the selected numbers
    """
    numbers = number_service.list_numbers(g.current_user)
    ids = _parse_ids(request.args.get("ids"))

    if ids is not None:
        wanted = set(ids)
        numbers = [n for n in numbers if n.id in wanted]
        if not numbers:
            return jsonify({"error": "No numbers selected", "message": "Please select at least one number to export."}), 400
        filename = "numberflow_selected_export.csv"
        description = f"Exported {len(numbers)} selected number(s) to CSV."
    else:
        filename = "numberflow_all_export.csv"
        description = "Exported All Numbers list to CSV."

    body = export_service.to_csv(numbers, export_service.NUMBER_COLUMNS)
    log_user_activity(g.current_user, "Exported Data", description)
    db.session.commit()
    return csv_attachment(body, filename)


@data_transfer_bp.get("/exports/sales")
@require_auth
@require_capability(VIEW_SALES)
def export_sales_route():
    """
    Sales report with a TOTAL row.

    Query parameters:
    - sold_to: buyer to report on ("all" for every buyer)
    """
    sold_to = request.args.get("sold_to", ALL)
    sales = filter_by_predicate(sale_service.list_sales(g.current_user), [exact("sold_to", sold_to)])
    if not sales:
        return jsonify({"error": "No data to export", "message": "There are no sales records matching the current filter."}), 404

    body = export_service.sales_report_csv(sales)
    log_user_activity(
        g.current_user,
        "Exported Sales Report",
        f"Exported {len(sales)} sales records for filter: {sold_to}.",
    )
    db.session.commit()
    return csv_attachment(body, f"sales_report_{sold_to}.csv")


@data_transfer_bp.get("/exports/port-outs")
@require_auth
@require_capability(VIEW_PORT_OUTS)
def export_port_outs_route():
    port_outs = sale_service.list_port_outs()
    body = export_service.to_csv(port_outs, export_service.PORT_OUT_COLUMNS)
    log_user_activity(g.current_user, "Exported Data", f"Exported {len(port_outs)} port out record(s) to CSV.")
    db.session.commit()
    return csv_attachment(body, "port_out_history.csv")


@data_transfer_bp.post("/exports/failed-rows")
@require_auth
@require_capability(IMPORT_NUMBERS)
def export_failed_rows_route():
    """Body: {"failed_records": [{"record": {...}, "reason": "..."}]} from a previous import."""
    data = json_body()
    failed = data.get("failed_records")
    if not isinstance(failed, list) or not all(isinstance(f, dict) for f in failed):
        raise ValidationError({"failed_records": "failed_records must be a list of objects"})
    return csv_attachment(export_service.failed_rows_to_csv(failed), "failed_import_report.csv")


def _rows_from_upload(file) -> list[dict]:
    filename = file.filename or ""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""

    if ext == "csv":
        stream = io.StringIO(file.stream.read().decode("utf-8-sig"))
        return [row for row in csv.DictReader(stream)]

    if ext in {"xlsx", "xlsm"}:
        from openpyxl import load_workbook
        wb = load_workbook(file.stream, data_only=True)
        data = list(wb.active.values)
        if not data:
            return []
        headers = [str(h) if h is not None else "" for h in data[0]]
        return [
            {headers[i]: row[i] for i in range(len(headers))}
            for row in data[1:]
            if any(cell is not None for cell in row)
        ]

    raise ValidationError({"file": "Please upload a .csv file."})


@data_transfer_bp.post("/imports/numbers")
@require_auth
@require_capability(IMPORT_NUMBERS)
def import_numbers_route():
    """
    Import numbers from an uploaded sheet (multipart field "file") or
    from JSON {"rows": [...]}.

    Expected headers: Mobile, Status, NumberType, UploadStatus,
    PurchaseFrom, PurchasePrice, SalePrice, PurchaseDate, RTSDate,
    SafeCustodyDate, CurrentLocation, LocationType, Notes.

    Returns the imported numbers, the failed rows with reasons, and a
    notification.
    """
    if "file" in request.files:
        file = request.files["file"]
        source = file.filename or "upload"
        try:
            rows = _rows_from_upload(file)
        except UnicodeDecodeError:
            raise ValidationError({"file": "File must be UTF-8 encoded"})
    else:
        data = request.get_json(silent=True) or {}
        rows = data.get("rows")
        source = data.get("source") or "upload"
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise ValidationError({"rows": "rows must be a list of objects"})

    result, notification = number_service.bulk_add_numbers(g.current_user, rows, source=source)
    body = result.to_dict()
    body["imported"] = len(result.valid_records)
    body["failed"] = len(result.failed_records)
    return mutation_response(notification, 201 if result.valid_records else 200, **body)
