# Overview: Flask API routes for number inventory; parses input and returns JSON responses.

"""
Number Routes

SECURITY: All routes require authentication.
- Listing and reads require VIEW_NUMBERS
- Edits require MANAGE_NUMBERS; assignment requires ASSIGN_NUMBERS
- Selling requires MANAGE_SALES

Employees only see numbers assigned to them.
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_capability
from ..models.numbers import LOCATION_TYPES, NUMBER_TYPES, PROGRESS_STATUSES, RTS_STATUSES, STATUS_NON_RTS
from ..permissions import ASSIGN_NUMBERS, MANAGE_NUMBERS, MANAGE_SALES, VIEW_NUMBERS
from ..services import number_service, sale_service
from ..services.records import is_mobile_duplicate
from ..validation import PayloadReader
from .helpers import json_body, listing_query, listing_response, mutation_response


numbers_bp = Blueprint("numbers", __name__, url_prefix="/api/numbers")


NUMBER_FILTERS = {
    "status": ("status", "exact"),
    "number_type": ("number_type", "exact"),
    "location_type": ("location_type", "exact"),
    "assigned_to": ("assigned_to", "exact"),
    "activation_status": ("activation_status", "exact"),
    "upload_status": ("upload_status", "exact"),
    "upc_status": ("upc_status", "exact"),
    "search": ("mobile", "contains"),
    "location": ("current_location", "contains"),
}

NUMBER_SORTABLE = {
    "sr_no", "mobile", "sum", "status", "number_type", "purchase_from",
    "purchase_price", "purchase_date", "sale_price", "rts_date",
    "current_location", "location_type", "assigned_to", "activation_status",
    "upload_status", "upc_status", "check_in_date", "safe_custody_date",
}


@numbers_bp.get("")
@require_auth
@require_capability(VIEW_NUMBERS)
def list_numbers_route():
    """
    List numbers visible to the caller.

    Query parameters:
    - status, number_type, location_type, assigned_to, activation_status,
      upload_status, upc_status: exact match ("all" matches everything)
    - search: substring of the mobile number
    - location: substring of the current location
    - sort, direction, page, page_size

    Returns:
        {items: NumberRecord[], count, page, page_size, total_pages}
    """
    query = listing_query(NUMBER_FILTERS, NUMBER_SORTABLE, default_sort="sr_no")
    return listing_response(number_service.list_numbers(g.current_user), query)


@numbers_bp.get("/check-duplicate")
@require_auth
@require_capability(VIEW_NUMBERS)
def check_duplicate_route():
    mobile = (request.args.get("mobile") or "").strip()
    return jsonify({"mobile": mobile, "duplicate": is_mobile_duplicate(mobile)})


@numbers_bp.get("/<int:number_id>")
@require_auth
@require_capability(VIEW_NUMBERS)
def get_number_route(number_id: int):
    number = number_service.get_number(g.current_user, number_id)
    return jsonify({"number": number.to_dict()})


@numbers_bp.post("")
@require_auth
@require_capability(MANAGE_NUMBERS)
def add_number_route():
    """
    Manually add a number.

    Request body:
    {
        "mobile": "9876543210",          // required, 10 digits
        "status": "RTS" | "Non-RTS",     // required
        "number_type": "Prepaid",        // Prepaid | Postpaid | COCP
        "purchase_from": "...",
        "purchase_price": 120,           // required
        "purchase_date": "2024-05-01",   // required
        "sale_price": 200,
        "rts_date": "2024-06-01",        // Non-RTS only
        "safe_custody_date": "...",      // required for COCP
        "current_location": "...",
        "location_type": "Store",        // Store | Employee | Dealer
        "upload_status": "Pending",
        "activation_status": "Pending",
        "notes": "..."
    }
    """
    reader = PayloadReader(json_body())
    data = {
        "mobile": reader.mobile("mobile"),
        "status": reader.choice("status", RTS_STATUSES),
        "number_type": reader.choice("number_type", NUMBER_TYPES, required=False, default="Prepaid"),
        "purchase_from": reader.text("purchase_from", required=False, default="N/A"),
        "purchase_price": reader.price("purchase_price"),
        "purchase_date": reader.date("purchase_date"),
        "sale_price": reader.price("sale_price", required=False, default=0.0),
        "rts_date": reader.date("rts_date", required=False),
        "safe_custody_date": reader.date("safe_custody_date", required=False),
        "current_location": reader.text("current_location", required=False, default="N/A"),
        "location_type": reader.choice("location_type", LOCATION_TYPES, required=False, default="Store"),
        "upload_status": reader.choice("upload_status", PROGRESS_STATUSES, required=False, default="Pending"),
        "activation_status": reader.choice("activation_status", PROGRESS_STATUSES, required=False, default="Pending"),
        "notes": reader.text("notes", required=False, max_length=5000),
    }
    reader.raise_if_errors()

    number, notification = number_service.add_number(g.current_user, data)
    return mutation_response(notification, 201, number=number.to_dict())


@numbers_bp.patch("/<int:number_id>/status")
@require_auth
@require_capability(MANAGE_NUMBERS)
def update_status_route(number_id: int):
    """Body: {"status": "RTS"|"Non-RTS", "rts_date": "...", "note": "..."}"""
    reader = PayloadReader(json_body())
    status = reader.choice("status", RTS_STATUSES)
    rts_date = reader.date("rts_date", required=False)
    note = reader.text("note", required=False, max_length=5000)
    reader.raise_if_errors()

    number, notification = number_service.update_number_status(
        g.current_user, number_id, status,
        rts_date=rts_date if status == STATUS_NON_RTS else None,
        note=note,
    )
    return mutation_response(notification, number=number.to_dict())


@numbers_bp.patch("/<int:number_id>/upload-status")
@require_auth
@require_capability(MANAGE_NUMBERS)
def update_upload_status_route(number_id: int):
    reader = PayloadReader(json_body())
    upload_status = reader.choice("upload_status", PROGRESS_STATUSES)
    reader.raise_if_errors()

    number, notification = number_service.update_upload_status(g.current_user, number_id, upload_status)
    return mutation_response(notification, number=number.to_dict())


@numbers_bp.patch("/<int:number_id>/activation")
@require_auth
@require_capability(MANAGE_NUMBERS)
def update_activation_route(number_id: int):
    reader = PayloadReader(json_body())
    activation_status = reader.choice("activation_status", PROGRESS_STATUSES)
    upload_status = reader.choice("upload_status", PROGRESS_STATUSES)
    note = reader.text("note", required=False, max_length=5000)
    reader.raise_if_errors()

    number, notification = number_service.update_activation_details(
        g.current_user, number_id, activation_status, upload_status, note=note,
    )
    return mutation_response(notification, number=number.to_dict())


@numbers_bp.patch("/<int:number_id>/safe-custody-date")
@require_auth
@require_capability(MANAGE_NUMBERS)
def update_safe_custody_route(number_id: int):
    reader = PayloadReader(json_body())
    safe_custody_date = reader.date("safe_custody_date")
    reader.raise_if_errors()

    number, notification = number_service.update_safe_custody_date(g.current_user, number_id, safe_custody_date)
    return mutation_response(notification, number=number.to_dict())


@numbers_bp.post("/<int:number_id>/check-in")
@require_auth
@require_capability(MANAGE_NUMBERS)
def check_in_route(number_id: int):
    number, notification = number_service.check_in_number(g.current_user, number_id)
    return mutation_response(notification, number=number.to_dict())


@numbers_bp.post("/assign")
@require_auth
@require_capability(ASSIGN_NUMBERS)
def assign_route():
    """Body: {"number_ids": [1, 2], "employee_name": "Ramesh"}"""
    reader = PayloadReader(json_body())
    number_ids = reader.id_list("number_ids")
    employee_name = reader.text("employee_name", max_length=128)
    reader.raise_if_errors()

    numbers, notification = number_service.assign_numbers(g.current_user, number_ids, employee_name)
    return mutation_response(notification, numbers=[n.to_dict() for n in numbers])


def _sale_details(reader: PayloadReader) -> dict:
    return {
        "sale_price": reader.price("sale_price"),
        "sold_to": reader.text("sold_to"),
        "sale_date": reader.date("sale_date"),
    }


@numbers_bp.post("/<int:number_id>/sell")
@require_auth
@require_capability(MANAGE_SALES)
def sell_route(number_id: int):
    """Body: {"sale_price": 200, "sold_to": "...", "sale_date": "2024-05-01"}"""
    reader = PayloadReader(json_body())
    details = _sale_details(reader)
    reader.raise_if_errors()

    sale, notification = sale_service.sell_number(g.current_user, number_id, **details)
    return mutation_response(notification, 201, sale=sale.to_dict())


@numbers_bp.post("/sell")
@require_auth
@require_capability(MANAGE_SALES)
def bulk_sell_route():
    reader = PayloadReader(json_body())
    number_ids = reader.id_list("number_ids")
    details = _sale_details(reader)
    reader.raise_if_errors()

    sales, notification = sale_service.bulk_sell_numbers(g.current_user, number_ids, **details)
    return mutation_response(notification, 201, sales=[s.to_dict() for s in sales])
