# Overview: Flask API routes for sales; parses input and returns JSON responses.

"""
Sales Routes

SECURITY: All routes require authentication.
- Listing requires VIEW_SALES
- Status changes, port-out and cancellation require MANAGE_SALES
"""

from flask import Blueprint, g, jsonify

from ..decorators import require_auth, require_capability
from ..models.numbers import UPC_STATUSES
from ..models.sales import PAYMENT_STATUSES
from ..permissions import MANAGE_SALES, VIEW_SALES
from ..services import sale_service
from ..validation import PayloadReader
from .helpers import json_body, listing_query, listing_response, mutation_response


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


SALE_FILTERS = {
    "payment_status": ("payment_status", "exact"),
    "upc_status": ("upc_status", "exact"),
    "port_out_status": ("port_out_status", "exact"),
    "upload_status": ("upload_status", "exact"),
    "sold_to": ("sold_to", "exact"),
    "search": ("mobile", "contains"),
}

SALE_SORTABLE = {
    "sr_no", "mobile", "sum", "sold_to", "sale_price", "sale_date",
    "payment_status", "upc_status", "port_out_status", "upload_status",
}


@sales_bp.get("")
@require_auth
@require_capability(VIEW_SALES)
def list_sales_route():
    """
    List sales.

    Query parameters: payment_status, upc_status, port_out_status,
    upload_status, sold_to (exact, "all" wildcard), search (mobile
    substring), sort, direction, page, page_size.
    """
    query = listing_query(SALE_FILTERS, SALE_SORTABLE, default_sort="sr_no")
    return listing_response(sale_service.list_sales(g.current_user), query)


@sales_bp.get("/buyers")
@require_auth
@require_capability(VIEW_SALES)
def list_buyers_route():
    """Distinct sold_to values for the report filter."""
    buyers = sorted({s.sold_to for s in sale_service.list_sales(g.current_user)}, key=str.casefold)
    return jsonify({"items": buyers})


@sales_bp.post("/<int:sale_id>/toggle-payment")
@require_auth
@require_capability(MANAGE_SALES)
def toggle_payment_route(sale_id: int):
    sale, notification = sale_service.toggle_payment_status(g.current_user, sale_id)
    return mutation_response(notification, sale=sale.to_dict())


@sales_bp.patch("/<int:sale_id>/statuses")
@require_auth
@require_capability(MANAGE_SALES)
def update_statuses_route(sale_id: int):
    """Body: {"payment_status": "Done", "upc_status": "Generated"}"""
    reader = PayloadReader(json_body())
    payment_status = reader.choice("payment_status", PAYMENT_STATUSES)
    upc_status = reader.choice("upc_status", UPC_STATUSES)
    reader.raise_if_errors()

    sale, notification = sale_service.update_sale_statuses(
        g.current_user, sale_id, payment_status=payment_status, upc_status=upc_status,
    )
    return mutation_response(notification, sale=sale.to_dict())


@sales_bp.post("/upc-status")
@require_auth
@require_capability(MANAGE_SALES)
def bulk_upc_route():
    """Body: {"sale_ids": [1, 2], "upc_status": "Generated"}"""
    reader = PayloadReader(json_body())
    sale_ids = reader.id_list("sale_ids")
    upc_status = reader.choice("upc_status", UPC_STATUSES)
    reader.raise_if_errors()

    sales, notification = sale_service.bulk_update_upc_status(g.current_user, sale_ids, upc_status)
    return mutation_response(notification, sales=[s.to_dict() for s in sales])


@sales_bp.post("/<int:sale_id>/port-out")
@require_auth
@require_capability(MANAGE_SALES)
def port_out_route(sale_id: int):
    port_out, notification = sale_service.mark_ported_out(g.current_user, sale_id)
    return mutation_response(notification, 201, port_out=port_out.to_dict())


@sales_bp.post("/port-out")
@require_auth
@require_capability(MANAGE_SALES)
def bulk_port_out_route():
    """
    Body: {"sale_ids": [1, 2, 3]}

    Only sales with UPC "Generated" move; the rest are returned in
    "skipped". Nothing eligible answers 422 with a destructive notification.
    """
    reader = PayloadReader(json_body())
    sale_ids = reader.id_list("sale_ids")
    reader.raise_if_errors()

    port_outs, skipped, notification = sale_service.bulk_port_out(g.current_user, sale_ids)
    return mutation_response(
        notification,
        201 if port_outs else 422,
        port_outs=[p.to_dict() for p in port_outs],
        skipped=[s.to_dict() for s in skipped],
    )


@sales_bp.post("/<int:sale_id>/cancel")
@require_auth
@require_capability(MANAGE_SALES)
def cancel_sale_route(sale_id: int):
    number, notification = sale_service.cancel_sale(g.current_user, sale_id)
    return mutation_response(notification, number=number.to_dict())
