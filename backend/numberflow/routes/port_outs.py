# Overview: Flask API routes for port-out history; parses input and returns JSON responses.

from flask import Blueprint, g

from ..decorators import require_auth, require_capability
from ..models.sales import PAYMENT_STATUSES
from ..permissions import MANAGE_PORT_OUTS, VIEW_PORT_OUTS
from ..services import sale_service
from ..validation import PayloadReader
from .helpers import json_body, listing_query, listing_response, mutation_response


port_outs_bp = Blueprint("port_outs", __name__, url_prefix="/api/port-outs")


@port_outs_bp.get("")
@require_auth
@require_capability(VIEW_PORT_OUTS)
def list_port_outs_route():
    query = listing_query(
        {
            "payment_status": ("payment_status", "exact"),
            "upc_status": ("upc_status", "exact"),
            "sold_to": ("sold_to", "exact"),
            "search": ("mobile", "contains"),
        },
        {"sr_no", "mobile", "sum", "sold_to", "sale_price", "sale_date", "port_out_date", "payment_status"},
        default_sort="sr_no",
    )
    return listing_response(sale_service.list_port_outs(), query)


@port_outs_bp.patch("/<int:port_out_id>/payment")
@require_auth
@require_capability(MANAGE_PORT_OUTS)
def update_payment_route(port_out_id: int):
    reader = PayloadReader(json_body())
    payment_status = reader.choice("payment_status", PAYMENT_STATUSES)
    reader.raise_if_errors()

    port_out, notification = sale_service.update_port_out_payment(g.current_user, port_out_id, payment_status)
    return mutation_response(notification, port_out=port_out.to_dict())


@port_outs_bp.post("/payment")
@require_auth
@require_capability(MANAGE_PORT_OUTS)
def bulk_payment_route():
    """Body: {"port_out_ids": [1, 2], "payment_status": "Done"}"""
    reader = PayloadReader(json_body())
    port_out_ids = reader.id_list("port_out_ids")
    payment_status = reader.choice("payment_status", PAYMENT_STATUSES)
    reader.raise_if_errors()

    port_outs, notification = sale_service.bulk_update_port_out_payment(g.current_user, port_out_ids, payment_status)
    return mutation_response(notification, port_outs=[p.to_dict() for p in port_outs])
