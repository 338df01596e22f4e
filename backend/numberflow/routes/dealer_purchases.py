# Overview: Flask API routes for dealer purchases; parses input and returns JSON responses.

from flask import Blueprint, g

from ..decorators import require_auth, require_capability
from ..models.numbers import UPC_STATUSES
from ..models.sales import PAYMENT_STATUSES
from ..permissions import MANAGE_DEALER_PURCHASES, VIEW_DEALER_PURCHASES
from ..services import dealer_purchase_service
from ..services.dealer_purchase_service import PORT_OUT_STATUSES
from ..validation import PayloadReader
from .helpers import json_body, listing_query, listing_response, mutation_response


dealer_purchases_bp = Blueprint("dealer_purchases", __name__, url_prefix="/api/dealer-purchases")


@dealer_purchases_bp.get("")
@require_auth
@require_capability(VIEW_DEALER_PURCHASES)
def list_dealer_purchases_route():
    query = listing_query(
        {
            "payment_status": ("payment_status", "exact"),
            "port_out_status": ("port_out_status", "exact"),
            "upc_status": ("upc_status", "exact"),
            "search": ("mobile", "contains"),
        },
        {"sr_no", "mobile", "sum", "price", "payment_status", "port_out_status", "upc_status"},
        default_sort="sr_no",
    )
    return listing_response(dealer_purchase_service.list_dealer_purchases(), query)


@dealer_purchases_bp.post("")
@require_auth
@require_capability(MANAGE_DEALER_PURCHASES)
def add_dealer_purchase_route():
    """Body: {"mobile": "9876543210", "price": 150}"""
    reader = PayloadReader(json_body())
    mobile = reader.mobile("mobile")
    price = reader.price("price")
    reader.raise_if_errors()

    purchase, notification = dealer_purchase_service.add_dealer_purchase(g.current_user, mobile=mobile, price=price)
    return mutation_response(notification, 201, dealer_purchase=purchase.to_dict())


@dealer_purchases_bp.patch("/<int:purchase_id>")
@require_auth
@require_capability(MANAGE_DEALER_PURCHASES)
def update_dealer_purchase_route(purchase_id: int):
    """Body: {"payment_status": "Done", "port_out_status": "Pending", "upc_status": "Generated"}"""
    reader = PayloadReader(json_body())
    payment_status = reader.choice("payment_status", PAYMENT_STATUSES)
    port_out_status = reader.choice("port_out_status", PORT_OUT_STATUSES)
    upc_status = reader.choice("upc_status", UPC_STATUSES)
    reader.raise_if_errors()

    purchase, notification = dealer_purchase_service.update_dealer_purchase(
        g.current_user,
        purchase_id,
        payment_status=payment_status,
        port_out_status=port_out_status,
        upc_status=upc_status,
    )
    return mutation_response(notification, dealer_purchase=purchase.to_dict())
