# Overview: Flask API routes for purchases; parses input and returns JSON responses.

from flask import Blueprint, g

from ..decorators import require_auth, require_capability
from ..permissions import MANAGE_PURCHASES, VIEW_PURCHASES
from ..services import purchase_service
from ..validation import PayloadReader
from .helpers import json_body, listing_query, listing_response, mutation_response


purchases_bp = Blueprint("purchases", __name__, url_prefix="/api/purchases")


@purchases_bp.get("")
@require_auth
@require_capability(VIEW_PURCHASES)
def list_purchases_route():
    """Newest purchase first unless another sort is requested."""
    query = listing_query(
        {"search": ("mobile", "contains"), "purchased_from": ("purchased_from", "contains")},
        {"sr_no", "mobile", "purchased_from", "purchase_price", "purchase_date"},
    )
    return listing_response(purchase_service.list_purchases(), query)


@purchases_bp.post("")
@require_auth
@require_capability(MANAGE_PURCHASES)
def add_purchase_route():
    """
    Record a purchase. The number is stocked as Non-RTS at the same time.

    Request body:
    {
        "mobile": "9876543210",
        "purchased_from": "Dealer A",
        "purchase_price": 120,
        "purchase_date": "2024-05-01"
    }
    """
    reader = PayloadReader(json_body())
    mobile = reader.mobile("mobile")
    purchased_from = reader.text("purchased_from")
    purchase_price = reader.price("purchase_price")
    purchase_date = reader.date("purchase_date")
    reader.raise_if_errors()

    purchase, number, notification = purchase_service.add_purchase(
        g.current_user,
        mobile=mobile,
        purchased_from=purchased_from,
        purchase_price=purchase_price,
        purchase_date=purchase_date,
    )
    return mutation_response(notification, 201, purchase=purchase.to_dict(), number=number.to_dict())
