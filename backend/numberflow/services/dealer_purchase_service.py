# Overview: Service-layer operations for dealer purchases.

from __future__ import annotations

from ..extensions import db
from ..models import DealerPurchaseRecord, User
from ..models.numbers import UPC_STATUSES
from ..models.sales import PAYMENT_STATUSES
from numberflow.validation import ValidationError
from .activity_service import log_user_activity
from .derived_fields import digital_root
from .records import DuplicateMobileError, Notification, get_or_404, is_mobile_duplicate, next_sr_no


DEALER_PURCHASE_KIND = "Dealer purchase"
PORT_OUT_STATUSES = ("Done", "Pending")


def list_dealer_purchases() -> list[DealerPurchaseRecord]:
    return db.session.query(DealerPurchaseRecord).order_by(DealerPurchaseRecord.sr_no).all()


def add_dealer_purchase(user: User, *, mobile: str, price: float) -> tuple[DealerPurchaseRecord, Notification]:
    if is_mobile_duplicate(mobile):
        raise DuplicateMobileError(mobile)

    purchase = DealerPurchaseRecord(
        sr_no=next_sr_no(DealerPurchaseRecord),
        mobile=mobile,
        sum=digital_root(mobile),
        price=price,
        payment_status="Pending",
        port_out_status="Pending",
        upc_status="Pending",
        created_by_user_id=user.id,
    )
    db.session.add(purchase)

    description = f"Added new dealer purchase for {mobile}"
    log_user_activity(user, "Added Dealer Purchase", description)
    db.session.commit()

    return purchase, Notification("Dealer Purchase Added", description)


def update_dealer_purchase(
    user: User,
    purchase_id: int,
    *,
    payment_status: str,
    port_out_status: str,
    upc_status: str,
) -> tuple[DealerPurchaseRecord, Notification]:
    errors = {}
    if payment_status not in PAYMENT_STATUSES:
        errors["payment_status"] = f"payment_status must be one of: {', '.join(PAYMENT_STATUSES)}"
    if port_out_status not in PORT_OUT_STATUSES:
        errors["port_out_status"] = f"port_out_status must be one of: {', '.join(PORT_OUT_STATUSES)}"
    if upc_status not in UPC_STATUSES:
        errors["upc_status"] = f"upc_status must be one of: {', '.join(UPC_STATUSES)}"
    if errors:
        raise ValidationError(errors)

    purchase = get_or_404(DealerPurchaseRecord, purchase_id, DEALER_PURCHASE_KIND)
    purchase.payment_status = payment_status
    purchase.port_out_status = port_out_status
    purchase.upc_status = upc_status

    description = f"Updated status for {purchase.mobile}."
    log_user_activity(user, "Updated Dealer Purchase", description)
    db.session.commit()

    return purchase, Notification("Dealer Purchase Updated", description)
