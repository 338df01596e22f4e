# Overview: Service-layer operations for purchases; a purchase also stocks a Non-RTS number.

from __future__ import annotations

from datetime import datetime

from ..extensions import db
from ..models import NumberRecord, PurchaseRecord, User
from ..models.numbers import STATUS_NON_RTS
from .activity_service import log_user_activity
from .number_service import build_number
from .records import DuplicateMobileError, Notification, is_mobile_duplicate, next_sr_no


def list_purchases() -> list[PurchaseRecord]:
    return db.session.query(PurchaseRecord).order_by(PurchaseRecord.purchase_date.desc(), PurchaseRecord.id.desc()).all()


def add_purchase(
    user: User,
    *,
    mobile: str,
    purchased_from: str,
    purchase_price: float,
    purchase_date: datetime,
) -> tuple[PurchaseRecord, NumberRecord, Notification]:
    """
    Record a purchase and stock the bought number.

    Creates one PurchaseRecord, one Non-RTS NumberRecord carrying the same
    mobile, price and date, and one Activity naming the mobile; all three
    commit together. Raises DuplicateMobileError when the mobile is
    already in inventory.
    """
    if is_mobile_duplicate(mobile):
        raise DuplicateMobileError(mobile)

    purchase = PurchaseRecord(
        sr_no=next_sr_no(PurchaseRecord),
        mobile=mobile,
        purchased_from=purchased_from,
        purchase_price=purchase_price,
        purchase_date=purchase_date,
        created_by_user_id=user.id,
    )
    number = build_number(
        sr_no=next_sr_no(NumberRecord),
        mobile=mobile,
        status=STATUS_NON_RTS,
        purchase_from=purchased_from,
        purchase_price=purchase_price,
        purchase_date=purchase_date,
        assigned_to=user.display_name or "User",
        user_id=user.id,
    )
    db.session.add(purchase)
    db.session.add(number)

    description = f"Purchased {mobile} from {purchased_from} for {purchase_price:g}"
    log_user_activity(user, "Added Purchase", description)
    db.session.commit()

    return purchase, number, Notification("Purchase Added", description)
