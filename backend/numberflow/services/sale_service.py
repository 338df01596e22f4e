# Overview: Service-layer operations for sales and port-outs; moves numbers between collections.

"""
Sales and Port-Out Service

A number moves through three tables:

    numbers --sell--> sales --port out--> port_outs
       ^                |
       +---cancel sale--+

Each move writes the new row and removes the old one in one transaction,
so a mobile is never visible in two places. The sold number's columns
travel along in original_number_data so a cancelled sale can restore it.

Employees see only sales whose snapshot was assigned to their display
name; other sales are reported as not found.
"""

from __future__ import annotations

from datetime import datetime

from ..extensions import db
from ..models import NumberRecord, PortOutRecord, SaleRecord, User
from ..models.numbers import UNASSIGNED, UPC_STATUSES
from ..models.sales import PAYMENT_DONE, PAYMENT_PENDING, PAYMENT_STATUSES, UPC_GENERATED
from numberflow.time_utils import parse_iso_datetime, utcnow
from numberflow.validation import ValidationError
from .activity_service import log_user_activity
from .derived_fields import digital_root
from .number_service import get_number, get_numbers
from .records import (
    VARIANT_DESTRUCTIVE,
    Notification,
    RecordNotFoundError,
    get_or_404,
    load_many,
    next_sr_no,
)


SALE_KIND = "Sale"
PORT_OUT_KIND = "Port-out"


class SaleStateError(Exception):
    """A sale cannot move because its number snapshot is missing."""


def scoped_query(user: User):
    """Sales the caller may see: employees only those of numbers assigned to them."""
    query = db.session.query(SaleRecord)
    if not user.is_admin:
        query = query.filter(SaleRecord.original_number_data["assigned_to"].as_string() == user.display_name)
    return query


def list_sales(user: User) -> list[SaleRecord]:
    return scoped_query(user).order_by(SaleRecord.sr_no).all()


def list_port_outs() -> list[PortOutRecord]:
    return db.session.query(PortOutRecord).order_by(PortOutRecord.sr_no).all()


def get_sale(user: User, sale_id: int) -> SaleRecord:
    sale = scoped_query(user).filter(SaleRecord.id == sale_id).first()
    if sale is None:
        raise RecordNotFoundError(SALE_KIND, sale_id)
    return sale


def get_sales(user: User, sale_ids: list[int]) -> list[SaleRecord]:
    sales = load_many(SaleRecord, sale_ids, SALE_KIND)
    if not user.is_admin:
        for sale in sales:
            if sale.assigned_to != user.display_name:
                raise RecordNotFoundError(SALE_KIND, sale.id)
    return sales


def get_port_out(port_out_id: int) -> PortOutRecord:
    return get_or_404(PortOutRecord, port_out_id, PORT_OUT_KIND)


def _validate_sale_details(sale_price, sold_to: str) -> None:
    errors = {}
    if sale_price is None or sale_price < 0:
        errors["sale_price"] = "sale_price must be zero or more"
    if not (sold_to or "").strip():
        errors["sold_to"] = "sold_to is required"
    if errors:
        raise ValidationError(errors)


def _sale_from_number(number: NumberRecord, sr_no: int, user: User, sale_price: float, sold_to: str, sale_date: datetime) -> SaleRecord:
    return SaleRecord(
        sr_no=sr_no,
        mobile=number.mobile,
        # computed once here and stored
        sum=digital_root(number.mobile),
        sold_to=sold_to.strip(),
        sale_price=sale_price,
        sale_date=sale_date,
        payment_status=PAYMENT_PENDING,
        upc_status="Pending",
        port_out_status="Pending",
        upload_status=number.upload_status,
        original_number_data=number.snapshot(),
        created_by_user_id=user.id,
    )


def sell_number(
    user: User,
    number_id: int,
    *,
    sale_price: float,
    sold_to: str,
    sale_date: datetime,
) -> tuple[SaleRecord, Notification]:
    _validate_sale_details(sale_price, sold_to)
    number = get_number(user, number_id)

    sale = _sale_from_number(number, next_sr_no(SaleRecord), user, sale_price, sold_to, sale_date)
    db.session.add(sale)
    db.session.delete(number)

    description = f"Sold number {number.mobile} to {sale.sold_to} for {sale_price:g}"
    log_user_activity(user, "Sold Number", description)
    db.session.commit()

    return sale, Notification("Number Sold", description)


def bulk_sell_numbers(
    user: User,
    number_ids: list[int],
    *,
    sale_price: float,
    sold_to: str,
    sale_date: datetime,
) -> tuple[list[SaleRecord], Notification]:
    _validate_sale_details(sale_price, sold_to)
    numbers = get_numbers(user, number_ids)

    sr_no = next_sr_no(SaleRecord)
    sales = []
    for number in numbers:
        sale = _sale_from_number(number, sr_no, user, sale_price, sold_to, sale_date)
        db.session.add(sale)
        db.session.delete(number)
        sales.append(sale)
        sr_no += 1

    description = f"Sold {len(sales)} number(s) to {sold_to.strip()}."
    log_user_activity(user, "Bulk Sold Numbers", description)
    db.session.commit()

    return sales, Notification("Numbers Sold", description)


def toggle_payment_status(user: User, sale_id: int) -> tuple[SaleRecord, Notification]:
    """Flip Pending <-> Done. No other column changes."""
    sale = get_sale(user, sale_id)
    sale.payment_status = PAYMENT_DONE if sale.payment_status == PAYMENT_PENDING else PAYMENT_PENDING

    description = f"Set payment status for {sale.mobile} to {sale.payment_status}."
    log_user_activity(user, "Updated Payment Status", description)
    db.session.commit()

    return sale, Notification("Payment Status Updated", description)


def update_sale_statuses(user: User, sale_id: int, *, payment_status: str, upc_status: str) -> tuple[SaleRecord, Notification]:
    errors = {}
    if payment_status not in PAYMENT_STATUSES:
        errors["payment_status"] = f"payment_status must be one of: {', '.join(PAYMENT_STATUSES)}"
    if upc_status not in UPC_STATUSES:
        errors["upc_status"] = f"upc_status must be one of: {', '.join(UPC_STATUSES)}"
    if errors:
        raise ValidationError(errors)

    sale = get_sale(user, sale_id)
    sale.payment_status = payment_status
    sale.upc_status = upc_status

    description = f"Updated sale for {sale.mobile}. Payment: {payment_status}, UPC: {upc_status}."
    log_user_activity(user, "Updated Sale Status", description)
    db.session.commit()

    return sale, Notification("Sale Updated", description)


def bulk_update_upc_status(user: User, sale_ids: list[int], upc_status: str) -> tuple[list[SaleRecord], Notification]:
    if upc_status not in UPC_STATUSES:
        raise ValidationError({"upc_status": f"upc_status must be one of: {', '.join(UPC_STATUSES)}"})

    sales = get_sales(user, sale_ids)
    for sale in sales:
        sale.upc_status = upc_status

    description = f"Updated UPC status for {len(sales)} sale(s) to {upc_status}."
    log_user_activity(user, "Bulk Updated UPC Status", description)
    db.session.commit()

    return sales, Notification("UPC Status Updated", description)


def _port_out_from_sale(sale: SaleRecord, sr_no: int, now: datetime) -> PortOutRecord:
    return PortOutRecord(
        sr_no=sr_no,
        mobile=sale.mobile,
        sum=sale.sum,
        sold_to=sale.sold_to,
        sale_price=sale.sale_price,
        sale_date=sale.sale_date,
        payment_status=sale.payment_status,
        upc_status=sale.upc_status,
        upload_status=sale.upload_status,
        port_out_date=now,
        original_number_data=sale.original_number_data,
        created_by_user_id=sale.created_by_user_id,
    )


def mark_ported_out(user: User, sale_id: int) -> tuple[PortOutRecord, Notification]:
    sale = get_sale(user, sale_id)
    if not sale.original_number_data:
        raise SaleStateError("Could not find original number data to archive.")

    port_out = _port_out_from_sale(sale, next_sr_no(PortOutRecord), utcnow())
    db.session.add(port_out)
    db.session.delete(sale)

    description = f"Number {sale.mobile} has been ported out and moved to history."
    log_user_activity(user, "Marked Port Out Done", description)
    db.session.commit()

    return port_out, Notification("Ported Out", description)


def bulk_port_out(user: User, sale_ids: list[int]) -> tuple[list[PortOutRecord], list[SaleRecord], Notification]:
    """
    Port out every selected sale whose UPC is Generated.

    Returns (port_outs, skipped_sales, notification). When nothing is
    eligible nothing is written, not even an Activity, and the
    notification is destructive.
    """
    sales = get_sales(user, sale_ids)
    eligible = [s for s in sales if s.upc_status == UPC_GENERATED]
    skipped = [s for s in sales if s.upc_status != UPC_GENERATED]

    if not eligible:
        return [], skipped, Notification(
            "No Eligible Records",
            "None of the selected records have a 'Generated' UPC status.",
            variant=VARIANT_DESTRUCTIVE,
        )

    now = utcnow()
    sr_no = next_sr_no(PortOutRecord)
    port_outs = []
    for sale in eligible:
        port_outs.append(_port_out_from_sale(sale, sr_no, now))
        db.session.add(port_outs[-1])
        db.session.delete(sale)
        sr_no += 1

    log_user_activity(user, "Bulk Port Out", f"Bulk ported out {len(port_outs)} record(s).")
    db.session.commit()

    description = f"{len(port_outs)} record(s) marked as ported out."
    if skipped:
        description += f" {len(skipped)} record(s) were skipped because their UPC was not generated."
    return port_outs, skipped, Notification("Bulk Port Out Successful", description)


def cancel_sale(user: User, sale_id: int) -> tuple[NumberRecord, Notification]:
    """Put the sold number back in inventory, unassigned."""
    sale = get_sale(user, sale_id)
    snapshot = sale.original_number_data
    if not snapshot:
        raise SaleStateError("Could not find original number data to restore.")

    number = NumberRecord(
        sr_no=snapshot.get("sr_no") or next_sr_no(NumberRecord),
        mobile=sale.mobile,
        sum=snapshot.get("sum") if snapshot.get("sum") is not None else digital_root(sale.mobile),
        status=snapshot.get("status") or "Non-RTS",
        number_type=snapshot.get("number_type") or "Prepaid",
        purchase_from=snapshot.get("purchase_from") or "N/A",
        purchase_price=snapshot.get("purchase_price") or 0,
        purchase_date=parse_iso_datetime(snapshot.get("purchase_date")) or sale.sale_date,
        sale_price=snapshot.get("sale_price"),
        rts_date=parse_iso_datetime(snapshot.get("rts_date")),
        current_location=snapshot.get("current_location") or "N/A",
        location_type=snapshot.get("location_type") or "Store",
        assigned_to=UNASSIGNED,
        name=UNASSIGNED,
        notes=snapshot.get("notes"),
        activation_status=snapshot.get("activation_status") or "Pending",
        upload_status=snapshot.get("upload_status") or sale.upload_status,
        upc_status=snapshot.get("upc_status") or "Pending",
        check_in_date=parse_iso_datetime(snapshot.get("check_in_date")),
        safe_custody_date=parse_iso_datetime(snapshot.get("safe_custody_date")),
        safe_custody_notified=False,
        created_by_user_id=snapshot.get("created_by_user_id"),
    )
    # Flush the delete first so the unique mobile is free again
    db.session.delete(sale)
    db.session.flush()
    db.session.add(number)

    description = f"Sale of number {sale.mobile} was cancelled."
    log_user_activity(user, "Cancelled Sale", description)
    db.session.commit()

    return number, Notification("Sale Cancelled", description)


def update_port_out_payment(user: User, port_out_id: int, payment_status: str) -> tuple[PortOutRecord, Notification]:
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError({"payment_status": f"payment_status must be one of: {', '.join(PAYMENT_STATUSES)}"})

    port_out = get_port_out(port_out_id)
    port_out.payment_status = payment_status

    description = f"Updated payment status for {port_out.mobile} to {payment_status}."
    log_user_activity(user, "Updated Port Out Status", description)
    db.session.commit()

    return port_out, Notification("Port Out Updated", description)


def bulk_update_port_out_payment(user: User, port_out_ids: list[int], payment_status: str) -> tuple[list[PortOutRecord], Notification]:
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError({"payment_status": f"payment_status must be one of: {', '.join(PAYMENT_STATUSES)}"})

    port_outs = load_many(PortOutRecord, port_out_ids, PORT_OUT_KIND)
    for port_out in port_outs:
        port_out.payment_status = payment_status

    log_user_activity(
        user,
        "Bulk Updated Port Out Payment Status",
        f"Updated payment status for {len(port_outs)} port out record(s) to {payment_status}.",
    )
    db.session.commit()

    return port_outs, Notification("Update Successful", f"Updated payment status for {len(port_outs)} record(s).")
