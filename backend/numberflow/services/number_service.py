# Overview: Service-layer operations for number inventory; encapsulates business logic and database work.

"""
Number Inventory Service

Every mutation:
- touches only the targeted record(s)
- stages exactly one Activity in the same transaction
- commits once and returns a Notification for the caller

Visibility: admins work with every number; employees only with numbers
assigned to their display name. A number outside the caller's scope is
reported as not found.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..extensions import db
from ..models import NumberRecord, User
from ..models.numbers import (
    LOCATION_TYPES,
    NUMBER_TYPES,
    PROGRESS_STATUSES,
    RTS_STATUSES,
    STATUS_NON_RTS,
    STATUS_RTS,
    UNASSIGNED,
)
from numberflow.time_utils import parse_loose_date, utcnow
from numberflow.validation import MOBILE_RE, ValidationError
from .activity_service import log_user_activity
from .derived_fields import digital_root
from .records import (
    DuplicateMobileError,
    Notification,
    RecordNotFoundError,
    existing_mobiles,
    is_mobile_duplicate,
    load_many,
    next_sr_no,
)


NUMBER_KIND = "Number"


def scoped_query(user: User):
    query = db.session.query(NumberRecord)
    if not user.is_admin:
        query = query.filter(NumberRecord.assigned_to == user.display_name)
    return query


def list_numbers(user: User) -> list[NumberRecord]:
    return scoped_query(user).order_by(NumberRecord.sr_no).all()


def get_number(user: User, number_id: int) -> NumberRecord:
    number = scoped_query(user).filter(NumberRecord.id == number_id).first()
    if number is None:
        raise RecordNotFoundError(NUMBER_KIND, number_id)
    return number


def get_numbers(user: User, number_ids: list[int]) -> list[NumberRecord]:
    numbers = load_many(NumberRecord, number_ids, NUMBER_KIND)
    if not user.is_admin:
        for number in numbers:
            if number.assigned_to != user.display_name:
                raise RecordNotFoundError(NUMBER_KIND, number.id)
    return numbers


def append_note(existing: str | None, note: str | None) -> str | None:
    """Existing notes plus the new note on its own line."""
    note = (note or "").strip()
    if not note:
        return existing
    if not existing:
        return note
    return f"{existing}\n{note}"


def build_number(
    *,
    mobile: str,
    status: str,
    purchase_price: float,
    purchase_date: datetime,
    assigned_to: str,
    sr_no: int,
    user_id: int | None,
    number_type: str = "Prepaid",
    purchase_from: str = "N/A",
    sale_price: float | None = None,
    rts_date: datetime | None = None,
    safe_custody_date: datetime | None = None,
    current_location: str = "N/A",
    location_type: str = "Store",
    upload_status: str = "Pending",
    activation_status: str = "Pending",
    notes: str | None = None,
) -> NumberRecord:
    """
    New NumberRecord with its derived fields filled in.

    rts_date survives only on Non-RTS numbers and safe_custody_date only on
    COCP numbers.
    """
    return NumberRecord(
        sr_no=sr_no,
        mobile=mobile,
        sum=digital_root(mobile),
        status=status,
        number_type=number_type,
        purchase_from=purchase_from or "N/A",
        purchase_price=purchase_price,
        purchase_date=purchase_date,
        sale_price=sale_price,
        rts_date=rts_date if status == STATUS_NON_RTS else None,
        safe_custody_date=safe_custody_date if number_type == "COCP" else None,
        safe_custody_notified=False,
        current_location=current_location or "N/A",
        location_type=location_type,
        assigned_to=assigned_to,
        name=assigned_to,
        notes=notes or None,
        activation_status=activation_status,
        upload_status=upload_status,
        upc_status="Pending",
        check_in_date=None,
        created_by_user_id=user_id,
    )


def add_number(user: User, data: dict) -> tuple[NumberRecord, Notification]:
    """
    Manually add a number. The number is assigned to the caller.

    `data` holds already-validated fields (see routes.numbers).
    Raises DuplicateMobileError.
    """
    mobile = data["mobile"]
    if is_mobile_duplicate(mobile):
        raise DuplicateMobileError(mobile)

    if data.get("number_type") == "COCP" and not data.get("safe_custody_date"):
        raise ValidationError({"safe_custody_date": "Safe custody date is required for COCP numbers"})

    owner = user.display_name or "User"
    number = build_number(
        sr_no=next_sr_no(NumberRecord),
        assigned_to=owner,
        user_id=user.id,
        **data,
    )
    db.session.add(number)
    log_user_activity(user, "Added Number", f"Manually added new number {mobile}")
    db.session.commit()

    return number, Notification("Number Added", f"Number {mobile} has been added to inventory.")


def update_number_status(
    user: User,
    number_id: int,
    status: str,
    rts_date: datetime | None = None,
    note: str | None = None,
) -> tuple[NumberRecord, Notification]:
    """
    Set RTS / Non-RTS. Setting RTS clears rts_date; a note is appended to
    the existing notes on a new line.
    """
    if status not in RTS_STATUSES:
        raise ValidationError({"status": f"status must be one of: {', '.join(RTS_STATUSES)}"})

    number = get_number(user, number_id)
    number.status = status
    number.rts_date = None if status == STATUS_RTS else rts_date
    number.notes = append_note(number.notes, note)

    log_user_activity(user, "Updated RTS Status", f"Marked {number.mobile} as {status}")
    db.session.commit()

    return number, Notification("Status Updated", f"Marked {number.mobile} as {status}")


def update_upload_status(user: User, number_id: int, upload_status: str) -> tuple[NumberRecord, Notification]:
    if upload_status not in PROGRESS_STATUSES:
        raise ValidationError({"upload_status": f"upload_status must be one of: {', '.join(PROGRESS_STATUSES)}"})

    number = get_number(user, number_id)
    number.upload_status = upload_status

    description = f"Set upload status for {number.mobile} to {upload_status}"
    log_user_activity(user, "Updated Upload Status", description)
    db.session.commit()

    return number, Notification("Upload Status Updated", description)


def update_activation_details(
    user: User,
    number_id: int,
    activation_status: str,
    upload_status: str,
    note: str | None = None,
) -> tuple[NumberRecord, Notification]:
    errors = {}
    if activation_status not in PROGRESS_STATUSES:
        errors["activation_status"] = f"activation_status must be one of: {', '.join(PROGRESS_STATUSES)}"
    if upload_status not in PROGRESS_STATUSES:
        errors["upload_status"] = f"upload_status must be one of: {', '.join(PROGRESS_STATUSES)}"
    if errors:
        raise ValidationError(errors)

    number = get_number(user, number_id)
    number.activation_status = activation_status
    number.upload_status = upload_status
    number.notes = append_note(number.notes, note)

    description = (
        f"Updated activation for {number.mobile}. "
        f"Activation: {activation_status}, Upload: {upload_status}."
    )
    log_user_activity(user, "Updated Activation Details", description)
    db.session.commit()

    return number, Notification("Activation Details Updated", description)


def update_safe_custody_date(user: User, number_id: int, safe_custody_date: datetime) -> tuple[NumberRecord, Notification]:
    """
    Move a COCP number's safe-custody date. The arrival notice is re-armed
    so the sweep reports the new date.
    """
    number = get_number(user, number_id)
    if number.number_type != "COCP":
        raise ValidationError({"safe_custody_date": "Safe custody dates apply to COCP numbers only"})

    number.safe_custody_date = safe_custody_date
    number.safe_custody_notified = False

    description = f"Updated Safe Custody Date for {number.mobile} to {safe_custody_date:%Y-%m-%d}"
    log_user_activity(user, "Updated Safe Custody Date", description)
    db.session.commit()

    return number, Notification("Safe Custody Date Updated", description)


def assign_numbers(user: User, number_ids: list[int], employee_name: str) -> tuple[list[NumberRecord], Notification]:
    employee_name = (employee_name or "").strip()
    if not employee_name:
        raise ValidationError({"employee_name": "employee_name is required"})

    numbers = get_numbers(user, number_ids)
    for number in numbers:
        number.assigned_to = employee_name
        number.name = employee_name
        number.location_type = "Employee"
        number.current_location = f"Employee - {employee_name}"

    description = f"Assigned {len(numbers)} number(s) to {employee_name}."
    log_user_activity(user, "Assigned Numbers", description)
    db.session.commit()

    return numbers, Notification("Numbers Assigned", description)


def check_in_number(user: User, number_id: int) -> tuple[NumberRecord, Notification]:
    number = get_number(user, number_id)
    number.check_in_date = utcnow()

    description = f"Checked in SIM number {number.mobile}."
    log_user_activity(user, "Checked In Number", description)
    db.session.commit()

    return number, Notification("Number Checked In", description)


# =============================================================================
# BULK IMPORT
# =============================================================================


@dataclass
class FailedRow:
    record: dict
    reason: str

    def to_dict(self) -> dict:
        return {"record": self.record, "reason": self.reason}


@dataclass
class BulkAddResult:
    valid_records: list = field(default_factory=list)
    failed_records: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid_records": [n.to_dict() for n in self.valid_records],
            "failed_records": [f.to_dict() for f in self.failed_records],
        }


def _cell(row: dict, *names: str) -> str:
    """First non-empty cell among the header spellings seen in real sheets."""
    for name in names:
        value = row.get(name)
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return ""


def _parse_price(raw: str) -> float | None:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value != value or value < 0:
        return None
    return value


def _row_to_fields(row: dict) -> tuple[dict | None, str | None]:
    """Validate one sheet row. Returns (fields, None) or (None, reason)."""
    mobile = _cell(row, "Mobile")
    if not MOBILE_RE.match(mobile):
        return None, "Invalid or missing mobile number (must be 10 digits)."

    status = _cell(row, "Status")
    if status not in RTS_STATUSES:
        return None, 'Status is a required field. Must be "RTS" or "Non-RTS".'

    upload_status = _cell(row, "UploadStatus")
    if upload_status not in ("Pending", "Done"):
        upload_status = "Pending"

    number_type = _cell(row, "NumberType")
    if number_type not in NUMBER_TYPES:
        number_type = "Prepaid"

    safe_custody_date = parse_loose_date(_cell(row, "SafeCustodyDate"))
    if number_type == "COCP" and safe_custody_date is None:
        return None, "Invalid or missing SafeCustodyDate (required for COCP)."

    purchase_date = parse_loose_date(_cell(row, "PurchaseDate"))
    if purchase_date is None:
        return None, "Invalid or missing PurchaseDate."

    purchase_price = _parse_price(_cell(row, "PurchasePrice"))
    if purchase_price is None:
        return None, "Invalid or missing PurchasePrice. Must be a number."

    sale_price = _parse_price(_cell(row, "SalePrice")) if _cell(row, "SalePrice") else 0.0

    location_type = _cell(row, "LocationType")
    if location_type not in LOCATION_TYPES:
        location_type = "Store"

    return {
        "mobile": mobile,
        "status": status,
        "upload_status": upload_status,
        "number_type": number_type,
        "purchase_from": _cell(row, "PurchaseFrom") or "N/A",
        "purchase_price": purchase_price,
        "purchase_date": purchase_date,
        "sale_price": sale_price or 0.0,
        "rts_date": parse_loose_date(_cell(row, "RTSDate", "RTSDate ")),
        "safe_custody_date": safe_custody_date,
        "current_location": _cell(row, "CurrentLocation") or "N/A",
        "location_type": location_type,
        "notes": _cell(row, "Notes") or None,
    }, None


def bulk_add_numbers(user: User, rows: list[dict], source: str = "upload") -> tuple[BulkAddResult, Notification]:
    """
    Import sheet rows as numbers assigned to the caller.

    Rows are checked independently; a bad row is reported with its reason
    and does not stop the rest. Duplicates are checked against the whole
    inventory and against earlier rows of the same sheet.
    """
    result = BulkAddResult()
    seen = existing_mobiles()
    owner = user.display_name or "User"
    sr_no = next_sr_no(NumberRecord)

    for row in rows:
        fields, reason = _row_to_fields(row)
        if reason:
            result.failed_records.append(FailedRow(row, reason))
            continue
        if fields["mobile"] in seen:
            result.failed_records.append(FailedRow(row, "Duplicate mobile number."))
            continue

        number = build_number(sr_no=sr_no, assigned_to=owner, user_id=user.id, **fields)
        db.session.add(number)
        result.valid_records.append(number)
        seen.add(fields["mobile"])
        sr_no += 1

    description = (
        f"Imported {len(result.valid_records)} record(s) from {source}; "
        f"{len(result.failed_records)} failed."
    )
    log_user_activity(user, "Imported Data", description)
    db.session.commit()

    if result.valid_records:
        notification = Notification("Import Complete", description)
    else:
        notification = Notification("Import Failed", description, variant="destructive")
    return result, notification
