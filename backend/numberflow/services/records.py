# Overview: Helpers shared by the store services: serial numbers, duplicate checks, notifications.

from __future__ import annotations

from dataclasses import asdict, dataclass

from sqlalchemy import func

from ..extensions import db
from ..models import DealerPurchaseRecord, NumberRecord, PortOutRecord, SaleRecord


VARIANT_DEFAULT = "default"
VARIANT_DESTRUCTIVE = "destructive"

# Tables whose mobiles must stay unique across the whole inventory
MOBILE_TABLES = (NumberRecord, SaleRecord, PortOutRecord, DealerPurchaseRecord)


@dataclass(frozen=True)
class Notification:
    """Transient message returned to the caller of a mutation."""
    title: str
    description: str
    variant: str = VARIANT_DEFAULT

    def to_dict(self) -> dict:
        return asdict(self)


class RecordNotFoundError(Exception):
    """Raised when a targeted record id does not exist."""

    def __init__(self, kind: str, record_id):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class DuplicateMobileError(Exception):
    def __init__(self, mobile: str):
        self.mobile = mobile
        super().__init__(f"The mobile number {mobile} already exists in the system.")


def next_sr_no(model) -> int:
    """max(sr_no) + 1 over the table, 1 when empty."""
    current = db.session.query(func.max(model.sr_no)).scalar()
    return (current or 0) + 1


def existing_mobiles() -> set[str]:
    mobiles: set[str] = set()
    for model in MOBILE_TABLES:
        mobiles.update(m for (m,) in db.session.query(model.mobile).all())
    return mobiles


def is_mobile_duplicate(mobile: str, *, exclude=None) -> bool:
    """
    True when the mobile already exists in numbers, sales, port-outs or
    dealer purchases. `exclude` skips one (model, id) pair, for edits.
    """
    if not mobile:
        return False
    for model in MOBILE_TABLES:
        query = db.session.query(model.id).filter(model.mobile == mobile)
        if exclude is not None and exclude[0] is model:
            query = query.filter(model.id != exclude[1])
        if query.first() is not None:
            return True
    return False


def get_or_404(model, record_id, kind: str):
    record = db.session.get(model, record_id)
    if record is None:
        raise RecordNotFoundError(kind, record_id)
    return record


def load_many(model, record_ids, kind: str) -> list:
    """Fetch every id or raise for the first missing one; keeps input order."""
    rows = db.session.query(model).filter(model.id.in_(record_ids)).all()
    by_id = {row.id: row for row in rows}
    for record_id in record_ids:
        if record_id not in by_id:
            raise RecordNotFoundError(kind, record_id)
    return [by_id[record_id] for record_id in dict.fromkeys(record_ids)]
