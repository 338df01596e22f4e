from __future__ import annotations

from ..extensions import db
from numberflow.time_utils import to_utc_z


STATUS_RTS = "RTS"
STATUS_NON_RTS = "Non-RTS"
RTS_STATUSES = (STATUS_RTS, STATUS_NON_RTS)

NUMBER_TYPES = ("Prepaid", "Postpaid", "COCP")
LOCATION_TYPES = ("Store", "Employee", "Dealer")
PROGRESS_STATUSES = ("Done", "Pending", "Fail")
UPC_STATUSES = ("Generated", "Pending")

UNASSIGNED = "Unassigned"


class NumberRecord(db.Model):
    """
    A mobile number held in inventory.

    The row lives here from purchase until it is sold; selling moves it into
    the sales table (with a snapshot of these columns) and cancelling the sale
    restores it.

    RTS INVARIANT:
    - status == "RTS" implies rts_date is NULL
    - a non-NULL rts_date implies status == "Non-RTS" until the sweep flips it
    """
    __tablename__ = "numbers"
    __table_args__ = (
        db.Index("ix_numbers_status_rts_date", "status", "rts_date"),
        db.Index("ix_numbers_assigned_to", "assigned_to"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sr_no = db.Column(db.Integer, nullable=False, index=True)

    mobile = db.Column(db.String(16), nullable=False, unique=True, index=True)
    # Digital root of the mobile, computed once when the row is written
    sum = db.Column(db.Integer, nullable=False)

    status = db.Column(db.String(16), nullable=False, default=STATUS_NON_RTS)
    number_type = db.Column(db.String(16), nullable=False, default="Prepaid")

    purchase_from = db.Column(db.String(255), nullable=False, default="N/A")
    purchase_price = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    purchase_date = db.Column(db.DateTime(timezone=True), nullable=False)
    sale_price = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=True)

    rts_date = db.Column(db.DateTime(timezone=True), nullable=True)

    current_location = db.Column(db.String(255), nullable=False, default="N/A")
    location_type = db.Column(db.String(16), nullable=False, default="Store")
    assigned_to = db.Column(db.String(128), nullable=False, default=UNASSIGNED)
    name = db.Column(db.String(128), nullable=False, default=UNASSIGNED)
    notes = db.Column(db.Text, nullable=True)

    activation_status = db.Column(db.String(16), nullable=False, default="Pending")
    upload_status = db.Column(db.String(16), nullable=False, default="Pending")
    upc_status = db.Column(db.String(16), nullable=False, default="Pending")

    check_in_date = db.Column(db.DateTime(timezone=True), nullable=True)
    safe_custody_date = db.Column(db.DateTime(timezone=True), nullable=True)
    safe_custody_notified = db.Column(db.Boolean, nullable=False, default=False)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<NumberRecord id={self.id} mobile={self.mobile!r} status={self.status!r}>"

    def snapshot(self) -> dict:
        """Column values carried along when the number moves to sales."""
        return {
            "sr_no": self.sr_no,
            "mobile": self.mobile,
            "sum": self.sum,
            "status": self.status,
            "number_type": self.number_type,
            "purchase_from": self.purchase_from,
            "purchase_price": self.purchase_price,
            "purchase_date": to_utc_z(self.purchase_date),
            "sale_price": self.sale_price,
            "rts_date": to_utc_z(self.rts_date),
            "current_location": self.current_location,
            "location_type": self.location_type,
            "assigned_to": self.assigned_to,
            "name": self.name,
            "notes": self.notes,
            "activation_status": self.activation_status,
            "upload_status": self.upload_status,
            "upc_status": self.upc_status,
            "check_in_date": to_utc_z(self.check_in_date),
            "safe_custody_date": to_utc_z(self.safe_custody_date),
            "created_by_user_id": self.created_by_user_id,
        }

    def to_dict(self) -> dict:
        data = self.snapshot()
        data.update({
            "id": self.id,
            "safe_custody_notified": self.safe_custody_notified,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        })
        return data
