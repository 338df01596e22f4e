from __future__ import annotations

from ..extensions import db
from numberflow.time_utils import to_utc_z


PAYMENT_PENDING = "Pending"
PAYMENT_DONE = "Done"
PAYMENT_STATUSES = (PAYMENT_PENDING, PAYMENT_DONE)

UPC_GENERATED = "Generated"
UPC_PENDING = "Pending"


class SaleRecord(db.Model):
    """
    A sold number awaiting payment and port-out.

    original_number_data keeps the NumberRecord columns as they were at sale
    time so a cancelled sale can be restored to inventory.
    """
    __tablename__ = "sales"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sr_no = db.Column(db.Integer, nullable=False, index=True)

    mobile = db.Column(db.String(16), nullable=False, unique=True, index=True)
    sum = db.Column(db.Integer, nullable=False)

    sold_to = db.Column(db.String(255), nullable=False)
    sale_price = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)
    sale_date = db.Column(db.DateTime(timezone=True), nullable=False)

    payment_status = db.Column(db.String(16), nullable=False, default=PAYMENT_PENDING)
    upc_status = db.Column(db.String(16), nullable=False, default=UPC_PENDING)
    port_out_status = db.Column(db.String(16), nullable=False, default="Pending")
    upload_status = db.Column(db.String(16), nullable=False, default="Pending")

    original_number_data = db.Column(db.JSON, nullable=True)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def assigned_to(self) -> str | None:
        return (self.original_number_data or {}).get("assigned_to")

    @property
    def purchase_price(self):
        return (self.original_number_data or {}).get("purchase_price") or 0

    @property
    def purchase_from(self) -> str:
        return (self.original_number_data or {}).get("purchase_from") or "N/A"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sr_no": self.sr_no,
            "mobile": self.mobile,
            "sum": self.sum,
            "sold_to": self.sold_to,
            "sale_price": self.sale_price,
            "sale_date": to_utc_z(self.sale_date),
            "payment_status": self.payment_status,
            "upc_status": self.upc_status,
            "port_out_status": self.port_out_status,
            "upload_status": self.upload_status,
            "original_number_data": self.original_number_data,
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }


class PortOutRecord(db.Model):
    """
    Port-out history. Same shape as a sale, with the port-out completion
    date in place of the port-out status.
    """
    __tablename__ = "port_outs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sr_no = db.Column(db.Integer, nullable=False, index=True)

    mobile = db.Column(db.String(16), nullable=False, unique=True, index=True)
    sum = db.Column(db.Integer, nullable=False)

    sold_to = db.Column(db.String(255), nullable=False)
    sale_price = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)
    sale_date = db.Column(db.DateTime(timezone=True), nullable=False)

    payment_status = db.Column(db.String(16), nullable=False, default=PAYMENT_PENDING)
    upc_status = db.Column(db.String(16), nullable=False, default=UPC_PENDING)
    upload_status = db.Column(db.String(16), nullable=False, default="Pending")

    port_out_date = db.Column(db.DateTime(timezone=True), nullable=False)

    original_number_data = db.Column(db.JSON, nullable=True)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sr_no": self.sr_no,
            "mobile": self.mobile,
            "sum": self.sum,
            "sold_to": self.sold_to,
            "sale_price": self.sale_price,
            "sale_date": to_utc_z(self.sale_date),
            "payment_status": self.payment_status,
            "upc_status": self.upc_status,
            "upload_status": self.upload_status,
            "port_out_date": to_utc_z(self.port_out_date),
            "original_number_data": self.original_number_data,
            "created_by_user_id": self.created_by_user_id,
        }
