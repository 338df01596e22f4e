from __future__ import annotations

from ..extensions import db
from numberflow.time_utils import to_utc_z


class PurchaseRecord(db.Model):
    """Acquisition of a number from a vendor."""
    __tablename__ = "purchases"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sr_no = db.Column(db.Integer, nullable=False, index=True)

    mobile = db.Column(db.String(16), nullable=False, index=True)
    purchased_from = db.Column(db.String(255), nullable=False)
    purchase_price = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)
    purchase_date = db.Column(db.DateTime(timezone=True), nullable=False)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sr_no": self.sr_no,
            "mobile": self.mobile,
            "purchased_from": self.purchased_from,
            "purchase_price": self.purchase_price,
            "purchase_date": to_utc_z(self.purchase_date),
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }


class DealerPurchaseRecord(db.Model):
    """
    Number bought from another dealer, tracked only until it is paid for
    and ported out.
    """
    __tablename__ = "dealer_purchases"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sr_no = db.Column(db.Integer, nullable=False, index=True)

    mobile = db.Column(db.String(16), nullable=False, unique=True, index=True)
    sum = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)

    payment_status = db.Column(db.String(16), nullable=False, default="Pending")
    port_out_status = db.Column(db.String(16), nullable=False, default="Pending")
    upc_status = db.Column(db.String(16), nullable=False, default="Pending")

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sr_no": self.sr_no,
            "mobile": self.mobile,
            "sum": self.sum,
            "price": self.price,
            "payment_status": self.payment_status,
            "port_out_status": self.port_out_status,
            "upc_status": self.upc_status,
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }
