# --- marketplace/model/promotional.py ---
from sqlalchemy.sql import func

from ..extensions import db
from ..utils.money import to_float
from ..utils.parse import iso


class PromotionalCode(db.Model):
    __tablename__ = "promotional_codes"

    id = db.Column(db.Integer, primary_key=True)
    # matched case-insensitively, see services.promo_service
    code = db.Column(db.String(64), nullable=False, index=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), index=True)

    # "percent" or "fixed"
    discount_type = db.Column(db.String(16), nullable=False, default="percent")
    discount_value = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    min_order_amount = db.Column(db.Numeric(12, 2))

    usage_limit = db.Column(db.Integer)          # global cap, NULL/0 = unlimited
    used_count = db.Column(db.Integer, nullable=False, default=0)
    max_uses_per_user = db.Column(db.Integer)    # counted against orders.discount_code

    valid_from = db.Column(db.DateTime)
    valid_until = db.Column(db.DateTime)
    is_active = db.Column(db.Boolean, default=True, index=True)

    created_at = db.Column(db.DateTime, server_default=func.now())

    business = db.relationship("Business", lazy="joined")

    def as_api(self):
        return {
            "id": self.id,
            "code": self.code,
            "business_id": self.business_id,
            "business_name": self.business.name if self.business else None,
            "discount_type": self.discount_type,
            "discount_value": to_float(self.discount_value),
            "min_order_amount": to_float(self.min_order_amount) if self.min_order_amount is not None else None,
            "usage_limit": self.usage_limit,
            "used_count": self.used_count or 0,
            "max_uses_per_user": self.max_uses_per_user,
            "valid_from": iso(self.valid_from),
            "valid_until": iso(self.valid_until),
            "is_active": self.is_active,
            "created_at": iso(self.created_at),
        }
