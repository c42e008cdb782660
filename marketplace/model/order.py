from datetime import datetime

from ..extensions import db
from ..utils.money import to_float
from ..utils.parse import iso

# confirmation emails treat an order without a delivery type as a delivery
DEFAULT_DELIVERY_TYPE = "delivery"

MONEY_FIELDS = ("subtotal", "shipping_fee", "total_amount", "discount_amount")


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    # e.g. "ORD-1729331200123-42"; not unique, see services.order_service
    order_number = db.Column(db.String(40), index=True, nullable=False)
    status = db.Column(db.String(32), default="pending", index=True)
    tracking_number = db.Column(db.String(120))

    # external auth UID or numeric id as text
    user_id = db.Column(db.String(128), index=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), index=True)

    # Cart snapshot: [{"name", "quantity", "price", "image", ...}]
    items = db.Column(db.JSON)

    # Money snapshot
    subtotal = db.Column(db.Numeric(12, 2))
    shipping_fee = db.Column(db.Numeric(12, 2))
    discount_code = db.Column(db.String(64), index=True)
    discount_amount = db.Column(db.Numeric(12, 2), default=0)
    total_amount = db.Column(db.Numeric(12, 2))

    delivery_type = db.Column(db.String(20))
    delivery_address = db.Column(db.JSON)  # free text or {"street", "city", ...}
    payment_method = db.Column(db.String(40))

    # Customer snapshot
    customer_name = db.Column(db.String(120))
    customer_email = db.Column(db.String(255))
    customer_phone = db.Column(db.String(50))
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    business = db.relationship("Business", lazy="joined")

    def as_api(self):
        data = {
            "id": self.id,
            "order_number": self.order_number,
            "status": self.status,
            "tracking_number": self.tracking_number,
            "user_id": self.user_id,
            "business_id": self.business_id,
            "items": self.items or [],
            "discount_code": self.discount_code,
            "delivery_type": self.delivery_type,
            "delivery_address": self.delivery_address,
            "payment_method": self.payment_method,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "notes": self.notes,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        for field in MONEY_FIELDS:
            data[field] = to_float(getattr(self, field))
        data["delivery_fee"] = data["shipping_fee"]
        return data

    def as_detail(self):
        b = self.business
        return {
            **self.as_api(),
            "business_name": b.name if b else None,
            "business_user_id": b.owner_id if b else None,
        }

    def as_history_row(self):
        b = self.business
        items = self.items if isinstance(self.items, list) else []
        first = items[0] if items and isinstance(items[0], dict) else {}
        return {
            **self.as_api(),
            "business_name": b.name if b else None,
            "business_logo": b.logo_url if b else None,
            "items_count": len(items),
            "first_item_name": first.get("name"),
            "first_item_image": first.get("image"),
        }
