# marketplace/model/business.py
from sqlalchemy.sql import func

from ..extensions import db
from ..utils.money import to_float
from ..utils.parse import iso

DEFAULT_RATING = 4.5
PLACEHOLDER_IMAGE = "https://images.unsplash.com/photo-1556761175-b413da4baf72?w=800"


class Business(db.Model):
    __tablename__ = "businesses"

    id = db.Column(db.Integer, primary_key=True)
    # numeric user id or external auth UID, both stored as text
    owner_id = db.Column(db.String(128), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)

    logo_url = db.Column(db.String(1024))
    banner_url = db.Column(db.String(1024))
    image_url = db.Column(db.String(1024))

    address = db.Column(db.Text)
    phone = db.Column(db.String(50))
    email = db.Column(db.String(255))
    website = db.Column(db.String(512))

    categories = db.Column(db.JSON)        # ["bakery", "cafe"]
    payment_methods = db.Column(db.JSON)   # ["cash", "upi"]
    delivery_options = db.Column(db.JSON)

    delivery_fee = db.Column(db.Numeric(12, 2))
    minimum_order = db.Column(db.Numeric(12, 2))
    delivery_time = db.Column(db.String(64))
    rating = db.Column(db.Numeric(3, 2))

    spin_wheel_enabled = db.Column(db.Boolean, default=False)
    spin_discount_type = db.Column(db.String(16))
    spin_discount_value = db.Column(db.Numeric(12, 2))

    is_active = db.Column(db.Boolean, default=True, index=True)

    created_at = db.Column(db.DateTime, server_default=func.now(), index=True)
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    products = db.relationship("Product", back_populates="business", lazy="select")

    def as_api(self):
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "description": self.description,
            "logo_url": self.logo_url,
            "banner_url": self.banner_url,
            "image_url": self.image_url,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "website": self.website,
            "categories": self.categories,
            "payment_methods": self.payment_methods,
            "delivery_options": self.delivery_options,
            "delivery_fee": to_float(self.delivery_fee) if self.delivery_fee is not None else None,
            "minimum_order": to_float(self.minimum_order) if self.minimum_order is not None else None,
            "delivery_time": self.delivery_time,
            "rating": to_float(self.rating) if self.rating else DEFAULT_RATING,
            "spin_wheel_enabled": bool(self.spin_wheel_enabled),
            "spin_discount_type": self.spin_discount_type,
            "spin_discount_value": to_float(self.spin_discount_value) if self.spin_discount_value is not None else None,
            "is_active": self.is_active,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
