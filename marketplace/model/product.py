# marketplace/model/product.py
from sqlalchemy.sql import func

from ..extensions import db
from ..utils.money import to_float
from ..utils.parse import iso

DEFAULT_STOCK = 999


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text)
    category = db.Column(db.String(120))

    price = db.Column(db.Numeric(12, 2), nullable=False)
    original_price = db.Column(db.Numeric(12, 2))
    discount_percentage = db.Column(db.Numeric(5, 2), default=0)

    image_url = db.Column(db.String(1024))
    images = db.Column(db.JSON)
    video = db.Column(db.String(1024))

    stock_quantity = db.Column(db.Integer, default=DEFAULT_STOCK)
    stock = db.Column(db.Integer, default=DEFAULT_STOCK)
    in_stock = db.Column(db.Boolean, default=True)

    is_active = db.Column(db.Boolean, default=True, index=True)
    is_featured = db.Column(db.Boolean, default=False)
    promotional = db.Column(db.Boolean, default=False)
    # only surfaced through ads/offers, hidden from the storefront
    ad_only = db.Column(db.Boolean, default=False, index=True)

    created_at = db.Column(db.DateTime, server_default=func.now(), index=True)
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    business = db.relationship("Business", back_populates="products", lazy="joined")

    def as_api(self, with_business=True):
        data = {
            "id": self.id,
            "business_id": self.business_id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "price": to_float(self.price),
            "original_price": to_float(self.original_price),
            "discount_percentage": to_float(self.discount_percentage),
            "image_url": self.image_url,
            "images": self.images,
            "video": self.video,
            "stock_quantity": self.stock_quantity,
            "stock": self.stock,
            "in_stock": self.in_stock,
            "is_active": self.is_active,
            "is_featured": self.is_featured,
            "promotional": self.promotional,
            "ad_only": bool(self.ad_only),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if with_business:
            b = self.business
            data.update({
                "business_name": b.name if b else None,
                "business_logo": b.logo_url if b else None,
                "business_image": b.image_url if b else None,
            })
        return data
