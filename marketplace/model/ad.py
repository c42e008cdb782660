# marketplace/model/ad.py
from datetime import datetime

from sqlalchemy.sql import func

from ..extensions import db
from ..utils.money import to_float
from ..utils.parse import iso

FALLBACK_PRODUCT_IMAGE = "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=500"


class Ad(db.Model):
    __tablename__ = "ads"

    id = db.Column(db.Integer, primary_key=True)
    # one ad per business is checked by the routes, not by a constraint
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)

    # offer-style ads
    discount_text = db.Column(db.String(64))
    start_date = db.Column(db.DateTime)
    end_date = db.Column(db.DateTime)

    is_active = db.Column(db.Boolean, default=True, index=True)
    created_at = db.Column(db.DateTime, server_default=func.now(), index=True)
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    business = db.relationship("Business", lazy="joined")
    products = db.relationship(
        "AdProduct",
        back_populates="ad",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="AdProduct.id.asc()",
    )

    def as_api(self):
        return {
            "id": self.id,
            "business_id": self.business_id,
            "title": self.title,
            "description": self.description,
            "discount_text": self.discount_text,
            "start_date": iso(self.start_date),
            "end_date": iso(self.end_date),
            "is_active": self.is_active,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }

    def as_listing(self):
        """Ad with business summary and its product set aggregated."""
        b = self.business
        return {
            **self.as_api(),
            "business_name": b.name if b else None,
            "business_category": b.categories if b else None,
            "business_logo": b.logo_url if b else None,
            "products": [ap.as_summary() for ap in self.products if ap.product is not None],
        }

    def as_detail(self):
        b = self.business
        return {
            "id": self.id,
            "business_id": self.business_id,
            "business_name": b.name if b else None,
            "title": self.title,
            "description": self.description,
            "image": b.image_url if b else None,
            "products": [
                ap.as_detail()
                for ap in sorted(self.products, key=lambda x: (x.created_at or datetime.min, x.id), reverse=True)
                if ap.product is not None
            ],
        }


class AdProduct(db.Model):
    __tablename__ = "ad_products"

    id = db.Column(db.Integer, primary_key=True)
    ad_id = db.Column(db.Integer, db.ForeignKey("ads.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    special_tag = db.Column(db.String(64))
    created_at = db.Column(db.DateTime, server_default=func.now())

    ad = db.relationship("Ad", back_populates="products")
    product = db.relationship("Product", lazy="joined")

    def as_summary(self):
        p = self.product
        return {
            "id": self.id,
            "product_id": p.id,
            "product_name": p.name,
            "product_price": to_float(p.price),
            "product_image": p.image_url or FALLBACK_PRODUCT_IMAGE,
            "special_tag": self.special_tag,
            "is_ad_only": bool(p.ad_only),
        }

    def as_detail(self):
        p = self.product
        b = p.business
        return {
            "id": self.id,
            "product_id": p.id,
            "product_name": p.name,
            "product_description": p.description,
            "product_price": to_float(p.price),
            "product_stock": p.stock,
            "product_image": p.image_url,
            "special_tag": self.special_tag or "",
            "business_name": b.name if b else None,
            "business_id": p.business_id,
        }
