# marketplace/services/catalog_service.py
from sqlalchemy import or_

from ..extensions import db
from ..model import Product
from .image_service import search_image_url


def storefront_query(business_id):
    """Active products a shopper may browse: ad-only items are left to ads/offers."""
    return (
        Product.query
        .filter(Product.business_id == business_id)
        .filter(or_(Product.ad_only.is_(False), Product.ad_only.is_(None)))
        .filter(Product.is_active.is_(True))
        .order_by(Product.created_at.desc(), Product.id.desc())
    )


def storefront_products(business_id):
    """
    Storefront listing. Rows without an image get a search-based image URL
    which is written back, so the listing has a write side effect.
    """
    products = storefront_query(business_id).all()
    touched = False
    for p in products:
        if not p.image_url:
            p.image_url = search_image_url(p.name, p.description)
            touched = True
    if touched:
        db.session.commit()
    return products
