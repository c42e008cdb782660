# marketplace/offer/routes.py
from flask import request

from ..extensions import db
from ..model import Ad, Business, Product
from ..utils.api import ok, err
from ..utils.parse import blank, parse_bool, parse_iso8601, parse_opt_int
from . import bp


def _ad_only_products(business_id):
    return (
        Product.query
        .filter(Product.business_id == business_id)
        .filter(Product.is_active.is_(True))
        .filter(Product.ad_only.is_(True))
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


@bp.get("")
def list_offers():
    """Active ads, each with the ad-only products of its business."""
    ads = (Ad.query.filter(Ad.is_active.is_(True))
           .order_by(Ad.created_at.desc(), Ad.id.desc()).all())
    offers = []
    for ad in ads:
        offers.append({
            **ad.as_api(),
            "business_name": ad.business.name if ad.business else None,
            "logo_url": ad.business.logo_url if ad.business else None,
            "products": [p.as_api(with_business=False) for p in _ad_only_products(ad.business_id)],
        })
    return ok(offers=offers)


@bp.post("")
def create_offer():
    data = request.get_json(silent=True) or {}
    business_id = parse_opt_int(data.get("business_id"))
    if business_id is None or blank(data.get("title")):
        return err("Business ID and title are required")
    if db.session.get(Business, business_id) is None:
        return err("Business not found", 404)
    if Ad.query.filter(Ad.business_id == business_id).first() is not None:
        return err("Business already has an ad. Please update the existing one.")

    start_date = parse_iso8601(data.get("start_date"))
    end_date = parse_iso8601(data.get("end_date"))
    if data.get("start_date") and not start_date:
        return err("Invalid datetime format for start_date")
    if data.get("end_date") and not end_date:
        return err("Invalid datetime format for end_date")

    discount = data.get("discount_percentage")
    offer = Ad(
        business_id=business_id,
        title=str(data["title"]).strip(),
        description=data.get("description") or None,
        discount_text=None if blank(discount) else str(discount),
        start_date=start_date,
        end_date=end_date,
        is_active=parse_bool(data.get("is_active"), True),
    )
    db.session.add(offer)
    db.session.commit()
    return ok(status_code=201, offer=offer.as_api())
