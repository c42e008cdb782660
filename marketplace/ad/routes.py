# marketplace/ad/routes.py
from flask import request

from ..extensions import db
from ..model import Ad, AdProduct, Business, Product
from ..utils.api import ok, err
from ..utils.parse import blank, parse_bool, parse_opt_int
from . import bp


def _ad_products(items):
    """[{product_id, special_tag}] -> AdProduct rows; ValueError on bad input."""
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValueError("products must be a list")
    rows, ids = [], []
    for item in items:
        pid = parse_opt_int(item.get("product_id")) if isinstance(item, dict) else None
        if pid is None:
            raise ValueError("each product needs a product_id")
        tag = item.get("special_tag")
        rows.append(AdProduct(product_id=pid, special_tag=None if blank(tag) else str(tag)))
        ids.append(pid)
    found = {p.id for p in Product.query.filter(Product.id.in_(ids)).all()} if ids else set()
    missing = sorted(set(ids) - found)
    if missing:
        raise ValueError(f"Unknown product id(s): {', '.join(map(str, missing))}")
    return rows


# GET /api/ads?businessId=
@bp.get("")
def list_ads():
    raw_business = request.args.get("businessId") or request.args.get("business_id")
    if raw_business:
        bid = parse_opt_int(raw_business)
        if bid is None:
            return err("Invalid business ID")
        ad = (Ad.query.filter(Ad.business_id == bid)
              .order_by(Ad.created_at.desc(), Ad.id.desc()).first())
        # "no ad yet" is a normal state for a business, not a 404
        return ok(ad=ad.as_listing() if ad else None)

    ads = (Ad.query.filter(Ad.is_active.is_(True))
           .order_by(Ad.created_at.desc(), Ad.id.desc()).all())
    return ok(ads=[a.as_listing() for a in ads])


# POST /api/ads
@bp.post("")
def create_ad():
    data = request.get_json(silent=True) or {}
    business_id = parse_opt_int(data.get("business_id"))
    if business_id is None or blank(data.get("title")):
        return err("Business ID and title are required")
    if db.session.get(Business, business_id) is None:
        return err("Business not found", 404)

    # one ad per business
    if Ad.query.filter(Ad.business_id == business_id).first() is not None:
        return err("Business already has an ad. Please update the existing one.")

    try:
        links = _ad_products(data.get("products"))
    except ValueError as e:
        return err(str(e))

    ad = Ad(
        business_id=business_id,
        title=str(data["title"]).strip(),
        description=data.get("description") or None,
        is_active=True,
    )
    ad.products.extend(links)
    db.session.add(ad)
    db.session.commit()
    return ok(status_code=201, ad=ad.as_api())


# GET /api/ads/<id>
@bp.get("/<int:ad_id>")
def get_ad(ad_id):
    ad = db.session.get(Ad, ad_id)
    if ad is None:
        return err("Ad not found", 404)
    return ok(ad=ad.as_detail())


# PUT /api/ads/<id>  (replaces the whole product set)
@bp.put("/<int:ad_id>")
def update_ad(ad_id):
    data = request.get_json(silent=True) or {}
    business_id = parse_opt_int(data.get("business_id"))
    if business_id is None or blank(data.get("title")):
        return err("Business ID and title are required")

    ad = Ad.query.filter(Ad.id == ad_id, Ad.business_id == business_id).first()
    if ad is None:
        return err("Ad not found or unauthorized", 404)

    try:
        links = _ad_products(data.get("products"))
    except ValueError as e:
        return err(str(e))

    ad.title = str(data["title"]).strip()
    ad.description = data.get("description") or None
    if data.get("is_active") is not None:
        ad.is_active = parse_bool(data["is_active"])
    ad.products.clear()
    db.session.flush()
    ad.products.extend(links)
    db.session.commit()
    return ok(ad=ad.as_api())


# DELETE /api/ads/<id>?businessId=
@bp.delete("/<int:ad_id>")
def delete_ad(ad_id):
    business_id = parse_opt_int(request.args.get("businessId") or request.args.get("business_id"))
    if business_id is None:
        return err("Business ID is required")

    ad = Ad.query.filter(Ad.id == ad_id, Ad.business_id == business_id).first()
    if ad is None:
        return err("Ad not found or unauthorized", 404)

    # ad_products rows are removed first through the delete-orphan cascade
    db.session.delete(ad)
    db.session.commit()
    return ok(message="Ad deleted successfully")
