# marketplace/business/routes.py
from flask import request
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..model import Business, Product
from ..model.business import PLACEHOLDER_IMAGE
from ..services.catalog_service import storefront_products
from ..utils.api import ok, err
from ..utils.parse import apply_fields, blank, parse_bool, parse_list, parse_money, parse_opt_int
from . import bp

# (field, caster) pairs accepted by create and update
FIELDS = [
    ("name", str), ("description", str),
    ("logo_url", str), ("banner_url", str), ("image_url", str),
    ("address", str), ("phone", str), ("email", str), ("website", str),
    ("categories", parse_list), ("payment_methods", parse_list),
    ("delivery_options", lambda v: v),
    ("delivery_fee", parse_money), ("minimum_order", parse_money),
    ("delivery_time", str),
    ("is_active", parse_bool),
    ("spin_wheel_enabled", parse_bool),
    ("spin_discount_type", str), ("spin_discount_value", parse_money),
]


def _business_id(raw):
    bid = parse_opt_int(raw)
    if bid is None:
        return None, err("Invalid business ID", 400)
    return bid, None


def _update(business_id, data):
    business = db.session.get(Business, business_id)
    if business is None:
        return err("Business not found", 404)
    if "name" in data and data["name"] is not None and blank(data["name"]):
        return err("name cannot be empty")
    try:
        apply_fields(business, data, FIELDS)
    except ValueError as e:
        return err(str(e))
    db.session.commit()
    return ok(business=business.as_api())


# GET /api/businesses?id=&ownerId=
@bp.get("")
def list_businesses():
    raw_id = request.args.get("id")
    owner_id = request.args.get("ownerId") or request.args.get("owner_id")

    if raw_id:
        bid, error = _business_id(raw_id)
        if error:
            return error
        rows = Business.query.filter(Business.id == bid).all()
    elif owner_id:
        # numeric ids and external auth UIDs are both stored as text
        rows = (Business.query.filter(Business.owner_id == str(owner_id))
                .order_by(Business.created_at.desc(), Business.id.desc()).all())
    else:
        rows = (Business.query.filter(Business.is_active.is_(True))
                .order_by(Business.created_at.desc(), Business.id.desc()).all())

    return ok(businesses=[b.as_api() for b in rows])


# POST /api/businesses
@bp.post("")
def create_business():
    data = request.get_json(silent=True) or {}
    if blank(data.get("name")) or blank(data.get("owner_id")):
        return err("Name and owner_id are required")

    business = Business(owner_id=str(data["owner_id"]))
    try:
        apply_fields(business, data, FIELDS)
    except ValueError as e:
        return err(str(e))

    business.logo_url = business.logo_url or PLACEHOLDER_IMAGE
    business.banner_url = business.banner_url or PLACEHOLDER_IMAGE
    business.image_url = business.image_url or PLACEHOLDER_IMAGE
    business.is_active = parse_bool(data.get("is_active"), True)
    business.spin_wheel_enabled = parse_bool(data.get("spin_wheel_enabled"), False)

    db.session.add(business)
    db.session.commit()
    return ok(status_code=201, business=business.as_api())


# PUT /api/businesses  (id in body)
@bp.put("")
def update_business():
    data = request.get_json(silent=True) or {}
    if blank(data.get("id")):
        return err("Business ID is required")
    bid, error = _business_id(data.get("id"))
    if error:
        return error
    return _update(bid, data)


# GET /api/businesses/promotional
@bp.get("/promotional")
def promotional_businesses():
    rows = (Business.query.filter(Business.is_active.is_(True))
            .order_by(Business.created_at.desc(), Business.id.desc()).all())
    return ok(businesses=[b.as_api() for b in rows])


@bp.get("/<business_id>")
def get_business(business_id):
    bid, error = _business_id(business_id)
    if error:
        return error
    business = db.session.get(Business, bid)
    if business is None:
        return err("Business not found", 404)
    return ok(business=business.as_api())


@bp.put("/<business_id>")
def update_business_by_path(business_id):
    bid, error = _business_id(business_id)
    if error:
        return error
    return _update(bid, request.get_json(silent=True) or {})


@bp.delete("/<business_id>")
def delete_business(business_id):
    bid, error = _business_id(business_id)
    if error:
        return error
    business = db.session.get(Business, bid)
    if business is None:
        return err("Business not found", 404)
    try:
        db.session.delete(business)
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        return err("Business still has products, ads or orders", 409, detail=str(e.orig))
    return ok(message="Business deleted successfully")


# GET /api/businesses/<id>/details  (business + every product, owner view)
@bp.get("/<business_id>/details")
def business_details(business_id):
    bid, error = _business_id(business_id)
    if error:
        return error
    business = db.session.get(Business, bid)
    if business is None:
        return err("Business not found", 404)
    products = (Product.query.filter(Product.business_id == bid)
                .order_by(Product.created_at.desc(), Product.id.desc()).all())
    return ok(business=business.as_api(), products=[p.as_api(with_business=False) for p in products])


# GET /api/businesses/<id>/products  (storefront)
@bp.get("/<business_id>/products")
def business_products(business_id):
    bid, error = _business_id(business_id)
    if error:
        return error
    return ok(products=[p.as_api() for p in storefront_products(bid)])
