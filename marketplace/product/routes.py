from flask import request

from ..extensions import db
from ..model import AdProduct, Business, Product
from ..model.product import DEFAULT_STOCK
from ..services.catalog_service import storefront_products
from ..services.image_service import lookup_stock_image
from ..utils.api import ok, err
from ..utils.parse import (
    apply_fields, blank, parse_bool, parse_list, parse_money, parse_opt_int,
)
from . import bp

# (field, caster) pairs shared by create and update; stock is handled apart
FIELDS = [
    ("name", str), ("description", str), ("category", str),
    ("price", parse_money), ("original_price", parse_money),
    ("discount_percentage", parse_money),
    ("image_url", str), ("images", parse_list), ("video", str),
    ("is_active", parse_bool), ("is_featured", parse_bool),
    ("promotional", parse_bool), ("ad_only", parse_bool),
]


def _stock(v):
    try:
        n = int(v)
    except (TypeError, ValueError):
        n = -1
    if n < 0 or isinstance(v, bool):
        raise ValueError("Invalid value for stock_quantity")
    return n


# GET /api/products?id=&businessId=&all=
@bp.get("")
def list_products():
    """
    Query params (first match wins):
      id          -> single product
      businessId  -> storefront listing for a business (active, not ad-only);
                     add all=true for every product of the business
      (none)      -> every product, newest first
    """
    raw_id = request.args.get("id")
    raw_business = request.args.get("businessId") or request.args.get("business_id")

    if raw_id:
        pid = parse_opt_int(raw_id)
        if pid is None:
            return err("Invalid product ID")
        product = db.session.get(Product, pid)
        if product is None:
            return err("Product not found", 404)
        return ok(product=product.as_api())

    if raw_business:
        bid = parse_opt_int(raw_business)
        if bid is None:
            return err("Invalid business ID")
        if parse_bool(request.args.get("all")):
            rows = (Product.query.filter(Product.business_id == bid)
                    .order_by(Product.created_at.desc(), Product.id.desc()).all())
        else:
            rows = storefront_products(bid)
        return ok(products=[p.as_api() for p in rows])

    rows = Product.query.order_by(Product.created_at.desc(), Product.id.desc()).all()
    return ok(products=[p.as_api() for p in rows])


# POST /api/products
@bp.post("")
def create_product():
    data = request.get_json(silent=True) or {}
    if any(blank(data.get(k)) for k in ("business_id", "name", "price", "category")):
        return err("Missing required fields")

    business_id = parse_opt_int(data.get("business_id"))
    if business_id is None:
        return err("Invalid business ID")
    if db.session.get(Business, business_id) is None:
        return err("Business not found", 404)

    product = Product(business_id=business_id)
    try:
        apply_fields(product, data, FIELDS)
        # unspecified stock means "unlimited", not "sold out"
        quantity = DEFAULT_STOCK if data.get("stock_quantity") is None else _stock(data["stock_quantity"])
    except ValueError as e:
        return err(str(e))

    product.stock_quantity = quantity
    product.stock = quantity
    product.in_stock = parse_bool(data.get("in_stock"), True)
    if product.original_price is None:
        product.original_price = product.price
    product.is_active = parse_bool(data.get("is_active"), True)
    product.discount_percentage = product.discount_percentage or 0

    if not product.image_url:
        product.image_url = lookup_stock_image(product.name, product.description)

    db.session.add(product)
    db.session.commit()
    return ok(status_code=201, product=product.as_api())


# PUT /api/products  (id in body)
@bp.put("")
def update_product():
    data = request.get_json(silent=True) or {}
    pid = parse_opt_int(data.get("id"))
    if pid is None:
        return err("Product ID is required")

    product = db.session.get(Product, pid)
    if product is None:
        return err("Product not found", 404)

    try:
        apply_fields(product, data, FIELDS)
        if data.get("stock_quantity") is not None:
            quantity = _stock(data["stock_quantity"])
            product.stock_quantity = quantity
            product.stock = quantity
            product.in_stock = quantity > 0
        elif data.get("in_stock") is not None:
            product.in_stock = parse_bool(data["in_stock"])
    except ValueError as e:
        return err(str(e))

    db.session.commit()
    return ok(product=product.as_api())


# DELETE /api/products?id=
@bp.delete("")
def delete_product():
    pid = parse_opt_int(request.args.get("id"))
    if pid is None:
        return err("Product ID is required")

    product = db.session.get(Product, pid)
    if product is None:
        return err("Product not found", 404)

    # ad links go with the product, in the same transaction
    AdProduct.query.filter(AdProduct.product_id == pid).delete(synchronize_session=False)
    db.session.delete(product)
    db.session.commit()
    return ok(message="Product deleted successfully", id=pid)
