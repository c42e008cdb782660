# marketplace/promotional/routes.py
from flask import current_app, request

from ..model import PromotionalCode
from ..services.promo_service import PromoCodeError, create_code_from_payload, redeem_code, validate_code
from ..utils.api import ok, err
from ..utils.parse import blank, parse_bool, parse_opt_int
from . import bp


@bp.get("")
def list_codes():
    q = PromotionalCode.query
    business_id = parse_opt_int(request.args.get("businessId") or request.args.get("business_id"))
    if business_id is not None:
        q = q.filter(PromotionalCode.business_id == business_id)
    active = request.args.get("active")
    if active is not None:
        q = q.filter(PromotionalCode.is_active.is_(parse_bool(active)))

    items = q.order_by(PromotionalCode.id.desc()).all()
    return ok(codes=[c.as_api() for c in items])


@bp.post("")
def create_code():
    data = request.get_json(silent=True) or {}
    try:
        promo = create_code_from_payload(data)
    except PromoCodeError as e:
        return err(e.message, e.status_code)
    return ok(status_code=201, code=promo.as_api())


@bp.post("/validate")
def validate():
    data = request.get_json(silent=True) or {}
    code = data.get("code")
    if blank(code):
        return err("Promotional code is required")
    user_id = data.get("userId") or data.get("user_id")

    try:
        promo = validate_code(str(code), user_id=user_id)
    except PromoCodeError as e:
        return err(e.message, e.status_code)
    return ok(code=promo.as_api())


@bp.post("/mark-used")
def mark_used():
    data = request.get_json(silent=True) or {}
    code = data.get("code")
    if blank(code):
        return err("Promotional code is required")

    try:
        promo = redeem_code(str(code))
    except PromoCodeError as e:
        return err(e.message, e.status_code)
    current_app.logger.info("Promotional code %s used (%s/%s)", promo.code, promo.used_count, promo.usage_limit)
    return ok(code=promo.as_api())
