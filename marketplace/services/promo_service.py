# marketplace/services/promo_service.py
from datetime import datetime

from sqlalchemy import func, or_, update

from ..extensions import db
from ..model import Order, PromotionalCode
from ..utils.money import to_opt_money
from ..utils.parse import parse_bool, parse_iso8601, parse_opt_int

DISCOUNT_TYPES = ("percent", "fixed")


class PromoCodeError(Exception):
    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _by_code(code):
    return PromotionalCode.query.filter(func.upper(PromotionalCode.code) == code.strip().upper())


def _unlimited():
    return or_(PromotionalCode.usage_limit.is_(None), PromotionalCode.usage_limit == 0)


def limit_reached(promo) -> bool:
    return bool(promo.usage_limit) and (promo.used_count or 0) >= promo.usage_limit


def user_usage_count(code, user_id) -> int:
    return (
        Order.query
        .filter(Order.user_id == str(user_id))
        .filter(func.upper(Order.discount_code) == code.strip().upper())
        .count()
    )


def validate_code(code, user_id=None, now=None):
    """
    Checks, in order: active flag + validity window (404), global usage
    limit (400), per-user limit against the user's previous orders (400).
    Returns the matching PromotionalCode.
    """
    now = now or datetime.utcnow()
    promo = (
        _by_code(code)
        .filter(PromotionalCode.is_active.is_(True))
        .filter(or_(PromotionalCode.valid_from.is_(None), PromotionalCode.valid_from <= now))
        .filter(or_(PromotionalCode.valid_until.is_(None), PromotionalCode.valid_until >= now))
        .first()
    )
    if promo is None:
        raise PromoCodeError("Invalid or expired promotional code", 404)

    if limit_reached(promo):
        raise PromoCodeError("This promotional code has reached its usage limit", 400)

    if user_id and promo.max_uses_per_user:
        if user_usage_count(code, user_id) >= promo.max_uses_per_user:
            raise PromoCodeError(
                "You have already used this promotional code the maximum number of times", 400
            )
    return promo


def redeem_code(code):
    """
    Increments used_count in one conditional UPDATE so concurrent
    redemptions can never push it past usage_limit.
    """
    stmt = (
        update(PromotionalCode)
        .where(func.upper(PromotionalCode.code) == code.strip().upper())
        .where(or_(_unlimited(), PromotionalCode.used_count < PromotionalCode.usage_limit))
        .values(used_count=PromotionalCode.used_count + 1)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if result.rowcount == 0:
        db.session.rollback()
        if _by_code(code).first() is None:
            raise PromoCodeError("Promotional code not found", 404)
        raise PromoCodeError("This promotional code has reached its usage limit", 400)

    db.session.commit()
    promo = _by_code(code).order_by(PromotionalCode.id.asc()).first()
    db.session.refresh(promo)
    return promo


def create_code_from_payload(data: dict):
    code = str(data.get("code") or "").strip()
    discount_type = str(data.get("discount_type") or "percent").lower().strip()
    value = to_opt_money(data.get("discount_value"))

    if not code:
        raise PromoCodeError("code is required")
    if discount_type not in DISCOUNT_TYPES:
        raise PromoCodeError("discount_type must be 'percent' or 'fixed'")
    if value is None or value <= 0:
        raise PromoCodeError("discount_value must be > 0")
    if discount_type == "percent" and value > 100:
        raise PromoCodeError("percent discount must be <= 100")

    # unique case-insensitive
    if _by_code(code).first():
        raise PromoCodeError("Promotional code already exists", 409)

    valid_from = parse_iso8601(data.get("valid_from"))
    valid_until = parse_iso8601(data.get("valid_until"))
    if data.get("valid_from") and not valid_from:
        raise PromoCodeError("Invalid datetime format for valid_from")
    if data.get("valid_until") and not valid_until:
        raise PromoCodeError("Invalid datetime format for valid_until")
    if valid_from and valid_until and valid_until < valid_from:
        raise PromoCodeError("valid_until must be after valid_from")

    promo = PromotionalCode(
        code=code.upper(),
        business_id=parse_opt_int(data.get("business_id")),
        discount_type=discount_type,
        discount_value=value,
        min_order_amount=to_opt_money(data.get("min_order_amount")),
        usage_limit=parse_opt_int(data.get("usage_limit")),
        used_count=0,
        max_uses_per_user=parse_opt_int(data.get("max_uses_per_user")),
        valid_from=valid_from,
        valid_until=valid_until,
        is_active=parse_bool(data.get("is_active"), True),
    )
    db.session.add(promo)
    db.session.commit()
    return promo
