# marketplace/services/order_service.py
import random
import time

from flask import current_app

from ..extensions import db
from ..model import Business, Order
from ..model.order import DEFAULT_DELIVERY_TYPE
from ..utils.money import to_float, to_opt_money
from ..utils.parse import blank, parse_opt_int
from .email_service import send_order_confirmation_email, send_shipping_update_email
from .push_service import send_push_to_user


class OrderError(Exception):
    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def generate_order_number(now=None) -> str:
    # millisecond clock + 0-999 suffix; collisions are possible, nothing enforces uniqueness
    millis = int((time.time() if now is None else now) * 1000)
    return f"ORD-{millis}-{random.randint(0, 999)}"


def _snapshot_items(items):
    if not isinstance(items, list) or not items:
        raise OrderError("items must be a non-empty list")
    snapshot = []
    for item in items:
        if not isinstance(item, dict):
            raise OrderError("each item must be an object")
        snapshot.append(dict(item))
    return snapshot


def create_order(data: dict) -> Order:
    business_id = parse_opt_int(data.get("business_id"))
    if business_id is None:
        raise OrderError("business_id is required")
    items = _snapshot_items(data.get("items"))
    total_amount = to_opt_money(data.get("total_amount"))
    if total_amount is None:
        raise OrderError("total_amount is required")

    if db.session.get(Business, business_id) is None:
        raise OrderError("Business not found", 404)

    discount_code = data.get("discount_code")
    order = Order(
        order_number=generate_order_number(),
        status="pending",
        user_id=None if blank(data.get("user_id")) else str(data["user_id"]),
        business_id=business_id,
        items=items,
        subtotal=to_opt_money(data.get("subtotal")),
        shipping_fee=to_opt_money(data.get("shipping_fee")),
        discount_code=None if blank(discount_code) else str(discount_code).strip(),
        discount_amount=to_opt_money(data.get("discount_amount")) or 0,
        total_amount=total_amount,
        delivery_type=data.get("delivery_type"),
        delivery_address=data.get("delivery_address"),
        payment_method=data.get("payment_method"),
        customer_name=data.get("customer_name"),
        customer_email=data.get("customer_email"),
        customer_phone=data.get("customer_phone"),
        notes=data.get("notes") or None,
    )
    db.session.add(order)
    db.session.commit()
    current_app.logger.info("Order %s created for business %s", order.order_number, business_id)
    return order


def send_confirmation(order: Order):
    """Best effort: a failed email never fails the order."""
    if not order.customer_email:
        return None
    try:
        result = send_order_confirmation_email(
            order.customer_email,
            order.customer_name or "Customer",
            order.order_number,
            order.items or [],
            to_float(order.subtotal),
            to_float(order.discount_amount),
            to_float(order.total_amount),
            order.delivery_type or DEFAULT_DELIVERY_TYPE,
            order.delivery_address,
            order.customer_phone,
        )
    except Exception:
        current_app.logger.exception("Failed to send order confirmation email for %s", order.order_number)
        return None
    if not result.get("success"):
        current_app.logger.warning(
            "Order confirmation for %s not sent: %s",
            order.order_number, result.get("error") or result.get("message"),
        )
    return result


def update_order(order_id, status=None, tracking_number=None) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise OrderError("Order not found", 404)
    if status:
        order.status = status
    if tracking_number:
        order.tracking_number = tracking_number
    db.session.commit()
    current_app.logger.info(
        "Order %s updated (status=%s, tracking=%s)", order.order_number, order.status, order.tracking_number
    )
    return order


def notify_status_change(order: Order, tracking_url=None):
    """Shipping-update email and push to the buyer; both best effort."""
    if order.customer_email:
        try:
            send_shipping_update_email(
                order.customer_email,
                order.customer_name or "Customer",
                order.order_number,
                order.status,
                tracking_url,
            )
        except Exception:
            current_app.logger.exception("Shipping update email failed for %s", order.order_number)

    if order.user_id:
        try:
            send_push_to_user(
                order.user_id,
                "Order update",
                f"Your order {order.order_number} is now {order.status.replace('_', ' ')}",
                {"orderId": order.id, "orderNumber": order.order_number, "status": order.status},
            )
        except Exception:
            current_app.logger.exception("Push notification failed for %s", order.order_number)
