# marketplace/notification/routes.py
from flask import jsonify, request

from ..extensions import db
from ..model import Order
from ..model.order import DEFAULT_DELIVERY_TYPE
from ..services.email_service import send_order_confirmation_email, send_shipping_update_email
from ..services.push_service import send_push_to_user, send_push_to_users
from ..utils.api import err
from ..utils.money import to_float
from ..utils.parse import blank, parse_opt_int
from . import bp


def _items_subtotal(items):
    total = 0.0
    for item in items or []:
        if isinstance(item, dict):
            total += to_float(item.get("price")) * to_float(item.get("quantity"))
    return total


@bp.post("/email")
def send_email():
    data = request.get_json(silent=True) or {}
    kind = data.get("type")

    if kind == "order_confirmation":
        order_id = parse_opt_int(data.get("orderId") or data.get("order_id"))
        if order_id is None:
            return err("orderId is required")
        order = db.session.get(Order, order_id)
        if order is None:
            return err("Order not found", 404)
        if not order.customer_email:
            return err("Order has no customer email")

        items = order.items or []
        result = send_order_confirmation_email(
            order.customer_email,
            order.customer_name or "Customer",
            order.order_number,
            items,
            _items_subtotal(items),
            to_float(order.discount_amount),
            to_float(order.total_amount),
            order.delivery_type or DEFAULT_DELIVERY_TYPE,
            order.delivery_address,
            order.customer_phone,
        )
        return jsonify(result)

    if kind == "shipping_update":
        required = ("customerEmail", "customerName", "orderNumber", "status")
        if any(blank(data.get(k)) for k in required):
            return err("Missing required fields")
        result = send_shipping_update_email(
            data["customerEmail"],
            data["customerName"],
            data["orderNumber"],
            data["status"],
            data.get("trackingUrl"),
        )
        return jsonify(result)

    return err("Invalid email type")


@bp.post("/send-push")
def send_push():
    data = request.get_json(silent=True) or {}
    title = data.get("title")
    body = data.get("body")
    if blank(title) or blank(body):
        return err("title and body are required")

    if not blank(data.get("userId")):
        return jsonify(send_push_to_user(data["userId"], title, body, data.get("data")))

    if isinstance(data.get("userIds"), list):
        return jsonify(send_push_to_users(data["userIds"], title, body, data.get("data")))

    return err("Either userId or userIds must be provided")
