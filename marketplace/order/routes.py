# marketplace/order/routes.py
from flask import current_app, request

from ..extensions import db
from ..model import Order
from ..services.order_service import (
    OrderError, create_order, notify_status_change, send_confirmation, update_order,
)
from ..utils.api import ok, err
from ..utils.parse import blank, parse_opt_int
from . import bp


@bp.get("")
def get_orders():
    """
    Exactly one lookup runs, in this priority order:
      order_number  -> single order
      orderId / id  -> single order
      userId        -> a buyer's order history (external UID or numeric id)
      businessId    -> a seller's incoming orders
    """
    args = request.args
    order_number = args.get("order_number") or args.get("orderNumber")
    raw_order_id = args.get("orderId") or args.get("id")
    user_id = args.get("userId") or args.get("user_id")
    raw_business = args.get("businessId") or args.get("business_id")
    current_app.logger.debug(
        "GET /api/orders order_number=%s orderId=%s userId=%s businessId=%s",
        order_number, raw_order_id, user_id, raw_business,
    )

    if order_number:
        order = Order.query.filter(Order.order_number == order_number).first()
        if order is None:
            return err("Order not found", 404)
        return ok(order=order.as_detail())

    if raw_order_id:
        order_id = parse_opt_int(raw_order_id)
        if order_id is None:
            return err("Invalid order ID")
        order = db.session.get(Order, order_id)
        if order is None:
            return err("Order not found", 404)
        return ok(order=order.as_detail())

    if user_id:
        rows = (Order.query.filter(Order.user_id == str(user_id))
                .order_by(Order.created_at.desc(), Order.id.desc()).all())
        return ok(orders=[o.as_history_row() for o in rows])

    if raw_business:
        business_id = parse_opt_int(raw_business)
        if business_id is None:
            return err("Invalid business ID")
        rows = (Order.query.filter(Order.business_id == business_id)
                .order_by(Order.created_at.desc(), Order.id.desc()).all())
        return ok(orders=[o.as_api() for o in rows])

    return err("userId or businessId is required")


@bp.post("")
def place_order():
    data = request.get_json(silent=True) or {}
    try:
        order = create_order(data)
    except OrderError as e:
        return err(e.message, e.status_code)

    send_confirmation(order)
    return ok(status_code=201, order=order.as_api())


@bp.put("")
def update_order_status():
    data = request.get_json(silent=True) or {}
    raw_id = data.get("orderId") if not blank(data.get("orderId")) else data.get("order_id")
    status = None if blank(data.get("status")) else str(data["status"]).strip()
    tracking_number = None if blank(data.get("tracking_number")) else str(data["tracking_number"]).strip()

    if blank(raw_id):
        return err("orderId is required")
    if not status and not tracking_number:
        return err("status or tracking_number is required")
    order_id = parse_opt_int(raw_id)
    if order_id is None:
        return err("Invalid order ID")

    try:
        order = update_order(order_id, status=status, tracking_number=tracking_number)
    except OrderError as e:
        return err(e.message, e.status_code)

    if status:
        notify_status_change(order, tracking_url=data.get("tracking_url"))
    return ok(order=order.as_api())
