"""
Transactional email through SendGrid.

Senders never raise: they answer ``{"success": bool, ...}`` so callers can
decide whether a failed email matters. Bodies are Jinja templates under
``templates/email``.
"""
from flask import current_app, render_template
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail

STATUS_COPY = {
    "processing": {
        "emoji": "⏳",
        "title": "Order Being Prepared",
        "message": "Your order {order_number} is being prepared with care.",
        "color": "#eab308",
    },
    "ready": {
        "emoji": "✅",
        "title": "Order Ready!",
        "message": "Great news! Your order {order_number} is ready for pickup/delivery.",
        "color": "#22c55e",
    },
    "out_for_delivery": {
        "emoji": "🚚",
        "title": "Out for Delivery",
        "message": "Your order {order_number} is on its way to you!",
        "color": "#3b82f6",
    },
    "delivered": {
        "emoji": "🎉",
        "title": "Order Delivered!",
        "message": "Your order {order_number} has been successfully delivered. Enjoy!",
        "color": "#22c55e",
    },
    "completed": {
        "emoji": "✅",
        "title": "Order Completed",
        "message": "Thank you for your order! Order {order_number} is now completed.",
        "color": "#22c55e",
    },
    "cancelled": {
        "emoji": "❌",
        "title": "Order Cancelled",
        "message": "Your order {order_number} has been cancelled.",
        "color": "#ef4444",
    },
}

NOT_CONFIGURED = {"success": False, "message": "Email service not configured"}


def format_address(address) -> str:
    if not address:
        return ""
    if isinstance(address, str):
        return address
    if isinstance(address, dict):
        return (
            f"{address.get('street') or ''}, {address.get('city') or ''}, "
            f"{address.get('state') or ''} {address.get('postalCode') or address.get('postal_code') or ''}"
        ).strip()
    return str(address)


def _line_items(items):
    lines = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        try:
            qty = int(item.get("quantity") or 0)
        except (TypeError, ValueError):
            qty = 0
        try:
            price = float(item.get("price") or 0)
        except (TypeError, ValueError):
            price = 0.0
        lines.append({"name": item.get("name") or "Item", "quantity": qty, "line_total": price * qty})
    return lines


def _send(to_email, subject, html):
    cfg = current_app.config
    message = Mail(
        from_email=From(cfg["SENDGRID_FROM_EMAIL"], cfg["SENDGRID_FROM_NAME"]),
        to_emails=to_email,
        subject=subject,
        html_content=html,
    )
    SendGridAPIClient(cfg["SENDGRID_API_KEY"]).send(message)


def send_order_confirmation_email(
    customer_email,
    customer_name,
    order_number,
    items,
    subtotal,
    discount,
    total,
    delivery_type,
    delivery_address=None,
    customer_phone=None,
):
    if not current_app.config.get("SENDGRID_API_KEY"):
        current_app.logger.warning("SendGrid API key not configured. Email skipped.")
        return dict(NOT_CONFIGURED)

    is_delivery = delivery_type == "delivery"
    html = render_template(
        "email/order_confirmation.html",
        customer_name=customer_name,
        customer_phone=customer_phone,
        order_number=order_number,
        items=_line_items(items),
        subtotal=float(subtotal or 0),
        discount=float(discount or 0),
        total=float(total or 0),
        is_delivery=is_delivery,
        address=format_address(delivery_address),
        currency=current_app.config.get("CURRENCY_SYMBOL", "₹"),
        sender_name=current_app.config["SENDGRID_FROM_NAME"],
    )
    try:
        _send(customer_email, f"Order Confirmed - {order_number}", html)
    except Exception as e:
        current_app.logger.exception("Error sending order confirmation email to %s", customer_email)
        return {"success": False, "error": str(e)}

    current_app.logger.info("Order confirmation email sent to %s", customer_email)
    return {"success": True}


def send_shipping_update_email(customer_email, customer_name, order_number, status, tracking_url=None):
    if not current_app.config.get("SENDGRID_API_KEY"):
        current_app.logger.warning("SendGrid API key not configured. Email skipped.")
        return dict(NOT_CONFIGURED)

    copy = STATUS_COPY.get(status) or STATUS_COPY["processing"]
    html = render_template(
        "email/shipping_update.html",
        customer_name=customer_name,
        order_number=order_number,
        status=status,
        tracking_url=tracking_url,
        emoji=copy["emoji"],
        title=copy["title"],
        message=copy["message"].format(order_number=order_number),
        color=copy["color"],
        sender_name=current_app.config["SENDGRID_FROM_NAME"],
    )
    try:
        _send(customer_email, f"{copy['title']} - {order_number}", html)
    except Exception as e:
        current_app.logger.exception("Error sending shipping update email to %s", customer_email)
        return {"success": False, "error": str(e)}

    current_app.logger.info("Shipping update email sent to %s", customer_email)
    return {"success": True}
