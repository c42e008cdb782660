# marketplace/cli.py
from datetime import datetime

import click
import pandas as pd

from .extensions import db
from .model import Order, PromotionalCode
from .services.promo_service import PromoCodeError, create_code_from_payload
from .utils.money import to_float


@click.command("create-promo-code")
@click.option("--code", required=True)
@click.option("--business-id", type=int, default=None)
@click.option("--type", "discount_type", type=click.Choice(["percent", "fixed"]), default="percent")
@click.option("--value", type=float, required=True)
@click.option("--usage-limit", type=int, default=None)
@click.option("--max-uses-per-user", type=int, default=None)
@click.option("--valid-until", default=None, help="ISO8601, e.g. 2026-12-31T23:59:59Z")
def create_promo_code(code, business_id, discount_type, value, usage_limit, max_uses_per_user, valid_until):
    try:
        promo = create_code_from_payload({
            "code": code,
            "business_id": business_id,
            "discount_type": discount_type,
            "discount_value": value,
            "usage_limit": usage_limit,
            "max_uses_per_user": max_uses_per_user,
            "valid_until": valid_until,
        })
    except PromoCodeError as e:
        raise click.ClickException(e.message)
    click.echo(f"Promotional code created: {promo.id} {promo.code}")


@click.command("export-orders")
@click.option("--business-id", type=int, default=None)
@click.option("--output", default="orders_export.xlsx", show_default=True)
def export_orders(business_id, output):
    """Export orders to an Excel sheet, one row per order."""
    q = Order.query
    if business_id is not None:
        q = q.filter(Order.business_id == business_id)
    orders = q.order_by(Order.created_at.desc(), Order.id.desc()).all()

    rows = [{
        "Order Number": o.order_number,
        "Status": o.status,
        "Business ID": o.business_id,
        "User ID": o.user_id,
        "Customer": o.customer_name,
        "Email": o.customer_email,
        "Phone": o.customer_phone,
        "Items": len(o.items or []),
        "Subtotal": to_float(o.subtotal),
        "Shipping Fee": to_float(o.shipping_fee),
        "Discount Code": o.discount_code,
        "Discount": to_float(o.discount_amount),
        "Total": to_float(o.total_amount),
        "Delivery Type": o.delivery_type,
        "Payment Method": o.payment_method,
        "Tracking Number": o.tracking_number,
        "Created At": o.created_at,
    } for o in orders]

    df = pd.DataFrame(rows, columns=[
        "Order Number", "Status", "Business ID", "User ID", "Customer", "Email", "Phone",
        "Items", "Subtotal", "Shipping Fee", "Discount Code", "Discount", "Total",
        "Delivery Type", "Payment Method", "Tracking Number", "Created At",
    ])
    df.to_excel(output, index=False)
    click.echo(f"{len(df)} orders exported to {output}")


@click.command("deactivate-expired-codes")
def deactivate_expired_codes():
    n = (PromotionalCode.query
         .filter(PromotionalCode.is_active.is_(True))
         .filter(PromotionalCode.valid_until.isnot(None))
         .filter(PromotionalCode.valid_until < datetime.utcnow())
         .update({PromotionalCode.is_active: False}, synchronize_session=False))
    db.session.commit()
    click.echo(f"{n} promotional codes deactivated")


def register_cli(app):
    app.cli.add_command(create_promo_code)
    app.cli.add_command(export_orders)
    app.cli.add_command(deactivate_expired_codes)
