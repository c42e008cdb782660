# marketplace/user/routes.py
from flask import request
from sqlalchemy import or_

from ..extensions import db
from ..model import User
from ..utils.api import ok, err
from ..utils.parse import blank, parse_bool
from . import bp

PROFILE_FIELDS = ("name", "phone", "address", "city", "state", "postal_code", "photo_url", "push_token")


def _email(v):
    return None if blank(v) else str(v).strip().lower()


def _uid(v):
    return None if blank(v) else str(v).strip()


def _lookup(email=None, firebase_uid=None):
    # firebase_uid wins when both identifiers are given
    if firebase_uid:
        return User.query.filter(User.firebase_uid == firebase_uid).first()
    if email:
        return User.query.filter(User.email == email).first()
    return None


@bp.get("")
def get_user():
    email = _email(request.args.get("email"))
    firebase_uid = _uid(request.args.get("firebase_uid") or request.args.get("firebaseUid"))
    if not email and not firebase_uid:
        return err("Email or firebase_uid is required")

    user = _lookup(email, firebase_uid)
    if user is None:
        return err("User not found", 404)
    return ok(user=user.as_dict())


@bp.post("")
def create_user():
    """Upsert by identity: an existing match is returned untouched."""
    data = request.get_json(silent=True) or {}
    email = _email(data.get("email"))
    firebase_uid = _uid(data.get("firebase_uid"))
    if not email:
        return err("Email is required")

    match = [User.email == email]
    if firebase_uid:
        match.append(User.firebase_uid == firebase_uid)
    existing = User.query.filter(or_(*match)).order_by(User.id.asc()).first()
    if existing is not None:
        return ok(user=existing.as_dict(), message="User already exists")

    is_business_user = parse_bool(data.get("is_business_user"))
    user = User(
        email=email,
        firebase_uid=firebase_uid,
        name=data.get("name") or None,
        phone=data.get("phone") or None,
        photo_url=data.get("photo_url") or None,
        type="business_owner" if is_business_user else "customer",
        is_business_user=is_business_user,
    )
    db.session.add(user)
    db.session.commit()
    return ok(status_code=201, user=user.as_dict(), message="User created successfully")


@bp.put("")
def update_user():
    data = request.get_json(silent=True) or {}
    email = _email(data.get("email"))
    firebase_uid = _uid(data.get("firebase_uid"))
    if not email and not firebase_uid:
        return err("Email or firebase_uid is required")

    updates = {f: str(data[f]) for f in PROFILE_FIELDS if not blank(data.get(f))}
    if data.get("is_business_user") is not None:
        updates["is_business_user"] = parse_bool(data["is_business_user"])
        updates["type"] = "business_owner" if updates["is_business_user"] else "customer"
    if not updates:
        return err("No fields to update")

    user = _lookup(email, firebase_uid)
    if user is None:
        return err("User not found", 404)

    for field, value in updates.items():
        setattr(user, field, value)
    db.session.commit()
    return ok(user=user.as_dict(), message="User updated successfully")
