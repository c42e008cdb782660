# --- marketplace/model/user.py ---
from sqlalchemy.sql import func

from ..extensions import db
from ..utils.parse import iso


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    firebase_uid = db.Column(db.String(128), index=True)

    name = db.Column(db.String(180))
    phone = db.Column(db.String(50))
    address = db.Column(db.Text)
    city = db.Column(db.String(120))
    state = db.Column(db.String(120))
    postal_code = db.Column(db.String(20))
    photo_url = db.Column(db.String(1024))

    type = db.Column(db.String(32), nullable=False, default="customer")  # customer, business_owner
    is_business_user = db.Column(db.Boolean, default=False)
    push_token = db.Column(db.String(255))

    created_at = db.Column(db.DateTime, server_default=func.now())

    def as_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "photo_url": self.photo_url,
            "type": self.type,
            "is_business_user": bool(self.is_business_user),
            "firebase_uid": self.firebase_uid,
            "created_at": iso(self.created_at),
        }
