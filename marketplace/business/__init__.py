from flask import Blueprint

bp = Blueprint("business", __name__, url_prefix="/api/businesses")

from . import routes  # noqa: E402,F401
