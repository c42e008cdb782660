from flask import Blueprint

bp = Blueprint("ad", __name__, url_prefix="/api/ads")

from . import routes  # noqa: E402,F401
