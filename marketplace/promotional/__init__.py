from flask import Blueprint

bp = Blueprint("promotional", __name__, url_prefix="/api/promotional")

from . import routes  # noqa: E402,F401
