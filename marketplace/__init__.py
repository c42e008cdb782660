# --- marketplace/__init__.py ---
import logging
import sqlite3
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify
from sqlalchemy import event
from sqlalchemy.engine import Engine
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import db, cors, migrate
from .utils.api import api_error

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)
    for handler in app.logger.handlers:
        handler.setFormatter(formatter)
    if app.config.get("LOG_FILE"):
        handler = RotatingFileHandler(app.config["LOG_FILE"], maxBytes=1_000_000, backupCount=3)
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)
    app.logger.setLevel(level)


def _register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        if exc.code >= 500:
            app.logger.error("HTTP error %s: %s", exc.code, exc)
        return jsonify(api_error(exc.description or exc.name)), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        db.session.rollback()
        app.logger.exception("Unhandled error: %s", exc)
        return jsonify(api_error(str(exc) or "Internal server error")), 500


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)

    config_object = config_object or Config
    app.config.from_object(config_object)
    config_object.init_app(app)

    _configure_logging(app)

    # Init extensions
    db.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": "*"}})
    migrate.init_app(app, db)

    # Register blueprints
    from .business import bp as business_bp; app.register_blueprint(business_bp)
    from .product import bp as product_bp; app.register_blueprint(product_bp)
    from .ad import bp as ad_bp; app.register_blueprint(ad_bp)
    from .offer import bp as offer_bp; app.register_blueprint(offer_bp)
    from .order import bp as order_bp; app.register_blueprint(order_bp)
    from .user import bp as user_bp; app.register_blueprint(user_bp)
    from .promotional import bp as promotional_bp; app.register_blueprint(promotional_bp)
    from .notification import bp as notification_bp; app.register_blueprint(notification_bp)
    from .upload import bp as upload_bp; app.register_blueprint(upload_bp)

    from .cli import register_cli
    register_cli(app)

    _register_error_handlers(app)

    @app.get("/")
    def health():
        return jsonify(success=True, msg="API running")

    with app.app_context():
        from . import model  # noqa: F401
        db.create_all()

    app.logger.info("Marketplace API ready (%d routes)", len(list(app.url_map.iter_rules())))
    return app
