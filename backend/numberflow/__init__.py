# backend/numberflow/__init__.py
import atexit
import logging

from flask import Flask, jsonify, request
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import db, migrate


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(getattr(logging, app.config["LOG_LEVEL"], logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.numbers import numbers_bp
    from .routes.purchases import purchases_bp
    from .routes.sales import sales_bp
    from .routes.port_outs import port_outs_bp
    from .routes.dealer_purchases import dealer_purchases_bp
    from .routes.reminders import reminders_bp
    from .routes.activities import activities_bp
    from .routes.data_transfer import data_transfer_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(numbers_bp)
    app.register_blueprint(purchases_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(port_outs_bp)
    app.register_blueprint(dealer_purchases_bp)
    app.register_blueprint(reminders_bp)
    app.register_blueprint(activities_bp)
    app.register_blueprint(data_transfer_bp)

    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    init_sweeper(app)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def init_sweeper(app: Flask) -> None:
    """
    Attach the RTS sweeper. It starts with the first request served (so
    CLI commands such as `flask db upgrade` never spawn it) and stops at
    interpreter exit.
    """
    if not app.config["RTS_SWEEP_ENABLED"] or app.config.get("TESTING"):
        return

    from .services.sweep_service import RtsSweeper

    sweeper = RtsSweeper(app, interval_seconds=app.config["RTS_SWEEP_INTERVAL_SECONDS"])
    app.extensions["rts_sweeper"] = sweeper
    atexit.register(sweeper.stop)

    @app.before_request
    def ensure_sweeper_running():
        if not sweeper.running:
            sweeper.start()


def register_error_handlers(app: Flask) -> None:
    from .services.records import DuplicateMobileError, RecordNotFoundError
    from .services.sale_service import SaleStateError
    from .validation import ValidationError

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify(e.to_dict()), 400

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(e):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(DuplicateMobileError)
    def handle_duplicate_mobile(e):
        return jsonify({
            "error": "Duplicate Number",
            "fields": {"mobile": str(e)},
            "notification": {"title": "Duplicate Number", "description": str(e), "variant": "destructive"},
        }), 409

    @app.errorhandler(SaleStateError)
    def handle_conflict(e):
        return jsonify({
            "error": str(e),
            "notification": {"title": "Operation Failed", "description": str(e), "variant": "destructive"},
        }), 409

    @app.errorhandler(OperationalError)
    def handle_database_unavailable(e):
        db.session.rollback()
        app.logger.exception("Database unavailable")
        return jsonify({"error": "Service unavailable. Please try again shortly."}), 503

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500
