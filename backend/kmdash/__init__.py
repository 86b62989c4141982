# backend/kmdash/__init__.py
import logging

from flask import Flask, jsonify, request, current_app
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import db, migrate
from .validation import ConflictError, NotFoundError, ValidationError


def register_error_handlers(app: Flask) -> None:
    """
    JSON error bodies for everything the routes do not answer themselves.

    Services raise ValidationError / NotFoundError / ConflictError; the
    mapping to 422 / 404 / 409 lives here so route bodies stay linear.
    """

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return jsonify({"error": "Validation failed", "errors": e.errors}), 422

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        return jsonify({"error": str(e) or "Not found"}), 404

    @app.errorhandler(ConflictError)
    def handle_conflict(e: ConflictError):
        return jsonify({"error": str(e)}), 409

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return jsonify({"error": e.name, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.inventory import inventory_bp, materials_bp
    from .routes.vendors import vendors_bp
    from .routes.lessons import lessons_bp
    from .routes.knowledge_base import knowledge_base_bp
    from .routes.production import production_bp
    from .routes.strategic import strategic_bp
    from .routes.dashboard import dashboard_bp
    from .routes.users import users_bp
    from .routes.settings import settings_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(materials_bp)
    app.register_blueprint(vendors_bp)
    app.register_blueprint(lessons_bp)
    app.register_blueprint(knowledge_base_bp)
    app.register_blueprint(production_bp)
    app.register_blueprint(strategic_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(settings_bp)

    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = set(app.config.get("CORS_ALLOWED_ORIGINS") or ())
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
