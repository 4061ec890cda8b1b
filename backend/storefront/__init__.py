# backend/storefront/__init__.py
from flask import Flask, current_app, request
from werkzeug.exceptions import HTTPException

from .config import Config
from .errors import OrderWriteError, RateLimitedError, ServiceError
from .extensions import db, migrate
from .responses import error_response


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from .container import build_container
    app.extensions["storefront"] = build_container(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.categories import categories_bp
    from .routes.products import products_bp
    from .routes.orders import orders_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(orders_bp)

    register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def register_error_handlers(app: Flask) -> None:

    @app.errorhandler(ServiceError)
    def handle_service_error(e: ServiceError):
        if isinstance(e, OrderWriteError):
            current_app.logger.error("Order write failed: %s %s", e.message, e.details)
        response, status = error_response(e.status, e.message, errors=e.details)
        if isinstance(e, RateLimitedError) and e.retry_after_seconds:
            response.headers["Retry-After"] = str(e.retry_after_seconds)
        return response, status

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        message = "Route not found" if e.code == 404 else e.name
        return error_response(e.code or 500, message)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        db.session.rollback()
        errors = None
        if current_app.config.get("EXPOSE_ERROR_DETAILS"):
            errors = [{"type": type(e).__name__, "message": str(e)}]
        return error_response(500, "Internal Server Error", errors=errors)
