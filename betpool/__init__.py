import logging
import os

from flask import Flask, jsonify, request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
login_manager = LoginManager()
cache = Cache()
migrate = Migrate()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    # X-Forwarded-For: client, proxy1, proxy2, ...
    if request.headers.get("X-Forwarded-For"):
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return get_remote_address()


limiter = Limiter(
    key_func=get_real_ip,
    default_limits=["10000 per day", "1000 per hour"],
)


def create_app(config_name=None):
    app = Flask(__name__)

    # Determine configuration
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    # JSON API: keep key order stable for clients rendering tables
    app.json.sort_keys = False

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    cache.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    from betpool import auth  # noqa: F401 - registers the token loader

    # Import and register blueprints
    from betpool.routes.bets import bp as bets_bp

    app.register_blueprint(bets_bp, url_prefix="/bets")

    from betpool.routes.admin import bp as admin_bp

    app.register_blueprint(admin_bp, url_prefix="/admin")

    from betpool.routes.standings import bp as standings_bp

    app.register_blueprint(standings_bp, url_prefix="/standings")

    from betpool.routes.main import bp as main_bp

    app.register_blueprint(main_bp)

    # Register error handlers
    register_error_handlers(app)

    # Setup logging
    from betpool.utils.logging_config import setup_logging

    setup_logging(app)

    # Create database tables and the active-round pointer row
    with app.app_context():
        init_db()

    return app


def init_db():
    """Create all tables and make sure the singleton pointer row exists"""
    from betpool.models import ActiveRoundPointer

    db.create_all()
    ActiveRoundPointer.ensure_exists()
    db.session.commit()


def register_error_handlers(app):
    """Register global error handlers"""
    from sqlalchemy.exc import SQLAlchemyError

    from betpool.errors import PoolError
    from betpool.utils.performance import (
        log_request_performance,
        track_request_performance,
    )
    from betpool.utils.responses import envelope

    app.before_request(track_request_performance)
    app.after_request(log_request_performance)

    @app.after_request
    def after_request(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Cache-Control"] = "no-store"
        return response

    @app.errorhandler(PoolError)
    def handle_pool_error(error):
        # Expected business conditions are not failures of the service
        logger.info(f"{type(error).__name__}: {error.message} - Path: {request.path}")
        return envelope(False, error.message)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.exception(f"Database error on {request.method} {request.path}")
        return envelope(False, "A database error occured", status=500)

    @app.errorhandler(400)
    def bad_request_error(error):
        app.logger.warning(
            f"400 Bad Request: {str(error)} - Path: {request.path} - Method: {request.method}"
        )
        return jsonify({"success": False, "message": "Bad request", "data": {}}), 400

    @app.errorhandler(401)
    def unauthorized_error(error):
        return jsonify({"success": False, "message": "Invalid token.", "data": {}}), 401

    @app.errorhandler(403)
    def forbidden_error(error):
        return jsonify({"success": False, "message": "Access forbidden", "data": {}}), 403

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"success": False, "message": "Resource not found", "data": {}}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return jsonify({"success": False, "message": "Method not allowed", "data": {}}), 405

    @app.errorhandler(429)
    def too_many_requests_error(error):
        return jsonify({"success": False, "message": "Too many requests", "data": {}}), 429

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({"success": False, "message": "Internal server error", "data": {}}), 500


from betpool import models  # noqa: F401, E402 - imported for model registration
