"""
Application factory for the WeMatch opportunity platform API.

Usage::

    from wematch import create_app
    app = create_app()           # Uses FLASK_ENV to pick config.
    app = create_app("testing")  # Explicit config for tests.
"""

import logging
import os

from flask import Flask, g, jsonify, request
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from .config import config_by_name
from .exceptions import ApiError, AuthenticationError, ConflictError, InternalError
from .extensions import cors, db, login_manager, migrate

logger = logging.getLogger(__name__)

# Error kinds for HTTP errors raised by Flask/Werkzeug themselves.
_HTTP_ERROR_KINDS = {
    400: "validation_error",
    401: "authentication_error",
    403: "authorization_error",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
}


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: One of 'development', 'testing', or 'production'.
                     Defaults to the FLASK_ENV environment variable,
                     falling back to 'development'.

    Returns:
        A fully configured Flask application instance.
    """
    # Resolve the configuration class.
    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")
    config_class = config_by_name.get(config_name)
    if config_class is None:
        raise ValueError(
            f"Unknown config '{config_name}'. "
            f"Valid options: {list(config_by_name.keys())}"
        )

    app = Flask(__name__)
    app.config.from_object(config_class)

    # Refuse to run production with insecure defaults.
    if config_name == "production":
        config_class.validate_production_secrets(app.config)

    # -- Configure logging -------------------------------------------------
    _configure_logging(app)

    # -- Initialize extensions ---------------------------------------------
    _register_extensions(app)

    # -- Register blueprints -----------------------------------------------
    _register_blueprints(app)

    # -- Register error handlers -------------------------------------------
    _register_error_handlers(app)

    # -- CORS --------------------------------------------------------------
    _register_cors(app)

    # -- Register custom CLI commands --------------------------------------
    _register_cli_commands(app)

    return app


def _register_extensions(app: Flask) -> None:
    """Bind all Flask extensions to the application instance."""
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Imported here to avoid circular imports with models.
    from .services import auth_service  # pylint: disable=import-outside-toplevel

    @app.before_request
    def reset_request_principal():
        # An app context pushed around several requests (tests, scripts)
        # keeps ``g``; every request must resolve its own principal.
        g.pop("_login_user", None)
        g.pop("auth_error", None)

    @login_manager.request_loader
    def load_user_from_request(req):
        """
        Resolve ``Authorization: Bearer <token>`` to a user.

        A rejected token leaves the caller anonymous; the reason is kept
        in ``g.auth_error`` for the 401 raised by ``access_required``.
        """
        try:
            token = auth_service.parse_bearer_header(req.headers.get("Authorization"))
            if token is None:
                return None
            return auth_service.load_user_from_token(token)
        except AuthenticationError as exc:
            g.auth_error = exc.message
            return None


def _register_blueprints(app: Flask) -> None:
    """
    Import and register each blueprint with its URL prefix.

    Blueprints are imported inside this function to avoid circular
    imports — models and services can safely import ``db`` from
    extensions at module level.
    """
    # pylint: disable=import-outside-toplevel

    # Main: health check and uploaded images at the root.
    from .blueprints.main import bp as main_bp

    app.register_blueprint(main_bp)

    # Authentication: register, login, current principal.
    from .blueprints.auth import bp as auth_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")

    # Opportunities: admin, public and by-user paths.
    from .blueprints.opportunities import bp as opportunities_bp

    app.register_blueprint(opportunities_bp, url_prefix="/opportunities")

    # Skills: the caller's profile skills and skill search.
    from .blueprints.skills import bp as skills_bp

    app.register_blueprint(skills_bp, url_prefix="/skills")

    # Organizations: organization profiles.
    from .blueprints.organizations import bp as organizations_bp

    app.register_blueprint(organizations_bp, url_prefix="/organizations")

    # Users: user administration and audit logs.
    from .blueprints.users import bp as users_bp

    app.register_blueprint(users_bp, url_prefix="/users")


def _register_error_handlers(app: Flask) -> None:
    """Render every error as the JSON ``{"error": {...}}`` envelope."""

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        kind = _HTTP_ERROR_KINDS.get(error.code, "http_error")
        body = {"error": {"kind": kind, "message": error.description}}
        return jsonify(body), error.code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error: IntegrityError):
        db.session.rollback()
        logger.warning("Integrity error on %s %s: %s", request.method, request.path, error.orig)
        return jsonify(ConflictError().to_dict()), ConflictError.status_code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):  # pylint: disable=unused-argument
        db.session.rollback()
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(InternalError().to_dict()), InternalError.status_code


def _register_cors(app: Flask) -> None:
    """
    Bind Flask-Cors for the origins in ``CORS_ORIGINS``.

    Headers are only sent to requests carrying an ``Origin``; a ``"*"``
    entry is answered with the wildcard rather than the echoed origin.
    """
    cors.init_app(
        app,
        origins=app.config.get("CORS_ORIGINS", []),
        methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
        send_wildcard=True,
        always_send=False,
    )


def _register_cli_commands(app: Flask) -> None:
    """Register custom Flask CLI commands (e.g., flask db-check)."""
    from .cli import register_commands  # pylint: disable=import-outside-toplevel

    register_commands(app)


def _configure_logging(app: Flask) -> None:
    """
    Configure root logging from ``LOG_LEVEL``.

    Services log through module-level loggers; this only sets the level
    and format once per process.
    """
    log_level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Quiet down noisy libraries in development.
    if app.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
