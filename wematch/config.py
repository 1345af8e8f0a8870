"""
Application configuration classes.

Each class represents a deployment environment. The factory function
``create_app`` in ``wematch/__init__.py`` selects the appropriate config
based on the FLASK_ENV environment variable.

The relational store is reached through the SQLAlchemy URL in
``DATABASE_URL``.  Development falls back to a local SQLite file;
production must point at a real server (PostgreSQL in the reference
deployment).
"""

import logging
import os

# Module-level logger for startup warnings emitted by config classes.
_logger = logging.getLogger(__name__)

# Sentinel for detecting an unset SECRET_KEY in production.
_DEFAULT_SECRET_KEY = "dev-secret-change-me"


def _csv_env(name: str, default: str) -> list[str]:
    """Split a comma-separated environment variable into a clean list."""
    return [
        item.strip()
        for item in os.environ.get(name, default).split(",")
        if item.strip()
    ]


class BaseConfig:
    """
    Shared configuration values inherited by all environments.

    Secrets and connection strings are loaded from environment variables
    so they never appear in source control.
    """

    # -- Flask core --------------------------------------------------------
    SECRET_KEY: str = os.environ.get("SECRET_KEY", _DEFAULT_SECRET_KEY)

    # Reject request bodies above this size (multipart image uploads).
    MAX_CONTENT_LENGTH: int = int(
        os.environ.get("MAX_CONTENT_LENGTH", str(5 * 1024 * 1024))
    )

    # -- SQLAlchemy --------------------------------------------------------
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL", "sqlite:///wematch.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ECHO: bool = False

    # -- Bearer tokens -----------------------------------------------------
    # Tokens are signed with SECRET_KEY.
    JWT_ALGORITHM: str = os.environ.get("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
    )
    BCRYPT_ROUNDS: int = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # -- File storage ------------------------------------------------------
    UPLOAD_FOLDER: str = os.environ.get(
        "UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads")
    )
    ALLOWED_IMAGE_EXTENSIONS: list[str] = _csv_env(
        "ALLOWED_IMAGE_EXTENSIONS", "jpg,jpeg,png,gif,webp"
    )

    # -- Listing -----------------------------------------------------------
    DEFAULT_PAGE_LIMIT: int = int(os.environ.get("DEFAULT_PAGE_LIMIT", "10"))
    MAX_PAGE_LIMIT: int = int(os.environ.get("MAX_PAGE_LIMIT", "100"))

    # -- CORS --------------------------------------------------------------
    # "*" allows any origin, matching the public listing use case.
    CORS_ORIGINS: list[str] = _csv_env("CORS_ORIGINS", "*")

    # -- Logging -----------------------------------------------------------
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    @classmethod
    def validate_production_secrets(cls, app_config: dict) -> None:
        """
        Verify that required secrets are set for production.

        Called by ``create_app()`` when ``config_name == 'production'``.

        Args:
            app_config: The ``app.config`` dict after loading the
                        config class.

        Raises:
            RuntimeError: If any critical value is missing or still set
                          to its insecure default.
        """
        errors: list[str] = []

        if app_config.get("SECRET_KEY") == _DEFAULT_SECRET_KEY:
            errors.append(
                "SECRET_KEY is still the insecure default. "
                "Generate one with: python -c "
                '"import secrets; print(secrets.token_hex(32))"'
            )

        if not os.environ.get("DATABASE_URL"):
            errors.append(
                "DATABASE_URL is not set; production will not run on the "
                "local SQLite fallback."
            )

        if errors:
            combined = "\n  - ".join(errors)
            raise RuntimeError(f"Production configuration errors:\n  - {combined}")

        if "*" in app_config.get("CORS_ORIGINS", []):
            _logger.warning(
                "CORS_ORIGINS allows any origin. Restrict it if the API "
                "is not meant to be called from arbitrary browsers."
            )

        if app_config.get("LOG_LEVEL", "").upper() == "DEBUG":
            _logger.warning(
                "LOG_LEVEL=DEBUG is not recommended in production; SQL "
                "statements and request data may appear in logs."
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: verbose logging, SQL echo enabled."""

    DEBUG: bool = True
    SQLALCHEMY_ECHO: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """
    Testing environment: in-memory SQLite unless TEST_DATABASE_URL says
    otherwise.  Tables are created and dropped by the test fixtures.
    """

    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    LOG_LEVEL: str = "DEBUG"

    # Keep hashing fast in tests; token lifetime stays realistic.
    BCRYPT_ROUNDS: int = 4


class ProductionConfig(BaseConfig):
    """
    Production environment: strict settings, no debug output.

    The application factory calls ``validate_production_secrets()`` at
    startup and refuses to launch if critical values are missing.
    """

    DEBUG: bool = False
    SQLALCHEMY_ECHO: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")


# Lookup dict used by the application factory.
config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
