"""
Flask extension instances.

Extensions are created here without binding to an application so that
the application factory can call ``init_app()`` on each one during
``create_app()``.  This avoids circular imports and follows the
standard Flask extension pattern.
"""

from flask_cors import CORS
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# -- Database ORM ----------------------------------------------------------
# The ``db`` instance is imported by models and services throughout the app.
db = SQLAlchemy()

# -- Schema migrations (Alembic via Flask-Migrate) -------------------------
migrate = Migrate()

# -- Bearer-token authentication -------------------------------------------
# The API is stateless: principals are resolved per request from the
# Authorization header by the request loader registered in the factory.
login_manager = LoginManager()

# -- Cross-origin requests -------------------------------------------------
# Allowed origins come from ``CORS_ORIGINS`` when the factory binds it.
cors = CORS()
