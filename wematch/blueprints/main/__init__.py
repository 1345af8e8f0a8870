"""
Main blueprint — health check and uploaded images.
"""

from flask import Blueprint

bp = Blueprint("main", __name__)

# Import routes after blueprint creation to avoid circular imports.
from wematch.blueprints.main import routes  # noqa: E402, F401
