"""
Auth blueprint — registration, login and the current principal.
"""

from flask import Blueprint

bp = Blueprint("auth", __name__)

# Import routes after blueprint creation to avoid circular imports.
from wematch.blueprints.auth import routes  # noqa: E402, F401
