"""
Users blueprint — user administration and the audit log.
"""

from flask import Blueprint

bp = Blueprint("users", __name__)

# Import routes after blueprint creation to avoid circular imports.
from wematch.blueprints.users import routes  # noqa: E402, F401
