"""
Organizations blueprint — organization profiles.
"""

from flask import Blueprint

bp = Blueprint("organizations", __name__)

# Import routes after blueprint creation to avoid circular imports.
from wematch.blueprints.organizations import routes  # noqa: E402, F401
