"""
Skills blueprint — skills on the caller's profile.
"""

from flask import Blueprint

bp = Blueprint("skills", __name__)

# Import routes after blueprint creation to avoid circular imports.
from wematch.blueprints.skills import routes  # noqa: E402, F401
