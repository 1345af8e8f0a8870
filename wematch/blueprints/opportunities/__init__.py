"""
Opportunities blueprint — admin, public and by-user listings.
"""

from flask import Blueprint

bp = Blueprint("opportunities", __name__)

# Import routes after blueprint creation to avoid circular imports.
from wematch.blueprints.opportunities import routes  # noqa: E402, F401
