"""
Routes for the main blueprint — health check and uploaded images.
"""

import logging

from flask import send_from_directory
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from wematch.access import RouteClass
from wematch.blueprints.main import bp
from wematch.decorators import access_required
from wematch.extensions import db
from wematch.services import storage_service

logger = logging.getLogger(__name__)


@bp.route("/health")
@access_required(RouteClass.PUBLIC)
def health_check(ctx):  # pylint: disable=unused-argument
    """
    Health check endpoint for monitoring and load balancers.

    Returns 200 if the app is running and can reach the database.
    """
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}, 200
    except SQLAlchemyError as exc:
        logger.error("Health check failed: %s", exc)
        db.session.rollback()
        return {"status": "unhealthy", "database": "unreachable"}, 503


@bp.route("/images/<path:filename>")
@access_required(RouteClass.PUBLIC)
def serve_image(filename, ctx):  # pylint: disable=unused-argument
    """Serve an uploaded image; unknown names are 404."""
    return send_from_directory(storage_service.upload_folder(), filename)
