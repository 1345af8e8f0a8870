"""
Storage service — keep uploaded images on local disk.

Uploads are written to ``UPLOAD_FOLDER`` under a random name that keeps
only the original extension.  The returned reference (the stored file
name) is what models persist; ``GET /images/<reference>`` serves it.
"""

import logging
import os
import uuid

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from wematch.exceptions import InternalError, ValidationError

logger = logging.getLogger(__name__)


def upload_folder() -> str:
    """Return the configured upload folder, creating it if needed."""
    folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    return folder


def _extension(filename: str) -> str:
    safe_name = secure_filename(filename or "")
    if "." not in safe_name:
        return ""
    return safe_name.rsplit(".", 1)[1].lower()


def save_image(image: FileStorage | None) -> str | None:
    """
    Store an uploaded image and return its reference.

    Args:
        image: The uploaded file, or None when no file was sent.

    Returns:
        The stored file name, or None if nothing was uploaded.

    Raises:
        ValidationError: If the extension is not an allowed image type.
        InternalError:   If the file could not be written.
    """
    if image is None or not image.filename:
        return None

    extension = _extension(image.filename)
    allowed = current_app.config["ALLOWED_IMAGE_EXTENSIONS"]
    if extension not in allowed:
        raise ValidationError(
            f"Unsupported image type '{extension or image.filename}'. "
            f"Allowed: {', '.join(allowed)}.",
            details={"image": [image.filename]},
        )

    reference = f"{uuid.uuid4().hex}.{extension}"
    path = os.path.join(upload_folder(), reference)
    try:
        image.save(path)
    except OSError as exc:
        logger.exception("Failed to store upload %s at %s", image.filename, path)
        raise InternalError("Could not store the uploaded image.") from exc

    logger.info("Stored image %s as %s", image.filename, reference)
    return reference


def delete_image(reference: str | None) -> None:
    """
    Remove a stored image.

    Called after the owning record's change has been committed, so a
    failure here only leaves an orphaned file and is logged, not raised.
    """
    if not reference:
        return

    path = os.path.join(upload_folder(), secure_filename(reference))
    try:
        os.remove(path)
    except FileNotFoundError:
        logger.warning("Image %s was already missing from %s", reference, path)
    except OSError:
        logger.exception("Failed to delete image %s", reference)
    else:
        logger.info("Deleted image %s", reference)
