"""
Password hashing helpers (bcrypt).
"""

import logging

import bcrypt
from flask import current_app

logger = logging.getLogger(__name__)


def hash_password(plain_password: str) -> str:
    """Hash a password with bcrypt using the configured work factor."""
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    return bcrypt.hashpw(
        plain_password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)
    ).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Return True if ``plain_password`` matches the stored hash."""
    if not plain_password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), password_hash.encode("utf-8")
        )
    except ValueError:
        # Malformed hash in the database.
        logger.warning("Stored password hash could not be parsed.")
        return False
