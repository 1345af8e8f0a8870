"""
Auth service — login and bearer tokens.

Access tokens are HS256 JWTs signed with ``SECRET_KEY`` and carry the
user id (``sub``), role and expiry.  ``load_user_from_token`` is what
Flask-Login's request loader calls on every request that sends
``Authorization: Bearer <token>``.
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

from wematch.exceptions import AuthenticationError, AuthorizationError
from wematch.extensions import db
from wematch.models.mixins import utcnow
from wematch.models.user import User
from wematch.security import verify_password
from wematch.services import audit_service, user_service

logger = logging.getLogger(__name__)


# -- Tokens ----------------------------------------------------------------


def create_access_token(user: User) -> str:
    """Issue a signed access token for ``user``."""
    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(
        minutes=current_app.config["ACCESS_TOKEN_EXPIRE_MINUTES"]
    )
    payload = {
        "sub": str(user.id),
        "role": user.role.value,
        "type": "access",
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(
        payload,
        current_app.config["SECRET_KEY"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_access_token(token: str) -> dict:
    """
    Verify a token's signature and expiry and return its claims.

    Raises:
        AuthenticationError: If the token is expired, tampered with, or
                             not an access token.
    """
    try:
        payload = jwt.decode(
            token,
            current_app.config["SECRET_KEY"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Access token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid access token.") from exc

    if payload.get("type") != "access":
        raise AuthenticationError("Token is not an access token.")
    return payload


def load_user_from_token(token: str) -> User:
    """
    Resolve a bearer token to an active user.

    The role is always read from the database, not from the token, so
    role changes take effect immediately.

    Raises:
        AuthenticationError: If the token is invalid or its user is
                             missing or deactivated.
    """
    payload = decode_access_token(token)
    subject = str(payload.get("sub", ""))
    if not subject.isdigit():
        raise AuthenticationError("Invalid access token subject.")

    user = user_service.get_user_by_id(int(subject))
    if user is None or not user.is_active:
        raise AuthenticationError("Account is not available.")
    return user


def parse_bearer_header(header_value: str | None) -> str | None:
    """
    Extract the token from an ``Authorization`` header value.

    Returns None when no header was sent.

    Raises:
        AuthenticationError: If the header is present but malformed.
    """
    raw = (header_value or "").strip()
    if not raw:
        return None
    scheme, _, token = raw.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authorization must be: Bearer <token>.")
    return token.strip()


# -- Login -----------------------------------------------------------------


def login(email: str, password: str) -> tuple[str, User]:
    """
    Check credentials, record the login and issue a token.

    Returns:
        ``(access_token, user)``.

    Raises:
        AuthenticationError: Unknown email or wrong password.
        AuthorizationError:  The account is deactivated.
    """
    user = user_service.get_user_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt for %s", email)
        raise AuthenticationError("Invalid email or password.")
    if not user.is_active:
        raise AuthorizationError("This account has been deactivated.")

    user.last_login = utcnow()
    audit_service.log_login(user.id)
    db.session.commit()

    logger.info("User %s logged in", user.email)
    return create_access_token(user), user
