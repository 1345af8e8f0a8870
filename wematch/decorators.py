"""
Authorization decorator for route-level access control.

Routes declare their ``RouteClass`` and receive the resulting
``AccessContext`` as the ``ctx`` keyword argument::

    @bp.route("/byUser/<int:opportunity_id>", methods=["DELETE"])
    @access_required(RouteClass.OWNER)
    def delete_by_user(opportunity_id, ctx):
        ...

The decision itself lives in ``wematch.access.decide``; this module
only adapts it to Flask-Login's ``current_user`` and the error types.
"""

import logging
from functools import wraps

from flask import g, request
from flask_login import current_user

from wematch.access import Access, AccessContext, RouteClass, decide
from wematch.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)


def access_required(route: RouteClass):
    """
    Decorator that authorizes the caller for a route classification.

    Anonymous callers of non-public routes get 401; authenticated
    callers whose role is not accepted get 403.

    Args:
        route: The classification of the decorated route.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            principal = None
            if current_user.is_authenticated:
                # Unwrap the proxy so services hold the real model object.
                principal = current_user._get_current_object()

            access = decide(principal.role if principal else None, route)
            if access is Access.DENY:
                if principal is None:
                    # The request loader records why a token was rejected.
                    raise AuthenticationError(g.get("auth_error"))
                logger.warning(
                    "Access denied: user %d (%s) with role '%s' "
                    "attempted %s %s (route class: %s)",
                    principal.id,
                    principal.email,
                    principal.role.value,
                    request.method,
                    request.path,
                    route.value,
                )
                raise AuthorizationError()

            kwargs["ctx"] = AccessContext(principal=principal, access=access)
            return func(*args, **kwargs)

        return wrapper

    return decorator
