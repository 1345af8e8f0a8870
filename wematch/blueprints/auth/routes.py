"""
Routes for the auth blueprint — self-registration, login and ``/me``.

Tokens are stateless, so there is no logout endpoint; clients drop the
token and it expires after ``ACCESS_TOKEN_EXPIRE_MINUTES``.
"""

from flask import jsonify

from wematch.access import RouteClass
from wematch.blueprints.auth import bp
from wematch.decorators import access_required
from wematch.forms import LoginForm, RegisterForm
from wematch.services import auth_service, user_service


@bp.route("/register", methods=["POST"])
@access_required(RouteClass.PUBLIC)
def register(ctx):  # pylint: disable=unused-argument
    """Create a ``USER`` account."""
    form = RegisterForm().validate_or_raise()
    user = user_service.register(
        email=form.email.data,
        password=form.password.data,
        first_name=form.firstName.data,
        last_name=form.lastName.data or "",
    )
    return jsonify(user.to_dict()), 201


@bp.route("/login", methods=["POST"])
@access_required(RouteClass.PUBLIC)
def login(ctx):  # pylint: disable=unused-argument
    """Exchange email and password for a bearer token."""
    form = LoginForm().validate_or_raise()
    token, user = auth_service.login(form.email.data, form.password.data)
    return jsonify(
        {"access_token": token, "token_type": "bearer", "user": user.to_dict()}
    )


@bp.route("/me")
@access_required(RouteClass.SELF)
def me(ctx):
    """Return the authenticated principal."""
    return jsonify(ctx.principal.to_dict())
