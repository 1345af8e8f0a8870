"""
Routes for the users blueprint — user administration and audit logs.

All routes are restricted to ``SUPER_ADMIN``.  Every change is
audit-logged by the user service.
"""

from flask import jsonify, request

from wematch.access import RouteClass
from wematch.blueprints.users import bp
from wematch.decorators import access_required
from wematch.forms import AuditListForm, ProvisionUserForm, RoleForm, UserListForm, pagination_from
from wematch.services import audit_service, user_service

# =========================================================================
# Users
# =========================================================================


@bp.route("", methods=["GET"])
@access_required(RouteClass.ADMIN)
def list_users(ctx):  # pylint: disable=unused-argument
    """Paginated user list; ``?includeInactive=true`` shows disabled accounts."""
    form = UserListForm(formdata=request.args).validate_or_raise()
    page = user_service.get_all_users(
        pagination_from(form),
        include_inactive=form.includeInactive.data,
        role=form.role.data,
    )
    return jsonify(page.to_dict())


@bp.route("", methods=["POST"])
@access_required(RouteClass.ADMIN)
def create_user(ctx):
    """Provision an account with any role."""
    form = ProvisionUserForm().validate_or_raise()
    user = user_service.create_user(
        email=form.email.data,
        password=form.password.data,
        first_name=form.firstName.data,
        last_name=form.lastName.data or "",
        role=form.role.data,
        organization_id=form.organizationId.data,
        created_by=ctx.user_id,
    )
    return jsonify(user.to_dict()), 201


@bp.route("/<int:user_id>", methods=["GET"])
@access_required(RouteClass.ADMIN)
def get_user(user_id, ctx):  # pylint: disable=unused-argument
    return jsonify(user_service.get_user(user_id).to_dict())


@bp.route("/<int:user_id>/role", methods=["PATCH"])
@access_required(RouteClass.ADMIN)
def update_role(user_id, ctx):
    """Change a user's role and, optionally, their organization."""
    form = RoleForm().validate_or_raise()
    user = user_service.update_user_role(
        user_id,
        form.role.data,
        ctx,
        organization_id=form.organizationId.data,
        clear_organization=form.sent_null("organizationId"),
    )
    return jsonify(user.to_dict())


@bp.route("/<int:user_id>/deactivate", methods=["POST"])
@access_required(RouteClass.ADMIN)
def deactivate_user(user_id, ctx):
    return jsonify(user_service.set_active(user_id, False, ctx).to_dict())


@bp.route("/<int:user_id>/reactivate", methods=["POST"])
@access_required(RouteClass.ADMIN)
def reactivate_user(user_id, ctx):
    return jsonify(user_service.set_active(user_id, True, ctx).to_dict())


@bp.route("/<int:user_id>", methods=["DELETE"])
@access_required(RouteClass.ADMIN)
def delete_user(user_id, ctx):
    """Hard-delete a user who owns no skills or opportunities."""
    user_service.delete_user(user_id, ctx)
    return "", 204


# =========================================================================
# Audit log
# =========================================================================


@bp.route("/audit", methods=["GET"])
@access_required(RouteClass.ADMIN)
def audit_logs(ctx):  # pylint: disable=unused-argument
    """
    Paginated audit trail, newest first.

    Filters: ``userId``, ``actionType``, ``entityType``, ``startDate``,
    ``endDate``.
    """
    form = AuditListForm(formdata=request.args).validate_or_raise()
    page = audit_service.get_audit_logs(
        pagination_from(form),
        user_id=form.userId.data,
        action_type=form.actionType.data or None,
        entity_type=form.entityType.data or None,
        start_date=form.startDate.data,
        end_date=form.endDate.data,
    )
    return jsonify(page.to_dict())
