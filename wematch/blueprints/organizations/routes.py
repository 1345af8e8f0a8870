"""
Routes for the organizations blueprint.

Browsing is public.  Admins create and delete organizations; members
with the ``ORGANIZATION`` role may edit their own.
"""

from flask import jsonify, request

from wematch.access import RouteClass
from wematch.blueprints.organizations import bp
from wematch.decorators import access_required
from wematch.exceptions import ValidationError
from wematch.forms import OrganizationForm, OrganizationUpdateForm, PaginationForm, pagination_from
from wematch.services import organization_service


@bp.route("", methods=["GET"])
@access_required(RouteClass.PUBLIC)
def list_organizations(ctx):  # pylint: disable=unused-argument
    """Paginated organizations, optionally searched by ``?name=``."""
    form = PaginationForm(formdata=request.args).validate_or_raise()
    page = organization_service.get_organizations(
        pagination_from(form), name=form.name.data or None
    )
    return jsonify(page.to_dict())


@bp.route("/<int:organization_id>", methods=["GET"])
@access_required(RouteClass.PUBLIC)
def get_organization(organization_id, ctx):  # pylint: disable=unused-argument
    return jsonify(organization_service.get_organization(organization_id).to_dict())


@bp.route("", methods=["POST"])
@access_required(RouteClass.ADMIN)
def create_organization(ctx):
    form = OrganizationForm().validate_or_raise()
    organization = organization_service.create_organization(form.payload(), ctx)
    return jsonify(organization.to_dict()), 201


@bp.route("/<int:organization_id>", methods=["PATCH"])
@access_required(RouteClass.OWNER)
def update_organization(organization_id, ctx):
    """Update an organization; only sent fields change."""
    form = OrganizationUpdateForm().validate_or_raise()
    changes = form.payload(only_provided=True)
    if "name" in changes and not changes["name"]:
        raise ValidationError(
            "name cannot be empty.", details={"name": ["This field is required."]}
        )
    organization = organization_service.update_organization(
        organization_id, changes, ctx
    )
    return jsonify(organization.to_dict())


@bp.route("/<int:organization_id>", methods=["DELETE"])
@access_required(RouteClass.ADMIN)
def delete_organization(organization_id, ctx):
    organization_service.delete_organization(organization_id, ctx)
    return "", 204
