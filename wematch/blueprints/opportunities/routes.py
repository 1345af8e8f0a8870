"""
Routes for the opportunities blueprint.

Three surfaces share the opportunity table:

  - ``/opportunities``         admin path, organization-owned postings.
  - ``/opportunities/all``     public, read-only listing.
  - ``/opportunities/byUser``  postings owned by the calling user.

Create and update accept ``multipart/form-data`` (with an optional
``image`` file) or JSON.  Listing filters come from the query string.
"""

from flask import jsonify, request

from wematch.access import RouteClass
from wematch.blueprints.opportunities import bp
from wematch.decorators import access_required
from wematch.forms import (
    OpportunityFilterForm,
    OpportunityForm,
    OpportunityUpdateForm,
    pagination_from,
)
from wematch.services import opportunity_service


def _listing_args():
    """Validate the query string into ``(filters, pagination)``."""
    form = OpportunityFilterForm(formdata=request.args).validate_or_raise()
    return form.to_filter(), pagination_from(form)


# =========================================================================
# Admin path
# =========================================================================


@bp.route("", methods=["POST"])
@access_required(RouteClass.ADMIN)
def create_opportunity(ctx):
    """Create an opportunity owned by an organization."""
    form = OpportunityForm().validate_or_raise()
    opportunity = opportunity_service.create_for_organization(
        form.payload(), ctx, image=form.image.data
    )
    return jsonify(opportunity.to_dict()), 201


@bp.route("", methods=["GET"])
@access_required(RouteClass.ADMIN)
def list_opportunities(ctx):
    """List one organization's opportunities (default: the caller's)."""
    filters, pagination = _listing_args()
    page = opportunity_service.list_for_organization(filters, pagination, ctx)
    return jsonify(page.to_dict())


@bp.route("/<int:opportunity_id>", methods=["PATCH"])
@access_required(RouteClass.ADMIN)
def update_opportunity(opportunity_id, ctx):
    """Update any opportunity; only the fields sent are changed."""
    form = OpportunityUpdateForm().validate_or_raise()
    opportunity = opportunity_service.update(
        opportunity_id, form.payload(only_provided=True), ctx, image=form.image.data
    )
    return jsonify(opportunity.to_dict())


@bp.route("/<int:opportunity_id>", methods=["DELETE"])
@access_required(RouteClass.ADMIN)
def delete_opportunity(opportunity_id, ctx):
    """Delete any opportunity."""
    opportunity_service.delete(opportunity_id, ctx)
    return "", 204


# =========================================================================
# Public listing
# =========================================================================


@bp.route("/all", methods=["GET"])
@access_required(RouteClass.PUBLIC)
def list_all_opportunities(ctx):  # pylint: disable=unused-argument
    """Filtered, paginated listing of every opportunity."""
    filters, pagination = _listing_args()
    page = opportunity_service.list_public(filters, pagination)
    return jsonify(page.to_dict())


# =========================================================================
# By-user path
# =========================================================================


@bp.route("/byUser", methods=["POST"])
@access_required(RouteClass.OWNER)
def create_user_opportunity(ctx):
    """Create an opportunity owned by the caller."""
    form = OpportunityForm().validate_or_raise()
    opportunity = opportunity_service.create_for_user(
        form.payload(), ctx, image=form.image.data
    )
    return jsonify(opportunity.to_dict()), 201


@bp.route("/byUser", methods=["GET"])
@access_required(RouteClass.OWNER)
def list_user_opportunities(ctx):
    filters, pagination = _listing_args()
    page = opportunity_service.list_for_user(filters, pagination, ctx)
    return jsonify(page.to_dict())


@bp.route("/byUser/<int:opportunity_id>", methods=["GET"])
@access_required(RouteClass.OWNER)
def get_user_opportunity(opportunity_id, ctx):
    opportunity = opportunity_service.get_for_user(opportunity_id, ctx)
    return jsonify(opportunity.to_dict())


@bp.route("/byUser/<int:opportunity_id>", methods=["PATCH"])
@access_required(RouteClass.OWNER)
def update_user_opportunity(opportunity_id, ctx):
    form = OpportunityUpdateForm().validate_or_raise()
    opportunity = opportunity_service.update_for_user(
        opportunity_id, form.payload(only_provided=True), ctx, image=form.image.data
    )
    return jsonify(opportunity.to_dict())


@bp.route("/byUser/<int:opportunity_id>", methods=["DELETE"])
@access_required(RouteClass.OWNER)
def delete_user_opportunity(opportunity_id, ctx):
    opportunity_service.delete_for_user(opportunity_id, ctx)
    return "", 204
