"""
Routes for the skills blueprint.

Every role manages its own skills; someone else's skill id is answered
with 404.  ``/skills/search`` is for organizations looking for people.
"""

from flask import jsonify, request

from wematch.access import RouteClass
from wematch.blueprints.skills import bp
from wematch.decorators import access_required
from wematch.exceptions import ValidationError
from wematch.forms import SkillForm, SkillUpdateForm
from wematch.services import skill_service


@bp.route("", methods=["POST"])
@access_required(RouteClass.SELF)
def create_skill(ctx):
    """Add a skill to the caller's profile."""
    form = SkillForm().validate_or_raise()
    skill = skill_service.create_skill(form.payload(), ctx)
    return jsonify(skill.to_dict()), 201


@bp.route("", methods=["GET"])
@access_required(RouteClass.SELF)
def list_skills(ctx):
    """List the caller's skills."""
    return jsonify([skill.to_dict() for skill in skill_service.get_skills(ctx)])


@bp.route("/search", methods=["GET"])
@access_required(RouteClass.OWNER)
def search_skills(ctx):  # pylint: disable=unused-argument
    """Find active users whose skills match ``?name=``."""
    name = (request.args.get("name") or "").strip()
    if not name:
        raise ValidationError(
            "name is required.", details={"name": ["This field is required."]}
        )
    results = skill_service.search_users_by_skill(name)
    return jsonify(
        [{"user": user.to_dict(), "skill": skill.to_dict()} for user, skill in results]
    )


@bp.route("/<int:skill_id>", methods=["GET"])
@access_required(RouteClass.SELF)
def get_skill(skill_id, ctx):
    return jsonify(skill_service.get_skill(skill_id, ctx).to_dict())


@bp.route("/<int:skill_id>", methods=["PATCH"])
@access_required(RouteClass.SELF)
def update_skill(skill_id, ctx):
    """Change a skill's name or description; only sent fields change."""
    form = SkillUpdateForm().validate_or_raise()
    changes = form.payload(only_provided=True)
    if "skill_name" in changes and not changes["skill_name"]:
        raise ValidationError(
            "skillName cannot be empty.",
            details={"skillName": ["This field is required."]},
        )
    skill = skill_service.update_skill(skill_id, changes, ctx)
    return jsonify(skill.to_dict())


@bp.route("/<int:skill_id>", methods=["DELETE"])
@access_required(RouteClass.SELF)
def delete_skill(skill_id, ctx):
    skill_service.delete_skill(skill_id, ctx)
    return "", 204
