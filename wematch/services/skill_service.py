"""
Skill service — skills listed on user profiles.

Skills are owned by exactly one user, including for admins.  Every
lookup is filtered by the caller's id, so another user's skill is
simply not found; nothing reveals that the id exists.
"""

import logging

from wematch.access import AccessContext
from wematch.exceptions import ConflictError, NotFoundError
from wematch.extensions import db
from wematch.models.skill import Skill
from wematch.models.user import User
from wematch.services import audit_service
from wematch.services.query_service import contains

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("skill_name", "description")


def _ensure_unique_name(user_id: int, skill_name: str, exclude_id: int | None = None):
    query = Skill.query.filter(Skill.user_id == user_id, Skill.skill_name == skill_name)
    if exclude_id is not None:
        query = query.filter(Skill.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"Skill '{skill_name}' is already on this profile.")


def create_skill(data: dict, ctx: AccessContext) -> Skill:
    """
    Add a skill to the caller's profile.

    Raises:
        ConflictError: If the caller already lists a skill with that name.
    """
    _ensure_unique_name(ctx.user_id, data["skill_name"])

    skill = Skill(
        skill_name=data["skill_name"],
        description=data.get("description"),
        user_id=ctx.user_id,
    )
    db.session.add(skill)
    db.session.flush()

    audit_service.log_change(
        user_id=ctx.user_id,
        action_type="CREATE",
        entity_type="skills",
        entity_id=skill.id,
        new_value=skill.to_dict(),
    )
    db.session.commit()

    logger.info("User %d added skill %s", ctx.user_id, skill.skill_name)
    return skill


def get_skills(ctx: AccessContext) -> list[Skill]:
    """Return the caller's skills ordered by name."""
    return (
        Skill.query.filter(Skill.user_id == ctx.user_id)
        .order_by(Skill.skill_name, Skill.id)
        .all()
    )


def get_skill(skill_id: int, ctx: AccessContext) -> Skill:
    """
    Return one of the caller's skills.

    Raises:
        NotFoundError: If the id is absent or owned by someone else.
    """
    skill = Skill.query.filter(Skill.id == skill_id, Skill.user_id == ctx.user_id).first()
    if skill is None:
        raise NotFoundError("Skill not found.")
    return skill


def update_skill(skill_id: int, changes: dict, ctx: AccessContext) -> Skill:
    """
    Apply ``changes`` to a skill the caller owns.

    Raises:
        NotFoundError: If the id is absent or owned by someone else.
        ConflictError: If the new name duplicates another of the owner's skills.
    """
    skill = get_skill(skill_id, ctx)

    changes = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
    if "skill_name" in changes:
        _ensure_unique_name(skill.user_id, changes["skill_name"], exclude_id=skill.id)

    previous = {key: getattr(skill, key) for key in changes}
    for key, value in changes.items():
        setattr(skill, key, value)

    audit_service.log_change(
        user_id=ctx.user_id,
        action_type="UPDATE",
        entity_type="skills",
        entity_id=skill.id,
        previous_value=previous,
        new_value=changes,
    )
    db.session.commit()

    logger.info("Updated skill ID %d", skill.id)
    return skill


def delete_skill(skill_id: int, ctx: AccessContext) -> None:
    """
    Remove a skill the caller owns.

    Raises:
        NotFoundError: If the id is absent, owned by someone else, or
                       already deleted.
    """
    skill = get_skill(skill_id, ctx)
    previous = skill.to_dict()

    db.session.delete(skill)
    audit_service.log_change(
        user_id=ctx.user_id,
        action_type="DELETE",
        entity_type="skills",
        entity_id=skill_id,
        previous_value=previous,
    )
    db.session.commit()

    logger.info("Deleted skill ID %d", skill_id)


def search_users_by_skill(skill_name: str) -> list[tuple[User, Skill]]:
    """
    Find active users listing a skill whose name contains ``skill_name``
    (case-insensitive).

    Returns:
        ``(user, skill)`` pairs ordered by skill name, then user id.
    """
    rows = (
        db.session.query(User, Skill)
        .join(Skill, Skill.user_id == User.id)
        .filter(
            contains(Skill.skill_name, skill_name),
            User.is_active == True,  # noqa: E712
        )
        .order_by(Skill.skill_name, User.id)
        .all()
    )
    return [(user, skill) for user, skill in rows]
