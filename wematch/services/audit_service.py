"""
Audit service — records all data changes and queries audit logs.

Every CREATE, UPDATE and DELETE performed by the other services passes
through ``log_change`` before the surrounding commit, so the audit row
and the change land in the same transaction.
"""

import json
import logging
from datetime import datetime
from typing import Any

from flask import has_request_context, request
from sqlalchemy import desc

from wematch.extensions import db
from wematch.models.audit import AuditLog
from wematch.models.mixins import to_naive_utc
from wematch.services.query_service import Page, Pagination, paginate

logger = logging.getLogger(__name__)


# -- Write audit entries ---------------------------------------------------


def log_change(
    user_id: int | None,
    action_type: str,
    entity_type: str,
    entity_id: int | None,
    previous_value: dict[str, Any] | None = None,
    new_value: dict[str, Any] | None = None,
) -> AuditLog:
    """
    Record a data change in the audit log (no commit).

    Args:
        user_id:        ID of the user who made the change, or None for
                        system actions (e.g., CLI seeding).
        action_type:    One of CREATE, UPDATE, DELETE, LOGIN.
        entity_type:    Table name of the affected entity (e.g. 'skills').
        entity_id:      Primary key of the affected record.
        previous_value: Dict of the record state before the change.
        new_value:      Dict of the record state after the change.

    Returns:
        The newly created AuditLog record.
    """
    ip_address = None
    user_agent = None
    if has_request_context():
        ip_address = request.remote_addr
        user_agent = str(request.user_agent)[:500]

    entry = AuditLog(
        user_id=user_id,
        action_type=action_type,
        entity_type=entity_type,
        entity_id=entity_id,
        previous_value=json.dumps(previous_value, default=str) if previous_value else None,
        new_value=json.dumps(new_value, default=str) if new_value else None,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.session.add(entry)
    db.session.flush()

    logger.info(
        "Audit: %s %s:%s by user %s",
        action_type,
        entity_type,
        entity_id,
        user_id,
    )
    return entry


def log_login(user_id: int) -> AuditLog:
    """Record a successful user login."""
    return log_change(
        user_id=user_id,
        action_type="LOGIN",
        entity_type="users",
        entity_id=user_id,
    )


# -- Query audit logs ------------------------------------------------------


def get_audit_logs(
    pagination: Pagination,
    user_id: int | None = None,
    action_type: str | None = None,
    entity_type: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> Page:
    """
    Query audit logs with optional filters, newest first.

    Args:
        pagination:  Page and limit.
        user_id:     Filter by the user who made the change.
        action_type: Filter by action (CREATE, UPDATE, DELETE, LOGIN).
        entity_type: Filter by entity table name.
        start_date:  Include only entries on or after this datetime.
        end_date:    Include only entries on or before this datetime.
    """
    query = AuditLog.query.order_by(desc(AuditLog.created_at), desc(AuditLog.id))

    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    if action_type:
        query = query.filter(AuditLog.action_type == action_type.upper())
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if start_date:
        query = query.filter(AuditLog.created_at >= to_naive_utc(start_date))
    if end_date:
        query = query.filter(AuditLog.created_at <= to_naive_utc(end_date))

    return paginate(query, pagination)
