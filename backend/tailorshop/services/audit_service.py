"""Audit logging service.

Entries are written after the audited operation has committed, in their own
short transaction on the caller's session. A failed audit write is logged and
rolled back; it never reaches the caller.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tailorshop.models.audit import AuditLogEntry
from tailorshop.services.post_commit import Actor, best_effort

logger = logging.getLogger("audit")


def log_action(
    db: Session,
    action: str,
    entity_type: str = "",
    entity_id: str = "",
    user_id: Optional[int] = None,
    user_name: str = "",
    ip_address: str = "",
    details: Optional[dict[str, Any]] = None,
) -> Optional[AuditLogEntry]:
    """Write an audit log entry.

    Args:
        db: Session whose previous work is already committed.
        action: The action performed (CREATE, UPDATE, DELETE, RESTORE, ...)
        entity_type: Type of entity affected (Order, Material, ...)
        entity_id: ID of the affected entity
        user_id: ID of the user performing the action
        user_name: Name/email of the user
        ip_address: Client IP address
        details: Additional details (status, price, quantities, ...)
    """
    entry = AuditLogEntry(
        user_id=user_id,
        user_name=user_name,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id else "",
        details=details or {},
        ip_address=ip_address or "",
        created_at=datetime.now(timezone.utc),
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        logger.exception(f"Failed to write audit log entry: {action} {entity_type} {entity_id}")
        db.rollback()
        return None

    logger.info(f"{action} {entity_type} {entity_id} by user={user_id}")
    return entry


def audit_after_commit(
    db: Session,
    actor: Actor,
    action: str,
    entity_type: str,
    entity_id: str,
    details: Optional[dict[str, Any]] = None,
) -> None:
    """Audit an operation that already committed. Never raises."""
    with best_effort(f"audit {action} {entity_type} {entity_id}"):
        log_action(
            db,
            action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=actor.user_id,
            user_name=actor.name,
            ip_address=actor.ip_address,
            details=details,
        )
