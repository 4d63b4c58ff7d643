"""
Activity log service: append-only audit trail.

Every state-changing operation writes one entry through log_activity() inside
its own transaction, so the entry commits or rolls back with the change.
"""
import logging

from kaos_inventory.models import ActivityType
from kaos_inventory.repositories import ActivityRepository

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


def log_activity(session, activity_type: ActivityType, description: str, related_id: int = None):
    """
    Append an activity entry to the log.

    Args:
        session: Database session (caller is responsible for committing)
        activity_type: ActivityType enum value
        description: Human readable description (Indonesian, shown in the feed)
        related_id: ID of the affected entity

    Returns:
        The new Activity
    """
    activity = ActivityRepository(session).create(
        activity_type=activity_type,
        description=description,
        related_id=related_id
    )
    logger.info(f"[{activity_type.value}] {description} (related_id={related_id})")
    return activity


def get_activities(session, limit: int = DEFAULT_LIMIT):
    """Most recent activities first, at most `limit` entries."""
    if limit is None or limit < 1:
        limit = DEFAULT_LIMIT
    return ActivityRepository(session).list(limit)
