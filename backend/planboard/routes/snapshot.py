"""
Guards shared by the routes that accept a task snapshot.
"""

from typing import Sequence

from planboard.config import get_settings
from planboard.exceptions import ValidationError
from planboard.schemas.task import Task


def ensure_snapshot_size(tasks: Sequence[Task]) -> None:
    """Reject snapshots larger than settings.max_tasks_per_request."""
    limit = get_settings().max_tasks_per_request
    if len(tasks) > limit:
        raise ValidationError(
            f"Snapshot has {len(tasks)} tasks, the limit is {limit}",
            details=[{
                "loc": ["body", "tasks"],
                "msg": f"at most {limit} tasks per request",
                "type": "snapshot_too_large",
            }],
        )
