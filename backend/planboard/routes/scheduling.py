"""
Scheduling routes for the Planboard API.

Every request carries the project's full task snapshot; nothing is stored.
"""

from fastapi import APIRouter

from planboard.exceptions import ERROR_RESPONSES, CycleDetectedError, SelfDependencyError
from planboard.logging_config import get_logger
from planboard.routes.snapshot import ensure_snapshot_size
from planboard.schemas.scheduling import (
    CascadePreviewRead,
    CascadeRead,
    CascadeRequest,
    ConstraintRead,
    ConstraintRequest,
    CriticalPathRead,
    DateChangePreviewRequest,
    DependencyCheckRead,
    DependencyCheckRequest,
    DependencyPreviewRequest,
    SuccessorDatesRequest,
    TaskDatesRead,
    TaskSnapshot,
)
from planboard.services.calendars import apply_constraint
from planboard.services.critical_path import calculate_critical_path_detailed
from planboard.services.dependency_dates import calculate_successor_dates
from planboard.services.graph import validate_dependency_no_cycle
from planboard.services.recalc import recalculate_task_dates
from planboard.services.simulation import preview_date_change, preview_dependency

logger = get_logger(__name__)

router = APIRouter(responses=ERROR_RESPONSES)


@router.post("/successor-dates", response_model=TaskDatesRead)
async def successor_dates(body: SuccessorDatesRequest):
    """Dates a successor needs for one dependency on one predecessor."""
    return calculate_successor_dates(
        body.predecessor_start,
        body.predecessor_end,
        body.successor_duration,
        body.type,
        body.lag,
    )


@router.post("/cascade", response_model=CascadeRead)
async def cascade(body: CascadeRequest):
    """
    Recalculate every task downstream of a changed task.

    The caller persists the returned dates.
    """
    ensure_snapshot_size(body.tasks)
    updates = recalculate_task_dates(body.changed_task_id, body.tasks)
    logger.info(f"Cascade from {body.changed_task_id}: {len(updates)} tasks to update")
    return {"updates": updates}


@router.post("/cascade/preview", response_model=CascadePreviewRead)
async def cascade_preview(body: DateChangePreviewRequest):
    """What-if: move one task and show the ripple effect."""
    ensure_snapshot_size(body.tasks)
    return preview_date_change(body.task_id, body.start_date, body.end_date, body.tasks)


@router.post("/dependencies/validate", response_model=DependencyCheckRead)
async def validate_dependency(body: DependencyCheckRequest):
    """
    Check a proposed dependency before it is persisted.

    Returns 400 if the edge is a self-dependency or would close a cycle.
    """
    ensure_snapshot_size(body.tasks)

    if body.predecessor_id == body.successor_id:
        logger.warning(f"Self-dependency rejected: {body.predecessor_id}")
        raise SelfDependencyError(body.predecessor_id)

    logger.debug(f"Running cycle detection for {body.predecessor_id} -> {body.successor_id}")
    if not validate_dependency_no_cycle(body.predecessor_id, body.successor_id, body.tasks):
        logger.warning(
            f"Cycle detected: {body.predecessor_id} -> {body.successor_id} "
            f"would create a cycle"
        )
        raise CycleDetectedError(body.predecessor_id, body.successor_id)

    return {"valid": True}


@router.post("/dependencies/preview", response_model=CascadePreviewRead)
async def dependency_preview(body: DependencyPreviewRequest):
    """What-if: add a dependency and show which tasks would move."""
    ensure_snapshot_size(body.tasks)
    return preview_dependency(
        body.predecessor_id,
        body.successor_id,
        body.type,
        body.lag,
        body.tasks,
    )


@router.post("/critical-path", response_model=CriticalPathRead)
async def critical_path(body: TaskSnapshot):
    """Full CPM schedule: early/late dates, floats and the critical path."""
    ensure_snapshot_size(body.tasks)
    return calculate_critical_path_detailed(body.tasks)


@router.post("/constraint", response_model=ConstraintRead)
async def constraint(body: ConstraintRequest):
    """Place a task on the default working calendar under one constraint."""
    return apply_constraint(
        body.preferred_start,
        body.duration_days,
        body.constraint_type,
        body.constraint_date,
    )
