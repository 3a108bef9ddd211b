"""
What-If Simulation Service.

Previews the ripple effect of a proposed change without touching the input
snapshot:
- moving a task to new dates
- adding a new dependency between two tasks

Each preview runs the regular cascade on a copied snapshot and reports the
old and new dates of every task that would move.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Sequence

from planboard.exceptions import (
    CycleDetectedError,
    DuplicateDependencyError,
    NotFoundError,
    SelfDependencyError,
)
from planboard.logging_config import get_logger
from planboard.schemas.task import Dependency, DependencyType, Task
from planboard.services.dates import DateLike, calculate_duration, parse_date
from planboard.services.dependency_dates import TaskDateUpdate, coerce_dependency_type
from planboard.services.graph import build_task_graph, validate_dependency_no_cycle
from planboard.services.recalc import calculate_constrained_dates, recalculate_task_dates

logger = get_logger(__name__)


@dataclass
class TaskImpact:
    """The impact of the simulation on a single task."""
    task_id: str
    name: str
    original_start: date
    original_end: date
    simulated_start: date
    simulated_end: date
    delta_days: int  # End date shift; positive = delayed, negative = earlier


@dataclass
class CascadePreview:
    """Complete result of a what-if simulation."""
    original_end_date: date | None
    simulated_end_date: date | None
    impact_days: int  # How many days the project end moved
    affected_tasks: list[TaskImpact] = field(default_factory=list)
    total_tasks: int = 0


def apply_date_updates(
    tasks: Iterable[Task],
    updates: dict[str, TaskDateUpdate],
) -> list[Task]:
    """
    Return copies of the tasks with the computed dates applied.

    Tasks without an update are returned as-is. The duration is kept,
    since the cascade derives dates from it.
    """
    result = []
    for task in tasks:
        update = updates.get(task.id)
        if update is None:
            result.append(task)
        else:
            result.append(task.model_copy(update={
                "start_date": update.start_date,
                "end_date": update.end_date,
            }))
    return result


def _find_task(task_id: str, tasks: Sequence[Task], resource: str = "Task") -> Task:
    for task in tasks:
        if task.id == task_id:
            return task
    raise NotFoundError(resource, task_id)


def _build_preview(original: Sequence[Task], simulated: Sequence[Task]) -> CascadePreview:
    originals = {t.id: t for t in original}
    affected = []

    for sim in simulated:
        orig = originals[sim.id]
        if sim.start_date == orig.start_date and sim.end_date == orig.end_date:
            continue
        affected.append(TaskImpact(
            task_id=sim.id,
            name=sim.name,
            original_start=orig.start_date,
            original_end=orig.end_date,
            simulated_start=sim.start_date,
            simulated_end=sim.end_date,
            delta_days=(sim.end_date - orig.end_date).days,
        ))

    original_end = max((t.end_date for t in original), default=None)
    simulated_end = max((t.end_date for t in simulated), default=None)
    impact = (simulated_end - original_end).days if original_end and simulated_end else 0

    return CascadePreview(
        original_end_date=original_end,
        simulated_end_date=simulated_end,
        impact_days=impact,
        affected_tasks=affected,
        total_tasks=len(original),
    )


def preview_date_change(
    task_id: str,
    new_start: DateLike,
    new_end: DateLike,
    tasks: Sequence[Task],
) -> CascadePreview:
    """
    Simulate moving one task and cascade the change to its successors.

    The moved task's duration is re-derived from the new dates.

    Raises:
        NotFoundError: if task_id is not in the snapshot
        InvalidDateError: if a new date is malformed
    """
    task = _find_task(task_id, tasks)
    start = parse_date(new_start)
    end = parse_date(new_end)

    moved = task.model_copy(update={
        "start_date": start,
        "end_date": end,
        "duration": calculate_duration(start, end),
    })
    snapshot = [moved if t.id == task_id else t for t in tasks]

    updates = recalculate_task_dates(task_id, snapshot)
    simulated = apply_date_updates(snapshot, updates)

    logger.info(f"Preview move of {task_id} to {start}..{end}: {len(updates)} successors move")

    return _build_preview(tasks, simulated)


def preview_dependency(
    predecessor_id: str,
    successor_id: str,
    dependency_type: DependencyType | str,
    lag: int,
    tasks: Sequence[Task],
) -> CascadePreview:
    """
    Simulate adding predecessor -> successor.

    The successor is first placed under all of its dependencies, new edge
    included; when that moves it, the change cascades from the successor.
    Other successors of the predecessor are left alone.

    Raises:
        SelfDependencyError: if both IDs are the same task
        NotFoundError: if either task is not in the snapshot
        DuplicateDependencyError: if the successor already depends on
            the predecessor
        CycleDetectedError: if the edge would close a cycle
    """
    if predecessor_id == successor_id:
        raise SelfDependencyError(predecessor_id)

    _find_task(predecessor_id, tasks, "Predecessor task")
    successor = _find_task(successor_id, tasks, "Successor task")

    if any(dep.predecessor_id == predecessor_id for dep in successor.dependencies):
        raise DuplicateDependencyError(predecessor_id, successor_id)

    if not validate_dependency_no_cycle(predecessor_id, successor_id, tasks):
        logger.warning(f"Cycle detected: {predecessor_id} -> {successor_id} would create a cycle")
        raise CycleDetectedError(predecessor_id, successor_id)

    dep_type = coerce_dependency_type(dependency_type)
    linked = successor.model_copy(update={
        "dependencies": [
            *successor.dependencies,
            Dependency(predecessor_id=predecessor_id, type=dep_type, lag=lag),
        ],
    })
    snapshot = [linked if t.id == successor_id else t for t in tasks]

    # Place the successor under the new edge, then cascade from it
    updates: dict[str, TaskDateUpdate] = {}
    placed = calculate_constrained_dates(build_task_graph(snapshot), successor_id, updates)
    if placed is not None and (placed.start_date, placed.end_date) != (
        successor.start_date,
        successor.end_date,
    ):
        updates[successor_id] = placed
        snapshot = apply_date_updates(snapshot, updates)
        updates.update(recalculate_task_dates(successor_id, snapshot))

    simulated = apply_date_updates(snapshot, updates)

    logger.info(
        f"Preview dependency {predecessor_id} -> {successor_id} "
        f"({dep_type.value}{lag:+d}): {len(updates)} tasks move"
    )

    return _build_preview(tasks, simulated)
