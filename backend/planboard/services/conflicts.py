"""
Employee conflict detection.

Finds double-bookings: an employee assigned to tasks whose date ranges
overlap. Assignments carry no dates of their own, so a task's start/end
dates are the assignment's dates. All ranges are inclusive of both ends.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Sequence

from planboard.logging_config import get_logger
from planboard.schemas.task import Task, TaskWithProject
from planboard.services.dates import DateLike, parse_date

logger = get_logger(__name__)


@dataclass
class ConflictInfo:
    """A task that collides with the range being checked."""
    task_id: str
    task_name: str
    start_date: date
    end_date: date
    overlap_days: int
    project_name: str = ""


@dataclass
class ConflictPair:
    """Two of one employee's tasks that overlap each other."""
    task1: ConflictInfo
    task2: ConflictInfo


@dataclass
class AssignmentValidation:
    is_valid: bool
    conflicts: list[ConflictInfo] = field(default_factory=list)


@dataclass
class ProjectConflict:
    """One double-booking inside a project, with the shared window."""
    id: str
    employee_id: str
    employee_name: str
    task1_id: str
    task1_name: str
    task2_id: str
    task2_name: str
    overlap_start: date
    overlap_end: date
    overlap_days: int


def date_ranges_overlap(
    start1: DateLike,
    end1: DateLike,
    start2: DateLike,
    end2: DateLike,
) -> bool:
    """Two inclusive ranges overlap if each one starts before the other ends."""
    return parse_date(start1) <= parse_date(end2) and parse_date(start2) <= parse_date(end1)


def calculate_overlap_days(
    start1: DateLike,
    end1: DateLike,
    start2: DateLike,
    end2: DateLike,
) -> int:
    """Number of calendar days shared by two inclusive ranges (0 if disjoint)."""
    overlap_start = max(parse_date(start1), parse_date(start2))
    overlap_end = min(parse_date(end1), parse_date(end2))

    if overlap_start > overlap_end:
        return 0
    return (overlap_end - overlap_start).days + 1


def _conflict_for(task: Task, overlap_days: int) -> ConflictInfo:
    return ConflictInfo(
        task_id=task.id,
        task_name=task.name,
        start_date=task.start_date,
        end_date=task.end_date,
        overlap_days=overlap_days,
        project_name=getattr(task, "project_name", ""),
    )


def detect_employee_conflicts(
    employee_id: str,
    start_date: DateLike,
    end_date: DateLike,
    tasks: Iterable[Task],
    exclude_task_id: str | None = None,
) -> list[ConflictInfo]:
    """
    Find the employee's tasks that overlap a proposed date range.

    Args:
        employee_id: The employee to check
        start_date: Proposed start (date or ISO string)
        end_date: Proposed end (date or ISO string)
        tasks: All tasks with their embedded assignments
        exclude_task_id: Task to skip, e.g. the task whose own assignment
            is being checked

    Returns:
        One ConflictInfo per overlapping task; empty when there is none
    """
    start = parse_date(start_date)
    end = parse_date(end_date)
    conflicts = []

    for task in tasks:
        if task.id == exclude_task_id or not task.is_assigned(employee_id):
            continue

        if date_ranges_overlap(start, end, task.start_date, task.end_date):
            overlap = calculate_overlap_days(start, end, task.start_date, task.end_date)
            conflicts.append(_conflict_for(task, overlap))

    return conflicts


def detect_employee_conflicts_with_projects(
    employee_id: str,
    start_date: DateLike,
    end_date: DateLike,
    tasks_with_projects: Iterable[TaskWithProject],
    exclude_task_id: str | None = None,
) -> list[ConflictInfo]:
    """Same as detect_employee_conflicts, with project names filled in."""
    return detect_employee_conflicts(
        employee_id, start_date, end_date, tasks_with_projects, exclude_task_id
    )


def get_all_employee_conflicts(
    employee_id: str,
    tasks_with_projects: Iterable[Task],
) -> list[ConflictPair]:
    """
    Every pair of the employee's tasks that overlap each other.

    Compares all pairs, so the input should be bounded to one project (or
    one employee's workload), not the whole workspace.
    """
    employee_tasks = [t for t in tasks_with_projects if t.is_assigned(employee_id)]
    pairs = []

    for i, task1 in enumerate(employee_tasks):
        for task2 in employee_tasks[i + 1:]:
            if not date_ranges_overlap(
                task1.start_date, task1.end_date, task2.start_date, task2.end_date
            ):
                continue

            overlap = calculate_overlap_days(
                task1.start_date, task1.end_date, task2.start_date, task2.end_date
            )
            pairs.append(ConflictPair(
                task1=_conflict_for(task1, overlap),
                task2=_conflict_for(task2, overlap),
            ))

    logger.debug(
        f"Employee {employee_id}: {len(employee_tasks)} tasks, {len(pairs)} overlapping pairs"
    )

    return pairs


def has_employee_conflict(
    employee_id: str,
    start_date: DateLike,
    end_date: DateLike,
    tasks: Iterable[Task],
) -> bool:
    return len(detect_employee_conflicts(employee_id, start_date, end_date, tasks)) > 0


def get_overbooked_days(
    employee_id: str,
    start_date: DateLike,
    end_date: DateLike,
    tasks: Iterable[Task],
) -> int:
    """Sum of overlap days over all conflicting tasks in the period."""
    conflicts = detect_employee_conflicts(employee_id, start_date, end_date, tasks)
    return sum(c.overlap_days for c in conflicts)


def validate_assignment(
    employee_id: str,
    task_id: str,
    tasks: Sequence[Task],
) -> AssignmentValidation:
    """
    Check whether assigning the employee to a task would double-book them.

    An unknown task is reported as valid.
    """
    task = next((t for t in tasks if t.id == task_id), None)
    if task is None:
        return AssignmentValidation(is_valid=True)

    conflicts = detect_employee_conflicts(
        employee_id,
        task.start_date,
        task.end_date,
        tasks,
        exclude_task_id=task_id,
    )
    return AssignmentValidation(is_valid=not conflicts, conflicts=conflicts)


def get_project_conflicts(
    tasks: Sequence[Task],
    employee_names: dict[str, str] | None = None,
) -> list[ProjectConflict]:
    """
    All double-bookings in one project, for every assigned employee.

    Employees are visited in order of first appearance in the assignments.
    Names missing from employee_names fall back to the name stored on the
    assignment, then to the employee ID.
    """
    employee_names = dict(employee_names or {})
    employee_ids: list[str] = []
    for task in tasks:
        for assignment in task.assignments:
            if assignment.employee_id not in employee_ids:
                employee_ids.append(assignment.employee_id)
            if assignment.employee_name:
                employee_names.setdefault(assignment.employee_id, assignment.employee_name)

    conflicts = []
    for employee_id in employee_ids:
        for pair in get_all_employee_conflicts(employee_id, tasks):
            first, second = pair.task1, pair.task2
            conflicts.append(ProjectConflict(
                id=f"{employee_id}-{first.task_id}-{second.task_id}",
                employee_id=employee_id,
                employee_name=employee_names.get(employee_id, employee_id),
                task1_id=first.task_id,
                task1_name=first.task_name,
                task2_id=second.task_id,
                task2_name=second.task_name,
                overlap_start=max(first.start_date, second.start_date),
                overlap_end=min(first.end_date, second.end_date),
                overlap_days=first.overlap_days,
            ))

    return conflicts


def group_conflicts_by_employee(
    conflicts: Iterable[ProjectConflict],
) -> dict[str, list[ProjectConflict]]:
    by_employee: dict[str, list[ProjectConflict]] = {}
    for conflict in conflicts:
        by_employee.setdefault(conflict.employee_id, []).append(conflict)
    return by_employee
