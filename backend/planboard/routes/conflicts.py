"""
Conflict (double-booking) routes for the Planboard API.
"""

from fastapi import APIRouter

from planboard.logging_config import get_logger
from planboard.routes.snapshot import ensure_snapshot_size
from planboard.schemas.conflicts import (
    AssignmentCheckRead,
    AssignmentCheckRequest,
    ConflictPairRead,
    ConflictRead,
    EmployeeConflictRequest,
    EmployeePairsRequest,
    ProjectConflictRead,
    ProjectConflictRequest,
)
from planboard.services.conflicts import (
    detect_employee_conflicts_with_projects,
    get_all_employee_conflicts,
    get_project_conflicts,
    validate_assignment,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post("/employee", response_model=list[ConflictRead])
async def employee_conflicts(body: EmployeeConflictRequest):
    """Tasks of the employee that overlap a proposed date range."""
    ensure_snapshot_size(body.tasks)
    return detect_employee_conflicts_with_projects(
        body.employee_id,
        body.start_date,
        body.end_date,
        body.tasks,
        body.exclude_task_id,
    )


@router.post("/employee/pairs", response_model=list[ConflictPairRead])
async def employee_conflict_pairs(body: EmployeePairsRequest):
    """Every overlapping pair among the employee's tasks."""
    ensure_snapshot_size(body.tasks)
    return get_all_employee_conflicts(body.employee_id, body.tasks)


@router.post("/assignment/validate", response_model=AssignmentCheckRead)
async def assignment_check(body: AssignmentCheckRequest):
    """Would assigning the employee to the task double-book them?"""
    ensure_snapshot_size(body.tasks)
    result = validate_assignment(body.employee_id, body.task_id, body.tasks)
    if not result.is_valid:
        logger.info(
            f"Assignment {body.employee_id} -> {body.task_id} "
            f"conflicts with {len(result.conflicts)} tasks"
        )
    return result


@router.post("/project", response_model=list[ProjectConflictRead])
async def project_conflicts(body: ProjectConflictRequest):
    """All double-bookings within one project's tasks."""
    ensure_snapshot_size(body.tasks)
    conflicts = get_project_conflicts(body.tasks, body.employee_names)
    logger.debug(f"Project conflict scan: {len(conflicts)} conflicts in {len(body.tasks)} tasks")
    return conflicts
