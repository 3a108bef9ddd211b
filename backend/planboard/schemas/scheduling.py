from datetime import date

from pydantic import BaseModel, Field

from planboard.schemas.task import DependencyType, Task
from planboard.services.calendars import ConstraintType


class TaskSnapshot(BaseModel):
    """Base for requests that carry the project's full task list."""
    tasks: list[Task] = Field(default_factory=list)


class SuccessorDatesRequest(BaseModel):
    predecessor_start: date
    predecessor_end: date
    successor_duration: int = Field(ge=1)
    type: DependencyType = DependencyType.FS
    lag: int = 0


class TaskDatesRead(BaseModel):
    start_date: date
    end_date: date

    model_config = {"from_attributes": True}


class CascadeRequest(TaskSnapshot):
    changed_task_id: str


class CascadeRead(BaseModel):
    """Only tasks whose dates change are listed."""
    updates: dict[str, TaskDatesRead]


class DateChangePreviewRequest(TaskSnapshot):
    task_id: str
    start_date: date
    end_date: date


class DependencyCheckRequest(TaskSnapshot):
    predecessor_id: str
    successor_id: str


class DependencyPreviewRequest(DependencyCheckRequest):
    type: DependencyType = DependencyType.FS
    lag: int = 0


class DependencyCheckRead(BaseModel):
    valid: bool


class TaskImpactRead(BaseModel):
    task_id: str
    name: str
    original_start: date
    original_end: date
    simulated_start: date
    simulated_end: date
    delta_days: int

    model_config = {"from_attributes": True}


class CascadePreviewRead(BaseModel):
    original_end_date: date | None
    simulated_end_date: date | None
    impact_days: int
    affected_tasks: list[TaskImpactRead]
    total_tasks: int

    model_config = {"from_attributes": True}


class TaskScheduleRead(BaseModel):
    task_id: str
    duration: int
    early_start: int
    early_finish: int
    late_start: int
    late_finish: int
    total_float: int
    free_float: int
    is_critical: bool

    model_config = {"from_attributes": True}


class CriticalPathRead(BaseModel):
    critical_path: list[str]
    schedule_info: dict[str, TaskScheduleRead]
    project_duration: int
    project_start: date | None

    model_config = {"from_attributes": True}


class ConstraintRequest(BaseModel):
    preferred_start: date
    duration_days: int = Field(ge=0)
    constraint_type: ConstraintType = ConstraintType.ASAP
    constraint_date: date | None = None


class ConstraintRead(BaseModel):
    start_date: date
    end_date: date
    constraint_violated: bool
    violation_message: str | None

    model_config = {"from_attributes": True}
