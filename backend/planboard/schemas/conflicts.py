from datetime import date

from pydantic import BaseModel, Field

from planboard.schemas.task import Task, TaskWithProject


class EmployeeConflictRequest(BaseModel):
    employee_id: str
    start_date: date
    end_date: date
    tasks: list[TaskWithProject] = Field(default_factory=list)
    exclude_task_id: str | None = None


class EmployeePairsRequest(BaseModel):
    employee_id: str
    tasks: list[TaskWithProject] = Field(default_factory=list)


class AssignmentCheckRequest(BaseModel):
    employee_id: str
    task_id: str
    tasks: list[Task] = Field(default_factory=list)


class ProjectConflictRequest(BaseModel):
    tasks: list[Task] = Field(default_factory=list)
    employee_names: dict[str, str] = Field(default_factory=dict)


class ConflictRead(BaseModel):
    task_id: str
    task_name: str
    project_name: str
    start_date: date
    end_date: date
    overlap_days: int

    model_config = {"from_attributes": True}


class ConflictPairRead(BaseModel):
    task1: ConflictRead
    task2: ConflictRead

    model_config = {"from_attributes": True}


class AssignmentCheckRead(BaseModel):
    is_valid: bool
    conflicts: list[ConflictRead]

    model_config = {"from_attributes": True}


class ProjectConflictRead(BaseModel):
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

    model_config = {"from_attributes": True}
