from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from planboard.services.dates import calculate_duration


class DependencyType(str, Enum):
    """How two tasks' date ranges constrain each other."""
    FS = "FS"  # Finish-to-Start
    SS = "SS"  # Start-to-Start
    FF = "FF"  # Finish-to-Finish
    SF = "SF"  # Start-to-Finish


class Dependency(BaseModel):
    """
    Incoming edge of the task DAG, embedded in the successor task.

    predecessor_id -> (owning task) means, for the default FS type:
    "The predecessor must finish before the owning task can start".
    """
    predecessor_id: str
    type: DependencyType = DependencyType.FS
    lag: int = 0  # Positive = extra delay, negative = overlap
    id: str | None = None
    predecessor_name: str | None = None


class Assignment(BaseModel):
    """An employee booked on a task for the task's whole date range."""
    employee_id: str
    planned_hours: float = 0
    actual_hours: float = 0
    id: str | None = None
    employee_name: str | None = None


class Task(BaseModel):
    """
    A schedulable unit of work.

    duration is authoritative when deriving successor dates, the date pair
    is authoritative when reporting. When duration is omitted it is derived
    from the dates: end_date - start_date + 1 (minimum 1).
    """
    id: str
    name: str = ""
    start_date: date
    end_date: date
    duration: int = Field(ge=1)
    dependencies: list[Dependency] = Field(default_factory=list)
    assignments: list[Assignment] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def derive_duration(cls, data: Any) -> Any:
        if (
            isinstance(data, dict)
            and data.get("duration") is None
            and data.get("start_date") is not None
            and data.get("end_date") is not None
        ):
            data = {
                **data,
                "duration": calculate_duration(data["start_date"], data["end_date"]),
            }
        return data

    def is_assigned(self, employee_id: str) -> bool:
        return any(a.employee_id == employee_id for a in self.assignments)


class TaskWithProject(Task):
    """Task with project context, for conflict reports spanning projects."""
    project_id: str = ""
    project_name: str = ""
