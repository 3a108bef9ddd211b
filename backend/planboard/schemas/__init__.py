from planboard.schemas.task import (
    Assignment,
    Dependency,
    DependencyType,
    Task,
    TaskWithProject,
)

__all__ = [
    "Assignment",
    "Dependency",
    "DependencyType",
    "Task",
    "TaskWithProject",
]
