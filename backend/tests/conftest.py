"""
Pytest configuration and fixtures for Planboard tests.
"""

from datetime import date, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from planboard.main import app
from planboard.schemas import Assignment, Dependency, DependencyType, Task, TaskWithProject


@pytest.fixture
def make_task():
    """
    Factory for tasks.

    make_task("B", "2024-01-03", duration=3, deps=[("A", "FS", 0)], employees=["E"])
    The end date defaults to start + duration - 1.
    """
    def _make(
        task_id,
        start,
        end=None,
        duration=None,
        deps=(),
        employees=(),
        name=None,
        project=None,
    ):
        start_date = date.fromisoformat(start) if isinstance(start, str) else start
        if end is None:
            end_date = start_date + timedelta(days=(duration or 1) - 1)
        else:
            end_date = date.fromisoformat(end) if isinstance(end, str) else end

        fields = dict(
            id=task_id,
            name=name or f"Task {task_id}",
            start_date=start_date,
            end_date=end_date,
            duration=duration,
            dependencies=[
                Dependency(predecessor_id=pred, type=DependencyType(dep_type), lag=lag)
                for pred, dep_type, lag in deps
            ],
            assignments=[Assignment(employee_id=e) for e in employees],
        )
        if project is not None:
            return TaskWithProject(**fields, project_id=f"p-{project}", project_name=project)
        return Task(**fields)

    return _make


@pytest_asyncio.fixture(scope="function")
async def client():
    """Async test client over the ASGI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
