"""
Tests for the HTTP facade.

Every request carries its task snapshot, so no database fixtures are needed.
"""

import pytest

from planboard.config import Settings


def task_json(task_id, start, end, deps=(), employees=(), **extra):
    return {
        "id": task_id,
        "name": f"Task {task_id}",
        "start_date": start,
        "end_date": end,
        "dependencies": [
            {"predecessor_id": pred, "type": dep_type, "lag": lag}
            for pred, dep_type, lag in deps
        ],
        "assignments": [{"employee_id": e} for e in employees],
        **extra,
    }


CHAIN = [
    task_json("A", "2024-01-01", "2024-01-02"),
    task_json("B", "2024-01-01", "2024-01-03", deps=[("A", "FS", 0)]),
    task_json("C", "2024-01-01", "2024-01-01", deps=[("B", "FS", 0)]),
]


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_successor_dates(client):
    response = await client.post("/scheduling/successor-dates", json={
        "predecessor_start": "2024-01-01",
        "predecessor_end": "2024-01-05",
        "successor_duration": 3,
        "type": "FF",
        "lag": 0,
    })

    assert response.status_code == 200
    assert response.json() == {"start_date": "2024-01-03", "end_date": "2024-01-05"}


@pytest.mark.asyncio
async def test_unknown_dependency_type_is_rejected(client):
    response = await client.post("/scheduling/successor-dates", json={
        "predecessor_start": "2024-01-01",
        "predecessor_end": "2024-01-05",
        "successor_duration": 3,
        "type": "XX",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_cascade(client):
    response = await client.post("/scheduling/cascade", json={
        "changed_task_id": "A",
        "tasks": CHAIN,
    })

    assert response.status_code == 200
    assert response.json() == {
        "updates": {
            "B": {"start_date": "2024-01-03", "end_date": "2024-01-05"},
            "C": {"start_date": "2024-01-06", "end_date": "2024-01-06"},
        }
    }


@pytest.mark.asyncio
async def test_critical_path(client):
    settled = [
        task_json("A", "2024-01-01", "2024-01-02"),
        task_json("B", "2024-01-03", "2024-01-05", deps=[("A", "FS", 0)]),
        task_json("C", "2024-01-06", "2024-01-06", deps=[("B", "FS", 0)]),
    ]

    response = await client.post("/scheduling/critical-path", json={"tasks": settled})

    assert response.status_code == 200
    data = response.json()
    assert data["critical_path"] == ["A", "B", "C"]
    assert data["project_duration"] == 6
    assert data["project_start"] == "2024-01-01"
    assert data["schedule_info"]["B"]["early_start"] == 2
    assert data["schedule_info"]["B"]["total_float"] == 0


@pytest.mark.asyncio
async def test_validate_dependency(client):
    ok = await client.post("/scheduling/dependencies/validate", json={
        "predecessor_id": "A",
        "successor_id": "C",
        "tasks": CHAIN,
    })
    cycle = await client.post("/scheduling/dependencies/validate", json={
        "predecessor_id": "C",
        "successor_id": "A",
        "tasks": CHAIN,
    })
    self_dep = await client.post("/scheduling/dependencies/validate", json={
        "predecessor_id": "A",
        "successor_id": "A",
        "tasks": CHAIN,
    })

    assert ok.status_code == 200
    assert ok.json() == {"valid": True}

    assert cycle.status_code == 400
    assert cycle.json()["error"] == "cycle_detected"
    assert cycle.json()["details"][0]["type"] == "cycle_error"

    assert self_dep.status_code == 400
    assert self_dep.json()["error"] == "self_dependency"


@pytest.mark.asyncio
async def test_cascade_preview(client):
    settled = [
        task_json("A", "2024-01-01", "2024-01-02"),
        task_json("B", "2024-01-03", "2024-01-05", deps=[("A", "FS", 0)]),
    ]

    response = await client.post("/scheduling/cascade/preview", json={
        "task_id": "A",
        "start_date": "2024-01-05",
        "end_date": "2024-01-06",
        "tasks": settled,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["impact_days"] == 4
    assert data["simulated_end_date"] == "2024-01-09"
    assert {t["task_id"] for t in data["affected_tasks"]} == {"A", "B"}


@pytest.mark.asyncio
async def test_cascade_preview_unknown_task(client):
    response = await client.post("/scheduling/cascade/preview", json={
        "task_id": "missing",
        "start_date": "2024-01-05",
        "end_date": "2024-01-06",
        "tasks": CHAIN,
    })

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_dependency_preview_duplicate(client):
    response = await client.post("/scheduling/dependencies/preview", json={
        "predecessor_id": "A",
        "successor_id": "B",
        "type": "SS",
        "tasks": CHAIN,
    })

    assert response.status_code == 409
    assert response.json()["error"] == "duplicate_dependency"


@pytest.mark.asyncio
async def test_constraint(client):
    response = await client.post("/scheduling/constraint", json={
        "preferred_start": "2024-01-01",
        "duration_days": 1,
        "constraint_type": "MSO",
        "constraint_date": "2024-01-06",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["start_date"] == "2024-01-08"
    assert data["constraint_violated"] is True


@pytest.mark.asyncio
async def test_employee_conflicts(client):
    tasks = [
        task_json("t1", "2024-03-01", "2024-03-05", employees=["E"], project_name="Harbor"),
        task_json("t2", "2024-03-04", "2024-03-08", employees=["E"], project_name="Harbor"),
    ]

    response = await client.post("/conflicts/employee", json={
        "employee_id": "E",
        "start_date": "2024-03-03",
        "end_date": "2024-03-06",
        "tasks": tasks,
    })

    assert response.status_code == 200
    data = response.json()
    assert [(c["task_id"], c["overlap_days"]) for c in data] == [("t1", 3), ("t2", 3)]
    assert data[0]["project_name"] == "Harbor"


@pytest.mark.asyncio
async def test_assignment_validation(client):
    tasks = [
        task_json("t1", "2024-03-01", "2024-03-05", employees=["E"]),
        task_json("t2", "2024-03-04", "2024-03-08"),
    ]

    response = await client.post("/conflicts/assignment/validate", json={
        "employee_id": "E",
        "task_id": "t2",
        "tasks": tasks,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is False
    assert data["conflicts"][0]["task_id"] == "t1"
    assert data["conflicts"][0]["overlap_days"] == 2


@pytest.mark.asyncio
async def test_project_conflicts(client):
    tasks = [
        task_json("t1", "2024-03-01", "2024-03-05", employees=["E"]),
        task_json("t2", "2024-03-04", "2024-03-08", employees=["E"]),
    ]

    response = await client.post("/conflicts/project", json={
        "tasks": tasks,
        "employee_names": {"E": "Eva"},
    })

    assert response.status_code == 200
    [conflict] = response.json()
    assert conflict["id"] == "E-t1-t2"
    assert conflict["employee_name"] == "Eva"
    assert conflict["overlap_start"] == "2024-03-04"
    assert conflict["overlap_end"] == "2024-03-05"


@pytest.mark.asyncio
async def test_snapshot_limit(client, monkeypatch):
    monkeypatch.setattr(
        "planboard.routes.snapshot.get_settings",
        lambda: Settings(max_tasks_per_request=2),
    )

    response = await client.post("/scheduling/critical-path", json={"tasks": CHAIN})

    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"
    assert response.json()["details"][0]["type"] == "snapshot_too_large"
