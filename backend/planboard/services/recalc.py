"""
Recalculation service for propagating date changes through the task DAG.

When a task's dates change, every task downstream of it may have to move:
- Each successor is re-derived from ALL of its predecessors
- When predecessors disagree, the latest start date wins (CPM forward pass)
- Only tasks whose dates actually change are reported and propagate further

The caller persists the returned dates; nothing here mutates a Task.
"""

from collections import deque
from typing import Iterable

import networkx as nx

from planboard.logging_config import get_logger
from planboard.schemas.task import Task
from planboard.services.dependency_dates import TaskDateUpdate, calculate_successor_dates
from planboard.services.graph import build_task_graph, has_task, incoming_links

logger = get_logger(__name__)


def calculate_constrained_dates(
    graph: nx.DiGraph,
    task_id: str,
    updates: dict[str, TaskDateUpdate],
) -> TaskDateUpdate | None:
    """
    Calculate the dates that satisfy every dependency of a task.

    Predecessor dates come from `updates` when this pass already moved
    them, otherwise from the stored task. Dependencies on tasks that are
    not in the graph are skipped.

    Returns:
        The candidate with the latest start date, or None when the task
        has no resolvable predecessor
    """
    task: Task = graph.nodes[task_id]["task"]
    latest: TaskDateUpdate | None = None

    for link in incoming_links(graph, task_id):
        if not has_task(graph, link.predecessor_id):
            logger.warning(
                f"Task {task_id} depends on unknown task {link.predecessor_id}, skipping"
            )
            continue

        predecessor: Task = graph.nodes[link.predecessor_id]["task"]
        pred_dates = updates.get(link.predecessor_id)
        pred_start = pred_dates.start_date if pred_dates else predecessor.start_date
        pred_end = pred_dates.end_date if pred_dates else predecessor.end_date

        candidate = calculate_successor_dates(
            pred_start,
            pred_end,
            task.duration,
            link.type,
            link.lag,
        )

        if latest is None or candidate.start_date > latest.start_date:
            latest = candidate

    return latest


def recalculate_task_dates(
    changed_task_id: str,
    tasks: Iterable[Task],
) -> dict[str, TaskDateUpdate]:
    """
    Cascade a date change on one task to all of its transitive successors.

    Algorithm:
    1. Seed a queue with the direct successors of the changed task
    2. Pop a task, derive its dates from all predecessor constraints
    3. If they differ from the stored dates (or from an earlier result of
       this pass), record them and enqueue the task's successors
    4. A task is processed at most once per pass, so the walk terminates
       even on a cyclic graph

    Args:
        changed_task_id: The task whose dates were modified
        tasks: Snapshot of all tasks in the project

    Returns:
        Map of task ID -> new dates, for tasks whose dates changed only
    """
    graph = build_task_graph(tasks)
    updates: dict[str, TaskDateUpdate] = {}

    if changed_task_id not in graph:
        return updates

    queue: deque[str] = deque(graph.successors(changed_task_id))
    processed: set[str] = set()

    while queue:
        task_id = queue.popleft()

        if task_id in processed:
            continue
        processed.add(task_id)

        if not has_task(graph, task_id):
            continue

        new_dates = calculate_constrained_dates(graph, task_id, updates)
        if new_dates is None:
            continue

        task: Task = graph.nodes[task_id]["task"]
        dates_changed = (
            new_dates.start_date != task.start_date
            or new_dates.end_date != task.end_date
        )
        previous = updates.get(task_id)
        update_changed = previous is not None and previous != new_dates

        if dates_changed or update_changed:
            updates[task_id] = new_dates
            for successor_id in graph.successors(task_id):
                if successor_id not in processed:
                    queue.append(successor_id)

    logger.debug(
        f"Cascade from {changed_task_id}: processed {len(processed)} tasks, "
        f"{len(updates)} changed"
    )

    return updates
