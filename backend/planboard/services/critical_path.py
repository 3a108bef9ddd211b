"""
Critical Path Method (CPM) implementation.

Calculates, in integer day offsets from the earliest task start (day 0):
- Forward pass: Earliest Start (ES), Earliest Finish (EF)
- Backward pass: Latest Start (LS), Latest Finish (LF)
- Total float: LS - ES (or LF - EF), free float per task
- Critical Path: Tasks where total float = 0

Every dependency type is honored with its lag, using the same rules as the
date calculator but expressed in day offsets.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable

import networkx as nx

from planboard.logging_config import get_logger
from planboard.schemas.task import DependencyType, Task
from planboard.services.graph import (
    Link,
    build_task_graph,
    incoming_links,
    outgoing_links,
    topological_sort,
)

logger = get_logger(__name__)


@dataclass
class TaskScheduleInfo:
    """CPM results for a single task. All values are day offsets."""
    task_id: str
    duration: int
    # Forward pass results
    early_start: int
    early_finish: int
    # Backward pass results
    late_start: int
    late_finish: int
    # Float
    total_float: int  # 0 = critical
    free_float: int
    is_critical: bool


@dataclass
class CriticalPathResult:
    """Complete CPM analysis for a set of tasks."""
    critical_path: list[str] = field(default_factory=list)
    schedule_info: dict[str, TaskScheduleInfo] = field(default_factory=dict)
    project_duration: int = 0
    project_start: date | None = None  # Calendar date of day 0

    def offset_to_date(self, day: int) -> date | None:
        """Convert a day offset back to a calendar date."""
        if self.project_start is None:
            return None
        return self.project_start + timedelta(days=day)


def early_start_for(link: Link, pred: TaskScheduleInfo, duration: int) -> int:
    """Earliest start the link allows for a successor of the given duration."""
    if link.type is DependencyType.SS:
        return pred.early_start + link.lag
    if link.type is DependencyType.FF:
        return pred.early_finish + link.lag - duration + 1
    if link.type is DependencyType.SF:
        return pred.early_start + link.lag - duration + 1
    return pred.early_finish + link.lag + 1


def late_finish_for(link: Link, succ: TaskScheduleInfo, duration: int) -> int:
    """Latest finish the link allows for a predecessor of the given duration."""
    if link.type is DependencyType.SS:
        return succ.late_start - link.lag + duration - 1
    if link.type is DependencyType.FF:
        return succ.late_finish - link.lag
    if link.type is DependencyType.SF:
        return succ.late_finish - link.lag + duration - 1
    return succ.late_start - link.lag - 1


def free_float_for(link: Link, pred: TaskScheduleInfo, succ: TaskScheduleInfo) -> int:
    """Days the predecessor can slip before this link delays the successor."""
    if link.type is DependencyType.SS:
        return succ.early_start - pred.early_start - link.lag
    if link.type is DependencyType.FF:
        return succ.early_finish - pred.early_finish - link.lag
    if link.type is DependencyType.SF:
        return succ.early_finish - pred.early_start - link.lag
    return succ.early_start - pred.early_finish - link.lag - 1


def calculate_critical_path_detailed(tasks: Iterable[Task]) -> CriticalPathResult:
    """
    Perform complete CPM analysis over a task snapshot.

    Cycles are not re-validated here: the topological order treats a cycle
    as already ordered and the numbers for that component are best effort.

    Returns:
        CriticalPathResult; an empty input gives an empty result with
        project_duration 0
    """
    tasks = list(tasks)
    if not tasks:
        return CriticalPathResult()

    graph = build_task_graph(tasks)
    topo_order = topological_sort(graph)
    project_start = min(task.start_date for task in tasks)

    info = _calculate_cpm(graph, topo_order, project_start)

    critical_path = [task_id for task_id in topo_order if info[task_id].is_critical]
    project_end = max(0, max(i.early_finish for i in info.values()))

    logger.debug(
        f"CPM over {len(tasks)} tasks: duration={project_end + 1} days, "
        f"{len(critical_path)} critical"
    )

    return CriticalPathResult(
        critical_path=critical_path,
        schedule_info=info,
        project_duration=project_end + 1,
        project_start=project_start,
    )


def _calculate_cpm(
    graph: nx.DiGraph,
    topo_order: list[str],
    project_start: date,
) -> dict[str, TaskScheduleInfo]:
    """
    Calculate CPM forward and backward passes.

    Forward Pass: Calculate Earliest Start (ES) and Earliest Finish (EF)
    Backward Pass: Calculate Latest Start (LS) and Latest Finish (LF)
    """
    info: dict[str, TaskScheduleInfo] = {}

    # =========================================================================
    # Forward Pass: Calculate ES and EF
    # =========================================================================
    for task_id in topo_order:
        task: Task = graph.nodes[task_id]["task"]
        duration = task.duration
        links = incoming_links(graph, task_id)

        if not links:
            # No predecessors - use the stored start_date
            es = (task.start_date - project_start).days
        else:
            # ES = max over all constraints, never before project start
            es = 0
            for link in links:
                pred = info.get(link.predecessor_id)
                if pred is None:
                    continue
                es = max(es, early_start_for(link, pred, duration))

        info[task_id] = TaskScheduleInfo(
            task_id=task_id,
            duration=duration,
            early_start=es,
            early_finish=es + duration - 1,
            late_start=0,
            late_finish=0,
            total_float=0,
            free_float=0,
            is_critical=False,
        )

    project_end = max(0, max(i.early_finish for i in info.values()))

    # =========================================================================
    # Backward Pass: Calculate LF and LS
    # =========================================================================
    done: set[str] = set()
    for task_id in reversed(topo_order):
        node = info[task_id]
        lf = project_end

        for link in outgoing_links(graph, task_id):
            if link.successor_id not in done:
                continue
            lf = min(lf, late_finish_for(link, info[link.successor_id], node.duration))

        node.late_finish = lf
        node.late_start = lf - node.duration + 1
        done.add(task_id)

    # =========================================================================
    # Calculate Float and Identify Critical Tasks
    # =========================================================================
    for task_id in topo_order:
        node = info[task_id]
        node.total_float = node.late_start - node.early_start
        node.is_critical = node.total_float == 0

        slacks = [
            free_float_for(link, node, info[link.successor_id])
            for link in outgoing_links(graph, task_id)
            if link.successor_id in info
        ]
        node.free_float = max(0, min(slacks)) if slacks else node.total_float

    return info


def calculate_critical_path(tasks: Iterable[Task]) -> list[str]:
    """IDs of the tasks with zero total float, in topological order."""
    return calculate_critical_path_detailed(tasks).critical_path


def get_project_duration(tasks: Iterable[Task]) -> int:
    """Total project duration in days."""
    return calculate_critical_path_detailed(tasks).project_duration


def get_task_float(task_id: str, tasks: Iterable[Task]) -> int:
    """Total float of one task, or 0 if the task is unknown."""
    info = calculate_critical_path_detailed(tasks).schedule_info.get(task_id)
    return info.total_float if info else 0


def is_task_critical(task_id: str, tasks: Iterable[Task]) -> bool:
    return task_id in calculate_critical_path(tasks)
