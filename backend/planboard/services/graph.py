"""
Graph operations using NetworkX.

This module handles:
- Building the task DAG from the tasks' embedded dependency lists
- Cycle validation before a dependency is admitted
- Descendant lookup and topological ordering

Nothing here is cached: every call rebuilds the graph from the task list,
which is the only source of truth.
"""

from dataclasses import dataclass
from typing import Iterable

import networkx as nx

from planboard.logging_config import get_logger
from planboard.schemas.task import DependencyType, Task

logger = get_logger(__name__)


@dataclass(frozen=True)
class Link:
    """One typed dependency edge, predecessor -> successor."""
    predecessor_id: str
    successor_id: str
    type: DependencyType
    lag: int


def build_task_graph(tasks: Iterable[Task]) -> nx.DiGraph:
    """
    Build a NetworkX DiGraph from the tasks' dependency lists.

    Returns a graph where:
    - Nodes are task IDs, with the Task stored under the "task" attribute
    - Edges go from predecessor -> successor, with the typed Link records
      stored under "links" (two tasks may be linked more than once)

    A dependency on a task that is not in the list still produces an edge;
    its predecessor node simply has no "task" attribute.
    """
    tasks = list(tasks)
    graph = nx.DiGraph()

    for task in tasks:
        graph.add_node(task.id, task=task)

    for task in tasks:
        for dep in task.dependencies:
            link = Link(dep.predecessor_id, task.id, dep.type, dep.lag)
            if graph.has_edge(dep.predecessor_id, task.id):
                graph.edges[dep.predecessor_id, task.id]["links"].append(link)
            else:
                graph.add_edge(dep.predecessor_id, task.id, links=[link])

    return graph


def incoming_links(graph: nx.DiGraph, task_id: str) -> list[Link]:
    """All dependency links whose successor is task_id, in declaration order."""
    links = []
    for pred_id in graph.predecessors(task_id):
        links.extend(graph.edges[pred_id, task_id]["links"])
    return links


def outgoing_links(graph: nx.DiGraph, task_id: str) -> list[Link]:
    """All dependency links whose predecessor is task_id."""
    links = []
    for succ_id in graph.successors(task_id):
        links.extend(graph.edges[task_id, succ_id]["links"])
    return links


def has_task(graph: nx.DiGraph, task_id: str) -> bool:
    return task_id in graph and "task" in graph.nodes[task_id]


def build_successor_map(tasks: Iterable[Task]) -> dict[str, list[str]]:
    """
    Map each predecessor ID to the IDs of the tasks that depend on it.

    Keys include predecessor IDs that are not in the task list.
    """
    successor_map: dict[str, list[str]] = {}
    for task in tasks:
        for dep in task.dependencies:
            successor_map.setdefault(dep.predecessor_id, []).append(task.id)
    return successor_map


def validate_dependency_no_cycle(
    predecessor_id: str,
    successor_id: str,
    tasks: Iterable[Task],
) -> bool:
    """
    Check whether the edge predecessor -> successor may be added.

    The edge closes a cycle iff the predecessor is already reachable from
    the successor through the existing edges.

    Returns True if the dependency is valid, False if it would create a
    cycle (including a task depending on itself).
    """
    if predecessor_id == successor_id:
        return False

    graph = build_task_graph(tasks)
    if successor_id not in graph or predecessor_id not in graph:
        return True

    return not nx.has_path(graph, successor_id, predecessor_id)


def get_descendants(task_id: str, tasks: Iterable[Task]) -> list[str]:
    """
    Get all task IDs downstream of the given task.

    Returns list of task IDs reachable from task_id, in graph order.
    """
    graph = build_task_graph(tasks)

    if task_id not in graph:
        return []

    descendants = nx.descendants(graph, task_id)
    return [node for node in graph.nodes if node in descendants and has_task(graph, node)]


def topological_sort(graph: nx.DiGraph) -> list[str]:
    """
    Order the tasks so that every predecessor comes before its successors.

    This is a depth-first walk over predecessors (postorder on the reversed
    graph), started from each task in list order. A node reached again while
    it is still being visited counts as already ordered, so a cyclic graph
    still yields every task once instead of raising.
    """
    if not nx.is_directed_acyclic_graph(graph):
        logger.warning("Task graph contains a cycle; ordering is best effort")

    return [
        node
        for node in nx.dfs_postorder_nodes(graph.reverse(copy=False))
        if has_task(graph, node)
    ]
