from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Mapping, Optional, Sequence

from core.exceptions import GraphConstructionError
from core.models import Dependency, DependencyType, Task
from core.services.scheduling.models import TaskGraph, TaskNode
from core.services.scheduling.sanitizer import sanitize_dependencies
from core.services.scheduling.validator import (
    DependencyValidator,
    dependency_validator,
    effective_duration,
)

logger = logging.getLogger(__name__)


def _implicit_sequential_edges(tasks: Sequence[Task], sanitized: Mapping[str, List[Dependency]]) -> Dict[str, Dependency]:
    """
    For every task left without dependencies that is not first in its asset,
    an FS/0 edge onto the previous task of the same asset (input order).
    """
    previous_by_asset: Dict[str, str] = {}
    edges: Dict[str, Dependency] = {}
    for task in tasks:
        asset_id = task.asset_id or "default"
        previous_id = previous_by_asset.get(asset_id)
        if not sanitized[task.id] and previous_id is not None:
            edges[task.id] = Dependency(
                predecessor_id=previous_id,
                type=DependencyType.FINISH_TO_START,
                lag=0,
            )
        previous_by_asset[asset_id] = task.id
    return edges


def build_task_graph(
    tasks: Sequence[Task],
    duration_overrides: Optional[Mapping[str, int]] = None,
    validator: Optional[DependencyValidator] = None,
) -> TaskGraph:
    """
    Build the dependency graph for one batch of tasks.

    Explicit dependencies are sanitized, implicit sequential edges are added
    for tasks without any, and the validator decides whether the graph may be
    scheduled. Any unexpected failure yields an empty invalid graph.
    """
    validator = validator or dependency_validator
    try:
        id_set = {task.id for task in tasks}
        if len(id_set) != len(tasks):
            raise GraphConstructionError("duplicate task ids in batch", code="GRAPH_DUPLICATE_ID")

        sanitized = {
            task.id: sanitize_dependencies(task, task.dependencies, id_set) for task in tasks
        }
        implicit = _implicit_sequential_edges(tasks, sanitized)

        nodes: Dict[str, TaskNode] = {}
        for task in tasks:
            deps = sanitized[task.id]
            node = TaskNode(
                id=task.id,
                task=task,
                duration=effective_duration(task, duration_overrides),
                dependencies=list(deps) if deps else ([implicit[task.id]] if task.id in implicit else []),
                implicit=task.id in implicit,
            )
            nodes[task.id] = node

        for node in nodes.values():
            for dep in node.dependencies:
                predecessor = nodes[dep.predecessor_id]
                if node.id not in predecessor.successors:
                    predecessor.successors.append(node.id)

        validation = validator.validate_task_graph(tasks, duration_overrides, implicit)
        start_nodes = [node_id for node_id, node in nodes.items() if not node.dependencies]
        end_nodes = [node_id for node_id, node in nodes.items() if not node.successors]

        if not validation.valid:
            logger.debug("Task graph rejected: %s", validation.errors)
        return TaskGraph(
            nodes=nodes,
            start_nodes=start_nodes,
            end_nodes=end_nodes,
            is_valid=validation.valid,
            errors=list(validation.errors),
        )
    except Exception as exc:
        logger.warning("Graph construction failed: %s", exc)
        return TaskGraph.invalid([f"Graph construction failed: {exc}"])


def has_dependencies(tasks: Sequence[Task]) -> bool:
    return any(task.dependencies for task in tasks)


def extract_dependency_info(tasks: Sequence[Task]) -> dict:
    tasks_with_dependencies = 0
    total_dependencies = 0
    dependency_types: Dict[str, int] = {}
    for task in tasks:
        if not task.dependencies:
            continue
        tasks_with_dependencies += 1
        total_dependencies += len(task.dependencies)
        for dep in task.dependencies:
            key = getattr(dep.type, "value", dep.type)
            dependency_types[key] = dependency_types.get(key, 0) + 1
    return {
        "tasks_with_dependencies": tasks_with_dependencies,
        "total_dependencies": total_dependencies,
        "dependency_types": dependency_types,
    }


def analyze_graph(graph: TaskGraph) -> dict:
    depth: Dict[str, int] = {}
    max_depth = 0
    if graph.is_valid:
        indegree = {node_id: len(node.dependencies) for node_id, node in graph.nodes.items()}
        queue = deque(node_id for node_id, degree in indegree.items() if degree == 0)
        while queue:
            node_id = queue.popleft()
            node = graph.nodes[node_id]
            depth[node_id] = max(
                (depth[dep.predecessor_id] + 1 for dep in node.dependencies),
                default=0,
            )
            max_depth = max(max_depth, depth[node_id])
            for succ_id in node.successors:
                indegree[succ_id] -= 1
                if indegree[succ_id] == 0:
                    queue.append(succ_id)

    return {
        "node_count": len(graph.nodes),
        "dependency_count": sum(len(node.dependencies) for node in graph.nodes.values()),
        "start_node_count": len(graph.start_nodes),
        "end_node_count": len(graph.end_nodes),
        "max_depth": max_depth,
        "has_cycles": not graph.is_valid and any("circular" in e.lower() for e in graph.errors),
    }


def summarize_graph(graph: TaskGraph) -> str:
    analysis = analyze_graph(graph)
    return "\n".join(
        [
            "Task Graph Summary:",
            f"- Nodes: {analysis['node_count']}",
            f"- Dependencies: {analysis['dependency_count']}",
            f"- Start Nodes: {analysis['start_node_count']} ({', '.join(graph.start_nodes)})",
            f"- End Nodes: {analysis['end_node_count']} ({', '.join(graph.end_nodes)})",
            f"- Max Depth: {analysis['max_depth']}",
            f"- Valid: {graph.is_valid}",
            f"- Errors: {'; '.join(graph.errors) or 'None'}",
        ]
    )


__all__ = [
    "build_task_graph",
    "has_dependencies",
    "extract_dependency_info",
    "analyze_graph",
    "summarize_graph",
]
