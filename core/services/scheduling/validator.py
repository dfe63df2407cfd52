from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from core.models import Dependency, DependencyType, Task
from core.services.scheduling.models import DependencyIssue, DependencyValidationResult
from core.services.scheduling.sanitizer import coerce_dependency

logger = logging.getLogger(__name__)

_WHITE, _GREY, _BLACK = 0, 1, 2
_DONE = object()


def effective_duration(task: Task, duration_overrides: Optional[Mapping[str, int]] = None) -> int:
    overrides = duration_overrides or {}
    if task.name in overrides and overrides[task.name] is not None:
        return int(overrides[task.name])
    return int(task.duration) if task.duration is not None else 1


def find_cycle(order: Sequence[str], successors: Mapping[str, Sequence[str]]) -> Optional[List[str]]:
    """
    Iterative DFS over ``successors``. Returns the first cycle found as a closed
    id path (first id repeated at the end), or None for an acyclic graph.
    """
    color: Dict[str, int] = {node_id: _WHITE for node_id in order}
    for root in order:
        if color[root] != _WHITE:
            continue
        color[root] = _GREY
        path = [root]
        stack = [iter(successors.get(root, ()))]
        while stack:
            nxt = next(stack[-1], _DONE)
            if nxt is _DONE:
                color[path.pop()] = _BLACK
                stack.pop()
                continue
            state = color.get(nxt)
            if state is None:
                continue
            if state == _GREY:
                return path[path.index(nxt):] + [nxt]
            if state == _WHITE:
                color[nxt] = _GREY
                path.append(nxt)
                stack.append(iter(successors.get(nxt, ())))
    return None


class DependencyValidator:
    """
    Checks a batch of tasks for cycles, dangling references, oversized
    overlaps, cross-asset links, duplicates and non-positive durations.
    Never raises: every problem becomes an error string.
    """

    def validate_task_graph(
        self,
        tasks: Sequence[Task],
        duration_overrides: Optional[Mapping[str, int]] = None,
        implicit_edges: Optional[Mapping[str, Dependency]] = None,
    ) -> DependencyValidationResult:
        try:
            tasks_by_id = {task.id: task for task in tasks}
            raw_deps = {task.id: self._raw_dependencies(task) for task in tasks}
            durations = {task.id: effective_duration(task, duration_overrides) for task in tasks}

            errors: List[str] = []
            errors.extend(self._duration_errors(tasks, durations))
            errors.extend(self._cycle_errors(tasks, tasks_by_id, raw_deps, implicit_edges or {}))
            errors.extend(self._reference_errors(tasks, tasks_by_id, raw_deps))
            errors.extend(self._overlap_errors(tasks, tasks_by_id, raw_deps, durations))
            errors.extend(self._asset_boundary_errors(tasks, tasks_by_id, raw_deps))
            errors.extend(self._duplicate_errors(tasks, raw_deps))
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Dependency validation crashed: %s", exc)
            return DependencyValidationResult(valid=False, errors=[f"Validation failed: {exc}"])

        return DependencyValidationResult(valid=not errors, errors=errors)

    def validate_single_dependency(
        self,
        predecessor_id: str,
        successor_id: str,
        overlap_days: int,
        tasks: Sequence[Task],
        duration_overrides: Optional[Mapping[str, int]] = None,
    ) -> DependencyValidationResult:
        """Pre-check for adding one FS link overlapping by ``overlap_days``."""
        tasks_by_id = {task.id: task for task in tasks}
        predecessor = tasks_by_id.get(predecessor_id)
        successor = tasks_by_id.get(successor_id)

        if predecessor is None:
            return self._invalid(f"Predecessor task {predecessor_id} not found")
        if successor is None:
            return self._invalid(f"Successor task {successor_id} not found")
        if predecessor_id == successor_id:
            return self._invalid("A task cannot depend on itself")
        if overlap_days < 0:
            return self._invalid("Overlap days cannot be negative")

        predecessor_duration = effective_duration(predecessor, duration_overrides)
        if overlap_days > predecessor_duration:
            return self._invalid(
                f"Overlap ({overlap_days} days) cannot exceed predecessor duration "
                f"({predecessor_duration} days)"
            )
        if predecessor.asset_id != successor.asset_id:
            return self._invalid(
                "Dependencies cannot cross asset boundaries - tasks must be from the same asset"
            )

        successors = self._successor_map(tasks, tasks_by_id)
        successors.setdefault(predecessor_id, []).append(successor_id)
        if find_cycle([t.id for t in tasks], successors):
            return self._invalid("This dependency would create a circular relationship")

        return DependencyValidationResult(valid=True)

    def get_all_dependency_errors(
        self,
        tasks: Sequence[Task],
        duration_overrides: Optional[Mapping[str, int]] = None,
    ) -> List[DependencyIssue]:
        issues: List[DependencyIssue] = []
        for task in tasks:
            for index, dep in enumerate(self._raw_dependencies(task)):
                overlap = -dep.lag if dep.is_overlap else 0
                result = self.validate_single_dependency(
                    dep.predecessor_id, task.id, overlap, tasks, duration_overrides
                )
                if not result.valid:
                    issues.append(
                        DependencyIssue(
                            task_id=task.id,
                            dependency_index=index,
                            error=result.error or "Unknown validation error",
                        )
                    )
        return issues

    # ------------------------------------------------------------------ checks

    @staticmethod
    def _invalid(message: str) -> DependencyValidationResult:
        return DependencyValidationResult(valid=False, errors=[message])

    @staticmethod
    def _raw_dependencies(task: Task) -> List[Dependency]:
        deps: List[Dependency] = []
        for raw in task.dependencies or ():
            dep = coerce_dependency(raw)
            if dep is not None and dep.predecessor_id:
                deps.append(dep)
        return deps

    def _successor_map(
        self,
        tasks: Iterable[Task],
        tasks_by_id: Mapping[str, Task],
    ) -> Dict[str, List[str]]:
        successors: Dict[str, List[str]] = {}
        for task in tasks:
            for dep in self._raw_dependencies(task):
                if dep.predecessor_id in tasks_by_id:
                    successors.setdefault(dep.predecessor_id, []).append(task.id)
        return successors

    @staticmethod
    def _duration_errors(tasks: Sequence[Task], durations: Mapping[str, int]) -> List[str]:
        return [
            f'Task "{task.name}" duration must be at least 1 working day (got {durations[task.id]})'
            for task in tasks
            if durations[task.id] < 1
        ]

    @staticmethod
    def _cycle_errors(
        tasks: Sequence[Task],
        tasks_by_id: Mapping[str, Task],
        raw_deps: Mapping[str, List[Dependency]],
        implicit_edges: Mapping[str, Dependency],
    ) -> List[str]:
        successors: Dict[str, List[str]] = {}
        for task in tasks:
            for dep in raw_deps[task.id]:
                if dep.predecessor_id in tasks_by_id:
                    successors.setdefault(dep.predecessor_id, []).append(task.id)
        for successor_id, dep in implicit_edges.items():
            successors.setdefault(dep.predecessor_id, []).append(successor_id)

        cycle = find_cycle([task.id for task in tasks], successors)
        if not cycle:
            return []
        names = " -> ".join(tasks_by_id[node_id].name for node_id in cycle)
        return [
            f"Circular dependency detected in task network starting from task {cycle[0]} "
            f"(cycle: {names})"
        ]

    @staticmethod
    def _reference_errors(
        tasks: Sequence[Task],
        tasks_by_id: Mapping[str, Task],
        raw_deps: Mapping[str, List[Dependency]],
    ) -> List[str]:
        return [
            f"Task {task.id} depends on non-existent task {dep.predecessor_id}"
            for task in tasks
            for dep in raw_deps[task.id]
            if dep.predecessor_id not in tasks_by_id
        ]

    @staticmethod
    def _overlap_errors(
        tasks: Sequence[Task],
        tasks_by_id: Mapping[str, Task],
        raw_deps: Mapping[str, List[Dependency]],
        durations: Mapping[str, int],
    ) -> List[str]:
        errors: List[str] = []
        for task in tasks:
            for dep in raw_deps[task.id]:
                predecessor = tasks_by_id.get(dep.predecessor_id)
                if predecessor is None or not dep.is_overlap:
                    continue
                overlap_days = abs(dep.lag)
                pred_duration = durations[predecessor.id]
                if overlap_days > pred_duration:
                    errors.append(
                        f'Task "{task.name}" overlap ({overlap_days} days) exceeds predecessor '
                        f'"{predecessor.name}" duration ({pred_duration} days)'
                    )
        return errors

    @staticmethod
    def _asset_boundary_errors(
        tasks: Sequence[Task],
        tasks_by_id: Mapping[str, Task],
        raw_deps: Mapping[str, List[Dependency]],
    ) -> List[str]:
        errors: List[str] = []
        for task in tasks:
            for dep in raw_deps[task.id]:
                predecessor = tasks_by_id.get(dep.predecessor_id)
                if predecessor is not None and predecessor.asset_id != task.asset_id:
                    errors.append(
                        f'Task "{task.name}" cannot depend on task "{predecessor.name}" '
                        f"from different asset"
                    )
        return errors

    @staticmethod
    def _duplicate_errors(
        tasks: Sequence[Task],
        raw_deps: Mapping[str, List[Dependency]],
    ) -> List[str]:
        errors: List[str] = []
        for task in tasks:
            seen: Dict[str, Dependency] = {}
            for dep in raw_deps[task.id]:
                dep_type = DependencyType.parse(dep.type) or DependencyType.FINISH_TO_START
                normalized = Dependency(dep.predecessor_id, dep_type, int(dep.lag or 0))
                previous = seen.get(dep.predecessor_id)
                if previous is None:
                    seen[dep.predecessor_id] = normalized
                elif previous == normalized:
                    errors.append(
                        f"Task {task.id} lists dependency on {dep.predecessor_id} more than once"
                    )
                else:
                    errors.append(
                        f"Task {task.id} has contradictory dependencies on {dep.predecessor_id} "
                        f"({previous.type.value} lag {previous.lag} vs "
                        f"{normalized.type.value} lag {normalized.lag})"
                    )
        return errors


dependency_validator = DependencyValidator()


__all__ = [
    "DependencyValidator",
    "dependency_validator",
    "effective_duration",
    "find_cycle",
]
