from __future__ import annotations

import time
from collections import deque
from typing import Callable, Dict, List

from core.exceptions import CPMBoundsExceeded
from core.models import DependencyType
from core.services.scheduling.models import CPMTiming, TaskGraph


Clock = Callable[[], float]


class PassBudget:
    """Iteration cap and wall-clock budget for one CPM pass."""

    def __init__(
        self,
        pass_name: str,
        node_count: int,
        max_iterations_per_node: int,
        time_budget_seconds: float,
        clock: Clock = time.monotonic,
    ):
        self.pass_name = pass_name
        self.max_iterations = max(1, node_count) * max_iterations_per_node
        self.iterations = 0
        self._clock = clock
        self._deadline = clock() + time_budget_seconds

    def tick(self) -> None:
        self.iterations += 1
        if self.iterations > self.max_iterations:
            raise CPMBoundsExceeded(
                f"{self.pass_name} pass exceeded {self.max_iterations} iterations",
                code="CPM_ITERATION_CAP",
            )
        if self._clock() > self._deadline:
            raise CPMBoundsExceeded(
                f"{self.pass_name} pass exceeded its time budget",
                code="CPM_TIME_BUDGET",
            )


def run_forward_pass(graph: TaskGraph, budget: PassBudget) -> Dict[str, CPMTiming]:
    """Earliest start/finish per node, processed in readiness order."""
    timings: Dict[str, CPMTiming] = {node_id: CPMTiming() for node_id in graph.nodes}
    processed: set[str] = set()
    queue = deque(graph.start_nodes)

    while queue:
        budget.tick()
        node_id = queue.popleft()
        if node_id in processed:
            continue
        node = graph.nodes[node_id]
        if not all(dep.predecessor_id in processed for dep in node.dependencies):
            queue.append(node_id)
            continue

        earliest_start = 0
        for dep in node.dependencies:
            pred = timings[dep.predecessor_id]
            if dep.type == DependencyType.START_TO_START:
                candidate = pred.earliest_start + dep.lag
            elif dep.type == DependencyType.FINISH_TO_FINISH:
                # EF_s >= EF_p + lag => ES_s >= EF_p + lag - duration_s + 1
                candidate = pred.earliest_finish + dep.lag - node.duration + 1
            else:
                candidate = pred.earliest_finish + 1 + dep.lag
            earliest_start = max(earliest_start, candidate)

        timing = timings[node_id]
        timing.earliest_start = earliest_start
        timing.earliest_finish = earliest_start + node.duration - 1
        processed.add(node_id)

        for successor_id in node.successors:
            if successor_id not in processed:
                queue.append(successor_id)

    _ensure_all_processed(graph, processed, budget.pass_name)
    return timings


def run_backward_pass(
    graph: TaskGraph,
    timings: Dict[str, CPMTiming],
    project_finish: int,
    budget: PassBudget,
) -> Dict[str, CPMTiming]:
    """Latest start/finish per node, processed in reverse readiness order."""
    for node_id in graph.end_nodes:
        node = graph.nodes[node_id]
        timing = timings[node_id]
        timing.latest_finish = project_finish
        timing.latest_start = project_finish - node.duration + 1

    processed: set[str] = set()
    queue = deque(graph.end_nodes)

    while queue:
        budget.tick()
        node_id = queue.popleft()
        if node_id in processed:
            continue
        node = graph.nodes[node_id]
        if not all(succ_id in processed for succ_id in node.successors):
            queue.append(node_id)
            continue

        ceilings: List[int] = []
        for succ_id in node.successors:
            successor = graph.nodes[succ_id]
            succ_timing = timings[succ_id]
            for dep in successor.dependencies:
                if dep.predecessor_id != node_id:
                    continue
                if dep.type == DependencyType.START_TO_START:
                    ceilings.append(succ_timing.latest_start - dep.lag + node.duration - 1)
                elif dep.type == DependencyType.FINISH_TO_FINISH:
                    ceilings.append(succ_timing.latest_finish - dep.lag)
                else:
                    ceilings.append(succ_timing.latest_start - 1 - dep.lag)

        if ceilings:
            timing = timings[node_id]
            timing.latest_finish = min(ceilings)
            timing.latest_start = timing.latest_finish - node.duration + 1
        processed.add(node_id)

        for dep in node.dependencies:
            if dep.predecessor_id not in processed:
                queue.append(dep.predecessor_id)

    _ensure_all_processed(graph, processed, budget.pass_name)
    return timings


def _ensure_all_processed(graph: TaskGraph, processed: set[str], pass_name: str) -> None:
    missing = [node_id for node_id in graph.nodes if node_id not in processed]
    if missing:
        raise CPMBoundsExceeded(
            f"{pass_name} pass could not reach {len(missing)} task(s): {', '.join(missing)}",
            code="CPM_UNREACHABLE",
        )


__all__ = ["PassBudget", "run_forward_pass", "run_backward_pass"]
