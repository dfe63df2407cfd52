from __future__ import annotations

import logging
import time
from typing import List, Tuple

from core.exceptions import CPMBoundsExceeded
from core.services.scheduling.models import (
    CompressionOpportunities,
    CPMResult,
    TaskGraph,
    TaskTimingInfo,
)
from core.services.scheduling.passes import Clock, PassBudget, run_backward_pass, run_forward_pass
from core.services.scheduling.results import (
    CRITICAL_FLOAT_TOLERANCE,
    apply_float,
    build_timing_rows,
    critical_path_ids,
)

logger = logging.getLogger(__name__)


class CriticalPathCalculator:
    """
    CPM over 0-based working-day offsets:
    - Forward pass: ES/EF
    - Backward pass: LS/LF
    - FS, SS, FF with signed lag
    Both passes are bounded by an iteration cap and a wall-clock budget.
    """

    def __init__(
        self,
        max_iterations_per_node: int = 500,
        time_budget_seconds: float = 5.0,
        clock: Clock = time.monotonic,
    ):
        self._max_iterations_per_node = max_iterations_per_node
        self._time_budget_seconds = time_budget_seconds
        self._clock = clock

    def calculate(self, graph: TaskGraph) -> CPMResult:
        if not graph.is_valid:
            return CPMResult.failed(list(graph.errors) or ["Task graph is invalid"])
        if not graph.nodes:
            return CPMResult(project_duration=0, critical_path=[], success=True)

        try:
            timings = run_forward_pass(graph, self._budget("Forward", graph))
            project_finish = max(
                (timings[node_id].earliest_finish for node_id in graph.end_nodes),
                default=0,
            )
            run_backward_pass(graph, timings, project_finish, self._budget("Backward", graph))
        except CPMBoundsExceeded as exc:
            logger.warning("CPM calculation aborted: %s", exc)
            return CPMResult.failed([f"CPM calculation failed: {exc}"])

        apply_float(timings)
        critical_path = critical_path_ids(graph, timings)
        logger.debug(
            "CPM solved %d tasks: duration=%d critical=%s",
            len(graph.nodes),
            project_finish + 1,
            critical_path,
        )
        return CPMResult(
            project_duration=project_finish + 1,
            critical_path=critical_path,
            success=True,
            timings=timings,
        )

    def get_task_timing_info(self, graph: TaskGraph, result: CPMResult) -> List[TaskTimingInfo]:
        return build_timing_rows(graph, result.timings)

    def get_compression_opportunities(
        self, graph: TaskGraph, result: CPMResult
    ) -> CompressionOpportunities:
        tasks_with_float = sorted(
            (row for row in self.get_task_timing_info(graph, result) if row.total_float > 0),
            key=lambda row: row.total_float,
            reverse=True,
        )
        total = sum(row.total_float for row in tasks_with_float)
        max_compression = min(total, total // len(tasks_with_float)) if tasks_with_float else 0

        recommendations: List[str] = []
        if not tasks_with_float:
            recommendations.append(
                "No schedule compression possible - all tasks are on the critical path."
            )
        else:
            top = tasks_with_float[0]
            recommendations.append(
                f"Task {top.node_id} has {top.total_float} days of float - "
                f"good candidate for acceleration."
            )
            if len(tasks_with_float) > 3:
                recommendations.append(
                    f"{len(tasks_with_float)} tasks have schedule flexibility - "
                    f"consider parallel execution or duration reduction."
                )

        return CompressionOpportunities(
            tasks_with_float=tasks_with_float,
            total_float_available=total,
            max_compression_possible=max_compression,
            recommendations=recommendations,
        )

    def validate_calculation_results(
        self, graph: TaskGraph, result: CPMResult
    ) -> Tuple[bool, List[str]]:
        warnings: List[str] = []
        for node_id, node in graph.nodes.items():
            timing = result.timings.get(node_id)
            if timing is None:
                warnings.append(f"Task {node_id}: Missing timing")
                continue
            if timing.earliest_finish != timing.earliest_start + node.duration - 1:
                warnings.append(f"Task {node_id}: Inconsistent earliest times")
            if timing.latest_finish != timing.latest_start + node.duration - 1:
                warnings.append(f"Task {node_id}: Inconsistent latest times")
            if timing.latest_start < timing.earliest_start:
                warnings.append(f"Task {node_id}: Latest start before earliest start")
            if timing.is_critical and abs(timing.total_float) > CRITICAL_FLOAT_TOLERANCE:
                warnings.append(f"Task {node_id}: Marked critical but has float")
        return not warnings, warnings

    def _budget(self, pass_name: str, graph: TaskGraph) -> PassBudget:
        return PassBudget(
            pass_name=pass_name,
            node_count=len(graph.nodes),
            max_iterations_per_node=self._max_iterations_per_node,
            time_budget_seconds=self._time_budget_seconds,
            clock=self._clock,
        )


critical_path_calculator = CriticalPathCalculator()


__all__ = ["CriticalPathCalculator", "critical_path_calculator"]
