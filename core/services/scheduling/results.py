from __future__ import annotations

from typing import Dict, List

from core.services.scheduling.models import CPMTiming, TaskGraph, TaskTimingInfo

CRITICAL_FLOAT_TOLERANCE = 0.001


def apply_float(timings: Dict[str, CPMTiming]) -> None:
    for timing in timings.values():
        timing.total_float = timing.latest_start - timing.earliest_start
        timing.is_critical = abs(timing.total_float) < CRITICAL_FLOAT_TOLERANCE


def ordered_by_earliest_start(graph: TaskGraph, timings: Dict[str, CPMTiming]) -> List[str]:
    """Node ids sorted by ES; ties keep graph (input) order."""
    position = {node_id: index for index, node_id in enumerate(graph.nodes)}
    return sorted(
        timings,
        key=lambda node_id: (timings[node_id].earliest_start, position.get(node_id, 0)),
    )


def critical_path_ids(graph: TaskGraph, timings: Dict[str, CPMTiming]) -> List[str]:
    return [
        node_id
        for node_id in ordered_by_earliest_start(graph, timings)
        if timings[node_id].is_critical
    ]


def build_timing_rows(graph: TaskGraph, timings: Dict[str, CPMTiming]) -> List[TaskTimingInfo]:
    rows: List[TaskTimingInfo] = []
    for node_id in ordered_by_earliest_start(graph, timings):
        timing = timings[node_id]
        rows.append(
            TaskTimingInfo(
                node_id=node_id,
                earliest_start=timing.earliest_start,
                earliest_finish=timing.earliest_finish,
                latest_start=timing.latest_start,
                latest_finish=timing.latest_finish,
                total_float=timing.total_float,
                is_critical=timing.is_critical,
            )
        )
    return rows


__all__ = [
    "CRITICAL_FLOAT_TOLERANCE",
    "apply_float",
    "build_timing_rows",
    "critical_path_ids",
    "ordered_by_earliest_start",
]
