from __future__ import annotations

from typing import Any, Iterable, List, Optional, Set

from core.models import Dependency, DependencyType, Task


def coerce_dependency(raw: Any) -> Optional[Dependency]:
    """Accept a Dependency or a {predecessorId, type, lag} mapping."""
    if raw is None:
        return None
    if isinstance(raw, Dependency):
        return raw
    if isinstance(raw, dict):
        pred = raw.get("predecessorId", raw.get("predecessor_id"))
        if not pred:
            return None
        dep_type = DependencyType.parse(raw.get("type")) or DependencyType.FINISH_TO_START
        return Dependency(predecessor_id=str(pred), type=dep_type, lag=int(raw.get("lag") or 0))
    return None


def sanitize_dependencies(
    task: Task,
    raw_deps: Optional[Iterable[Any]],
    id_set: Set[str],
) -> List[Dependency]:
    """
    Drop empty entries, self references and predecessors outside the batch;
    unknown or missing types become FS and a missing lag becomes 0.
    """
    if not raw_deps:
        return []

    cleaned: List[Dependency] = []
    for raw in raw_deps:
        dep = coerce_dependency(raw)
        if dep is None or not dep.predecessor_id:
            continue
        if dep.predecessor_id == task.id or dep.predecessor_id not in id_set:
            continue
        dep_type = DependencyType.parse(dep.type) or DependencyType.FINISH_TO_START
        cleaned.append(
            Dependency(predecessor_id=dep.predecessor_id, type=dep_type, lag=int(dep.lag or 0))
        )
    return cleaned


__all__ = ["coerce_dependency", "sanitize_dependencies"]
