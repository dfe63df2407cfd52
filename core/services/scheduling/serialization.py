from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from core.models import Dependency, DependencyType, Task

logger = logging.getLogger(__name__)


def dependency_to_record(dep: Dependency) -> dict[str, Any]:
    return {
        "predecessorId": dep.predecessor_id,
        "type": DependencyType(dep.type).value,
        "lag": int(dep.lag),
    }


def dependency_from_record(record: Mapping[str, Any]) -> Optional[Dependency]:
    """
    Missing type means FS. Unknown types and records without a predecessor
    are dropped (None) so a bad import cannot invent a link type.
    """
    predecessor_id = record.get("predecessorId", record.get("predecessor_id"))
    if not predecessor_id:
        logger.warning("Dropping dependency record without predecessor: %r", dict(record))
        return None

    raw_type = record.get("type")
    if raw_type in (None, ""):
        dep_type = DependencyType.FINISH_TO_START
    else:
        dep_type = DependencyType.parse(raw_type)
        if dep_type is None:
            logger.warning(
                "Dropping dependency on %s with unknown type %r", predecessor_id, raw_type
            )
            return None

    try:
        lag = int(record.get("lag") or 0)
    except (TypeError, ValueError):
        logger.warning("Dropping dependency on %s with invalid lag %r", predecessor_id, record.get("lag"))
        return None
    return Dependency(predecessor_id=str(predecessor_id), type=dep_type, lag=lag)


def dependencies_to_records(deps: Iterable[Dependency]) -> List[dict[str, Any]]:
    return [dependency_to_record(dep) for dep in deps]


def dependencies_from_records(records: Optional[Iterable[Mapping[str, Any]]]) -> List[Dependency]:
    if not records:
        return []
    result: List[Dependency] = []
    for record in records:
        if not isinstance(record, Mapping):
            logger.warning("Ignoring non-mapping dependency record: %r", record)
            continue
        dep = dependency_from_record(record)
        if dep is not None:
            result.append(dep)
    return result


def tasks_with_dependencies_from_records(
    tasks: Sequence[Task],
    records_by_task_id: Mapping[str, Iterable[Mapping[str, Any]]],
) -> List[Task]:
    """Attach decoded dependencies to each task; tasks without records keep theirs."""
    result: List[Task] = []
    for task in tasks:
        if task.id in records_by_task_id:
            result.append(task.with_dependencies(dependencies_from_records(records_by_task_id[task.id])))
        else:
            result.append(task)
    return result


def dumps_dependencies(deps_by_task_id: Mapping[str, Iterable[Dependency]]) -> str:
    payload: Dict[str, List[dict[str, Any]]] = {
        task_id: dependencies_to_records(deps) for task_id, deps in deps_by_task_id.items()
    }
    return json.dumps(payload, ensure_ascii=False, sort_keys=True)


def loads_dependencies(raw: Optional[str]) -> Dict[str, List[Dependency]]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed dependency payload")
        return {}
    if not isinstance(value, dict):
        return {}
    return {
        str(task_id): dependencies_from_records(records if isinstance(records, list) else [])
        for task_id, records in value.items()
    }


__all__ = [
    "dependencies_from_records",
    "dependencies_to_records",
    "dependency_from_record",
    "dependency_to_record",
    "dumps_dependencies",
    "loads_dependencies",
    "tasks_with_dependencies_from_records",
]
