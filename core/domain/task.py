from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from core.domain.enums import DependencyType, TaskOwner
from core.domain.identifiers import generate_id


@dataclass(frozen=True)
class Dependency:
    predecessor_id: str
    type: DependencyType = DependencyType.FINISH_TO_START
    lag: int = 0

    @property
    def is_overlap(self) -> bool:
        return self.type == DependencyType.FINISH_TO_START and self.lag < 0


@dataclass(frozen=True)
class Task:
    id: str
    name: str
    duration: int = 1
    owner: TaskOwner = TaskOwner.MMM
    asset_id: str = "default"
    asset_type: str = ""
    is_custom: bool = False
    dependencies: Tuple[Dependency, ...] = field(default_factory=tuple)

    @staticmethod
    def create(
        name: str,
        duration: int = 1,
        asset_id: str = "default",
        dependencies: Optional[Tuple[Dependency, ...]] = None,
        **extra,
    ) -> "Task":
        return Task(
            id=generate_id(),
            name=name,
            duration=duration,
            asset_id=asset_id,
            dependencies=tuple(dependencies or ()),
            **extra,
        )

    def with_dependencies(self, dependencies) -> "Task":
        return Task(
            id=self.id,
            name=self.name,
            duration=self.duration,
            owner=self.owner,
            asset_id=self.asset_id,
            asset_type=self.asset_type,
            is_custom=self.is_custom,
            dependencies=tuple(dependencies),
        )


__all__ = ["Dependency", "Task"]
