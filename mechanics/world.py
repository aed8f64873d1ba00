"""Pose primitive and the workspace registry that owns placed components."""
from __future__ import annotations

from dataclasses import dataclass
import itertools
import math
import random
from typing import Dict, Iterator, List, MutableMapping, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - only for static analyzers
    from .entities import Component, ComponentKind

Point2D = Tuple[float, float]


@dataclass(frozen=True)
class Pose2D:
    """A 2D pose with translation (canvas units) and rotation (radians)."""

    x: float
    y: float
    theta: float = 0.0

    def __post_init__(self) -> None:
        if not all(math.isfinite(v) for v in (self.x, self.y, self.theta)):
            raise ValueError(f"Pose components must be finite, got {self.as_tuple()}")

    @property
    def position(self) -> Point2D:
        return (self.x, self.y)

    @classmethod
    def at(cls, position: Point2D, theta: float = 0.0) -> "Pose2D":
        """Build a pose from an ``(x, y)`` pair; other shapes raise ValueError."""
        x, y = position
        return cls(float(x), float(y), float(theta))

    def moved_to(self, position: Point2D) -> "Pose2D":
        return Pose2D.at(position, self.theta)

    def with_theta(self, theta: float) -> "Pose2D":
        return Pose2D(self.x, self.y, theta)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.theta)

    def as_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "theta": self.theta}


class Workspace:
    """Owns placed components in insertion order.

    Ids are handed out from a per-workspace counter and never reused, so a
    stale reference can only ever miss, not alias a newer component.
    """

    def __init__(
        self,
        *,
        name: str = "workspace",
        random_seed: Optional[int] = None,
        metadata: Optional[MutableMapping[str, object]] = None,
    ) -> None:
        self.name = name
        self._components: Dict[str, "Component"] = {}
        self._counter = itertools.count(1)
        self.random_seed = random_seed
        self._rng = random.Random(random_seed)
        self.metadata: MutableMapping[str, object] = metadata or {}

    @property
    def rng(self) -> random.Random:
        return self._rng

    def add(
        self,
        kind: "ComponentKind | str",
        position: Point2D,
        *,
        extent: Optional[float] = None,
        mass: Optional[float] = None,
    ) -> str:
        from .entities import Component, ComponentKind

        kind = ComponentKind.coerce(kind)
        pose = Pose2D.at(position)
        comp_id = f"{kind.value}-{next(self._counter)}"
        component = Component(
            id=comp_id,
            kind=kind,
            pose=pose,
            extent=extent,
            mass=mass,
        )
        self._components[comp_id] = component
        return comp_id

    def remove(self, comp_id: str) -> Optional["Component"]:
        return self._components.pop(comp_id, None)

    def get(self, comp_id: str) -> Optional["Component"]:
        return self._components.get(comp_id)

    def all(self) -> List["Component"]:
        return list(self._components.values())

    def find_first_of_kind(self, kind: "ComponentKind | str") -> Optional["Component"]:
        from .entities import ComponentKind

        kind = ComponentKind.coerce(kind)
        return next((c for c in self._components.values() if c.kind is kind), None)

    def all_of_kind(self, kind: "ComponentKind | str") -> List["Component"]:
        from .entities import ComponentKind

        kind = ComponentKind.coerce(kind)
        return [c for c in self._components.values() if c.kind is kind]

    def has_kind(self, kind: "ComponentKind | str") -> bool:
        return self.find_first_of_kind(kind) is not None

    def clear(self) -> None:
        self._components.clear()

    def summary(self) -> str:
        names = ", ".join(self._components.keys()) or "<empty>"
        return f"Workspace(name={self.name}, components=[{names}])"

    def snapshot_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "components": [c.as_dict() for c in self._components.values()],
            "metadata": dict(self.metadata),
        }

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator["Component"]:
        return iter(list(self._components.values()))

    def __contains__(self, comp_id: object) -> bool:
        return comp_id in self._components
