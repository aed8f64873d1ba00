"""Components tie a kind, a footprint and an interaction state together."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .geometry import BoundingBox, Footprint
from .world import Point2D, Pose2D


class ComponentKind(str, Enum):
    ACTUATOR = "actuator"
    RETENTION = "retention"
    STOP = "stop"
    SPRING = "spring"
    PIVOT = "pivot"

    @classmethod
    def coerce(cls, value: "ComponentKind | str") -> "ComponentKind":
        """Accept an enum member or its string value; reject anything else."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ", ".join(k.value for k in cls)
            raise ValueError(f"Unknown component kind '{value}' (expected one of: {valid})") from None


class ComponentState(str, Enum):
    AT_REST = "at_rest"
    PRELOADED = "preloaded"
    ENGAGED = "engaged"
    BLOCKED = "blocked"
    RELEASED = "released"


@dataclass(frozen=True)
class KindDefaults:
    extent: float
    mass: float


# Footprints are in canvas units; masses are abstract kilograms.
KIND_DEFAULTS: Dict[ComponentKind, KindDefaults] = {
    ComponentKind.ACTUATOR: KindDefaults(extent=160.0, mass=0.05),
    ComponentKind.RETENTION: KindDefaults(extent=100.0, mass=0.02),
    ComponentKind.STOP: KindDefaults(extent=120.0, mass=0.1),
    ComponentKind.SPRING: KindDefaults(extent=120.0, mass=0.008),
    ComponentKind.PIVOT: KindDefaults(extent=40.0, mass=0.005),
}


class Component:
    """A placed mechanical part.

    ``engaged`` and ``blocked`` are read-only views of ``state``; every state
    change goes through :meth:`set_state` so they can never drift.
    """

    def __init__(
        self,
        *,
        id: str,
        kind: ComponentKind | str,
        pose: Pose2D,
        extent: Optional[float] = None,
        mass: Optional[float] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.id = id
        self.kind = ComponentKind.coerce(kind)
        defaults = KIND_DEFAULTS[self.kind]
        self.pose = pose
        self.footprint = Footprint(defaults.extent if extent is None else float(extent))
        self.mass = defaults.mass if mass is None else float(mass)
        self.metadata: Dict[str, Any] = metadata or {}
        self.preload: float = 0.0
        self.epoch: int = 0
        self._state = ComponentState.AT_REST

    @property
    def state(self) -> ComponentState:
        return self._state

    @property
    def engaged(self) -> bool:
        return self._state is ComponentState.ENGAGED

    @property
    def blocked(self) -> bool:
        return self._state is ComponentState.BLOCKED

    def set_state(self, state: ComponentState) -> None:
        self._state = ComponentState(state)

    def bump_epoch(self) -> int:
        self.epoch += 1
        return self.epoch

    @property
    def position(self) -> Point2D:
        return self.pose.position

    @property
    def rotation(self) -> float:
        return self.pose.theta

    @property
    def extent(self) -> float:
        return self.footprint.extent

    def move_to(self, position: Point2D) -> None:
        self.pose = self.pose.moved_to(position)

    def set_rotation(self, theta: float) -> None:
        self.pose = self.pose.with_theta(theta)

    def bounding_box(self) -> BoundingBox:
        return self.footprint.bounding_box(self.pose)

    def overlaps_with(self, other: "Component") -> bool:
        return self.footprint.overlaps(other.footprint, self.pose, other.pose)

    def contains_point(self, point: Point2D) -> bool:
        return self.footprint.contains_point(point, self.pose)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "pose": self.pose.as_dict(),
            "extent": self.extent,
            "mass": self.mass,
            "state": self._state.value,
            "engaged": self.engaged,
            "blocked": self.blocked,
            "preload": self.preload,
            "metadata": dict(self.metadata),
        }

    def __repr__(self) -> str:
        return f"Component(id={self.id!r}, kind={self.kind.value}, state={self._state.value})"


def overlaps(a: Component, b: Component) -> bool:
    """Coarse circular-footprint test between two placed components."""
    return a.overlaps_with(b)


__all__ = [
    "Component",
    "ComponentKind",
    "ComponentState",
    "KindDefaults",
    "KIND_DEFAULTS",
    "overlaps",
]
