"""Footprint primitive and the coarse overlap test used for engagement."""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .world import Pose2D

Point2D = Tuple[float, float]


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float


@dataclass(frozen=True)
class Footprint:
    """Circular footprint of a part, sized by ``extent``.

    Two footprints overlap when their centres are closer than the average of
    the two extents. This is deliberately coarse: it only has to decide
    whether an engagement is plausible, not resolve exact contact.
    """

    extent: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.extent) or self.extent <= 0.0:
            raise ValueError(f"Footprint extent must be positive, got {self.extent}")

    @property
    def radius(self) -> float:
        return self.extent * 0.5

    def bounding_box(self, pose: "Pose2D | None" = None) -> BoundingBox:
        cx = pose.x if pose else 0.0
        cy = pose.y if pose else 0.0
        r = self.radius
        return BoundingBox(cx - r, cy - r, cx + r, cy + r)

    def contains_point(self, point: Point2D, pose: "Pose2D | None" = None) -> bool:
        cx = pose.x if pose else 0.0
        cy = pose.y if pose else 0.0
        px, py = point
        return (px - cx) ** 2 + (py - cy) ** 2 <= self.radius**2

    def overlaps(self, other: "Footprint", pose_self: "Pose2D", pose_other: "Pose2D") -> bool:
        return footprints_overlap(self.extent, pose_self, other.extent, pose_other)


def footprints_overlap(extent_a: float, pose_a: "Pose2D", extent_b: float, pose_b: "Pose2D") -> bool:
    dx = pose_a.x - pose_b.x
    dy = pose_a.y - pose_b.y
    threshold = (extent_a + extent_b) * 0.5
    return math.hypot(dx, dy) < threshold


def penetration_depth(extent_a: float, pose_a: "Pose2D", extent_b: float, pose_b: "Pose2D") -> float:
    """How far inside the overlap threshold two centres are (0 when apart)."""
    threshold = (extent_a + extent_b) * 0.5
    distance = math.hypot(pose_a.x - pose_b.x, pose_a.y - pose_b.y)
    return max(0.0, threshold - distance)


__all__ = [
    "BoundingBox",
    "Footprint",
    "footprints_overlap",
    "penetration_depth",
]
