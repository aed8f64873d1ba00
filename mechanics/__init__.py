"""Leaf layer of the mechanism workbench: parts, footprints and frame timing."""

from .world import Workspace, Pose2D
from .geometry import BoundingBox, Footprint
from .entities import Component, ComponentKind, ComponentState, overlaps
from .constraints import Constraint, check_constraints
from .animation import FrameScheduler, TimerHandle, Tween, ease_out_cubic
from .diagnostics import Status, StatusKind, StatusLog

__all__ = [
    "Workspace",
    "Pose2D",
    "BoundingBox",
    "Footprint",
    "Component",
    "ComponentKind",
    "ComponentState",
    "overlaps",
    "Constraint",
    "check_constraints",
    "FrameScheduler",
    "TimerHandle",
    "Tween",
    "ease_out_cubic",
    "Status",
    "StatusKind",
    "StatusLog",
]
