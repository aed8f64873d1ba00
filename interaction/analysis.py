"""Synthetic stress metrics and failure diagnosis for a workspace.

The numbers are teaching aids rather than physical units: each metric is a
simple function of the current layout, clamped to 0..100 for display.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Dict, List, Optional

from mechanics.entities import Component, ComponentKind
from mechanics.world import Workspace

from .config import PhysicsConfig, StressConfig


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}

NO_RETENTION = "no retention element"
ROTATION_STRESS = "excessive rotation stress"
MULTIPLE_CONTACTS = "multiple contact points"


def clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


@dataclass(frozen=True)
class StressMetrics:
    rotation_stress: float = 0.0
    friction_stress: float = 0.0
    mass_stress: float = 0.0
    contact_stress: float = 0.0
    preload_stress: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "rotation_stress": self.rotation_stress,
            "friction_stress": self.friction_stress,
            "mass_stress": self.mass_stress,
            "contact_stress": self.contact_stress,
            "preload_stress": self.preload_stress,
        }


@dataclass(frozen=True)
class FailureReport:
    component: str
    reason: str
    severity: Severity
    kind: Optional[ComponentKind] = None

    def as_dict(self) -> Dict[str, object]:
        return {
            "component": self.component,
            "reason": self.reason,
            "severity": self.severity.value,
            "kind": self.kind.value if self.kind else None,
        }


@dataclass(frozen=True)
class ForceReadout:
    """Abstract release physics: stored spring energy turned into a strike."""

    spring_force: float = 0.0
    velocity: float = 0.0
    impact_energy: float = 0.0
    contact_force: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "spring_force": self.spring_force,
            "velocity": self.velocity,
            "impact_energy": self.impact_energy,
            "contact_force": self.contact_force,
        }


@dataclass(frozen=True)
class AnalysisResult:
    metrics: StressMetrics
    failures: List[FailureReport] = field(default_factory=list)

    @property
    def worst(self) -> Optional[Severity]:
        return self.failures[0].severity if self.failures else None

    def as_dict(self) -> Dict[str, object]:
        return {
            "metrics": self.metrics.as_dict(),
            "failures": [f.as_dict() for f in self.failures],
        }


def sort_failures(failures: List[FailureReport]) -> List[FailureReport]:
    """Most severe first; ties keep their discovery order."""
    return sorted(failures, key=lambda f: -f.severity.rank)


class StressAnalyzer:
    """Pure functions of a workspace; holds only its tuning constants."""

    def __init__(self, stress: Optional[StressConfig] = None, physics: Optional[PhysicsConfig] = None) -> None:
        self.stress = stress or StressConfig()
        self.physics = physics or PhysicsConfig()

    def metrics(self, workspace: Workspace) -> StressMetrics:
        actuator = workspace.find_first_of_kind(ComponentKind.ACTUATOR)
        has_spring = workspace.has_kind(ComponentKind.SPRING)
        count = len(workspace)

        rotation = abs(actuator.rotation) / math.pi * 100.0 if actuator else 0.0
        friction = count * self.stress.friction_per_component
        mass = min(count * self.stress.mass_per_component, 100.0) if has_spring else 0.0
        contact = self.stress.contact_stress if self.retention_contact(workspace) else 0.0
        preload = actuator.preload if (actuator and has_spring) else 0.0
        return StressMetrics(
            rotation_stress=clamp_percent(rotation),
            friction_stress=clamp_percent(friction),
            mass_stress=clamp_percent(mass),
            contact_stress=clamp_percent(contact),
            preload_stress=clamp_percent(preload),
        )

    def retention_contact(self, workspace: Workspace) -> Optional[Component]:
        """First retention element overlapping the addressed actuator, if any."""
        actuator = workspace.find_first_of_kind(ComponentKind.ACTUATOR)
        if actuator is None:
            return None
        return next(
            (r for r in workspace.all_of_kind(ComponentKind.RETENTION) if r.overlaps_with(actuator)),
            None,
        )

    def failures(self, workspace: Workspace) -> List[FailureReport]:
        found: List[FailureReport] = []
        cfg = self.stress

        for retention in workspace.all_of_kind(ComponentKind.RETENTION):
            load = abs(retention.rotation) * cfg.retention_rotation_gain
            if load > cfg.retention_high_threshold:
                severity = Severity.HIGH
            elif load > cfg.retention_medium_threshold:
                severity = Severity.MEDIUM
            else:
                continue
            found.append(FailureReport(retention.id, ROTATION_STRESS, severity, retention.kind))

        components = workspace.all()
        for spring in workspace.all_of_kind(ComponentKind.SPRING):
            contacts = sum(1 for other in components if other is not spring and spring.overlaps_with(other))
            if contacts > 1:
                found.append(FailureReport(spring.id, MULTIPLE_CONTACTS, Severity.MEDIUM, spring.kind))

        actuator = workspace.find_first_of_kind(ComponentKind.ACTUATOR)
        if actuator is not None and not workspace.has_kind(ComponentKind.RETENTION):
            found.append(FailureReport(actuator.id, NO_RETENTION, Severity.HIGH, actuator.kind))

        return sort_failures(found)

    def analyze(self, workspace: Workspace) -> AnalysisResult:
        return AnalysisResult(metrics=self.metrics(workspace), failures=self.failures(workspace))

    def release_readout(self, actuator: Component) -> ForceReadout:
        phys = self.physics
        spring_energy = 0.5 * phys.spring_constant * phys.compression**2
        velocity = math.sqrt(2.0 * spring_energy / actuator.mass) if actuator.mass > 0 else 0.0
        impact_energy = 0.5 * actuator.mass * velocity**2
        return ForceReadout(
            spring_force=phys.spring_constant * phys.compression,
            velocity=velocity,
            impact_energy=impact_energy,
            contact_force=impact_energy * phys.contact_force_factor,
        )


__all__ = [
    "AnalysisResult",
    "FailureReport",
    "ForceReadout",
    "MULTIPLE_CONTACTS",
    "NO_RETENTION",
    "ROTATION_STRESS",
    "Severity",
    "StressAnalyzer",
    "StressMetrics",
    "clamp_percent",
    "sort_failures",
]
