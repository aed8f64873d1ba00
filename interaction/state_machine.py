"""Apply/release transitions between actuator, retention and stop parts."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import Callable, Dict, List, Optional

from mechanics.animation import FrameScheduler
from mechanics.diagnostics import StatusKind
from mechanics.entities import Component, ComponentKind, ComponentState
from mechanics.world import Workspace

from .config import AnimationConfig, StressConfig
from .logging_config import get_logger

log = get_logger("state_machine")

ROTATION = "rotation"
LOADED_STATES = (ComponentState.ENGAGED, ComponentState.PRELOADED)


class EngagementKind(str, Enum):
    RETENTION = "retention"


@dataclass(frozen=True)
class Engagement:
    from_id: str
    to_id: str
    kind: EngagementKind = EngagementKind.RETENTION

    def involves(self, comp_id: str) -> bool:
        return comp_id in (self.from_id, self.to_id)

    def as_tuple(self):
        return (self.from_id, self.to_id, self.kind.value)

    def as_dict(self) -> Dict[str, str]:
        return {"from": self.from_id, "to": self.to_id, "kind": self.kind.value}


@dataclass(frozen=True)
class TransitionResult:
    ok: bool
    state: ComponentState
    message: str
    status: StatusKind = StatusKind.IDLE
    engagement: Optional[Engagement] = None
    released: tuple = ()
    captured: bool = False


StatusSink = Callable[[StatusKind, str], None]


class EngagementStateMachine:
    """Interprets apply/release against the workspace.

    Only the first actuator in insertion order is driven. Stops and
    retention elements are scanned across every instance and the first one
    overlapping that actuator wins.

    Settle timers capture the epoch of what they will touch; any later
    transition bumps the epoch, so a stale timer becomes a no-op instead of
    writing into a component that has since moved on.
    """

    def __init__(
        self,
        workspace: Workspace,
        scheduler: FrameScheduler,
        *,
        animation: Optional[AnimationConfig] = None,
        stress: Optional[StressConfig] = None,
        status_sink: Optional[StatusSink] = None,
    ) -> None:
        self.workspace = workspace
        self.scheduler = scheduler
        self.animation = animation or AnimationConfig()
        self.stress = stress or StressConfig()
        self.status_sink = status_sink
        self.system_state = ComponentState.AT_REST
        self._system_epoch = 0
        self._engagements: List[Engagement] = []

    # --- Queries -----------------------------------------------------------

    @property
    def engagements(self) -> List[Engagement]:
        return list(self._engagements)

    @property
    def system_epoch(self) -> int:
        return self._system_epoch

    # --- Transitions -------------------------------------------------------

    def apply(self) -> TransitionResult:
        actuator = self.workspace.find_first_of_kind(ComponentKind.ACTUATOR)
        if actuator is None:
            return TransitionResult(False, self.system_state, "No actuator component found", StatusKind.ERROR)

        self._system_epoch += 1
        self._drop_engagements_from(actuator.id)

        stop = self._first_overlapping(ComponentKind.STOP, actuator)
        if stop is not None:
            actuator.bump_epoch()
            actuator.set_state(ComponentState.BLOCKED)
            self.system_state = ComponentState.BLOCKED
            log.info("Apply blocked: %s overlaps %s", actuator.id, stop.id)
            return TransitionResult(True, ComponentState.BLOCKED, f"Motion blocked by {stop.id}")

        anim = self.animation
        retention = self._first_overlapping(ComponentKind.RETENTION, actuator)
        engagement: Optional[Engagement] = None
        if retention is not None:
            target = math.radians(anim.engage_angle_deg)
            duration = anim.engage_duration_ms
            state = ComponentState.ENGAGED
            retention.bump_epoch()
            retention.set_state(ComponentState.ENGAGED)
            engagement = Engagement(actuator.id, retention.id)
            self._engagements.append(engagement)
            done_message = f"{actuator.id} engaged by {retention.id}"
        else:
            target = math.radians(anim.preload_angle_deg)
            duration = anim.preload_duration_ms
            state = ComponentState.PRELOADED
            done_message = f"{actuator.id} preloaded, nothing captured it"

        actuator.bump_epoch()
        actuator.set_state(state)
        actuator.preload += abs(target) * self.stress.preload_gain
        self.system_state = state

        spring = self.workspace.find_first_of_kind(ComponentKind.SPRING)
        if spring is not None and spring.state not in LOADED_STATES:
            spring.bump_epoch()
            spring.set_state(ComponentState.PRELOADED)

        self._animate_rotation(actuator, target, duration, done_message=done_message)
        log.info("Apply -> %s (target %.1f deg over %.0f ms)", state.value, math.degrees(target), duration)
        return TransitionResult(
            True,
            state,
            "Engaging actuator..." if engagement else "Preloading actuator...",
            StatusKind.ACTIVE,
            engagement=engagement,
        )

    def release(self) -> TransitionResult:
        captured = bool(self._engagements)
        self._engagements = []

        actuator = self.workspace.find_first_of_kind(ComponentKind.ACTUATOR)
        if actuator is None:
            return TransitionResult(False, self.system_state, "No actuator component found", StatusKind.ERROR)

        loaded = [c for c in self.workspace if c.state in LOADED_STATES]
        if not loaded:
            return TransitionResult(False, self.system_state, "Actuator is not loaded", StatusKind.ERROR)

        anim = self.animation
        for component in loaded:
            component.set_state(ComponentState.RELEASED)
            epoch = component.bump_epoch()
            self._animate_rotation(component, 0.0, anim.release_duration_ms)
            self.scheduler.call_later(
                anim.settle_delay_ms,
                self._settle_component_callback(component.id, epoch),
                label=f"settle:{component.id}",
            )

        self.system_state = ComponentState.RELEASED
        self._system_epoch += 1
        self.scheduler.call_later(
            anim.settle_delay_ms,
            self._settle_system_callback(self._system_epoch),
            label="settle:system",
        )
        released = tuple(c.id for c in loaded)
        log.info("Release -> %s", ", ".join(released))
        return TransitionResult(
            True,
            ComponentState.RELEASED,
            "Releasing...",
            StatusKind.ACTIVE,
            released=released,
            captured=captured and actuator in loaded,
        )

    def reset(self) -> None:
        """Snap everything back to rest and invalidate pending settles."""
        self.scheduler.cancel_tweens()
        for component in self.workspace:
            component.bump_epoch()
            component.set_state(ComponentState.AT_REST)
            component.set_rotation(0.0)
            component.preload = 0.0
        self._engagements = []
        self.system_state = ComponentState.AT_REST
        self._system_epoch += 1

    def clear(self) -> None:
        self.scheduler.cancel_tweens()
        self._engagements = []
        self.system_state = ComponentState.AT_REST
        self._system_epoch += 1

    def forget(self, comp_id: str) -> None:
        """Drop engagements and tweens that reference a removed component."""
        self.scheduler.cancel_tweens(comp_id)
        self._engagements = [e for e in self._engagements if not e.involves(comp_id)]

    # --- Helpers -----------------------------------------------------------

    def _first_overlapping(self, kind: ComponentKind, actuator: Component) -> Optional[Component]:
        return next(
            (c for c in self.workspace.all_of_kind(kind) if c is not actuator and c.overlaps_with(actuator)),
            None,
        )

    def _drop_engagements_from(self, actuator_id: str) -> None:
        dropped = [e for e in self._engagements if e.from_id == actuator_id]
        if not dropped:
            return
        self._engagements = [e for e in self._engagements if e.from_id != actuator_id]
        for engagement in dropped:
            retention = self.workspace.get(engagement.to_id)
            still_held = any(e.to_id == engagement.to_id for e in self._engagements)
            if retention is not None and retention.engaged and not still_held:
                retention.bump_epoch()
                retention.set_state(ComponentState.AT_REST)

    def _animate_rotation(
        self,
        component: Component,
        target: float,
        duration: float,
        *,
        done_message: Optional[str] = None,
    ) -> None:
        comp_id = component.id
        epoch = component.epoch

        def _apply(value: float) -> None:
            current = self.workspace.get(comp_id)
            if current is not None:
                current.set_rotation(value)

        def _done() -> None:
            current = self.workspace.get(comp_id)
            if done_message and current is not None and current.epoch == epoch:
                self._emit(StatusKind.IDLE, done_message)

        self.scheduler.animate(
            (comp_id, ROTATION),
            component.rotation,
            target,
            duration,
            _apply,
            on_done=_done,
        )

    def _settle_component_callback(self, comp_id: str, epoch: int) -> Callable[[], None]:
        def _settle() -> None:
            component = self.workspace.get(comp_id)
            if component is None or component.epoch != epoch:
                log.debug("Skipping stale settle for %s (epoch %s)", comp_id, epoch)
                return
            component.set_state(ComponentState.AT_REST)
            component.preload = 0.0

        return _settle

    def _settle_system_callback(self, epoch: int) -> Callable[[], None]:
        def _settle() -> None:
            if epoch != self._system_epoch:
                log.debug("Skipping stale system settle (epoch %s)", epoch)
                return
            self.system_state = ComponentState.AT_REST
            self._emit(StatusKind.IDLE, "Released, system at rest")

        return _settle

    def _emit(self, kind: StatusKind, message: str) -> None:
        if self.status_sink is not None:
            self.status_sink(kind, message)


__all__ = [
    "Engagement",
    "EngagementKind",
    "EngagementStateMachine",
    "LOADED_STATES",
    "TransitionResult",
]
