"""Command/query facade over the workspace, state machine and analyzer."""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from mechanics.animation import Clock, FrameScheduler
from mechanics.constraints import Constraint, check_constraints
from mechanics.diagnostics import Status, StatusKind, StatusLog
from mechanics.entities import Component, ComponentKind, ComponentState
from mechanics.world import Point2D, Workspace

from .analysis import AnalysisResult, FailureReport, ForceReadout, StressAnalyzer, StressMetrics
from .config import EngineConfig
from .logging_config import get_logger
from .state_machine import Engagement, EngagementStateMachine, TransitionResult

log = get_logger("engine")

ConfirmCallback = Callable[[str], bool]


class MechanismEngine:
    """Owns all session state for one workbench.

    Commands never raise: problems are recorded as ERROR statuses and the
    offending command leaves the engine untouched. Renderers poll the query
    methods and call :meth:`tick` once per frame.

    ``confirm_clear`` is asked before any command discards placed
    components (:meth:`clear_all`, and :meth:`load_example` over a
    non-empty workspace); returning False cancels the command. Leaving it
    as None means there is no gate and those commands proceed directly,
    which is what scripted and headless callers want.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        clock: Optional[Clock] = None,
        confirm_clear: Optional[ConfirmCallback] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.workspace = Workspace(name=self.config.name, random_seed=self.config.seed)
        self.scheduler = FrameScheduler(clock)
        self.analyzer = StressAnalyzer(self.config.stress, self.config.physics)
        self.status_log = StatusLog(max_entries=self.config.status_history)
        self.machine = EngagementStateMachine(
            self.workspace,
            self.scheduler,
            animation=self.config.animation,
            stress=self.config.stress,
            status_sink=self._status,
        )
        self.confirm_clear = confirm_clear
        self.analysis_running = False
        self._constraints: List[Constraint] = []
        self._metrics = StressMetrics()
        self._failures: List[FailureReport] = []
        self._forces = ForceReadout()
        self._drag_id: Optional[str] = None
        self._analysis_timer = None

    # --- Commands: layout --------------------------------------------------

    def add_component(
        self,
        kind: ComponentKind | str,
        position: Point2D,
        *,
        extent: Optional[float] = None,
    ) -> Optional[str]:
        try:
            kind = ComponentKind.coerce(kind)
            override = self.config.kind_override(kind.value)
            if extent is None and override is not None:
                extent = override.extent
            mass = override.mass if override is not None else None
            comp_id = self.workspace.add(kind, position, extent=extent, mass=mass)
        except (TypeError, ValueError) as exc:
            self._status(StatusKind.ERROR, str(exc))
            return None
        self._geometry_changed()
        self._status(StatusKind.IDLE, f"Added {kind.value} component")
        return comp_id

    def remove_component(self, comp_id: str) -> None:
        removed = self.workspace.remove(comp_id)
        if removed is None:
            log.debug("remove_component: %s not present", comp_id)
            return
        self.machine.forget(comp_id)
        if self._drag_id == comp_id:
            self._drag_id = None
        self._geometry_changed()
        self._status(StatusKind.IDLE, f"Removed {removed.kind.value} component")

    def move_component(self, comp_id: str, position: Point2D) -> bool:
        component = self._require(comp_id)
        if component is None:
            return False
        try:
            component.move_to(position)
        except (TypeError, ValueError) as exc:
            self._status(StatusKind.ERROR, f"Cannot move {comp_id}: {exc}")
            return False
        self._geometry_changed()
        return True

    def rotate_component(self, comp_id: str, delta: float) -> bool:
        """Manual nudge; cancels any rotation tween in flight for the part."""
        component = self._require(comp_id)
        if component is None:
            return False
        self.scheduler.cancel_tweens(comp_id)
        try:
            component.set_rotation(component.rotation + float(delta))
        except (TypeError, ValueError) as exc:
            self._status(StatusKind.ERROR, f"Cannot rotate {comp_id}: {exc}")
            return False
        self._geometry_changed()
        return True

    # --- Commands: drag ----------------------------------------------------

    def begin_drag(self, comp_id: str) -> bool:
        if self._drag_id is not None:
            self._status(StatusKind.ERROR, f"Already dragging {self._drag_id}")
            return False
        if self._require(comp_id) is None:
            return False
        self._drag_id = comp_id
        return True

    def drag_to(self, position: Point2D) -> bool:
        if self._drag_id is None:
            return False
        return self.move_component(self._drag_id, position)

    def end_drag(self) -> Optional[str]:
        released, self._drag_id = self._drag_id, None
        return released

    @property
    def dragging(self) -> Optional[str]:
        return self._drag_id

    # --- Commands: interaction --------------------------------------------

    def apply_input(self) -> TransitionResult:
        result = self.machine.apply()
        self._report(result)
        if result.ok:
            self._refresh_metrics()
        return result

    def release_input(self) -> TransitionResult:
        result = self.machine.release()
        self._report(result)
        if result.ok:
            actuator = self.workspace.find_first_of_kind(ComponentKind.ACTUATOR)
            if result.captured and actuator is not None:
                self._forces = self.analyzer.release_readout(actuator)
            self._refresh_metrics()
        return result

    def run_analysis(self) -> AnalysisResult:
        result = self.analyzer.analyze(self.workspace)
        self._metrics = result.metrics
        self._failures = list(result.failures)
        self.analysis_running = True
        if self._analysis_timer is not None:
            self._analysis_timer.cancel()
        self._analysis_timer = self.scheduler.call_later(
            self.config.analysis_display_delay_ms, self._finish_analysis, label="analysis"
        )
        self._status(StatusKind.ACTIVE, "Running analysis...")
        log.info("Analysis: %d failure(s), worst=%s", len(result.failures), result.worst)
        return result

    def clear_all(self) -> bool:
        if not self._confirm_discard():
            return False
        self._wipe()
        self._status(StatusKind.IDLE, "Workspace cleared")
        return True

    def reset_states(self) -> None:
        self.machine.reset()
        self._forces = ForceReadout()
        self._refresh_metrics()
        self._status(StatusKind.IDLE, "System reset")

    def load_example(self) -> List[str]:
        if len(self.workspace) and not self._confirm_discard():
            return []
        self._wipe()
        ids: List[str] = []
        for kind, position in self.config.example.placements():
            comp_id = self.add_component(kind, position)
            if comp_id is not None:
                ids.append(comp_id)
        self._status(StatusKind.IDLE, "Example system loaded")
        return ids

    def tick(self, now: Optional[float] = None) -> bool:
        ran = self.scheduler.tick(now)
        if ran:
            self._refresh_metrics()
        return ran

    # --- Queries -----------------------------------------------------------

    def list_components(self) -> List[Component]:
        return self.workspace.all()

    def get_component(self, comp_id: str) -> Optional[Component]:
        return self.workspace.get(comp_id)

    def list_engagements(self) -> List[Engagement]:
        return self.machine.engagements

    def list_constraints(self) -> List[Constraint]:
        return list(self._constraints)

    def current_system_state(self) -> ComponentState:
        return self.machine.system_state

    def current_metrics(self) -> StressMetrics:
        return self._metrics

    def current_failure_report(self) -> List[FailureReport]:
        return list(self._failures)

    def current_forces(self) -> ForceReadout:
        return self._forces

    def current_status(self) -> Optional[Status]:
        return self.status_log.current

    def status_history(self) -> List[Status]:
        return list(self.status_log)

    def component_at(self, point: Point2D) -> Optional[Component]:
        """Topmost (last placed) component whose footprint contains ``point``."""
        for component in reversed(self.workspace.all()):
            if component.contains_point(point):
                return component
        return None

    def snapshot_dict(self) -> Dict[str, object]:
        data = self.workspace.snapshot_dict()
        status = self.status_log.current
        data.update(
            {
                "system_state": self.machine.system_state.value,
                "engagements": [e.as_dict() for e in self.machine.engagements],
                "constraints": [c.as_dict() for c in self._constraints],
                "metrics": self._metrics.as_dict(),
                "failures": [f.as_dict() for f in self._failures],
                "forces": self._forces.as_dict(),
                "status": status.as_dict() if status else None,
            }
        )
        return data

    # --- Internals ---------------------------------------------------------

    def _require(self, comp_id: str) -> Optional[Component]:
        component = self.workspace.get(comp_id)
        if component is None:
            self._status(StatusKind.ERROR, f"No component with id {comp_id}")
        return component

    def _confirm_discard(self) -> bool:
        if self.confirm_clear is None or self.confirm_clear("Clear all components?"):
            return True
        self._status(StatusKind.IDLE, "Clear cancelled")
        return False

    def _wipe(self) -> None:
        self.machine.clear()
        self.workspace.clear()
        self._drag_id = None
        self._failures = []
        self._forces = ForceReadout()
        self._geometry_changed()

    def _geometry_changed(self) -> None:
        self._constraints = check_constraints(self.workspace.all())
        self._refresh_metrics()

    def _refresh_metrics(self) -> None:
        self._metrics = self.analyzer.metrics(self.workspace)

    def _finish_analysis(self) -> None:
        self.analysis_running = False
        self._analysis_timer = None
        self._status(StatusKind.IDLE, "Analysis complete")

    def _report(self, result: TransitionResult) -> None:
        self._status(result.status, result.message)

    def _status(self, kind: StatusKind, message: str) -> Status:
        if kind is StatusKind.ERROR:
            log.warning(message)
        else:
            log.info(message)
        return self.status_log.record(kind, message, time=self.scheduler.now())


__all__ = ["MechanismEngine"]
