"""Apply/release transitions, settle timing and stale-timer protection."""
from __future__ import annotations

import math
import sys
from pathlib import Path

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))

from interaction.state_machine import EngagementKind
from mechanics.diagnostics import StatusKind
from mechanics.entities import ComponentState

ENGAGE = math.radians(60.0)
PRELOAD = math.radians(30.0)


def _flags_consistent(engine) -> bool:
    return all(
        c.engaged == (c.state is ComponentState.ENGAGED) and c.blocked == (c.state is ComponentState.BLOCKED)
        for c in engine.list_components()
    )


def _engaged_pair(engine):
    actuator = engine.add_component("actuator", (300.0, 350.0), extent=200.0)
    retention = engine.add_component("retention", (450.0, 350.0), extent=120.0)
    return actuator, retention


def test_apply_without_actuator_reports_and_changes_nothing(engine) -> None:
    engine.add_component("retention", (0.0, 0.0))
    result = engine.apply_input()
    assert not result.ok
    assert engine.current_status().kind is StatusKind.ERROR
    assert "actuator" in engine.current_status().message.lower()
    assert engine.current_system_state() is ComponentState.AT_REST
    assert engine.list_engagements() == []


def test_stop_overlap_blocks_before_retention_is_considered(engine) -> None:
    actuator, retention = _engaged_pair(engine)
    engine.add_component("stop", (330.0, 350.0))

    result = engine.apply_input()
    assert result.ok
    assert engine.current_system_state() is ComponentState.BLOCKED
    comp = engine.get_component(actuator)
    assert comp.state is ComponentState.BLOCKED and comp.blocked
    assert engine.get_component(retention).state is ComponentState.AT_REST
    assert engine.list_engagements() == []
    assert engine.scheduler.active_tweens == 0
    assert _flags_consistent(engine)


def test_retention_overlap_engages_and_animates(engine, clock) -> None:
    actuator, retention = _engaged_pair(engine)

    result = engine.apply_input()
    assert result.ok
    assert engine.current_system_state() is ComponentState.ENGAGED
    engagements = engine.list_engagements()
    assert len(engagements) == 1
    assert engagements[0].as_tuple() == (actuator, retention, "retention")
    assert engagements[0].kind is EngagementKind.RETENTION
    assert engine.get_component(actuator).engaged
    assert engine.get_component(retention).engaged
    assert engine.current_metrics().contact_stress == 75.0

    clock.advance(400.0)
    engine.tick()
    assert engine.get_component(actuator).rotation == pytest.approx(ENGAGE * 0.875)

    clock.advance(400.0)
    engine.tick()
    assert engine.get_component(actuator).rotation == pytest.approx(ENGAGE)
    assert engine.current_status().kind is StatusKind.IDLE
    assert _flags_consistent(engine)


def test_free_apply_preloads_toward_smaller_angle(engine, clock) -> None:
    actuator = engine.add_component("actuator", (300.0, 350.0))
    result = engine.apply_input()
    assert result.state is ComponentState.PRELOADED
    assert engine.current_system_state() is ComponentState.PRELOADED
    assert engine.list_engagements() == []

    clock.advance(600.0)
    engine.tick()
    assert engine.get_component(actuator).rotation == pytest.approx(PRELOAD)


def test_repeat_apply_keeps_single_engagement_per_actuator(engine) -> None:
    _engaged_pair(engine)
    engine.apply_input()
    engine.apply_input()
    assert len(engine.list_engagements()) == 1


def test_moving_away_and_reapplying_frees_old_retention(engine) -> None:
    actuator, retention = _engaged_pair(engine)
    engine.apply_input()
    engine.move_component(actuator, (2000.0, 2000.0))
    engine.apply_input()
    assert engine.list_engagements() == []
    assert engine.get_component(retention).state is ComponentState.AT_REST
    assert engine.get_component(actuator).state is ComponentState.PRELOADED


def test_release_clears_engagements_immediately_and_settles_later(engine, clock) -> None:
    actuator, retention = _engaged_pair(engine)
    engine.apply_input()
    clock.advance(800.0)
    engine.tick()

    result = engine.release_input()
    assert result.ok
    assert engine.list_engagements() == []
    assert engine.current_system_state() is ComponentState.RELEASED
    assert engine.get_component(actuator).state is ComponentState.RELEASED
    assert engine.get_component(retention).state is ComponentState.RELEASED
    assert _flags_consistent(engine)

    clock.advance(300.0)
    engine.tick()
    assert engine.get_component(actuator).rotation == pytest.approx(0.0)
    assert engine.get_component(actuator).state is ComponentState.RELEASED

    clock.advance(199.0)
    engine.tick()
    assert engine.current_system_state() is ComponentState.RELEASED

    clock.advance(1.0)
    engine.tick()
    assert engine.current_system_state() is ComponentState.AT_REST
    for comp in engine.list_components():
        assert comp.state is ComponentState.AT_REST
        assert not comp.engaged and not comp.blocked


def test_release_without_loaded_actuator_is_an_error(engine) -> None:
    engine.add_component("actuator", (0.0, 0.0))
    result = engine.release_input()
    assert not result.ok
    assert engine.current_status().kind is StatusKind.ERROR
    assert engine.current_system_state() is ComponentState.AT_REST
    assert engine.list_engagements() == []


def test_release_after_block_clears_engagements_but_reports(engine) -> None:
    _engaged_pair(engine)
    engine.apply_input()
    engine.add_component("stop", (320.0, 350.0))
    engine.apply_input()
    assert engine.current_system_state() is ComponentState.BLOCKED

    result = engine.release_input()
    assert not result.ok
    assert engine.list_engagements() == []
    assert engine.current_system_state() is ComponentState.BLOCKED


def test_reset_invalidates_pending_settle(engine, clock) -> None:
    actuator, _ = _engaged_pair(engine)
    engine.apply_input()
    engine.release_input()

    clock.advance(100.0)
    engine.reset_states()
    engine.apply_input()
    assert engine.current_system_state() is ComponentState.ENGAGED

    clock.advance(1000.0)
    engine.tick()
    assert engine.current_system_state() is ComponentState.ENGAGED
    assert engine.get_component(actuator).state is ComponentState.ENGAGED


def test_clear_then_reload_ignores_old_timers(engine, clock) -> None:
    engine.load_example()
    engine.apply_input()
    engine.release_input()
    engine.clear_all()
    engine.load_example()
    engine.apply_input()

    clock.advance(1000.0)
    engine.tick()
    assert engine.current_system_state() is ComponentState.ENGAGED
    assert len(engine.list_engagements()) == 1


def test_second_command_restarts_from_current_value(engine, clock) -> None:
    actuator = engine.add_component("actuator", (0.0, 0.0))
    engine.apply_input()
    clock.advance(300.0)
    engine.tick()
    partial = engine.get_component(actuator).rotation
    assert 0.0 < partial < PRELOAD

    engine.release_input()
    tween = engine.scheduler.tween_for((actuator, "rotation"))
    assert tween is not None
    assert tween.start == pytest.approx(partial)
    assert tween.target == 0.0
    assert tween.duration == 300.0


def test_preload_accumulates_and_clears_on_settle(engine, clock) -> None:
    actuator = engine.add_component("actuator", (0.0, 0.0))
    spring = engine.add_component("spring", (1000.0, 1000.0))
    engine.apply_input()
    engine.apply_input()
    expected = 2 * PRELOAD * 50.0
    assert engine.get_component(actuator).preload == pytest.approx(expected)
    assert engine.get_component(spring).state is ComponentState.PRELOADED

    engine.release_input()
    clock.advance(500.0)
    engine.tick()
    assert engine.get_component(actuator).preload == 0.0
    assert engine.get_component(spring).state is ComponentState.AT_REST
