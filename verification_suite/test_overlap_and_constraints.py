"""Footprint overlap predicate and the constraint checker built on it."""
from __future__ import annotations

import itertools
import sys
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))

from mechanics.constraints import COLLISION, check_constraints
from mechanics.entities import overlaps
from mechanics.geometry import Footprint
from mechanics.world import Pose2D, Workspace


def _scatter() -> Workspace:
    ws = Workspace()
    ws.add("actuator", (300.0, 350.0))
    ws.add("retention", (420.0, 350.0))
    ws.add("stop", (300.0, 520.0))
    ws.add("spring", (250.0, 300.0))
    ws.add("pivot", (900.0, 900.0))
    return ws


def test_overlap_is_symmetric() -> None:
    ws = _scatter()
    for a, b in itertools.combinations(ws.all(), 2):
        assert overlaps(a, b) == overlaps(b, a)


def test_overlap_uses_average_extent_strictly() -> None:
    ws = Workspace()
    a = ws.get(ws.add("actuator", (0.0, 0.0), extent=100.0))
    b = ws.get(ws.add("retention", (100.0, 0.0), extent=100.0))
    # distance 100 == (100 + 100) / 2 -> touching is not overlapping
    assert not overlaps(a, b)
    b.move_to((99.9, 0.0))
    assert overlaps(a, b)


def test_footprint_contains_point() -> None:
    fp = Footprint(40.0)
    pose = Pose2D(10.0, 10.0)
    assert fp.contains_point((25.0, 10.0), pose)
    assert not fp.contains_point((31.0, 10.0), pose)
    box = fp.bounding_box(pose)
    assert (box.min_x, box.max_x) == (-10.0, 30.0)


def test_constraints_cover_each_overlapping_pair_once() -> None:
    ws = _scatter()
    constraints = check_constraints(ws.all())
    pairs = {frozenset(c.ids) for c in constraints}
    assert len(pairs) == len(constraints)
    expected = {
        frozenset((a.id, b.id)) for a, b in itertools.combinations(ws.all(), 2) if overlaps(a, b)
    }
    assert pairs == expected
    for c in constraints:
        assert c.kind == COLLISION
        assert c.depth > 0.0
        kinds = [ws.get(i).kind.value for i in c.ids]
        assert c.message == f"{kinds[0]} overlaps {kinds[1]}"


def test_constraints_are_rebuilt_not_patched() -> None:
    ws = Workspace()
    a_id = ws.add("actuator", (0.0, 0.0))
    ws.add("stop", (50.0, 0.0))
    assert len(check_constraints(ws.all())) == 1
    ws.get(a_id).move_to((1000.0, 0.0))
    assert check_constraints(ws.all()) == []


def test_engine_constraints_track_moves_and_removals(engine) -> None:
    a = engine.add_component("actuator", (0.0, 0.0))
    s = engine.add_component("stop", (500.0, 0.0))
    assert engine.list_constraints() == []

    engine.move_component(s, (60.0, 0.0))
    assert [c.ids for c in engine.list_constraints()] == [(a, s)]

    engine.remove_component(s)
    assert all(not c.involves(s) for c in engine.list_constraints())
    assert engine.list_constraints() == []
