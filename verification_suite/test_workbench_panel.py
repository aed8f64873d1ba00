"""Side panel readout helpers of the workbench app."""
from __future__ import annotations

import math
import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))

pytest.importorskip("pygame")
pytest.importorskip("pygame_gui")

from apps.workbench import selected_info_lines


def test_nothing_selected() -> None:
    assert selected_info_lines(None) == ["Selected: -"]


def test_selected_part_shows_position_rotation_and_mass(engine) -> None:
    comp_id = engine.add_component("actuator", (120.4, 80.6))
    engine.rotate_component(comp_id, math.radians(15.0))
    lines = selected_info_lines(engine.get_component(comp_id))
    assert lines == [
        f"Selected: {comp_id}",
        "  Position: (120, 81)",
        "  Rotation: 15.0 deg",
        "  Mass: 0.050 kg",
    ]
