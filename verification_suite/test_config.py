"""JSON persistence of engine tunables."""
from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))

from interaction.config import (
    EngineConfig,
    ExamplePart,
    KindOverride,
    config_from_dict,
    load_config,
    save_config,
)


def test_save_and_load_preserve_nested_values(tmp_path: Path) -> None:
    cfg = EngineConfig(name="bench", seed=3, kinds=[KindOverride("spring", extent=80.0)])
    cfg.animation.engage_duration_ms = 400.0
    cfg.example.parts.append(ExamplePart("stop", (200.0, 0.0)))
    path = tmp_path / "nested" / "engine.json"

    save_config(path, cfg)
    loaded = load_config(path)

    assert loaded == cfg
    assert loaded.example.parts[-1].offset == (200.0, 0.0)
    assert loaded.kind_override("spring").extent == 80.0


def test_partial_documents_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "engine.json"
    path.write_text(json.dumps({"stress": {"contact_stress": 40.0}}), encoding="utf-8")
    cfg = load_config(path)
    assert cfg.stress.contact_stress == 40.0
    assert cfg.stress.friction_per_component == 5.0
    assert cfg.animation.settle_delay_ms == 500.0


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ValueError):
        config_from_dict({"stress": {"contact": 1.0}})
    with pytest.raises(ValueError):
        config_from_dict({"colour": "red"})


def test_example_layout_offsets_from_anchor() -> None:
    placements = EngineConfig().example.placements()
    assert placements[0] == ("pivot", (450.0, 350.0))
    assert ("retention", (350.0, 410.0)) in placements
