"""Tunables for the interaction engine and JSON helpers to load them."""
from __future__ import annotations

from dataclasses import dataclass, asdict, field
import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple, get_type_hints, get_origin, get_args

Point = Tuple[float, float]


@dataclass
class AnimationConfig:
    """Tween durations (ms) and target angles (degrees) per transition."""

    engage_angle_deg: float = 60.0
    preload_angle_deg: float = 30.0
    engage_duration_ms: float = 800.0
    preload_duration_ms: float = 600.0
    release_duration_ms: float = 300.0
    settle_delay_ms: float = 500.0


@dataclass
class StressConfig:
    friction_per_component: float = 5.0
    mass_per_component: float = 15.0
    contact_stress: float = 75.0
    retention_rotation_gain: float = 50.0
    retention_medium_threshold: float = 30.0
    retention_high_threshold: float = 70.0
    # Preload accumulated per radian of actuator travel on apply.
    preload_gain: float = 50.0


@dataclass
class PhysicsConfig:
    """Abstract constants behind the release force readout."""

    spring_constant: float = 500.0
    compression: float = 0.1
    contact_force_factor: float = 10.0


@dataclass
class KindOverride:
    kind: str
    extent: Optional[float] = None
    mass: Optional[float] = None


@dataclass
class ExamplePart:
    kind: str
    offset: Point = (0.0, 0.0)


def _default_example_parts() -> List[ExamplePart]:
    # The actuator hangs on the pivot; retention sits behind and below it,
    # spring above, stop clear underneath.
    return [
        ExamplePart("pivot", (0.0, 0.0)),
        ExamplePart("actuator", (0.0, 0.0)),
        ExamplePart("retention", (-100.0, 60.0)),
        ExamplePart("spring", (-60.0, -40.0)),
        ExamplePart("stop", (0.0, 160.0)),
    ]


@dataclass
class ExampleLayout:
    anchor: Point = (450.0, 350.0)
    parts: List[ExamplePart] = field(default_factory=_default_example_parts)

    def placements(self) -> List[Tuple[str, Point]]:
        ax, ay = self.anchor
        return [(p.kind, (ax + p.offset[0], ay + p.offset[1])) for p in self.parts]


@dataclass
class EngineConfig:
    name: str = "workbench"
    seed: Optional[int] = None
    animation: AnimationConfig = field(default_factory=AnimationConfig)
    stress: StressConfig = field(default_factory=StressConfig)
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    kinds: List[KindOverride] = field(default_factory=list)
    example: ExampleLayout = field(default_factory=ExampleLayout)
    analysis_display_delay_ms: float = 2000.0
    status_history: int = 200

    def kind_override(self, kind: str) -> Optional[KindOverride]:
        return next((k for k in self.kinds if k.kind == kind), None)


def _dataclass_from_dict(cls, data: Dict) -> object:
    field_types = get_type_hints(cls)
    kwargs = {}
    for key, value in data.items():
        if key not in field_types:
            raise ValueError(f"Unknown field '{key}' for {cls.__name__}")
        expected = field_types.get(key)
        origin = get_origin(expected)
        if origin is list:
            inner = get_args(expected)[0]
            if hasattr(inner, "__dataclass_fields__"):
                kwargs[key] = [_dataclass_from_dict(inner, v) for v in value]
                continue
        if origin is tuple:
            kwargs[key] = tuple(value)
            continue
        if origin is not None:
            args = [a for a in get_args(expected) if a is not type(None)]
            if len(args) == 1 and hasattr(args[0], "__dataclass_fields__"):
                if value is None:
                    kwargs[key] = None
                else:
                    kwargs[key] = _dataclass_from_dict(args[0], value)
                continue
        if hasattr(expected, "__dataclass_fields__"):
            kwargs[key] = _dataclass_from_dict(expected, value)
        else:
            kwargs[key] = value
    return cls(**kwargs)


def config_from_dict(data: Dict) -> EngineConfig:
    return _dataclass_from_dict(EngineConfig, data)  # type: ignore[return-value]


def load_config(path: Path) -> EngineConfig:
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    return config_from_dict(data)


def save_config(path: Path, cfg: EngineConfig) -> None:
    def _encode(o):
        if hasattr(o, "__dataclass_fields__"):
            return {k: _encode(v) for k, v in asdict(o).items()}
        if isinstance(o, (list, tuple)):
            return [_encode(v) for v in o]
        if isinstance(o, dict):
            return {k: _encode(v) for k, v in o.items()}
        return o

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(_encode(cfg), f, indent=2)
