"""Interaction engine: apply/release transitions, stress analysis and config."""

from .config import (  # noqa: F401
    AnimationConfig,
    EngineConfig,
    ExampleLayout,
    ExamplePart,
    KindOverride,
    PhysicsConfig,
    StressConfig,
    config_from_dict,
    load_config,
    save_config,
)
from .analysis import (  # noqa: F401
    AnalysisResult,
    FailureReport,
    ForceReadout,
    Severity,
    StressAnalyzer,
    StressMetrics,
)
from .state_machine import (  # noqa: F401
    Engagement,
    EngagementKind,
    EngagementStateMachine,
    TransitionResult,
)
from .engine import MechanismEngine  # noqa: F401
from .logging_config import setup_logging  # noqa: F401
