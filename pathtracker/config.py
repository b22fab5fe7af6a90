"""
Configuration module for PathTracker.

Tracker settings are grouped into small immutable dataclasses. A tracker
keeps a single TrackerConfig for the lifetime of a path.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class PredictorChoice(Enum):
    """Explicit ODE formula used by the predictor."""
    EULER = "euler"
    HEUN_EULER = "heun_euler"
    RK4 = "rk4"
    RKF45 = "rkf45"
    CASH_KARP = "cash_karp"


@dataclass(frozen=True)
class SteppingConfig:
    """Step size bounds and adjustment factors.

    Args:
        initial_step_size: Step size used when a path is (re)initialized
        max_step_size: Upper bound for step size growth
        min_step_size: A path whose step size falls below this value fails
        step_size_success_factor: Growth factor applied after a run of successes
        step_size_fail_factor: Shrink factor applied after a failed step, in (0, 1)
        consecutive_successful_steps_before_step_size_increase: Length of that run
        min_num_steps: Minimum number of steps used to cover the time interval
        max_num_steps: Maximum number of successful steps for one path
    """
    initial_step_size: float = 0.1
    max_step_size: float = 0.1
    min_step_size: float = 1e-14
    step_size_success_factor: float = 2.0
    step_size_fail_factor: float = 0.5
    consecutive_successful_steps_before_step_size_increase: int = 5
    min_num_steps: int = 1
    max_num_steps: int = 100000

    def __post_init__(self):
        if self.min_step_size <= 0:
            raise ValueError("min_step_size must be positive")
        if self.initial_step_size <= 0:
            raise ValueError("initial_step_size must be positive")
        if self.max_step_size < self.min_step_size:
            raise ValueError("max_step_size must not be smaller than min_step_size")
        if not 0 < self.step_size_fail_factor < 1:
            raise ValueError("step_size_fail_factor must lie strictly between 0 and 1")
        if self.step_size_success_factor < 1:
            raise ValueError("step_size_success_factor must be at least 1")
        if self.consecutive_successful_steps_before_step_size_increase < 1:
            raise ValueError("consecutive_successful_steps_before_step_size_increase must be at least 1")
        if self.min_num_steps < 1:
            raise ValueError("min_num_steps must be at least 1")
        if self.max_num_steps < 1:
            raise ValueError("max_num_steps must be at least 1")


@dataclass(frozen=True)
class NewtonConfig:
    """Iteration bounds for the Newton corrector."""
    min_newton_iterations: int = 1
    max_newton_iterations: int = 2

    def __post_init__(self):
        if self.min_newton_iterations < 1:
            raise ValueError("min_newton_iterations must be at least 1")
        if self.max_newton_iterations < self.min_newton_iterations:
            raise ValueError("max_newton_iterations must not be smaller than min_newton_iterations")


@dataclass(frozen=True)
class TrackerConfig:
    """Complete configuration of a path tracker.

    Args:
        stepping: Step size settings
        newton: Newton corrector settings
        tracking_tolerance: Corrector convergence tolerance on the update norm
        condition_number_refresh_frequency: Number of predictor calls between
            two fresh condition number estimates
        predictor: Predictor formula
        path_truncation_threshold: Norm above which a path is considered to
            diverge, both inside the corrector and between iterations
        infinite_path_truncation: Whether to check the point norm between iterations
        reinitialize_step_size: Whether initialize() resets the step size
        random_seed: Seed of the random vectors used for condition estimates
    """
    stepping: SteppingConfig = field(default_factory=SteppingConfig)
    newton: NewtonConfig = field(default_factory=NewtonConfig)
    tracking_tolerance: float = 1e-5
    condition_number_refresh_frequency: int = 1
    predictor: PredictorChoice = PredictorChoice.RK4
    path_truncation_threshold: float = 1e5
    infinite_path_truncation: bool = True
    reinitialize_step_size: bool = True
    random_seed: Optional[int] = 0

    def __post_init__(self):
        if self.tracking_tolerance <= 0:
            raise ValueError("tracking_tolerance must be positive")
        if self.condition_number_refresh_frequency < 1:
            raise ValueError("condition_number_refresh_frequency must be at least 1")
        if self.path_truncation_threshold <= 0:
            raise ValueError("path_truncation_threshold must be positive")
        if isinstance(self.predictor, str):
            # frozen dataclass: bypass __setattr__ to normalize the enum
            object.__setattr__(self, 'predictor', PredictorChoice(self.predictor))

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "TrackerConfig":
        """Build a config from plain (possibly nested) dictionaries.

        Keys of SteppingConfig and NewtonConfig may be given either nested
        under 'stepping' / 'newton' or flat at the top level.
        """
        options = dict(options)
        stepping_opts: Dict[str, Any] = dict(options.pop('stepping', {}) or {})
        newton_opts: Dict[str, Any] = dict(options.pop('newton', {}) or {})

        stepping_keys = {f.name for f in fields(SteppingConfig)}
        newton_keys = {f.name for f in fields(NewtonConfig)}
        own_keys = {f.name for f in fields(cls)}

        top_level: Dict[str, Any] = {}
        for key, value in options.items():
            if key in stepping_keys:
                stepping_opts[key] = value
            elif key in newton_keys:
                newton_opts[key] = value
            elif key in own_keys:
                top_level[key] = value
            else:
                raise ValueError(f"Unknown tracker option: {key}")

        return cls(stepping=SteppingConfig(**stepping_opts),
                   newton=NewtonConfig(**newton_opts),
                   **top_level)

    def with_options(self, **overrides: Any) -> "TrackerConfig":
        """Return a copy with some options replaced (flat keys allowed)."""
        stepping_keys = {f.name for f in fields(SteppingConfig)}
        newton_keys = {f.name for f in fields(NewtonConfig)}
        stepping_opts = {k: v for k, v in overrides.items() if k in stepping_keys}
        newton_opts = {k: v for k, v in overrides.items() if k in newton_keys}
        rest = {k: v for k, v in overrides.items()
                if k not in stepping_keys and k not in newton_keys}
        if 'stepping' not in rest and stepping_opts:
            rest['stepping'] = replace(self.stepping, **stepping_opts)
        if 'newton' not in rest and newton_opts:
            rest['newton'] = replace(self.newton, **newton_opts)
        return replace(self, **rest)
