"""
Step size control for PathTracker.

The controller only knows how to grow, shrink and commit a step size. When
to do which is decided by the tracker loop.
"""

from pathtracker.config import SteppingConfig


class StepSizeController:
    """Owner of the current step size of one path.

    Args:
        config: Stepping bounds and factors
    """

    def __init__(self, config: SteppingConfig):
        self.config = config
        self.current_step_size = config.initial_step_size

    def grow(self, current: float) -> float:
        """Step size after a run of successful steps."""
        return min(current * self.config.step_size_success_factor,
                   self.config.max_step_size)

    def shrink(self, current: float) -> float:
        """Step size after a failed step."""
        return current * self.config.step_size_fail_factor

    def commit(self, next_step_size: float) -> float:
        """Make `next_step_size` the current step size (never negative)."""
        self.current_step_size = max(float(next_step_size), 0.0)
        return self.current_step_size

    def below_minimum(self) -> bool:
        return self.current_step_size < self.config.min_step_size

    def fresh_step_size(self, interval_length: float) -> float:
        """Initial step size for a path covering `interval_length` in time."""
        return min(self.config.initial_step_size,
                   interval_length / self.config.min_num_steps)

    def __repr__(self) -> str:
        return f"StepSizeController(current_step_size={self.current_step_size:.3e})"
