"""
Numerical health bookkeeping for PathTracker.

NumericalHealth holds the side outputs of the predictor and the corrector.
ConditionRefresh decides when the (relatively expensive) condition number
estimate is recomputed and when the cached value is reused.
"""

from dataclasses import dataclass, fields, replace

import numpy as np


@dataclass
class NumericalHealth:
    """Metrics measured along a path, cached between iterations."""
    condition_number_estimate: float = np.nan
    jacobian_norm: float = np.nan
    jacobian_inverse_norm: float = np.nan
    error_estimate: float = np.nan
    size_proportion: float = np.nan
    correction_delta_norm: float = np.nan
    newton_iterations: int = 0

    def reset(self) -> None:
        for f in fields(self):
            setattr(self, f.name, f.default)

    def snapshot(self) -> "NumericalHealth":
        return replace(self)


class ConditionRefresh:
    """Counter deciding whether the condition number estimate is stale.

    The counter starts at the frequency, so the very first predictor call
    computes a fresh estimate. Afterwards an estimate is computed once every
    `frequency` calls: on calls 1, F+1, 2F+1, ...

    Args:
        frequency: Number of predictor calls between two fresh estimates
    """

    def __init__(self, frequency: int = 1):
        if frequency < 1:
            raise ValueError("Refresh frequency must be at least 1")
        self.frequency = frequency
        self.steps_since_last_computation = frequency
        self.num_computations = 0

    def reset(self) -> None:
        self.steps_since_last_computation = self.frequency
        self.num_computations = 0

    def due(self) -> bool:
        """Whether the next predictor call must recompute the estimate."""
        return self.steps_since_last_computation >= self.frequency

    def record_computation(self) -> None:
        self.steps_since_last_computation = 1
        self.num_computations += 1

    def record_reuse(self) -> None:
        self.steps_since_last_computation += 1

    def __repr__(self) -> str:
        return (f"ConditionRefresh(frequency={self.frequency}, "
                f"steps_since_last_computation={self.steps_since_last_computation})")
