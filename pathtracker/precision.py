"""
Numeric precision contexts for PathTracker.

A NumericContext bundles the complex and real numpy types a tracker computes
with. The tracker is written once against this capability set, and switching
precision between iterations amounts to converting the path state into
another context.
"""

from dataclasses import dataclass
from typing import Any, Dict

import numpy as np


@dataclass(frozen=True)
class NumericContext:
    """Complex/real numpy type pair used for one precision level."""
    name: str
    complex_dtype: Any
    real_dtype: Any

    @property
    def eps(self) -> float:
        """Machine epsilon of the real type."""
        return float(np.finfo(self.real_dtype).eps)

    @property
    def digits(self) -> int:
        """Approximate number of significant decimal digits."""
        return int(np.finfo(self.real_dtype).precision)

    def asarray(self, values) -> np.ndarray:
        """Copy values into a 1-D (or 2-D) complex array of this precision."""
        return np.array(values, dtype=self.complex_dtype)

    def zeros(self, n: int) -> np.ndarray:
        return np.zeros(n, dtype=self.complex_dtype)

    def scalar(self, value) -> complex:
        return self.complex_dtype(value)

    def real(self, value) -> float:
        return self.real_dtype(value)


SINGLE = NumericContext("single", np.complex64, np.float32)
DOUBLE = NumericContext("double", np.complex128, np.float64)

_CONTEXTS: Dict[str, NumericContext] = {
    SINGLE.name: SINGLE,
    DOUBLE.name: DOUBLE,
}


def get_context(name: str) -> NumericContext:
    """Look up a numeric context by name ('single' or 'double')."""
    try:
        return _CONTEXTS[name]
    except KeyError:
        raise ValueError(f"Unknown precision '{name}'. "
                         f"Available: {', '.join(sorted(_CONTEXTS))}") from None
