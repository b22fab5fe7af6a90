"""
Homotopy module for PathTracker.

A homotopy H(x, t) is everything the tracking engine needs to know about the
system being tracked: its value, its Jacobian with respect to the space
variables and its derivative with respect to time, all at a point (x, t).
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

import numpy as np

from pathtracker.polynomial import Variable, PolynomialSystem
from pathtracker.utils import evaluate_jacobian_polynomials


class Homotopy(ABC):
    """Interface consumed by the predictor, the corrector and the tracker.

    Implementations must be read-only once constructed, so that a single
    homotopy can be shared by trackers running in different threads.
    """

    @abstractmethod
    def evaluate(self, point: np.ndarray, t: complex) -> np.ndarray:
        """Value of H at (point, t)."""

    @abstractmethod
    def jacobian(self, point: np.ndarray, t: complex) -> np.ndarray:
        """Jacobian of H with respect to the space variables at (point, t)."""

    @abstractmethod
    def time_derivative(self, point: np.ndarray, t: complex) -> np.ndarray:
        """Partial derivative dH/dt at (point, t)."""

    @abstractmethod
    def num_variables(self) -> int:
        """Number of space variables."""

    def num_functions(self) -> int:
        return self.num_variables()


class StraightLineHomotopy(Homotopy):
    """Straight-line homotopy H(x, t) = (1-t)*gamma*g(x) + t*f(x).

    At t = 0 the solutions are those of the start system g, at t = 1 those of
    the target system f. The random complex gamma keeps the path away from
    singularities for all t in [0, 1).
    """

    def __init__(self,
                 start_system: PolynomialSystem,
                 target_system: PolynomialSystem,
                 variables: Optional[List[Variable]] = None,
                 gamma: complex = 0.6+0.8j):
        """Initialize the homotopy.

        Args:
            start_system: Start system g(x), with known solutions
            target_system: Target system f(x)
            variables: Ordered variables (default: sorted by name)
            gamma: Random complex number for the homotopy
        """
        if variables is None:
            all_vars = start_system.variables() | target_system.variables()
            variables = sorted(all_vars, key=lambda v: v.name)
        self.variables = list(variables)
        self.start_system = start_system
        self.target_system = target_system
        self.gamma = complex(gamma)

        n_vars = len(self.variables)
        if len(start_system.equations) != len(target_system.equations):
            raise ValueError("Start and target systems must have the same number of equations")
        if len(target_system.equations) != n_vars:
            raise ValueError(f"StraightLineHomotopy requires a square system "
                             f"({len(target_system.equations)} equations, {n_vars} variables)")

        # differentiated once, read-only afterwards
        self._start_jacobian = start_system.jacobian(self.variables)
        self._target_jacobian = target_system.jacobian(self.variables)

    def _values(self, point):
        return {var: val for var, val in zip(self.variables, point)}

    def evaluate(self, point: np.ndarray, t: complex) -> np.ndarray:
        values = self._values(point)
        f_val = np.array(self.target_system.evaluate(values), dtype=complex)
        g_val = np.array(self.start_system.evaluate(values), dtype=complex)
        return (1 - t) * self.gamma * g_val + t * f_val

    def jacobian(self, point: np.ndarray, t: complex) -> np.ndarray:
        values = self._values(point)
        jac_f = evaluate_jacobian_polynomials(self._target_jacobian, values)
        jac_g = evaluate_jacobian_polynomials(self._start_jacobian, values)
        return (1 - t) * self.gamma * jac_g + t * jac_f

    def time_derivative(self, point: np.ndarray, t: complex) -> np.ndarray:
        values = self._values(point)
        f_val = np.array(self.target_system.evaluate(values), dtype=complex)
        g_val = np.array(self.start_system.evaluate(values), dtype=complex)
        return f_val - self.gamma * g_val

    def num_variables(self) -> int:
        return len(self.variables)


class FunctionHomotopy(Homotopy):
    """Homotopy given directly by numeric callables.

    Args:
        func: (x, t) -> H(x, t)
        jac: (x, t) -> dH/dx
        time_derivative: (x, t) -> dH/dt
        num_variables: Number of space variables
    """

    def __init__(self,
                 func: Callable[[np.ndarray, complex], np.ndarray],
                 jac: Callable[[np.ndarray, complex], np.ndarray],
                 time_derivative: Callable[[np.ndarray, complex], np.ndarray],
                 num_variables: int):
        if num_variables < 1:
            raise ValueError("num_variables must be at least 1")
        self._func = func
        self._jac = jac
        self._dt = time_derivative
        self._num_variables = num_variables

    def evaluate(self, point, t):
        return np.asarray(self._func(point, t), dtype=complex)

    def jacobian(self, point, t):
        return np.atleast_2d(np.asarray(self._jac(point, t), dtype=complex))

    def time_derivative(self, point, t):
        return np.asarray(self._dt(point, t), dtype=complex)

    def num_variables(self):
        return self._num_variables
