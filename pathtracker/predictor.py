"""
Predictor module for PathTracker.

Along a regular path H(x(t), t) = 0, so the path satisfies the ODE

    dx/dt = -J(x, t)^{-1} dH/dt(x, t).

A predictor takes one explicit Runge-Kutta step of this ODE. The formula is
a Butcher tableau selected through PredictorChoice; embedded pairs also give
a local error estimate.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from pathtracker.codes import SuccessCode
from pathtracker.condition import ConditionRefresh, NumericalHealth
from pathtracker.config import PredictorChoice
from pathtracker.homotopy import Homotopy
from pathtracker.precision import DOUBLE, NumericContext
from pathtracker.utils import lu_decompose, lu_solve_factored, random_of_units


@dataclass(frozen=True)
class ButcherTableau:
    """Coefficients of an explicit Runge-Kutta method.

    `b` advances the solution. `b_error`, when present, is the difference
    between `b` and the weights of the embedded lower order method, and
    `error_order` is the order of that lower order method.
    """
    name: str
    c: Tuple[float, ...]
    a: Tuple[Tuple[float, ...], ...]
    b: Tuple[float, ...]
    order: int
    b_error: Optional[Tuple[float, ...]] = None
    error_order: Optional[int] = None

    @property
    def stages(self) -> int:
        return len(self.c)

    @property
    def embedded(self) -> bool:
        return self.b_error is not None


def _difference(b, b_hat):
    return tuple(x - y for x, y in zip(b, b_hat))


EULER = ButcherTableau(
    name="Euler",
    c=(0.0,),
    a=((),),
    b=(1.0,),
    order=1,
)

HEUN_EULER = ButcherTableau(
    name="Heun-Euler",
    c=(0.0, 1.0),
    a=((), (1.0,)),
    b=(0.5, 0.5),
    order=2,
    b_error=_difference((0.5, 0.5), (1.0, 0.0)),
    error_order=1,
)

RK4 = ButcherTableau(
    name="RK4",
    c=(0.0, 0.5, 0.5, 1.0),
    a=((), (0.5,), (0.0, 0.5), (0.0, 0.0, 1.0)),
    b=(1/6, 1/3, 1/3, 1/6),
    order=4,
)

_RKF45_B5 = (16/135, 0.0, 6656/12825, 28561/56430, -9/50, 2/55)
_RKF45_B4 = (25/216, 0.0, 1408/2565, 2197/4104, -1/5, 0.0)

RKF45 = ButcherTableau(
    name="Runge-Kutta-Fehlberg 4(5)",
    c=(0.0, 1/4, 3/8, 12/13, 1.0, 1/2),
    a=((),
       (1/4,),
       (3/32, 9/32),
       (1932/2197, -7200/2197, 7296/2197),
       (439/216, -8.0, 3680/513, -845/4104),
       (-8/27, 2.0, -3544/2565, 1859/4104, -11/40)),
    b=_RKF45_B5,
    order=5,
    b_error=_difference(_RKF45_B5, _RKF45_B4),
    error_order=4,
)

_CK_B5 = (37/378, 0.0, 250/621, 125/594, 0.0, 512/1771)
_CK_B4 = (2825/27648, 0.0, 18575/48384, 13525/55296, 277/14336, 1/4)

CASH_KARP = ButcherTableau(
    name="Cash-Karp 4(5)",
    c=(0.0, 1/5, 3/10, 3/5, 1.0, 7/8),
    a=((),
       (1/5,),
       (3/40, 9/40),
       (3/10, -9/10, 6/5),
       (-11/54, 5/2, -70/27, 35/27),
       (1631/55296, 175/512, 575/13824, 44275/110592, 253/4096)),
    b=_CK_B5,
    order=5,
    b_error=_difference(_CK_B5, _CK_B4),
    error_order=4,
)

TABLEAUS: Dict[PredictorChoice, ButcherTableau] = {
    PredictorChoice.EULER: EULER,
    PredictorChoice.HEUN_EULER: HEUN_EULER,
    PredictorChoice.RK4: RK4,
    PredictorChoice.RKF45: RKF45,
    PredictorChoice.CASH_KARP: CASH_KARP,
}


class Predictor:
    """Explicit Runge-Kutta predictor for the path ODE.

    Args:
        choice: Which formula to use
    """

    def __init__(self, choice: PredictorChoice = PredictorChoice.RK4):
        self.choice = PredictorChoice(choice)
        self.tableau = TABLEAUS[self.choice]
        self._stages: Optional[np.ndarray] = None
        self._work: Optional[np.ndarray] = None

    def __repr__(self) -> str:
        return f"Predictor({self.tableau.name})"

    def _buffers(self, n: int, dtype) -> Tuple[np.ndarray, np.ndarray]:
        """Stage slopes and work rows (stage point, sum, error, term), kept across calls."""
        if self._stages is None or self._stages.shape != (self.tableau.stages, n) \
                or self._stages.dtype != dtype:
            self._stages = np.zeros((self.tableau.stages, n), dtype=dtype)
            self._work = np.zeros((4, n), dtype=dtype)
        return self._stages, self._work

    @staticmethod
    def _weighted_sum(into: np.ndarray, term: np.ndarray, weights, stages: np.ndarray) -> np.ndarray:
        into.fill(0)
        for w, k in zip(weights, stages):
            if w != 0:
                np.multiply(k, w, out=term)
                into += term
        return into

    def predict(self,
                out: np.ndarray,
                homotopy: Homotopy,
                point: np.ndarray,
                t: complex,
                delta_t: complex,
                health: NumericalHealth,
                refresh: ConditionRefresh,
                rng: np.random.Generator,
                context: NumericContext = DOUBLE) -> SuccessCode:
        """Predict the point at time t + delta_t.

        Args:
            out: Buffer receiving the predicted point (overwritten only on success)
            homotopy: The homotopy being tracked
            point: Current point on the path
            t: Current time
            delta_t: Time step (may be complex)
            health: Metrics updated as side outputs
            refresh: Condition number refresh policy
            rng: Random generator for the condition estimate
            context: Numeric precision to compute in

        Returns:
            SUCCESS, or a matrix solve failure code
        """
        tableau = self.tableau
        dtype = context.complex_dtype
        n = point.shape[0]
        stages, work = self._buffers(n, dtype)
        stage_point, total, error, term = work

        for i in range(tableau.stages):
            if i == 0:
                stage_point[:] = point
            else:
                self._weighted_sum(total, term, tableau.a[i], stages)
                np.multiply(total, delta_t, out=stage_point)
                stage_point += point
            stage_time = t + tableau.c[i] * delta_t

            jac = np.asarray(homotopy.jacobian(stage_point, stage_time), dtype=dtype)
            dh_dt = np.asarray(homotopy.time_derivative(stage_point, stage_time), dtype=dtype)

            lu_and_piv, ok = lu_decompose(jac)
            if not ok:
                if i == 0:
                    return SuccessCode.MATRIX_SOLVE_FAILURE_FIRST_PART_OF_PREDICTION
                return SuccessCode.MATRIX_SOLVE_FAILURE

            if i == 0:
                health.jacobian_norm = float(np.linalg.norm(jac))
                if refresh.due():
                    probe = random_of_units(n, rng, dtype)
                    inverse_probe = lu_solve_factored(lu_and_piv, probe)
                    health.jacobian_inverse_norm = float(np.linalg.norm(inverse_probe))
                    health.condition_number_estimate = (
                        health.jacobian_norm * health.jacobian_inverse_norm)
                    refresh.record_computation()
                else:
                    refresh.record_reuse()

            stages[i] = lu_solve_factored(lu_and_piv, -dh_dt)
            if not np.all(np.isfinite(stages[i])):
                if i == 0:
                    return SuccessCode.MATRIX_SOLVE_FAILURE_FIRST_PART_OF_PREDICTION
                return SuccessCode.MATRIX_SOLVE_FAILURE

        self._weighted_sum(total, term, tableau.b, stages)
        np.multiply(total, delta_t, out=out)
        out += point

        if tableau.embedded:
            self._weighted_sum(error, term, tableau.b_error, stages)
            health.error_estimate = float(abs(delta_t) * np.linalg.norm(error))
            if delta_t != 0:
                health.size_proportion = (health.error_estimate
                                          / abs(delta_t) ** (tableau.error_order + 1))
            else:
                health.size_proportion = np.nan
        else:
            health.error_estimate = np.nan
            health.size_proportion = np.nan

        return SuccessCode.SUCCESS
