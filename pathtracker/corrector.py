"""
Corrector module for PathTracker.

Newton's method at a fixed time pulls a predicted point back onto the path.
"""

from typing import Optional, Tuple

import numpy as np

from pathtracker.codes import SuccessCode
from pathtracker.condition import NumericalHealth
from pathtracker.homotopy import Homotopy
from pathtracker.precision import DOUBLE, NumericContext
from pathtracker.utils import lu_decompose, lu_solve_factored


def newton_correct(out: np.ndarray,
                   homotopy: Homotopy,
                   point: np.ndarray,
                   t: complex,
                   tolerance: float,
                   min_iterations: int = 1,
                   max_iterations: int = 2,
                   divergence_bound: float = np.inf,
                   health: Optional[NumericalHealth] = None,
                   context: NumericContext = DOUBLE) -> Tuple[SuccessCode, int]:
    """Bounded Newton iteration for H(x, t) = 0 at fixed t.

    The iteration converges once the update norm drops below `tolerance`,
    but not before `min_iterations` updates have been applied. An iterate
    whose norm exceeds `divergence_bound` ends the correction at once with
    GOING_TO_INFINITY.

    Args:
        out: Buffer receiving the last iterate, whatever the outcome
        homotopy: The homotopy being tracked
        point: Starting point
        t: Time at which to correct
        tolerance: Convergence tolerance on the update norm
        min_iterations: Minimum number of Newton updates
        max_iterations: Maximum number of Newton updates
        divergence_bound: Norm above which the path is declared divergent
        health: Metrics receiving the last update norm and iteration count
        context: Numeric precision to compute in

    Returns:
        Tuple of (code, number of Newton updates applied)
    """
    dtype = context.complex_dtype
    out[:] = point

    code = SuccessCode.FAILED_TO_CONVERGE
    iterations = 0
    for i in range(max_iterations):
        if np.linalg.norm(out) > divergence_bound:
            code = SuccessCode.GOING_TO_INFINITY
            break

        f_val = np.asarray(homotopy.evaluate(out, t), dtype=dtype)
        jac = np.asarray(homotopy.jacobian(out, t), dtype=dtype)

        lu_and_piv, ok = lu_decompose(jac)
        if not ok:
            code = SuccessCode.MATRIX_SOLVE_FAILURE
            break

        delta = lu_solve_factored(lu_and_piv, -f_val)
        if not np.all(np.isfinite(delta)):
            code = SuccessCode.MATRIX_SOLVE_FAILURE
            break

        out += delta
        iterations = i + 1
        norm_delta = float(np.linalg.norm(delta))
        if health is not None:
            health.correction_delta_norm = norm_delta

        if np.linalg.norm(out) > divergence_bound:
            code = SuccessCode.GOING_TO_INFINITY
            break
        if norm_delta < tolerance and iterations >= min_iterations:
            code = SuccessCode.SUCCESS
            break

    if health is not None:
        health.newton_iterations = iterations
    return code, iterations
