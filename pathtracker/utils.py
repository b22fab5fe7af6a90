"""
Utility functions for PathTracker.

This module provides the numeric substrate shared by the predictor and the
corrector: Jacobian evaluation and LU-based linear solves that
report failure instead of raising.
"""

import warnings
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve

from pathtracker.polynomial import Variable


def evaluate_jacobian_polynomials(jac_polys: List[List[Any]],
                                  var_dict: Dict[Variable, complex],
                                  dtype=complex) -> np.ndarray:
    """Evaluate a Jacobian represented as polynomials at a point.

    Args:
        jac_polys: List of rows, each a list of Polynomial
        var_dict: Mapping variable -> value
        dtype: Complex dtype of the result

    Returns:
        Numeric Jacobian matrix.
    """
    rows: List[List[complex]] = []
    for row in jac_polys:
        rows.append([poly.evaluate(var_dict) for poly in row])
    return np.array(rows, dtype=dtype)


def lu_decompose(jac: np.ndarray) -> Tuple[Optional[Tuple[np.ndarray, np.ndarray]], bool]:
    """LU-factor a square matrix with partial pivoting.

    The factorization is rejected when the matrix holds non-finite entries,
    when a pivot is exactly zero, or when the smallest pivot is below
    n * eps relative to the largest one (numerically singular).

    Args:
        jac: Square matrix

    Returns:
        Tuple of (lu_and_pivots or None, success flag)
    """
    jac = np.asarray(jac)
    if jac.ndim != 2 or jac.shape[0] != jac.shape[1]:
        raise ValueError(f"Expected a square matrix, got shape {jac.shape}")
    if jac.shape[0] == 0 or not np.all(np.isfinite(jac)):
        return None, False

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", LinAlgWarning)
        lu, piv = lu_factor(jac, check_finite=False)

    pivots = np.abs(np.diag(lu))
    largest = pivots.max()
    eps = np.finfo(lu.dtype).eps
    if largest == 0 or pivots.min() <= jac.shape[0] * eps * largest:
        return None, False
    return (lu, piv), True


def lu_solve_factored(lu_and_piv: Tuple[np.ndarray, np.ndarray],
                      rhs: np.ndarray) -> np.ndarray:
    """Solve with an LU factorization produced by lu_decompose."""
    return lu_solve(lu_and_piv, rhs, check_finite=False)


def solve_linear_system(jac: np.ndarray, rhs: np.ndarray) -> Tuple[Optional[np.ndarray], bool]:
    """Solve J x = rhs, reporting singular or ill-conditioned matrices.

    Args:
        jac: Square matrix
        rhs: Right-hand side vector

    Returns:
        Tuple of (solution or None, success flag)
    """
    lu_and_piv, ok = lu_decompose(jac)
    if not ok:
        return None, False
    solution = lu_solve_factored(lu_and_piv, rhs)
    if not np.all(np.isfinite(solution)):
        return None, False
    return solution, True


def random_of_units(n: int, rng: np.random.Generator, dtype=complex) -> np.ndarray:
    """Random complex vector whose entries lie on the unit circle."""
    angles = rng.uniform(0, 2 * np.pi, size=n)
    return np.exp(1j * angles).astype(dtype)
