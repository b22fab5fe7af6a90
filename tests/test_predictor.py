"""
Tests for the Runge-Kutta predictors.
"""

import pytest
import numpy as np

from pathtracker import (
    ConditionRefresh,
    FunctionHomotopy,
    NumericalHealth,
    Predictor,
    PredictorChoice,
    SuccessCode,
)
from pathtracker.predictor import TABLEAUS


def exponential_path():
    """H(x, t) = x - exp(t), whose path is x(t) = exp(t)."""
    return FunctionHomotopy(lambda x, t: x - np.exp(t),
                            lambda x, t: np.eye(1),
                            lambda x, t: -np.exp(t) * np.ones(1),
                            num_variables=1)


def run_prediction(choice, homotopy, point, t=0.0, delta_t=0.1, refresh=None):
    predictor = Predictor(choice)
    out = np.zeros(len(point), dtype=complex)
    health = NumericalHealth()
    refresh = refresh if refresh is not None else ConditionRefresh(1)
    code = predictor.predict(out, homotopy, np.array(point, dtype=complex), t, delta_t,
                             health, refresh, np.random.default_rng(0))
    return code, out, health


@pytest.mark.parametrize("choice", list(PredictorChoice))
def test_tableaus_are_consistent(choice):
    tableau = TABLEAUS[choice]
    assert np.isclose(sum(tableau.b), 1.0)
    for c_i, row in zip(tableau.c, tableau.a):
        assert np.isclose(sum(row), c_i)
    if tableau.embedded:
        assert np.isclose(sum(tableau.b_error), 0.0)


def test_higher_order_predictors_are_more_accurate():
    exact = np.exp(0.1)
    errors = {}
    for choice in PredictorChoice:
        code, out, _ = run_prediction(choice, exponential_path(), [1.0])
        assert code is SuccessCode.SUCCESS
        errors[choice] = abs(out[0] - exact)

    assert errors[PredictorChoice.HEUN_EULER] < errors[PredictorChoice.EULER]
    assert errors[PredictorChoice.RK4] < errors[PredictorChoice.HEUN_EULER]
    assert errors[PredictorChoice.RKF45] < 1e-7
    assert errors[PredictorChoice.CASH_KARP] < 1e-7
    # Euler is exactly x + dt * exp(0)
    assert np.isclose(errors[PredictorChoice.EULER], exact - 1.1)


def test_embedded_error_estimates():
    _, _, euler_health = run_prediction(PredictorChoice.EULER, exponential_path(), [1.0])
    assert np.isnan(euler_health.error_estimate)
    assert np.isnan(euler_health.size_proportion)

    _, _, heun_health = run_prediction(PredictorChoice.HEUN_EULER, exponential_path(), [1.0])
    euler_error = np.exp(0.1) - 1.1
    assert 0.5 * euler_error < heun_health.error_estimate < 2 * euler_error
    assert np.isclose(heun_health.size_proportion, heun_health.error_estimate / 0.1**2)

    _, _, rkf_health = run_prediction(PredictorChoice.RKF45, exponential_path(), [1.0])
    assert 0 < rkf_health.error_estimate < 1e-6


def test_linear_path_is_predicted_exactly():
    # H(x, t) = x - (a + t b)
    a = np.array([1.0, -2.0 + 1j])
    b = np.array([0.5j, 3.0])
    h = FunctionHomotopy(lambda x, t: x - (a + t * b),
                         lambda x, t: np.eye(2),
                         lambda x, t: -b,
                         num_variables=2)
    code, out, _ = run_prediction(PredictorChoice.EULER, h, a, t=0.0, delta_t=0.25)
    assert code is SuccessCode.SUCCESS
    assert np.allclose(out, a + 0.25 * b)


def test_condition_number_estimate():
    # J = diag(1, 1e-3): Frobenius norm ~1, inverse applied to a vector of units ~1000
    h = FunctionHomotopy(lambda x, t: np.zeros(2),
                         lambda x, t: np.diag([1.0, 1e-3]),
                         lambda x, t: np.zeros(2),
                         num_variables=2)
    code, _, health = run_prediction(PredictorChoice.EULER, h, [0.0, 0.0])
    assert code is SuccessCode.SUCCESS
    assert np.isclose(health.jacobian_norm, np.sqrt(1 + 1e-6))
    assert np.isclose(health.jacobian_inverse_norm, np.sqrt(1 + 1e6))
    assert np.isclose(health.condition_number_estimate,
                      health.jacobian_norm * health.jacobian_inverse_norm)


def test_condition_number_reused_when_not_due():
    h = exponential_path()
    refresh = ConditionRefresh(frequency=3)
    predictor = Predictor(PredictorChoice.RK4)
    health = NumericalHealth()
    out = np.zeros(1, dtype=complex)
    rng = np.random.default_rng(0)

    computed = []
    for _ in range(7):
        before = refresh.num_computations
        predictor.predict(out, h, np.ones(1, dtype=complex), 0.0, 0.1, health, refresh, rng)
        computed.append(refresh.num_computations > before)

    assert computed == [True, False, False, True, False, False, True]


def test_singular_jacobian_fails_first_stage_without_touching_output():
    h = FunctionHomotopy(lambda x, t: x,
                         lambda x, t: np.zeros((2, 2)),
                         lambda x, t: np.ones(2),
                         num_variables=2)
    predictor = Predictor(PredictorChoice.RK4)
    out = np.full(2, 7.0 + 0j)
    refresh = ConditionRefresh(1)
    code = predictor.predict(out, h, np.zeros(2, dtype=complex), 0.0, 0.1,
                             NumericalHealth(), refresh, np.random.default_rng(0))

    assert code is SuccessCode.MATRIX_SOLVE_FAILURE_FIRST_PART_OF_PREDICTION
    assert np.all(out == 7.0)
    assert refresh.num_computations == 0


def test_singular_jacobian_in_later_stage():
    # the Jacobian t - 0.05 vanishes at the midpoint stage of a step from 0 to 0.1
    h = FunctionHomotopy(lambda x, t: x,
                         lambda x, t: np.array([[t - 0.05]]),
                         lambda x, t: np.ones(1),
                         num_variables=1)
    code, _, _ = run_prediction(PredictorChoice.RK4, h, [0.0], t=0.0, delta_t=0.1)
    assert code is SuccessCode.MATRIX_SOLVE_FAILURE


def test_predictor_accepts_strings():
    assert Predictor("rkf45").choice is PredictorChoice.RKF45
    with pytest.raises(ValueError):
        Predictor("midpoint")


def test_scratch_buffers_are_reused_between_calls():
    predictor = Predictor(PredictorChoice.RKF45)
    h = exponential_path()
    point = np.ones(1, dtype=complex)
    out = np.zeros(1, dtype=complex)
    refresh = ConditionRefresh(1)
    rng = np.random.default_rng(0)

    predictor.predict(out, h, point, 0.0, 0.1, NumericalHealth(), refresh, rng)
    first = out.copy()
    stages, work = predictor._buffers(1, np.complex128)

    predictor.predict(out, h, point, 0.0, 0.1, NumericalHealth(), refresh, rng)
    again_stages, again_work = predictor._buffers(1, np.complex128)

    assert again_stages is stages
    assert again_work is work
    assert np.array_equal(out, first)
    assert np.array_equal(point, [1.0])

    single_stages, _ = predictor._buffers(1, np.complex64)
    assert single_stages.dtype == np.complex64
    assert single_stages is not stages
