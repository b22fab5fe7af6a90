"""
End-to-end tests for PathTracker.

These tests track whole batches of paths of polynomial homotopies and check
the endpoints against the known solutions of the target systems.
"""

import itertools

import pytest
import numpy as np

from pathtracker import (
    PolynomialSystem,
    StraightLineHomotopy,
    SuccessCode,
    TrackerConfig,
    polyvar,
    summarize_results,
    track_paths,
    track_single_path,
)
from pathtracker.tracking import endpoints


ROBUST = TrackerConfig.from_dict({
    'initial_step_size': 0.05,
    'max_step_size': 0.05,
    'tracking_tolerance': 1e-8,
    'max_newton_iterations': 3,
})


def total_degree_start(variables, degrees):
    """Start system x_i^d_i - 1 and all of its solutions."""
    start = PolynomialSystem([v**d - 1 for v, d in zip(variables, degrees)])
    roots = [np.exp(2j * np.pi * np.arange(d) / d) for d in degrees]
    return start, [np.array(p) for p in itertools.product(*roots)]


@pytest.fixture
def circle_parabola():
    x, y = polyvar('x', 'y')
    target = PolynomialSystem([x**2 + y**2 - 1, x**2 - y])
    start, start_points = total_degree_start([x, y], [2, 2])
    return StraightLineHomotopy(start, target, [x, y]), start_points, target, (x, y)


class TestCircleParabola:
    """Track the four paths of the circle-parabola intersection."""

    def test_all_paths_reach_solutions(self, circle_parabola):
        """Every endpoint satisfies both target equations."""
        homotopy, start_points, target, (x, y) = circle_parabola
        results = track_paths(homotopy, start_points, config=ROBUST)

        assert len(results) == 4
        assert summarize_results(results) == {SuccessCode.SUCCESS: 4}
        for result in results:
            residual = target.evaluate({x: result.solution[0], y: result.solution[1]})
            assert np.allclose(residual, 0, atol=1e-6)

    def test_endpoints_are_distinct(self, circle_parabola):
        """Distinct start points lead to the four distinct solutions."""
        homotopy, start_points, _, _ = circle_parabola
        ends = endpoints(track_paths(homotopy, start_points, config=ROBUST))

        assert ends.shape == (4, 2)
        for i, j in itertools.combinations(range(4), 2):
            assert np.linalg.norm(ends[i] - ends[j]) > 1e-3

        # y^2 + y - 1 = 0 on the intersection
        y_values = np.sort_complex(np.round(ends[:, 1], 6))
        expected = np.sort_complex(np.round(
            np.array([(-1 + np.sqrt(5)) / 2] * 2 + [(-1 - np.sqrt(5)) / 2] * 2, dtype=complex), 6))
        assert np.allclose(y_values, expected, atol=1e-5)


class TestBatchTracking:
    """Batch driver behavior independent of the system being tracked."""

    def test_threads_give_the_same_results(self, circle_parabola):
        """Tracking with a thread pool matches sequential tracking, in input order."""
        homotopy, start_points, _, _ = circle_parabola
        sequential = track_paths(homotopy, start_points, config=ROBUST)
        threaded = track_paths(homotopy, start_points, config=ROBUST, n_workers=2)

        for i, (a, b) in enumerate(zip(sequential, threaded)):
            assert a.path_index == i
            assert b.path_index == i
            assert a.code is b.code
            assert np.array_equal(a.solution, b.solution)
            assert a.num_successful_steps == b.num_successful_steps

    def test_store_paths(self, circle_parabola):
        """Stored paths start at the start point and end at the solution."""
        homotopy, start_points, _, _ = circle_parabola
        results = track_paths(homotopy, start_points[:2], config=ROBUST, store_paths=True)

        for start, result in zip(start_points, results):
            assert result.path_points is not None
            assert len(result.path_points) == result.num_successful_steps + 1
            t0, p0 = result.path_points[0]
            t1, p1 = result.path_points[-1]
            assert t0 == 0.0
            assert t1 == 1.0
            assert np.allclose(p0, start)
            assert np.array_equal(p1, result.solution)

    def test_paths_not_stored_by_default(self, circle_parabola):
        homotopy, start_points, _, _ = circle_parabola
        result = track_single_path(homotopy, start_points[0], config=ROBUST)
        assert result.path_points is None

    def test_invalid_worker_count(self, circle_parabola):
        homotopy, start_points, _, _ = circle_parabola
        with pytest.raises(ValueError):
            track_paths(homotopy, start_points, n_workers=0)

    def test_verbose_output(self, circle_parabola, capsys):
        """Verbose tracking prints a summary line."""
        homotopy, start_points, _, _ = circle_parabola
        track_paths(homotopy, start_points, config=ROBUST, verbose=True)

        out = capsys.readouterr().out
        assert "Tracking 4 paths" in out
        assert "4/4 successful paths" in out

    def test_failed_paths_are_reported(self):
        """A diverging path is summarized, and skipped by endpoints()."""
        x = polyvar('x')
        # x = 1 solves H for every t; the other root grows like 1 / (1 - t)
        start = PolynomialSystem([x**2 - 1])
        target = PolynomialSystem([x - 1])
        homotopy = StraightLineHomotopy(start, target, [x])
        config = ROBUST.with_options(path_truncation_threshold=10.0)
        results = track_paths(homotopy, [[1.0], [-1.0]], config=config)

        summary = summarize_results(results)
        assert summary == {SuccessCode.SUCCESS: 1, SuccessCode.GOING_TO_INFINITY: 1}
        assert results[1].code is SuccessCode.GOING_TO_INFINITY
        assert len(endpoints(results)) == 1
        assert len(endpoints(results, successful_only=False)) == 2
        assert np.allclose(endpoints(results)[0], [1.0], atol=1e-6)
