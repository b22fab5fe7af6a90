"""
Test the public API and import functionality of PathTracker.

This ensures that all public functions and classes are properly exposed
and work as documented.
"""

import sys

import pytest


class TestImports:
    """Test that all public API elements can be imported correctly."""

    def test_main_imports(self):
        """Test importing the tracking engine."""
        from pathtracker import (
            Tracker,
            TrackerConfig,
            TrackResult,
            SuccessCode,
            track_single_path,
            track_paths,
        )

        assert Tracker is not None
        assert TrackerConfig is not None
        assert TrackResult is not None
        assert SuccessCode is not None
        assert track_single_path is not None
        assert track_paths is not None

    def test_polynomial_imports(self):
        """Test polynomial building blocks."""
        from pathtracker import polyvar, Variable, Monomial, Polynomial, PolynomialSystem

        x = polyvar('x')
        assert isinstance(x, Variable)
        assert isinstance(PolynomialSystem([x - 1]).equations[0], Polynomial)
        assert Monomial is not None

    def test_all_exports_exist(self):
        """Everything listed in __all__ is importable."""
        import pathtracker

        for name in pathtracker.__all__:
            assert hasattr(pathtracker, name), f"{name} missing from pathtracker"

    def test_version(self):
        import pathtracker
        assert pathtracker.__version__ == "0.1.0"


class TestVisualizationImports:
    """Plotting is kept out of the main namespace."""

    def test_visualization_not_in_main_imports(self):
        import pathtracker
        assert not hasattr(pathtracker, 'plot_path')
        assert 'plot_paths' not in pathtracker.__all__

    def test_visualization_module_imports(self):
        pytest.importorskip("matplotlib")
        from pathtracker.visualization import plot_path, plot_paths, plot_step_sizes

        assert callable(plot_path)
        assert callable(plot_paths)
        assert callable(plot_step_sizes)
        assert 'pathtracker.visualization' in sys.modules


class TestDocumentedUsage:
    """The usage shown in the package docstring works."""

    def test_basic_workflow(self):
        """Build a homotopy, track its paths, read the results."""
        import numpy as np
        from pathtracker import (
            polyvar, PolynomialSystem, StraightLineHomotopy, track_paths, SuccessCode,
        )

        x = polyvar('x')
        start = PolynomialSystem([x**2 - 1])
        target = PolynomialSystem([x**2 - 4])
        homotopy = StraightLineHomotopy(start, target)

        results = track_paths(homotopy, [[1.0], [-1.0]])

        assert all(r.code is SuccessCode.SUCCESS for r in results)
        assert np.allclose(sorted(r.solution[0].real for r in results), [-2.0, 2.0], atol=1e-4)
