"""
PathTracker: adaptive predictor-corrector tracking of homotopy solution paths.

Given a homotopy H(x, t) and a solution of H(x, t0) = 0, PathTracker follows
the solution curve to t1 with a step-size controlled predictor-corrector
loop, and reports the outcome of every path with a SuccessCode.
"""

__version__ = "0.1.0"

from pathtracker.codes import SuccessCode

from pathtracker.config import (
    PredictorChoice,
    SteppingConfig,
    NewtonConfig,
    TrackerConfig,
)

from pathtracker.polynomial import (
    polyvar,
    make_system,
    Variable,
    Monomial,
    Polynomial,
    PolynomialSystem,
    NonPolynomialError,
)

from pathtracker.precision import NumericContext, SINGLE, DOUBLE, get_context
from pathtracker.homotopy import Homotopy, StraightLineHomotopy, FunctionHomotopy
from pathtracker.condition import ConditionRefresh, NumericalHealth
from pathtracker.stepsize import StepSizeController
from pathtracker.predictor import Predictor
from pathtracker.corrector import newton_correct
from pathtracker.observers import Observer, EventRecorder, PathAccumulator, LoggingObserver
from pathtracker.tracker import Tracker, TrackerState, TrackResult
from pathtracker.tracking import track_single_path, track_paths, summarize_results

# Plotting lives in pathtracker.visualization and is not imported here, to
# keep matplotlib out of the import path of the tracking engine.

__all__ = [
    "SuccessCode",
    "PredictorChoice",
    "SteppingConfig",
    "NewtonConfig",
    "TrackerConfig",
    "polyvar",
    "make_system",
    "Variable",
    "Monomial",
    "Polynomial",
    "PolynomialSystem",
    "NonPolynomialError",
    "NumericContext",
    "SINGLE",
    "DOUBLE",
    "get_context",
    "Homotopy",
    "StraightLineHomotopy",
    "FunctionHomotopy",
    "ConditionRefresh",
    "NumericalHealth",
    "StepSizeController",
    "Predictor",
    "newton_correct",
    "Observer",
    "EventRecorder",
    "PathAccumulator",
    "LoggingObserver",
    "Tracker",
    "TrackerState",
    "TrackResult",
    "track_single_path",
    "track_paths",
    "summarize_results",
]
