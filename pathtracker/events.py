"""
Tracking events for PathTracker.

A tracker pushes one of these values to its observers at every point of
interest of a path trace. Events are immutable snapshots; points they carry
are copies.
"""

from dataclasses import dataclass

import numpy as np

from pathtracker.codes import SuccessCode


@dataclass(frozen=True)
class TrackingEvent:
    """Base class of all tracking events.

    Attributes:
        path_index: Index of the path in a batch (None for a single path)
        time: Current time of the path when the event was emitted
        step_size: Current step size
        num_successful_steps: Successful steps taken so far
        num_failed_steps: Failed steps taken so far
    """
    path_index: object
    time: complex
    step_size: float
    num_successful_steps: int
    num_failed_steps: int


@dataclass(frozen=True)
class Initializing(TrackingEvent):
    start_time: complex
    end_time: complex
    start_point: np.ndarray


@dataclass(frozen=True)
class NewStep(TrackingEvent):
    delta_t: complex


@dataclass(frozen=True)
class SuccessfulPredict(TrackingEvent):
    predicted_point: np.ndarray


@dataclass(frozen=True)
class SuccessfulCorrect(TrackingEvent):
    corrected_point: np.ndarray
    newton_iterations: int


@dataclass(frozen=True)
class PredictorMatrixSolveFailure(TrackingEvent):
    code: SuccessCode


@dataclass(frozen=True)
class CorrectorFailure(TrackingEvent):
    code: SuccessCode


@dataclass(frozen=True)
class SuccessfulStep(TrackingEvent):
    point: np.ndarray
    condition_number_estimate: float


@dataclass(frozen=True)
class FailedStep(TrackingEvent):
    code: SuccessCode


@dataclass(frozen=True)
class StepSizeIncreased(TrackingEvent):
    previous_step_size: float


@dataclass(frozen=True)
class InfinitePathTruncation(TrackingEvent):
    point_norm: float


@dataclass(frozen=True)
class TrackingEnded(TrackingEvent):
    code: SuccessCode
