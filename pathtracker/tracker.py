"""
Path tracker module for PathTracker.

The Tracker follows one solution path of a homotopy from a start time to an
end time with an adaptive predictor-corrector loop. It owns all mutable state
of that path (time, point, step size, counters, scratch buffers), so separate
paths can be tracked concurrently by separate Tracker instances.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

import numpy as np

from pathtracker import events as ev
from pathtracker.codes import SuccessCode
from pathtracker.condition import ConditionRefresh, NumericalHealth
from pathtracker.config import TrackerConfig
from pathtracker.corrector import newton_correct
from pathtracker.homotopy import Homotopy
from pathtracker.precision import DOUBLE, NumericContext
from pathtracker.predictor import Predictor
from pathtracker.stepsize import StepSizeController

logger = logging.getLogger(__name__)


class TrackerState(Enum):
    """Lifecycle of a Tracker over one path."""
    UNINITIALIZED = 0
    INITIALIZING = 1
    ITERATING = 2
    SUCCEEDED = 3
    FAILED = 4


@dataclass
class TrackResult:
    """Outcome of tracking one path.

    Attributes:
        code: Final SuccessCode of the trace
        solution: Point at the end time on success, else the last accepted point
        time: Time reached (the end time on success)
        step_size: Step size when tracking stopped
        num_successful_steps: Number of accepted steps
        num_failed_steps: Number of rejected steps
        num_consecutive_successful_steps: Accepted steps since the last rejection
        num_consecutive_failed_steps: Rejected steps since the last acceptance
        num_newton_iterations: Total Newton updates over the path
        num_condition_number_computations: Fresh condition number estimates
        health: Metrics of the last iteration
        path_points: (time, point) pairs when the path was stored
        path_index: Index of the path in a batch
    """
    code: SuccessCode
    solution: np.ndarray
    time: complex
    step_size: float
    num_successful_steps: int = 0
    num_failed_steps: int = 0
    num_consecutive_successful_steps: int = 0
    num_consecutive_failed_steps: int = 0
    num_newton_iterations: int = 0
    num_condition_number_computations: int = 0
    health: NumericalHealth = field(default_factory=NumericalHealth)
    path_points: Optional[List[Tuple[complex, np.ndarray]]] = None
    path_index: Any = None

    @property
    def success(self) -> bool:
        return self.code is SuccessCode.SUCCESS

    def __repr__(self) -> str:
        return (f"TrackResult({self.code.name}, t={self.time}, "
                f"steps={self.num_successful_steps}, failed={self.num_failed_steps})")


class Tracker:
    """Adaptive predictor-corrector tracker for a single path at a time.

    Args:
        homotopy: The homotopy to track (shared read-only)
        config: Tracker configuration (default: TrackerConfig())
        observers: Objects with an `observe(event)` method
        context: Numeric precision to compute in
        path_index: Label attached to emitted events
    """

    def __init__(self,
                 homotopy: Homotopy,
                 config: Optional[TrackerConfig] = None,
                 observers: Optional[List[Any]] = None,
                 context: NumericContext = DOUBLE,
                 path_index: Any = None):
        self.homotopy = homotopy
        self.config = config if config is not None else TrackerConfig()
        self.context = context
        self.path_index = path_index
        self._observers: List[Any] = list(observers) if observers else []

        self.predictor = Predictor(self.config.predictor)
        self.step_control = StepSizeController(self.config.stepping)
        self.refresh = ConditionRefresh(self.config.condition_number_refresh_frequency)
        self.health = NumericalHealth()
        self._rng = np.random.default_rng(self.config.random_seed)

        self.state = TrackerState.UNINITIALIZED
        n = homotopy.num_variables()
        self._current_time: complex = 0j
        self._end_time: complex = 0j
        self._delta_t: complex = 0j
        self._final_step = False
        self._current_point = context.zeros(n)
        self._predicted_point = context.zeros(n)
        self._tentative_point = context.zeros(n)

        self._cancel_requested = False
        self._deadline: Optional[float] = None
        self._reset_counter_values()

    # observers

    def add_observer(self, observer: Any) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: Any) -> None:
        self._observers.remove(observer)

    def _notify(self, event_type, **extra) -> None:
        if not self._observers:
            return
        event = event_type(path_index=self.path_index,
                           time=self._current_time,
                           step_size=self.step_control.current_step_size,
                           num_successful_steps=self.num_successful_steps,
                           num_failed_steps=self.num_failed_steps,
                           **extra)
        for observer in self._observers:
            observer.observe(event)

    # read-only views of the path state

    @property
    def current_time(self) -> complex:
        return self._current_time

    @property
    def end_time(self) -> complex:
        return self._end_time

    @property
    def current_point(self) -> np.ndarray:
        return self._current_point.copy()

    @property
    def current_step_size(self) -> float:
        return self.step_control.current_step_size

    @property
    def delta_t(self) -> complex:
        return self._delta_t

    def num_variables(self) -> int:
        return self.homotopy.num_variables()

    # lifecycle

    def _reset_counter_values(self) -> None:
        self.num_successful_steps = 0
        self.num_failed_steps = 0
        self.num_consecutive_successful_steps = 0
        self.num_consecutive_failed_steps = 0
        self.num_successful_steps_since_step_size_increase = 0
        self.num_newton_iterations = 0

    def reset_counters(self) -> None:
        """Zero the step counters; the refresh counter restarts at its frequency."""
        self._reset_counter_values()
        self.refresh.reset()

    def request_cancel(self) -> None:
        """Ask the tracker to stop before its next iteration."""
        self._cancel_requested = True

    def initialize(self, start_time: complex, end_time: complex, start_point) -> SuccessCode:
        """Set up the tracker for a fresh path.

        Args:
            start_time: Time at which to start tracking
            end_time: Time to which to track
            start_point: Point on the path at the start time

        Returns:
            SUCCESS

        Raises:
            ValueError: If the start point does not match the number of variables
        """
        n = self.num_variables()
        start_point = self.context.asarray(start_point).reshape(-1)
        if start_point.shape[0] != n:
            raise ValueError(f"Start point has {start_point.shape[0]} coordinates, "
                             f"but the homotopy has {n} variables")
        start_time, end_time = complex(start_time), complex(end_time)
        if not (np.isfinite(start_time) and np.isfinite(end_time)):
            raise ValueError("Start and end times must be finite")

        self.state = TrackerState.INITIALIZING
        self._current_time = start_time
        self._end_time = end_time
        self._delta_t = 0j
        self._final_step = False
        self._cancel_requested = False

        if self.config.reinitialize_step_size:
            self.step_control.commit(
                self.step_control.fresh_step_size(abs(start_time - end_time)))

        self.reset_counters()
        self.health.reset()
        self._rng = np.random.default_rng(self.config.random_seed)

        if self._current_point.shape != (n,) or self._current_point.dtype != self.context.complex_dtype:
            self._current_point = self.context.zeros(n)
            self._predicted_point = self.context.zeros(n)
            self._tentative_point = self.context.zeros(n)
        self._current_point[:] = start_point

        self._notify(ev.Initializing, start_time=start_time, end_time=end_time,
                     start_point=start_point.copy())
        self.state = TrackerState.ITERATING
        return SuccessCode.SUCCESS

    def pre_iteration_check(self) -> SuccessCode:
        """Ensure the path may take another step.

        Returns:
            SUCCESS if tracking may continue, otherwise the terminal code
        """
        if self._cancel_requested or (
                self._deadline is not None and time.monotonic() > self._deadline):
            return SuccessCode.CANCELLED
        if self.num_successful_steps >= self.config.stepping.max_num_steps:
            return SuccessCode.MAX_NUM_STEPS_TAKEN
        if self.step_control.below_minimum():
            return SuccessCode.MIN_STEP_SIZE_REACHED
        return SuccessCode.SUCCESS

    def compute_delta_t(self) -> complex:
        """Time step toward the end time, no longer than the current step size."""
        remaining = self._end_time - self._current_time
        step_size = self.step_control.current_step_size
        # absorb round-off so the last step lands exactly on the end time
        if abs(remaining) <= step_size * (1 + 64 * np.finfo(float).eps):
            self._delta_t = remaining
            self._final_step = True
        else:
            self._delta_t = step_size * remaining / abs(remaining)
            self._final_step = False
        return self._delta_t

    def iterate(self) -> SuccessCode:
        """Run one predict-correct cycle.

        The current point is replaced only when the corrector succeeds. On
        a predictor or corrector failure the step size is shrunk for the
        next attempt; GOING_TO_INFINITY from the corrector is returned as is.

        Returns:
            SUCCESS, or the failure code of the predictor or corrector
        """
        if self.state is not TrackerState.ITERATING:
            raise RuntimeError("Tracker must be initialized before iterating")

        self._notify(ev.NewStep, delta_t=self._delta_t)
        t = self.context.scalar(self._current_time)
        delta_t = self.context.scalar(self._delta_t)

        predictor_code = self.predictor.predict(
            self._predicted_point, self.homotopy, self._current_point, t, delta_t,
            self.health, self.refresh, self._rng, self.context)

        if predictor_code is not SuccessCode.SUCCESS:
            self._notify(ev.PredictorMatrixSolveFailure, code=predictor_code)
            self.step_control.commit(
                self.step_control.shrink(self.step_control.current_step_size))
            return predictor_code

        self._notify(ev.SuccessfulPredict, predicted_point=self._predicted_point.copy())

        tentative_time = t + delta_t
        corrector_code, iterations = newton_correct(
            self._tentative_point, self.homotopy, self._predicted_point, tentative_time,
            self.config.tracking_tolerance,
            min_iterations=self.config.newton.min_newton_iterations,
            max_iterations=self.config.newton.max_newton_iterations,
            divergence_bound=self._divergence_bound(),
            health=self.health,
            context=self.context)
        self.num_newton_iterations += iterations

        if corrector_code is SuccessCode.GOING_TO_INFINITY:
            # no finite correction exists
            return corrector_code
        if corrector_code is not SuccessCode.SUCCESS:
            self._notify(ev.CorrectorFailure, code=corrector_code)
            self.step_control.commit(
                self.step_control.shrink(self.step_control.current_step_size))
            return corrector_code

        self._notify(ev.SuccessfulCorrect, corrected_point=self._tentative_point.copy(),
                     newton_iterations=iterations)
        self._current_point[:] = self._tentative_point
        return SuccessCode.SUCCESS

    def _divergence_bound(self) -> float:
        if self.config.infinite_path_truncation:
            return self.config.path_truncation_threshold
        return np.inf

    def increment_counters_success(self) -> None:
        """Advance time and counters after an accepted step, growing the step when earned."""
        self._current_time = self._end_time if self._final_step \
            else self._current_time + self._delta_t
        self.num_successful_steps += 1
        self.num_consecutive_successful_steps += 1
        self.num_consecutive_failed_steps = 0
        self.num_successful_steps_since_step_size_increase += 1
        self._notify(ev.SuccessfulStep, point=self._current_point.copy(),
                     condition_number_estimate=self.health.condition_number_estimate)

        stepping = self.config.stepping
        if (self.num_successful_steps_since_step_size_increase
                >= stepping.consecutive_successful_steps_before_step_size_increase):
            previous = self.step_control.current_step_size
            self.step_control.commit(self.step_control.grow(previous))
            self.num_successful_steps_since_step_size_increase = 0
            if self.step_control.current_step_size > previous:
                self._notify(ev.StepSizeIncreased, previous_step_size=previous)

    def increment_counters_fail(self, code: SuccessCode) -> None:
        """Update counters after a rejected step; accumulated growth credit is lost."""
        self.num_failed_steps += 1
        self.num_consecutive_failed_steps += 1
        self.num_consecutive_successful_steps = 0
        self.num_successful_steps_since_step_size_increase = 0
        self._notify(ev.FailedStep, code=code)

    def check_going_to_infinity(self) -> SuccessCode:
        """GOING_TO_INFINITY if the current point exceeds the truncation threshold."""
        if not self.config.infinite_path_truncation:
            return SuccessCode.SUCCESS
        if np.linalg.norm(self._current_point) > self.config.path_truncation_threshold:
            return SuccessCode.GOING_TO_INFINITY
        return SuccessCode.SUCCESS

    def on_infinite_truncation(self, point: Optional[np.ndarray] = None) -> None:
        point = self._current_point if point is None else point
        self._notify(ev.InfinitePathTruncation, point_norm=float(np.linalg.norm(point)))

    def finalize_solution(self, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Copy the current point into `out` (allocated when not given)."""
        n = self.num_variables()
        if out is None:
            out = self.context.zeros(n)
        for ii in range(n):
            out[ii] = self._current_point[ii]
        return out

    def _finish(self, code: SuccessCode) -> TrackResult:
        self.state = TrackerState.SUCCEEDED if code is SuccessCode.SUCCESS else TrackerState.FAILED
        self._notify(ev.TrackingEnded, code=code)
        return TrackResult(
            code=code,
            solution=self.finalize_solution(),
            time=self._current_time,
            step_size=self.step_control.current_step_size,
            num_successful_steps=self.num_successful_steps,
            num_failed_steps=self.num_failed_steps,
            num_consecutive_successful_steps=self.num_consecutive_successful_steps,
            num_consecutive_failed_steps=self.num_consecutive_failed_steps,
            num_newton_iterations=self.num_newton_iterations,
            num_condition_number_computations=self.refresh.num_computations,
            health=self.health.snapshot(),
            path_index=self.path_index,
        )

    def track_path(self,
                   start_point,
                   start_time: complex = 0.0,
                   end_time: complex = 1.0,
                   timeout: Optional[float] = None) -> TrackResult:
        """Track a path from start_time to end_time.

        Args:
            start_point: Point on the path at the start time
            start_time: Time at which to start
            end_time: Time to reach
            timeout: Wall-clock seconds after which the trace is cancelled

        Returns:
            TrackResult of the trace
        """
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self.initialize(start_time, end_time, start_point)

        while self._current_time != self._end_time:
            code = self.pre_iteration_check()
            if code is not SuccessCode.SUCCESS:
                return self._finish(code)

            self.compute_delta_t()
            step_code = self.iterate()

            if step_code is SuccessCode.GOING_TO_INFINITY:
                self.increment_counters_fail(step_code)
                self.on_infinite_truncation(self._tentative_point)
                return self._finish(step_code)

            if step_code is SuccessCode.SUCCESS:
                self.increment_counters_success()
            else:
                self.increment_counters_fail(step_code)

            if self.check_going_to_infinity() is SuccessCode.GOING_TO_INFINITY:
                self.on_infinite_truncation()
                return self._finish(SuccessCode.GOING_TO_INFINITY)

        return self._finish(SuccessCode.SUCCESS)

    def refine(self, point, t: complex, tolerance: Optional[float] = None) -> Tuple[SuccessCode, np.ndarray]:
        """Run the corrector from `point` at time `t` without touching the path state.

        Args:
            point: Base point for Newton's method
            t: Time at which to correct
            tolerance: Convergence tolerance (default: the tracking tolerance)

        Returns:
            Tuple of (code, refined point)
        """
        point = self.context.asarray(point).reshape(-1)
        if point.shape[0] != self.num_variables():
            raise ValueError(f"Point has {point.shape[0]} coordinates, "
                             f"but the homotopy has {self.num_variables()} variables")
        refined = self.context.zeros(self.num_variables())
        code, _ = newton_correct(
            refined, self.homotopy, point, self.context.scalar(t),
            tolerance if tolerance is not None else self.config.tracking_tolerance,
            min_iterations=self.config.newton.min_newton_iterations,
            max_iterations=self.config.newton.max_newton_iterations,
            divergence_bound=self._divergence_bound(),
            context=self.context)
        return code, refined

    def change_precision(self, context: NumericContext) -> None:
        """Convert the path state to another numeric precision between iterations."""
        if context == self.context:
            return
        logger.debug("changing precision from %s to %s at t=%s",
                     self.context.name, context.name, self._current_time)
        self.context = context
        self._current_point = context.asarray(self._current_point)
        self._predicted_point = context.asarray(self._predicted_point)
        self._tentative_point = context.asarray(self._tentative_point)
