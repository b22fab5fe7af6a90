"""
Observers for PathTracker.

An observer is any object with an `observe(event)` method. Trackers push
every event to each attached observer, in attachment order. The observers
here record events, accumulate the path, or forward events to `logging`.
"""

import logging
from typing import List, Optional, Sequence, Tuple, Type

import numpy as np

from pathtracker import events as ev

logger = logging.getLogger(__name__)


class Observer:
    """Base class for tracking observers."""

    def observe(self, event: ev.TrackingEvent) -> None:
        raise NotImplementedError


class EventRecorder(Observer):
    """Store the events a tracker emits.

    Args:
        event_types: Only record events of these types (default: all)
    """

    def __init__(self, event_types: Optional[Sequence[Type[ev.TrackingEvent]]] = None):
        self.event_types = tuple(event_types) if event_types else None
        self.events: List[ev.TrackingEvent] = []

    def observe(self, event):
        if self.event_types is None or isinstance(event, self.event_types):
            self.events.append(event)

    def of_type(self, event_type: Type[ev.TrackingEvent]) -> List[ev.TrackingEvent]:
        return [e for e in self.events if isinstance(e, event_type)]

    def count(self, event_type: Type[ev.TrackingEvent]) -> int:
        return len(self.of_type(event_type))

    def clear(self) -> None:
        self.events = []

    def __len__(self) -> int:
        return len(self.events)


class PathAccumulator(Observer):
    """Record (time, point) pairs of a path: the start point and every accepted step."""

    def __init__(self):
        self.path_points: List[Tuple[complex, np.ndarray]] = []
        self.step_sizes: List[float] = []

    def observe(self, event):
        if isinstance(event, ev.Initializing):
            self.path_points = [(event.start_time, np.array(event.start_point))]
            self.step_sizes = []
        elif isinstance(event, ev.SuccessfulStep):
            self.path_points.append((event.time, np.array(event.point)))
            self.step_sizes.append(event.step_size)


class LoggingObserver(Observer):
    """Forward tracking events to a logger.

    Routine events go to DEBUG, failures to INFO and truncated or failed
    paths to WARNING.

    Args:
        log: Logger to use (default: this module's logger)
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log if log is not None else logger

    def observe(self, event):
        prefix = f"[path {event.path_index}] " if event.path_index is not None else ""
        if isinstance(event, ev.Initializing):
            self.log.debug("%sinitializing: t=%s -> %s, step size %.3e",
                           prefix, event.start_time, event.end_time, event.step_size)
        elif isinstance(event, ev.PredictorMatrixSolveFailure):
            self.log.info("%spredictor failed at t=%s (%s), step size %.3e",
                          prefix, event.time, event.code.name, event.step_size)
        elif isinstance(event, ev.CorrectorFailure):
            self.log.info("%scorrector failed at t=%s (%s), step size %.3e",
                          prefix, event.time, event.code.name, event.step_size)
        elif isinstance(event, ev.SuccessfulStep):
            self.log.debug("%sstep %d accepted, t=%s, cond~%.3e",
                           prefix, event.num_successful_steps, event.time,
                           event.condition_number_estimate)
        elif isinstance(event, ev.StepSizeIncreased):
            self.log.debug("%sstep size increased %.3e -> %.3e",
                           prefix, event.previous_step_size, event.step_size)
        elif isinstance(event, ev.InfinitePathTruncation):
            self.log.warning("%spath truncated at t=%s, |x|=%.3e",
                             prefix, event.time, event.point_norm)
        elif isinstance(event, ev.TrackingEnded):
            level = logging.DEBUG if event.code.is_success else logging.WARNING
            self.log.log(level, "%stracking ended at t=%s: %s after %d steps (%d failed)",
                         prefix, event.time, event.code.name,
                         event.num_successful_steps, event.num_failed_steps)
