"""
Tests for tracking observers and logging.
"""

import logging

import numpy as np

from pathtracker import (
    EventRecorder,
    FunctionHomotopy,
    LoggingObserver,
    PathAccumulator,
    SuccessCode,
    Tracker,
    TrackerConfig,
)
from pathtracker import events as ev
from pathtracker.log_config import HANDLER_NAME, setup_logging


def line_homotopy():
    return FunctionHomotopy(lambda x, t: x - t,
                            lambda x, t: np.eye(1),
                            lambda x, t: -np.ones(1),
                            num_variables=1)


def stuck_homotopy():
    return FunctionHomotopy(lambda x, t: np.ones(1),
                            lambda x, t: np.eye(1),
                            lambda x, t: np.zeros(1),
                            num_variables=1)


def test_recorder_filters_event_types():
    everything = EventRecorder()
    successes = EventRecorder([ev.SuccessfulStep])
    result = Tracker(line_homotopy(), observers=[everything, successes]).track_path([0.0])

    assert len(successes) == result.num_successful_steps
    assert everything.count(ev.SuccessfulStep) == len(successes)
    assert everything.count(ev.Initializing) == 1
    assert everything.count(ev.TrackingEnded) == 1
    assert isinstance(everything.events[0], ev.Initializing)

    everything.clear()
    assert len(everything) == 0


def test_events_carry_path_state():
    recorder = EventRecorder([ev.SuccessfulStep])
    Tracker(line_homotopy(), path_index=7, observers=[recorder]).track_path([0.0])

    steps = recorder.events
    assert [e.num_successful_steps for e in steps] == list(range(1, len(steps) + 1))
    assert all(e.path_index == 7 for e in steps)
    for event in steps:
        assert np.allclose(event.point, [event.time])
    assert steps[-1].time == 1.0


def test_event_points_are_copies():
    recorder = EventRecorder([ev.SuccessfulStep])
    tracker = Tracker(line_homotopy(), observers=[recorder])
    tracker.track_path([0.0])

    first = recorder.events[0]
    assert not np.allclose(first.point, tracker.current_point)


def test_observers_can_be_added_and_removed():
    recorder = EventRecorder()
    tracker = Tracker(line_homotopy())
    tracker.add_observer(recorder)
    tracker.track_path([0.0])
    seen = len(recorder)
    assert seen > 0

    tracker.remove_observer(recorder)
    tracker.track_path([0.0])
    assert len(recorder) == seen


def test_path_accumulator_restarts_on_each_path():
    accumulator = PathAccumulator()
    tracker = Tracker(line_homotopy(), observers=[accumulator])

    first = tracker.track_path([0.0])
    assert len(accumulator.path_points) == first.num_successful_steps + 1
    assert len(accumulator.step_sizes) == first.num_successful_steps

    tracker.track_path([0.5], start_time=0.5)
    t0, p0 = accumulator.path_points[0]
    assert t0 == 0.5
    assert np.allclose(p0, [0.5])


def test_logging_observer_reports_successful_trace(caplog):
    caplog.set_level(logging.DEBUG, logger="pathtracker")
    Tracker(line_homotopy(), observers=[LoggingObserver()], path_index=3).track_path([0.0])

    messages = [r.getMessage() for r in caplog.records]
    assert any("initializing" in m for m in messages)
    assert any("step 1 accepted" in m for m in messages)
    assert any("tracking ended" in m and "SUCCESS" in m for m in messages)
    assert all(m.startswith("[path 3]") for m in messages if "accepted" in m)
    assert all(r.levelno == logging.DEBUG for r in caplog.records)


def test_logging_observer_warns_on_failure(caplog):
    caplog.set_level(logging.DEBUG, logger="pathtracker")
    config = TrackerConfig.from_dict({'min_step_size': 1e-2})
    result = Tracker(stuck_homotopy(), config, observers=[LoggingObserver()]).track_path([0.0])
    assert result.code is SuccessCode.MIN_STEP_SIZE_REACHED

    infos = [r for r in caplog.records if r.levelno == logging.INFO]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(infos) == result.num_failed_steps
    assert all("corrector failed" in r.getMessage() for r in infos)
    assert len(warnings) == 1
    assert "MIN_STEP_SIZE_REACHED" in warnings[0].getMessage()


def test_logging_observer_uses_given_logger(caplog):
    log = logging.getLogger("pathtracker.tests.custom")
    caplog.set_level(logging.DEBUG, logger="pathtracker.tests.custom")
    Tracker(line_homotopy(), observers=[LoggingObserver(log)]).track_path([0.0])
    assert caplog.records
    assert all(r.name == "pathtracker.tests.custom" for r in caplog.records)


def test_setup_logging_replaces_its_own_handler():
    foreign = logging.NullHandler()
    package_logger = logging.getLogger("pathtracker")
    package_logger.addHandler(foreign)
    try:
        setup_logging(logging.INFO)
        setup_logging(logging.DEBUG)
        own = [h for h in package_logger.handlers if h.get_name() == HANDLER_NAME]
        assert len(own) == 1
        assert foreign in package_logger.handlers
        assert package_logger.level == logging.DEBUG
    finally:
        package_logger.handlers = [h for h in package_logger.handlers
                                   if h.get_name() != HANDLER_NAME and h is not foreign]
        package_logger.setLevel(logging.NOTSET)
