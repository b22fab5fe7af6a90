"""
Path tracking module for PathTracker.

This module tracks many solution paths of one homotopy. Paths are
independent: each gets its own Tracker, and the homotopy is only read, so
paths can be spread over a thread pool.
"""

import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from tqdm.auto import tqdm

from pathtracker.codes import SuccessCode
from pathtracker.config import TrackerConfig
from pathtracker.homotopy import Homotopy
from pathtracker.observers import PathAccumulator
from pathtracker.precision import DOUBLE, NumericContext
from pathtracker.tracker import Tracker, TrackResult


def track_single_path(homotopy: Homotopy,
                      start_point: Sequence[complex],
                      start_time: complex = 0.0,
                      end_time: complex = 1.0,
                      config: Optional[TrackerConfig] = None,
                      store_paths: bool = False,
                      observers: Optional[List[Any]] = None,
                      context: NumericContext = DOUBLE,
                      path_index: Any = None,
                      timeout: Optional[float] = None) -> TrackResult:
    """Track a single path from start_time to end_time.

    Args:
        homotopy: Homotopy to track
        start_point: Solution of H(x, start_time) = 0
        start_time: Start of the time interval
        end_time: End of the time interval
        config: Tracker configuration
        store_paths: Whether to record the (time, point) pairs of the path
        observers: Extra observers attached to the tracker
        context: Numeric precision
        path_index: Label for events and the result
        timeout: Seconds after which the path is cancelled

    Returns:
        The TrackResult of the path
    """
    observers = list(observers) if observers else []
    accumulator = None
    if store_paths:
        accumulator = PathAccumulator()
        observers.append(accumulator)

    tracker = Tracker(homotopy, config=config, observers=observers,
                      context=context, path_index=path_index)
    result = tracker.track_path(start_point, start_time, end_time, timeout=timeout)

    if accumulator is not None:
        result.path_points = accumulator.path_points
    return result


def track_paths(homotopy: Homotopy,
                start_points: Sequence[Sequence[complex]],
                start_time: complex = 0.0,
                end_time: complex = 1.0,
                config: Optional[TrackerConfig] = None,
                n_workers: int = 1,
                store_paths: bool = False,
                observers: Optional[List[Any]] = None,
                context: NumericContext = DOUBLE,
                timeout: Optional[float] = None,
                verbose: bool = False) -> List[TrackResult]:
    """Track solution paths from every start point.

    Args:
        homotopy: Homotopy to track
        start_points: Start point of each path
        start_time: Start of the time interval
        end_time: End of the time interval
        config: Tracker configuration shared by all paths
        n_workers: Number of worker threads (1 tracks sequentially)
        store_paths: Whether to record the points along each path
        observers: Observers attached to every tracker; they must tolerate
            calls from several threads when n_workers > 1
        context: Numeric precision
        timeout: Per-path wall-clock limit in seconds
        verbose: Whether to print progress information

    Returns:
        One TrackResult per start point, in input order
    """
    if n_workers < 1:
        raise ValueError("n_workers must be at least 1")
    config = config if config is not None else TrackerConfig()
    n_paths = len(start_points)
    results: List[Optional[TrackResult]] = [None] * n_paths

    if verbose:
        print(f"Tracking {n_paths} paths from t={start_time} to t={end_time}...")
    pbar = tqdm(total=n_paths, disable=not verbose)
    started = time.time()

    def run(index: int) -> TrackResult:
        return track_single_path(homotopy, start_points[index], start_time, end_time,
                                 config=config, store_paths=store_paths,
                                 observers=observers, context=context,
                                 path_index=index, timeout=timeout)

    if n_workers == 1:
        for i in range(n_paths):
            results[i] = run(i)
            pbar.update(1)
    else:
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            futures = {executor.submit(run, i): i for i in range(n_paths)}
            for future in as_completed(futures):
                results[futures[future]] = future.result()
                pbar.update(1)
    pbar.close()

    if verbose:
        elapsed = time.time() - started
        summary = summarize_results(results)
        print(f"Path tracking complete: {summary.get(SuccessCode.SUCCESS, 0)}/{n_paths} "
              f"successful paths in {elapsed:.2f}s")
        for code, count in summary.items():
            if code is not SuccessCode.SUCCESS:
                print(f"  {code.name}: {count}")

    return results


def summarize_results(results: Sequence[TrackResult]) -> Dict[SuccessCode, int]:
    """Count path outcomes by SuccessCode."""
    return dict(Counter(result.code for result in results))


def endpoints(results: Sequence[TrackResult], successful_only: bool = True) -> np.ndarray:
    """Stack the end points of tracked paths into an array (one row per path)."""
    chosen = [r.solution for r in results if r.success or not successful_only]
    if not chosen:
        return np.zeros((0, 0), dtype=complex)
    return np.vstack(chosen)
