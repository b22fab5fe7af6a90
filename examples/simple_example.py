"""
Simple example demonstrating the basic usage of PathTracker.

This example tracks the paths of a straight-line homotopy from the start
system x^2 = 1, y^2 = 1 to the target system
- x^2 + y^2 = 1 (a circle)
- x^2 = y (a parabola)

The endpoints of the paths are the intersection points of the two curves.
"""

import sys
import os
import time
import logging

import numpy as np
import matplotlib.pyplot as plt

# Add the parent directory to the path so we can import pathtracker
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pathtracker import (
    polyvar,
    PolynomialSystem,
    StraightLineHomotopy,
    TrackerConfig,
    LoggingObserver,
    track_paths,
)
from pathtracker.log_config import setup_logging
from pathtracker.visualization import plot_paths


def main():
    """Run the simple example."""
    print("PathTracker Simple Example")
    print("==========================")
    setup_logging(logging.INFO)

    print("Defining variables and equations...")
    x, y = polyvar('x', 'y')

    target = PolynomialSystem([x**2 + y**2 - 1,   # circle: x^2 + y^2 = 1
                               x**2 - y])         # parabola: x^2 = y
    start = PolynomialSystem([x**2 - 1, y**2 - 1])
    start_points = [[sx, sy] for sx in (1, -1) for sy in (1, -1)]

    print(f"Target system:\n{target}\n")
    homotopy = StraightLineHomotopy(start, target, [x, y])

    config = TrackerConfig.from_dict({
        'max_step_size': 0.05,
        'tracking_tolerance': 1e-8,
        'max_newton_iterations': 3,
        'predictor': 'rkf45',
    })

    print("Tracking paths...")
    started = time.time()
    results = track_paths(homotopy, start_points, config=config, store_paths=True,
                          observers=[LoggingObserver()], verbose=True)
    print(f"\nTracking completed in {time.time() - started:.3f} seconds")

    for i, result in enumerate(results):
        print(f"\nPath {i+1}: {result.code.name}")
        print(f"  x = {result.solution[0]:.6f}")
        print(f"  y = {result.solution[1]:.6f}")
        print(f"  steps: {result.num_successful_steps} accepted, "
              f"{result.num_failed_steps} rejected")

    print("\nCreating visualization...")
    fig = plot_paths(results, var_idx=0, title='Paths of x, circle-parabola homotopy')
    fig.savefig('circle_parabola_paths.png')
    print("Visualization saved as 'circle_parabola_paths.png'")

    fig, ax = plt.subplots(figsize=(10, 8))
    angles = np.linspace(0, 2*np.pi, 100)
    ax.plot(np.cos(angles), np.sin(angles), 'b-', linewidth=2, label='$x^2 + y^2 = 1$')
    px = np.linspace(-1.5, 1.5, 100)
    ax.plot(px, px**2, 'r-', linewidth=2, label='$x^2 = y$')

    real_ends = [r.solution for r in results
                 if r.success and np.all(np.abs(r.solution.imag) < 1e-8)]
    ax.scatter([p[0].real for p in real_ends], [p[1].real for p in real_ends],
               color='green', s=100, zorder=5, label='Real endpoints')
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_title('Circle and Parabola Intersection')
    ax.axis('equal')
    ax.grid(True, alpha=0.3)
    ax.legend()
    plt.tight_layout()
    plt.show()

    return results


if __name__ == "__main__":
    main()
