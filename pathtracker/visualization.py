"""
Visualization module for PathTracker.

This module plots recorded solution paths and the step size history of a
trace.
"""

from typing import List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from pathtracker.tracker import TrackResult


def plot_path(path_points: List[Tuple[complex, np.ndarray]],
              var_idx: int = 0,
              title: Optional[str] = None,
              figsize: Tuple[int, int] = (10, 8),
              show_endpoints: bool = True,
              ax: Optional[plt.Axes] = None) -> plt.Figure:
    """Plot one coordinate of a solution path in the complex plane.

    Args:
        path_points: List of (t, point) pairs along the path
        var_idx: Index of the coordinate to plot (default: 0)
        title: Plot title (default: auto-generated)
        figsize: Figure size, used when no axes are given
        show_endpoints: Whether to mark the start and end points
        ax: Axes to draw into (default: a new figure)

    Returns:
        The matplotlib figure holding the plot
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    t_values = [np.real(p[0]) for p in path_points]
    var_values = np.array([p[1][var_idx] for p in path_points])

    scatter = ax.scatter(var_values.real, var_values.imag, c=t_values, cmap='viridis',
                         s=30, alpha=0.7)
    cbar = fig.colorbar(scatter, ax=ax)
    cbar.set_label('t (real part)')
    ax.plot(var_values.real, var_values.imag, 'k-', alpha=0.3)

    if show_endpoints and len(path_points) > 0:
        ax.plot(var_values.real[0], var_values.imag[0], 'go', markersize=10,
                label=f'Start (t={path_points[0][0]})')
        ax.plot(var_values.real[-1], var_values.imag[-1], 'ro', markersize=10,
                label=f'End (t={path_points[-1][0]})')
        ax.legend()

    ax.set_xlabel('Real Part')
    ax.set_ylabel('Imaginary Part')
    ax.set_title(title if title is not None else f'Solution Path (coordinate {var_idx})')
    ax.axis('equal')
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    return fig


def plot_paths(results: Sequence[TrackResult],
               var_idx: int = 0,
               title: Optional[str] = None,
               figsize: Tuple[int, int] = (12, 10),
               alpha: float = 0.5) -> plt.Figure:
    """Plot every stored path of a batch, failed paths dashed.

    Args:
        results: Results of track_paths(..., store_paths=True)
        var_idx: Index of the coordinate to plot
        title: Plot title (default: auto-generated)
        figsize: Figure size
        alpha: Transparency for the paths

    Returns:
        The created matplotlib figure
    """
    fig, ax = plt.subplots(figsize=figsize)
    stored = [r for r in results if r.path_points]
    cmap = plt.cm.rainbow
    labelled = False

    for i, result in enumerate(stored):
        values = np.array([p[1][var_idx] for p in result.path_points])
        style = '-' if result.success else '--'
        ax.plot(values.real, values.imag, style, color=cmap(i / max(len(stored), 1)),
                alpha=alpha, linewidth=1.5)
        if result.success:
            ax.plot(values.real[-1], values.imag[-1], 'ro', markersize=5, alpha=0.7,
                    label=None if labelled else 'End points')
            labelled = True

    ax.set_xlabel('Real Part')
    ax.set_ylabel('Imaginary Part')
    ax.set_title(title if title is not None else f'Solution Paths (coordinate {var_idx})')
    ax.axis('equal')
    ax.grid(True, alpha=0.3)
    if labelled:
        ax.legend()
    fig.tight_layout()
    return fig


def plot_step_sizes(step_sizes: Sequence[float],
                    title: Optional[str] = None,
                    figsize: Tuple[int, int] = (10, 4)) -> plt.Figure:
    """Plot the step size after each accepted step on a log scale.

    Args:
        step_sizes: Step sizes, e.g. PathAccumulator.step_sizes
        title: Plot title
        figsize: Figure size

    Returns:
        The created matplotlib figure
    """
    fig, ax = plt.subplots(figsize=figsize)
    ax.semilogy(np.arange(1, len(step_sizes) + 1), step_sizes, 'b.-')
    ax.set_xlabel('Successful step')
    ax.set_ylabel('Step size')
    ax.set_title(title if title is not None else 'Step size history')
    ax.grid(True, which='both', alpha=0.3)
    fig.tight_layout()
    return fig
