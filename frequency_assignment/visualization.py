"""
Visualization for Frequency Assignments

Plots emitter geometry annotated with demand satisfaction, and a frequency
raster showing which emitter uses which frequency.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .model import ProblemModel


class AssignmentVisualizer:
    """Visualization system for frequency assignment analysis"""

    def __init__(self, model: ProblemModel):
        self.model = model

    def plot_comprehensive_analysis(self,
                                    assignment: Mapping[str, Iterable[int]],
                                    metrics: Dict[str, Any],
                                    figsize: Tuple[int, int] = (14, 6),
                                    save_path: Optional[str] = None,
                                    dpi: int = 150,
                                    show: bool = False):
        """
        Create a two-panel visualization: geometry and frequency raster

        Args:
            assignment: Assignment to visualize
            metrics: Analysis metrics from AssignmentMetrics
            figsize: Figure size (width, height)
            save_path: Optional path to save the figure
            dpi: Resolution of the saved figure
            show: Display the figure interactively

        Returns:
            The matplotlib Figure
        """
        fig, (ax_geo, ax_raster) = plt.subplots(1, 2, figsize=figsize,
                                                gridspec_kw={'width_ratios': [1, 1.4]})

        self.plot_emitters(assignment, ax_geo)
        self.plot_frequency_raster(assignment, ax_raster)

        status = "feasible" if metrics.get('feasible') else "infeasible"
        fig.suptitle(
            f"Span {metrics.get('span', 0)} | "
            f"{metrics.get('distinct_frequencies', 0)} frequencies | {status}"
        )
        fig.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=dpi, bbox_inches='tight')
        if show:
            plt.show()

        return fig

    def plot_emitters(self, assignment: Mapping[str, Iterable[int]], ax: plt.Axes = None):
        """Scatter emitters in the x/y plane; size by demand, colour by satisfaction"""
        if ax is None:
            fig, ax = plt.subplots(figsize=(8, 6))

        order = self.model.emitter_order
        if not order:
            ax.set_title("Emitters (none)")
            return ax

        xs = np.array([self.model.emitters[e].x for e in order])
        ys = np.array([self.model.emitters[e].y for e in order])
        demands = np.array(self.model.demands)
        assigned = np.array([len(set(assignment.get(e, ()))) for e in order])

        satisfied = assigned == demands
        sizes = 40 + 30 * demands

        ax.scatter(xs[satisfied], ys[satisfied], s=sizes[satisfied], c="tab:green",
                   edgecolors="k", label="demand met")
        ax.scatter(xs[~satisfied], ys[~satisfied], s=sizes[~satisfied], c="tab:red",
                   edgecolors="k", label="demand unmet")

        for x, y, emitter_id, have, need in zip(xs, ys, order, assigned, demands):
            ax.annotate(f"{emitter_id} ({have}/{need})", (x, y),
                        textcoords="offset points", xytext=(5, 5), fontsize=8)

        ax.set_xlabel("x")
        ax.set_ylabel("y")
        ax.set_title("Emitters")
        ax.set_aspect("equal", adjustable="datalim")
        ax.legend(loc="best", fontsize=8)
        return ax

    def plot_frequency_raster(self, assignment: Mapping[str, Iterable[int]], ax: plt.Axes = None):
        """Emitter x frequency occupancy matrix"""
        if ax is None:
            fig, ax = plt.subplots(figsize=(10, 6))

        order = self.model.emitter_order
        used = [f for e in order for f in assignment.get(e, ())]
        if not used:
            ax.set_title("Frequency usage (empty)")
            return ax

        low, high = min(used), max(used)
        raster = np.zeros((len(order), high - low + 1))
        for row, emitter_id in enumerate(order):
            for f in assignment.get(emitter_id, ()):
                raster[row, f - low] = 1.0

        ax.imshow(raster, aspect="auto", cmap="Greys", interpolation="nearest",
                  extent=(low - 0.5, high + 0.5, len(order) - 0.5, -0.5))
        ax.set_yticks(range(len(order)))
        ax.set_yticklabels(order, fontsize=8)
        ax.set_xlabel("frequency")
        ax.set_title("Frequency usage")
        return ax
