"""
Visualization utilities for the map
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import numpy as np
import structlog

# Set matplotlib backend to Agg (non-interactive) before importing pyplot
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

if TYPE_CHECKING:
    from .core import SOM

logger = structlog.get_logger(__name__)


def ensure_plots_dir(save_path: str) -> str:
    """Ensure plots directory exists and return full path"""
    if not os.path.isabs(save_path):
        plots_dir = Path("plots")
        plots_dir.mkdir(exist_ok=True)
        return str(plots_dir / save_path)
    return save_path


def _finish(show_plot: bool, save_path: Optional[str], what: str) -> Optional[str]:
    full_path = None
    if save_path:
        full_path = ensure_plots_dir(save_path)
        plt.savefig(full_path, dpi=150, bbox_inches="tight")
        logger.debug("Plot saved", plot=what, path=full_path)

    if show_plot:
        plt.show()
    else:
        plt.close()
    return full_path


class SOMVisualizer:
    """Visualization utilities for map analysis"""

    @staticmethod
    def _show_grid_matrix(matrix: np.ndarray, title: str, label: str, cmap: str):
        plt.figure(figsize=(8, 8))
        plt.imshow(matrix, cmap=cmap, interpolation="nearest")
        plt.colorbar(label=label)
        plt.title(title)
        plt.xlabel("Column")
        plt.ylabel("Row")

    @staticmethod
    def show_distance_matrix(
        som: "SOM", show_plot: bool = True, save_path: str = "som_umatrix.png"
    ) -> Optional[str]:
        """
        Plot the U-matrix of the map

        Args:
            som: SOM instance
            show_plot: Whether to display the plot
            save_path: Path to save the plot image (None to skip saving)
        """
        SOMVisualizer._show_grid_matrix(
            som.get_distance_matrix(),
            "U-Matrix",
            "Mean distance to adjacent neurons",
            "viridis",
        )
        return _finish(show_plot, save_path, "distance_matrix")

    @staticmethod
    def show_density_matrix(
        som: "SOM", show_plot: bool = True, save_path: str = "som_density.png"
    ) -> Optional[str]:
        """Plot the number of captured patterns per neuron"""
        density = som.get_density_matrix()
        SOMVisualizer._show_grid_matrix(
            density, "Density Matrix", "Captured patterns", "Blues"
        )
        for (row, col), value in np.ndenumerate(density):
            plt.text(col, row, str(value), ha="center", va="center")
        return _finish(show_plot, save_path, "density_matrix")

    @staticmethod
    def plot_training_progress(
        som: "SOM", show_plot: bool = True, save_path: str = "training_progress.png"
    ) -> Optional[str]:
        """
        Plot max weight change, radius and learning rate per epoch

        Args:
            som: Trained SOM instance
            show_plot: Whether to display the plot
            save_path: Path to save the plot image (None to skip saving)
        """
        history = som.metadata.get("training_history", [])
        if not history:
            logger.warning("No training history available for plotting")
            return None

        epochs = [h["epoch"] for h in history]
        delta_values = [h["metrics"]["max_delta"] for h in history]
        qe_values = [h["metrics"]["qe"] for h in history]
        radius_values = [h["radius"] for h in history]
        rate_values = [h["learn_rate"] for h in history]

        fig, ((ax1, ax2), (ax3, ax4)) = plt.subplots(2, 2, figsize=(15, 10))

        ax1.plot(epochs, delta_values, "b-", linewidth=2)
        ax1.axhline(
            som.params.adaptation_threshold, color="k", linestyle="--", linewidth=1
        )
        ax1.set_xlabel("Epoch")
        ax1.set_ylabel("Max weight change")
        ax1.set_title("Maximal Adaptation")
        ax1.set_yscale("log")
        ax1.grid(True, alpha=0.3)

        ax2.plot(epochs, qe_values, "m-", linewidth=2)
        ax2.set_xlabel("Epoch")
        ax2.set_ylabel("Quantization Error")
        ax2.set_title("Quantization Error")
        ax2.grid(True, alpha=0.3)

        ax3.plot(epochs, radius_values, "r-", linewidth=2)
        ax3.set_xlabel("Epoch")
        ax3.set_ylabel("Radius")
        ax3.set_title("Neighborhood Radius Decay")
        ax3.grid(True, alpha=0.3)

        ax4.plot(epochs, rate_values, "g-", linewidth=2)
        ax4.set_xlabel("Epoch")
        ax4.set_ylabel("Learning rate")
        ax4.set_title("Learning Rate Decay")
        ax4.grid(True, alpha=0.3)

        plt.tight_layout()
        return _finish(show_plot, save_path, "training_progress")
