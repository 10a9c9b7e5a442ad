"""Distance calculation utilities for the map."""

import numpy as np


class DistanceCalculator:
    """Euclidean distances between weight vectors and neuron locations."""

    @staticmethod
    def euclidean(a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """Calculate Euclidean distance."""
        return np.linalg.norm(a - b, axis=-1)

    @staticmethod
    def squared_euclidean(a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """Calculate squared Euclidean distance."""
        diff = a - b
        return np.sum(diff * diff, axis=-1)

    @staticmethod
    def pairwise(points: np.ndarray) -> np.ndarray:
        """All-pairs Euclidean distance table of a set of points."""
        # Broadcasting keeps the table exactly symmetric with a zero diagonal
        return DistanceCalculator.euclidean(
            points[:, np.newaxis, :], points[np.newaxis, :, :]
        )
