"""
Core self-organized feature map implementation
"""

import operator
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import structlog
from sklearn.utils import check_random_state
from tqdm import tqdm

from .callbacks import Callback
from .config import ConnectionType, DecaySchedule, SOMParameters
from .distance import DistanceCalculator
from .exceptions import DimensionMismatchError, InvalidArgumentError
from .initializers import build_initializer
from .observability import (
    log_map_created,
    log_simulation_metrics,
    log_training_metrics,
)
from .topology import build_topology
from .visualization import SOMVisualizer

logger = structlog.get_logger(__name__)

ArrayLike = Union[np.ndarray, Sequence[Sequence[float]]]


@dataclass
class TrainingState:
    """Mutable state of one training run"""

    epoch: int = 0
    radius: float = 0.0
    learn_rate: float = 0.0
    previous_weights: Optional[np.ndarray] = None
    max_delta: float = float("inf")


def decay_value(
    t: int, t_max: int, initial: float, final: float, schedule: DecaySchedule
) -> float:
    """
    Value of a decaying parameter at epoch ``t`` of ``t_max``

    Every schedule is non-increasing in ``t``, stays at its ``t_max`` value
    afterwards and never drops below ``final`` or zero.
    """
    t = min(t, t_max)
    final = min(final, initial)
    progress = t / t_max

    if schedule == DecaySchedule.LINEAR:
        value = initial - (initial - final) * progress
    elif schedule == DecaySchedule.INVERSE:
        value = initial / (1 + progress)
    elif schedule == DecaySchedule.COSINE:
        value = final + (initial - final) * (1 + np.cos(np.pi * progress)) / 2
    else:  # EXPONENTIAL
        value = initial * np.exp(-progress)

    return float(max(value, final, 0.0))


class SOM:
    """
    Self-Organized Feature Map based on Kohonen's description

    Neurons of a ``rows x cols`` grid compete for every input pattern; the
    winner and its neighborhood are pulled towards the pattern. After training
    each neuron holds a representative weight vector and the indices of the
    inputs it captured in the last epoch.
    """

    UNDERFLOW_PROTECTION = -50  # Prevent exp() underflow

    def __init__(
        self,
        data: ArrayLike,
        rows: int,
        cols: int,
        epochs: int,
        conn_type: ConnectionType = ConnectionType.GRID_EIGHT,
        parameters: Optional[SOMParameters] = None,
        verbose: bool = False,
    ):
        """
        Initialize the map

        Args:
            data: Input patterns of shape (n_samples, n_features); a float
                numpy array is referenced, not copied
            rows: Number of neuron rows
            cols: Number of neuron columns
            epochs: Number of epochs per training run
            conn_type: Connection between neurons
            parameters: SOMParameters, defaults if None
            verbose: Whether to show a training progress bar
        """
        self.params = parameters if parameters is not None else SOMParameters()
        self.verbose = verbose

        if epochs <= 0:
            raise InvalidArgumentError(f"Epochs must be positive, got {epochs}")
        if rows <= 0 or cols <= 0:
            raise InvalidArgumentError(
                f"Grid must have at least one row and column, got {rows}x{cols}"
            )

        self._data = self._validate_data(data)
        self.n_features = self._data.shape[1]

        self.rows = rows
        self.cols = cols
        self.size = rows * cols
        self.epochs = epochs
        self.conn_type = conn_type

        self.rng = check_random_state(self.params.seed)
        self.topology = build_topology(conn_type, rows, cols)
        initializer = build_initializer(self.params.init_type, self.rng, self.params)
        self.weights = initializer.initialize(self._data, self.topology)

        self.awards = np.zeros(self.size, dtype=np.int64)
        self.capture_objects: List[List[int]] = [[] for _ in range(self.size)]
        self.winner: Optional[int] = None

        self.training_state = TrainingState(
            radius=self.params.init_radius, learn_rate=self.params.init_learn_rate
        )
        self.callbacks: List[Callback] = []
        self.stop_training = False

        self.metadata = {
            "creation_time": datetime.now().isoformat(),
            "training_history": [],
            "total_epochs": 0,
            "total_samples_seen": 0,
            "parameters": self.params.to_dict(),
        }

        log_map_created()
        logger.debug(
            "Map created",
            rows=rows,
            cols=cols,
            conn_type=conn_type.value,
            init_type=self.params.init_type.value,
            n_samples=len(self._data),
            n_features=self.n_features,
        )

    def _validate_data(self, data: ArrayLike) -> np.ndarray:
        """Check the dataset and convert it to a float array"""
        if hasattr(data, "to_numpy"):
            data = data.to_numpy()

        if not isinstance(data, np.ndarray):
            if len(data) == 0:
                raise InvalidArgumentError("Input data is empty")
            try:
                lengths = {len(row) for row in data}
            except TypeError:
                raise InvalidArgumentError("Input data must be 2D array, got 1D")
            if len(lengths) > 1:
                raise DimensionMismatchError(
                    f"All input patterns must have the same length, got {sorted(lengths)}"
                )
        data = np.asarray(data, dtype=self.params.dtype)

        if data.ndim != 2:
            raise InvalidArgumentError(f"Input data must be 2D array, got {data.ndim}D")

        if data.shape[0] == 0 or data.shape[1] == 0:
            raise InvalidArgumentError("Input data is empty")

        if not np.all(np.isfinite(data)):
            raise InvalidArgumentError("Input data contains NaN or infinite values")

        return data

    def _validate_pattern(self, pattern: Sequence[float]) -> np.ndarray:
        pattern = np.asarray(pattern, dtype=self.params.dtype)
        if pattern.ndim != 1 or pattern.shape[0] != self.n_features:
            raise DimensionMismatchError(
                f"Expected pattern of {self.n_features} features, got shape {pattern.shape}"
            )
        return pattern

    # Competition

    def _find_winner(self, pattern: np.ndarray) -> Tuple[int, float]:
        distances = DistanceCalculator.squared_euclidean(self.weights, pattern)
        # argmin returns the first minimum, so ties go to the lowest index
        index = int(np.argmin(distances))
        return index, float(distances[index])

    def competition(self, pattern: Sequence[float]) -> int:
        """Index of the neuron whose weights are closest to the pattern"""
        pattern = self._validate_pattern(pattern)
        return self._find_winner(pattern)[0]

    # Adaptation

    def _calculate_influence(self, distances: np.ndarray, radius: float) -> np.ndarray:
        """Gaussian neighborhood influence with underflow protection"""
        if radius <= 0:
            return np.zeros_like(distances)
        exponent = -(distances**2) / (2 * (radius**2))
        exponent = np.maximum(exponent, self.UNDERFLOW_PROTECTION)
        return np.exp(exponent)

    def _adapt(
        self, index_winner: int, pattern: np.ndarray, capture_index: Optional[int]
    ) -> int:
        state = self.training_state

        self.weights[index_winner] += state.learn_rate * (
            pattern - self.weights[index_winner]
        )

        neighbor_indices, neighbor_distances = self.topology.neighborhood(
            index_winner, state.radius
        )
        if neighbor_indices.size:
            influence = self._calculate_influence(neighbor_distances, state.radius)
            self.weights[neighbor_indices] += (
                state.learn_rate
                * influence[:, np.newaxis]
                * (pattern - self.weights[neighbor_indices])
            )

        self.winner = index_winner
        if capture_index is not None:
            self.awards[index_winner] += 1
            self.capture_objects[index_winner].append(capture_index)

        return 1 + int(neighbor_indices.size)

    def adaptation(
        self,
        index_winner: int,
        pattern: Sequence[float],
        capture_index: Optional[int] = None,
    ) -> int:
        """
        Pull the winner and its neighborhood towards the pattern

        Args:
            index_winner: Index of the winning neuron
            pattern: Input pattern
            capture_index: Index of the pattern in the dataset; recorded in the
                winner's capture list and awards when given

        Returns:
            Number of neurons whose weights were updated
        """
        try:
            index_winner = operator.index(index_winner)
        except TypeError:
            raise InvalidArgumentError(
                f"Neuron index must be an integer, got {index_winner!r}"
            ) from None
        if not 0 <= index_winner < self.size:
            raise InvalidArgumentError(
                f"Neuron index {index_winner} out of range for map of size {self.size}"
            )
        pattern = self._validate_pattern(pattern)
        return self._adapt(index_winner, pattern, capture_index)

    # Training

    def _clear_statistics(self):
        self.awards[:] = 0
        for captured in self.capture_objects:
            captured.clear()

    def _calculate_maximal_adaptation(self, previous_weights: np.ndarray) -> float:
        """Largest change of a neuron weight vector since the snapshot"""
        return float(np.max(DistanceCalculator.euclidean(self.weights, previous_weights)))

    def _run_epoch(self, state: TrainingState) -> Dict:
        """One competition + adaptation pass over the dataset in order"""
        state.previous_weights = self.weights.copy()
        self._clear_statistics()

        total_error = 0.0
        for index, pattern in enumerate(self._data):
            winner, distance = self._find_winner(pattern)
            total_error += distance
            self._adapt(winner, pattern, index)

        state.max_delta = self._calculate_maximal_adaptation(state.previous_weights)
        state.previous_weights = None

        return {
            "qe": total_error / len(self._data),
            "max_delta": state.max_delta,
            "radius": state.radius,
            "learn_rate": state.learn_rate,
        }

    def train(
        self, autostop: bool = False, callbacks: Optional[List[Callback]] = None
    ) -> int:
        """
        Train the map

        A second call continues from the current weights with a fresh
        radius and learning rate schedule.

        Args:
            autostop: Stop as soon as the largest weight change of an epoch
                falls below the adaptation threshold
            callbacks: List of callback objects

        Returns:
            Number of epochs run
        """
        params = self.params
        state = TrainingState(
            epoch=0, radius=params.init_radius, learn_rate=params.init_learn_rate
        )
        self.training_state = state
        self.stop_training = False

        self.callbacks = list(callbacks or [])
        for callback in self.callbacks:
            callback.on_training_begin(self)

        start_time = time.time()
        iterator = range(self.epochs)
        if self.verbose:
            iterator = tqdm(iterator, desc="Training SOM")

        converged = False
        for _ in iterator:
            for callback in self.callbacks:
                callback.on_epoch_begin(state.epoch, self)

            epoch_metrics = self._run_epoch(state)

            self.metadata["training_history"].append(
                {
                    "epoch": self.metadata["total_epochs"],
                    "metrics": epoch_metrics,
                    "radius": state.radius,
                    "learn_rate": state.learn_rate,
                }
            )
            self.metadata["total_epochs"] += 1
            self.metadata["total_samples_seen"] += len(self._data)

            for callback in self.callbacks:
                callback.on_epoch_end(state.epoch, self, epoch_metrics)

            if self.verbose:
                iterator.set_postfix(
                    {
                        "Δ": f"{state.max_delta:.4f}",
                        "r": f"{state.radius:.3f}",
                        "α": f"{state.learn_rate:.4f}",
                    }
                )

            state.epoch += 1
            state.radius = decay_value(
                state.epoch,
                self.epochs,
                params.init_radius,
                params.min_radius,
                params.radius_decay,
            )
            state.learn_rate = decay_value(
                state.epoch,
                self.epochs,
                params.init_learn_rate,
                params.min_learn_rate,
                params.learn_rate_decay,
            )

            if autostop and state.max_delta < params.adaptation_threshold:
                converged = True
                logger.info(
                    "Map converged", epoch=state.epoch, max_delta=state.max_delta
                )
                break

            if self.stop_training:
                break

        for callback in self.callbacks:
            callback.on_training_end(self)

        duration = time.time() - start_time
        log_training_metrics(self.rows, self.cols, duration, state.epoch)
        self.metadata["last_training"] = datetime.now().isoformat()

        logger.info(
            "Training finished",
            epochs_run=state.epoch,
            converged=converged,
            max_delta=state.max_delta,
            duration_seconds=duration,
        )
        return state.epoch

    # Inference

    def simulate(self, pattern: Sequence[float]) -> int:
        """Index of the winner for a pattern, without learning"""
        pattern = self._validate_pattern(pattern)
        log_simulation_metrics()
        return self._find_winner(pattern)[0]

    def _validate_patterns(self, data: Optional[ArrayLike]) -> np.ndarray:
        if data is None:
            return self._data
        data = np.asarray(data, dtype=self.params.dtype)
        if data.ndim != 2 or data.shape[1] != self.n_features:
            raise DimensionMismatchError(
                f"Expected patterns of {self.n_features} features, got shape {data.shape}"
            )
        if data.shape[0] == 0:
            raise InvalidArgumentError("Input data is empty")
        if not np.all(np.isfinite(data)):
            raise InvalidArgumentError("Input data contains NaN or infinite values")
        return data

    def _pattern_distances(self, data: np.ndarray) -> np.ndarray:
        """Squared distances of shape (n_samples, n_neurons)"""
        return DistanceCalculator.squared_euclidean(
            data[:, np.newaxis, :], self.weights[np.newaxis, :, :]
        )

    def predict(self, data: ArrayLike) -> np.ndarray:
        """Winner indices for a batch of patterns"""
        data = self._validate_patterns(data)
        log_simulation_metrics(len(data))
        return np.argmin(self._pattern_distances(data), axis=1)

    def quantization_error(self, data: Optional[ArrayLike] = None) -> float:
        """Mean squared distance from each pattern to its winner"""
        data = self._validate_patterns(data)
        distances = self._pattern_distances(data)
        return float(np.mean(np.min(distances, axis=1)))

    def topographic_error(self, data: Optional[ArrayLike] = None) -> float:
        """Fraction of patterns whose two closest neurons are not adjacent"""
        data = self._validate_patterns(data)
        if self.size < 2:
            return 0.0

        order = np.argsort(self._pattern_distances(data), axis=1, kind="stable")
        errors = sum(
            not self.topology.is_adjacent(int(first), int(second))
            for first, second in order[:, :2]
        )
        return errors / len(data)

    def get_distance_matrix(self) -> np.ndarray:
        """U-matrix: mean weight distance of each neuron to its adjacent neurons"""
        umatrix = np.zeros(self.size, dtype=np.float64)
        for index in range(self.size):
            adjacent = self.topology.adjacent(index)
            if adjacent:
                umatrix[index] = np.mean(
                    DistanceCalculator.euclidean(
                        self.weights[adjacent], self.weights[index]
                    )
                )
        return umatrix.reshape(self.rows, self.cols)

    def get_density_matrix(self) -> np.ndarray:
        """Awards of the last epoch laid out on the grid"""
        return self.awards.reshape(self.rows, self.cols)

    # Accessors

    def get_winner_number(self) -> Optional[int]:
        return self.winner

    def get_size(self) -> int:
        return self.size

    def get_weights(self) -> np.ndarray:
        return self.weights

    def get_capture_objects(self) -> List[List[int]]:
        return self.capture_objects

    def get_neighbors(self) -> List[List[int]]:
        return self.topology.neighbors

    def get_awards(self) -> np.ndarray:
        return self.awards

    def get_info(self) -> Dict:
        """Get comprehensive information about the map"""
        return {
            "parameters": self.params.to_dict(),
            "metadata": self.metadata,
            "shape": (self.rows, self.cols),
            "conn_type": self.conn_type.value,
            "n_neurons": self.size,
            "n_features": self.n_features,
            "total_epochs": self.metadata["total_epochs"],
            "total_samples": self.metadata["total_samples_seen"],
        }

    # Visualization

    def show_distance_matrix(self, show_plot=True, save_path="som_umatrix.png"):
        """Plot the U-matrix"""
        SOMVisualizer.show_distance_matrix(self, show_plot, save_path)
        return self

    def show_density_matrix(self, show_plot=True, save_path="som_density.png"):
        """Plot how many patterns each neuron captured"""
        SOMVisualizer.show_density_matrix(self, show_plot, save_path)
        return self

    def plot_training_progress(self, show_plot=True, save_path="training_progress.png"):
        """Plot max weight change, radius and learning rate per epoch"""
        SOMVisualizer.plot_training_progress(self, show_plot, save_path)
        return self
