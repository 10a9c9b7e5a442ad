"""
Initial weight placement strategies
"""

from abc import ABC, abstractmethod

import numpy as np

from .config import InitType, SOMParameters
from .exceptions import InvalidArgumentError, UnknownInitTypeError
from .topology import Topology


class WeightInitializer(ABC):
    """Produce one weight vector per neuron with the dimensionality of the data"""

    init_type: InitType

    def __init__(self, rng: np.random.RandomState, params: SOMParameters):
        self.rng = rng
        self.params = params

    def initialize(self, data: np.ndarray, topology: Topology) -> np.ndarray:
        if data.ndim != 2 or data.shape[0] == 0:
            raise InvalidArgumentError("Cannot initialize weights from empty data")
        weights = self._create_weights(data, topology)
        return weights.astype(self.params.dtype)

    @abstractmethod
    def _create_weights(self, data: np.ndarray, topology: Topology) -> np.ndarray:
        pass


class RandomInitializer(WeightInitializer):
    """Uniform in a fixed range, independent of the data"""

    init_type = InitType.RANDOM

    def _create_weights(self, data, topology):
        low, high = self.params.random_range
        return self.rng.uniform(low, high, size=(topology.size, data.shape[1]))


class RandomCentroidInitializer(WeightInitializer):
    """Small random perturbation around the data centroid"""

    init_type = InitType.RANDOM_CENTROID

    def _create_weights(self, data, topology):
        centroid = data.mean(axis=0)
        spread = self.params.centroid_spread
        noise = self.rng.uniform(-spread, spread, size=(topology.size, data.shape[1]))
        return centroid + noise


class RandomSurfaceInitializer(WeightInitializer):
    """Random points inside the bounding box of the data"""

    init_type = InitType.RANDOM_SURFACE

    def _create_weights(self, data, topology):
        data_min = data.min(axis=0)
        data_max = data.max(axis=0)
        return self.rng.uniform(data_min, data_max, size=(topology.size, data.shape[1]))


class UniformGridInitializer(WeightInitializer):
    """
    Weights laid out across the bounding box following the neuron grid

    The first dimension is spread along the rows and the second along the
    columns; remaining dimensions, and any dimension whose grid axis has a
    single neuron, start at the center of the data.
    """

    init_type = InitType.UNIFORM_GRID

    def _create_weights(self, data, topology):
        data_min = data.min(axis=0)
        data_max = data.max(axis=0)
        center = (data_min + data_max) / 2
        data_range = data_max - data_min

        weights = np.tile(center, (topology.size, 1))
        for axis, n_cells in enumerate((topology.rows, topology.cols)):
            if axis >= data.shape[1] or n_cells < 2:
                continue
            step = data_range[axis] / (n_cells - 1)
            for index in range(topology.size):
                cell = topology.grid_position(index)[axis]
                weights[index, axis] = data_min[axis] + step * cell
        return weights


INITIALIZERS = {
    InitType.RANDOM: RandomInitializer,
    InitType.RANDOM_CENTROID: RandomCentroidInitializer,
    InitType.RANDOM_SURFACE: RandomSurfaceInitializer,
    InitType.UNIFORM_GRID: UniformGridInitializer,
}


def build_initializer(
    init_type: InitType, rng: np.random.RandomState, params: SOMParameters
) -> WeightInitializer:
    """Create the initializer for an initialization type"""
    try:
        initializer_class = INITIALIZERS[init_type]
    except (KeyError, TypeError):
        raise UnknownInitTypeError(f"Unknown initialization type: {init_type!r}")
    return initializer_class(rng, params)
