"""
Grid topologies: neuron locations, static adjacency and the neuron distance table
"""

from abc import ABC, abstractmethod
from typing import List, Tuple

import numpy as np

from .config import ConnectionType
from .distance import DistanceCalculator
from .exceptions import InvalidArgumentError, UnknownConnectionTypeError


class Topology(ABC):
    """
    Connections between the neurons of a rows x cols grid

    Neuron ``i`` sits at grid coordinate ``(i // cols, i % cols)``. Locations
    and the all-pairs distance table are computed once at construction.
    """

    conn_type: ConnectionType

    def __init__(self, rows: int, cols: int):
        if rows <= 0 or cols <= 0:
            raise InvalidArgumentError(
                f"Grid must have at least one row and column, got {rows}x{cols}"
            )

        self.rows = rows
        self.cols = cols
        self.size = rows * cols

        self.locations = self._create_locations()
        self.distances = DistanceCalculator.pairwise(self.locations)
        self.neighbors = self._create_connections()

    def grid_position(self, index: int) -> Tuple[int, int]:
        return index // self.cols, index % self.cols

    def _create_locations(self) -> np.ndarray:
        """Plain grid coordinates (row, col)"""
        return np.array(
            [[i // self.cols, i % self.cols] for i in range(self.size)],
            dtype=np.float64,
        )

    def _in_row(self, index: int, row: int) -> bool:
        return 0 <= index < self.size and index // self.cols == row

    @abstractmethod
    def _create_connections(self) -> List[List[int]]:
        pass

    def neighborhood(self, winner: int, radius: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Neurons besides the winner that are affected at the given radius

        Returns:
            (indices, distances) of the affected neurons
        """
        candidates = np.asarray(self.neighbors[winner], dtype=np.intp)
        if candidates.size == 0:
            return candidates, np.empty(0, dtype=np.float64)

        candidate_distances = self.distances[winner, candidates]
        mask = candidate_distances <= radius
        return candidates[mask], candidate_distances[mask]

    def adjacent(self, index: int) -> List[int]:
        """Neurons directly connected to ``index``"""
        return list(self.neighbors[index])

    def is_adjacent(self, first: int, second: int) -> bool:
        return second in self.adjacent(first)


class GridFourTopology(Topology):
    """Up, down, left and right neighbors"""

    conn_type = ConnectionType.GRID_FOUR

    def _create_connections(self) -> List[List[int]]:
        neighbors = []
        for index in range(self.size):
            row = index // self.cols
            node_neighbors = []

            for candidate, candidate_row in (
                (index - self.cols, row - 1),
                (index + self.cols, row + 1),
                (index - 1, row),
                (index + 1, row),
            ):
                if self._in_row(candidate, candidate_row):
                    node_neighbors.append(candidate)

            neighbors.append(node_neighbors)
        return neighbors


class GridEightTopology(GridFourTopology):
    """
    Four-grid neighbors plus the diagonals

    Diagonals sit at distance sqrt(2), so they are only updated while the
    radius is at least sqrt(2). With the default radius of 1.0 training
    matches the four-grid.
    """

    conn_type = ConnectionType.GRID_EIGHT

    def _create_connections(self) -> List[List[int]]:
        neighbors = super()._create_connections()
        for index in range(self.size):
            row = index // self.cols

            for candidate, candidate_row in (
                (index - self.cols - 1, row - 1),
                (index - self.cols + 1, row - 1),
                (index + self.cols - 1, row + 1),
                (index + self.cols + 1, row + 1),
            ):
                if self._in_row(candidate, candidate_row):
                    neighbors[index].append(candidate)
        return neighbors


class HoneycombTopology(Topology):
    """
    Hexagonal connections with an alternating row offset

    Even rows are shifted half a cell to the right, so an even-row neuron at
    column c touches columns c and c+1 of the rows above and below, while an
    odd-row neuron touches columns c-1 and c.
    """

    conn_type = ConnectionType.HONEYCOMB

    def _create_locations(self) -> np.ndarray:
        coords = []
        for index in range(self.size):
            row, col = self.grid_position(index)
            x = col + (0.5 if row % 2 == 0 else 0.0)
            y = row * np.sqrt(3) / 2
            coords.append([y, x])
        return np.array(coords, dtype=np.float64)

    def _create_connections(self) -> List[List[int]]:
        neighbors = []
        for index in range(self.size):
            row = index // self.cols
            node_neighbors = []

            if row % 2 == 0:
                upper_left, upper_right = index - self.cols, index - self.cols + 1
                lower_left, lower_right = index + self.cols, index + self.cols + 1
            else:
                upper_left, upper_right = index - self.cols - 1, index - self.cols
                lower_left, lower_right = index + self.cols - 1, index + self.cols

            for candidate, candidate_row in (
                (index - 1, row),
                (index + 1, row),
                (upper_left, row - 1),
                (upper_right, row - 1),
                (lower_left, row + 1),
                (lower_right, row + 1),
            ):
                if self._in_row(candidate, candidate_row):
                    node_neighbors.append(candidate)

            neighbors.append(node_neighbors)
        return neighbors

    def neighborhood(self, winner: int, radius: float) -> Tuple[np.ndarray, np.ndarray]:
        # Hexagonal spacing leaves unit distances a rounding error above 1.0
        return super().neighborhood(winner, radius + 1e-9)


class FuncNeighborTopology(Topology):
    """
    No static adjacency: every neuron within the current radius is a neighbor
    """

    conn_type = ConnectionType.FUNC_NEIGHBOR

    def _create_connections(self) -> List[List[int]]:
        return [[] for _ in range(self.size)]

    def neighborhood(self, winner: int, radius: float) -> Tuple[np.ndarray, np.ndarray]:
        winner_distances = self.distances[winner]
        mask = winner_distances <= radius
        mask[winner] = False
        indices = np.flatnonzero(mask)
        return indices, winner_distances[indices]

    def adjacent(self, index: int) -> List[int]:
        # Grid adjacency including diagonals
        mask = self.distances[index] <= np.sqrt(2)
        mask[index] = False
        return np.flatnonzero(mask).tolist()


TOPOLOGIES = {
    ConnectionType.GRID_FOUR: GridFourTopology,
    ConnectionType.GRID_EIGHT: GridEightTopology,
    ConnectionType.HONEYCOMB: HoneycombTopology,
    ConnectionType.FUNC_NEIGHBOR: FuncNeighborTopology,
}


def build_topology(conn_type: ConnectionType, rows: int, cols: int) -> Topology:
    """Create the topology for a connection type"""
    try:
        topology_class = TOPOLOGIES[conn_type]
    except (KeyError, TypeError):
        raise UnknownConnectionTypeError(f"Unknown connection type: {conn_type!r}")
    return topology_class(rows, cols)
