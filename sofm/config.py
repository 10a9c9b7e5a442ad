"""
Configuration classes and enums for the self-organized feature map
"""

from enum import Enum
from dataclasses import dataclass, asdict
from typing import Optional, Tuple, Dict
import numpy as np

from .exceptions import InvalidArgumentError


class ConnectionType(Enum):
    """How neurons of the grid are connected to each other"""

    GRID_FOUR = "grid_four"
    GRID_EIGHT = "grid_eight"
    HONEYCOMB = "honeycomb"
    FUNC_NEIGHBOR = "func_neighbor"


class InitType(Enum):
    """Initial weight placement strategies"""

    RANDOM = "random"
    RANDOM_CENTROID = "random_centroid"
    RANDOM_SURFACE = "random_surface"
    UNIFORM_GRID = "uniform_grid"


class DecaySchedule(Enum):
    """Decay schedules for neighborhood radius and learning rate"""

    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    INVERSE = "inverse"
    COSINE = "cosine"


@dataclass
class SOMParameters:
    """Training parameters of the map"""

    init_type: InitType = InitType.UNIFORM_GRID
    init_radius: float = 1.0
    init_learn_rate: float = 0.1
    adaptation_threshold: float = 0.001

    # Decay schedules
    radius_decay: DecaySchedule = DecaySchedule.EXPONENTIAL
    learn_rate_decay: DecaySchedule = DecaySchedule.EXPONENTIAL
    min_radius: float = 0.0
    min_learn_rate: float = 0.0

    # Random initialization
    random_range: Tuple[float, float] = (0.0, 1.0)
    centroid_spread: float = 0.5
    seed: Optional[int] = None

    dtype: np.dtype = np.float64

    def __post_init__(self):
        if self.init_radius < 0:
            raise InvalidArgumentError(
                f"init_radius must be non-negative, got {self.init_radius}"
            )
        if self.init_learn_rate < 0:
            raise InvalidArgumentError(
                f"init_learn_rate must be non-negative, got {self.init_learn_rate}"
            )
        if self.adaptation_threshold < 0:
            raise InvalidArgumentError(
                "adaptation_threshold must be non-negative, "
                f"got {self.adaptation_threshold}"
            )
        if self.min_radius < 0 or self.min_learn_rate < 0:
            raise InvalidArgumentError("Decay floors must be non-negative")
        if self.random_range[0] > self.random_range[1]:
            raise InvalidArgumentError(
                f"random_range must be (low, high), got {self.random_range}"
            )
        self.random_range = tuple(self.random_range)

    def to_dict(self) -> Dict:
        """Convert parameters to a plain dictionary"""
        params_dict = asdict(self)
        for key, value in params_dict.items():
            if isinstance(value, Enum):
                params_dict[key] = value.value
        params_dict["dtype"] = np.dtype(self.dtype).name
        return params_dict

    @classmethod
    def from_dict(cls, params_dict: Dict) -> "SOMParameters":
        """Create parameters from a dictionary"""
        params_dict = dict(params_dict)
        enum_fields = {
            "init_type": InitType,
            "radius_decay": DecaySchedule,
            "learn_rate_decay": DecaySchedule,
        }
        for field_name, enum_class in enum_fields.items():
            if field_name in params_dict and isinstance(params_dict[field_name], str):
                params_dict[field_name] = enum_class(params_dict[field_name])
        if isinstance(params_dict.get("dtype"), str):
            params_dict["dtype"] = np.dtype(params_dict["dtype"]).type
        return cls(**params_dict)
