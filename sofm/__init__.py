"""
Self-Organized Feature Map (SOFM) Package

Kohonen self-organizing maps with four-grid, eight-grid, honeycomb and
radius-based neighborhoods and data-driven weight initialization.
"""

from .core import SOM, TrainingState, decay_value
from .config import (
    SOMParameters,
    ConnectionType,
    InitType,
    DecaySchedule,
)
from .exceptions import (
    SOMError,
    InvalidArgumentError,
    DimensionMismatchError,
    UnknownConnectionTypeError,
    UnknownInitTypeError,
)
from .callbacks import Callback, EarlyStoppingCallback, HistoryCallback
from .observability import (
    setup_logging,
    trace_operation,
    get_metrics,
)

__version__ = "0.1.0"

__all__ = [
    "SOM",
    "TrainingState",
    "decay_value",
    "SOMParameters",
    "ConnectionType",
    "InitType",
    "DecaySchedule",
    "SOMError",
    "InvalidArgumentError",
    "DimensionMismatchError",
    "UnknownConnectionTypeError",
    "UnknownInitTypeError",
    "Callback",
    "EarlyStoppingCallback",
    "HistoryCallback",
    "setup_logging",
    "trace_operation",
    "get_metrics",
]
