"""
Callback system for monitoring and intervention during map training
"""

from abc import ABC, abstractmethod
from typing import Dict, List, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from .core import SOM

logger = structlog.get_logger(__name__)


class Callback(ABC):
    """Abstract base class for callbacks"""

    @abstractmethod
    def on_epoch_begin(self, epoch: int, som: "SOM") -> None:
        pass

    @abstractmethod
    def on_epoch_end(self, epoch: int, som: "SOM", metrics: Dict) -> None:
        pass

    @abstractmethod
    def on_training_begin(self, som: "SOM") -> None:
        pass

    @abstractmethod
    def on_training_end(self, som: "SOM") -> None:
        pass


class HistoryCallback(Callback):
    """Collect the metrics of every epoch of a training run"""

    def __init__(self):
        self.history: List[Dict] = []

    def on_epoch_begin(self, epoch: int, som: "SOM") -> None:
        pass

    def on_epoch_end(self, epoch: int, som: "SOM", metrics: Dict) -> None:
        self.history.append(dict(metrics, epoch=epoch))

    def on_training_begin(self, som: "SOM") -> None:
        self.history = []

    def on_training_end(self, som: "SOM") -> None:
        pass


class EarlyStoppingCallback(Callback):
    """Stop training once a monitored metric stops improving"""

    def __init__(
        self, monitor: str = "qe", patience: int = 10, min_delta: float = 1e-4
    ):
        self.monitor = monitor
        self.patience = patience
        self.min_delta = min_delta
        self.best_value = float("inf")
        self.wait = 0

    def on_epoch_begin(self, epoch: int, som: "SOM") -> None:
        pass

    def on_epoch_end(self, epoch: int, som: "SOM", metrics: Dict) -> None:
        current_value = metrics.get(self.monitor, float("inf"))
        if current_value < self.best_value - self.min_delta:
            self.best_value = current_value
            self.wait = 0
        else:
            self.wait += 1
            if self.wait >= self.patience:
                som.stop_training = True
                logger.info(
                    "Early stopping triggered", epoch=epoch, monitor=self.monitor
                )

    def on_training_begin(self, som: "SOM") -> None:
        self.best_value = float("inf")
        self.wait = 0

    def on_training_end(self, som: "SOM") -> None:
        pass
