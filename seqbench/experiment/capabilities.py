"""
Optional capabilities a component may implement, and the probe that detects them.

An experiment only relies on a component being able to fit a dataset and
predict class probabilities. Everything else is negotiated: the experiment
checks which of these interfaces the component implements and wires up only
those.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..params.handler import OptionHandler, ParameterHandler


class Randomizable(ABC):

    @abstractmethod
    def set_seed(self, seed: int) -> None:
        pass

    @abstractmethod
    def get_seed(self) -> Optional[int]:
        pass


class Loggable(ABC):

    @property
    @abstractmethod
    def logger(self) -> logging.Logger:
        pass


class TrainEstimateable(ABC):
    """Components able to estimate their own performance on the train data, e.g. by cross-validation."""

    @abstractmethod
    def set_estimate_own_performance(self, estimate: bool) -> None:
        pass

    @abstractmethod
    def get_estimate_own_performance(self) -> bool:
        pass

    @abstractmethod
    def get_train_results(self):
        """The ExperimentResults produced by the last self-estimate."""
        pass


class Checkpointable(ABC):
    """
    Components that can save their training progress and resume from it.

    set_save_path / set_load_path return False when the location is
    unusable; implementations call these defaults before storing the path.
    """

    @abstractmethod
    def get_save_path(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_load_path(self) -> Optional[str]:
        pass

    def set_save_path(self, path: Optional[str]) -> bool:
        return self._prepare_directory(path)

    def set_load_path(self, path: Optional[str]) -> bool:
        return self._prepare_directory(path)

    def set_checkpoint_interval(self, interval_nanos: int) -> None:
        self._checkpoint_interval_nanos = interval_nanos

    def get_checkpoint_interval(self) -> Optional[int]:
        return getattr(self, '_checkpoint_interval_nanos', None)

    @staticmethod
    def _prepare_directory(path: Optional[str]) -> bool:
        if not path:
            return False
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logging.getLogger(__name__).warning(f"Cannot use checkpoint directory '{path}': {e}")
            return False
        return True


class TrainTimeContractable(ABC):

    @abstractmethod
    def set_train_time_limit(self, nanos: int) -> None:
        """Elapsed-time budget for training, in nanoseconds."""
        pass


class TestTimeContractable(ABC):

    @abstractmethod
    def set_test_time_limit(self, nanos: int) -> None:
        pass


class MemoryContractable(ABC):

    @abstractmethod
    def set_memory_limit(self, limit_bytes: int) -> None:
        pass


@dataclass(frozen=True)
class Capabilities:
    """Which optional interfaces a component implements."""
    parameters: bool = False
    options: bool = False
    randomizable: bool = False
    loggable: bool = False
    train_estimateable: bool = False
    checkpointable: bool = False
    train_time_contractable: bool = False
    test_time_contractable: bool = False
    memory_contractable: bool = False

    @classmethod
    def probe(cls, component: Any) -> 'Capabilities':
        if component is None:
            return cls()
        return cls(
            parameters=isinstance(component, ParameterHandler),
            options=isinstance(component, OptionHandler),
            randomizable=isinstance(component, Randomizable),
            loggable=isinstance(component, Loggable),
            train_estimateable=isinstance(component, TrainEstimateable),
            checkpointable=isinstance(component, Checkpointable),
            train_time_contractable=isinstance(component, TrainTimeContractable),
            test_time_contractable=isinstance(component, TestTimeContractable),
            memory_contractable=isinstance(component, MemoryContractable),
        )

    @property
    def configurable(self) -> bool:
        return self.parameters or self.options
