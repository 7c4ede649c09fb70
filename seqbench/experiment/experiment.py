"""
Experiment - a single train / test run of one component on one dataset.

The experiment owns private copies of the train and test data and borrows
the component. Before training it negotiates the component's optional
capabilities: requested features the component cannot honour (parameters,
train estimates, checkpointing, a train time contract) are configuration
errors, while missing seeding or logging support only produces a warning.
"""

import logging
import time
from enum import Enum
from typing import Any, Optional

import numpy as np

from ..core.exceptions import ConfigurationError, LifecycleError
from ..data.dataset import Dataset
from ..params.handler import set_params
from ..params.parameter import ParameterSet
from .capabilities import (
    Capabilities,
    Checkpointable,
    Loggable,
    MemoryContractable,
    TestTimeContractable,
    TrainTimeContractable,
)
from .results import ExperimentResults

DEFAULT_CHECKPOINT_INTERVAL_NANOS = 3600 * 1_000_000_000


class ExperimentState(Enum):
    """Experiment lifecycle states"""
    CREATED = "created"
    TRAINED = "trained"
    TESTED = "tested"


class Experiment(Loggable, Checkpointable, TrainTimeContractable, TestTimeContractable, MemoryContractable):
    """
    Runs one component through configure, train and test.

    Lifecycle: CREATED -> TRAINED -> TESTED. train() and test() may each run
    once; reset_train() returns to CREATED and reset_test() to TRAINED,
    discarding the corresponding results.
    """

    def __init__(self, train_data: Dataset, test_data: Dataset, component: Any, seed: int,
                 component_name: Optional[str] = None, dataset_name: Optional[str] = None):
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._state = ExperimentState.CREATED

        self._train_data: Optional[Dataset] = None
        self._test_data: Optional[Dataset] = None
        self._component: Any = None
        self._capabilities = Capabilities()
        self._seed: int = seed
        self._param_set = ParameterSet()
        self._estimate_train_error = False

        self._train_results: Optional[ExperimentResults] = None
        self._test_results: Optional[ExperimentResults] = None

        self._train_time_limit: Optional[int] = None
        self._test_time_limit: Optional[int] = None
        self._memory_limit: Optional[int] = None
        self._checkpoint_interval: int = DEFAULT_CHECKPOINT_INTERVAL_NANOS
        self._save_path: Optional[str] = None
        self._load_path: Optional[str] = None

        self.train_data = train_data
        self.test_data = test_data
        self.component_name = component_name
        self.dataset_name = dataset_name or getattr(train_data, 'name', None)
        self.set_component(component)

    # Lifecycle

    @property
    def state(self) -> ExperimentState:
        return self._state

    @property
    def is_trained(self) -> bool:
        return self._state in (ExperimentState.TRAINED, ExperimentState.TESTED)

    @property
    def is_tested(self) -> bool:
        return self._state == ExperimentState.TESTED

    def reset_train(self) -> None:
        self._state = ExperimentState.CREATED
        self._train_results = None
        self._test_results = None

    def reset_test(self) -> None:
        if self._state == ExperimentState.TESTED:
            self._state = ExperimentState.TRAINED
        self._test_results = None

    def train(self) -> None:
        if self._state != ExperimentState.CREATED:
            raise LifecycleError("already trained")
        self.logger.info(f"training {self._describe()}...")
        # the component may modify the data it is given, so it only ever sees a private copy
        train_data = self._train_data.copy()
        component = self._require_component()

        self._configure(component)
        self._state = ExperimentState.TRAINED
        component.fit(train_data)

        if self._estimate_train_error:
            train_results = component.get_train_results()
            train_results.set_details(component, train_data)
            self._train_results = train_results
            self.logger.info(f"train estimate: {train_results.summary()}")

    def test(self) -> None:
        if self._state == ExperimentState.TESTED:
            raise LifecycleError("already tested")
        if self._state != ExperimentState.TRAINED:
            raise LifecycleError("not trained")
        self._state = ExperimentState.TESTED
        self.logger.info(f"testing {self._describe()}...")
        component = self._require_component()

        if self._test_time_limit is not None:
            if self._capabilities.test_time_contractable:
                component.set_test_time_limit(self._test_time_limit)
            else:
                self.logger.warning(f"cannot set test time limit for {{{self._name()}}}")

        # labels are hidden from the component, true labels come from the owned test data
        test_data = self._test_data.with_labels_hidden()
        test_results = ExperimentResults()
        for labelled_case, test_case in zip(self._test_data, test_data):
            timestamp = time.perf_counter_ns()
            distribution = np.asarray(component.predict_proba(test_case), dtype=float)
            predicted_class = int(np.argmax(distribution))
            time_taken = time.perf_counter_ns() - timestamp
            test_results.add_prediction(labelled_case.label, distribution, predicted_class, time_taken, "")
        test_results.set_details(component, test_data)
        self._test_results = test_results
        self.logger.info(f"test results: {test_results.summary()}")

    def _configure(self, component: Any) -> None:
        caps = self._capabilities
        name = self._name()
        if not self._param_set.is_empty():
            if not caps.configurable:
                raise ConfigurationError(f"{{{name}}} cannot handle parameters")
            set_params(component, self._param_set)
        if self._estimate_train_error:
            if not caps.train_estimateable:
                raise ConfigurationError(f"{{{name}}} does not estimate train error")
            component.set_estimate_own_performance(True)
        if self.is_checkpoint_loading_enabled():
            if not caps.checkpointable:
                raise ConfigurationError(f"{{{name}}} is not checkpointable")
            component.set_load_path(self._load_path)
        if self.is_checkpoint_saving_enabled():
            if not caps.checkpointable:
                raise ConfigurationError(f"{{{name}}} is not checkpointable")
            component.set_save_path(self._save_path)
            component.set_checkpoint_interval(self._checkpoint_interval)
        if self._train_time_limit is not None:
            if not caps.train_time_contractable:
                raise ConfigurationError(f"{{{name}}} not train contractable")
            component.set_train_time_limit(self._train_time_limit)
        if caps.randomizable:
            component.set_seed(self._seed)
        else:
            self.logger.warning(f"cannot set seed for {{{name}}}")
        if caps.loggable:
            component.logger.setLevel(self.logger.getEffectiveLevel())
        else:
            self.logger.warning(f"cannot set logger for {{{name}}}")

    # Component and data

    def _require_component(self) -> Any:
        if self._component is None:
            raise ConfigurationError("no component attached to experiment")
        return self._component

    def _name(self) -> str:
        if self.component_name:
            return self.component_name
        return getattr(self._component, 'name', type(self._component).__name__)

    def _describe(self) -> str:
        return f"{{{self._name()}}} on {{{self.dataset_name}}} (seed {self._seed})"

    @property
    def component(self) -> Any:
        return self._component

    def set_component(self, component: Any) -> 'Experiment':
        """Attach a component, probing its capabilities once. A seed-capable component is seeded at once."""
        self._component = component
        self._capabilities = Capabilities.probe(component)
        if self._capabilities.randomizable:
            component.set_seed(self._seed)
        return self

    @property
    def capabilities(self) -> Capabilities:
        return self._capabilities

    @property
    def train_data(self) -> Dataset:
        return self._train_data

    @train_data.setter
    def train_data(self, train_data: Dataset) -> None:
        if train_data is None:
            raise ValueError("train data must not be None")
        self._train_data = train_data

    @property
    def test_data(self) -> Dataset:
        return self._test_data

    @test_data.setter
    def test_data(self, test_data: Dataset) -> None:
        if test_data is None:
            raise ValueError("test data must not be None")
        self._test_data = test_data

    @property
    def seed(self) -> int:
        return self._seed

    def set_seed(self, seed: int) -> 'Experiment':
        self._seed = seed
        if self._capabilities.randomizable:
            self._component.set_seed(seed)
        return self

    @property
    def param_set(self) -> ParameterSet:
        return self._param_set

    @param_set.setter
    def param_set(self, param_set: Optional[ParameterSet]) -> None:
        self._param_set = param_set if param_set is not None else ParameterSet()

    @property
    def estimate_train_error(self) -> bool:
        return self._estimate_train_error

    @estimate_train_error.setter
    def estimate_train_error(self, estimate: bool) -> None:
        self._estimate_train_error = bool(estimate)

    @property
    def train_results(self) -> Optional[ExperimentResults]:
        return self._train_results

    @property
    def test_results(self) -> Optional[ExperimentResults]:
        return self._test_results

    # Contracts

    @property
    def train_time_limit(self) -> Optional[int]:
        return self._train_time_limit

    def set_train_time_limit(self, nanos: Optional[int]) -> None:
        self._train_time_limit = nanos

    @property
    def test_time_limit(self) -> Optional[int]:
        return self._test_time_limit

    def set_test_time_limit(self, nanos: Optional[int]) -> None:
        self._test_time_limit = nanos

    @property
    def memory_limit(self) -> Optional[int]:
        return self._memory_limit

    def set_memory_limit(self, limit_bytes: Optional[int]) -> None:
        self._memory_limit = limit_bytes
        if limit_bytes is not None:
            self.logger.warning("memory limiting is not implemented, the limit is recorded but not enforced")

    @property
    def checkpoint_interval(self) -> int:
        return self._checkpoint_interval

    def set_checkpoint_interval(self, interval_nanos: int) -> None:
        self._checkpoint_interval = interval_nanos

    def get_checkpoint_interval(self) -> int:
        return self._checkpoint_interval

    # Checkpointing

    def set_save_path(self, path: Optional[str]) -> bool:
        if super().set_save_path(path):
            self._save_path = path
            return True
        self._save_path = None
        return False

    def get_save_path(self) -> Optional[str]:
        return self._save_path

    def set_load_path(self, path: Optional[str]) -> bool:
        if super().set_load_path(path):
            self._load_path = path
            return True
        self._load_path = None
        return False

    def get_load_path(self) -> Optional[str]:
        return self._load_path

    def is_checkpoint_saving_enabled(self) -> bool:
        return self._save_path is not None

    def is_checkpoint_loading_enabled(self) -> bool:
        return self._load_path is not None

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"component='{self._name()}', "
            f"dataset='{self.dataset_name}', "
            f"seed={self._seed}, "
            f"state={self._state.value})"
        )
