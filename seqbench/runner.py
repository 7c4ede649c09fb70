"""
ExperimentRunner - builds an Experiment from configuration and runs it.

The runner is the only place where components are looked up by name: it
resolves the configured classifier from a ComponentRegistry and hands the
instance to the Experiment.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .classifiers.knn import KNearestNeighbours
from .core.config import SimpleConfigLoader
from .core.exceptions import ConfigurationError
from .core.registry import ComponentRegistry
from .core.units import parse_memory_amount, parse_time_amount
from .data.csv_loader import load_train_test
from .distance.lockstep import EuclideanDistance, ManhattanDistance
from .experiment.experiment import Experiment
from .params.parameter import ParameterSet

logger = logging.getLogger(__name__)


def build_default_registry() -> ComponentRegistry:
    registry = ComponentRegistry()
    registry.register_type("knn", KNearestNeighbours, constructor_kwargs={"instance_name": "knn"})
    registry.register_factory("1nn-ed", lambda: KNearestNeighbours(1, EuclideanDistance(), instance_name="1nn-ed"))
    registry.register_factory("1nn-manhattan",
                              lambda: KNearestNeighbours(1, ManhattanDistance(), instance_name="1nn-manhattan"))
    return registry


class ExperimentRunner:
    """
    Reads the ``experiment`` section of a configuration, builds the
    Experiment it describes, runs it and writes the results.
    """

    def __init__(self, config_loader: SimpleConfigLoader, registry: Optional[ComponentRegistry] = None):
        self.config_loader = config_loader
        self.registry = registry or build_default_registry()
        self.logger = logging.getLogger(self.__class__.__name__)

    def _get(self, key: str, default: Any = None) -> Any:
        return self.config_loader.get(f"experiment.{key}", default)

    def _require(self, key: str) -> Any:
        value = self._get(key)
        if value is None:
            raise ConfigurationError(f"Missing required setting 'experiment.{key}'")
        return value

    def build_parameters(self, option_tokens: Optional[Sequence[str]] = None) -> ParameterSet:
        """Configured parameters, overridden per name by command-line option tokens."""
        params = ParameterSet.from_dict(self._get('parameters', {}) or {})
        if option_tokens:
            try:
                overrides = ParameterSet.from_tokens(option_tokens)
            except ValueError as e:
                raise ConfigurationError(f"Cannot parse parameter options {list(option_tokens)}: {e}") from e
            for name, values in overrides.items():
                params.put(name, *values)
        return params

    def build_experiment(self, option_tokens: Optional[Sequence[str]] = None) -> Experiment:
        classifier_name = self._require('classifier')
        train_data, test_data = load_train_test(
            self._require('train'),
            self._require('test'),
            label_column=self._get('label_column', 'label'),
            name=self._get('dataset'),
            max_cases=self._get('max_cases'),
        )
        component = self.registry.resolve(classifier_name)
        experiment = Experiment(
            train_data,
            test_data,
            component,
            seed=int(self._get('seed', 0)),
            component_name=classifier_name,
            dataset_name=train_data.name,
        )
        experiment.param_set = self.build_parameters(option_tokens)
        experiment.estimate_train_error = bool(self._get('estimate_train_error', False))
        experiment.set_train_time_limit(parse_time_amount(self._get('train_time_limit')))
        experiment.set_test_time_limit(parse_time_amount(self._get('test_time_limit')))
        experiment.set_memory_limit(parse_memory_amount(self._get('memory_limit')))
        checkpoint_interval = parse_time_amount(self._get('checkpoint_interval'))
        if checkpoint_interval is not None:
            experiment.set_checkpoint_interval(checkpoint_interval)
        for key, setter in (('load_path', experiment.set_load_path), ('save_path', experiment.set_save_path)):
            path = self._get(key)
            if path is not None and not setter(path):
                raise ConfigurationError(f"Cannot use '{path}' as checkpoint {key.replace('_', ' ')}")
        self.logger.info(f"Built {experiment!r} with parameters: {experiment.param_set}")
        return experiment

    def results_path(self, experiment: Experiment) -> Path:
        results_dir = Path(self._get('results_dir', 'results'))
        return results_dir / str(experiment.component_name) / str(experiment.dataset_name) / f"seed_{experiment.seed}"

    def run(self, option_tokens: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        experiment = self.build_experiment(option_tokens)
        experiment.train()
        experiment.test()

        output_dir = self.results_path(experiment)
        summary: Dict[str, Any] = {'experiment': repr(experiment)}
        if experiment.train_results is not None:
            experiment.train_results.save_json(str(output_dir / "train.json"))
            summary['train_accuracy'] = experiment.train_results.accuracy()
        experiment.test_results.save_json(str(output_dir / "test.json"))
        experiment.test_results.to_dataframe().to_csv(output_dir / "test_predictions.csv", index=False)
        summary['test_accuracy'] = experiment.test_results.accuracy()
        summary['results_dir'] = str(output_dir)
        return summary
