#!/usr/bin/env python3
"""Tests for the Experiment lifecycle and capability negotiation."""

import logging
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock

import numpy as np

from seqbench.classifiers.knn import KNearestNeighbours
from seqbench.core.exceptions import ConfigurationError, LifecycleError
from seqbench.data.dataset import Dataset
from seqbench.experiment.capabilities import (
    Checkpointable,
    Loggable,
    Randomizable,
    TestTimeContractable,
    TrainEstimateable,
    TrainTimeContractable,
)
from seqbench.experiment.experiment import Experiment, ExperimentState
from seqbench.experiment.results import ExperimentResults
from seqbench.params.handler import OptionHandler, ParameterHandler, set_param
from seqbench.params.parameter import ParameterSet


def make_dataset(n_cases, name="toy", length=8, seed=0):
    rng = np.random.default_rng(seed)
    labels = [i % 2 for i in range(n_cases)]
    series = [rng.normal(loc=3.0 * label, scale=0.1, size=length) for label in labels]
    return Dataset.from_arrays(series, labels, class_labels=['low', 'high'], name=name)


class PlainClassifier:
    """Only fits and predicts; implements no optional capability."""

    def __init__(self):
        self.fit_calls = []
        self.seen_labels = []

    def fit(self, dataset):
        self.fit_calls.append(dataset)

    def predict_proba(self, case):
        self.seen_labels.append(case.label)
        return np.array([0.25, 0.75]) if case.series.mean() > 1.5 else np.array([0.6, 0.4])


class CapableClassifier(PlainClassifier, ParameterHandler, Randomizable, Loggable, TrainEstimateable,
                        Checkpointable, TrainTimeContractable, TestTimeContractable):
    """Implements every optional capability and records what it was given."""

    def __init__(self):
        super().__init__()
        self.alpha = 0.0
        self.seed = None
        self.estimate = False
        self.save_path = None
        self.load_path = None
        self.train_time_limit = None
        self.test_time_limit = None
        self._logger = logging.getLogger("component.capable")
        self.events = []

    def get_params(self):
        return ParameterSet().put('alpha', self.alpha)

    def set_params(self, params):
        self.events.append('params')
        set_param(params, 'alpha', self._set_alpha, float)

    def _set_alpha(self, alpha):
        self.alpha = alpha

    def set_seed(self, seed):
        self.events.append('seed')
        self.seed = seed

    def get_seed(self):
        return self.seed

    @property
    def logger(self):
        return self._logger

    def set_estimate_own_performance(self, estimate):
        self.estimate = estimate

    def get_estimate_own_performance(self):
        return self.estimate

    def get_train_results(self):
        results = ExperimentResults()
        results.add_prediction(0, [1.0, 0.0], 0, 10)
        return results

    def get_save_path(self):
        return self.save_path

    def get_load_path(self):
        return self.load_path

    def set_save_path(self, path):
        self.save_path = path
        return True

    def set_load_path(self, path):
        self.load_path = path
        return True

    def set_train_time_limit(self, nanos):
        self.train_time_limit = nanos

    def set_test_time_limit(self, nanos):
        self.test_time_limit = nanos

    def fit(self, dataset):
        self.events.append('fit')
        super().fit(dataset)


class TokenClassifier(PlainClassifier, OptionHandler):

    def __init__(self):
        super().__init__()
        self.options = []

    def get_options(self):
        return list(self.options)

    def set_options(self, options):
        self.options = list(options)


class ExperimentTestCase(unittest.TestCase):

    def setUp(self):
        self.train_data = make_dataset(10, seed=1)
        self.test_data = make_dataset(5, seed=2)
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def make_experiment(self, component, seed=0):
        return Experiment(self.train_data, self.test_data, component, seed, "clf", "toy")


class TestLifecycle(ExperimentTestCase):

    def test_initial_state(self):
        experiment = self.make_experiment(PlainClassifier())
        self.assertEqual(experiment.state, ExperimentState.CREATED)
        self.assertFalse(experiment.is_trained)
        self.assertFalse(experiment.is_tested)

    def test_train_then_test(self):
        experiment = self.make_experiment(PlainClassifier())
        experiment.train()
        self.assertEqual(experiment.state, ExperimentState.TRAINED)
        experiment.test()
        self.assertEqual(experiment.state, ExperimentState.TESTED)
        self.assertTrue(experiment.is_trained)

    def test_second_train_raises_and_keeps_results(self):
        component = CapableClassifier()
        experiment = self.make_experiment(component)
        experiment.estimate_train_error = True
        experiment.train()
        train_results = experiment.train_results

        with self.assertRaises(LifecycleError) as ctx:
            experiment.train()

        self.assertIn("already trained", str(ctx.exception))
        self.assertIs(experiment.train_results, train_results)
        self.assertEqual(component.events.count('fit'), 1)

    def test_second_test_raises(self):
        experiment = self.make_experiment(PlainClassifier())
        experiment.train()
        experiment.test()
        results = experiment.test_results

        with self.assertRaises(LifecycleError) as ctx:
            experiment.test()
        self.assertIn("already tested", str(ctx.exception))
        self.assertIs(experiment.test_results, results)

    def test_test_before_train_raises(self):
        component = PlainClassifier()
        experiment = self.make_experiment(component)
        with self.assertRaises(LifecycleError):
            experiment.test()
        self.assertEqual(component.seen_labels, [])

    def test_reset_train_allows_retraining(self):
        component = CapableClassifier()
        experiment = self.make_experiment(component)
        experiment.estimate_train_error = True
        experiment.train()
        experiment.test()

        experiment.reset_train()
        self.assertEqual(experiment.state, ExperimentState.CREATED)
        self.assertIsNone(experiment.train_results)
        self.assertIsNone(experiment.test_results)

        experiment.train()
        self.assertEqual(component.events.count('fit'), 2)
        self.assertIsNotNone(experiment.train_results)
        self.assertIsNone(experiment.test_results)

    def test_reset_test_keeps_train_results(self):
        experiment = self.make_experiment(CapableClassifier())
        experiment.estimate_train_error = True
        experiment.train()
        experiment.test()
        train_results = experiment.train_results

        experiment.reset_test()

        self.assertEqual(experiment.state, ExperimentState.TRAINED)
        self.assertIsNone(experiment.test_results)
        self.assertIs(experiment.train_results, train_results)
        experiment.test()
        self.assertEqual(len(experiment.test_results), 5)

    def test_component_errors_propagate(self):
        component = PlainClassifier()
        component.fit = Mock(side_effect=KeyError("boom"))
        experiment = self.make_experiment(component)
        with self.assertRaises(KeyError):
            experiment.train()

    def test_prediction_errors_propagate(self):
        component = PlainClassifier()
        error = ArithmeticError("no prediction")
        component.predict_proba = Mock(side_effect=error)
        experiment = self.make_experiment(component)
        experiment.train()

        with self.assertRaises(ArithmeticError) as ctx:
            experiment.test()

        self.assertIs(ctx.exception, error)
        self.assertIsNone(experiment.test_results)


class TestCapabilityNegotiation(ExperimentTestCase):

    def test_params_pushed_before_fit(self):
        component = CapableClassifier()
        experiment = self.make_experiment(component)
        experiment.param_set = ParameterSet().put('alpha', 0.5)
        experiment.train()

        self.assertEqual(component.alpha, 0.5)
        self.assertLess(component.events.index('params'), component.events.index('fit'))
        self.assertLess(component.events.index('seed'), component.events.index('fit'))

    def test_params_as_tokens_for_option_handler(self):
        component = TokenClassifier()
        experiment = self.make_experiment(component)
        experiment.param_set = ParameterSet().put('k', 3)
        experiment.train()
        self.assertEqual(component.options, ['-k', '3'])

    def test_params_on_unconfigurable_component(self):
        experiment = self.make_experiment(PlainClassifier())
        experiment.param_set = ParameterSet().put('k', 3)
        with self.assertRaises(ConfigurationError) as ctx:
            experiment.train()
        self.assertIn("clf", str(ctx.exception))
        self.assertEqual(experiment.state, ExperimentState.CREATED)

    def test_empty_params_need_no_capability(self):
        component = PlainClassifier()
        self.make_experiment(component).train()
        self.assertEqual(len(component.fit_calls), 1)

    def test_train_estimate_unsupported(self):
        component = PlainClassifier()
        experiment = self.make_experiment(component)
        experiment.estimate_train_error = True

        with self.assertRaises(ConfigurationError):
            experiment.train()
        self.assertIsNone(experiment.train_results)
        self.assertEqual(component.fit_calls, [])

    def test_train_estimate_collected(self):
        component = CapableClassifier()
        experiment = self.make_experiment(component)
        experiment.estimate_train_error = True
        experiment.train()

        self.assertTrue(component.estimate)
        self.assertEqual(len(experiment.train_results), 1)
        self.assertEqual(experiment.train_results.details['dataset'], 'toy')

    def test_checkpoint_paths_pushed(self):
        component = CapableClassifier()
        experiment = self.make_experiment(component)
        save_dir = str(Path(self.tmp_dir) / "save")
        load_dir = str(Path(self.tmp_dir) / "load")
        self.assertTrue(experiment.set_save_path(save_dir))
        self.assertTrue(experiment.set_load_path(load_dir))
        experiment.set_checkpoint_interval(5)
        experiment.train()

        self.assertEqual(component.save_path, save_dir)
        self.assertEqual(component.load_path, load_dir)
        self.assertEqual(component.get_checkpoint_interval(), 5)
        self.assertTrue(Path(save_dir).is_dir())

    def test_checkpoint_unsupported(self):
        for setter in ('set_save_path', 'set_load_path'):
            experiment = self.make_experiment(PlainClassifier())
            getattr(experiment, setter)(self.tmp_dir)
            with self.assertRaises(ConfigurationError):
                experiment.train()

    def test_empty_checkpoint_path_disables(self):
        experiment = self.make_experiment(PlainClassifier())
        self.assertFalse(experiment.set_save_path(None))
        self.assertFalse(experiment.is_checkpoint_saving_enabled())

    def test_train_time_limit(self):
        component = CapableClassifier()
        experiment = self.make_experiment(component)
        experiment.set_train_time_limit(1_000_000)
        experiment.train()
        self.assertEqual(component.train_time_limit, 1_000_000)

    def test_train_time_limit_unsupported(self):
        experiment = self.make_experiment(PlainClassifier())
        experiment.set_train_time_limit(1_000_000)
        with self.assertRaises(ConfigurationError):
            experiment.train()

    def test_missing_seed_and_logging_only_warn(self):
        component = PlainClassifier()
        experiment = self.make_experiment(component)
        with self.assertLogs(experiment.logger, level='WARNING') as cm:
            experiment.train()

        output = '\n'.join(cm.output)
        self.assertIn("cannot set seed", output)
        self.assertIn("cannot set logger", output)
        self.assertEqual(len(component.fit_calls), 1)

    def test_log_level_propagated(self):
        component = CapableClassifier()
        experiment = self.make_experiment(component)
        experiment.logger.setLevel(logging.ERROR)
        try:
            experiment.train()
            self.assertEqual(component.logger.level, logging.ERROR)
        finally:
            experiment.logger.setLevel(logging.NOTSET)
            component.logger.setLevel(logging.NOTSET)

    def test_test_time_limit(self):
        component = CapableClassifier()
        experiment = self.make_experiment(component)
        experiment.set_test_time_limit(42)
        experiment.train()
        experiment.test()
        self.assertEqual(component.test_time_limit, 42)

    def test_memory_limit_is_only_logged(self):
        experiment = self.make_experiment(CapableClassifier())
        with self.assertLogs(experiment.logger, level='WARNING') as cm:
            experiment.set_memory_limit(1024)
        self.assertEqual(experiment.memory_limit, 1024)
        self.assertIn("not implemented", '\n'.join(cm.output))

    def test_capabilities_probed_on_attach(self):
        experiment = self.make_experiment(PlainClassifier())
        self.assertFalse(experiment.capabilities.randomizable)

        experiment.set_component(CapableClassifier())
        self.assertTrue(experiment.capabilities.randomizable)
        self.assertTrue(experiment.capabilities.parameters)
        self.assertTrue(experiment.capabilities.checkpointable)


class TestSeeding(ExperimentTestCase):

    def test_set_seed_reseeds_attached_component(self):
        component = CapableClassifier()
        experiment = self.make_experiment(component, seed=1)
        self.assertEqual(component.get_seed(), 1)

        experiment.set_seed(42)

        self.assertEqual(experiment.seed, 42)
        self.assertEqual(component.get_seed(), 42)

    def test_set_seed_without_seedable_component(self):
        experiment = self.make_experiment(PlainClassifier())
        experiment.set_seed(42)
        self.assertEqual(experiment.seed, 42)


class TestTesting(ExperimentTestCase):

    def test_labels_hidden_from_component(self):
        component = PlainClassifier()
        experiment = self.make_experiment(component)
        experiment.train()
        experiment.test()

        self.assertEqual(component.seen_labels, [None] * 5)
        self.assertEqual([r.true_label for r in experiment.test_results], self.test_data.labels())
        self.assertEqual(self.test_data.labels(), [0, 1, 0, 1, 0])

    def test_component_gets_private_copy(self):
        component = PlainClassifier()
        self.make_experiment(component).train()
        self.assertIsNot(component.fit_calls[0], self.train_data)

    def test_end_to_end_with_knn(self):
        component = KNearestNeighbours()
        experiment = self.make_experiment(component, seed=3)
        experiment.param_set = ParameterSet().put('k', 3)
        experiment.train()
        experiment.test()

        records = experiment.test_results.predictions
        self.assertEqual(component.k, 3)
        self.assertEqual(len(records), 5)
        for record in records:
            self.assertEqual(record.predicted_label, int(np.argmax(record.distribution)))
            self.assertGreaterEqual(record.latency_nanos, 0)
        self.assertEqual(experiment.test_results.accuracy(), 1.0)

    def test_base_dataset_reusable_across_experiments(self):
        first = self.make_experiment(KNearestNeighbours(), seed=0)
        second = self.make_experiment(KNearestNeighbours(), seed=0)
        first.train()
        first.test()
        second.train()
        second.test()

        self.assertEqual(self.test_data.labels(), [0, 1, 0, 1, 0])
        self.assertEqual([r.predicted_label for r in first.test_results],
                         [r.predicted_label for r in second.test_results])

    def test_repr(self):
        experiment = self.make_experiment(PlainClassifier(), seed=7)
        self.assertIn("seed=7", repr(experiment))
        self.assertIn("state=created", repr(experiment))


if __name__ == '__main__':
    unittest.main()
