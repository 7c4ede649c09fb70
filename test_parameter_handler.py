#!/usr/bin/env python3
"""Tests for ParameterHandler and the parameter propagation helpers."""

import unittest
from unittest.mock import Mock

from seqbench.core.exceptions import ConfigurationError, ParametersNotSupportedError, ParameterTypeError
from seqbench.params.handler import OptionHandler, ParameterHandler, set_param, set_params
from seqbench.params.parameter import ParameterSet


class WindowedComponent(ParameterHandler):
    """Component with a window size and a nested sub-component."""

    def __init__(self):
        self.window = 5
        self.windows_seen = []
        self.child = ChildComponent()

    def set_window(self, window):
        self.window = window
        self.windows_seen.append(window)

    def get_params(self):
        return ParameterSet().put('window', self.window).put('child', self.child.get_params())

    def set_params(self, params):
        set_param(params, 'window', self.set_window, int)
        set_param(params, 'child', lambda nested: set_params(self.child, nested), ParameterSet)


class ChildComponent(ParameterHandler):

    def __init__(self):
        self.scale = 1.0

    def get_params(self):
        return ParameterSet().put('scale', self.scale)

    def set_params(self, params):
        set_param(params, 'scale', self._set_scale, float)

    def _set_scale(self, scale):
        self.scale = scale


class TokenOnlyComponent(OptionHandler):

    def __init__(self):
        self.options = []

    def get_options(self):
        return list(self.options)

    def set_options(self, options):
        self.options = list(options)


class Unconfigurable:
    pass


class TestParameterHandlerDefaults(unittest.TestCase):

    def test_default_get_params_is_empty(self):
        handler = ParameterHandler()
        self.assertTrue(handler.get_params().is_empty())
        self.assertEqual(handler.get_options(), [])

    def test_default_set_params_unsupported(self):
        with self.assertRaises(ParametersNotSupportedError):
            ParameterHandler().set_params(ParameterSet().put('k', 1))

    def test_options_derived_from_params(self):
        component = WindowedComponent()
        self.assertEqual(component.get_options(), ['--window', '5', '--child', '[', '--scale', '1.0', ']'])

        component.set_options(['--window', '9', '--child', '[', '--scale', '2.5', ']'])

        self.assertEqual(component.window, 9)
        self.assertEqual(component.child.scale, 2.5)

    def test_list_params(self):
        self.assertEqual(WindowedComponent().list_params(), ['window', 'child'])


class TestSetParam(unittest.TestCase):

    def test_absent_name_is_noop(self):
        setter = Mock()
        set_param(ParameterSet(), 'window', setter, int)
        setter.assert_not_called()

    def test_each_value_calls_setter(self):
        component = WindowedComponent()
        set_param(ParameterSet().put('window', 1, 2, 3), 'window', component.set_window, int)

        self.assertEqual(component.windows_seen, [1, 2, 3])
        self.assertEqual(component.window, 3)

    def test_values_are_cast(self):
        setter = Mock()
        set_param(ParameterSet().put('window', '7'), 'window', setter, int)
        setter.assert_called_once_with(7)

    def test_bool_from_string(self):
        setter = Mock()
        set_param(ParameterSet().put('on', 'true'), 'on', setter, bool)
        setter.assert_called_once_with(True)

    def test_failed_cast_raises_with_cause(self):
        with self.assertRaises(ParameterTypeError) as ctx:
            set_param(ParameterSet().put('window', 'wide'), 'window', Mock(), int)
        self.assertIsInstance(ctx.exception.__cause__, ValueError)
        self.assertIn('window', str(ctx.exception))

    def test_non_integral_float_not_truncated(self):
        with self.assertRaises(ParameterTypeError):
            set_param(ParameterSet().put('window', 2.5), 'window', Mock(), int)

    def test_scalar_is_not_a_nested_set(self):
        with self.assertRaises(ParameterTypeError) as ctx:
            set_param(ParameterSet().put('child', 3), 'child', Mock(), ParameterSet)
        self.assertIsInstance(ctx.exception.__cause__, TypeError)


class TestSetParams(unittest.TestCase):

    def test_parameter_handler_receives_set(self):
        component = WindowedComponent()
        set_params(component, ParameterSet().put('window', 11).put('child', ParameterSet().put('scale', 0.1)))

        self.assertEqual(component.window, 11)
        self.assertEqual(component.child.scale, 0.1)

    def test_option_handler_receives_tokens(self):
        component = TokenOnlyComponent()
        set_params(component, ParameterSet().put('k', 3))
        self.assertEqual(component.options, ['-k', '3'])

    def test_option_handler_tokens_keep_string_values(self):
        component = TokenOnlyComponent()
        set_params(component, ParameterSet().put('version', '3').put('k', 3))

        self.assertEqual(component.options, ['--version', "'3'", '-k', '3'])
        self.assertEqual(ParameterSet.from_tokens(component.options).get('version'), ['3'])

    def test_unconfigurable_target(self):
        with self.assertRaises(ConfigurationError) as ctx:
            set_params(Unconfigurable(), ParameterSet().put('k', 3))
        self.assertIn('not settable', str(ctx.exception))

    def test_failures_are_wrapped(self):
        with self.assertRaises(ConfigurationError) as ctx:
            set_params(WindowedComponent(), ParameterSet().put('window', 'wide'))
        self.assertIsInstance(ctx.exception.__cause__, ParameterTypeError)

    def test_unsupported_handler_reported_as_configuration_error(self):
        with self.assertRaises(ConfigurationError):
            set_params(ParameterHandler(), ParameterSet().put('k', 3))


if __name__ == '__main__':
    unittest.main()
