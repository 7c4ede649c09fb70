"""
Core infrastructure: exceptions, configuration, logging and the component registry.
"""

from .exceptions import (
    SeqbenchError,
    ConfigurationError,
    ParametersNotSupportedError,
    ParameterTypeError,
    LifecycleError,
    ComponentNotFoundError,
)
from .config import SimpleConfigLoader
from .registry import ComponentRegistry
from .units import parse_time_amount, parse_memory_amount

__all__ = [
    'SeqbenchError',
    'ConfigurationError',
    'ParametersNotSupportedError',
    'ParameterTypeError',
    'LifecycleError',
    'ComponentNotFoundError',
    'SimpleConfigLoader',
    'ComponentRegistry',
    'parse_time_amount',
    'parse_memory_amount',
]
