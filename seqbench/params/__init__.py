"""
Parameter sets and the interfaces used to propagate them into components.
"""

from .parameter import ParameterSet
from .handler import OptionHandler, ParameterHandler, set_param, set_params

__all__ = [
    'ParameterSet',
    'OptionHandler',
    'ParameterHandler',
    'set_param',
    'set_params',
]
