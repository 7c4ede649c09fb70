"""
Parameter handling interfaces for configurable components.

Components describe their configuration as a ParameterSet by overriding
get_params() and set_params(). The flattened option-token view
(get_options / set_options) used by token-only components is derived from
those two methods, so a component never serialises its own options.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Sequence, Type, TypeVar

from ..core.exceptions import ConfigurationError, ParametersNotSupportedError, ParameterTypeError
from .parameter import ParameterSet, decode_value

logger = logging.getLogger(__name__)

A = TypeVar('A')


class OptionHandler(ABC):
    """Components configured through a flat list of option tokens."""

    @abstractmethod
    def get_options(self) -> List[str]:
        pass

    @abstractmethod
    def set_options(self, options: Sequence[str]) -> None:
        pass


class ParameterHandler(OptionHandler):
    """
    Components configured through a ParameterSet.

    Subclasses override get_params() and set_params(). The defaults describe
    a component with no parameters that refuses to be configured.
    """

    def get_params(self) -> ParameterSet:
        return ParameterSet()

    def set_params(self, params: ParameterSet) -> None:
        raise ParametersNotSupportedError(
            f"{type(self).__name__} does not support setting parameters. "
            f"Override set_params() and get_params()."
        )

    def list_params(self) -> List[str]:
        return self.get_params().names()

    def get_options(self) -> List[str]:
        return self.get_params().to_tokens()

    def set_options(self, options: Sequence[str]) -> None:
        self.set_params(ParameterSet.from_tokens(options))


def _cast(value: Any, expected_type: Type[A]) -> A:
    if expected_type is bool:
        decoded = decode_value(value) if isinstance(value, str) else value
        if isinstance(decoded, bool):
            return decoded
        raise TypeError(f"{value!r} is not a boolean")
    if isinstance(value, expected_type):
        return value
    if expected_type is ParameterSet:
        raise TypeError(f"{value!r} is not a nested parameter set")
    if expected_type is int and isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{value!r} is not integral")
    return expected_type(value)


def set_param(params: ParameterSet, name: str, setter: Callable[[A], Any], expected_type: Type[A]) -> None:
    """
    Feed every value registered under ``name`` to ``setter``, cast to ``expected_type``.

    Does nothing when the name is absent, leaving the component's default in
    place. Several values mean several setter calls, in order.
    """
    values = params.get(name)
    if values is None:
        return
    for value in values:
        try:
            cast_value = _cast(value, expected_type)
        except (TypeError, ValueError) as e:
            raise ParameterTypeError(
                f"Cannot cast {{{value!r}}} to {{{expected_type.__name__}}} for parameter {{{name}}}"
            ) from e
        setter(cast_value)


def set_params(target: Any, params: ParameterSet) -> None:
    """
    Configure ``target`` with ``params`` using whichever interface it supports.

    ParameterHandlers receive the set directly, OptionHandlers receive its
    tokens. Anything else, and any failure inside the target, is reported as
    a ConfigurationError.
    """
    try:
        if isinstance(target, ParameterHandler):
            target.set_params(params)
        elif isinstance(target, OptionHandler):
            target.set_options(params.to_tokens())
        else:
            raise ConfigurationError(f"parameters not settable on {type(target).__name__}")
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to set parameters on {type(target).__name__}: {e}") from e
