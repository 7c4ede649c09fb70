"""
Nested parameter sets and their command-line style token form.
"""

import copy
import json
import math
import numbers
import re
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

FLAG_PATTERN = re.compile(r'^--?[A-Za-z_]')
NAME_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_.\-]*$')

# Delimiters around the token run of a nested parameter set
NESTED_START = '['
NESTED_END = ']'

# Wraps string values that would otherwise read back as another type
QUOTE = "'"


def is_flag(token: str) -> bool:
    """Whether a token names a parameter (``-k`` or ``--name``) rather than holding a value."""
    return bool(FLAG_PATTERN.match(token))


def flag_for(name: str) -> str:
    """Single-character names take one hyphen, longer names take two."""
    return f"-{name}" if len(name) == 1 else f"--{name}"


def _decode_scalar(token: str) -> Any:
    lowered = token.lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False
    if lowered in ('null', 'none'):
        return None
    try:
        return int(token)
    except ValueError:
        pass
    try:
        return float(token)
    except ValueError:
        return token


def _needs_quotes(text: str) -> bool:
    if not text or text.startswith(QUOTE):
        return True
    if is_flag(text) or text in (NESTED_START, NESTED_END):
        return True
    return not isinstance(_decode_scalar(text), str)


def encode_value(value: Any) -> str:
    """
    Writes a value as one token that decode_value() reads back unchanged.

    Strings that would otherwise read back as a number, boolean, null, flag
    or delimiter are wrapped in single quotes.
    """
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return 'null'
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        value = float(value)
        if math.isinf(value):
            # '-inf' would read back as a flag
            return '1e999' if value > 0 else '-1e999'
        return str(value)
    text = str(value)
    if _needs_quotes(text):
        return f"{QUOTE}{text}{QUOTE}"
    return text


def decode_value(token: str) -> Any:
    """Reads a value token back as bool, None, int or float where it parses as one."""
    if len(token) >= 2 and token.startswith(QUOTE) and token.endswith(QUOTE):
        return token[1:-1]
    return _decode_scalar(token)


class ParameterSet:
    """
    An ordered mapping from parameter name to a list of values.

    A value is a primitive, a string, or another ParameterSet holding the
    configuration of a sub-component. Names keep the order in which they were
    first inserted, so serialisation is deterministic. A name mapped to an
    empty list is present (a bare flag); a name never inserted is absent.

    The token form follows unix conventions: ``-k 3 --distance_measure [ -p 1 ]``.
    Nested sets are wrapped in ``[`` / ``]`` tokens so they can be parsed back
    without knowing which names hold sub-components. String values that would
    read back as another type are single-quoted.
    """

    def __init__(self, parameters: Optional[Mapping[str, Any]] = None):
        self._parameters: Dict[str, List[Any]] = {}
        if parameters:
            for name, values in parameters.items():
                if isinstance(values, (list, tuple)):
                    self.put(name, *values)
                else:
                    self.put(name, values)

    @staticmethod
    def _check_name(name: str) -> None:
        if not isinstance(name, str) or not NAME_PATTERN.match(name):
            raise ValueError(f"Invalid parameter name: {name!r}")

    def get(self, name: str) -> Optional[List[Any]]:
        """All values under a name, or None when the name is absent."""
        values = self._parameters.get(name)
        if values is None:
            return None
        return list(values)

    def put(self, name: str, *values: Any) -> 'ParameterSet':
        """Replace the values under a name. An existing name keeps its position."""
        self._check_name(name)
        self._parameters[name] = list(values)
        return self

    def add(self, name: str, *values: Any) -> 'ParameterSet':
        """Append values under a name, creating it if absent."""
        self._check_name(name)
        self._parameters.setdefault(name, []).extend(values)
        return self

    def names(self) -> List[str]:
        return list(self._parameters)

    def items(self) -> Iterator[Tuple[str, List[Any]]]:
        for name, values in self._parameters.items():
            yield name, list(values)

    def is_empty(self) -> bool:
        return not self._parameters

    def copy(self) -> 'ParameterSet':
        return copy.deepcopy(self)

    def __contains__(self, name: object) -> bool:
        return name in self._parameters

    def __iter__(self) -> Iterator[str]:
        return iter(self._parameters)

    def __len__(self) -> int:
        return len(self._parameters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterSet):
            return NotImplemented
        return self._parameters == other._parameters

    __hash__ = None

    def __str__(self) -> str:
        return ' '.join(self.to_tokens())

    def __repr__(self) -> str:
        return f"ParameterSet({self._parameters!r})"

    # Token form

    def to_tokens(self) -> List[str]:
        tokens: List[str] = []
        for name, values in self._parameters.items():
            tokens.append(flag_for(name))
            for value in values:
                if isinstance(value, ParameterSet):
                    tokens.append(NESTED_START)
                    tokens.extend(value.to_tokens())
                    tokens.append(NESTED_END)
                else:
                    tokens.append(encode_value(value))
        return tokens

    @classmethod
    def from_tokens(cls, tokens: Iterable[str]) -> 'ParameterSet':
        token_list = list(tokens)
        params, position = cls._parse_tokens(token_list, 0, nested=False)
        if position != len(token_list):
            raise ValueError(f"Unexpected '{NESTED_END}' at token {position}")
        return params

    @classmethod
    def _parse_tokens(cls, tokens: List[str], position: int, nested: bool) -> Tuple['ParameterSet', int]:
        params = cls()
        name: Optional[str] = None
        while position < len(tokens):
            token = tokens[position]
            if token == NESTED_END:
                if not nested:
                    return params, position
                return params, position + 1
            if is_flag(token):
                name = token[2:] if token.startswith('--') else token[1:]
                params.add(name)
                position += 1
                continue
            if name is None:
                raise ValueError(f"Value token {token!r} appears before any parameter name")
            if token == NESTED_START:
                child, position = cls._parse_tokens(tokens, position + 1, nested=True)
                params.add(name, child)
                continue
            params.add(name, decode_value(token))
            position += 1
        if nested:
            raise ValueError(f"Nested parameters under '{name}' are missing a closing '{NESTED_END}'")
        return params, position

    # Dictionary / JSON form, as used in YAML configuration files

    def to_dict(self) -> Dict[str, List[Any]]:
        return {
            name: [v.to_dict() if isinstance(v, ParameterSet) else v for v in values]
            for name, values in self._parameters.items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ParameterSet':
        """
        Build a set from a mapping. A scalar becomes a single value, a list
        becomes several values and a mapping becomes a nested set.
        """
        params = cls()
        for name, raw in (data or {}).items():
            items = raw if isinstance(raw, (list, tuple)) else [raw]
            params.put(name, *[cls.from_dict(item) if isinstance(item, Mapping) else item for item in items])
        return params

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> 'ParameterSet':
        return cls.from_dict(json.loads(json_str))
