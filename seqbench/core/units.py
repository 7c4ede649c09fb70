# seqbench/core/units.py
"""
Parsing of contract amounts written as text, e.g. "10m" or "512MB".
"""

import re
from typing import Optional, Union

from .exceptions import ConfigurationError

_NANOS_PER_UNIT = {
    'ns': 1,
    'us': 1_000,
    'ms': 1_000_000,
    's': 1_000_000_000,
    'sec': 1_000_000_000,
    'm': 60 * 1_000_000_000,
    'min': 60 * 1_000_000_000,
    'h': 3600 * 1_000_000_000,
    'hr': 3600 * 1_000_000_000,
    'd': 86400 * 1_000_000_000,
}

_BYTES_PER_UNIT = {
    'b': 1,
    'kb': 1024,
    'mb': 1024 ** 2,
    'gb': 1024 ** 3,
    'tb': 1024 ** 4,
}

_AMOUNT_PATTERN = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*([a-zA-Z]*)\s*$')


def _parse(text: str, units: dict, default_unit: str, what: str) -> int:
    match = _AMOUNT_PATTERN.match(text)
    if not match:
        raise ConfigurationError(f"Cannot parse {what} amount '{text}'")
    number, unit = match.groups()
    unit = (unit or default_unit).lower()
    if unit not in units:
        raise ConfigurationError(
            f"Unknown {what} unit '{unit}' in '{text}'. Expected one of: {', '.join(units)}"
        )
    return int(float(number) * units[unit])


def parse_time_amount(value: Union[str, int, float, None]) -> Optional[int]:
    """Converts '90s', '10m', '1.5h' (or a bare number of seconds) to nanoseconds."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value * _NANOS_PER_UNIT['s'])
    return _parse(value, _NANOS_PER_UNIT, 's', 'time')


def parse_memory_amount(value: Union[str, int, float, None]) -> Optional[int]:
    """Converts '512MB', '2gb' (or a bare number of bytes) to bytes."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return _parse(value, _BYTES_PER_UNIT, 'b', 'memory')
