# seqbench/core/config.py
import copy
import logging
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_MISSING = object()


class SimpleConfigLoader:
    """
    Loads an experiment configuration from a YAML file.

    The loaded data is deep-copied on load and on every read, so callers can
    mutate what they get back without affecting later lookups.
    """

    def __init__(self, config_file_path: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        self.config_file_path: Optional[str] = config_file_path
        self._config_data: Dict[str, Any] = {}

        if config_file_path is not None:
            self._load_and_shield_config()
        elif data is not None:
            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration data must be a mapping, got {type(data).__name__}")
            self._config_data = copy.deepcopy(data)
        logger.debug(f"ConfigLoader {id(self)} ready with top-level keys: {list(self._config_data.keys())}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimpleConfigLoader':
        return cls(data=data)

    def _load_and_shield_config(self):
        """Loads the YAML file and keeps a private deep copy of its contents."""
        try:
            with open(self.config_file_path, 'r') as f:
                raw_data = yaml.safe_load(f)
        except FileNotFoundError as e:
            logger.error(f"Configuration file not found: {self.config_file_path}")
            raise ConfigurationError(f"Configuration file not found: {self.config_file_path}") from e
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file '{self.config_file_path}': {e}")
            raise ConfigurationError(f"Error parsing YAML configuration file: {e}") from e

        if raw_data is None:
            logger.warning(f"Configuration file '{self.config_file_path}' is empty. Using empty config.")
            raw_data = {}
        elif not isinstance(raw_data, dict):
            raise ConfigurationError(
                f"Configuration file '{self.config_file_path}' must contain a mapping at the top level, "
                f"found {type(raw_data).__name__}"
            )
        self._config_data = copy.deepcopy(raw_data)
        logger.debug(f"ConfigLoader {id(self)}: configuration loaded from '{self.config_file_path}'")

    def get(self, config_key: str, default_value: Any = None) -> Any:
        """Looks up a key, using dots to descend into nested mappings."""
        current_level_data: Any = self._config_data
        for key_part in config_key.split('.'):
            if not isinstance(current_level_data, dict):
                logger.debug(f"Expected mapping at '{key_part}' of '{config_key}', found {type(current_level_data).__name__}")
                return default_value
            current_level_data = current_level_data.get(key_part, _MISSING)
            if current_level_data is _MISSING:
                logger.debug(f"Key '{config_key}' not found. Returning default.")
                return default_value
        if isinstance(current_level_data, (dict, list)):
            return copy.deepcopy(current_level_data)
        return current_level_data

    def set(self, config_key: str, value: Any) -> None:
        """Sets a (possibly dotted) key, creating intermediate mappings."""
        parts = config_key.split('.')
        current_level_data = self._config_data
        for key_part in parts[:-1]:
            child = current_level_data.get(key_part)
            if not isinstance(child, dict):
                child = {}
                current_level_data[key_part] = child
            current_level_data = child
        current_level_data[parts[-1]] = copy.deepcopy(value)

    def get_all_config(self) -> Dict[str, Any]:
        """Returns a deep copy of the entire configuration."""
        return copy.deepcopy(self._config_data)

    def reload_config(self):
        if self.config_file_path is None:
            logger.debug("Configuration was built in memory; nothing to reload.")
            return
        logger.debug(f"Reloading configuration from '{self.config_file_path}'...")
        self._load_and_shield_config()
