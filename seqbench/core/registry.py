# seqbench/core/registry.py
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from .exceptions import ComponentNotFoundError

logger = logging.getLogger(__name__)


class ComponentRegistry:
    """
    Name-based lookup of classifiers and distance measures.

    Experiments never consult the registry themselves; callers such as the
    command-line runner resolve a component here and hand the instance over.
    Unlike a service container, resolution builds a fresh instance each time
    unless a provider was registered as a singleton, since one component
    instance should not be shared between independent experiments.
    """

    def __init__(self, parent: Optional['ComponentRegistry'] = None):
        self._instances: Dict[str, Any] = {}
        self._providers: Dict[str, Dict[str, Any]] = {}
        self._parent = parent

    def _warn_if_registered(self, name: str):
        if name in self._instances or name in self._providers:
            logger.info(f"Component '{name}' is already registered. Overwriting.")
            self._instances.pop(name, None)
            self._providers.pop(name, None)

    def register_instance(self, name: str, instance: Any):
        self._warn_if_registered(name)
        self._instances[name] = instance
        logger.debug(f"Instance registered for '{name}': {type(instance).__name__}")

    def register_type(self,
                      name: str,
                      component_type: Type,
                      singleton: bool = False,
                      constructor_args: Optional[Tuple[Any, ...]] = None,
                      constructor_kwargs: Optional[Dict[str, Any]] = None):
        """
        Registers a class. The registry instantiates it when resolved.

        Args:
            name: The name to register the component under.
            component_type: The class to be instantiated.
            singleton: If True, instantiate once and cache. Defaults to False.
            constructor_args: Positional arguments for the constructor.
            constructor_kwargs: Keyword arguments for the constructor.
        """
        self._register_provider(name, component_type, singleton, constructor_args, constructor_kwargs)
        logger.debug(f"Type '{component_type.__name__}' registered as '{name}' (singleton={singleton})")

    def register_factory(self,
                         name: str,
                         factory: Callable[..., Any],
                         singleton: bool = False,
                         factory_args: Optional[Tuple[Any, ...]] = None,
                         factory_kwargs: Optional[Dict[str, Any]] = None):
        self._register_provider(name, factory, singleton, factory_args, factory_kwargs)
        logger.debug(f"Factory '{getattr(factory, '__name__', factory)}' registered as '{name}' (singleton={singleton})")

    def _register_provider(self, name, provider, singleton, args, kwargs):
        self._warn_if_registered(name)
        self._providers[name] = {
            'provider': provider,
            'args': args if args is not None else (),
            'kwargs': kwargs if kwargs is not None else {},
            'singleton': singleton,
        }

    def resolve(self, name: str) -> Any:
        if name in self._instances:
            logger.debug(f"Resolving '{name}' from cached instance.")
            return self._instances[name]

        if name in self._providers:
            provider_info = self._providers[name]
            try:
                instance = provider_info['provider'](*provider_info['args'], **provider_info['kwargs'])
            except Exception as e:
                logger.error(f"Error creating component '{name}': {e}", exc_info=True)
                raise ComponentNotFoundError(f"Failed to create component '{name}'. Error: {e}") from e
            if provider_info['singleton']:
                self._instances[name] = instance
            return instance

        if self._parent:
            try:
                return self._parent.resolve(name)
            except ComponentNotFoundError:
                pass

        raise ComponentNotFoundError(
            f"Component '{name}' not found. Known components: {', '.join(self.names()) or 'none'}"
        )

    def is_registered(self, name: str, check_parent: bool = True) -> bool:
        if name in self._instances or name in self._providers:
            return True
        if check_parent and self._parent:
            return self._parent.is_registered(name)
        return False

    def names(self) -> List[str]:
        names = list(self._instances) + [n for n in self._providers if n not in self._instances]
        if self._parent:
            names += [n for n in self._parent.names() if n not in names]
        return names

    def reset(self) -> None:
        """Clear all registrations and instances from this registry."""
        self._instances.clear()
        self._providers.clear()
        logger.info("Registry reset - all registrations cleared.")
