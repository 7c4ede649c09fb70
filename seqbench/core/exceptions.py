# seqbench/core/exceptions.py

class SeqbenchError(Exception):
    """Base class for exceptions in this package."""
    pass

class ConfigurationError(SeqbenchError):
    """Exception raised when a component or experiment cannot be configured as requested."""
    pass

class ParametersNotSupportedError(ConfigurationError):
    """Raised by components that do not override parameter setting."""
    pass

class ParameterTypeError(SeqbenchError):
    """Exception raised when a parameter value cannot be cast to the type a setter expects."""
    pass

class LifecycleError(SeqbenchError):
    """Exception raised when an experiment step is invoked out of order."""
    pass

class ComponentNotFoundError(SeqbenchError):
    """Exception raised when a component name cannot be resolved from the registry."""
    pass
