"""App Context Util.

Loads an injector-backed application context from YAML/JSON configuration
sources and hands out a typed bean with deterministic teardown.
"""

__version__ = "0.1.0"

from .context_handle import ApplicationContextHandle, get_bean
from .config.loader_settings import ContextLoaderSettings
from .core.errors import (
    ApplicationContextError,
    BeanCreationError,
    BeanDefinitionError,
    BeanResolutionError,
    ConfigParseError,
    ConfigSourceNotFoundError,
    ContextClosedError,
    ContextDisposalError,
    ContextLoadError,
    HandleDisposedError,
    InvalidArgumentError,
    NoSuchBeanError,
    NoUniqueBeanError,
    PlaceholderResolutionError,
)
from .core.port import BeanRegistryInterface, Closeable, ContextLoaderInterface
from .infrastructure.context import ApplicationContext, YamlApplicationContextLoader

__all__ = [
    # Handle
    "ApplicationContextHandle",
    "get_bean",
    # Ports
    "BeanRegistryInterface",
    "Closeable",
    "ContextLoaderInterface",
    # Default implementations
    "ApplicationContext",
    "ContextLoaderSettings",
    "YamlApplicationContextLoader",
    # Errors
    "ApplicationContextError",
    "BeanCreationError",
    "BeanDefinitionError",
    "BeanResolutionError",
    "ConfigParseError",
    "ConfigSourceNotFoundError",
    "ContextClosedError",
    "ContextDisposalError",
    "ContextLoadError",
    "HandleDisposedError",
    "InvalidArgumentError",
    "NoSuchBeanError",
    "NoUniqueBeanError",
    "PlaceholderResolutionError",
]
