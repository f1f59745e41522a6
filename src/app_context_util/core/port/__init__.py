"""Ports implemented by registries and registry loaders."""

from .bean_registry_interface import BeanRegistryInterface
from .closeable import Closeable
from .context_loader_interface import ContextLoaderInterface

__all__ = [
    "BeanRegistryInterface",
    "Closeable",
    "ContextLoaderInterface",
]
