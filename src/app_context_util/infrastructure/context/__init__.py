"""Injector-backed application context and its loader."""

from .application_context import ApplicationContext
from .context_loader import YamlApplicationContextLoader

__all__ = [
    "ApplicationContext",
    "YamlApplicationContextLoader",
]
