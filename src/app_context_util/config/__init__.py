"""Configuration of the context loader."""

from .loader_settings import ContextLoaderSettings

__all__ = ["ContextLoaderSettings"]
