"""Reading and placeholder substitution of configuration sources."""

from .config_source_reader import RESOURCE_PREFIX, ConfigSourceReader, LoadedSource
from .placeholder_resolver import PlaceholderResolver

__all__ = [
    "RESOURCE_PREFIX",
    "ConfigSourceReader",
    "LoadedSource",
    "PlaceholderResolver",
]
