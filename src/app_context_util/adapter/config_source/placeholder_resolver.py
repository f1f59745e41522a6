"""Placeholder substitution for configuration values."""
import logging
import os
import re
from typing import Any, Dict, Mapping, Optional

from app_context_util.core.errors import PlaceholderResolutionError

logger = logging.getLogger(__name__)


class PlaceholderResolver:
    """
    Replace ``${key}`` and ``${key:default}`` placeholders.

    Values are looked up in the context properties, then (optionally) in the
    environment, then the inline default is used. A string consisting of a
    single placeholder keeps the type of the resolved value; placeholders
    embedded in longer strings are interpolated as text.
    """

    # ${key} or ${key:default}
    PLACEHOLDER_PATTERN = re.compile(r'\$\{([^}:]+)(?::([^}]*))?\}')

    def __init__(
        self,
        properties: Optional[Mapping[str, Any]] = None,
        use_environment: bool = True,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._properties: Dict[str, Any] = dict(properties or {})
        self._use_environment = use_environment
        self._environ = environ

    def resolve(self, value: Any) -> Any:
        """Recursively substitute placeholders in strings, lists and dicts."""
        if isinstance(value, str):
            return self._resolve_string(value)
        elif isinstance(value, dict):
            return {k: self.resolve(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self.resolve(v) for v in value]
        else:
            return value

    def _resolve_string(self, value: str) -> Any:
        full_match = self.PLACEHOLDER_PATTERN.fullmatch(value)
        if full_match:
            return self._lookup(full_match.group(1), full_match.group(2))

        def replace_placeholder(match: re.Match) -> str:
            return str(self._lookup(match.group(1), match.group(2)))

        return self.PLACEHOLDER_PATTERN.sub(replace_placeholder, value)

    def _lookup(self, key: str, default: Optional[str]) -> Any:
        key = key.strip()
        if key in self._properties:
            return self._properties[key]

        if self._use_environment:
            environ = os.environ if self._environ is None else self._environ
            env_value = environ.get(key)
            if env_value is not None:
                logger.debug(f"Resolved placeholder from environment: {key}")
                return env_value

        if default is not None:
            logger.debug(f"Using default value for placeholder: {key}")
            return default

        raise PlaceholderResolutionError(
            f"Could not resolve placeholder '${{{key}}}': no property, environment variable or default"
        )
