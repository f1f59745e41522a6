"""Read application context configuration sources (JSON, YAML)."""
import json
import logging
import os
import posixpath
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml
from pydantic import ValidationError

from app_context_util.core.errors import (
    BeanDefinitionError,
    ConfigParseError,
    ConfigSourceNotFoundError,
)
from app_context_util.core.model.bean_definition import ContextFile

logger = logging.getLogger(__name__)

RESOURCE_PREFIX = "resource:"

Locator = Union[str, os.PathLike]


@dataclass(frozen=True)
class LoadedSource:
    """A parsed configuration source together with its canonical locator."""
    locator: str
    content: ContextFile


class ConfigSourceReader:
    """
    Locate, read and validate configuration sources.

    Locators are filesystem paths or ``resource:<package>/<path>`` for files
    shipped inside an importable package. ``imports`` declared by a source are
    read depth-first, before the importing source, relative to its location.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def read_all(self, locators: Sequence[Locator]) -> List[LoadedSource]:
        """
        Read every source in order, expanding imports.

        Args:
            locators: Ordered configuration source locators

        Returns:
            Loaded sources in application order (imports first)
        """
        loaded: List[LoadedSource] = []
        for locator in locators:
            self._read_recursive(self._canonical(os.fspath(locator)), loaded, [])
        return loaded

    def read(self, locator: Locator) -> ContextFile:
        """Read a single source without expanding its imports."""
        canonical = self._canonical(os.fspath(locator))
        return self._parse(canonical, self._read_text(canonical))

    def _read_recursive(self, locator: str, loaded: List[LoadedSource], stack: List[str]) -> None:
        if locator in stack:
            cycle = " -> ".join(stack + [locator])
            raise ConfigParseError(f"Circular import between configuration sources: {cycle}")

        content = self._parse(locator, self._read_text(locator))
        logger.debug(f"Read configuration source {locator} ({len(content.beans)} beans)")

        stack.append(locator)
        try:
            for imported in content.imports:
                self._read_recursive(self._relative_to(locator, imported), loaded, stack)
        finally:
            stack.pop()

        loaded.append(LoadedSource(locator=locator, content=content))

    @staticmethod
    def _canonical(locator: str) -> str:
        if not locator or not locator.strip():
            raise ConfigSourceNotFoundError(locator, "Configuration source locator must not be empty")
        if locator.startswith(RESOURCE_PREFIX):
            package, _, path = locator[len(RESOURCE_PREFIX):].partition("/")
            if not package.strip():
                raise ConfigSourceNotFoundError(locator, f"Resource locator {locator!r} does not name a package")
            return f"{RESOURCE_PREFIX}{package}/{posixpath.normpath(path)}"
        return str(Path(locator).expanduser().resolve())

    def _relative_to(self, parent: str, imported: str) -> str:
        if imported.startswith(RESOURCE_PREFIX) or os.path.isabs(imported):
            return self._canonical(imported)
        if parent.startswith(RESOURCE_PREFIX):
            package, _, path = parent[len(RESOURCE_PREFIX):].partition("/")
            return self._canonical(
                f"{RESOURCE_PREFIX}{package}/{posixpath.join(posixpath.dirname(path), imported)}"
            )
        return self._canonical(str(Path(parent).parent / imported))

    def _read_text(self, locator: str) -> str:
        if locator.startswith(RESOURCE_PREFIX):
            return self._read_resource(locator)

        path = Path(locator)
        if not path.is_file():
            raise ConfigSourceNotFoundError(locator)
        try:
            return path.read_text(encoding=self._encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigParseError(f"Could not read configuration source {locator}: {e}") from e

    def _read_resource(self, locator: str) -> str:
        package, _, path = locator[len(RESOURCE_PREFIX):].partition("/")
        try:
            resource = resources.files(package).joinpath(*path.split("/"))
        except ModuleNotFoundError as e:
            raise ConfigSourceNotFoundError(locator, f"Package '{package}' not found for {locator}") from e
        except (ValueError, TypeError) as e:
            raise ConfigSourceNotFoundError(locator, f"'{package}' is not an importable package for {locator}: {e}") from e

        if not resource.is_file():
            raise ConfigSourceNotFoundError(locator)
        try:
            return resource.read_text(encoding=self._encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigParseError(f"Could not read configuration source {locator}: {e}") from e

    def _parse(self, locator: str, text: str) -> ContextFile:
        data = self._load_data(locator, text)
        try:
            return ContextFile.model_validate(data)
        except ValidationError as e:
            raise BeanDefinitionError(f"Invalid configuration source {locator}: {e}") from e

    @staticmethod
    def _load_data(locator: str, text: str) -> Dict[str, Any]:
        lowered = locator.lower()
        data: Optional[Any]
        if lowered.endswith(".json"):
            try:
                data = json.loads(text) if text.strip() else None
            except json.JSONDecodeError as e:
                raise ConfigParseError(f"Invalid JSON in {locator}: {e}") from e
        elif lowered.endswith((".yaml", ".yml")):
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise ConfigParseError(f"Invalid YAML in {locator}: {e}") from e
        else:
            raise ConfigParseError(f"Unsupported config file format: {locator}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigParseError(
                f"Configuration source {locator} must contain a mapping, got {type(data).__name__}"
            )
        return data
