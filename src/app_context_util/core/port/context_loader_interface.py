from abc import ABC, abstractmethod
from typing import Sequence

from app_context_util.core.port.bean_registry_interface import BeanRegistryInterface


class ContextLoaderInterface(ABC):
    """Port for the collaborator that builds a registry from configuration sources."""

    @abstractmethod
    def load(self, config_sources: Sequence[str]) -> BeanRegistryInterface:
        """
        Build a registry from the given sources.

        Sources are applied in order; definitions in later sources may
        override definitions from earlier ones.

        Args:
            config_sources: Ordered, non-empty sequence of source locators

        Returns:
            A fully built registry

        Raises:
            ContextLoadError: If the sources cannot be located, parsed or wired
        """
        pass
