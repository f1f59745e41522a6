from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type, TypeVar

T = TypeVar('T')


class BeanRegistryInterface(ABC):
    """
    Port for a loaded registry of named, typed bean instances.

    Implementations are expected to be safe for concurrent read lookups once
    built.
    """

    @abstractmethod
    def get_bean(self, bean_type: Type[T]) -> T:
        """
        Resolve the unique bean assignable to ``bean_type``.

        Args:
            bean_type: The requested class or interface

        Returns:
            The matching bean instance

        Raises:
            NoSuchBeanError: If no bean matches
            NoUniqueBeanError: If several beans match and none is primary
        """
        pass

    @abstractmethod
    def get_bean_by_name(self, name: str, bean_type: Optional[Type[T]] = None) -> T:
        """
        Resolve a bean by its definition name.

        Args:
            name: The bean name
            bean_type: Optional type the bean must be an instance of

        Returns:
            The named bean instance

        Raises:
            NoSuchBeanError: If the name is unknown
            BeanResolutionError: If the bean is not a ``bean_type``
        """
        pass

    @abstractmethod
    def contains_bean(self, name: str) -> bool:
        pass

    @abstractmethod
    def bean_names(self) -> List[str]:
        pass

    @abstractmethod
    def beans_of_type(self, bean_type: Type[T]) -> Dict[str, T]:
        """Return every bean assignable to ``bean_type``, keyed by name."""
        pass
