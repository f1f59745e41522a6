"""
Schema of application context configuration files.

A configuration source (YAML or JSON) is validated into a ``ContextFile``;
the ordered files of one load are merged into a single ``ContextDefinition``.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from app_context_util.core.model.base_schema import BaseSchema


class BeanScope(str, Enum):
    """Lifecycle of bean instances within one context."""
    SINGLETON = "singleton"
    PROTOTYPE = "prototype"


class BeanDefinition(BaseSchema):
    """
    Declarative description of one bean.

    Attributes:
        name: Unique bean name within the context.
        class_name: Import path (``pkg.mod:Class``) of the class to instantiate.
        factory: Import path of a callable producing the bean, instead of ``class``.
        type: Import path of the type used for lookups; defaults to the class
            or the factory's return annotation.
        scope: ``singleton`` (one cached instance) or ``prototype`` (new per lookup).
        lazy: Skip eager instantiation of a singleton during refresh.
        primary: Prefer this bean when a type lookup has several candidates.
        args: Keyword arguments; ``{"ref": "<bean name>"}`` injects another bean.
        init_method: Method called right after construction.
        destroy_method: Method called when the context closes; defaults to
            ``close()`` for closeable singletons.
    """

    name: str = Field(min_length=1)
    class_name: Optional[str] = Field(default=None, alias="class")
    factory: Optional[str] = None
    type: Optional[str] = None
    scope: BeanScope = BeanScope.SINGLETON
    lazy: bool = False
    primary: bool = False
    args: Dict[str, Any] = Field(default_factory=dict)
    init_method: Optional[str] = None
    destroy_method: Optional[str] = None

    @model_validator(mode='after')
    def validate_single_source(self) -> 'BeanDefinition':
        """Exactly one of ``class`` and ``factory`` must be declared."""
        if (self.class_name is None) == (self.factory is None):
            raise ValueError(
                f"Bean '{self.name}' must declare exactly one of 'class' or 'factory'"
            )
        return self

    @property
    def target(self) -> str:
        """Import path of the class or factory that produces this bean."""
        return self.class_name if self.class_name is not None else self.factory  # type: ignore[return-value]

    @property
    def is_singleton(self) -> bool:
        return self.scope == BeanScope.SINGLETON


class ContextFile(BaseSchema):
    """Content of a single configuration source."""

    imports: List[str] = Field(default_factory=list)
    properties: Dict[str, Any] = Field(default_factory=dict)
    modules: List[str] = Field(default_factory=list)
    beans: List[BeanDefinition] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_unique_bean_names(self) -> 'ContextFile':
        seen = set()
        duplicates = []
        for bean in self.beans:
            if bean.name in seen:
                duplicates.append(bean.name)
            seen.add(bean.name)
        if duplicates:
            raise ValueError(f"Duplicate bean names: {', '.join(duplicates)}")
        return self


class ContextDefinition(BaseSchema):
    """Merged result of all configuration sources of one context, in load order."""

    sources: List[str] = Field(default_factory=list)
    properties: Dict[str, Any] = Field(default_factory=dict)
    modules: List[str] = Field(default_factory=list)
    beans: List[BeanDefinition] = Field(default_factory=list)
