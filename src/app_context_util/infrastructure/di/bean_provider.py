from typing import TYPE_CHECKING, TypeVar

from injector import Injector, Provider

if TYPE_CHECKING:
    from app_context_util.infrastructure.context.application_context import ApplicationContext

T = TypeVar('T')


class BeanProvider(Provider[T]):
    """
    Injector provider that delegates to a named bean of an application context.

    Scope handling (singleton caching, prototypes) stays with the context, so
    the binding itself is unscoped.
    """

    def __init__(self, context: "ApplicationContext", bean_name: str) -> None:
        self._context = context
        self._bean_name = bean_name

    @property
    def bean_name(self) -> str:
        return self._bean_name

    def get(self, injector: Injector) -> T:
        return self._context.get_bean_by_name(self._bean_name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._bean_name!r})"
