"""
Typed handle to a single bean of an application context.

Loads an application context from one or more configuration sources, resolves
one bean of a requested type, and closes the context when the handle is
closed. The context may be shared by reader threads; closing must be done by
a single owner.

Usage:
    with ApplicationContextHandle(MonsterDao, "jdbc.yaml", "dao.yaml") as handle:
        dao = handle.bean
        template = handle.context.get_bean(JdbcTemplate)

    # one-off lookup, the context is closed before returning
    dao = get_bean(MonsterDao, "jdbc.yaml", "dao.yaml")
"""
import logging
import os
from typing import Generic, Optional, Tuple, Type, TypeVar, Union

from app_context_util.config.loader_settings import ContextLoaderSettings
from app_context_util.core.errors import (
    ApplicationContextError,
    ContextDisposalError,
    HandleDisposedError,
    InvalidArgumentError,
    NoSuchBeanError,
)
from app_context_util.core.port.bean_registry_interface import BeanRegistryInterface
from app_context_util.core.port.closeable import Closeable
from app_context_util.core.port.context_loader_interface import ContextLoaderInterface
from app_context_util.infrastructure.context.context_loader import YamlApplicationContextLoader

logger = logging.getLogger(__name__)

T = TypeVar('T')

ConfigSource = Union[str, os.PathLike]


class ApplicationContextHandle(Generic[T]):
    """
    Owns an application context and the one bean of type ``T`` resolved from it.

    Construction is all-or-nothing: arguments are validated before any source
    is read, and if the bean cannot be resolved the freshly loaded context is
    closed before the error propagates. The caller owns the handle and must
    close it, preferably with a ``with`` block.
    """

    def __init__(
        self,
        bean_type: Type[T],
        *config_sources: ConfigSource,
        loader: Optional[ContextLoaderInterface] = None,
    ) -> None:
        """
        Load the context from ``config_sources`` and resolve the bean of ``bean_type``.

        Args:
            bean_type: Class or interface of the bean to resolve (e.g. ``MonsterDao``)
            config_sources: One or more configuration sources, applied in order
            loader: Registry-loading collaborator; defaults to the YAML/JSON loader
                configured from ``APP_CONTEXT__*`` environment variables

        Raises:
            InvalidArgumentError: If no source is given, a source is blank, or
                ``bean_type`` is missing or not a class
            ContextLoadError: If the context cannot be loaded
            BeanResolutionError: If zero or several beans match ``bean_type``
        """
        sources = _validate_sources(config_sources)
        if bean_type is None:
            raise InvalidArgumentError("bean_type must not be None")
        if not isinstance(bean_type, type):
            raise InvalidArgumentError(f"bean_type must be a class, got {bean_type!r}")

        if loader is None:
            loader = _default_loader()

        context = loader.load(sources)
        try:
            bean = context.get_bean(bean_type)
            if bean is None:
                raise NoSuchBeanError(f"Registry returned no bean for type {bean_type.__qualname__}")
        except Exception:
            _close_after_failure(context)
            raise

        self._context: BeanRegistryInterface = context
        self._bean: T = bean
        self._bean_type = bean_type
        self._closed = False
        logger.debug(f"Resolved {bean_type.__qualname__} from {', '.join(sources)}")

    @classmethod
    def resolve(
        cls,
        bean_type: Type[T],
        *config_sources: ConfigSource,
        loader: Optional[ContextLoaderInterface] = None,
    ) -> T:
        """
        Resolve one bean and close the context before returning it.

        The context is loaded again on every call, so this is meant for
        one-off lookups; keep a handle open for repeated access.

        Raises:
            InvalidArgumentError, ContextLoadError, BeanResolutionError: As for the constructor
            ApplicationContextError: If closing the context failed (the
                ``ContextDisposalError`` is chained as the cause)
        """
        handle = cls(bean_type, *config_sources, loader=loader)
        bean = handle.bean
        try:
            handle.close()
        except ContextDisposalError as e:
            raise ApplicationContextError(
                f"Resolved {bean_type.__qualname__} but failed to close the application context: {e}"
            ) from e
        return bean

    @property
    def context(self) -> BeanRegistryInterface:
        """The loaded registry, for looking up further beans."""
        self._assert_open()
        return self._context

    @property
    def bean(self) -> T:
        """The bean resolved at construction; never ``None``."""
        self._assert_open()
        return self._bean

    @property
    def bean_type(self) -> Type[T]:
        return self._bean_type

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Release the context's resources.

        Only registries satisfying ``Closeable`` are closed; others are left
        untouched. Calling ``close()`` again is a no-op.

        Raises:
            ContextDisposalError: If the registry failed to release its resources
        """
        if self._closed:
            return
        self._closed = True

        if not isinstance(self._context, Closeable):
            logger.debug(f"{type(self._context).__name__} is not closeable, nothing to release")
            return
        try:
            self._context.close()
        except ContextDisposalError:
            raise
        except Exception as e:
            raise ContextDisposalError(f"Failed to close {type(self._context).__name__}: {e}") from e

    def __enter__(self) -> "ApplicationContextHandle[T]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__}[{self._bean_type.__qualname__}] {state}>"

    def _assert_open(self) -> None:
        if self._closed:
            raise HandleDisposedError(
                f"Handle for {self._bean_type.__qualname__} has been closed"
            )


def get_bean(
    bean_type: Type[T],
    *config_sources: ConfigSource,
    loader: Optional[ContextLoaderInterface] = None,
) -> T:
    """Convenience function to resolve a single bean; see ``ApplicationContextHandle.resolve``."""
    return ApplicationContextHandle.resolve(bean_type, *config_sources, loader=loader)


def _validate_sources(config_sources: Tuple[ConfigSource, ...]) -> Tuple[str, ...]:
    if not config_sources:
        raise InvalidArgumentError(
            "config_sources must not be empty: at least one configuration source is required"
        )
    sources = []
    for source in config_sources:
        if not isinstance(source, (str, os.PathLike)):
            raise InvalidArgumentError(f"Configuration source must be a path or string, got {source!r}")
        locator = os.fspath(source)
        if not isinstance(locator, str) or not locator.strip():
            raise InvalidArgumentError("Configuration source must not be blank")
        sources.append(locator)
    return tuple(sources)


def _default_loader() -> ContextLoaderInterface:
    return YamlApplicationContextLoader(ContextLoaderSettings.from_env())


def _close_after_failure(context: BeanRegistryInterface) -> None:
    if not isinstance(context, Closeable):
        return
    try:
        context.close()
    except Exception as e:
        logger.warning(f"Failed to close application context after failed bean resolution: {e}")
