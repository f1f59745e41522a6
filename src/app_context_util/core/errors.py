"""Error taxonomy for application context loading, bean resolution and disposal."""
from typing import List, Optional, Sequence, Tuple


class ApplicationContextError(Exception):
    """Base class for every error raised by app_context_util."""


class InvalidArgumentError(ApplicationContextError, ValueError):
    """Caller-supplied arguments violate a precondition.

    Raised before any configuration source is touched.
    """


class ContextLoadError(ApplicationContextError):
    """The configuration sources could not be turned into a context."""


class ConfigSourceNotFoundError(ContextLoadError):
    """A configuration source locator does not point at a readable file."""

    def __init__(self, locator: str, message: Optional[str] = None) -> None:
        self.locator = locator
        super().__init__(message or f"Configuration source not found: {locator}")


class ConfigParseError(ContextLoadError):
    """A configuration source exists but is not valid YAML/JSON."""


class BeanDefinitionError(ContextLoadError):
    """A bean definition is invalid (schema, duplicate name, unknown class)."""


class PlaceholderResolutionError(ContextLoadError):
    """A ``${key}`` placeholder has no property, environment value or default."""


class BeanCreationError(ContextLoadError):
    """Instantiating or initialising a bean failed."""

    def __init__(self, bean_name: str, message: str) -> None:
        self.bean_name = bean_name
        super().__init__(f"Error creating bean '{bean_name}': {message}")


class BeanResolutionError(ApplicationContextError, LookupError):
    """A lookup did not identify exactly one bean."""


class NoSuchBeanError(BeanResolutionError):
    """No bean matches the requested type or name."""


class NoUniqueBeanError(BeanResolutionError):
    """More than one bean matches the requested type and none is primary."""

    def __init__(self, bean_type: type, candidates: Sequence[str]) -> None:
        self.bean_type = bean_type
        self.candidates = list(candidates)
        super().__init__(
            f"Expected a single bean of type {bean_type.__qualname__} "
            f"but found {len(self.candidates)}: {', '.join(self.candidates)}"
        )


class ContextDisposalError(ApplicationContextError):
    """Releasing the context's resources failed.

    ``failures`` lists every ``(bean name, exception)`` pair collected while
    closing; all destroy callbacks are attempted before this is raised.
    """

    def __init__(
        self,
        message: str,
        failures: Optional[List[Tuple[str, BaseException]]] = None,
    ) -> None:
        self.failures = failures or []
        super().__init__(message)


class ContextClosedError(ApplicationContextError, RuntimeError):
    """The context is not active: it has been closed or was never refreshed."""


class HandleDisposedError(ApplicationContextError, RuntimeError):
    """An accessor was called on a handle that is already closed."""


__all__ = [
    "ApplicationContextError",
    "InvalidArgumentError",
    "ContextLoadError",
    "ConfigSourceNotFoundError",
    "ConfigParseError",
    "BeanDefinitionError",
    "PlaceholderResolutionError",
    "BeanCreationError",
    "BeanResolutionError",
    "NoSuchBeanError",
    "NoUniqueBeanError",
    "ContextDisposalError",
    "ContextClosedError",
    "HandleDisposedError",
]
