"""Optional disposal capability for registries and beans."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class Closeable(Protocol):
    """
    Anything exposing a ``close()`` method that releases held resources.

    Not every registry (or bean) owns releasable resources, so callers check
    ``isinstance(obj, Closeable)`` and only then call ``close()``.
    """

    def close(self) -> None:
        ...
