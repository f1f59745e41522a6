import importlib
import logging
from typing import Any

logger = logging.getLogger(__name__)


def import_string(path: str) -> Any:
    """
    Import an attribute from its dotted path.

    Both ``package.module:Attr`` and ``package.module.Attr`` are accepted;
    the colon form also allows nested attributes (``pkg.mod:Outer.Inner``).

    Args:
        path: The import path

    Returns:
        The imported attribute

    Raises:
        ImportError: If the path is malformed, the module cannot be imported
            or it lacks the attribute
    """
    if not path or not path.strip():
        raise ImportError("Import path must not be empty")

    if ":" in path:
        module_name, _, attr_path = path.partition(":")
    else:
        module_name, _, attr_path = path.rpartition(".")

    if not module_name or not attr_path:
        raise ImportError(f"'{path}' is not a valid import path (expected 'module:attribute')")

    try:
        module = importlib.import_module(module_name)
    except (ValueError, TypeError) as e:
        raise ImportError(f"'{module_name}' is not an importable module name: {e}") from e
    target: Any = module
    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ImportError(f"'{module_name}' has no attribute '{attr_path}'") from e

    logger.debug(f"Imported {path}")
    return target
