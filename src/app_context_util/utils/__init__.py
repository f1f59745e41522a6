from .import_utils import import_string

__all__ = ["import_string"]
