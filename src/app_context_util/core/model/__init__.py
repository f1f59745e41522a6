from .base_schema import BaseSchema
from .bean_definition import BeanDefinition, BeanScope, ContextDefinition, ContextFile

__all__ = [
    "BaseSchema",
    "BeanDefinition",
    "BeanScope",
    "ContextDefinition",
    "ContextFile",
]
