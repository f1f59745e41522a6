from .bean_definition_module import BeanDefinitionModule
from .bean_provider import BeanProvider

__all__ = ["BeanDefinitionModule", "BeanProvider"]
