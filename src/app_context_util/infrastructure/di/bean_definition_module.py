"""DI module exposing application context beans to the injector."""
import logging
from typing import TYPE_CHECKING

from injector import Binder, Module

from app_context_util.infrastructure.di.bean_provider import BeanProvider

if TYPE_CHECKING:
    from app_context_util.infrastructure.context.application_context import ApplicationContext

logger = logging.getLogger(__name__)


class BeanDefinitionModule(Module):
    """
    Binds every bean type (and each unambiguous base class) to its bean.

    This lets classes with ``@inject`` constructors, whether declared as beans
    or bound by other modules, receive context beans by type. Installed after
    user modules so bean definitions take precedence.
    """

    def __init__(self, context: "ApplicationContext") -> None:
        self._context = context

    def configure(self, binder: Binder) -> None:
        for interface, bean_name in self._context.autowire_candidates().items():
            binder.bind(interface, to=BeanProvider(self._context, bean_name))
            logger.debug(f"Bound {interface.__qualname__} to bean '{bean_name}'")
