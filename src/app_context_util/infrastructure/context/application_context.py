"""Application context: a registry of beans built on the injector library."""
import inspect
import logging
import threading
import typing
from abc import ABC
from typing import Any, Callable, Dict, Generic, List, Optional, Protocol, Set, Tuple, Type, TypeVar

from injector import Binder, Injector, Module

from app_context_util.core.errors import (
    ApplicationContextError,
    BeanCreationError,
    BeanDefinitionError,
    BeanResolutionError,
    ContextClosedError,
    ContextDisposalError,
    NoSuchBeanError,
    NoUniqueBeanError,
)
from app_context_util.core.model.bean_definition import BeanDefinition, ContextDefinition
from app_context_util.core.port.bean_registry_interface import BeanRegistryInterface
from app_context_util.core.port.closeable import Closeable
from app_context_util.infrastructure.di.bean_definition_module import BeanDefinitionModule
from app_context_util.utils.import_utils import import_string

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Bases never used as autowiring keys
_NON_AUTOWIRE_BASES = (object, ABC, Generic, Protocol)

# Bound by every Injector itself, never exposed as beans
_INJECTOR_INTERNALS = (Injector, Binder)


class ApplicationContext(BeanRegistryInterface):
    """
    Registry of beans declared by a ``ContextDefinition``.

    Construction of beans is delegated to an ``injector.Injector``: declared
    ``args`` are passed as keyword arguments and any remaining ``@inject``
    parameters are autowired from other beans or from the configured modules.

    Lifecycle:
        context = ApplicationContext(definition)
        context.refresh()        # import classes, wire injector, create eager singletons
        pool = context.get_bean(ConnectionPool)
        context.close()          # destroy singletons in reverse creation order

    Lookups and singleton creation are serialized by a re-entrant lock, so a
    refreshed context may be shared by reader threads. ``close()`` must not
    race with lookups.
    """

    def __init__(self, definition: ContextDefinition, eager_init: bool = True) -> None:
        self._definition = definition
        self._definitions: Dict[str, BeanDefinition] = {bean.name: bean for bean in definition.beans}
        self._eager_init = eager_init
        self._targets: Dict[str, Callable[..., Any]] = {}
        self._bean_types: Dict[str, type] = {}
        self._singletons: Dict[str, Any] = {}
        self._creation_order: List[str] = []
        self._in_creation: Set[str] = set()
        self._lock = threading.RLock()
        self._injector: Optional[Injector] = None
        self._refreshed = False
        self._closed = False

    @property
    def sources(self) -> List[str]:
        return list(self._definition.sources)

    @property
    def injector(self) -> Injector:
        """The underlying injector, for callers that need direct access."""
        self._assert_active()
        return self._injector  # type: ignore[return-value]

    @property
    def active(self) -> bool:
        return self._refreshed and not self._closed

    @property
    def closed(self) -> bool:
        return self._closed

    def refresh(self) -> None:
        """
        Import bean classes and modules, build the injector and create eager singletons.

        Raises:
            BeanDefinitionError: If a class, factory, type or module cannot be imported
            BeanCreationError: If an eager singleton cannot be created
            ContextClosedError: If the context was already closed
        """
        with self._lock:
            if self._closed:
                raise ContextClosedError("Cannot refresh an application context that has been closed")
            if self._refreshed:
                return

            for name, definition in self._definitions.items():
                self._targets[name], self._bean_types[name] = self._resolve_target(definition)

            modules: List[Any] = [self._load_module(path) for path in self._definition.modules]
            modules.append(BeanDefinitionModule(self))
            try:
                self._injector = Injector(modules, auto_bind=False)
            except Exception as e:
                raise BeanDefinitionError(f"Failed to install injector modules: {e}") from e
            self._refreshed = True

            if self._eager_init:
                for name, definition in self._definitions.items():
                    if definition.is_singleton and not definition.lazy:
                        self._get_or_create(name)

            logger.info(
                f"Application context refreshed ({len(self._definitions)} beans, "
                f"{len(self._singletons)} singletons created) from {', '.join(self._definition.sources)}"
            )

    def get_bean(self, bean_type: Type[T]) -> T:
        """
        Resolve the unique bean assignable to ``bean_type``.

        Types bound only by configured injector modules are resolved through
        the injector. Those instances belong to the module: the context does
        not destroy them on ``close()``.
        """
        self._assert_active()
        candidates = self._candidate_names(bean_type)
        if not candidates:
            if self._is_module_bound(bean_type):
                return self._get_from_injector(bean_type)
            raise NoSuchBeanError(f"No bean of type {_type_name(bean_type)} is defined")

        selected = self._select_candidate(candidates)
        if selected is None:
            raise NoUniqueBeanError(bean_type, candidates)
        return self._get_or_create(selected)

    def get_bean_by_name(self, name: str, bean_type: Optional[Type[T]] = None) -> T:
        self._assert_active()
        if name not in self._definitions:
            raise NoSuchBeanError(f"No bean named '{name}' is defined")

        instance = self._get_or_create(name)
        if bean_type is not None and not isinstance(instance, bean_type):
            raise BeanResolutionError(
                f"Bean '{name}' is a {type(instance).__qualname__}, not a {_type_name(bean_type)}"
            )
        return instance

    def contains_bean(self, name: str) -> bool:
        return name in self._definitions

    def bean_names(self) -> List[str]:
        return list(self._definitions)

    def beans_of_type(self, bean_type: Type[T]) -> Dict[str, T]:
        self._assert_active()
        return {name: self._get_or_create(name) for name in self._candidate_names(bean_type)}

    def get_bean_definition(self, name: str) -> BeanDefinition:
        try:
            return self._definitions[name]
        except KeyError:
            raise NoSuchBeanError(f"No bean named '{name}' is defined") from None

    def get_type(self, name: str) -> type:
        """Type a bean is registered under, available once the context is refreshed."""
        self._assert_active()
        if name not in self._bean_types:
            raise NoSuchBeanError(f"No bean named '{name}' is defined")
        return self._bean_types[name]

    def autowire_candidates(self) -> Dict[type, str]:
        """
        Map every type that identifies exactly one bean to that bean's name.

        Covers each bean type and its base classes; a base shared by several
        beans is included only when exactly one of them is primary.
        """
        keys: List[type] = []
        for bean_type in self._bean_types.values():
            for base in inspect.getmro(bean_type):
                if base in _NON_AUTOWIRE_BASES or base in keys:
                    continue
                keys.append(base)

        bindings: Dict[type, str] = {}
        for key in keys:
            selected = self._select_candidate(self._candidate_names(key))
            if selected is not None:
                bindings[key] = selected
        return bindings

    def close(self) -> None:
        """
        Destroy created singletons in reverse creation order.

        Every destroy callback is attempted; failures are collected and raised
        together. Calling ``close()`` again is a no-op.

        Raises:
            ContextDisposalError: If one or more destroy callbacks failed
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True

            failures = []
            for name in reversed(self._creation_order):
                try:
                    self._destroy(name, self._singletons[name])
                except Exception as e:
                    failures.append((name, e))
            self._singletons.clear()
            self._creation_order.clear()

        if failures:
            names = ", ".join(name for name, _ in failures)
            raise ContextDisposalError(
                f"Failed to destroy {len(failures)} bean(s) while closing the application context: {names}",
                failures,
            ) from failures[0][1]
        logger.info("Application context closed")

    def __enter__(self) -> "ApplicationContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("active" if self._refreshed else "new")
        return f"<{type(self).__name__} {state} beans={len(self._definitions)}>"

    def _assert_active(self) -> None:
        if self._closed:
            raise ContextClosedError("Application context has been closed")
        if not self._refreshed:
            raise ContextClosedError("Application context has not been refreshed yet")

    def _candidate_names(self, bean_type: type) -> List[str]:
        return [
            name for name, registered in self._bean_types.items()
            if _is_assignable(registered, bean_type)
        ]

    def _is_module_bound(self, bean_type: type) -> bool:
        if bean_type in _INJECTOR_INTERNALS:
            return False
        return self._injector.binder.has_explicit_binding_for(bean_type)  # type: ignore[union-attr]

    def _select_candidate(self, candidates: List[str]) -> Optional[str]:
        if len(candidates) == 1:
            return candidates[0]
        primaries = [name for name in candidates if self._definitions[name].primary]
        if len(primaries) == 1:
            return primaries[0]
        return None

    def _get_or_create(self, name: str) -> Any:
        definition = self._definitions[name]
        with self._lock:
            if not definition.is_singleton:
                return self._create_bean(definition)
            if name in self._singletons:
                return self._singletons[name]
            instance = self._create_bean(definition)
            self._singletons[name] = instance
            self._creation_order.append(name)
            return instance

    def _create_bean(self, definition: BeanDefinition) -> Any:
        name = definition.name
        if name in self._in_creation:
            raise BeanCreationError(name, "circular reference between bean definitions")

        self._in_creation.add(name)
        try:
            kwargs = {key: self._resolve_arg(value) for key, value in definition.args.items()}
            target = self._targets[name]
            if definition.factory is not None:
                instance = self._injector.call_with_injection(target, kwargs=kwargs)  # type: ignore[union-attr]
            else:
                instance = self._injector.create_object(target, additional_kwargs=kwargs)  # type: ignore[union-attr]
            if definition.init_method:
                getattr(instance, definition.init_method)()
        except BeanCreationError:
            raise
        except Exception as e:
            raise BeanCreationError(name, str(e)) from e
        finally:
            self._in_creation.discard(name)

        logger.debug(f"Created bean '{name}' ({definition.scope.value})")
        return instance

    def _resolve_arg(self, value: Any) -> Any:
        if isinstance(value, dict):
            if set(value) == {"ref"}:
                return self.get_bean_by_name(value["ref"])
            return {key: self._resolve_arg(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._resolve_arg(item) for item in value]
        return value

    def _get_from_injector(self, bean_type: Type[T]) -> T:
        try:
            return self._injector.get(bean_type)  # type: ignore[union-attr]
        except ApplicationContextError:
            raise
        except Exception as e:
            raise BeanCreationError(_type_name(bean_type), str(e)) from e

    def _destroy(self, name: str, instance: Any) -> None:
        destroy_method = self._definitions[name].destroy_method
        if destroy_method:
            getattr(instance, destroy_method)()
        elif isinstance(instance, Closeable):
            instance.close()
        else:
            return
        logger.debug(f"Destroyed bean '{name}'")

    @staticmethod
    def _resolve_target(definition: BeanDefinition) -> Tuple[Callable[..., Any], type]:
        try:
            target = import_string(definition.target)
            declared_type = import_string(definition.type) if definition.type else None
        except ImportError as e:
            raise BeanDefinitionError(f"Bean '{definition.name}': {e}") from e
        except Exception as e:
            raise BeanDefinitionError(
                f"Bean '{definition.name}': importing '{definition.target}' failed: {type(e).__name__}: {e}"
            ) from e

        if definition.class_name is not None and not inspect.isclass(target):
            raise BeanDefinitionError(
                f"Bean '{definition.name}': '{definition.class_name}' is not a class"
            )
        if not callable(target):
            raise BeanDefinitionError(
                f"Bean '{definition.name}': factory '{definition.factory}' is not callable"
            )

        bean_type = declared_type or (target if inspect.isclass(target) else _return_type(target))
        if not inspect.isclass(bean_type):
            raise BeanDefinitionError(
                f"Bean '{definition.name}': cannot determine the bean type, declare 'type'"
            )
        return target, bean_type

    @staticmethod
    def _load_module(path: str) -> Any:
        try:
            module = import_string(path)
        except ImportError as e:
            raise BeanDefinitionError(f"Cannot import injector module: {e}") from e
        except Exception as e:
            raise BeanDefinitionError(
                f"Importing injector module '{path}' failed: {type(e).__name__}: {e}"
            ) from e

        if inspect.isclass(module) and issubclass(module, Module):
            try:
                return module()
            except Exception as e:
                raise BeanDefinitionError(f"Cannot instantiate injector module '{path}': {e}") from e
        if isinstance(module, Module) or callable(module):
            return module
        raise BeanDefinitionError(f"'{path}' is neither an injector Module nor a configure callable")


def _return_type(factory: Callable[..., Any]) -> Any:
    try:
        return typing.get_type_hints(factory).get("return")
    except (NameError, TypeError):
        pass
    try:
        annotation = inspect.signature(factory).return_annotation
    except (TypeError, ValueError):
        return None
    return None if annotation is inspect.Signature.empty else annotation


def _is_assignable(registered: type, requested: type) -> bool:
    try:
        return issubclass(registered, requested)
    except TypeError:
        return False


def _type_name(bean_type: Any) -> str:
    return getattr(bean_type, "__qualname__", repr(bean_type))
