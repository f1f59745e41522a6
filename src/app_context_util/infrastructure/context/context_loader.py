"""Default registry-loading collaborator: YAML/JSON files into an ApplicationContext."""
import logging
from typing import Dict, List, Mapping, Optional, Sequence

from app_context_util.adapter.config_source.config_source_reader import (
    ConfigSourceReader,
    LoadedSource,
)
from app_context_util.adapter.config_source.placeholder_resolver import PlaceholderResolver
from app_context_util.config.loader_settings import ContextLoaderSettings
from app_context_util.core.errors import BeanDefinitionError, ContextDisposalError
from app_context_util.core.model.bean_definition import BeanDefinition, ContextDefinition
from app_context_util.core.port.context_loader_interface import ContextLoaderInterface
from app_context_util.infrastructure.context.application_context import ApplicationContext

logger = logging.getLogger(__name__)


class YamlApplicationContextLoader(ContextLoaderInterface):
    """
    Builds an ``ApplicationContext`` from ordered YAML/JSON sources.

    Loads: imports (depth-first) + each source in order + placeholder substitution.
    Later sources override same-named beans and properties of earlier ones.
    """

    def __init__(
        self,
        settings: Optional[ContextLoaderSettings] = None,
        reader: Optional[ConfigSourceReader] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._settings = settings or ContextLoaderSettings()
        self._reader = reader or ConfigSourceReader(encoding=self._settings.encoding)
        self._environ = environ

    @property
    def settings(self) -> ContextLoaderSettings:
        return self._settings

    def load(self, config_sources: Sequence[str]) -> ApplicationContext:
        """
        Load, merge and wire the given sources into a refreshed context.

        If the refresh fails, the beans created so far are destroyed before
        the error propagates.

        Raises:
            ContextLoadError: If a source is missing, malformed, or a bean cannot be created
        """
        definition = self.load_definition(config_sources)
        context = ApplicationContext(definition, eager_init=self._settings.eager_init)
        try:
            context.refresh()
        except Exception:
            try:
                context.close()
            except ContextDisposalError as close_error:
                logger.warning(f"Failed to close partially refreshed application context: {close_error}")
            raise
        return context

    def load_definition(self, config_sources: Sequence[str]) -> ContextDefinition:
        """Read and merge the sources without instantiating anything."""
        loaded = self._reader.read_all(config_sources)
        definition = self._merge(loaded)
        return self._resolve_placeholders(definition)

    def _merge(self, loaded: List[LoadedSource]) -> ContextDefinition:
        properties: Dict[str, object] = {}
        modules: List[str] = []
        beans: Dict[str, BeanDefinition] = {}

        for source in loaded:
            content = source.content
            properties.update(content.properties)
            for module in content.modules:
                if module not in modules:
                    modules.append(module)
            for bean in content.beans:
                if bean.name in beans:
                    if not self._settings.allow_bean_overriding:
                        raise BeanDefinitionError(
                            f"Bean '{bean.name}' in {source.locator} overrides an existing "
                            f"definition and bean overriding is disabled"
                        )
                    logger.info(f"Overriding bean definition '{bean.name}' with definition from {source.locator}")
                beans[bean.name] = bean

        return ContextDefinition(
            sources=[source.locator for source in loaded],
            properties=properties,
            modules=modules,
            beans=list(beans.values()),
        )

    def _resolve_placeholders(self, definition: ContextDefinition) -> ContextDefinition:
        use_environment = self._settings.env_placeholders
        properties = PlaceholderResolver(
            use_environment=use_environment, environ=self._environ
        ).resolve(definition.properties)
        resolver = PlaceholderResolver(properties, use_environment=use_environment, environ=self._environ)

        beans = [
            bean.model_copy(update={
                "class_name": resolver.resolve(bean.class_name),
                "factory": resolver.resolve(bean.factory),
                "type": resolver.resolve(bean.type),
                "args": resolver.resolve(bean.args),
            })
            for bean in definition.beans
        ]
        return definition.model_copy(update={
            "properties": properties,
            "modules": [resolver.resolve(module) for module in definition.modules],
            "beans": beans,
        })
