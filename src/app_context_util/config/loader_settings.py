"""Settings of the YAML/JSON application context loader."""
import os
from typing import Dict, Optional

from pydantic import ValidationError

from app_context_util.core.errors import ContextLoadError
from app_context_util.core.model.base_schema import BaseSchema

DEFAULT_ENV_PREFIX = "APP_CONTEXT"


class ContextLoaderSettings(BaseSchema):
    """
    Behaviour switches for ``YamlApplicationContextLoader``.

    Attributes:
        eager_init: Instantiate non-lazy singletons while the context refreshes.
        env_placeholders: Fall back to environment variables for ``${key}`` placeholders.
        allow_bean_overriding: Let later sources replace same-named beans.
        encoding: Encoding used to read configuration sources.
    """

    eager_init: bool = True
    env_placeholders: bool = True
    allow_bean_overriding: bool = True
    encoding: str = "utf-8"

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_ENV_PREFIX,
        environ: Optional[Dict[str, str]] = None,
    ) -> "ContextLoaderSettings":
        """
        Build settings from ``{prefix}__{FIELD}`` environment variables.

        Example:
            APP_CONTEXT__EAGER_INIT=false
            APP_CONTEXT__ENCODING=latin-1

        Variables that do not name a field are ignored.

        Raises:
            ContextLoadError: If a variable holds a value the field rejects
        """
        env = os.environ if environ is None else environ
        marker = f"{prefix}__"
        values = {}
        for env_var, value in env.items():
            if not env_var.startswith(marker):
                continue
            field_name = env_var[len(marker):].lower()
            if field_name in cls.model_fields:
                values[field_name] = value
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ContextLoadError(f"Invalid {marker}* loader settings in the environment: {e}") from e
