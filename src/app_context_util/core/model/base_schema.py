from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base for configuration models: unknown keys are rejected, aliases and field names both accepted."""

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
    )
