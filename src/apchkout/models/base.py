"""Base model for apchkout."""

from pydantic import BaseModel, ConfigDict


class ApchkoutBaseModel(BaseModel):
    """Base model for settings and operation results."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        extra="forbid",
    )
