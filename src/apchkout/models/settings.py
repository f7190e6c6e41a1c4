"""Typed view over the project .env file."""

from typing import Optional
from pydantic import Field

from .base import ApchkoutBaseModel


DEFAULT_DB_HOST = "localhost"
DEFAULT_DB_PORT = 5432


class DatabaseSettings(ApchkoutBaseModel):
    """Database connection and naming settings read from .env."""

    user: str = Field(description="DB_USER, also the owner of created databases")
    password: Optional[str] = Field(default=None, description="DB_PASSWORD")
    host: str = Field(default=DEFAULT_DB_HOST, description="DB_HOST")
    port: int = Field(default=DEFAULT_DB_PORT, description="DB_PORT")
    name: Optional[str] = Field(default=None, description="DB_NAME")
    base_name: Optional[str] = Field(
        default=None, description="DEV_APCHKOUT_DB_NAME_BASE"
    )
    settings_module: Optional[str] = Field(
        default=None, description="DJANGO_SETTINGS_MODULE"
    )

    @property
    def base_database(self) -> str:
        """Root name of the database family.

        The stored base wins over DB_NAME so that switching branches never
        changes what "base" means.
        """
        return self.base_name or self.name

    @property
    def active_database(self) -> str:
        """Database currently referenced by configuration."""
        return self.name or self.base_database
