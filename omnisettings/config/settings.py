"""
Settings Models

Pydantic-based models for the bootstrap resource and for the resolver's
own options (environment variables with the OMNISETTINGS_ prefix).
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_STAGE_PROPERTY = "omni.stage"
DEFAULT_SETTINGS_PROPERTY = "omni.settings"
DEFAULT_FILE_NAME = "application-settings.xml"


class BootstrapSettings(BaseModel):
    """
    Settings that control resolution itself.

    Read from the bootstrap resource and never exposed to consumers.
    Keys use the camelCase names found in the resource.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    stage_property_name: str = Field(
        default=DEFAULT_STAGE_PROPERTY, alias="stageSystemPropertyName"
    )
    settings_property_name: str = Field(
        default=DEFAULT_SETTINGS_PROPERTY, alias="settingsSystemPropertyName"
    )
    default_stage: Optional[str] = Field(default=None, alias="defaultStage")
    file_name: str = Field(default=DEFAULT_FILE_NAME, alias="fileName")

    @field_validator("stage_property_name", "settings_property_name", "file_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("default_stage")
    @classmethod
    def _blank_stage_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class ResolverOptions(BaseSettings):
    """
    Options for the resolver itself.

    Loads configuration from:
    1. Default values
    2. Environment variables (OMNISETTINGS_ prefix)

    Example:
        ```python
        options = get_options()
        print(options.resource_root)
        ```
    """

    resource_root: Path = Path("config")
    bootstrap_name: str = "omni-settings"
    log_level: str = "INFO"
    log_format: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    model_config = SettingsConfigDict(
        env_prefix="OMNISETTINGS_",
        extra="ignore",
    )


# Singleton options instance
_options: Optional[ResolverOptions] = None


def get_options() -> ResolverOptions:
    """
    Get the resolver options singleton.

    Returns:
        ResolverOptions instance
    """
    global _options

    if _options is None:
        _options = ResolverOptions()

    return _options


def reset_options() -> None:
    """Reset options singleton (for testing)."""
    global _options
    _options = None
