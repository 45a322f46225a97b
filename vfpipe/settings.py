"""
Configuration settings for vfpipe.

This module provides a settings class for vfpipe, with support for loading
configuration from TOML files and environment variables.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)


class Settings(BaseSettings):
    """Main settings class for vfpipe.

    This class handles loading configuration from TOML files and environment variables,
    with support for custom settings sources.
    """

    model_config = SettingsConfigDict(
        toml_file=["vfpipe.toml", "vfpipe.custom.toml"], env_prefix="VFPIPE_", extra="ignore"
    )

    # Provider API settings
    api_endpoint: str = "http://127.0.0.1:8090"
    api_timeout: float = 30.0
    domain_name: str = "default"
    group_name: str = "default"

    # Session settings
    max_wait_seconds: int = 5  # Passed to the provider, not enforced locally

    # Storage layout
    pipeline_prefix: str = "pipeline-"
    definition_filename: str = "config.json"
    components_filename: str = "components.json"
    code_filename: str = "main.py"
    log_filename: str = "logs.txt"

    # Orchestration
    abort_on_violation: bool = False

    # Logging settings
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str | None = None  # If None, will use ~/.vfpipe/logs
    log_rotation: str = "20 MB"
    log_retention: str = "1 week"
    log_format: str | None = None  # Use default if None

    @classmethod
    def settings_customize_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the sources for settings.

        Priority order: explicit arguments, environment variables, then TOML config files
        """
        return init_settings, env_settings, TomlConfigSettingsSource(settings_cls)

    def get_log_dir(self) -> Path:
        """Get the log directory path.

        Returns:
            Path to the log directory. Uses log_dir if specified,
            otherwise ``~/.vfpipe/logs``.
        """
        if self.log_dir:
            return Path(self.log_dir)
        return Path.home() / ".vfpipe" / "logs"

    def code_path(self, component_path: str) -> str:
        """Blob key of a component's main code file."""
        return f"{component_path}/{self.code_filename}"

    def log_path(self, component_path: str) -> str:
        """Blob key of a component's run log."""
        return f"{component_path}/{self.log_filename}"


@lru_cache
def get_settings() -> Settings:
    """Get the settings instance, with caching.

    Returns:
        Cached Settings instance
    """
    return Settings()


# Create a global settings instance for easy imports
settings = get_settings()
