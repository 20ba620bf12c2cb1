"""
Configuration module for the KV Delete Toolkit.

Provides centralized configuration for the delete menu, the capability cache
and the Vault HTTP store.
"""

from enum import Enum
from typing import Any, Dict, Optional, Union, get_args, get_origin

from pydantic import BaseModel, Field, field_validator

DEFAULT_ERROR_MESSAGE = (
    "Something went wrong. Check the Vault logs for more information."
)


class DeleteToolkitConfig(BaseModel):
    """Central configuration for the delete toolkit.

    Configuration Sources (in order of precedence):
        1. Programmatic settings (highest priority)
        2. Environment variables (KVDEL_ prefix)
        3. Default values (lowest priority)

    Example:
        >>> config = DeleteToolkitConfig(vault_addr="https://vault.example.com")

        Loading from environment:

        >>> import os
        >>> os.environ['KVDEL_VAULT_ADDR'] = 'https://vault.example.com'
        >>> os.environ['KVDEL_REQUEST_TIMEOUT_SECONDS'] = '10'
        >>> config = DeleteToolkitConfig.from_env()

    Note:
        The Vault token is better supplied through ``VAULT_TOKEN`` than kept in
        any configuration file.
    """

    # General settings
    environment: str = Field(
        "production", description="Environment (development, staging, production)"
    )
    log_level: str = Field("WARNING", description="Log level used by the CLI")

    # Vault connection
    vault_addr: str = Field(
        "http://127.0.0.1:8200", description="Base address of the Vault server"
    )
    vault_token: Optional[str] = Field(None, description="Vault token")
    vault_namespace: Optional[str] = Field(
        None, description="Vault Enterprise namespace"
    )
    request_timeout_seconds: float = Field(
        30.0, description="Timeout for Vault HTTP requests", gt=0
    )

    # Delete menu behavior
    list_root_route: str = Field(
        "vault.cluster.secrets.backend.list-root",
        description="Route to navigate to after a secret is destroyed",
    )
    generic_error_message: str = Field(
        DEFAULT_ERROR_MESSAGE,
        description="Message shown when a failed delete carries no error text",
    )
    error_separator: str = Field(
        ". ", description="Separator used to join multiple delete errors"
    )
    discard_stale_capability_results: bool = Field(
        False,
        description="Drop capability responses whose inputs changed in flight",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is valid."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Environment must be one of: {', '.join(sorted(valid_environments))}"
            )
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is a standard logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(sorted(valid_levels))}")
        return v.upper()

    @field_validator("vault_addr")
    @classmethod
    def validate_vault_addr(cls, v: str) -> str:
        """Strip trailing slashes and require a scheme."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Vault address must start with http:// or https://")
        return v.rstrip("/")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump()

    @classmethod
    def from_env(cls, prefix: str = "KVDEL_") -> "DeleteToolkitConfig":
        """
        Load configuration from environment variables.

        Args:
            prefix: Prefix for environment variables

        Returns:
            Configuration instance
        """
        import os

        config_dict: Dict[str, Any] = {}

        for field_name, field_info in cls.model_fields.items():
            env_var = f"{prefix}{field_name.upper()}"
            if env_var not in os.environ:
                continue
            value = os.environ[env_var]

            field_type = field_info.annotation

            # Handle Optional types
            if get_origin(field_type) is Union:
                args = get_args(field_type)
                field_type = next((arg for arg in args if arg is not type(None)), str)

            try:
                if field_type == bool:
                    config_dict[field_name] = value.lower() in (
                        "true",
                        "1",
                        "yes",
                        "on",
                    )
                elif field_type == int:
                    config_dict[field_name] = int(value)
                elif field_type == float:
                    config_dict[field_name] = float(value)
                elif isinstance(field_type, type) and issubclass(field_type, Enum):
                    config_dict[field_name] = field_type(value)
                else:
                    config_dict[field_name] = value
            except (ValueError, TypeError):
                # Let pydantic report the bad value
                config_dict[field_name] = value

        return cls.model_validate(config_dict)


# Global configuration instance
_config: Optional[DeleteToolkitConfig] = None


def get_config() -> DeleteToolkitConfig:
    """
    Get the global configuration instance.

    Returns:
        Global configuration
    """
    global _config

    if _config is None:
        try:
            _config = DeleteToolkitConfig.from_env()
        except ValueError:
            # Fall back to defaults when the environment is invalid
            _config = DeleteToolkitConfig.model_validate({})

    return _config


def set_config(config: Optional[DeleteToolkitConfig]) -> None:
    """
    Set the global configuration instance.

    Args:
        config: Configuration to set, or None to reload from the environment
    """
    global _config
    _config = config


def configure(**kwargs: Any) -> DeleteToolkitConfig:
    """
    Configure the toolkit with keyword arguments.

    Args:
        **kwargs: Configuration parameters

    Returns:
        Updated configuration
    """
    global _config

    if _config is None:
        _config = DeleteToolkitConfig(**kwargs)
    else:
        config_dict = _config.to_dict()
        config_dict.update(kwargs)
        _config = DeleteToolkitConfig(**config_dict)

    return _config
