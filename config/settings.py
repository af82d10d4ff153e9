"""
Configuration management for the bot session layer.

This module provides centralized configuration loading and validation using
Pydantic settings. Values are loaded from environment variables or .env
files, with an environment-specific .env file layered on top of the base one.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Optional, List, Tuple

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Supported deployment environments."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


def _detect_environment() -> Environment:
    """
    Detect the current environment from the ENVIRONMENT variable.

    Returns:
        Environment: The detected environment, defaults to DEVELOPMENT if not set.
    """
    env_value = os.environ.get("ENVIRONMENT", "development").lower().strip()
    try:
        return Environment(env_value)
    except ValueError:
        # If invalid value, default to development
        return Environment.DEVELOPMENT


def _get_env_files(environment: Environment) -> Tuple[str, ...]:
    """
    Get the list of .env files to load for the given environment.

    Files are loaded in order, with later files overriding earlier ones.

    Args:
        environment: The target environment.

    Returns:
        Tuple of .env file paths to load.
    """
    env_file_map = {
        Environment.DEVELOPMENT: ".env.development",
        Environment.STAGING: ".env.staging",
        Environment.PRODUCTION: ".env.production",
    }

    env_specific_file = env_file_map.get(environment, ".env.development")

    return (".env", env_specific_file)


class Settings(BaseSettings):
    """
    Session layer settings loaded from environment variables.

    Everything that can be expressed as plain data lives here; callables
    (key derivation, compression functions) are supplied in code through
    SessionOptions overrides.

    The ENVIRONMENT variable determines which environment-specific
    .env file is layered over the base .env file.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment (development, staging, production)"
    )

    # Session binding
    session_property: str = Field(
        default="session",
        description="Name under which the session handle is bound on the request context"
    )

    # Session Store Configuration
    session_store_type: str = Field(
        default="dynamodb",
        description="Session store type: 'dynamodb' or 'memory'"
    )
    dynamodb_table: Optional[str] = Field(
        default=None,
        description="DynamoDB table name for session storage"
    )
    aws_region: Optional[str] = Field(
        default=None,
        description="AWS region of the DynamoDB table"
    )
    dynamodb_endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom DynamoDB endpoint URL (e.g. DynamoDB Local)"
    )

    # Compression Configuration
    session_compression_enabled: bool = Field(
        default=False,
        description="Store sessions as LZMA-compressed JSON binaries"
    )
    session_compression_level: int = Field(
        default=9,
        ge=0,
        le=9,
        description="LZMA preset used when compressing sessions"
    )

    # Observability Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    otel_endpoint: Optional[str] = Field(
        default=None,
        description="OpenTelemetry collector endpoint URL"
    )
    otel_service_name: str = Field(
        default="bot-session-dynamodb",
        description="Service name for OpenTelemetry traces"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("session_property")
    @classmethod
    def validate_session_property(cls, v: str) -> str:
        """Validate that session_property is a usable attribute name."""
        v = v.strip()
        if not v.isidentifier():
            raise ValueError("session_property must be a valid identifier")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.strip().upper()
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v

    @field_validator("session_store_type")
    @classmethod
    def validate_session_store_type(cls, v: str) -> str:
        """Validate that session_store_type is either 'dynamodb' or 'memory'."""
        v = v.strip().lower()
        if v not in {"dynamodb", "memory"}:
            raise ValueError("session_store_type must be 'dynamodb' or 'memory'")
        return v

    @field_validator("dynamodb_endpoint_url")
    @classmethod
    def validate_dynamodb_endpoint_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate that a custom endpoint, when given, is an HTTP/HTTPS URL."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not (v.startswith("http://") or v.startswith("https://")):
            raise ValueError("dynamodb_endpoint_url must be a valid HTTP/HTTPS URL")
        return v

    @model_validator(mode="after")
    def validate_session_store_config(self) -> "Settings":
        """Validate store settings outside of development."""
        if self.environment == Environment.DEVELOPMENT:
            return self
        if self.session_store_type == "memory":
            raise ValueError(
                "session_store_type 'memory' is only allowed in the development environment"
            )
        if not self.dynamodb_table:
            raise ValueError(
                "dynamodb_table is required when session_store_type is 'dynamodb' "
                "in non-development environments"
            )
        return self


class ConfigurationError(Exception):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None,
                 invalid_fields: Optional[dict] = None):
        self.message = message
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or {}
        super().__init__(self.format_error_message())

    def format_error_message(self) -> str:
        """Format a descriptive error message listing all issues."""
        parts = [self.message]

        if self.missing_fields:
            parts.append(f"\nMissing required fields: {', '.join(self.missing_fields)}")

        if self.invalid_fields:
            invalid_parts = [f"  - {field}: {error}" for field, error in self.invalid_fields.items()]
            parts.append("\nInvalid field values:\n" + "\n".join(invalid_parts))

        return "".join(parts)

    @classmethod
    def from_validation_error(cls, message: str, exc: ValidationError) -> "ConfigurationError":
        """
        Build a ConfigurationError from a Pydantic ValidationError.

        Args:
            message: Summary message for the failure.
            exc: The validation error raised by Pydantic.

        Returns:
            ConfigurationError listing missing and invalid fields.
        """
        missing_fields = []
        invalid_fields = {}

        for error in exc.errors():
            field_name = '.'.join(str(loc) for loc in error.get('loc', [])) or "__root__"
            error_type = error.get('type', '')
            error_msg = error.get('msg', str(error))

            if error_type == 'missing':
                missing_fields.append(field_name)
            else:
                invalid_fields[field_name] = error_msg

        return cls(message, missing_fields=missing_fields, invalid_fields=invalid_fields)


def create_settings_for_environment(environment: Optional[Environment] = None) -> Settings:
    """
    Factory function to create Settings for a specific environment.

    This function detects the environment from the ENVIRONMENT variable (if not provided)
    and loads the appropriate environment-specific .env file.

    Args:
        environment: Optional environment override. If not provided, detected from
                    ENVIRONMENT variable.

    Returns:
        Settings: Validated settings for the specified environment.

    Raises:
        ConfigurationError: If settings are missing or invalid.
    """
    if environment is None:
        environment = _detect_environment()

    env_files = _get_env_files(environment)

    existing_env_files = [env_file for env_file in env_files if Path(env_file).exists()]

    # If no env files exist, use the default tuple (pydantic will handle missing files)
    if not existing_env_files:
        existing_env_files = list(env_files)

    class EnvironmentSettings(Settings):
        model_config = SettingsConfigDict(
            env_file=tuple(existing_env_files),
            env_file_encoding="utf-8",
            case_sensitive=False,
            extra="ignore"
        )

    try:
        return EnvironmentSettings()
    except ValidationError as e:
        raise ConfigurationError.from_validation_error(
            f"Failed to load configuration for environment '{environment.value}'", e
        ) from e


# Global settings cache
_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the settings singleton.

    Settings are loaded once and cached for subsequent calls.

    Returns:
        Settings: The validated settings.

    Raises:
        ConfigurationError: If settings are missing or invalid.
    """
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = create_settings_for_environment()

    return _settings_cache


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    This is primarily useful for testing to allow reloading settings
    with different environment variables.
    """
    global _settings_cache
    _settings_cache = None
