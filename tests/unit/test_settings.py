"""
Unit tests for the configuration settings module.

Tests cover:
- Default values
- Field format validation
- Environment-specific validation
- ConfigurationError formatting and caching helpers
"""

import os
import pytest
from unittest.mock import patch

from pydantic import ValidationError

from config.settings import (
    Settings,
    Environment,
    ConfigurationError,
    create_settings_for_environment,
    get_settings,
    clear_settings_cache,
)


class TestSettings:
    """Tests for the Settings class."""

    @pytest.fixture
    def production_env_vars(self):
        """Provide a valid production configuration."""
        return {
            "ENVIRONMENT": "production",
            "DYNAMODB_TABLE": "prod-bot-sessions",
            "AWS_REGION": "eu-west-1",
        }

    def test_default_values_are_applied(self):
        """Test that defaults apply with an empty environment."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

            assert settings.environment == Environment.DEVELOPMENT
            assert settings.session_property == "session"
            assert settings.session_store_type == "dynamodb"
            assert settings.dynamodb_table is None
            assert settings.session_compression_enabled is False
            assert settings.session_compression_level == 9
            assert settings.log_level == "INFO"
            assert settings.otel_service_name == "bot-session-dynamodb"

    def test_values_are_read_from_environment(self, production_env_vars):
        """Test that environment variables populate the settings."""
        env_vars = {
            **production_env_vars,
            "SESSION_COMPRESSION_ENABLED": "true",
            "SESSION_COMPRESSION_LEVEL": "6",
            "SESSION_PROPERTY": "conversation",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings()

            assert settings.environment == Environment.PRODUCTION
            assert settings.dynamodb_table == "prod-bot-sessions"
            assert settings.aws_region == "eu-west-1"
            assert settings.session_compression_enabled is True
            assert settings.session_compression_level == 6
            assert settings.session_property == "conversation"

    @pytest.mark.parametrize("level", ["-1", "10"])
    def test_compression_level_out_of_range_raises_error(self, level):
        """Test that LZMA presets outside 0-9 are rejected."""
        with patch.dict(os.environ, {"SESSION_COMPRESSION_LEVEL": level}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

            assert "session_compression_level" in str(exc_info.value).lower()

    def test_invalid_log_level_raises_error(self):
        """Test that invalid log_level raises validation error."""
        with patch.dict(os.environ, {"LOG_LEVEL": "INVALID_LEVEL"}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

            assert "log_level" in str(exc_info.value).lower()

    def test_log_level_is_normalized(self):
        """Test that log levels are upper-cased."""
        with patch.dict(os.environ, {"LOG_LEVEL": " debug "}, clear=True):
            assert Settings().log_level == "DEBUG"

    def test_invalid_session_store_type_raises_error(self):
        """Test that unknown store types are rejected."""
        with patch.dict(os.environ, {"SESSION_STORE_TYPE": "redis"}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

            assert "session_store_type" in str(exc_info.value).lower()

    def test_session_store_type_is_normalized(self):
        """Test that store type is lower-cased and stripped."""
        with patch.dict(os.environ, {"SESSION_STORE_TYPE": " MEMORY "}, clear=True):
            assert Settings().session_store_type == "memory"

    def test_invalid_endpoint_url_raises_error(self):
        """Test that a non-HTTP DynamoDB endpoint is rejected."""
        with patch.dict(os.environ, {"DYNAMODB_ENDPOINT_URL": "localhost:8000"}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

            assert "http" in str(exc_info.value).lower()

    def test_blank_endpoint_url_is_treated_as_unset(self):
        """Test that an empty endpoint falls back to the AWS default."""
        with patch.dict(os.environ, {"DYNAMODB_ENDPOINT_URL": "  "}, clear=True):
            assert Settings().dynamodb_endpoint_url is None

    def test_invalid_session_property_raises_error(self):
        """Test that the binding name must be an identifier."""
        with patch.dict(os.environ, {"SESSION_PROPERTY": "my-session"}, clear=True):
            with pytest.raises(ValidationError):
                Settings()

    def test_production_requires_dynamodb_table(self, production_env_vars):
        """Test that a table name is mandatory outside development."""
        env_vars = {k: v for k, v in production_env_vars.items() if k != "DYNAMODB_TABLE"}
        with patch.dict(os.environ, env_vars, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

            assert "dynamodb_table" in str(exc_info.value)

    def test_production_rejects_memory_store(self, production_env_vars):
        """Test that the in-process store cannot be used in production."""
        env_vars = {**production_env_vars, "SESSION_STORE_TYPE": "memory"}
        with patch.dict(os.environ, env_vars, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings()

            assert "memory" in str(exc_info.value)

    def test_development_allows_memory_store_without_table(self):
        """Test that development needs no table for the memory store."""
        with patch.dict(os.environ, {"SESSION_STORE_TYPE": "memory"}, clear=True):
            settings = Settings()

            assert settings.session_store_type == "memory"
            assert settings.dynamodb_table is None


class TestConfigurationError:
    """Tests for ConfigurationError formatting."""

    def test_message_lists_missing_and_invalid_fields(self):
        error = ConfigurationError(
            "Configuration failed",
            missing_fields=["dynamodb_table"],
            invalid_fields={"log_level": "must be one of ..."},
        )

        message = str(error)
        assert "Configuration failed" in message
        assert "Missing required fields: dynamodb_table" in message
        assert "log_level: must be one of ..." in message

    def test_create_settings_wraps_validation_errors(self):
        """Test that loading failures are reported as ConfigurationError."""
        with patch.dict(os.environ, {"LOG_LEVEL": "LOUD"}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                create_settings_for_environment(Environment.DEVELOPMENT)

            assert "log_level" in exc_info.value.invalid_fields
            assert "development" in exc_info.value.message

    def test_model_level_errors_are_reported(self):
        """Test that cross-field errors are listed under __root__."""
        with patch.dict(os.environ, {"ENVIRONMENT": "staging"}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                create_settings_for_environment(Environment.STAGING)

            assert "__root__" in exc_info.value.invalid_fields


class TestSettingsCache:
    """Tests for get_settings caching."""

    def setup_method(self):
        clear_settings_cache()

    def teardown_method(self):
        clear_settings_cache()

    def test_get_settings_returns_cached_instance(self):
        with patch.dict(os.environ, {}, clear=True):
            first = get_settings()
            second = get_settings()

            assert first is second

    def test_clear_settings_cache_reloads(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "INFO"}, clear=True):
            first = get_settings()

        clear_settings_cache()

        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}, clear=True):
            second = get_settings()

        assert first is not second
        assert second.log_level == "DEBUG"
