"""
Runtime options for the session lifecycle manager.

SessionOptions is the immutable configuration value the manager and the
interceptor are built from. Plain-data defaults come from the environment
Settings; callables (key derivation, compression functions) and any other
value can be overridden in code. Overrides are merged section by section,
so ``{"compression": {"enabled": True}}`` keeps the default level and
compression functions.
"""

from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from config.settings import ConfigurationError, Settings, get_settings
from session.compression import (
    CompressSession,
    DecompressSession,
    lzma_compress,
    lzma_decompress,
)

DEFAULT_TABLE_NAME = "bot-session-dynamodb"

GetSessionKey = Callable[[Any], Any]


def default_session_key(ctx: Any) -> Optional[str]:
    """
    Derive a session key from the sender and chat of an update.

    Returns ``"<user id>:<chat id>"``, or None when the context carries no
    sender or no chat (channel posts, inline queries and the like), in
    which case the request is handled without a session.
    """
    user = getattr(ctx, "from_user", None)
    chat = getattr(ctx, "chat", None)
    if user is None or chat is None:
        return None
    return f"{user.id}:{chat.id}"


class DynamoDBConfig(BaseModel):
    """Connection and table parameters for the DynamoDB store."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    table_name: str = DEFAULT_TABLE_NAME
    region_name: Optional[str] = None
    endpoint_url: Optional[str] = None
    # Passed through to boto3.client (credentials, botocore Config, ...)
    client_kwargs: dict[str, Any] = Field(default_factory=dict)

    @field_validator("table_name")
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        """DynamoDB table names are 3-255 characters."""
        v = v.strip()
        if not 3 <= len(v) <= 255:
            raise ValueError("table_name must be between 3 and 255 characters")
        return v


class CompressionConfig(BaseModel):
    """Payload compression settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = False
    level: int = Field(default=9, ge=0, le=9)
    compress_session: CompressSession = lzma_compress
    decompress_session: DecompressSession = lzma_decompress


class SessionOptions(BaseModel):
    """
    Immutable configuration of a session manager and its interceptor.

    Attributes:
        property_name: Name the session handle is bound under on the context.
        get_session_key: Function deriving the session key from a context;
            may return an awaitable. A falsy key disables sessions for
            that request.
        dynamodb: DynamoDB connection and table parameters.
        compression: Payload compression settings.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    property_name: str = "session"
    get_session_key: GetSessionKey = default_session_key
    dynamodb: DynamoDBConfig = Field(default_factory=DynamoDBConfig)
    compression: CompressionConfig = Field(default_factory=CompressionConfig)

    @field_validator("property_name")
    @classmethod
    def validate_property_name(cls, v: str) -> str:
        v = v.strip()
        if not v.isidentifier():
            raise ValueError("property_name must be a valid identifier")
        return v

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> "SessionOptions":
        """
        Build options from environment settings and code overrides.

        Args:
            settings: Settings to take defaults from (defaults to get_settings()).
            overrides: Values taking precedence over the settings. Nested
                sections given as mappings are merged into the defaults.

        Returns:
            The validated, frozen options.

        Raises:
            ConfigurationError: If the merged options are invalid.
        """
        settings = settings or get_settings()

        defaults: dict[str, Any] = {
            "property_name": settings.session_property,
            "dynamodb": {
                "table_name": settings.dynamodb_table or DEFAULT_TABLE_NAME,
                "region_name": settings.aws_region,
                "endpoint_url": settings.dynamodb_endpoint_url,
            },
            "compression": {
                "enabled": settings.session_compression_enabled,
                "level": settings.session_compression_level,
            },
        }

        try:
            return cls.model_validate(merge_sections(defaults, overrides or {}))
        except ValidationError as e:
            raise ConfigurationError.from_validation_error("Invalid session options", e) from e


def merge_sections(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """
    Merge option overrides over defaults.

    Sections given as mappings on both sides are merged key by key;
    anything else (including model instances) replaces the default.
    """
    merged = dict(defaults)
    for name, value in overrides.items():
        current = merged.get(name)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[name] = {**current, **value}
        else:
            merged[name] = value
    return merged
