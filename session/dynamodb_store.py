"""
DynamoDB-based session store implementation.

This module provides a DynamoDB-backed implementation of the SessionStore
interface. Each session is one item keyed by the string hash key
``SessionKey``, with the payload in ``SessionValue``: a map when sessions
are stored uncompressed, a binary attribute when they are compressed.

boto3 is synchronous, so every request runs in a worker thread. Requests go
through the low-level DynamoDB client, which can be shared between threads;
boto3 resource objects cannot.
"""

import asyncio
import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Optional

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from errors.exceptions import store_unavailable
from session.options import DynamoDBConfig
from session.store import (
    SESSION_KEY_ATTRIBUTE,
    SESSION_VALUE_ATTRIBUTE,
    SessionRecord,
    SessionStore,
)
from telemetry.service import external_service_span

logger = logging.getLogger(__name__)

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def to_dynamodb(value: Any) -> Any:
    """
    Convert a session value into types the DynamoDB serializer accepts.

    DynamoDB numbers must be Decimal; floats are converted through their
    shortest repr so 0.1 is stored as 0.1.
    """
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, Mapping):
        return {key: to_dynamodb(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_dynamodb(item) for item in value]
    return value


def from_dynamodb(value: Any) -> Any:
    """
    Convert DynamoDB Decimals back into ints and floats.

    A number written with a fractional part (``2.0``) comes back as a float.
    DynamoDB may normalize the stored text, so a float with an integral
    value can still be read back as an int; the two compare equal.
    """
    if isinstance(value, Decimal):
        if value == value.to_integral_value() and value.as_tuple().exponent >= 0:
            return int(value)
        return float(value)
    if isinstance(value, Mapping):
        return {key: from_dynamodb(item) for key, item in value.items()}
    if isinstance(value, list):
        return [from_dynamodb(item) for item in value]
    return value


def serialize_item(item: Mapping[str, Any]) -> dict[str, Any]:
    """Encode a plain item into DynamoDB attribute values."""
    return {name: _serializer.serialize(to_dynamodb(value)) for name, value in item.items()}


def deserialize_item(item: Mapping[str, Any]) -> dict[str, Any]:
    """Decode DynamoDB attribute values into plain Python values."""
    return {name: from_dynamodb(_deserializer.deserialize(value)) for name, value in item.items()}


class DynamoDBSessionStore(SessionStore):
    """
    DynamoDB-backed session store implementation.

    Attributes:
        config: Table name and connection parameters
        client: boto3 DynamoDB client (initialized via connect())
    """

    def __init__(self, config: DynamoDBConfig, client: Optional[Any] = None):
        """
        Initialize the DynamoDB session store.

        Args:
            config: Table name and connection parameters.
            client: Pre-built boto3 DynamoDB client; when omitted, connect()
                builds one from the config.
        """
        self.config = config
        self.client = client

    async def connect(self) -> None:
        """
        Build the boto3 DynamoDB client.

        This method must be called before using any other methods,
        unless a client was passed to the constructor.
        """
        if self.client is not None:
            return

        def _build_client():
            return boto3.client(
                "dynamodb",
                region_name=self.config.region_name,
                endpoint_url=self.config.endpoint_url,
                **self.config.client_kwargs,
            )

        self.client = await asyncio.to_thread(_build_client)
        logger.info(
            "DynamoDB session store connected",
            extra={"extra_data": {"table": self.config.table_name}}
        )

    async def disconnect(self) -> None:
        """
        Close the underlying boto3 client.

        Should be called during application shutdown to cleanly
        release pooled connections.
        """
        if self.client is not None:
            self.client.close()
            self.client = None

    def _require_client(self):
        if self.client is None:
            raise RuntimeError("DynamoDB client not connected. Call connect() first.")
        return self.client

    def _key(self, session_key: str) -> dict[str, Any]:
        return serialize_item({SESSION_KEY_ATTRIBUTE: session_key})

    async def _call(self, operation: str, **kwargs: Any) -> Any:
        """
        Run one DynamoDB client request against the session table in a worker thread.

        Raises:
            StoreError: If boto3 reports a client or service error.
        """
        method = getattr(self._require_client(), operation)
        with external_service_span("dynamodb", operation, {"db.table": self.config.table_name}):
            try:
                return await asyncio.to_thread(method, TableName=self.config.table_name, **kwargs)
            except (BotoCoreError, ClientError) as e:
                details = {"operation": operation, "table": self.config.table_name}
                if isinstance(e, ClientError):
                    details["aws_error_code"] = e.response.get("Error", {}).get("Code")
                raise store_unavailable(f"DynamoDB {operation} failed", details=details) from e

    async def create(self, session_key: str, payload: Any) -> None:
        record = SessionRecord(session_key, payload)
        await self._call("put_item", Item=serialize_item(record.to_item()))

    async def read(self, session_key: str) -> Optional[SessionRecord]:
        response = await self._call("get_item", Key=self._key(session_key))

        item = response.get("Item")
        if not item:
            return None

        item = deserialize_item(item)
        return SessionRecord(
            session_key=item.get(SESSION_KEY_ATTRIBUTE, session_key),
            session_value=item.get(SESSION_VALUE_ATTRIBUTE),
        )

    async def update(self, session_key: str, payload: Any) -> None:
        await self._call(
            "update_item",
            Key=self._key(session_key),
            UpdateExpression=f"set {SESSION_VALUE_ATTRIBUTE} = :v",
            ExpressionAttributeValues=serialize_item({":v": payload}),
        )

    async def delete(self, session_key: str) -> None:
        await self._call("delete_item", Key=self._key(session_key))

    async def health_check(self) -> bool:
        """
        Check that the table exists and is reachable.

        Note:
            This method does not raise exceptions - connectivity issues
            are caught and result in a False return value.
        """
        if self.client is None:
            return False

        try:
            await asyncio.to_thread(self.client.describe_table, TableName=self.config.table_name)
            return True
        except Exception:
            return False
