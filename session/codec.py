"""
Payload codec: converts between in-memory sessions and stored payloads.

With compression disabled the session mapping is stored as a native
DynamoDB map. With compression enabled it is serialized to compact JSON,
compressed, and stored as a DynamoDB binary attribute. Nothing in the
payload records which form was used; the codec relies on the configured
``compression.enabled`` flag in both directions.
"""

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Any, Union

from boto3.dynamodb.types import Binary

from errors.exceptions import codec_error
from session.options import CompressionConfig

StoredPayload = Union[Mapping[str, Any], Binary]


class PayloadCodec:
    """Packs sessions into stored payloads and unpacks them again."""

    def __init__(self, compression: CompressionConfig):
        self.compression = compression

    async def pack(self, session: Mapping[str, Any]) -> StoredPayload:
        """
        Encode a session for storage.

        Args:
            session: The session mapping.

        Returns:
            The session itself when compression is disabled, otherwise a
            Binary holding the compressed JSON text.

        Raises:
            CodecError: If the session cannot be serialized or compressed.
        """
        if not self.compression.enabled:
            return session

        try:
            session_json = json.dumps(
                session, separators=(",", ":"), ensure_ascii=False, allow_nan=False
            )
        except (TypeError, ValueError) as e:
            raise codec_error(
                "Session is not JSON serializable",
                details={"reason": str(e)},
            ) from e

        try:
            data = await self.compression.compress_session(session_json, self.compression.level)
        except Exception as e:
            raise codec_error(
                "Session compression failed",
                details={"reason": str(e), "level": self.compression.level},
            ) from e

        return Binary(bytes(data))

    async def unpack(self, payload: Any) -> dict[str, Any]:
        """
        Decode a stored payload back into a session.

        Args:
            payload: The stored SessionValue, as returned by the store.

        Returns:
            The session mapping.

        Raises:
            CodecError: If the payload does not match the configured form,
                fails to decompress, or is not a JSON object.
        """
        if not self.compression.enabled:
            if not isinstance(payload, Mapping):
                raise codec_error(
                    "Stored payload is not a session map; was it written with compression enabled?",
                    details={"payload_type": type(payload).__name__},
                )
            return payload if isinstance(payload, dict) else dict(payload)

        data = self._unwrap(payload)

        try:
            session_json = await self.compression.decompress_session(data, self.compression.level)
        except Exception as e:
            raise codec_error(
                "Session decompression failed",
                details={"reason": str(e), "level": self.compression.level},
            ) from e

        try:
            if isinstance(session_json, (bytes, bytearray)):
                session_json = session_json.decode("utf-8")
            session = json.loads(session_json)
        except (UnicodeDecodeError, ValueError) as e:
            raise codec_error("Stored session is not valid JSON", details={"reason": str(e)}) from e

        if not isinstance(session, dict):
            raise codec_error(
                "Stored session is not a JSON object",
                details={"payload_type": type(session).__name__},
            )
        return session

    @staticmethod
    def _unwrap(payload: Any) -> bytes:
        """
        Recover the compressed bytes from a stored binary value.

        boto3 surfaces binary attributes as Binary; JSON-based clients
        surface them as base64 strings.
        """
        if isinstance(payload, Binary):
            return bytes(payload.value)
        if isinstance(payload, (bytes, bytearray, memoryview)):
            return bytes(payload)
        if isinstance(payload, str):
            try:
                return base64.b64decode(payload, validate=True)
            except (binascii.Error, ValueError) as e:
                raise codec_error(
                    "Stored payload is not valid base64",
                    details={"reason": str(e)},
                ) from e
        raise codec_error(
            "Stored payload is not a binary value; was it written with compression disabled?",
            details={"payload_type": type(payload).__name__},
        )
