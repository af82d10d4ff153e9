"""
Default LZMA compression functions for stored sessions.

Both functions run the blocking lzma call in a worker thread so that
compressing a large session does not stall the event loop. They produce
and accept the .xz container format.
"""

import asyncio
import lzma
from typing import Awaitable, Callable, Union

CompressSession = Callable[[str, int], Awaitable[bytes]]
DecompressSession = Callable[[bytes, int], Awaitable[Union[str, bytes]]]


async def lzma_compress(session_json: str, level: int) -> bytes:
    """
    Compress a serialized session.

    Args:
        session_json: JSON text of the session.
        level: LZMA preset, 0 (fastest) to 9 (smallest).

    Returns:
        The compressed bytes.
    """
    return await asyncio.to_thread(lzma.compress, session_json.encode("utf-8"), preset=level)


async def lzma_decompress(data: bytes, level: int) -> str:
    """
    Decompress a stored session back to its JSON text.

    The level is accepted for symmetry with lzma_compress; the preset
    is recorded in the stream and not needed to decode it.
    """
    raw = await asyncio.to_thread(lzma.decompress, data)
    return raw.decode("utf-8")
