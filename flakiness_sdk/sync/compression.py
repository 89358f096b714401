"""
Compression policy for uploaded payloads
"""
import asyncio
from typing import Union

import brotli

CONTENT_ENCODING = "br"
BROTLI_QUALITY = 6


def is_compressible(content_type: str) -> bool:
    """Textual MIME types are worth compressing before transfer."""
    mime_type = content_type.lower().strip()
    return (
        mime_type.startswith("text/")
        or mime_type.endswith("+json")
        or mime_type.endswith("+text")
        or mime_type.endswith("+xml")
    )


def compress_text(data: Union[str, bytes]) -> bytes:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return brotli.compress(data, mode=brotli.MODE_TEXT, quality=BROTLI_QUALITY)


async def compress_text_async(data: Union[str, bytes]) -> bytes:
    """Brotli-compress text off the event loop thread."""
    return await asyncio.to_thread(compress_text, data)
