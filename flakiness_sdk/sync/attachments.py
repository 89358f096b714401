"""
Attachment Resolver - content-addressed ids for attachment payloads
"""
import hashlib
from pathlib import Path
from typing import AsyncIterator, Union

import aiofiles

from ..models.attachment import DataAttachment, FileAttachment

CHUNK_SIZE = 64 * 1024


def sha1_bytes(data: bytes) -> str:
    """Hex SHA-1 of an in-memory payload."""
    return hashlib.sha1(data).hexdigest()


async def iter_file(path: Union[str, Path], chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Yield a file's content in chunks without loading it whole."""
    async with aiofiles.open(path, "rb") as f:
        while True:
            chunk = await f.read(chunk_size)
            if not chunk:
                break
            yield chunk


async def sha1_file(path: Union[str, Path]) -> str:
    """
    Hex SHA-1 of a file on disk, read in chunks.

    Args:
        path: File to hash

    Returns:
        Same digest ``sha1_bytes`` gives for the file's bytes
    """
    digest = hashlib.sha1()
    async for chunk in iter_file(path):
        digest.update(chunk)
    return digest.hexdigest()


async def create_file_attachment(content_type: str, path: Union[str, Path]) -> FileAttachment:
    """
    Create an attachment backed by an existing file.

    Args:
        content_type: MIME type of the file, e.g. image/png
        path: Path to the file; it must be readable now

    Returns:
        FileAttachment whose id is the SHA-1 of the file content
    """
    return FileAttachment(
        id=await sha1_file(path),
        content_type=content_type,
        path=Path(path),
    )


def create_data_attachment(content_type: str, body: bytes) -> DataAttachment:
    """
    Create an attachment from in-memory data.

    Args:
        content_type: MIME type of the data
        body: Payload

    Returns:
        DataAttachment whose id is the SHA-1 of ``body``
    """
    return DataAttachment(
        id=sha1_bytes(body),
        content_type=content_type,
        body=body,
    )
