"""
Tests for attachment ids and compression policy
"""
import hashlib

import brotli
import pytest

from flakiness_sdk.models import DataAttachment, FileAttachment
from flakiness_sdk.sync import (
    compress_text,
    create_data_attachment,
    create_file_attachment,
    is_compressible,
    sha1_file,
)
from flakiness_sdk.sync.attachments import CHUNK_SIZE


@pytest.mark.asyncio
async def test_file_and_buffer_get_the_same_id(tmp_path):
    payload = b"screenshot bytes \x00\x01\x02"
    path = tmp_path / "shot.png"
    path.write_bytes(payload)

    from_file = await create_file_attachment("image/png", path)
    from_buffer = create_data_attachment("image/png", payload)

    assert from_file.id == from_buffer.id == hashlib.sha1(payload).hexdigest()
    assert isinstance(from_file, FileAttachment)
    assert from_file.path == path
    assert isinstance(from_buffer, DataAttachment)
    assert from_buffer.body == payload


@pytest.mark.asyncio
async def test_large_files_are_hashed_in_chunks(tmp_path):
    payload = bytes(range(256)) * (CHUNK_SIZE // 128 + 3)
    path = tmp_path / "trace.zip"
    path.write_bytes(payload)

    assert await sha1_file(path) == hashlib.sha1(payload).hexdigest()


@pytest.mark.asyncio
async def test_empty_file(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_bytes(b"")

    attachment = await create_file_attachment("text/plain", str(path))
    assert attachment.id == hashlib.sha1(b"").hexdigest()


@pytest.mark.asyncio
async def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        await create_file_attachment("text/plain", tmp_path / "missing.txt")


@pytest.mark.parametrize("content_type,expected", [
    ("text/plain", True),
    ("text/html; charset=utf-8", True),
    ("application/vnd.api+json", True),
    ("image/svg+xml", True),
    ("TEXT/CSV", True),
    ("image/png", False),
    ("application/json", False),
    ("application/zip", False),
])
def test_is_compressible(content_type, expected):
    assert is_compressible(content_type) is expected


def test_compress_text_is_brotli():
    text = "expected 1 to equal 2\n" * 100
    compressed = compress_text(text)
    assert len(compressed) < len(text)
    assert brotli.decompress(compressed) == text.encode("utf-8")
