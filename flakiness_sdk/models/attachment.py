"""
Attachment Data Model

Attachments are content-addressed: ``id`` is the SHA-1 of the payload.
"""
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class _AttachmentBase(BaseModel):
    id: str = Field(..., description="SHA-1 of the payload")
    content_type: str = Field(..., description="MIME type, e.g. image/png")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class FileAttachment(_AttachmentBase):
    """Attachment whose payload is a file on disk."""

    type: Literal["file"] = "file"
    path: Path


class DataAttachment(_AttachmentBase):
    """Attachment whose payload is held in memory."""

    type: Literal["buffer"] = "buffer"
    body: bytes


Attachment = Annotated[Union[FileAttachment, DataAttachment], Field(discriminator="type")]
