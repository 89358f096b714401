"""
Upload Result Data Model
"""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class UploadSuccess(BaseModel):
    """Report and attachments were uploaded."""

    status: Literal["success"] = "success"
    report_url: str


class UploadSkipped(BaseModel):
    """Nothing was sent, usually because no credentials were available."""

    status: Literal["skipped"] = "skipped"
    reason: str


class UploadFailed(BaseModel):
    """Some phase of the upload failed."""

    status: Literal["failed"] = "failed"
    error: str


UploadResult = Annotated[
    Union[UploadSuccess, UploadSkipped, UploadFailed],
    Field(discriminator="status"),
]
