"""Models package"""
from .report import (
    Annotation,
    AttachmentRef,
    Environment,
    Location,
    Report,
    ReportError,
    RunAttempt,
    Suite,
    SystemData,
    Test,
    TestStep,
)
from .attachment import Attachment, DataAttachment, FileAttachment
from .upload_result import UploadFailed, UploadResult, UploadSkipped, UploadSuccess

__all__ = [
    "Annotation",
    "AttachmentRef",
    "Environment",
    "Location",
    "Report",
    "ReportError",
    "RunAttempt",
    "Suite",
    "SystemData",
    "Test",
    "TestStep",
    "Attachment",
    "DataAttachment",
    "FileAttachment",
    "UploadFailed",
    "UploadResult",
    "UploadSkipped",
    "UploadSuccess",
]
