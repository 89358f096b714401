"""Synchronization package"""
from .attachments import create_data_attachment, create_file_attachment, sha1_bytes, sha1_file
from .compression import compress_text, is_compressible
from .oidc import is_github_oidc_available, request_github_oidc_token
from .retry import retry_with_backoff
from .uploader import HTTP_BACKOFF_MS, ReportUpload, UploadOptions, upload_report

__all__ = [
    "create_data_attachment",
    "create_file_attachment",
    "sha1_bytes",
    "sha1_file",
    "compress_text",
    "is_compressible",
    "is_github_oidc_available",
    "request_github_oidc_token",
    "retry_with_backoff",
    "HTTP_BACKOFF_MS",
    "ReportUpload",
    "UploadOptions",
    "upload_report",
]
