"""
Flakiness SDK - build, normalize and upload test execution reports
"""
__version__ = "0.1.0"

from .errors import (
    FlakinessError,
    InvalidEnvironmentReference,
    OIDCTokenError,
    UploadError,
    UploadProtocolError,
    UploadRequestError,
)
from .models import (
    Attachment,
    DataAttachment,
    Environment,
    FileAttachment,
    Report,
    RunAttempt,
    Suite,
    Test,
    UploadFailed,
    UploadResult,
    UploadSkipped,
    UploadSuccess,
)
from .normalization import normalize_report, stable_hash
from .project_config import FlakinessProjectConfig
from .storage import ReportFolder, read_report, write_report
from .sync import (
    UploadOptions,
    create_data_attachment,
    create_file_attachment,
    is_github_oidc_available,
    request_github_oidc_token,
    upload_report,
)
from .telemetry import TelemetryPoint, TelemetrySeries, add_telemetry_point, to_transport_form
from .utils import ci_run_url, create_environment, strip_ansi, visit_tests

__all__ = [
    "__version__",
    "FlakinessError",
    "InvalidEnvironmentReference",
    "OIDCTokenError",
    "UploadError",
    "UploadProtocolError",
    "UploadRequestError",
    "Attachment",
    "DataAttachment",
    "Environment",
    "FileAttachment",
    "Report",
    "RunAttempt",
    "Suite",
    "Test",
    "UploadFailed",
    "UploadResult",
    "UploadSkipped",
    "UploadSuccess",
    "normalize_report",
    "stable_hash",
    "FlakinessProjectConfig",
    "ReportFolder",
    "read_report",
    "write_report",
    "UploadOptions",
    "create_data_attachment",
    "create_file_attachment",
    "is_github_oidc_available",
    "request_github_oidc_token",
    "upload_report",
    "TelemetryPoint",
    "TelemetrySeries",
    "add_telemetry_point",
    "to_transport_form",
    "ci_run_url",
    "create_environment",
    "strip_ansi",
    "visit_tests",
]
