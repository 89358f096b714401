"""
Report Data Model

Python attributes are snake_case; the JSON form uses camelCase aliases.
Absent optional fields are ``None`` and are omitted when serializing.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


TelemetryTransport = List[List[Union[int, float]]]


class ReportModel(BaseModel):
    """Base class for every node of the report tree."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "allow"

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump to the canonical JSON form (camelCase, absent fields omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Location(ReportModel):
    """Source location, relative to the repository root."""

    file: str
    line: int
    column: int


class SystemData(ReportModel):
    """OS information detected on the machine that ran the tests."""

    os_name: Optional[str] = None
    os_arch: Optional[str] = None
    os_version: Optional[str] = None


class Environment(ReportModel):
    """Named execution context, referenced by index from attempts."""

    name: str
    system_data: SystemData = Field(default_factory=SystemData)
    user_supplied_data: Dict[str, Any] = Field(default_factory=dict)
    opaque_data: Optional[Any] = None


class Annotation(ReportModel):
    type: str
    description: Optional[str] = None
    location: Optional[Location] = None


class ReportError(ReportModel):
    """Error raised by a test attempt or a step."""

    message: Optional[str] = None
    stack: Optional[str] = None
    location: Optional[Location] = None
    snippet: Optional[str] = None
    value: Optional[str] = None


class TestStep(ReportModel):
    title: str
    duration: Optional[int] = None
    location: Optional[Location] = None
    snippet: Optional[str] = None
    error: Optional[ReportError] = None
    steps: Optional[List["TestStep"]] = None


class AttachmentRef(ReportModel):
    """Attachment as referenced from a report; the payload lives elsewhere."""

    name: str
    content_type: str
    id: str


class RunAttempt(ReportModel):
    """
    One execution of a test.

    ``environment_idx`` of ``None`` means index 0; ``status`` and
    ``expected_status`` of ``None`` mean ``"passed"``.
    """

    environment_idx: Optional[int] = None
    status: Optional[str] = None
    expected_status: Optional[str] = None
    start_timestamp: Optional[int] = None
    duration: Optional[int] = None
    timeout: Optional[int] = None
    parallel_index: Optional[int] = None
    stdout: Optional[List[Any]] = None
    stderr: Optional[List[Any]] = None
    annotations: Optional[List[Annotation]] = None
    errors: Optional[List[ReportError]] = None
    steps: Optional[List[TestStep]] = None
    attachments: Optional[List[AttachmentRef]] = None

    @property
    def resolved_environment_idx(self) -> int:
        return self.environment_idx or 0


class Test(ReportModel):
    title: str
    location: Optional[Location] = None
    tags: Optional[List[str]] = None
    attempts: List[RunAttempt] = Field(default_factory=list)


class Suite(ReportModel):
    title: str
    type: str
    location: Optional[Location] = None
    suites: Optional[List["Suite"]] = None
    tests: Optional[List[Test]] = None


class Report(ReportModel):
    """Complete test report of one CI run."""

    category: Optional[str] = None
    commit_id: Optional[str] = None
    related_commit_ids: Optional[List[str]] = None
    config_path: Optional[str] = None
    url: Optional[str] = None
    environments: List[Environment] = Field(default_factory=list)
    suites: Optional[List[Suite]] = None
    tests: Optional[List[Test]] = None
    start_timestamp: Optional[int] = None
    duration: Optional[int] = None

    # Machine telemetry, in transport form: [[dt, value], ...]
    cpu_count: Optional[int] = None
    cpu_avg: Optional[TelemetryTransport] = None
    cpu_max: Optional[TelemetryTransport] = None
    ram_bytes: Optional[int] = None
    ram: Optional[TelemetryTransport] = None

    def to_json(self) -> str:
        """Serialize to the canonical UTF-8 JSON text."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
