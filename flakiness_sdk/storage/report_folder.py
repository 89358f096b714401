"""
Report Folder - reads and writes reports on disk

Layout:
- ``report.json``: the report, UTF-8 JSON
- ``attachments/``: one file per attachment, named by its id
"""
import json
import logging
import shutil
from pathlib import Path
from typing import Dict, List, Sequence, Union

from pydantic import BaseModel, Field

from ..models.attachment import Attachment, DataAttachment, FileAttachment
from ..models.report import AttachmentRef, Report
from ..utils.helpers import visit_tests

logger = logging.getLogger(__name__)

REPORT_FILE = "report.json"
ATTACHMENTS_DIR = "attachments"


class ReportFolder(BaseModel):
    """A report loaded from disk."""

    report: Report
    attachments: List[FileAttachment] = Field(default_factory=list)
    missing_attachments: List[AttachmentRef] = Field(default_factory=list)


def write_report(
    report: Report,
    attachments: Sequence[Attachment],
    output_folder: Union[str, Path],
) -> List[FileAttachment]:
    """
    Write a report and its attachments to a folder.

    The folder is removed first and recreated, so it only holds this report.

    Args:
        report: Report to write
        attachments: Attachments to store next to it
        output_folder: Destination folder

    Returns:
        The attachments as files inside ``attachments/``
    """
    output_folder = Path(output_folder)
    attachments_dir = output_folder / ATTACHMENTS_DIR

    shutil.rmtree(output_folder, ignore_errors=True)
    output_folder.mkdir(parents=True, exist_ok=True)
    (output_folder / REPORT_FILE).write_text(report.to_json(), encoding="utf-8")

    if attachments:
        attachments_dir.mkdir()

    written = []
    for attachment in attachments:
        attachment_path = attachments_dir / attachment.id
        if isinstance(attachment, DataAttachment):
            attachment_path.write_bytes(attachment.body)
        else:
            shutil.copyfile(attachment.path, attachment_path)
        written.append(FileAttachment(
            id=attachment.id,
            content_type=attachment.content_type,
            path=attachment_path,
        ))

    logger.info(f"Wrote report with {len(written)} attachment(s) to {output_folder}")
    return written


def _index_files(folder: Path) -> Dict[str, Path]:
    if not folder.is_dir():
        return {}
    return {path.name: path for path in folder.rglob("*") if path.is_file()}


def read_report(report_folder: Union[str, Path]) -> ReportFolder:
    """
    Read a report previously written with ``write_report``.

    Attachments referenced by the report are looked up by id in
    ``attachments/``; a missing directory only means every attachment is
    missing.

    Args:
        report_folder: Folder holding ``report.json``

    Returns:
        ReportFolder with the report, the attachments found on disk and the
        references that could not be resolved

    Raises:
        FileNotFoundError: if ``report.json`` does not exist
        pydantic.ValidationError: if ``report.json`` is not a report
    """
    report_folder = Path(report_folder).resolve()
    data = json.loads((report_folder / REPORT_FILE).read_text(encoding="utf-8"))
    report = Report.model_validate(data)

    files = _index_files(report_folder / ATTACHMENTS_DIR)
    found: Dict[str, FileAttachment] = {}
    missing: Dict[str, AttachmentRef] = {}

    def collect(test, parent_suites):
        for attempt in test.attempts:
            for ref in attempt.attachments or []:
                path = files.get(ref.id)
                if path is None:
                    missing[ref.id] = ref
                else:
                    found[ref.id] = FileAttachment(
                        id=ref.id,
                        content_type=ref.content_type,
                        path=path,
                    )

    visit_tests(report, collect)

    if missing:
        logger.warning(f"{len(missing)} attachment(s) of {report_folder} are missing")

    return ReportFolder(
        report=report,
        attachments=list(found.values()),
        missing_attachments=list(missing.values()),
    )
