"""
Report Uploader - sends a report and its attachments to Flakiness.io

The upload runs in four strictly sequential phases:

1. ``POST /api/upload/start`` opens a session and returns an upload token,
   a presigned URL for the report body and the report's web URL.
2. ``POST /api/upload/attachments`` presigns every attachment id at once.
3. The compressed report and every attachment are PUT concurrently to
   their presigned URLs, each request retried on its own. When one transfer
   gives up, the others are cancelled and awaited before the error surfaces.
4. ``POST /api/upload/finish`` closes the session.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import aiofiles
import httpx
from pydantic import BaseModel

from ..config import HTTP_BACKOFF_MS, load_settings
from ..errors import OIDCTokenError, UploadError, UploadProtocolError, UploadRequestError
from ..models.attachment import Attachment, DataAttachment, FileAttachment
from ..models.report import Report
from ..models.upload_result import UploadFailed, UploadResult, UploadSkipped, UploadSuccess
from .attachments import iter_file
from .compression import CONTENT_ENCODING, compress_text_async, is_compressible
from .oidc import is_github_oidc_available, request_github_oidc_token
from .retry import retry_with_backoff

logger = logging.getLogger(__name__)


class UploadOptions(BaseModel):
    """Options of ``upload_report``; unset values fall back to the environment."""

    flakiness_endpoint: Optional[str] = None
    flakiness_access_token: Optional[str] = None
    github_oidc_audience: Optional[str] = None
    throw_on_failure: bool = False
    backoff_ms: Optional[List[int]] = None
    logger: Optional[logging.Logger] = None

    class Config:
        arbitrary_types_allowed = True


class ReportUpload:
    """
    One upload session.

    Handles:
    - Session start and attachment presigning
    - Compression of the report and of textual attachments
    - Concurrent transfers with per-request retries
    - Session finish
    """

    def __init__(
        self,
        report: Report,
        attachments: Sequence[Attachment],
        access_token: str,
        endpoint: str,
        client: httpx.AsyncClient,
        backoff_ms: Sequence[int] = HTTP_BACKOFF_MS,
        debug: bool = False,
    ):
        self.report = report
        self.attachments = list(attachments)
        self.access_token = access_token
        self.endpoint = endpoint
        self.client = client
        self.backoff_ms = list(backoff_ms)
        self.debug = debug

    async def _api(self, pathname: str, token: str, body: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """
        Call a JSON endpoint of the service.

        Args:
            pathname: API path; replaces the endpoint's path
            token: Bearer token
            body: JSON body, if any

        Returns:
            The successful response; callers parse the body they need

        Raises:
            UploadError: on transport errors and non-2xx responses
        """
        url = httpx.URL(self.endpoint).copy_with(path=pathname)
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        try:
            response = await self.client.post(url, headers=headers, json=body)
        except httpx.HTTPError as e:
            raise UploadError(f"{url} {e}") from e
        if not response.is_success:
            raise UploadError(f"{response.status_code} {url} {response.text}")
        return response

    async def upload(self) -> str:
        """
        Run all phases of the upload.

        Returns:
            Web URL of the uploaded report
        """
        session = (await self._api("/api/upload/start", self.access_token)).json()
        upload_token = session["uploadToken"]
        report_url = str(httpx.URL(self.endpoint).join(session["webUrl"]))

        presigned = (await self._api("/api/upload/attachments", upload_token, {
            "attachmentIds": [attachment.id for attachment in self.attachments],
        })).json()
        upload_urls = {item["attachmentId"]: item["presignedUrl"] for item in presigned}

        for attachment in self.attachments:
            if not upload_urls.get(attachment.id):
                raise UploadProtocolError(
                    f"Internal error: missing upload URL for attachment {attachment.id}"
                )

        logger.debug(f"Uploading report and {len(self.attachments)} attachment(s)")
        transfers = [asyncio.create_task(self._upload_report(session["presignedReportUrl"]))]
        transfers += [
            asyncio.create_task(self._upload_attachment(attachment, upload_urls[attachment.id]))
            for attachment in self.attachments
        ]
        try:
            await asyncio.gather(*transfers)
        except Exception:
            # One transfer gave up; stop the others before reporting.
            for task in transfers:
                task.cancel()
            await asyncio.gather(*transfers, return_exceptions=True)
            raise

        await self._api("/api/upload/finish", upload_token)
        return report_url

    async def _put(self, url: str, headers: Dict[str, str], content_factory):
        """PUT a payload, retrying per the backoff schedule."""

        async def job():
            response = await self.client.put(url, headers=headers, content=content_factory())
            if not response.is_success:
                raise UploadRequestError(url, response.status_code, response.text)

        await retry_with_backoff(job, self.backoff_ms, debug=self.debug)

    async def _upload_report(self, upload_url: str):
        compressed = await compress_text_async(self.report.to_json())
        headers = {
            "Content-Type": "application/json",
            "Content-Length": str(len(compressed)),
            "Content-Encoding": CONTENT_ENCODING,
        }
        await self._put(upload_url, headers, lambda: compressed)

    async def _upload_attachment(self, attachment: Attachment, upload_url: str):
        compressible = is_compressible(attachment.content_type)

        # Binary files on disk are streamed as is.
        if not compressible and isinstance(attachment, FileAttachment):
            headers = {
                "Content-Type": attachment.content_type,
                "Content-Length": str(attachment.path.stat().st_size),
            }
            await self._put(upload_url, headers, lambda: iter_file(attachment.path))
            return

        if isinstance(attachment, DataAttachment):
            body = attachment.body
        else:
            async with aiofiles.open(attachment.path, "rb") as f:
                body = await f.read()

        if compressible:
            body = await compress_text_async(body)

        headers = {
            "Content-Type": attachment.content_type,
            "Content-Length": str(len(body)),
        }
        if compressible:
            headers["Content-Encoding"] = CONTENT_ENCODING

        await self._put(upload_url, headers, lambda: body)


async def upload_report(
    report: Report,
    attachments: Sequence[Attachment],
    options: Optional[UploadOptions] = None,
) -> UploadResult:
    """
    Upload a report and its attachments to Flakiness.io.

    Credentials are taken from, in order: ``options.flakiness_access_token``,
    ``FLAKINESS_ACCESS_TOKEN``, a GitHub Actions OIDC token for the configured
    audience. Without any of them the upload is skipped.

    By default this never raises: failures are logged and returned as
    ``UploadFailed``. With ``throw_on_failure`` they propagate instead.

    Args:
        report: Report to upload, usually normalized
        attachments: Attachments referenced by the report
        options: Upload options

    Returns:
        UploadSuccess, UploadSkipped or UploadFailed
    """
    options = options or UploadOptions()
    config = load_settings()
    log = options.logger or logger

    access_token = options.flakiness_access_token or config.FLAKINESS_ACCESS_TOKEN
    endpoint = options.flakiness_endpoint or config.FLAKINESS_ENDPOINT
    backoff_ms = options.backoff_ms if options.backoff_ms is not None else config.UPLOAD_BACKOFF_MS

    async with httpx.AsyncClient(timeout=config.REQUEST_TIMEOUT) as client:
        # Without an explicit access token, try GitHub OIDC.
        if not access_token and is_github_oidc_available(config):
            audience = options.github_oidc_audience or config.FLAKINESS_OIDC_AUDIENCE
            if audience:
                try:
                    log.info("[flakiness.io] Requesting GitHub OIDC token...")
                    access_token = await request_github_oidc_token(audience, config, client)
                except OIDCTokenError as e:
                    log.error(f"[flakiness.io] ✕ Failed to obtain GitHub OIDC token: {e}")
                    if options.throw_on_failure:
                        raise
                    return UploadFailed(error=f"GitHub OIDC token request failed: {e}")

        if not access_token:
            reason = "No FLAKINESS_ACCESS_TOKEN or GitHub OIDC audience found"
            if config.running_in_ci:
                log.warning(f"[flakiness.io] ⚠ Skipping upload: {reason}")
            return UploadSkipped(reason=reason)

        upload = ReportUpload(
            report,
            attachments,
            access_token=access_token,
            endpoint=endpoint,
            client=client,
            backoff_ms=backoff_ms,
            debug=config.FLAKINESS_DBG,
        )
        try:
            report_url = await upload.upload()
        except UploadError as e:
            log.error(f"[flakiness.io] ✕ Failed to upload: {e}")
            if options.throw_on_failure:
                raise
            return UploadFailed(error=str(e))
        except Exception as e:
            log.error(f"[flakiness.io] ✕ Unexpected error during upload: {e}")
            if options.throw_on_failure:
                raise
            return UploadFailed(error=str(e) or e.__class__.__name__)

    log.info(f"[flakiness.io] ✓ Uploaded to {report_url}")
    return UploadSuccess(report_url=report_url)
