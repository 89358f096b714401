"""
FastAPI Report Server - serves a report folder to the Flakiness report viewer
"""
import logging
import socket
import uuid
import webbrowser
from pathlib import Path
from typing import Optional, Tuple, Union
from urllib.parse import urlencode, urlsplit

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from . import __version__
from .config import load_settings, settings
from .project_config import FlakinessProjectConfig

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".html": "text/html",
    ".js": "text/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".txt": "text/plain",
}

PORT_ATTEMPTS = 20


def resolve_report_file(root: Path, relative_path: str) -> Path:
    """
    Map a request path to a file inside the report folder.

    Args:
        root: Absolute report folder
        relative_path: Path below the server prefix

    Returns:
        Absolute path of an existing file

    Raises:
        HTTPException: 403 for paths leaving the folder, 404 for missing files
    """
    target = (root / relative_path.lstrip("/")).resolve()
    if target != root and root not in target.parents:
        raise HTTPException(status_code=403, detail="Forbidden")
    if not target.is_file():
        raise HTTPException(status_code=404, detail="File Not Found")
    return target


def create_app(
    report_folder: Union[str, Path],
    path_prefix: str,
    cors_origin: Optional[str] = None,
) -> FastAPI:
    """
    Build an app serving a report folder under ``/<path_prefix>/``.

    Args:
        report_folder: Folder written by ``write_report``
        path_prefix: URL prefix; acts as an access token
        cors_origin: Origin allowed to fetch the files, usually the viewer

    Returns:
        FastAPI application
    """
    root = Path(report_folder).resolve()
    prefix = "/" + path_prefix.strip("/")

    app = FastAPI(
        title="Flakiness Report Server",
        description="Serves a local report to the report viewer",
        version=__version__,
    )

    if cors_origin:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[cors_origin],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get(prefix + "/{file_path:path}")
    async def get_report_file(file_path: str):
        """Serve one file of the report folder."""
        target = resolve_report_file(root, file_path)
        logger.debug(f"[200] GET {prefix}/{file_path} -> {target}")
        return FileResponse(
            str(target),
            media_type=MIME_TYPES.get(target.suffix.lower(), "application/octet-stream"),
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "report_folder": str(root)}

    return app


def _is_port_free(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_free_port(port: int, host: str = "127.0.0.1") -> int:
    """
    Find a port to listen on, starting at ``port``.

    Up to 20 sequential ports are tried (wrapping to 4000 past 65535);
    after that the OS picks a random free port.
    """
    for _ in range(PORT_ATTEMPTS):
        if _is_port_free(host, port):
            return port
        logger.debug(f"Port {port} is busy. Trying next port...")
        port = port + 1 if port < 65535 else 4000

    logger.debug("All sequential ports busy. Falling back to random port.")
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def viewer_url(viewer: str, port: int, token: str, project_public_id: Optional[str] = None) -> str:
    params = {"port": port, "token": token}
    if project_public_id:
        params["ppid"] = project_public_id
    return f"{viewer}?{urlencode(params)}"


def prepare_report_server(
    report_folder: Union[str, Path],
    port: Optional[int] = None,
    host: str = "127.0.0.1",
    project_config: Optional[FlakinessProjectConfig] = None,
) -> Tuple[FastAPI, int, str]:
    """
    Build the server app for a report folder and pick its port.

    The viewer URL and project public id come from the project config,
    loaded from the working directory unless given.

    Args:
        report_folder: Folder written by ``write_report``
        port: First port to try; defaults to REPORT_SERVER_PORT
        host: Interface to bind
        project_config: Project config to use

    Returns:
        The app, the port to listen on and the viewer URL to open
    """
    project_config = project_config or FlakinessProjectConfig.load()
    token = uuid.uuid4().hex
    viewer = project_config.report_viewer_url
    parts = urlsplit(viewer)

    app = create_app(report_folder, token, cors_origin=f"{parts.scheme}://{parts.netloc}")
    port = find_free_port(port or load_settings().REPORT_SERVER_PORT, host)
    url = viewer_url(viewer, port, token, project_config.project_public_id)
    return app, port, url


def serve_report(
    report_folder: Union[str, Path],
    port: Optional[int] = None,
    host: str = "127.0.0.1",
    open_browser: bool = True,
):
    """
    Serve a report folder and open it in the report viewer.

    Runs until the process is interrupted.

    Args:
        report_folder: Folder written by ``write_report``
        port: First port to try; defaults to REPORT_SERVER_PORT
        host: Interface to bind
        open_browser: Open the viewer in the default browser
    """
    import uvicorn

    app, port, url = prepare_report_server(report_folder, port, host)

    print(f"\n  Serving Flakiness report at {url}\n  Press Ctrl+C to quit.")
    if open_browser:
        webbrowser.open(url)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    serve_report(settings.REPORT_DIR)
