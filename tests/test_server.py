"""
Tests for the local report server
"""
import socket

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from flakiness_sdk.main import create_app, find_free_port, resolve_report_file, viewer_url
from flakiness_sdk.models import Report
from flakiness_sdk.storage import write_report
from flakiness_sdk.sync import create_data_attachment

VIEWER_ORIGIN = "https://report.flakiness.test"


@pytest.fixture
def report_folder(tmp_path):
    folder = tmp_path / "flakiness-report"
    write_report(Report(commit_id="abc"), [create_data_attachment("text/plain", b"log")], folder)
    return folder


@pytest.fixture
def client(report_folder):
    return TestClient(create_app(report_folder, "s3cret", cors_origin=VIEWER_ORIGIN))


def test_serves_report(client):
    response = client.get("/s3cret/report.json")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.json()["commitId"] == "abc"


def test_serves_attachments(client, report_folder):
    name = next((report_folder / "attachments").iterdir()).name
    response = client.get(f"/s3cret/attachments/{name}")
    assert response.status_code == 200
    assert response.content == b"log"


def test_wrong_prefix_is_not_found(client):
    assert client.get("/guess/report.json").status_code == 404


def test_missing_file_is_not_found(client):
    assert client.get("/s3cret/nope.json").status_code == 404
    assert client.get("/s3cret/attachments").status_code == 404


def test_only_get_is_allowed(client):
    assert client.post("/s3cret/report.json").status_code == 405


def test_cors_preflight(client):
    response = client.options(
        "/s3cret/report.json",
        headers={"Origin": VIEWER_ORIGIN, "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == VIEWER_ORIGIN


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_paths_outside_folder_are_forbidden(report_folder):
    root = report_folder.resolve()
    with pytest.raises(HTTPException) as exc_info:
        resolve_report_file(root, "../secret.txt")
    assert exc_info.value.status_code == 403

    assert resolve_report_file(root, "/report.json") == root / "report.json"


def test_find_free_port_skips_busy_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen(1)
        port = busy.getsockname()[1]

        free = find_free_port(port)

    assert free != port
    assert free > 0


def test_viewer_url():
    assert viewer_url("https://report.flakiness.io", 9373, "abc") == (
        "https://report.flakiness.io?port=9373&token=abc"
    )
