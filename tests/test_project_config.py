"""
Tests for the project config file
"""
import json

import pytest
from pydantic import ValidationError

from flakiness_sdk.main import prepare_report_server
from flakiness_sdk.models import Report
from flakiness_sdk.project_config import FlakinessProjectConfig, find_config_path
from flakiness_sdk.storage import write_report


def write_config(directory, data):
    path = directory / ".flakiness" / "config.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_config_is_found_in_a_parent_directory(tmp_path):
    path = write_config(tmp_path, {"projectPublicId": "acme-web"})
    nested = tmp_path / "packages" / "app"
    nested.mkdir(parents=True)

    assert find_config_path(nested) == path.resolve()

    config = FlakinessProjectConfig.load(nested)
    assert config.project_public_id == "acme-web"
    assert config.path == path.resolve()


def test_new_config_goes_to_repository_root(tmp_path):
    (tmp_path / ".git").mkdir()
    nested = tmp_path / "src"
    nested.mkdir()

    config = FlakinessProjectConfig.load(nested)

    assert config.path == tmp_path.resolve() / ".flakiness" / "config.json"
    assert config.project_public_id is None


def test_new_config_outside_repository_goes_to_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = FlakinessProjectConfig.create_empty()
    assert config.path == tmp_path.resolve() / ".flakiness" / "config.json"


def test_viewer_url_defaults_to_settings(tmp_path, monkeypatch):
    config = FlakinessProjectConfig.create_empty(tmp_path)
    assert config.report_viewer_url == "https://report.flakiness.io"

    monkeypatch.setenv("FLAKINESS_REPORT_VIEWER_URL", "https://viewer.internal.test")
    assert config.report_viewer_url == "https://viewer.internal.test"

    config.set_custom_report_viewer_url("https://custom.test")
    assert config.report_viewer_url == "https://custom.test"

    config.set_custom_report_viewer_url(None)
    assert config.report_viewer_url == "https://viewer.internal.test"


def test_save_then_load(tmp_path):
    config = FlakinessProjectConfig.create_empty(tmp_path)
    config.set_project_public_id("acme-web")
    config.set_custom_report_viewer_url("https://custom.test")
    config.save()

    saved = json.loads(config.path.read_text(encoding="utf-8"))
    assert saved == {"projectPublicId": "acme-web", "customReportViewerUrl": "https://custom.test"}

    loaded = FlakinessProjectConfig.load(tmp_path)
    assert loaded.project_public_id == "acme-web"
    assert loaded.report_viewer_url == "https://custom.test"


def test_unknown_keys_survive_save(tmp_path):
    write_config(tmp_path, {"projectPublicId": "acme-web", "team": "qa"})

    config = FlakinessProjectConfig.load(tmp_path)
    config.set_project_public_id(None)
    config.save()

    assert json.loads(config.path.read_text(encoding="utf-8")) == {"team": "qa"}


def test_invalid_config_raises(tmp_path):
    write_config(tmp_path, {"projectPublicId": 42})
    with pytest.raises(ValidationError):
        FlakinessProjectConfig.load(tmp_path)


def test_report_server_uses_project_config(tmp_path):
    folder = tmp_path / "report"
    write_report(Report(), [], folder)
    config = FlakinessProjectConfig.create_empty(tmp_path)
    config.set_project_public_id("acme-web")
    config.set_custom_report_viewer_url("https://viewer.acme.test")

    app, port, url = prepare_report_server(folder, project_config=config)

    assert url.startswith(f"https://viewer.acme.test?port={port}&token=")
    assert url.endswith("&ppid=acme-web")
    assert app.title == "Flakiness Report Server"


def test_report_server_without_project_id(tmp_path):
    folder = tmp_path / "report"
    write_report(Report(), [], folder)

    _, _, url = prepare_report_server(folder, project_config=FlakinessProjectConfig.create_empty(tmp_path))

    assert url.startswith("https://report.flakiness.io?port=")
    assert "ppid" not in url
