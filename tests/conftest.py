"""
Shared pytest fixtures.

Every test runs with the SDK's environment variables cleared so results do
not depend on the machine (or CI) running the suite.
"""
import os

import pytest

from flakiness_sdk.models import Report

SDK_ENV_VARS = [
    "FLAKINESS_ACCESS_TOKEN",
    "FLAKINESS_ENDPOINT",
    "FLAKINESS_OIDC_AUDIENCE",
    "FLAKINESS_DBG",
    "ACTIONS_ID_TOKEN_REQUEST_URL",
    "ACTIONS_ID_TOKEN_REQUEST_TOKEN",
    "CI",
    "UPLOAD_BACKOFF_MS",
    "FLAKINESS_REPORT_VIEWER_URL",
    "REPORT_SERVER_PORT",
    "GITHUB_SERVER_URL",
    "GITHUB_REPOSITORY",
    "GITHUB_RUN_ID",
    "GITHUB_RUN_ATTEMPT",
    "SYSTEM_TEAMFOUNDATIONCOLLECTIONURI",
    "SYSTEM_TEAMPROJECT",
    "BUILD_BUILDID",
    "CI_JOB_URL",
    "BUILD_URL",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove SDK-related variables from the environment."""
    for name in SDK_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.upper().startswith("FK_ENV_"):
            monkeypatch.delenv(name, raising=False)


def environment(name: str) -> dict:
    return {"name": name, "systemData": {"osName": name}, "userSuppliedData": {}}


@pytest.fixture
def sharded_report() -> Report:
    """
    Two shards of the same run merged into one tree.

    ``login.spec.ts > logs in`` appears in both shards, in different
    environments, and the "win" environment is never used.
    """
    location = {"file": "login.spec.ts", "line": 0, "column": 0}
    test_location = {"file": "login.spec.ts", "line": 3, "column": 1}
    return Report.model_validate({
        "commitId": "0123abcd",
        "url": "https://ci.example.test/run/1",
        "environments": [environment("linux"), environment("mac"), environment("win")],
        "suites": [
            {
                "title": "login.spec.ts",
                "type": "file",
                "location": location,
                "tests": [{
                    "title": "logs in",
                    "location": test_location,
                    "tags": ["smoke"],
                    "attempts": [{"environmentIdx": 1, "status": "failed", "duration": 120}],
                }],
            },
            {
                "title": "login.spec.ts",
                "type": "file",
                "location": location,
                "tests": [{
                    "title": "logs in",
                    "location": test_location,
                    "tags": ["auth"],
                    "attempts": [{"environmentIdx": 0, "status": "passed", "duration": 80}],
                }],
            },
        ],
    })
