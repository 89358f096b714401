"""
CI and machine environment helpers
"""
import os
import platform
import sys
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

from ..models.report import Environment, SystemData

ENV_PREFIX = "FK_ENV_"


def _github_actions_url(env: Mapping[str, str]) -> Optional[str]:
    server_url = env.get("GITHUB_SERVER_URL") or "https://github.com"
    repo = env.get("GITHUB_REPOSITORY")
    run_id = env.get("GITHUB_RUN_ID")
    if not repo or not run_id:
        return None
    params = {}
    if env.get("GITHUB_RUN_ATTEMPT"):
        params["attempt"] = env["GITHUB_RUN_ATTEMPT"]
    params["check_suite_focus"] = "true"
    return f"{server_url}/{repo}/actions/runs/{run_id}?{urlencode(params)}"


def _azure_url(env: Mapping[str, str]) -> Optional[str]:
    collection_uri = env.get("SYSTEM_TEAMFOUNDATIONCOLLECTIONURI")
    project = env.get("SYSTEM_TEAMPROJECT")
    build_id = env.get("BUILD_BUILDID")
    if not collection_uri or not project or not build_id:
        return None
    if not collection_uri.endswith("/"):
        collection_uri += "/"
    return f"{collection_uri}{project}/_build/results?{urlencode({'buildId': build_id})}"


def ci_run_url(env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Link to the CI run that produced the report.

    Checks GitHub Actions, Azure DevOps, GitLab CI (``CI_JOB_URL``) and
    Jenkins (``BUILD_URL``), in that order.

    Args:
        env: Environment variables; defaults to ``os.environ``

    Returns:
        Run URL, or None outside a supported CI
    """
    env = os.environ if env is None else env
    return (
        _github_actions_url(env)
        or _azure_url(env)
        or env.get("CI_JOB_URL")
        or env.get("BUILD_URL")
    )


def _linux_os_release() -> Dict[str, str]:
    try:
        with open("/etc/os-release", encoding="utf-8") as f:
            text = f.read().lower()
    except OSError:
        return {}
    release = {}
    for line in text.splitlines():
        if "=" not in line:
            continue
        key, value = line.strip().split("=", 1)
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            value = value[1:-1]
        release[key] = value
    return release


def detect_system_data() -> SystemData:
    """OS name, architecture and version of this machine."""
    if sys.platform == "darwin":
        return SystemData(os_name="macos", os_arch=platform.machine(), os_version=platform.mac_ver()[0])
    if sys.platform == "win32":
        return SystemData(os_name="win", os_arch=platform.machine(), os_version=platform.release())
    release = _linux_os_release()
    return SystemData(
        os_name=release.get("name") or platform.system(),
        os_arch=platform.machine(),
        os_version=release.get("version_id"),
    )


def env_configuration(env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """``FK_ENV_*`` variables, keyed by the lower-cased suffix."""
    env = os.environ if env is None else env
    return {
        key[len(ENV_PREFIX):].lower(): (value or "").strip().lower()
        for key, value in env.items()
        if key.upper().startswith(ENV_PREFIX)
    }


def create_environment(
    name: str,
    user_supplied_data: Optional[Dict[str, str]] = None,
    opaque_data: Optional[Any] = None,
) -> Environment:
    """
    Create an environment describing this machine.

    ``FK_ENV_*`` variables are merged into the user-supplied data; explicit
    ``user_supplied_data`` wins on conflicts.

    Args:
        name: Human-readable name, e.g. "CI"
        user_supplied_data: Extra key/value pairs
        opaque_data: Data stored with the environment

    Returns:
        Environment
    """
    return Environment(
        name=name,
        system_data=detect_system_data(),
        user_supplied_data={**env_configuration(), **(user_supplied_data or {})},
        opaque_data=opaque_data,
    )
