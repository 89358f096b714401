"""
Project Config - per-project settings stored in ``.flakiness/config.json``

The file is looked up by walking from the working directory towards the
filesystem root. When none exists, new configs are placed at the repository
root (the closest directory holding ``.git``), or in the working directory
outside a repository.
"""
import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from .config import load_settings

logger = logging.getLogger(__name__)

CONFIG_DIR = ".flakiness"
CONFIG_FILE = "config.json"


class ProjectConfigData(BaseModel):
    """JSON content of the project config file."""

    project_public_id: Optional[str] = None
    custom_report_viewer_url: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "allow"


def config_path_for(directory: Union[str, Path]) -> Path:
    return Path(directory) / CONFIG_DIR / CONFIG_FILE


def find_config_path(cwd: Optional[Union[str, Path]] = None) -> Path:
    """
    Locate the project config file.

    Args:
        cwd: Directory to start from; defaults to the working directory

    Returns:
        Path of an existing config, or where a new one should be saved
    """
    start = Path(cwd or Path.cwd()).resolve()
    directories = [start, *start.parents]

    for directory in directories:
        candidate = config_path_for(directory)
        if candidate.is_file():
            return candidate

    for directory in directories:
        if (directory / ".git").exists():
            return config_path_for(directory)

    return config_path_for(start)


class FlakinessProjectConfig:
    """
    Flakiness project configuration.

    Handles:
    - Discovery of ``.flakiness/config.json``
    - The project public id used to link local reports to a project
    - A custom report viewer URL
    """

    def __init__(self, config_path: Union[str, Path], data: Optional[ProjectConfigData] = None):
        self.config_path = Path(config_path)
        self.data = data or ProjectConfigData()

    @classmethod
    def load(cls, cwd: Optional[Union[str, Path]] = None) -> "FlakinessProjectConfig":
        """
        Load the project config, or an empty one when no file exists yet.

        Raises:
            ValueError: if the file exists but is not valid JSON
            pydantic.ValidationError: if the JSON has the wrong shape
        """
        config_path = find_config_path(cwd)
        if not config_path.is_file():
            return cls(config_path)
        data = json.loads(config_path.read_text(encoding="utf-8"))
        return cls(config_path, ProjectConfigData.model_validate(data))

    @classmethod
    def create_empty(cls, cwd: Optional[Union[str, Path]] = None) -> "FlakinessProjectConfig":
        return cls(find_config_path(cwd))

    @property
    def path(self) -> Path:
        return self.config_path

    @property
    def project_public_id(self) -> Optional[str]:
        return self.data.project_public_id

    def set_project_public_id(self, project_id: Optional[str]):
        self.data.project_public_id = project_id

    @property
    def report_viewer_url(self) -> str:
        """Custom viewer URL if configured, else ``FLAKINESS_REPORT_VIEWER_URL``."""
        return self.data.custom_report_viewer_url or load_settings().FLAKINESS_REPORT_VIEWER_URL

    def set_custom_report_viewer_url(self, url: Optional[str]):
        self.data.custom_report_viewer_url = url or None

    def save(self):
        """Write the config, creating ``.flakiness/`` if needed."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(
            json.dumps(self.data.model_dump(by_alias=True, exclude_none=True), indent=2),
            encoding="utf-8",
        )
        logger.debug(f"Saved project config to {self.config_path}")
