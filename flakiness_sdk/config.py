"""
Configuration settings for the Flakiness SDK
"""
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings


DEFAULT_ENDPOINT = "https://flakiness.io"
HTTP_BACKOFF_MS = [100, 500, 1000, 1000, 1000, 1000]


class Settings(BaseSettings):
    """SDK settings, read from the environment"""

    # Upload credentials and endpoint
    FLAKINESS_ACCESS_TOKEN: Optional[str] = None
    FLAKINESS_ENDPOINT: str = DEFAULT_ENDPOINT
    FLAKINESS_OIDC_AUDIENCE: Optional[str] = None

    # GitHub Actions OIDC
    ACTIONS_ID_TOKEN_REQUEST_URL: Optional[str] = None
    ACTIONS_ID_TOKEN_REQUEST_TOKEN: Optional[str] = None

    # Runtime
    CI: Optional[str] = None
    FLAKINESS_DBG: bool = False

    # Upload settings
    UPLOAD_BACKOFF_MS: List[int] = HTTP_BACKOFF_MS
    REQUEST_TIMEOUT: float = 60.0  # seconds

    # Report viewer
    FLAKINESS_REPORT_VIEWER_URL: str = "https://report.flakiness.io"
    REPORT_DIR: Path = Path("flakiness-report")
    REPORT_SERVER_PORT: int = 9373

    class Config:
        env_file = ".env"
        extra = "allow"

    @property
    def running_in_ci(self) -> bool:
        return bool(self.CI)


def load_settings() -> Settings:
    """Read settings from the current environment."""
    return Settings()


settings = Settings()
