"""Configuration settings for the NVR recording monitor."""

from pydantic_settings import BaseSettings
from pydantic import Field
from pathlib import Path
from typing import List


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    # Paths
    base_dir: Path = Path(__file__).parent
    data_dir: Path = Field(default_factory=lambda: Path(__file__).parent / "data")
    database_path: Path = Field(default_factory=lambda: Path(__file__).parent / "data" / "recmon.db")
    legacy_cameras_txt: Path = Field(default_factory=lambda: Path(__file__).parent / "data" / "cameras.txt")

    # Device (camera/encoder) access
    cam_user: str = ""
    cam_pass: str = ""
    cam_channel: int = Field(default=1, ge=1)
    cam_secure: bool = False
    cam_timeout: float = Field(default=5.0, gt=0)  # Seconds per status query

    # Polling
    poll_workers: int = Field(default=4, ge=1)
    poll_interval: float = Field(default=5.0, gt=0)  # Seconds between rounds
    poll_autostart: bool = False

    # VRM gateways
    vrm_hosts: str = ""  # Comma-separated host list
    vrm_user: str = ""
    vrm_pass: str = ""
    vrm_secure: bool = True
    vrm_verify_tls: bool = False
    vrm_timeout: float = Field(default=10.0, gt=0)

    class Config:
        env_prefix = "RECMON_"
        env_file = ".env"

    @property
    def vrm_host_list(self) -> List[str]:
        """Configured gateway hosts, blanks removed."""
        return [h.strip() for h in self.vrm_hosts.split(",") if h.strip()]


settings = Settings()

# Ensure data directory exists
settings.data_dir.mkdir(parents=True, exist_ok=True)
