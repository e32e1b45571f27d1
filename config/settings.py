"""Application settings using Pydantic Settings."""

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    project_root: Path = Field(default=Path(__file__).parent.parent)
    data_dir: Path = Field(default=Path(__file__).parent.parent / "data")
    database_path: Path = Field(default=Path(__file__).parent.parent / "data" / "shellgoal.db")

    # Remote sandbox settings
    linux_api_url: str = Field(default="https://api.ssh.surf")
    working_directory: str = Field(default="/home")
    exec_timeout: float = Field(default=120.0)

    # Language model settings (litellm model string)
    groq_model: str = Field(default="groq/llama3-8b-8192")
    model_timeout: int = Field(default=120)

    # Goal loop settings
    max_iterations: int = Field(default=5, ge=1)
    max_message_length: int = Field(default=2000, ge=1)
    goal_prefix: str = Field(default="!goal")

    # Onboarding settings
    onboarding_timeout: float = Field(default=60.0)

    # API settings
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


settings = Settings()


def configure_project_root(root: Path) -> None:
    """Set project root and rebase derived paths when not explicitly configured."""
    resolved_root = root.expanduser().resolve()
    settings.project_root = resolved_root

    data_dir = settings.data_dir
    if os.getenv("DATA_DIR") is None:
        data_dir = resolved_root / "data"
        settings.data_dir = data_dir

    if os.getenv("DATABASE_PATH") is None:
        settings.database_path = data_dir / "shellgoal.db"
