"""Global configuration — loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class DrossSettings(BaseSettings):
    db_path: Path = Path(".dross/dross.db")
    log_level: str = "INFO"

    # Migration settings
    admin_email: str = "email@example.com"  # seed administrator address
    build_version: str = ""  # empty = installed package version
    install_shortcut: bool = True  # False replays the full step chain on new installs

    model_config = {"env_prefix": "DROSS_"}


settings = DrossSettings()
