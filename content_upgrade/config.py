"""Global configuration — loaded from environment variables."""

from typing import Literal

from pydantic_settings import BaseSettings


class ContentUpgradeSettings(BaseSettings):
    log_level: str = "INFO"

    # "range" runs hooks with old < (major, minor) <= new.
    # "legacy" compares minors against the endpoints regardless of major.
    version_filter: Literal["range", "legacy"] = "range"

    # Output encoding of re-serialized parameters
    ensure_ascii: bool = False

    model_config = {"env_prefix": "CONTENT_UPGRADE_"}


settings = ContentUpgradeSettings()
