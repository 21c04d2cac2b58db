from __future__ import annotations
from pydantic_settings import BaseSettings
from pydantic import Field

class Settings(BaseSettings):
    # Collaboration server
    SERVER_URL: str = Field(default="https://interact.sh")
    PERSISTENT_SESSION: bool = Field(default=False)
    POLL_INTERVAL_S: float = Field(default=5.0, gt=0)

    # Networking
    TIMEOUT_S: int = Field(default=15)
    RETRIES: int = Field(default=2)
    PROXY_URL: str | None = Field(default=None)
    USER_AGENT: str = Field(default="oob-client/0.1")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    model_config = {"env_prefix": "OOB_", "env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}
