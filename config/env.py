import json
from pathlib import Path
from typing import Annotated, List

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_ENV_PATH = _PROJECT_ROOT / ".env"


class Env(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_PATH),
        env_prefix="LESSONS_",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Lessons API"
    DEBUG: bool = False

    # Security
    SECRET_KEY: SecretStr = SecretStr("insecure-dev-key-change-in-production")
    ALLOWED_HOSTS: Annotated[List[str], NoDecode] = ["*"]

    @field_validator("ALLOWED_HOSTS", mode="before")
    @classmethod
    def assemble_allowed_hosts(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str):
            if v.startswith("["):
                return json.loads(v)
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    # Database
    DATABASE_ENGINE: str = "django.db.backends.sqlite3"
    DATABASE_NAME: str = str(_PROJECT_ROOT / "db.sqlite3")
    DATABASE_HOST: str = ""
    DATABASE_PORT: int | None = None
    DATABASE_USER: str = ""
    DATABASE_PASSWORD: SecretStr = SecretStr("")
    DATABASE_TIMEOUT_SECONDS: int = 5  # connect and statement timeout

    # Logging
    LOG_LEVEL: str = "INFO"

    # Capacity ledger
    RESERVATION_MAX_ATTEMPTS: int = 5


env = Env()
