from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal

from repo_consumer.core.errors import ConfigError

class Settings(BaseSettings):

    AWS_REGION: str = "us-east-1"
    AWS_QUEUE_URL: str = Field(min_length=1)
    AWS_ENDPOINT_URL: str | None = None

    # SQS caps a single receive at 10 messages and a 20 second long poll
    MAX_MESSAGES: int = Field(default=10, ge=1, le=10)
    WAIT_TIME_SECONDS: int = Field(default=20, ge=0, le=20)
    VISIBILITY_TIMEOUT: int | None = Field(default=None, ge=0, le=43200)
    BACKOFF_SECONDS: float = Field(default=5.0, gt=0)
    WORKER_CONCURRENCY: int = Field(default=1, ge=1)

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalise_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

def load_settings(**overrides) -> Settings:
    """
    Builds Settings from the environment, turning validation failures
    into a ConfigError that names every offending key.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        keys = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration ({details})", keys=keys) from e

@lru_cache()
def get_settings() -> Settings:
    return load_settings()
