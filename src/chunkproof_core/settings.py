from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, populate_by_name=True, extra="ignore"
    )

    log_level: str = Field(default="INFO", alias="CHUNKPROOF_LOG_LEVEL")

    # Default split size (bytes) used by the CLI when turning a file into chunks
    chunk_size: int = Field(default=4096, gt=0, alias="CHUNKPROOF_CHUNK_SIZE")

    # Log every intermediate digest while replaying a proof
    trace_verify: bool = Field(default=False, alias="CHUNKPROOF_TRACE_VERIFY")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = v.upper()
        if v not in _LEVELS:
            raise ValueError(f"log level must be one of {', '.join(_LEVELS)}")
        return v


settings = Settings()  # load at import
