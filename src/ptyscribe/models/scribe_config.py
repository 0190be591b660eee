"""Configuration model for ptyscribe."""

from pydantic import BaseModel, Field

from ptyscribe.constants import (
    DEFAULT_LOG_FILE,
    DEFAULT_TRANSCRIPT,
    READ_CHUNK_SIZE,
    REAP_TIMEOUT_SECONDS,
    SLAVE_NAME_MAX,
)


class ScribeConfig(BaseModel):
    """Runtime configuration for ptyscribe."""

    shell: str | None = None
    transcript_path: str = DEFAULT_TRANSCRIPT
    log_file: str = DEFAULT_LOG_FILE
    chunk_size: int = Field(default=READ_CHUNK_SIZE, gt=0)
    slave_name_max: int = Field(default=SLAVE_NAME_MAX, gt=0)
    reap_timeout: float = Field(default=REAP_TIMEOUT_SECONDS, ge=0)
