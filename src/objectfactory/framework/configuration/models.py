"""
Configuration data models with validation.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator, ValidationInfo


class LoggingConfiguration(BaseModel):
    """Logging system configuration with validation."""
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = Field(default="json", pattern="^(json|text)$")
    output: str = Field(default="console", pattern="^(console|file|both)$")
    file_path: Optional[str] = Field(default=None, validate_default=True)

    @field_validator('file_path')
    @classmethod
    def validate_file_path(cls, v, info: ValidationInfo):
        """Validate file path when file output is used."""
        if info.data.get('output') in ['file', 'both'] and not v:
            raise ValueError("file_path is required when output is 'file' or 'both'")
        return v


class HotReloadConfiguration(BaseModel):
    """Polling settings for watching file-backed configuration sources."""
    enabled: bool = False
    poll_interval: float = Field(default=1.0, gt=0, le=3600)
    error_backoff: float = Field(default=5.0, gt=0, le=3600)

    @field_validator('error_backoff')
    @classmethod
    def validate_error_backoff(cls, v, info: ValidationInfo):
        """The backoff after a failed reload must not be shorter than a normal poll."""
        poll_interval = info.data.get('poll_interval')
        if poll_interval is not None and v < poll_interval:
            raise ValueError("error_backoff must be at least poll_interval")
        return v
