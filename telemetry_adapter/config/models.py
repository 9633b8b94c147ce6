"""Config models and loader.

This module defines Pydantic models for file- and environment-based
configuration. The JSON application config lists the vendor sources to poll;
environment settings cover process-level knobs such as the log level.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Literal, Optional

import orjson
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SourceType = Literal["hobolink", "imonnit"]


class SourceConfig(BaseModel):
    """Configuration for a single vendor account.

    Attributes
    ----------
    type: str
        Vendor type identifier ("hobolink" or "imonnit").
    server: Optional[str]
        API URL; the vendor default is used when omitted.
    user, password: str
        Account credentials (HOBOlink only).
    token: str
        Account API token.
    serial_numbers: List[str]
        Devices to collect; empty collects every device of the account.
    http_timeout_seconds: float
        Per-request timeout in seconds.
    name_delimiter: str
        Separator of the sensor naming convention (iMonnit only).
    measurement: Optional[str]
        Overrides the measurement name of emitted points.
    """

    type: SourceType = Field(..., description="Vendor type identifier")
    server: Optional[str] = Field(None, description="API URL override")
    user: str = Field("", description="Account user name")
    password: str = Field("", description="Account password")
    token: str = Field("", description="Account API token")
    serial_numbers: List[str] = Field(default_factory=list)
    http_timeout_seconds: float = Field(5.0, gt=0)
    name_delimiter: str = Field("|", min_length=1)
    measurement: Optional[str] = None

    @field_validator("serial_numbers")
    @classmethod
    def _drop_blank_serials(cls, value: List[str]) -> List[str]:
        return [s.strip() for s in value if s and s.strip()]


class AppConfig(BaseModel):
    """Top-level application configuration.

    Attributes
    ----------
    interval_seconds: float
        Collection interval between poll cycles.
    sources: Dict[str, SourceConfig]
        Mapping from logical `source_id` to vendor account settings.
    """

    interval_seconds: float = Field(60.0, gt=0)
    sources: Dict[str, SourceConfig] = Field(default_factory=dict)

    @staticmethod
    def load(path: Path) -> "AppConfig":
        """Load application config from a JSON file."""
        data = orjson.loads(path.read_bytes())
        return AppConfig.model_validate(data)


class EnvSettings(BaseSettings):
    """Environment-driven settings and .env support.

    Attributes
    ----------
    log_level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".
    config_path: Optional[Path]
        Path to the JSON application config when ``--config`` is not given.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="TELEMETRY_ADAPTER_")

    log_level: str = Field("INFO")
    config_path: Optional[Path] = None
