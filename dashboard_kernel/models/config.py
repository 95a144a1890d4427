"""Dashboard configuration."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field


_ENV_FIELDS = {
    "DASHBOARD_DEFAULT_BUILDING": "default_building",
    "DASHBOARD_BUILDING_SUFFIX": "building_name_suffix",
    "DASHBOARD_REVEAL_DELAY_SECONDS": "reveal_delay_seconds",
    "DASHBOARD_CLOCK_INTERVAL_SECONDS": "clock_interval_seconds",
    "DASHBOARD_STORAGE_KEY": "storage_key",
    "DASHBOARD_STORAGE_PATH": "storage_path",
    "DASHBOARD_API_URL": "api_base_url",
    "DASHBOARD_REQUEST_TIMEOUT_SECONDS": "request_timeout_seconds",
    "DASHBOARD_LOG_LEVEL": "log_level",
}


class DashboardConfig(BaseModel):
    """Configuration for the dashboard orchestrator and its collaborators."""

    default_building: str = Field(default="Dallas", min_length=1)
    building_name_suffix: str = " Office"
    reveal_delay_seconds: float = Field(default=10.0, ge=0)
    clock_interval_seconds: float = Field(default=60.0, gt=0)
    storage_key: str = "selectedBuilding"
    storage_path: str = ":memory:"
    api_base_url: Optional[str] = None
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DashboardConfig":
        """Build a config from DASHBOARD_* environment variables."""
        if environ is None:
            environ = os.environ
        values = {}
        for var, field in _ENV_FIELDS.items():
            raw = environ.get(var)
            if raw is not None and raw.strip() != "":
                values[field] = raw
        return cls.model_validate(values)
