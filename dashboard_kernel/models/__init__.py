"""Dashboard kernel data models."""

from dashboard_kernel.models.building import (
    ActionItem,
    BuildingMetadata,
    Weather,
    WeatherCondition,
)
from dashboard_kernel.models.config import DashboardConfig
from dashboard_kernel.models.dashboard import ClockState, DashboardState, SelectionRecord

__all__ = [
    "ActionItem",
    "BuildingMetadata",
    "ClockState",
    "DashboardConfig",
    "DashboardState",
    "SelectionRecord",
    "Weather",
    "WeatherCondition",
]
