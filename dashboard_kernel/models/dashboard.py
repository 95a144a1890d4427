"""Dashboard state exposed to the presentation layer."""

from typing import List, Optional

from pydantic import BaseModel, Field

from dashboard_kernel.models.building import ActionItem, BuildingMetadata


class ClockState(BaseModel):
    """Derived time-of-day readout for the displayed building. Never persisted."""

    timezone: str
    current_time_string: str


class SelectionRecord(BaseModel):
    """Serialized form of the persisted building choice."""

    value: str = Field(min_length=1, pattern=r"\S")


class DashboardState(BaseModel):
    """
    The single mutable unit of "current building state".

    Written only by the orchestrator; the clock and reveal engine reach it
    through the orchestrator's guarded callbacks.
    """

    building_id: Optional[str] = None
    building_metadata: Optional[BuildingMetadata] = None
    loading: bool = False
    revealed_actions: List[ActionItem] = []
    reveal_in_progress: bool = False
    total_actions: int = 0
    clock_string: str = ""
