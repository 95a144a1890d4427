"""
Static gateway — serves building data from an in-memory catalog.

Used when no building data service is configured, and by tests.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel

from dashboard_kernel.gateway.client import FetchError
from dashboard_kernel.models.building import (
    ActionItem,
    BuildingMetadata,
    Weather,
    WeatherCondition,
)


class BuildingProfile(BaseModel):
    """Everything the gateway knows about one building."""

    metadata: BuildingMetadata
    actions: List[ActionItem] = []


class StaticDataFetchGateway:
    """Looks buildings up by name in a fixed catalog."""

    def __init__(self, catalog: Optional[Dict[str, BuildingProfile]] = None):
        self.catalog = dict(SAMPLE_CATALOG if catalog is None else catalog)
        self.requests: List[tuple] = []

    def _lookup(self, name: str) -> BuildingProfile:
        profile = self.catalog.get(name)
        if profile is None:
            raise FetchError(name, "building not found")
        return profile

    async def fetch_building_metadata(self, name: str) -> BuildingMetadata:
        self.requests.append(("metadata", name))
        return self._lookup(name).metadata

    async def fetch_recommended_actions(self, name: str) -> List[ActionItem]:
        self.requests.append(("actions", name))
        return list(self._lookup(name).actions)


SAMPLE_CATALOG: Dict[str, BuildingProfile] = {
    "Dallas Office": BuildingProfile(
        metadata=BuildingMetadata(
            location="Dallas, TX",
            timezone="America/Chicago",
            day_of_week="Monday",
            weather=Weather(condition=WeatherCondition.SUNNY, description="Sunny, 31°C"),
        ),
        actions=[
            ActionItem(
                title="Pre-cool floors 3-5 before peak pricing",
                description="Lower setpoints by 2°C between 12:00 and 14:00.",
                impact="Shifts 40 kWh out of the 15:00-19:00 peak window.",
            ),
            ActionItem(
                title="Dim atrium lighting",
                description="Daylight is sufficient in the atrium until 17:30.",
                impact="Saves roughly 12 kWh per day.",
            ),
        ],
    ),
    "Chicago Office": BuildingProfile(
        metadata=BuildingMetadata(
            location="Chicago, IL",
            timezone="America/Chicago",
            day_of_week="Monday",
            weather=Weather(condition=WeatherCondition.CLOUDY, description="Overcast, 12°C"),
        ),
        actions=[
            ActionItem(
                title="Delay boiler start by 30 minutes",
                description="Occupancy sensors show first arrivals at 08:10.",
                impact="Reduces morning gas usage by about 8%.",
            ),
        ],
    ),
    "Seattle Office": BuildingProfile(
        metadata=BuildingMetadata(
            location="Seattle, WA",
            timezone="America/Los_Angeles",
            day_of_week="Monday",
            weather=Weather(condition=WeatherCondition.RAINY, description="Light rain, 9°C"),
        ),
        actions=[
            ActionItem(
                title="Schedule EV charging for overnight hydro surplus",
                description="Move fleet charging to 01:00-05:00.",
                impact="Cuts charging emissions by an estimated 30%.",
            ),
            ActionItem(
                title="Close lobby dampers during rain",
                description="Outdoor humidity is above 90%.",
                impact="Avoids dehumidification load on AHU-2.",
            ),
            ActionItem(
                title="Turn off conference room displays after hours",
                description="Twelve displays were left on last night.",
                impact="Saves about 3 kWh per night.",
            ),
        ],
    ),
}
