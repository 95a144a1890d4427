"""Building metadata and recommended actions — what the fetch gateway returns."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class WeatherCondition(str, Enum):
    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    UNKNOWN = "unknown"


class Weather(BaseModel):
    """Current weather at a building."""

    model_config = ConfigDict(frozen=True)

    condition: WeatherCondition = WeatherCondition.UNKNOWN
    description: str = ""

    @field_validator("condition", mode="before")
    @classmethod
    def _normalize_condition(cls, value):
        if isinstance(value, WeatherCondition):
            return value
        if isinstance(value, str):
            try:
                return WeatherCondition(value.strip().lower())
            except ValueError:
                pass
        return WeatherCondition.UNKNOWN


class BuildingMetadata(BaseModel):
    """Location, timezone and weather for one building. Replaced, never mutated."""

    model_config = ConfigDict(frozen=True)

    location: str
    timezone: str                           # IANA zone name, e.g. "America/Chicago"
    day_of_week: str
    weather: Weather = Weather()


class ActionItem(BaseModel):
    """A recommended automation action. Order within a fetched list is significant."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    impact: str
