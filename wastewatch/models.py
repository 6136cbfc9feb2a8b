#file: wastewatch/models.py

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")

    @model_validator(mode="after")
    def _reject_unset_sentinel(self) -> "Coordinate":
        # (0, 0) means "no location" throughout the report store
        if self.latitude == 0 and self.longitude == 0:
            raise ValueError("(0, 0) is the unset sentinel, not a real coordinate")
        return self

    def rounded_key(self, precision: int = 4) -> Tuple[float, float]:
        """Key for memoizing lookups; 4 decimals is roughly 11 m."""
        return round(self.latitude, precision), round(self.longitude, precision)


class LocationSource(str, Enum):
    SEARCH = "SEARCH"
    DRAG = "DRAG"
    DEVICE = "DEVICE"
    INITIAL = "INITIAL"


class ResolvedLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    address: str
    source: LocationSource


class PollutantValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: float
    unit: str


class PollutantReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str = Field(..., description="Timestamp in ISO format")
    aqi: int = Field(..., ge=0, description="US AQI")
    components: Dict[str, PollutantValue] = Field(default_factory=dict)


class AQICategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    severity_rank: int = Field(..., ge=1, le=6)
    description: str
    color: str


class Notice(BaseModel):
    title: str
    description: str


class ReportStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    REJECTED = "rejected"


class Report(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    status: str = "pending"
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    title: str = ""
    image_url: Optional[str] = Field(None, alias="imageUrl")
    address: Optional[str] = None

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coordinates_as_text(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class AggregatorPhase(str, Enum):
    LOADING = "LOADING"
    READY = "READY"
    DEGRADED = "DEGRADED"


class AggregatorState(BaseModel):
    phase: AggregatorPhase
    data: Optional[PollutantReading] = None
    last_error: Optional[str] = None
    last_fetched_at: Optional[str] = None


class MarkerStyle(str, Enum):
    NEUTRAL = "neutral"
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILURE = "failure"


class ReportMarker(BaseModel):
    report_id: int
    coordinate: Coordinate
    status: str
    style: MarkerStyle
    glyph: str
    animated: bool = False
    title: str = ""
    address: Optional[str] = None
    image_url: Optional[str] = None


class MapView(BaseModel):
    center: Coordinate
    markers: List[ReportMarker] = Field(default_factory=list)


class AirQualityResponse(BaseModel):
    location: Coordinate
    reading: PollutantReading
    category: AQICategory
    normalized_severity: float
    timestamp: str
    cached: bool = False
