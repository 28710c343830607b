from typing import Any, Dict, List, Optional

from pydantic import Field

from buzzpulse.schemas.base import BaseSchema, OkSchema


# ---------------------------
# Requests
# ---------------------------

class IngestRequest(BaseSchema):
    cell_id: Optional[str] = Field(default=None, alias="cellId")
    # seconds since epoch; anything non-numeric falls back to server time
    ts: Optional[Any] = None


class VibeRequest(BaseSchema):
    # ignored: the device's current presence decides the cell
    cell_id: Optional[str] = Field(default=None, alias="cellId")
    vibe: Optional[str] = None
    ts: Optional[Any] = None


# ---------------------------
# Responses
# ---------------------------

class RegisterResponse(OkSchema):
    deviceId: str
    secret: str


class IngestResponse(OkSchema):
    cellId: str
    ts: int
    score: float
    presence: int


class HeatPoint(BaseSchema):
    lat: float
    lng: float
    score: float
    radius: float
    cellId: Optional[str] = None


class HeatResponse(OkSchema):
    count: int
    data: List[HeatPoint]


class StatsResponse(OkSchema):
    cellId: str
    score: float
    lastTs: Optional[int] = None
    lastHourHits: int
    typicalHourHits: float
    delta: float
    currentPresence: int
    vibes: Dict[str, int]
    myVibe: Optional[str] = None


class VibeResponse(OkSchema):
    cellId: str
    vibe: str


class HealthResponse(OkSchema):
    service: str
