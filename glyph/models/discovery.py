"""
glyph/models/discovery.py
Discovery models. A discovery is written once per (user, glyph) and never mutated.
"""

from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from glyph.models.glyph import Glyph


class DiscoveryOutcome(str, Enum):
    CREATED = "created"
    ALREADY_EXISTED = "already_existed"


class DiscoveryLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: Optional[float] = None
    lng: Optional[float] = None


class Discovery(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user_id: str
    glyph_id: str
    discovery_location: DiscoveryLocation
    discovered_at: datetime


class DiscoveryResult(BaseModel):
    """Tagged result of record_discovery: Created | AlreadyExisted.

    Both variants carry the persisted discovery so callers see the same
    logical state whether or not this call wrote it.
    """

    model_config = ConfigDict(frozen=True)

    outcome: DiscoveryOutcome
    discovery: Discovery

    @property
    def created(self) -> bool:
        return self.outcome == DiscoveryOutcome.CREATED


class DiscoveredGlyph(Glyph):
    """An active glyph annotated with when and where the user discovered it."""

    discovered_at: datetime
    discovery_location: DiscoveryLocation


class NewDiscovery(BaseModel):
    model_config = ConfigDict(frozen=True)

    glyph: Glyph
    discovery: Discovery


class DiscoveryStats(BaseModel):
    total_discoveries: int = 0
    categories_discovered: Dict[str, int] = Field(default_factory=dict)
    first_discovery_at: Optional[datetime] = None
    last_discovery_at: Optional[datetime] = None


class DiscoverRequest(BaseModel):
    glyph_id: str
    latitude: float
    longitude: float


class AutoDiscoverRequest(BaseModel):
    latitude: float
    longitude: float
    radius_m: Optional[float] = None
