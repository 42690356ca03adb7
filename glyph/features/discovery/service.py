from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from glyph.core.config import settings
from glyph.core.logging import log_event
from glyph.features.discovery.persistence import DiscoveryPersistence
from glyph.features.glyphs import service as glyph_service
from glyph.features.location.service import is_within_radius
from glyph.models.discovery import (
    DiscoveredGlyph,
    DiscoveryResult,
    DiscoveryStats,
    NewDiscovery,
)
from glyph.models.glyph import Glyph


class DiscoveryService:
    """Proximity gate and exactly-once discovery bookkeeping.

    Stateless between calls: the candidate list belongs to the caller and
    every persisted fact lives in the glyph_discoveries table. Store errors
    other than the expected duplicate propagate unchanged.
    """

    def __init__(
        self,
        search_radius_m: Optional[float] = None,
        discovery_radius_m: Optional[float] = None,
    ):
        self._search_radius_m = search_radius_m
        self._discovery_radius_m = discovery_radius_m

    @property
    def search_radius_m(self) -> float:
        return self._search_radius_m if self._search_radius_m is not None else settings.GLYPH_SEARCH_RADIUS_M

    @property
    def discovery_radius_m(self) -> float:
        return self._discovery_radius_m if self._discovery_radius_m is not None else settings.DISCOVERY_RADIUS_M

    def load_candidates(
        self,
        center_lat: float,
        center_lng: float,
        search_radius_m: Optional[float] = None,
    ) -> List[Glyph]:
        radius = self.search_radius_m if search_radius_m is None else search_radius_m
        return glyph_service.load_nearby(center_lat, center_lng, radius)

    def is_discoverable(
        self,
        user_lat: float,
        user_lng: float,
        glyph: Glyph,
        discovery_radius_m: Optional[float] = None,
    ) -> bool:
        radius = self.discovery_radius_m if discovery_radius_m is None else discovery_radius_m
        return is_within_radius(user_lat, user_lng, glyph.latitude, glyph.longitude, radius)

    def has_discovered(self, user_id: str, glyph_id: str) -> bool:
        return DiscoveryPersistence.get_discovery(user_id, glyph_id) is not None

    def record_discovery(
        self,
        user_id: str,
        glyph_id: str,
        lat: Optional[float],
        lng: Optional[float],
        *,
        discovered_at: Optional[datetime] = None,
    ) -> DiscoveryResult:
        """Record that user_id found glyph_id. Safe to call on every interaction."""
        result = DiscoveryPersistence.insert_discovery(
            user_id,
            glyph_id,
            lat,
            lng,
            discovered_at or datetime.now(timezone.utc),
        )
        if result.created:
            log_event("info", "discovery.recorded", user_id=user_id, glyph_id=glyph_id, event_type="discovery.recorded")
        else:
            log_event("debug", "discovery.duplicate", user_id=user_id, glyph_id=glyph_id, event_type="discovery.duplicate")
        return result

    def get_user_discoveries(self, user_id: str) -> List[DiscoveredGlyph]:
        return DiscoveryPersistence.list_discovered_glyphs(user_id)

    def search_discoveries(self, user_id: str, term: str) -> List[DiscoveredGlyph]:
        """Case-insensitive match on text or category within the user's discoveries."""
        needle = (term or "").strip().lower()
        discovered = self.get_user_discoveries(user_id)
        if not needle:
            return discovered
        return [
            g for g in discovered
            if needle in g.text.lower() or needle in g.category.value.lower()
        ]

    def get_discovery_stats(self, user_id: str) -> DiscoveryStats:
        rows = DiscoveryPersistence.list_category_timestamps(user_id)
        categories: Dict[str, int] = {}
        for category, _ in rows:
            categories[category] = categories.get(category, 0) + 1
        timestamps = sorted(ts for _, ts in rows)
        return DiscoveryStats(
            total_discoveries=len(rows),
            categories_discovered=categories,
            first_discovery_at=timestamps[0] if timestamps else None,
            last_discovery_at=timestamps[-1] if timestamps else None,
        )

    def auto_discover_nearby(
        self,
        user_id: str,
        lat: float,
        lng: float,
        radius_m: Optional[float] = None,
    ) -> List[NewDiscovery]:
        """Discover every not-yet-discovered glyph within radius_m. Returns only the new ones."""
        radius = self.discovery_radius_m if radius_m is None else radius_m
        found: List[NewDiscovery] = []
        for glyph in self.load_candidates(lat, lng, radius):
            if self.has_discovered(user_id, glyph.id):
                continue
            result = self.record_discovery(user_id, glyph.id, lat, lng)
            # A concurrent request may have won the insert
            if result.created:
                found.append(NewDiscovery(glyph=glyph, discovery=result.discovery))

        if found:
            log_event(
                "info",
                "discovery.auto",
                user_id=user_id,
                event_type="discovery.auto",
                extra={"count": len(found), "radius_m": radius},
            )
        return found


# Singleton service used by routes
discovery_service = DiscoveryService()
