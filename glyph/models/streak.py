from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Optional


@dataclass
class StreakRecord:
    """
    Domain model for a discovery streak. Day-level, UTC only, no direct DB concerns.
    """

    user_id: str
    current_streak: int = 0
    longest_streak: int = 0
    last_discovery_date: Optional[date] = None
    total_discovery_days: int = 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["last_discovery_date"] = self.last_discovery_date.isoformat() if self.last_discovery_date else None
        return data


@dataclass(frozen=True)
class Achievement:
    milestone: int
    achieved: bool
    title: str
    description: str
    progress_toward_next: Optional[int] = field(default=None)

    def to_dict(self) -> dict:
        data = asdict(self)
        if self.progress_toward_next is None:
            data.pop("progress_toward_next")
        return data
