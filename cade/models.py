"""
Data model (Campaign)
=====================

Each catalog entry is converted into a `Campaign` object.
We keep it immutable (`frozen=True`) so that:
- records cannot be accidentally modified after loading, and
- filters/sorts produce new lists (views) instead of editing data.

Derived values (percent funded, days remaining) are computed on access and
take an explicit `now` where time matters, so results are reproducible.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple

CATEGORIES: Tuple[str, ...] = (
    "medical", "education", "technology", "community",
    "disaster_relief", "animals", "arts_culture", "sports",
)

STATUSES: Tuple[str, ...] = (
    "draft", "pending_review", "active", "paused",
    "completed", "cancelled", "failed",
)

# (display name, description) per category; used for search suggestions
CATEGORY_LABELS: Dict[str, Tuple[str, str]] = {
    "medical": ("Medical & Health", "Support medical treatments, healthcare initiatives, and wellness programs"),
    "education": ("Education", "Fund educational programs, scholarships, and learning resources"),
    "technology": ("Technology", "Support tech innovation, digital literacy, and technological solutions"),
    "community": ("Community", "Build stronger communities through local initiatives and social programs"),
    "disaster_relief": ("Disaster Relief", "Provide emergency aid and recovery support after natural disasters"),
    "animals": ("Animals", "Protect wildlife, rescue animals, and support animal welfare"),
    "arts_culture": ("Arts & Culture", "Preserve heritage and support artists, festivals, and cultural programs"),
    "sports": ("Sports", "Develop athletes, teams, and sports facilities for communities"),
}


@dataclass(frozen=True)
class Creator:
    """Campaign owner as shown on cards (name + rating)."""
    id: str
    display_name: str
    rating: float = 0.0
    verified: bool = False
    location: Optional[str] = None


@dataclass(frozen=True)
class Location:
    country: str
    state: Optional[str] = None
    city: Optional[str] = None


@dataclass(frozen=True)
class Campaign:
    """One crowdfunding campaign record.

    `percent_funded` is derived from `current_amount` and `funding_goal`
    and is never stored separately.
    """
    id: str
    title: str
    description: str
    short_description: str
    category: str
    status: str
    funding_goal: float
    current_amount: float
    creator: Creator
    created_at: datetime
    end_date: datetime
    currency: str = "LKR"
    location: Optional[Location] = None
    donor_count: int = 0
    view_count: int = 0
    share_count: int = 0
    featured: bool = False
    trending: bool = False
    urgent: bool = False
    tags: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def percent_funded(self) -> float:
        if self.funding_goal <= 0:
            return 0.0
        return self.current_amount / self.funding_goal * 100.0

    @property
    def is_fully_funded(self) -> bool:
        return self.funding_goal > 0 and self.current_amount >= self.funding_goal

    def is_expired(self, now: datetime) -> bool:
        return self.end_date < now

    def days_remaining(self, now: datetime) -> int:
        """Whole days until `end_date` (0 once the campaign has ended)."""
        if self.is_expired(now):
            return 0
        return (self.end_date - now).days
