"""Signal extraction from a normalized profile."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from config.settings import PersonaSettings
from core import PostSummary, ProfileRecord


class Cadence(str, Enum):
    """Qualitative posting frequency."""

    VERY_ACTIVE = "Very Active"
    ACTIVE = "Active"
    OCCASIONAL = "Occasional"
    INACTIVE = "Inactive"
    UNKNOWN = "Unknown"


_CADENCE_HINTS = {
    "very active": Cadence.VERY_ACTIVE,
    "highly active": Cadence.VERY_ACTIVE,
    "active": Cadence.ACTIVE,
    "moderately active": Cadence.ACTIVE,
    "occasional": Cadence.OCCASIONAL,
    "occasionally active": Cadence.OCCASIONAL,
    "rarely active": Cadence.OCCASIONAL,
    "inactive": Cadence.INACTIVE,
}

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ProfileSignals:
    cadence: Cadence
    post_count: int
    network_size: Optional[int]
    promo_markers: Tuple[str, ...]
    inspected_texts: int


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_cadence_hint(hint: Optional[str]) -> Optional[Cadence]:
    """Map an acquisition-provided frequency label to a Cadence, None when unrecognized."""
    text = " ".join(str(hint or "").strip().lower().split())
    if not text:
        return None
    return _CADENCE_HINTS.get(text)


def derive_cadence(profile: ProfileRecord, settings: PersonaSettings) -> Cadence:
    # A frequency hint never outranks an empty post history.
    if not profile.posts:
        return Cadence.INACTIVE

    hinted = parse_cadence_hint(profile.posting_frequency)
    if hinted is not None:
        return hinted

    stamps = [_as_utc(post.published_at) for post in profile.posts if post.published_at is not None]
    if not stamps:
        return Cadence.UNKNOWN

    reference = _as_utc(profile.scraped_at) if profile.scraped_at else max(stamps)
    recent_window = timedelta(days=max(0, int(settings.recency_window_days)))
    occasional_window = timedelta(days=max(0, int(settings.occasional_window_days)))

    recent = sum(1 for stamp in stamps if reference - stamp <= recent_window)
    if recent >= max(1, int(settings.very_active_min_posts)):
        return Cadence.VERY_ACTIVE
    if recent >= 1:
        return Cadence.ACTIVE
    if any(reference - stamp <= occasional_window for stamp in stamps):
        return Cadence.OCCASIONAL
    return Cadence.INACTIVE


def most_recent_posts(posts: Sequence[PostSummary], limit: int) -> List[PostSummary]:
    """Newest first; undated posts keep their acquisition order after dated ones."""
    ordered = sorted(
        posts,
        key=lambda post: _as_utc(post.published_at) if post.published_at else _EPOCH,
        reverse=True,
    )
    return ordered[: max(0, int(limit))]


def find_promo_markers(posts: Sequence[PostSummary], markers: Sequence[str]) -> Tuple[str, ...]:
    found: List[str] = []
    for marker in markers:
        needle = str(marker or "").strip().lower()
        if not needle or needle in found:
            continue
        if any(needle in (post.text or "").lower() for post in posts):
            found.append(needle)
    return tuple(found)


def extract_signals(profile: ProfileRecord, settings: PersonaSettings) -> ProfileSignals:
    recent = most_recent_posts(profile.posts, settings.recent_posts_inspected)
    return ProfileSignals(
        cadence=derive_cadence(profile, settings),
        post_count=len(profile.posts),
        network_size=profile.network_size,
        promo_markers=find_promo_markers(recent, settings.promo_markers),
        inspected_texts=sum(1 for post in recent if (post.text or "").strip()),
    )
