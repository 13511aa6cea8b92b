"""
Profile normalization
Maps raw Proxycurl profiles and Apify post items onto ProfileRecord.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
import logging
from typing import Any, Dict, Iterable, List, Optional

from core import ExperienceEntry, PostSummary, ProfileRecord, SkillEntry


logger = logging.getLogger(__name__)


def _first(item: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_int(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


def _as_optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse ISO-8601 strings or epoch milliseconds into aware datetimes."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        seconds = float(value) / 1000.0 if value > 10**11 else float(value)
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            logger.debug("unparsed_timestamp value=%s", value)
            return None
    if isinstance(value, dict):
        # harvestapi shape: {"timestamp": ..., "date": "..."}
        return parse_timestamp(_first(value, "timestamp", "date"))

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("unparsed_timestamp value=%s", value)
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def proxycurl_date(value: Any) -> Optional[date]:
    """Proxycurl dates are ``{day, month, year}`` objects with optional parts."""
    if not isinstance(value, dict) or not value.get("year"):
        return None
    try:
        return date(int(value["year"]), int(value.get("month") or 1), int(value.get("day") or 1))
    except (TypeError, ValueError):
        return None


def normalize_post(item: Dict[str, Any]) -> PostSummary:
    engagement = item.get("engagement") if isinstance(item.get("engagement"), dict) else {}
    return PostSummary(
        text=str(_first(item, "text", "content") or ""),
        published_at=parse_timestamp(_first(item, "publishedAt", "postedAt", "date")),
        likes=_as_int(_first(item, "likesCount", "likes") or engagement.get("likes")),
        comments=_as_int(_first(item, "commentsCount", "comments") or engagement.get("comments")),
        shares=_as_int(_first(item, "sharesCount", "shares") or engagement.get("shares")),
        url=_first(item, "postUrl", "url", "linkedinUrl"),
    )


def normalize_posts(items: Iterable[Dict[str, Any]]) -> List[PostSummary]:
    return [normalize_post(item) for item in items if isinstance(item, dict)]


def normalize_proxycurl_profile(
    identifier: str,
    payload: Dict[str, Any],
    *,
    posts: Optional[List[PostSummary]] = None,
    scraped_at: Optional[datetime] = None,
) -> ProfileRecord:
    """Build a ProfileRecord from a Proxycurl person payload.

    Missing optional fields stay empty rather than being filled with
    placeholders, so that completeness reflects what was actually returned.
    """
    name = str(payload.get("full_name") or "").strip()
    if not name:
        name = f"{payload.get('first_name') or ''} {payload.get('last_name') or ''}".strip()

    location_parts = [payload.get("city"), payload.get("state"), payload.get("country_full_name")]
    location = ", ".join(str(part) for part in location_parts if part)

    experience = []
    for raw in payload.get("experiences") or []:
        if not isinstance(raw, dict):
            continue
        experience.append(
            ExperienceEntry(
                title=str(raw.get("title") or ""),
                organization=str(raw.get("company") or ""),
                start_date=proxycurl_date(raw.get("starts_at")),
                end_date=proxycurl_date(raw.get("ends_at")),
                current=not raw.get("ends_at"),
            )
        )

    # Proxycurl exposes no endorsed skills; languages are the closest list.
    skills = [SkillEntry(name=str(lang)) for lang in payload.get("languages") or [] if lang]
    for raw in payload.get("skills") or []:
        if isinstance(raw, str) and raw:
            skills.append(SkillEntry(name=raw))

    return ProfileRecord(
        identifier=identifier,
        name=name,
        headline=str(payload.get("headline") or payload.get("occupation") or ""),
        bio=str(payload.get("summary") or ""),
        location=location,
        profile_picture=payload.get("profile_pic_url") or None,
        connections=_as_optional_int(payload.get("connections")),
        followers=_as_optional_int(payload.get("follower_count")),
        posts=list(posts or []),
        experience=experience,
        skills=skills,
        scraped_at=scraped_at or datetime.now(timezone.utc),
        data_source="proxycurl+apify" if posts else "proxycurl",
    )
