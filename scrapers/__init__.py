"""
Scrapers Module
"""
from .base import BaseProfileSource, ProfileAcquisition
from .linkedin_scraper import ProxycurlProfileSource, is_profile_url
from .normalize import normalize_post, normalize_posts, normalize_proxycurl_profile, parse_timestamp
from .static_source import StaticProfileSource

__all__ = [
    # Base
    "BaseProfileSource",
    "ProfileAcquisition",
    # LinkedIn
    "ProxycurlProfileSource",
    "is_profile_url",
    # Static
    "StaticProfileSource",
    # Normalization
    "normalize_post",
    "normalize_posts",
    "normalize_proxycurl_profile",
    "parse_timestamp",
]
