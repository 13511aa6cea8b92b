"""
LinkedIn profile source
Proxycurl for the profile itself, Apify for recent posts.
"""
from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, Dict, List, Optional

import httpx

from config.settings import ApifySettings, ProxycurlSettings
from core import PostSummary, ProfileRecord
from utils.exceptions import AcquisitionError

from .base import BaseProfileSource
from .normalize import normalize_posts, normalize_proxycurl_profile


logger = logging.getLogger(__name__)

PROFILE_URL_MARKER = "linkedin.com/in/"


def is_profile_url(identifier: str) -> bool:
    return PROFILE_URL_MARKER in str(identifier or "").lower()


class ProxycurlProfileSource(BaseProfileSource):
    """
    LinkedIn profile source.
    Posts are best-effort enrichment: an Apify failure degrades the profile
    to one without posts instead of failing the item.
    """

    def __init__(
        self,
        proxycurl: Optional[ProxycurlSettings] = None,
        apify: Optional[ApifySettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._proxycurl = proxycurl or ProxycurlSettings()
        self._apify = apify or ApifySettings()
        super().__init__(max_parallel=self._proxycurl.max_parallel)
        self._client = client
        self._owns_client = client is None

    @property
    def name(self) -> str:
        return "proxycurl"

    def is_configured(self) -> bool:
        return bool(str(self._proxycurl.api_key or "").strip())

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._proxycurl.timeout_s)
        return self._client

    async def fetch_profile(self, identifier: str) -> ProfileRecord:
        if not is_profile_url(identifier):
            raise AcquisitionError(
                f"invalid LinkedIn profile URL, must contain '{PROFILE_URL_MARKER}'",
                identifier=identifier,
            )

        payload = await self._fetch_proxycurl(identifier)
        posts = await self.fetch_posts(identifier)
        profile = normalize_proxycurl_profile(
            identifier,
            payload,
            posts=posts,
            scraped_at=datetime.now(timezone.utc),
        )
        logger.info(
            "profile_acquired identifier=%s name=%s posts=%s completeness=%s",
            identifier,
            profile.name or "?",
            len(profile.posts),
            profile.completeness,
        )
        return profile

    async def _fetch_proxycurl(self, identifier: str) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._proxycurl.api_key}",
            "Content-Type": "application/json",
        }
        params = {"url": identifier, "use_cache": self._proxycurl.use_cache}
        try:
            response = await self._get_client().get(self._proxycurl.base_url, headers=headers, params=params)
        except httpx.TimeoutException as exc:
            raise AcquisitionError("proxycurl timeout", identifier=identifier) from exc
        except httpx.RequestError as exc:
            raise AcquisitionError(f"proxycurl request failed: {exc}", identifier=identifier) from exc

        status = response.status_code
        if status == 401:
            raise AcquisitionError("invalid Proxycurl API key", identifier=identifier)
        if status == 402:
            raise AcquisitionError("Proxycurl credits exhausted", identifier=identifier)
        if status == 404:
            raise AcquisitionError("LinkedIn profile not found or private", identifier=identifier)
        if status >= 400:
            raise AcquisitionError(
                f"proxycurl http {status}",
                identifier=identifier,
                body=response.text[:200],
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise AcquisitionError("proxycurl returned a non-JSON body", identifier=identifier) from exc
        if not isinstance(payload, dict):
            raise AcquisitionError("proxycurl returned an unexpected payload", identifier=identifier)
        return payload

    async def fetch_posts(self, identifier: str) -> List[PostSummary]:
        """Run the Apify posts actor; any failure yields an empty list."""
        token = str(self._apify.api_token or "").strip()
        if not token:
            return []

        url = f"{self._apify.base_url.rstrip('/')}/acts/{self._apify.posts_actor_id}/run-sync-get-dataset-items"
        run_input = {
            "startUrls": [identifier],
            "targetUrls": [identifier],
            "maxItems": self._apify.max_posts,
            "maxPosts": self._apify.max_posts,
        }
        try:
            response = await self._get_client().post(
                url,
                params={"token": token},
                json=run_input,
                timeout=self._apify.timeout_s,
            )
            response.raise_for_status()
            items = response.json()
            if not isinstance(items, list):
                raise ValueError("unexpected payload")
            return normalize_posts(items[: self._apify.max_posts])
        except (httpx.HTTPError, ValueError, OverflowError) as exc:
            logger.warning("posts_enrichment_failed identifier=%s error=%s", identifier, exc)
            return []

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
