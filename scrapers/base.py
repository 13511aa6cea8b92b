"""
Base profile source
Abstract acquisition boundary used by the batch orchestrator.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence

from core import ProfileRecord
from utils.exceptions import AcquisitionError, RoastPipelineError


logger = logging.getLogger(__name__)


@dataclass
class ProfileAcquisition:
    """Outcome of fetching one identifier: either a profile or an error."""

    identifier: str
    profile: Optional[ProfileRecord] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.profile is not None


class BaseProfileSource(ABC):
    """
    Profile acquisition base class.
    Subclasses implement ``fetch_profile``; ``acquire_batch`` fans out over
    the batch and captures per-identifier failures.
    """

    def __init__(self, max_parallel: int = 4):
        self._max_parallel = max(1, int(max_parallel))

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name used in logs"""

    @abstractmethod
    async def fetch_profile(self, identifier: str) -> ProfileRecord:
        """
        Fetch and normalize a single profile.

        Raises:
            AcquisitionError: the profile is unavailable
        """

    def is_configured(self) -> bool:
        return True

    def ensure_configured(self) -> None:
        """Raise a batch-fatal error when the source cannot run at all."""
        if not self.is_configured():
            raise AcquisitionError(f"{self.name} profile source is not configured")

    async def acquire_batch(self, identifiers: Sequence[str]) -> List[ProfileAcquisition]:
        """
        Fetch every identifier, one acquisition per input in input order.

        Raises:
            AcquisitionError: the source cannot serve the batch at all
        """
        self.ensure_configured()
        semaphore = asyncio.Semaphore(self._max_parallel)

        async def _one(identifier: str) -> ProfileAcquisition:
            async with semaphore:
                try:
                    profile = await self.fetch_profile(identifier)
                except RoastPipelineError as exc:
                    self._log_error(identifier, exc)
                    return ProfileAcquisition(identifier=identifier, error=exc.message)
                except Exception as exc:
                    self._log_error(identifier, exc)
                    return ProfileAcquisition(identifier=identifier, error=f"profile acquisition failed: {exc}")
                return ProfileAcquisition(identifier=identifier, profile=profile)

        acquisitions = await asyncio.gather(*[_one(identifier) for identifier in identifiers])
        logger.info(
            "acquire_batch source=%s requested=%s acquired=%s",
            self.name,
            len(identifiers),
            sum(1 for item in acquisitions if item.ok),
        )
        return list(acquisitions)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        return None

    def _log_error(self, identifier: str, error: Exception) -> None:
        logger.warning("acquire_failed source=%s identifier=%s error=%s", self.name, identifier, error)
