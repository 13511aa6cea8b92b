"""
Static profile source
Serves pre-acquired profiles from memory or a JSON file.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from core import ProfileRecord
from utils.exceptions import AcquisitionError, ConfigurationError

from .base import BaseProfileSource


class StaticProfileSource(BaseProfileSource):
    """Looks identifiers up in a fixed mapping of profiles."""

    def __init__(self, profiles: Optional[Iterable[Union[ProfileRecord, Mapping[str, Any]]]] = None, max_parallel: int = 8):
        super().__init__(max_parallel=max_parallel)
        self._profiles: Dict[str, ProfileRecord] = {}
        for item in profiles or []:
            profile = item if isinstance(item, ProfileRecord) else ProfileRecord.model_validate(dict(item))
            self._profiles[profile.identifier] = profile

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "StaticProfileSource":
        """Load a JSON list of profiles, or an object with a ``profiles`` list."""
        file_path = Path(path)
        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigurationError(f"cannot read profiles file {file_path}: {exc}") from exc
        if isinstance(data, dict):
            data = data.get("profiles", [])
        if not isinstance(data, list):
            raise ConfigurationError(f"profiles file {file_path} must hold a list of profiles")
        return cls(data)

    @property
    def name(self) -> str:
        return "static"

    def __len__(self) -> int:
        return len(self._profiles)

    async def fetch_profile(self, identifier: str) -> ProfileRecord:
        profile = self._profiles.get(identifier)
        if profile is None:
            raise AcquisitionError("profile not found", identifier=identifier)
        return profile.model_copy(deep=True)
