"""Best-effort delivery of finished batch payloads to a callback URL."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx


logger = logging.getLogger(__name__)


async def deliver_callback(
    url: str,
    payload: Dict[str, Any],
    *,
    timeout_s: float = 10.0,
    client: Optional[httpx.AsyncClient] = None,
) -> bool:
    """POST ``payload`` once. Failures are logged and reported as ``False``."""
    try:
        if client is not None:
            response = await client.post(url, json=payload, timeout=timeout_s)
        else:
            async with httpx.AsyncClient(timeout=timeout_s) as owned:
                response = await owned.post(url, json=payload)
    except httpx.HTTPError as exc:
        logger.warning("callback_failed url=%s error=%s", url, exc)
        return False

    if response.status_code >= 400:
        logger.warning("callback_failed url=%s status=%s", url, response.status_code)
        return False
    logger.info("callback_delivered url=%s status=%s", url, response.status_code)
    return True
