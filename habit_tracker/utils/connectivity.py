"""Network connectivity probe used before each sync."""
from typing import Optional

import httpx
from loguru import logger


async def check_connectivity(url: Optional[str], timeout: float = 3.0) -> bool:
    """
    Report whether the network is reachable.

    Any HTTP response counts as connected; only transport failures (DNS,
    refused connection, timeout) count as offline.

    Args:
        url: URL to probe. None means no probe is configured and the network
            is assumed to be up.
        timeout: Probe timeout in seconds

    Returns:
        True if connected
    """
    if not url:
        return True

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            await client.head(url)
    except httpx.TransportError as e:
        logger.debug("Connectivity probe to {} failed: {}", url, e)
        return False

    return True
