"""
Fetches the endpoint definitions from the configuration service.
"""

from typing import List, Optional

import httpx

from exceptions.base import StartupFatalError
from exceptions.validation import EndpointValidationError
from monitoring.endpoint import Endpoint
from utils.logger import get_logger


logger = get_logger("EndpointSource")


async def fetch_endpoints(
    config_url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 10.0,
) -> List[Endpoint]:
    """
    GET <config_url>/endpoints and validate every element.

    Any failure (unreachable service, unexpected status, malformed JSON,
    invalid or duplicate endpoint) is fatal for startup.
    """
    url = f"{config_url.rstrip('/')}/endpoints"

    if client is None:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout)) as own_client:
            return await _fetch(url, own_client)
    return await _fetch(url, client)


async def _fetch(url: str, client: httpx.AsyncClient) -> List[Endpoint]:
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        raise StartupFatalError(
            f"fetch endpoints from {url}: {type(e).__name__}: {e}",
            component="source",
            cause=e,
        ) from e

    if response.status_code != httpx.codes.OK:
        raise StartupFatalError(
            f"fetch endpoints from {url}: unexpected status {response.status_code}",
            component="source",
        )

    try:
        payloads = response.json()
    except ValueError as e:
        raise StartupFatalError(f"unmarshal JSON payload: {e}", component="source", cause=e) from e

    if not isinstance(payloads, list):
        raise StartupFatalError(
            f"unmarshal JSON payload: expected an array, got {type(payloads).__name__}",
            component="source",
        )

    endpoints: List[Endpoint] = []
    seen = set()
    for payload in payloads:
        try:
            endpoint = Endpoint.from_payload(payload)
        except EndpointValidationError as e:
            raise StartupFatalError(
                f"convert payload {payload} to endpoint: {e}",
                component="source",
                cause=e,
            ) from e
        if endpoint.identifier in seen:
            raise StartupFatalError(
                f'duplicate endpoint identifier "{endpoint.identifier}"',
                component="source",
            )
        seen.add(endpoint.identifier)
        endpoints.append(endpoint)

    logger.info(f"Fetched {len(endpoints)} endpoint(s) from {url}")
    return endpoints
