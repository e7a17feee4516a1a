"""
Shared HTTP helpers for external read services (SushiSwap API, Morpho API, subgraphs, Privy)
"""

import logging
from typing import Any, Dict, Optional

import httpx

from common.errors import ErrorCode, create_error

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT = 30.0


async def fetch_from_api(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    params: Optional[Dict[str, Any]] = None,
    json: Optional[Any] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    """
    Perform a request and return the decoded JSON body.

    Raises:
        TensaiError(API_CALL_FAILED) on transport errors, non-2xx status
        or a body that is not JSON
    """
    request_headers = {"Content-Type": "application/json"}
    request_headers.update(headers or {})

    logger.debug(f"[HTTP] {method} {url}")
    try:
        response = await client.request(
            method,
            url,
            params=params,
            json=json,
            headers=request_headers,
        )
    except httpx.HTTPError as e:
        raise create_error(f"Fetch failed for {url}: {e}", ErrorCode.API_CALL_FAILED)

    if not response.is_success:
        raise create_error(
            f"Fetch failed for {url}: API Error: {response.status_code} "
            f"{response.reason_phrase} - {response.text[:500]}",
            ErrorCode.API_CALL_FAILED,
            {"status_code": response.status_code},
        )

    try:
        return response.json()
    except ValueError:
        raise create_error(
            f"Fetch failed for {url}: response is not valid JSON",
            ErrorCode.API_CALL_FAILED
        )


async def query_graphql(
    client: httpx.AsyncClient,
    url: str,
    query: str,
    variables: Optional[Dict[str, Any]] = None,
    api_key: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    POST a GraphQL query and return its `data` object (None when absent).

    Raises:
        TensaiError(API_CALL_FAILED) when the request fails or the server
        reports GraphQL errors
    """
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
    body = await fetch_from_api(
        client,
        url,
        method="POST",
        json={"query": query, "variables": variables or {}},
        headers=headers,
    )

    if isinstance(body, dict) and body.get("errors"):
        messages = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in body["errors"])
        raise create_error(
            f"GraphQL query failed for {url}: {messages}",
            ErrorCode.API_CALL_FAILED,
            {"errors": body["errors"]},
        )

    data = body.get("data") if isinstance(body, dict) else None
    return data or None
