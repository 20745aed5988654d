"""HTTP utilities for remote resolver calls.

Provides bounded JSON reading for HTTP responses and the remote resolver
wire call. A remote resolver receives ``GET <origin>/resolve`` with the
query parameters ``network`` and ``path``. ``<origin>`` is the endpoint's
scheme and authority; any path the endpoint carries is replaced. The
resolver must answer with a 2xx status and a JSON object whose ``url``
member is a non-empty string.

Note:
    This module sits in the ``utils`` layer and depends only on
    [uns.exceptions][uns.exceptions], ``aiohttp`` and ``rfc3986``. It is
    importable from ``services`` without violating the diamond DAG.

See Also:
    [Resolver][uns.services.resolver.Resolver]: Calls
        [fetch_resolution][uns.utils.http.fetch_resolution] for every
        ``http``/``https`` endpoint of a record.
"""

from __future__ import annotations

import json
from typing import Any

import aiohttp
from rfc3986 import uri_reference

from uns.exceptions import ResolverError


DEFAULT_MAX_RESPONSE_SIZE = 64 * 1024
RESOLVE_ROUTE = "/resolve"


async def _read_bounded(response: aiohttp.ClientResponse, max_size: int) -> bytes:
    """Read an entire response body with size enforcement.

    Accumulates chunks until EOF or until the limit is exceeded, which
    also handles chunked transfer-encoding where a single read may return
    fewer bytes than requested.

    Raises:
        ValueError: If the response body exceeds *max_size*.
    """
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await response.content.read(max_size + 1 - total)
        if not chunk:
            break
        total += len(chunk)
        if total > max_size:
            raise ValueError(f"Response body too large: >{max_size} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


async def read_bounded_json(response: aiohttp.ClientResponse, max_size: int) -> Any:
    """Read and parse a JSON response body with size enforcement.

    The size check happens before parsing, so an oversized payload is never
    decoded.

    Raises:
        ValueError: If the response body exceeds *max_size*.
        json.JSONDecodeError: If the body is not valid JSON.
    """
    body = await _read_bounded(response, max_size)
    return json.loads(body)


def resolve_url(endpoint: str) -> str:
    """Return the resolution URL for a resolver *endpoint*.

    The route is absolute: the endpoint's path, query and fragment are
    dropped and only its scheme and authority are kept.
    """
    reference = uri_reference(endpoint)
    return reference.copy_with(path=RESOLVE_ROUTE, query=None, fragment=None).unsplit()


async def fetch_resolution(  # noqa: PLR0913
    session: aiohttp.ClientSession,
    endpoint: str,
    network: str,
    path: str,
    *,
    timeout: float = 10.0,  # noqa: ASYNC109
    max_size: int = DEFAULT_MAX_RESPONSE_SIZE,
) -> str:
    """Ask a remote resolver to resolve *path* within *network*.

    Args:
        session: Shared aiohttp session.
        endpoint: Resolver endpoint URI (``http`` or ``https``).
        network: Lower-cased network name.
        path: The raw address path, sent unmodified.
        timeout: Total request timeout in seconds.
        max_size: Maximum accepted reply size in bytes.

    Returns:
        The resolved URL.

    Raises:
        ResolverError: On a connection failure, a non-2xx status, an
            oversized or non-JSON body, or a reply without a string ``url``.
        TimeoutError: If the request exceeds *timeout*.
    """
    url = resolve_url(endpoint)
    params = {"network": network, "path": path}

    try:
        async with session.get(
            url,
            params=params,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            if not 200 <= response.status < 300:  # noqa: PLR2004
                raise ResolverError(
                    f"Resolver {endpoint} returned HTTP {response.status}",
                    network=network,
                    endpoint=endpoint,
                )
            data = await read_bounded_json(response, max_size)
    except TimeoutError:
        # aiohttp.ServerTimeoutError is also a ClientError; keep it a timeout
        raise
    except aiohttp.ClientError as e:
        raise ResolverError(
            f"Resolver {endpoint} request failed: {e}",
            network=network,
            endpoint=endpoint,
        ) from e
    except ValueError as e:
        # json.JSONDecodeError is a ValueError, as is the size limit
        raise ResolverError(
            f"Resolver {endpoint} sent an invalid reply: {e}",
            network=network,
            endpoint=endpoint,
        ) from e

    resolved = data.get("url") if isinstance(data, dict) else None
    if not isinstance(resolved, str) or not resolved:
        raise ResolverError(
            f"Resolver {endpoint} reply has no url",
            network=network,
            endpoint=endpoint,
        )
    return resolved
