"""
Neurio sensor poller: streams ``/current-sample`` into a receive buffer.

Sends an HTTP GET to ``http://{address}/current-sample`` with an optional
``Authorization: Basic {token}`` header and feeds every chunk of the
response body into :meth:`ReceiveBuffer.append` as it arrives. Network and
HTTP errors are logged at WARNING level and re-raised as
:class:`TransportFailure` so the poll cycle can abort without extracting.

CHANGELOG:
- 2026-03-04: Initial creation (STORY-105)
- 2026-03-09: Undecodable response bodies abort the cycle as transport failures (STORY-111)

TODO:
- None
"""

import logging

import httpx

from neurio.src.buffer import ReceiveBuffer
from neurio.src.errors import AllocationFailure, TransportFailure

logger = logging.getLogger(__name__)

# Default request timeout in seconds.
_DEFAULT_TIMEOUT: float = 3.0


def build_client(timeout: float = _DEFAULT_TIMEOUT) -> httpx.Client:
    """Create the HTTP client reused for every poll.

    Args:
        timeout: Request timeout in seconds. Must be shorter than the
            poll interval so a hung sensor cannot stall the loop.
    """
    return httpx.Client(timeout=timeout)


def fetch_snapshot(
    client: httpx.Client,
    url: str,
    buffer: ReceiveBuffer,
    *,
    auth: str = "",
) -> int:
    """Stream the sensor's current sample into *buffer*.

    The caller is expected to have reset *buffer*; received bytes are
    appended after whatever it already holds.

    Args:
        client: HTTP client (carries the timeout).
        url: Full sensor URL, e.g. ``"http://192.168.86.31/current-sample"``.
        buffer: Receive buffer fed one chunk at a time.
        auth: Basic auth token sent verbatim. No header when empty.

    Returns:
        Number of bytes held by *buffer* after the transfer.

    Raises:
        TransportFailure: On connection errors, timeouts, non-2xx status or
            a body that fails content decoding.
        AllocationFailure: If *buffer* refuses a chunk.
    """
    headers = {"Authorization": f"Basic {auth}"} if auth else {}

    try:
        with client.stream("GET", url, headers=headers) as response:
            response.raise_for_status()
            for chunk in response.iter_bytes():
                if buffer.append(chunk) != len(chunk):
                    raise AllocationFailure(
                        f"Receive buffer refused a {len(chunk)} byte chunk "
                        f"after {len(buffer)} bytes"
                    )

    except httpx.HTTPStatusError as exc:
        logger.warning(
            "Neurio poll HTTP error %s for %s: %s",
            exc.response.status_code,
            url,
            exc,
        )
        raise TransportFailure(f"HTTP {exc.response.status_code}") from exc

    except httpx.TimeoutException as exc:
        logger.warning("Neurio poll timeout for %s: %s", url, exc)
        raise TransportFailure("timeout") from exc

    except httpx.ConnectError as exc:
        logger.warning("Neurio poll connection error for %s: %s", url, exc)
        raise TransportFailure("connection error") from exc

    except httpx.TransportError as exc:
        logger.warning("Neurio poll transport error for %s: %s", url, exc)
        raise TransportFailure(str(exc)) from exc

    except httpx.DecodingError as exc:
        logger.warning("Neurio poll decoding error for %s: %s", url, exc)
        raise TransportFailure("undecodable response body") from exc

    return len(buffer)
