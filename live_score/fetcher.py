# live_score/fetcher.py
from __future__ import annotations

import logging
import time
from typing import Optional

import requests
from urllib3.exceptions import HTTPError as TransportError
from urllib3.exceptions import ReadTimeoutError

from live_score.config import FETCH_TIMEOUT_SECONDS, MAX_RESPONSE_BYTES
from live_score.errors import FetchTimeout, NetworkError, ResponseTooLarge

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

_CHUNK_BYTES = 16 * 1024
_MIN_READ_TIMEOUT = 0.01


def _limit_next_read(raw, seconds: float) -> None:
    """Shrink the socket timeout so the next blocking read ends by the deadline."""
    conn = getattr(raw, "connection", None)
    sock = getattr(conn, "sock", None)
    if sock is not None:
        sock.settimeout(max(seconds, _MIN_READ_TIMEOUT))


def _decode(body: bytes, resp: requests.Response) -> str:
    # Without an explicit charset requests reports ISO-8859-1 for text/*;
    # match pages are UTF-8 in practice.
    content_type = (resp.headers.get("Content-Type") or "").lower()
    encoding = resp.encoding if "charset=" in content_type and resp.encoding else "utf-8"
    try:
        return body.decode(encoding, errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def fetch_document(
    url: str,
    *,
    timeout: float = FETCH_TIMEOUT_SECONDS,
    max_bytes: int = MAX_RESPONSE_BYTES,
    session: Optional[requests.Session] = None,
) -> str:
    """
    GET `url` and return the body as text.

    `timeout` bounds the whole request (connect + streaming), not just one
    socket read. The body is read with read1(), which returns whatever has
    arrived, and every read gets only the time left before the deadline, so
    a server trickling bytes cannot hold the call open. The connection is
    dropped as soon as the body grows past `max_bytes`.

    Raises FetchTimeout, ResponseTooLarge or NetworkError.
    """
    http = session or requests
    deadline = time.monotonic() + timeout

    try:
        resp = http.get(url, headers=DEFAULT_HEADERS, timeout=timeout, stream=True, allow_redirects=True)
    except requests.Timeout as e:
        raise FetchTimeout(f"Timeout after {timeout:.0f}s", url=url) from e
    except requests.RequestException as e:
        raise NetworkError(f"Network error: {e}", url=url) from e

    try:
        if resp.status_code >= 400:
            raise NetworkError(f"HTTP {resp.status_code}", url=url)

        buf = bytearray()
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise FetchTimeout(f"Timeout after {timeout:.0f}s", url=url)

            _limit_next_read(resp.raw, remaining)
            chunk = resp.raw.read1(_CHUNK_BYTES, decode_content=True)
            if not chunk:
                break

            buf.extend(chunk)
            if len(buf) > max_bytes:
                raise ResponseTooLarge(f"Response exceeded {max_bytes} bytes", url=url)

        text = _decode(bytes(buf), resp)

    except (ReadTimeoutError, TimeoutError) as e:
        raise FetchTimeout(f"Timeout after {timeout:.0f}s", url=url) from e
    except (TransportError, OSError) as e:
        raise NetworkError(f"Network error: {e}", url=url) from e
    finally:
        resp.close()

    logger.debug("Fetched %s (%d bytes)", url, len(buf))
    return text
