# live_score/sources.py
from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

_LIVE_SEGMENT = "/live-cricket-scores/"
_SCORECARD_SEGMENT = "/live-cricket-scorecard/"

_MATCH_ID_RE = re.compile(r"live-cricket-scores/(\d+)|cricket-match/(\d+)|/(\d+)/")


def is_allowed_source(url: str, domain: str) -> bool:
    """
    True for http(s) URLs whose host is `domain` or one of its sub-domains.
    Example (domain="cricbuzz.com"):
      https://www.cricbuzz.com/live-cricket-scores/1234/x -> True
      https://example.com/x                               -> False
      https://cricbuzz.com.evil.io/x                      -> False
    """
    if not url or not domain:
        return False

    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False

    if parsed.scheme not in ("http", "https"):
        return False

    host = (parsed.hostname or "").lower()
    domain = domain.strip().lower()
    return host == domain or host.endswith("." + domain)


def scorecard_url_for(url: str) -> Optional[str]:
    """Scorecard page lives on the same host under an alternate path segment."""
    if not url or _LIVE_SEGMENT not in url:
        return None
    return url.replace(_LIVE_SEGMENT, _SCORECARD_SEGMENT, 1)


def extract_match_id(url: str) -> Optional[str]:
    if not url:
        return None
    m = _MATCH_ID_RE.search(url)
    if not m:
        return None
    return m.group(1) or m.group(2) or m.group(3)
