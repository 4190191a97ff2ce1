# live_score/config.py
from __future__ import annotations

import os

from dotenv import load_dotenv

from live_score.sources import is_allowed_source

# Load .env from project root
load_dotenv()


def _get_env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, str(default))
    try:
        return float(raw)
    except ValueError:
        return default


# -------------------------
# Source page
# -------------------------
# Optional at startup: the match can be chosen later through /set-match
MATCH_URL: str = _get_env("MATCH_URL")

# Only pages on this domain (or its sub-domains) are accepted as a source
ALLOWED_SOURCE_DOMAIN: str = _get_env("ALLOWED_SOURCE_DOMAIN", "cricbuzz.com")

PORT: int = _get_env_int("PORT", 5555)

LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO").upper()


# -------------------------
# Polling + fetch limits
# -------------------------
POLL_INTERVAL_SECONDS: float = _get_env_float("POLL_INTERVAL_SECONDS", 2.0)
FETCH_TIMEOUT_SECONDS: float = _get_env_float("FETCH_TIMEOUT_SECONDS", 8.0)
MAX_RESPONSE_BYTES: int = _get_env_int("MAX_RESPONSE_BYTES", 800_000)

# Anything smaller is an error page / bot wall, not a match page
MIN_DOCUMENT_CHARS: int = _get_env_int("MIN_DOCUMENT_CHARS", 1000)

# Scorecard page is heavier and changes slowly; 0 disables it
SCORECARD_EVERY_N_CYCLES: int = _get_env_int("SCORECARD_EVERY_N_CYCLES", 5)


# -------------------------
# Extraction tuning
# -------------------------
# Upstream field order and record spacing are not a contract; these are knobs.
MAX_MARKER_SCANS: int = _get_env_int("MAX_MARKER_SCANS", 5000)
MIN_FRAGMENT_CHARS: int = _get_env_int("MIN_FRAGMENT_CHARS", 500)
MIN_SCORECARD_FRAGMENT_CHARS: int = _get_env_int("MIN_SCORECARD_FRAGMENT_CHARS", 1000)
SCORECARD_WINDOW_CHARS: int = _get_env_int("SCORECARD_WINDOW_CHARS", 15000)
INNINGS_ID_LOOKBEHIND_CHARS: int = 200
INNINGS_ID_LOOKAHEAD_CHARS: int = 10000

COMMENTARY_LIMIT: int = _get_env_int("COMMENTARY_LIMIT", 30)
COMMENTARY_EXTRACT_CHARS: int = 300
COMMENTARY_TEXT_CHARS: int = _get_env_int("COMMENTARY_TEXT_CHARS", 200)


def validate_config() -> None:
    if POLL_INTERVAL_SECONDS <= 0:
        raise RuntimeError("POLL_INTERVAL_SECONDS must be positive")

    if FETCH_TIMEOUT_SECONDS <= 0:
        raise RuntimeError("FETCH_TIMEOUT_SECONDS must be positive")

    if MAX_RESPONSE_BYTES <= 0:
        raise RuntimeError("MAX_RESPONSE_BYTES must be positive")

    if MAX_MARKER_SCANS <= 0 or SCORECARD_WINDOW_CHARS <= 0:
        raise RuntimeError("MAX_MARKER_SCANS and SCORECARD_WINDOW_CHARS must be positive")

    if SCORECARD_EVERY_N_CYCLES < 0:
        raise RuntimeError("SCORECARD_EVERY_N_CYCLES must be >= 0")

    if not ALLOWED_SOURCE_DOMAIN or "." not in ALLOWED_SOURCE_DOMAIN:
        raise RuntimeError("ALLOWED_SOURCE_DOMAIN must be a domain name such as cricbuzz.com")

    # A bad MATCH_URL would silently poll the wrong site forever
    if MATCH_URL and not is_allowed_source(MATCH_URL, ALLOWED_SOURCE_DOMAIN):
        raise RuntimeError(f"MATCH_URL must be a {ALLOWED_SOURCE_DOMAIN} URL")
