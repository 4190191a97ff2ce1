# live_score/fragments.py
from __future__ import annotations

import logging
import re
from typing import Iterator

from live_score.config import MAX_MARKER_SCANS

logger = logging.getLogger(__name__)

# Next.js streams React Server Component payloads as JS string literals:
#   self.__next_f.push([1,"...escaped payload..."])
RSC_MARKER = 'self.__next_f.push([1,"'
RSC_TERMINATOR = '"])'

_ESCAPE_RE = re.compile(r'\\(["\\nt])')
_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t"}

_UNDEFINED_QUOTED = '"$undefined"'
_UNDEFINED_BARE = "$undefined"


def _is_escaped(text: str, pos: int, floor: int) -> bool:
    """Odd run of backslashes right before `pos` means the quote there is escaped."""
    count = 0
    i = pos - 1
    while i >= floor and text[i] == "\\":
        count += 1
        i -= 1
    return count % 2 == 1


def iter_fragments(
    html: str,
    marker: str = RSC_MARKER,
    terminator: str = RSC_TERMINATOR,
    max_scans: int = MAX_MARKER_SCANS,
) -> Iterator[str]:
    """
    Yield the raw (still escaped) content of every marker/terminator pair,
    in document order.

    A marker with no unescaped terminator is skipped and scanning resumes one
    character after it. At most `max_scans` marker occurrences are looked at.
    """
    search_from = 0
    scans = 0

    while True:
        idx = html.find(marker, search_from)
        if idx < 0:
            return

        scans += 1
        if scans > max_scans:
            logger.warning("Fragment scan hit iteration limit (%d markers), stopping early", max_scans)
            return

        content_start = idx + len(marker)
        pos = content_start
        end = -1
        while True:
            candidate = html.find(terminator, pos)
            if candidate < 0:
                break
            if not _is_escaped(html, candidate, content_start):
                end = candidate
                break
            pos = candidate + 1

        if end < 0:
            search_from = idx + 1
            continue

        yield html[content_start:end]
        search_from = end + len(terminator)


def rewrite_sentinels(text: str) -> str:
    """`"$undefined"` and bare `$undefined` both become JSON null."""
    return text.replace(_UNDEFINED_QUOTED, "null").replace(_UNDEFINED_BARE, "null")


def normalize_fragment(raw: str) -> str:
    r"""
    Undo one level of JS string escaping and rewrite sentinels.

    Escapes are decoded in a single left-to-right pass, so `\\n` (escaped
    backslash, then n) becomes `\n` and is not decoded again into a newline.
    """
    text = _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], raw)
    return rewrite_sentinels(text)
