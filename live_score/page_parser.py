# live_score/page_parser.py
"""
Turns a fetched page into extraction results:

  parse_live_page()      -> PageExtraction (header, miniscore, score list,
                            commentary, fallback title)
  parse_scorecard_page() -> list of ScorecardInnings

Every section is independent: one that cannot be extracted is left empty
and the rest of the page is still used.
"""
from __future__ import annotations

import html as html_lib
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from live_score.config import (
    COMMENTARY_EXTRACT_CHARS,
    MIN_FRAGMENT_CHARS,
    MIN_SCORECARD_FRAGMENT_CHARS,
)
from live_score.errors import RecordPatternMismatch
from live_score.fragments import iter_fragments, normalize_fragment
from live_score.models import (
    BattingLine,
    BowlingLine,
    CommentaryEntry,
    Extras,
    FowEntry,
    PageExtraction,
    ScorecardInnings,
)
from live_score.objects import extract_object
from live_score.records import (
    BATSMAN_TEMPLATE,
    BOWLER_TEMPLATE,
    EXTRAS_TEMPLATE,
    FOW_TEMPLATE,
    RecordGroup,
    extract_records,
    iter_record_groups,
    require_records,
)

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")

# <meta property="og:title" content="..."> in either attribute order
_OG_TITLE_RES = (
    re.compile(r'og:title[^>]*content="([^"]+)"'),
    re.compile(r'content="([^"]+)"[^>]*og:title'),
)
_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)


def clean_text(text: Optional[str], limit: int) -> str:
    if not text:
        return ""
    return _TAG_RE.sub("", str(text))[:limit]


def extract_page_title(html: str) -> Optional[str]:
    """og:title if present, else <title>. Entities are decoded."""
    for rx in _OG_TITLE_RES:
        m = rx.search(html)
        if m:
            return html_lib.unescape(m.group(1)).strip() or None

    m = _TITLE_RE.search(html)
    if m:
        return html_lib.unescape(m.group(1)).strip() or None
    return None


# -----------------------------
# Live page
# -----------------------------
def _commentary_timestamp(entry: Dict[str, Any], key: str) -> Optional[int]:
    ts = entry.get("timestamp")
    if ts is not None:
        try:
            return int(ts)
        except (TypeError, ValueError):
            pass
    try:
        return int(key)
    except ValueError:
        return None


def _commentary_entries(text: str) -> List[CommentaryEntry]:
    """matchCommentary is a map of timestamp -> entry; only entries with a commType count."""
    comm = extract_object(text, "matchCommentary")
    if not comm:
        return []

    out: List[CommentaryEntry] = []
    for key, entry in comm.items():
        if not isinstance(entry, dict) or not entry.get("commType"):
            continue

        ts = _commentary_timestamp(entry, key)
        if ts is None:
            logger.debug("Commentary entry %r has no usable timestamp", key)
            continue

        batsman = entry.get("batsmanDetails") or {}
        bowler = entry.get("bowlerDetails") or {}
        try:
            out.append(
                CommentaryEntry(
                    type=str(entry["commType"]),
                    text=clean_text(entry.get("commText"), COMMENTARY_EXTRACT_CHARS),
                    innings_id=entry.get("inningsId"),
                    event=entry.get("event"),
                    team_name=entry.get("teamName"),
                    batsman=(batsman.get("playerName") if isinstance(batsman, dict) else None) or "",
                    bowler=(bowler.get("playerName") if isinstance(bowler, dict) else None) or "",
                    timestamp=ts,
                )
            )
        except ValidationError as e:
            logger.debug("Skipping malformed commentary entry %r: %s", key, e)

    return out


def parse_live_page(html: str, min_fragment_chars: int = MIN_FRAGMENT_CHARS) -> PageExtraction:
    result = PageExtraction()
    seen_timestamps = set()

    for raw in iter_fragments(html):
        if len(raw) < min_fragment_chars:
            continue
        result.fragment_count += 1

        text = normalize_fragment(raw)

        if result.miniscore is None and '"miniscore"' in text:
            result.miniscore = extract_object(text, "miniscore")

        if result.header is None and '"matchHeader"' in text:
            result.header = extract_object(text, "matchHeader")

        if result.match_score is None and '"matchScoreDetails"' in text:
            result.match_score = extract_object(text, "matchScoreDetails")

        if '"commType"' in text and '"matchCommentary"' in text:
            for entry in _commentary_entries(text):
                if entry.timestamp in seen_timestamps:
                    continue
                seen_timestamps.add(entry.timestamp)
                result.commentary.append(entry)

    # The copy nested in the live state is the one that matches it
    if isinstance(result.miniscore, dict):
        nested = result.miniscore.get("matchScoreDetails")
        if isinstance(nested, dict):
            result.match_score = nested

    if result.header is None and result.miniscore is None:
        result.fallback_title = extract_page_title(html)

    logger.debug(
        "Live page: %d fragments, header=%s miniscore=%s score=%s commentary=%d",
        result.fragment_count,
        result.header is not None,
        result.miniscore is not None,
        result.match_score is not None,
        len(result.commentary),
    )
    return result


# -----------------------------
# Scorecard page
# -----------------------------
def _scorecard_innings(group: RecordGroup) -> ScorecardInnings:
    # An innings needs at least one batting or bowling line
    batsmen = extract_records(group.window, BATSMAN_TEMPLATE)
    if batsmen:
        bowlers = extract_records(group.window, BOWLER_TEMPLATE)
    else:
        bowlers = require_records(group.window, BOWLER_TEMPLATE)

    extras = extract_records(group.window, EXTRAS_TEMPLATE)
    fow = extract_records(group.window, FOW_TEMPLATE)

    return ScorecardInnings(
        innings_id=group.innings_id,
        batting_team=group.team_name,
        batting_team_short=group.team_short,
        batsmen=[BattingLine.model_validate(r) for r in batsmen],
        bowlers=[BowlingLine.model_validate(r) for r in bowlers],
        extras=Extras.model_validate(extras[0]) if extras else None,
        fall_of_wickets=[FowEntry.model_validate(r) for r in fow],
    )


def parse_scorecard_page(
    html: str,
    min_fragment_chars: int = MIN_SCORECARD_FRAGMENT_CHARS,
) -> List[ScorecardInnings]:
    innings: List[ScorecardInnings] = []
    seen_ids = set()

    for raw in iter_fragments(html):
        if len(raw) < min_fragment_chars:
            continue

        text = normalize_fragment(raw)
        if '"scoreCard"' not in text and '"batTeamDetails"' not in text:
            continue

        for group in iter_record_groups(text):
            if group.innings_id in seen_ids:
                continue
            try:
                inn = _scorecard_innings(group)
            except (RecordPatternMismatch, ValidationError) as e:
                logger.debug("Scorecard group %d skipped: %s", group.position, e)
                continue
            seen_ids.add(inn.innings_id)
            innings.append(inn)

    return innings
