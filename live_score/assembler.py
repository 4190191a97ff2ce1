# live_score/assembler.py
"""
Folds one cycle's extraction results into the previous snapshot.

Each top-level section (header, innings list, live state, commentary,
scorecard) is rebuilt only when its extraction succeeded and produced
something; otherwise the previous value is kept. A field that is present
upstream but not a number abandons its whole section for this cycle.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from live_score.config import COMMENTARY_LIMIT, COMMENTARY_TEXT_CHARS
from live_score.errors import MalformedStructure
from live_score.models import (
    BattingTeamState,
    CommentaryEntry,
    InningsRecord,
    LiveBatter,
    LiveBowler,
    MatchInfo,
    Miniscore,
    OverSummary,
    PageExtraction,
    Partnership,
    ScorecardInnings,
    Snapshot,
    Team,
    utc_now_iso,
)
from live_score.overs import format_run_rate
from live_score.page_parser import clean_text

logger = logging.getLogger(__name__)

FALLBACK_NOTE = "Limited data - using fallback parser"
NO_DATA_NOTE = "No match data found in page"

# "IND 150/3 (20.0) ... vs AUS" style page titles
_FALLBACK_SCORE_RE = re.compile(
    r"([A-Z]{2,4})\s+(\d+)(?:/(\d+))?\s*(?:\(([0-9.]+)\))?.*?vs\s*([A-Z]{2,4})\s*(?:(\d+)(?:/(\d+))?)?"
)


# -----------------------------
# Field helpers
# -----------------------------
def _pick(raw: Dict[str, Any], **mapping: str) -> Dict[str, Any]:
    """Rename upstream keys; absent and null values are left out so model defaults apply."""
    out: Dict[str, Any] = {}
    for name, key in mapping.items():
        value = raw.get(key)
        if value is not None:
            out[name] = value
    return out


def _number(raw: Dict[str, Any], *keys: str, default: int = 0) -> float:
    """First present key among `keys` as a number; absent -> default, garbage -> MalformedStructure."""
    for key in keys:
        value = raw.get(key)
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            raise MalformedStructure(f"{key}={value!r} is not a number")
        if isinstance(value, (int, float)):
            return value
        try:
            return float(value) if "." in str(value) else int(value)
        except (TypeError, ValueError) as e:
            raise MalformedStructure(f"{key}={value!r} is not a number") from e
    return default


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _first_text(raw: Dict[str, Any], *keys: str, default: str = "") -> str:
    for key in keys:
        if raw.get(key):
            return str(raw[key])
    return default


# -----------------------------
# Section builders
# -----------------------------
def build_header(header: Dict[str, Any]) -> Tuple[MatchInfo, Optional[Team], Optional[Team]]:
    toss = header.get("tossResults")
    toss_text = ""
    if isinstance(toss, dict) and toss.get("tossWinnerName"):
        toss_text = f"{toss['tossWinnerName']} won the toss and chose to {_text(toss.get('decision'))}"

    status = _text(header.get("status"))
    info = MatchInfo(
        description=_text(header.get("matchDescription")),
        format=_text(header.get("matchFormat")),
        status=status,
        venue="",
        state=_text(header.get("state")),
        toss=toss_text,
        result=status if header.get("result") else "",
    )
    return info, _team(header.get("team1")), _team(header.get("team2"))


def _team(raw: Any) -> Optional[Team]:
    if not isinstance(raw, dict):
        return None
    return Team(
        name=_first_text(raw, "name", "teamName", default="--"),
        short_name=_first_text(raw, "shortName", "teamSName", default="--"),
        id=int(_number(raw, "id", "teamId")),
    )


def build_innings(match_score: Dict[str, Any]) -> List[InningsRecord]:
    score_list = match_score.get("inningsScoreList")
    if score_list is None:
        return []
    if not isinstance(score_list, list):
        raise MalformedStructure("inningsScoreList is not a list")

    records: Dict[int, InningsRecord] = {}
    for inn in score_list:
        if not isinstance(inn, dict):
            raise MalformedStructure("inningsScoreList entry is not an object")

        rec = InningsRecord.model_validate(
            _pick(
                inn,
                innings_id="inningsId",
                batting_team_id="batTeamId",
                batting_team_name="batTeamName",
                runs="score",
                wickets="wickets",
                overs="overs",
                balls="ballNbr",
                is_declared="isDeclared",
            )
        )
        if rec.innings_id in records:
            continue
        records[rec.innings_id] = rec.model_copy(update={"run_rate": format_run_rate(rec.runs, rec.overs)})

    # Upstream lists the latest innings first; publish in playing order
    return [records[k] for k in sorted(records)]


def _player_present(raw: Any) -> bool:
    """A player slot with id <= 0 (or no id) is an empty slot, not a zero-valued player."""
    return isinstance(raw, dict) and _number(raw, "id") > 0


def _batter(raw: Any) -> Optional[LiveBatter]:
    if not _player_present(raw):
        return None
    return LiveBatter.model_validate(
        _pick(raw, name="name", runs="runs", balls="balls", fours="fours", sixes="sixes", strike_rate="strikeRate")
    )


def _bowler(raw: Any) -> Optional[LiveBowler]:
    if not _player_present(raw):
        return None
    return LiveBowler.model_validate(
        _pick(raw, name="name", overs="overs", maidens="maidens", runs="runs", wickets="wickets", economy="economy")
    )


def build_miniscore(mini: Dict[str, Any], match_score: Optional[Dict[str, Any]] = None) -> Miniscore:
    fields = _pick(
        mini,
        innings_id="inningsId",
        overs="overs",
        target="target",
        current_run_rate="currentRunRate",
        required_run_rate="requiredRunRate",
        last_wicket="lastWicket",
        recent_overs="recentOvsStats",
        latest_performance="latestPerformance",
        event="event",
        rem_runs_to_win="remRunsToWin",
        overs_remaining="oversRem",
    )

    bat_team = mini.get("batTeam")
    if isinstance(bat_team, dict):
        fields["batting_team"] = BattingTeamState.model_validate(
            _pick(bat_team, id="teamId", score="teamScore", wickets="teamWkts")
        )

    partnership = mini.get("partnerShip")
    if isinstance(partnership, dict):
        fields["partnership"] = Partnership.model_validate(_pick(partnership, runs="runs", balls="balls"))

    fields["batsman_striker"] = _batter(mini.get("batsmanStriker"))
    fields["batsman_non_striker"] = _batter(mini.get("batsmanNonStriker"))
    fields["bowler_striker"] = _bowler(mini.get("bowlerStriker"))
    fields["bowler_non_striker"] = _bowler(mini.get("bowlerNonStriker"))

    if isinstance(match_score, dict):
        fields["status"] = _text(match_score.get("customStatus"))

    separator = mini.get("overSeparator")
    if isinstance(separator, dict):
        fields["over_summary"] = OverSummary.model_validate(
            _pick(
                separator,
                over_number="overNumber",
                summary="overSummary",
                bat_team="batTeamObj",
                bat_striker="batStrikerObj",
                bat_non_striker="batNonStrikerObj",
                bowler="bowlerObj",
            )
        )

    return Miniscore.model_validate(fields)


def build_commentary(
    entries: List[CommentaryEntry],
    innings_id: Optional[int],
    limit: int = COMMENTARY_LIMIT,
    text_chars: int = COMMENTARY_TEXT_CHARS,
) -> List[CommentaryEntry]:
    """Most recent first, active innings only, capped in count and text length."""
    ordered = sorted(entries, key=lambda c: c.timestamp, reverse=True)
    picked = [c for c in ordered if c.innings_id == innings_id][:limit]
    return [c.model_copy(update={"text": clean_text(c.text, text_chars)}) for c in picked]


def _section(name: str, builder: Callable[..., Any], *args: Any) -> Any:
    """Run one section builder; None means "keep the previous value"."""
    if args[0] is None:
        return None
    try:
        value = builder(*args)
    except (MalformedStructure, ValidationError) as e:
        logger.warning("%s section kept from previous cycle: %s", name, e)
        return None
    return value or None


# -----------------------------
# Fold
# -----------------------------
def _fallback(previous: Snapshot, title: Optional[str], updates: Dict[str, Any], now: str) -> Snapshot:
    if title and _FALLBACK_SCORE_RE.search(title):
        logger.info("Fallback title: %s", title[:80])
        updates["match_info"] = previous.match_info.model_copy(update={"status": title})
        updates["degraded"] = True
        updates["error"] = FALLBACK_NOTE
    else:
        updates["degraded"] = False
        updates["error"] = NO_DATA_NOTE

    updates["timestamp"] = now
    return previous.model_copy(update=updates)


def assemble(
    previous: Snapshot,
    extraction: PageExtraction,
    scorecard: Optional[List[ScorecardInnings]] = None,
    now: Optional[str] = None,
) -> Snapshot:
    """
    Build the next snapshot from `previous` and this cycle's results.

    Pure: the same inputs give the same snapshot apart from `timestamp`.
    """
    now = now or utc_now_iso()
    updates: Dict[str, Any] = {}

    if scorecard:
        updates["scorecard"] = list(scorecard)

    if extraction.header is None and extraction.miniscore is None:
        return _fallback(previous, extraction.fallback_title, updates, now)

    header = _section("matchHeader", build_header, extraction.header)
    if header is not None:
        info, team1, team2 = header
        updates["match_info"] = info
        if team1 is not None:
            updates["team1"] = team1
        if team2 is not None:
            updates["team2"] = team2

    innings = _section("inningsScoreList", build_innings, extraction.match_score)
    if innings is not None:
        updates["innings"] = innings
        updates["current_innings_count"] = len(innings)

    miniscore = _section("miniscore", build_miniscore, extraction.miniscore, extraction.match_score)
    if miniscore is not None:
        updates["miniscore"] = miniscore

    if extraction.commentary:
        if miniscore is not None and miniscore.innings_id:
            active = miniscore.innings_id
        else:
            active = updates.get("current_innings_count", previous.current_innings_count)
        commentary = build_commentary(extraction.commentary, active)
        if commentary:
            updates["recent_commentary"] = commentary

    updates["degraded"] = False
    updates["error"] = None
    updates["timestamp"] = now
    return previous.model_copy(update=updates)
