# live_score/models.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from live_score.errors import SerializationError

logger = logging.getLogger(__name__)

SERIALIZE_FAILED_PAYLOAD = '{"error":"serialize failed"}'


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _SnapshotModel(BaseModel):
    """camelCase on the wire, snake_case in Python; immutable once built."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# -----------------------------
# Header section
# -----------------------------
class MatchInfo(_SnapshotModel):
    description: str = ""
    format: str = ""
    status: str = ""
    venue: str = ""
    state: str = ""
    toss: str = ""
    result: str = ""


class Team(_SnapshotModel):
    name: str = "--"
    short_name: str = "--"
    id: int = 0


# -----------------------------
# Innings score list
# -----------------------------
class InningsRecord(_SnapshotModel):
    innings_id: int
    batting_team_id: int = 0
    batting_team_name: str = ""
    runs: int = 0
    wickets: int = 0
    overs: float = 0.0
    balls: int = 0
    is_declared: bool = False
    run_rate: str = "0.00"


# -----------------------------
# Live state (miniscore)
# -----------------------------
class LiveBatter(_SnapshotModel):
    name: str = ""
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    strike_rate: float = 0.0


class LiveBowler(_SnapshotModel):
    name: str = ""
    overs: float = 0.0
    maidens: int = 0
    runs: int = 0
    wickets: int = 0
    economy: float = 0.0


class BattingTeamState(_SnapshotModel):
    id: int = 0
    score: int = 0
    wickets: int = 0


class Partnership(_SnapshotModel):
    runs: int = 0
    balls: int = 0


class OverSummary(_SnapshotModel):
    over_number: Optional[float] = None
    summary: Optional[str] = None
    bat_team: Optional[Any] = None
    bat_striker: Optional[Any] = None
    bat_non_striker: Optional[Any] = None
    bowler: Optional[Any] = None


class Miniscore(_SnapshotModel):
    innings_id: Optional[int] = None
    batting_team: Optional[BattingTeamState] = None
    batsman_striker: Optional[LiveBatter] = None
    batsman_non_striker: Optional[LiveBatter] = None
    bowler_striker: Optional[LiveBowler] = None
    bowler_non_striker: Optional[LiveBowler] = None
    overs: float = 0.0
    target: int = 0
    partnership: Optional[Partnership] = None
    current_run_rate: float = 0.0
    required_run_rate: float = 0.0
    last_wicket: Optional[Any] = None
    recent_overs: str = ""
    latest_performance: List[Any] = []
    event: Any = ""
    rem_runs_to_win: int = 0
    overs_remaining: Optional[float] = None
    status: str = ""
    over_summary: Optional[OverSummary] = None


# -----------------------------
# Commentary
# -----------------------------
class CommentaryEntry(_SnapshotModel):
    type: str
    text: str = ""
    innings_id: Optional[int] = None
    event: Optional[Any] = None
    team_name: Optional[str] = None
    batsman: str = ""
    bowler: str = ""
    timestamp: int = 0


# -----------------------------
# Scorecard (separate page)
# -----------------------------
class BattingLine(_SnapshotModel):
    name: str
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    strike_rate: float = 0.0
    dismissal: str = ""


class BowlingLine(_SnapshotModel):
    name: str
    overs: str = "0"
    maidens: int = 0
    runs: int = 0
    wickets: int = 0
    economy: float = 0.0


class Extras(_SnapshotModel):
    total: int = 0
    byes: int = 0
    leg_byes: int = 0
    wides: int = 0
    no_balls: int = 0


class FowEntry(_SnapshotModel):
    wicket: int
    batsman: str
    score: int = 0
    overs: str = "0"


class ScorecardInnings(_SnapshotModel):
    innings_id: int
    batting_team: str = ""
    batting_team_short: str = ""
    batsmen: List[BattingLine] = []
    bowlers: List[BowlingLine] = []
    extras: Optional[Extras] = None
    fall_of_wickets: List[FowEntry] = []


# -----------------------------
# Published aggregate
# -----------------------------
class Snapshot(_SnapshotModel):
    match_info: MatchInfo = MatchInfo(status="Loading...")
    team1: Team = Team()
    team2: Team = Team()
    current_innings_count: int = 0
    innings: List[InningsRecord] = []
    miniscore: Optional[Miniscore] = None
    recent_commentary: List[CommentaryEntry] = []
    scorecard: List[ScorecardInnings] = []
    degraded: bool = False
    timestamp: str = ""
    error: Optional[str] = None

    @classmethod
    def initial(cls) -> "Snapshot":
        return cls(timestamp=utc_now_iso())


def _dump_json(snapshot: Snapshot) -> str:
    try:
        return snapshot.model_dump_json(by_alias=True, indent=2)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Snapshot could not be serialized: {e}") from e


def snapshot_to_json(snapshot: Snapshot) -> str:
    """Never raises: a broken snapshot becomes a fixed error payload."""
    try:
        return _dump_json(snapshot)
    except SerializationError as e:
        logger.error("%s", e)
        return SERIALIZE_FAILED_PAYLOAD


# -----------------------------
# Transient extraction results
# -----------------------------
@dataclass
class PageExtraction:
    """What one live page yielded. Every section is optional."""

    header: Optional[Dict[str, Any]] = None
    miniscore: Optional[Dict[str, Any]] = None
    match_score: Optional[Dict[str, Any]] = None
    commentary: List[CommentaryEntry] = field(default_factory=list)
    fallback_title: Optional[str] = None
    fragment_count: int = 0
