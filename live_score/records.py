# live_score/records.py
"""
Positional extraction of repeated flat records (batting lines, bowling
lines, fall of wickets) from scorecard payload text.

The scorecard payload is not cut into one clean JSON object per record, so
each record type is described by a RecordTemplate: an ordered list of
fields that are compiled into ONE regular expression. Fields must appear in
that order inside a single `{...}` (the gaps are `[^}]*?`), which keeps a
match from wandering into the next record.

Template field order mirrors the upstream payload and is a tuning knob, not
a contract.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Literal, Optional, Tuple

from live_score.config import (
    INNINGS_ID_LOOKAHEAD_CHARS,
    INNINGS_ID_LOOKBEHIND_CHARS,
    SCORECARD_WINDOW_CHARS,
)
from live_score.errors import RecordPatternMismatch
from live_score.overs import MAX_WICKETS, is_valid_overs

logger = logging.getLogger(__name__)

FieldKind = Literal["int", "float", "name", "str", "overs"]

_CAPTURES: Dict[str, str] = {
    "int": r'"?(\d+)"?',
    "float": r'"?(-?[0-9.]+)"?',
    "name": r'"([^"]+)"',
    "str": r'"([^"]*)"',
    "overs": r'"?([0-9.]+)"?',
}

_GAP = r"[^}]*?"


@dataclass(frozen=True)
class FieldPattern:
    name: str                  # output name
    key: str                   # upstream JSON key
    kind: FieldKind = "int"
    required: bool = True


@dataclass
class RecordTemplate:
    name: str
    fields: Tuple[FieldPattern, ...]
    anchor: Optional[str] = None          # regex that must precede the first field
    validate: Optional[Callable[[Dict[str, Any]], bool]] = None
    _regex: Optional[re.Pattern] = field(default=None, init=False, repr=False)

    @property
    def regex(self) -> re.Pattern:
        if self._regex is None:
            self._regex = _compile(self)
        return self._regex


def _compile(template: RecordTemplate) -> re.Pattern:
    if not template.fields or not template.fields[0].required:
        raise ValueError(f"Template {template.name}: first field must be required")

    parts: List[str] = []
    if template.anchor:
        parts.append(template.anchor)

    for i, f in enumerate(template.fields):
        piece = '"' + re.escape(f.key) + '":' + _CAPTURES[f.kind]
        if i > 0 or template.anchor:
            piece = _GAP + piece
        if not f.required:
            piece = "(?:" + piece + ")?"
        parts.append(piece)

    return re.compile("".join(parts))


def _convert(kind: FieldKind, raw: str) -> Any:
    if kind == "int":
        return int(raw)
    if kind == "float":
        return float(raw)
    if kind == "overs":
        if not is_valid_overs(raw):
            raise ValueError(f"invalid overs {raw!r}")
        return raw
    return raw


def extract_records(window: str, template: RecordTemplate) -> List[Dict[str, Any]]:
    """
    All records of `template` inside `window`, in order.

    A record with a missing required field simply does not match; a record
    whose values do not convert or fail the template's plausibility check is
    skipped. Neither stops the rest of the group.
    """
    out: List[Dict[str, Any]] = []

    for m in template.regex.finditer(window):
        record: Dict[str, Any] = {}
        try:
            for i, f in enumerate(template.fields, start=1):
                raw = m.group(i)
                record[f.name] = None if raw is None else _convert(f.kind, raw)
        except ValueError as e:
            logger.debug("Skipping %s record at offset %d: %s", template.name, m.start(), e)
            continue

        if template.validate is not None and not template.validate(record):
            logger.debug("Skipping implausible %s record: %s", template.name, record)
            continue

        out.append(record)

    return out


def require_records(window: str, template: RecordTemplate) -> List[Dict[str, Any]]:
    records = extract_records(window, template)
    if not records:
        raise RecordPatternMismatch(f"No {template.name} records in window of {len(window)} chars")
    return records


# -----------------------------
# Built-in templates
# -----------------------------
def _plausible_bowler(r: Dict[str, Any]) -> bool:
    return 0 <= r["wickets"] <= MAX_WICKETS


def _plausible_fow(r: Dict[str, Any]) -> bool:
    return 1 <= r["wicket"] <= MAX_WICKETS


BATSMAN_TEMPLATE = RecordTemplate(
    name="batsman",
    fields=(
        FieldPattern("name", "batName", "name"),
        FieldPattern("runs", "runs"),
        FieldPattern("balls", "balls"),
        FieldPattern("fours", "fours"),
        FieldPattern("sixes", "sixes"),
        FieldPattern("strikeRate", "strikeRate", "float"),
        FieldPattern("dismissal", "outDesc", "str"),
    ),
)

BOWLER_TEMPLATE = RecordTemplate(
    name="bowler",
    fields=(
        FieldPattern("name", "bowlName", "name"),
        FieldPattern("overs", "overs", "overs"),
        FieldPattern("maidens", "maidens"),
        FieldPattern("runs", "runs"),
        FieldPattern("wickets", "wickets"),
        FieldPattern("economy", "economy", "float"),
    ),
    validate=_plausible_bowler,
)

FOW_TEMPLATE = RecordTemplate(
    name="fall-of-wicket",
    fields=(
        FieldPattern("fowId", "fowId"),
        FieldPattern("batsman", "batName", "name"),
        FieldPattern("wicket", "wktNbr"),
        FieldPattern("overs", "wktOver", "overs"),
        FieldPattern("score", "wktRuns"),
    ),
    validate=_plausible_fow,
)

EXTRAS_TEMPLATE = RecordTemplate(
    name="extras",
    anchor=r'"extrasData":\{',
    fields=(
        FieldPattern("total", "total"),
        FieldPattern("byes", "bpieces"),
        FieldPattern("legByes", "legByes"),
        FieldPattern("wides", "wpieces"),
        FieldPattern("noBalls", "noBalls"),
    ),
)


# -----------------------------
# Innings groups (anchor + bounded window)
# -----------------------------
_GROUP_ANCHOR_RE = re.compile(
    r'"batTeamDetails":\{"batTeamId":(\d+),"batTeamName":"([^"]+)","batTeamShortName":"([^"]+)"'
)
_INNINGS_ID_RE = re.compile(r'"scoreCardId":(\d+)|"inningsId":(\d+)')


@dataclass
class RecordGroup:
    position: int              # 1-based order of the anchor in the text
    team_id: int
    team_name: str
    team_short: str
    innings_id: int
    window: str


def iter_record_groups(
    text: str,
    window_chars: int = SCORECARD_WINDOW_CHARS,
) -> Iterator[RecordGroup]:
    """
    One group per batting-team anchor. The record window runs from the
    anchor for `window_chars` characters, cut short at the next anchor so
    one innings never picks up the next innings' lines.
    """
    anchors = list(_GROUP_ANCHOR_RE.finditer(text))

    for i, m in enumerate(anchors, start=1):
        start = m.start()
        end = min(len(text), start + window_chars)
        if i < len(anchors):
            end = min(end, anchors[i].start())

        id_block = text[max(0, start - INNINGS_ID_LOOKBEHIND_CHARS): start + INNINGS_ID_LOOKAHEAD_CHARS]
        id_match = _INNINGS_ID_RE.search(id_block)
        innings_id = int(id_match.group(1) or id_match.group(2)) if id_match else i

        yield RecordGroup(
            position=i,
            team_id=int(m.group(1)),
            team_name=m.group(2),
            team_short=m.group(3),
            innings_id=innings_id,
            window=text[start:end],
        )
