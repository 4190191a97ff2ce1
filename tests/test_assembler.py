import pytest

from live_score.assembler import (
    FALLBACK_NOTE,
    NO_DATA_NOTE,
    assemble,
    build_commentary,
    build_header,
    build_innings,
    build_miniscore,
)
from live_score.errors import MalformedStructure
from live_score.models import CommentaryEntry, PageExtraction, ScorecardInnings, Snapshot
from live_score.page_parser import parse_live_page
from payloads import (
    batter,
    commentary_entry,
    innings_score,
    live_page,
    match_commentary,
    match_header,
    match_score,
    miniscore,
    page,
)

NOW = "2026-01-01T10:00:00.000Z"
LATER = "2026-01-01T10:00:02.000Z"


def _extraction(**kwargs) -> PageExtraction:
    return PageExtraction(**kwargs)


def _comment(ts, innings_id=1, text="ball"):
    return CommentaryEntry(type="commentary", text=text, innings_id=innings_id, timestamp=ts)


# ---------------------------------------------------------------------------
# End-to-end: page -> snapshot
# ---------------------------------------------------------------------------


class TestEndToEnd:
    """Page text through parse_live_page() and assemble()."""

    def test_header_innings_without_live_state(self):
        html = live_page(
            matchHeader=match_header(),
            matchScoreDetails=match_score(innings_score(score=150, wickets=3, overs=20.0, balls=120)),
        )

        snap = assemble(Snapshot.initial(), parse_live_page(html), now=NOW)

        assert len(snap.innings) == 1
        assert snap.innings[0].runs == 150
        assert snap.innings[0].wickets == 3
        assert snap.innings[0].run_rate == "7.50"
        assert snap.miniscore is None
        assert snap.error is None

        wire = snap.model_dump(by_alias=True)
        assert wire["innings"][0]["runRate"] == "7.50"
        assert wire["miniscore"] is None

    def test_empty_non_striker_slot_is_null(self):
        mini = miniscore(batsmanNonStriker=batter(pid=0, name="", runs=0, balls=0, fours=0, sixes=0, sr=0))

        snap = assemble(Snapshot.initial(), parse_live_page(live_page(miniscore=mini)), now=NOW)

        assert snap.miniscore.batsman_striker.name == "Rohit Sharma"
        assert snap.miniscore.batsman_non_striker is None
        assert snap.model_dump(by_alias=True)["miniscore"]["batsmanNonStriker"] is None

    def test_full_page(self):
        html = live_page(
            matchHeader=match_header(),
            miniscore=miniscore(),
            matchCommentary=match_commentary(commentary_entry(1000), commentary_entry(2000, innings_id=2)),
        )

        snap = assemble(Snapshot.initial(), parse_live_page(html), now=NOW)

        assert snap.match_info.description == "2nd T20I"
        assert snap.match_info.toss == "India won the toss and chose to Batting"
        assert snap.match_info.result == ""
        assert snap.team1.short_name == "IND"
        assert snap.team2.name == "Australia"
        assert snap.current_innings_count == 1
        assert snap.innings[0].runs == 98
        assert snap.miniscore.status == "India lead"
        assert snap.miniscore.partnership.runs == 40
        assert snap.miniscore.overs_remaining is None
        assert [c.timestamp for c in snap.recent_commentary] == [1000]
        assert snap.timestamp == NOW


# ---------------------------------------------------------------------------
# Section builders
# ---------------------------------------------------------------------------


class TestBuildInnings:
    def test_sorted_by_innings_id_and_deduplicated(self):
        raw = match_score(
            innings_score(innings_id=2, team="AUS", score=40, wickets=1, overs=5.0),
            innings_score(innings_id=1, team="IND", score=150, wickets=3, overs=20.0),
            innings_score(innings_id=2, team="AUS", score=999),
        )

        innings = build_innings(raw)

        assert [(i.innings_id, i.runs) for i in innings] == [(1, 150), (2, 40)]
        assert innings[1].run_rate == "8.00"

    def test_zero_overs_run_rate(self):
        innings = build_innings(match_score(innings_score(score=0, wickets=0, overs=0.0, balls=0)))
        assert innings[0].run_rate == "0.00"

    def test_bad_list_is_malformed(self):
        with pytest.raises(MalformedStructure):
            build_innings({"inningsScoreList": "oops"})


def test_header_result_uses_status():
    info, team1, team2 = build_header(match_header(result={"winningTeam": "IND"}, status="India won by 6 wkts"))
    assert info.result == "India won by 6 wkts"
    assert team1.id == 2


def test_header_without_teams():
    info, team1, team2 = build_header({"matchDescription": "Final"})
    assert info.description == "Final"
    assert team1 is None and team2 is None


def test_miniscore_over_separator():
    mini = miniscore(overSeparator={"overNumber": 12, "overSummary": "1 4 0 6 1 1", "bowlerObj": {"id": 21}})
    built = build_miniscore(mini)
    assert built.over_summary.over_number == 12
    assert built.over_summary.summary == "1 4 0 6 1 1"
    assert built.status == ""


def test_miniscore_bad_number_is_malformed():
    with pytest.raises(MalformedStructure):
        build_miniscore(miniscore(batsmanStriker=batter(pid="abc")))


def test_commentary_filtered_sorted_and_capped():
    entries = [_comment(ts, innings_id=1 if ts % 2 else 2, text="<b>x</b>" + "y" * 300) for ts in range(1, 80)]

    picked = build_commentary(entries, innings_id=1, limit=30, text_chars=200)

    assert len(picked) == 30
    assert picked[0].timestamp == 79
    assert all(c.innings_id == 1 for c in picked)
    assert [c.timestamp for c in picked] == sorted((c.timestamp for c in picked), reverse=True)
    assert len(picked[0].text) == 200
    assert picked[0].text.startswith("xy")


# ---------------------------------------------------------------------------
# Fold behavior
# ---------------------------------------------------------------------------


def _previous() -> Snapshot:
    html = live_page(matchHeader=match_header(), miniscore=miniscore())
    return assemble(Snapshot.initial(), parse_live_page(html), now=NOW)


class TestAssemble:
    def test_same_input_same_snapshot_apart_from_timestamp(self):
        extraction = parse_live_page(live_page(matchHeader=match_header(), miniscore=miniscore()))
        prev = Snapshot.initial()

        a = assemble(prev, extraction, now=NOW)
        b = assemble(prev, extraction, now=LATER)

        assert a.model_copy(update={"timestamp": ""}) == b.model_copy(update={"timestamp": ""})
        assert a.timestamp != b.timestamp

    def test_missing_section_keeps_previous_value(self):
        prev = _previous()

        snap = assemble(prev, _extraction(header=match_header(status="Rain delay")), now=LATER)

        assert snap.match_info.status == "Rain delay"
        assert snap.miniscore == prev.miniscore
        assert snap.innings == prev.innings
        assert snap.timestamp == LATER

    def test_malformed_numeric_keeps_previous_section(self):
        prev = _previous()
        bad = miniscore(overs="twelve point four")

        snap = assemble(prev, _extraction(header=match_header(state="Innings Break"), miniscore=bad), now=LATER)

        assert snap.miniscore == prev.miniscore
        assert snap.match_info.state == "Innings Break"
        assert snap.error is None

    def test_clears_previous_error(self):
        prev = _previous().model_copy(update={"error": "Fetch error: boom", "degraded": True})
        snap = assemble(prev, _extraction(header=match_header()), now=LATER)
        assert snap.error is None
        assert snap.degraded is False

    def test_scorecard_is_folded_in_when_present(self):
        prev = _previous()
        scorecard = [ScorecardInnings(innings_id=1, batting_team="India", batting_team_short="IND")]

        snap = assemble(prev, _extraction(header=match_header()), scorecard, now=LATER)
        assert snap.scorecard == scorecard

        again = assemble(snap, _extraction(header=match_header()), None, now=LATER)
        assert again.scorecard == scorecard

    def test_commentary_falls_back_to_innings_count(self):
        prev = _previous()
        extraction = _extraction(header=match_header(), commentary=[_comment(5, innings_id=1), _comment(6, innings_id=2)])

        snap = assemble(prev, extraction, now=LATER)

        assert [c.timestamp for c in snap.recent_commentary] == [5]


class TestFallback:
    def test_title_with_score_sets_degraded_status(self):
        prev = _previous()
        extraction = parse_live_page(page(title="IND 150/3 (20.0) vs AUS"))

        snap = assemble(prev, extraction, now=LATER)

        assert snap.degraded is True
        assert snap.error == FALLBACK_NOTE
        assert snap.match_info.status == "IND 150/3 (20.0) vs AUS"
        assert snap.match_info.description == prev.match_info.description
        assert snap.miniscore == prev.miniscore
        assert snap.timestamp == LATER

    def test_no_data_at_all(self):
        snap = assemble(Snapshot.initial(), _extraction(fallback_title="Cricket news"), now=LATER)

        assert snap.error == NO_DATA_NOTE
        assert snap.degraded is False
        assert snap.match_info.status == "Loading..."

    def test_no_data_clears_earlier_degraded_flag(self):
        degraded = assemble(_previous(), parse_live_page(page(title="IND 150/3 (20.0) vs AUS")), now=NOW)
        assert degraded.degraded is True

        snap = assemble(degraded, _extraction(fallback_title="Cricket news"), now=LATER)

        assert snap.degraded is False
        assert snap.error == NO_DATA_NOTE
        assert snap.match_info == degraded.match_info
