"""Builders for synthetic Cricbuzz-style pages.

Real pages embed state as React Server Component pushes:

    self.__next_f.push([1,"<JS-string-escaped payload>"])

These helpers produce the same shape so parsers can be tested without
network access or recorded HTML.
"""

import json

FILLER = "x" * 700


def js_escape(text: str) -> str:
    """Escape text the way it appears inside a JS double-quoted string literal."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )


def rsc_push(payload: str) -> str:
    return '<script>self.__next_f.push([1,"' + js_escape(payload) + '"])</script>'


def rsc_payload(**sections) -> str:
    """A padded RSC line carrying the given top-level keys."""
    body = {"filler": FILLER}
    body.update(sections)
    return '7:["$","$L1",null,' + json.dumps(body, separators=(",", ":")) + "]"


def page(*pushes: str, title: str = "Cricket live score") -> str:
    head = f'<html><head><meta property="og:title" content="{title}"><title>{title}</title></head><body>'
    # Real pages are far above the tiny-document threshold; keep the fixture above it too
    return head + "<div>" + ("." * 1200) + "</div>" + "".join(pushes) + "</body></html>"


def live_page(**sections) -> str:
    return page(rsc_push(rsc_payload(**sections)))


# ---------------------------------------------------------------------------
# Upstream objects
# ---------------------------------------------------------------------------


def match_header(**overrides) -> dict:
    header = {
        "matchId": 100123,
        "matchDescription": "2nd T20I",
        "matchFormat": "T20",
        "state": "In Progress",
        "status": "India opt to bat",
        "tossResults": {"tossWinnerId": 2, "tossWinnerName": "India", "decision": "Batting"},
        "result": "$undefined",
        "team1": {"id": 2, "name": "India", "shortName": "IND"},
        "team2": {"id": 4, "name": "Australia", "shortName": "AUS"},
    }
    header.update(overrides)
    return header


def innings_score(innings_id=1, team_id=2, team="IND", score=150, wickets=3, overs=20.0, balls=120) -> dict:
    return {
        "inningsId": innings_id,
        "batTeamId": team_id,
        "batTeamName": team,
        "score": score,
        "wickets": wickets,
        "overs": overs,
        "ballNbr": balls,
        "isDeclared": False,
    }


def match_score(*innings, custom_status="India lead") -> dict:
    return {"customStatus": custom_status, "inningsScoreList": list(innings)}


def batter(pid=11, name="Rohit Sharma", runs=34, balls=20, fours=4, sixes=1, sr=170.0) -> dict:
    return {"id": pid, "name": name, "runs": runs, "balls": balls, "fours": fours, "sixes": sixes, "strikeRate": sr}


def bowler(pid=21, name="Pat Cummins", overs=3.2, maidens=0, runs=28, wickets=1, economy=8.4) -> dict:
    return {
        "id": pid,
        "name": name,
        "overs": overs,
        "maidens": maidens,
        "runs": runs,
        "wickets": wickets,
        "economy": economy,
    }


def miniscore(**overrides) -> dict:
    mini = {
        "inningsId": 1,
        "batTeam": {"teamId": 2, "teamScore": 98, "teamWkts": 2},
        "batsmanStriker": batter(),
        "batsmanNonStriker": batter(pid=12, name="Virat Kohli", runs=12, balls=10, fours=1, sixes=0, sr=120.0),
        "bowlerStriker": bowler(),
        "bowlerNonStriker": bowler(pid=22, name="Adam Zampa", overs=3.0, runs=20, wickets=0, economy=6.67),
        "overs": 12.4,
        "target": 0,
        "partnerShip": {"runs": 40, "balls": 25},
        "currentRunRate": 7.74,
        "requiredRunRate": 0,
        "lastWicket": "Gill c Smith b Cummins 30(22)",
        "recentOvsStats": "1 4 0 6 1 1 | 0 0 1",
        "latestPerformance": [{"runs": 8, "wkts": 0, "label": "Last 1 overs"}],
        "event": "FOUR",
        "remRunsToWin": 0,
        "oversRem": "$undefined",
        "matchScoreDetails": match_score(innings_score(score=98, wickets=2, overs=12.4, balls=76)),
    }
    mini.update(overrides)
    return mini


def commentary_entry(ts, innings_id=1, text="Cummins to Rohit, <b>FOUR</b>", event="FOUR", comm_type="commentary"):
    return {
        "commType": comm_type,
        "commText": text,
        "inningsId": innings_id,
        "event": event,
        "teamName": "India",
        "timestamp": ts,
        "batsmanDetails": {"playerId": 11, "playerName": "Rohit Sharma"},
        "bowlerDetails": {"playerId": 21, "playerName": "Pat Cummins"},
    }


def match_commentary(*entries) -> dict:
    return {str(e["timestamp"]): e for e in entries}


# ---------------------------------------------------------------------------
# Scorecard page
# ---------------------------------------------------------------------------


def batting_line(name, runs, balls, fours, sixes, sr, out="c Smith b Cummins") -> str:
    return (
        '{"batId":1,"batName":"%s","isCaptain":false,"runs":%d,"balls":%d,"dots":3,'
        '"fours":%d,"sixes":%d,"mins":20,"strikeRate":"%s","outDesc":"%s"}'
        % (name, runs, balls, fours, sixes, sr, out)
    )


def bowling_line(name, overs, maidens, runs, wickets, economy) -> str:
    return (
        '{"bowlerId":9,"bowlName":"%s","overs":"%s","maidens":%d,"runs":%d,'
        '"wickets":%d,"economy":"%s"}' % (name, overs, maidens, runs, wickets, economy)
    )


def fow_line(fow_id, name, wkt, over, runs) -> str:
    return '{"fowId":%d,"batName":"%s","wktNbr":%d,"wktOver":%s,"wktRuns":%d}' % (fow_id, name, wkt, over, runs)


def scorecard_innings(innings_id, team_id, team, short, batting, bowling, fow=(), extras=None) -> str:
    extras = extras or '{"total":9,"bpieces":1,"legByes":2,"wpieces":5,"noBalls":1,"penalty":0}'
    return (
        '{"scoreCardId":%d,"batTeamDetails":{"batTeamId":%d,"batTeamName":"%s","batTeamShortName":"%s",'
        '"batsmenData":[%s]},"bowlTeamDetails":{"bowlersData":[%s]},"extrasData":%s,'
        '"wicketsData":[%s]}'
        % (innings_id, team_id, team, short, ",".join(batting), ",".join(bowling), extras, ",".join(fow))
    )


def scorecard_page(*innings_blocks) -> str:
    payload = '8:{"filler":"' + FILLER + '","scoreCard":[' + ",".join(innings_blocks) + "]}"
    return page(rsc_push(payload))
