# live_score/orchestrator.py
"""
Refresh loop: fetch -> parse -> assemble -> publish, on a fixed cadence.

States per cycle:

    IDLE --tick / url change--> FETCHING --document--> PARSING --> PUBLISHED
                                    \____________________\_______> FAILED

PUBLISHED happens whenever assembly completes, however many sections
actually succeeded. FAILED only writes Snapshot.error. Either way the loop
goes back to IDLE and waits for the next tick.

Cycles never overlap. A tick or URL change that arrives mid-cycle becomes a
single immediate re-run once the current cycle ends; missed ticks are not
replayed.
"""
from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from live_score.assembler import assemble
from live_score.config import (
    ALLOWED_SOURCE_DOMAIN,
    MIN_DOCUMENT_CHARS,
    POLL_INTERVAL_SECONDS,
    SCORECARD_EVERY_N_CYCLES,
)
from live_score.errors import LiveScoreError, NetworkError
from live_score.fetcher import fetch_document
from live_score.models import ScorecardInnings, Snapshot
from live_score.page_parser import parse_live_page, parse_scorecard_page
from live_score.sources import extract_match_id, is_allowed_source, scorecard_url_for
from live_score.state import SnapshotStore

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], str]


class CycleState(str, enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    PUBLISHED = "published"
    FAILED = "failed"


class RefreshOrchestrator:
    def __init__(
        self,
        store: Optional[SnapshotStore] = None,
        fetcher: Fetcher = fetch_document,
        *,
        interval: float = POLL_INTERVAL_SECONDS,
        allowed_domain: str = ALLOWED_SOURCE_DOMAIN,
        scorecard_every: int = SCORECARD_EVERY_N_CYCLES,
        min_document_chars: int = MIN_DOCUMENT_CHARS,
    ):
        self.store = store or SnapshotStore()
        self._fetch = fetcher
        self._interval = interval
        self._allowed_domain = allowed_domain
        self._scorecard_every = scorecard_every
        self._min_document_chars = min_document_chars

        self._cycle_lock = threading.Lock()
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.state = CycleState.IDLE
        self.cycles = 0

    # -----------------------------
    # Inbound API (used by the transport)
    # -----------------------------
    def get_snapshot(self) -> Snapshot:
        return self.store.snapshot

    def get_source_url(self) -> str:
        return self.store.source_url

    def set_source_url(self, url: str) -> Dict[str, bool]:
        url = (url or "").strip()
        if not is_allowed_source(url, self._allowed_domain):
            logger.warning("Rejected source URL outside %s: %s", self._allowed_domain, url)
            return {"accepted": False}

        self.store.set_source_url(url)
        logger.info("[MATCH CHANGED] New URL: %s (match %s)", url, extract_match_id(url) or "?")
        self.trigger()
        return {"accepted": True}

    def trigger(self) -> None:
        """Ask for an out-of-band cycle; coalesces with any cycle already running."""
        self._wake.set()

    # -----------------------------
    # Loop lifecycle
    # -----------------------------
    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="score-refresh", daemon=True)
        self._thread.start()
        logger.info("Refresh loop started (every %.1fs)", self._interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        self._wake.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self) -> None:
        next_tick = time.monotonic()
        while not self._stop.is_set():
            delay = next_tick - time.monotonic()
            woken = self._wake.wait(delay) if delay > 0 else False
            self._wake.clear()
            if self._stop.is_set():
                break

            self.run_cycle()

            if not woken:
                next_tick += self._interval
                now = time.monotonic()
                if next_tick < now:
                    # Overran one or more ticks: run once more right away, no backlog
                    next_tick = now

    # -----------------------------
    # One cycle
    # -----------------------------
    def run_cycle(self) -> CycleState:
        """Run one full cycle. Never raises."""
        with self._cycle_lock:
            self.state = CycleState.IDLE
            url = self.store.source_url
            if not url:
                return self.state

            self.cycles += 1
            try:
                self._run(url)
            except NetworkError as e:
                self._fail(f"Fetch error: {e}")
            except LiveScoreError as e:
                self._fail(f"Parse error: {e}")
            except Exception as e:
                logger.exception("Unexpected error during refresh")
                self._fail(f"Parse error: {e}")
            return self.state

    def _fail(self, message: str) -> None:
        self.state = CycleState.FAILED
        self.store.record_error(message)
        logger.error("%s", message)

    def _run(self, url: str) -> None:
        logger.debug("Fetching %s", url)
        self.state = CycleState.FETCHING
        html = self._fetch(url)

        self.state = CycleState.PARSING
        if len(html) < self._min_document_chars:
            raise LiveScoreError(f"Document too small ({len(html)} chars)")

        extraction = parse_live_page(html)
        scorecard = self._maybe_scorecard(url)

        snapshot = self.store.update(lambda prev: assemble(prev, extraction, scorecard))
        self.state = CycleState.PUBLISHED
        _log_summary(snapshot)

    def _maybe_scorecard(self, url: str) -> Optional[List[ScorecardInnings]]:
        if self._scorecard_every <= 0 or (self.cycles - 1) % self._scorecard_every != 0:
            return None

        sc_url = scorecard_url_for(url)
        if not sc_url:
            return None

        try:
            return parse_scorecard_page(self._fetch(sc_url))
        except LiveScoreError as e:
            logger.warning("Could not fetch scorecard page: %s", e)
            return None


def _log_summary(s: Snapshot) -> None:
    logger.info("Match: %s [%s]", s.match_info.description, s.match_info.state)
    for inn in s.innings:
        logger.info(
            "Innings %d: %s %d/%d (%s ov)", inn.innings_id, inn.batting_team_name, inn.runs, inn.wickets, inn.overs
        )

    ms = s.miniscore
    if ms is not None:
        if ms.batsman_striker:
            logger.info("Bat*: %s %d(%d)", ms.batsman_striker.name, ms.batsman_striker.runs, ms.batsman_striker.balls)
        if ms.bowler_striker:
            b = ms.bowler_striker
            logger.info("Bowl: %s %s-%d-%d-%d", b.name, b.overs, b.maidens, b.runs, b.wickets)
        if ms.recent_overs:
            logger.info("Recent: %s", ms.recent_overs)

    logger.info("Status: %s", s.match_info.status or (ms.status if ms else "") or "Live")
