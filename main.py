# main.py (live score relay)
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from live_score.config import (
    ALLOWED_SOURCE_DOMAIN,
    LOG_LEVEL,
    MATCH_URL,
    PORT,
    validate_config,
)
from live_score.logging_config import setup_logging
from live_score.models import snapshot_to_json
from live_score.orchestrator import RefreshOrchestrator
from live_score.state import SnapshotStore

logger = logging.getLogger(__name__)

# -----------------------
# App
# -----------------------
app = FastAPI(
    title="Cricket Live Score Relay",
    version="2.0.0",
    description="Polls a live match page and republishes a normalized score snapshot",
)

# Overlays are opened from file:// and from other hosts
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

orchestrator = RefreshOrchestrator(SnapshotStore(source_url=MATCH_URL))


@app.on_event("startup")
def on_startup():
    setup_logging(LOG_LEVEL)
    validate_config()

    if orchestrator.get_source_url():
        logger.info("Using match URL: %s", orchestrator.get_source_url())
    else:
        logger.info("No match URL configured. Set one with /set-match?url=...")

    orchestrator.start()


@app.on_event("shutdown")
def on_shutdown():
    orchestrator.stop(timeout=5)


@app.get("/health")
def health_check():
    return {
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(),
        "refresh_state": orchestrator.state.value,
    }


# -----------------------
# Score API
# -----------------------
@app.get("/score")
def get_score():
    # Always 200: a degraded snapshot carries its problem in "error"
    return Response(content=snapshot_to_json(orchestrator.get_snapshot()), media_type="application/json")


@app.get("/set-match")
def set_match(url: str = ""):
    result = orchestrator.set_source_url(url)
    if not result["accepted"]:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid URL. Must be a {ALLOWED_SOURCE_DOMAIN} URL.",
        )

    return {
        "success": True,
        "matchUrl": orchestrator.get_source_url(),
        "message": "Match URL updated! Score will refresh shortly.",
    }


@app.get("/get-match")
def get_match():
    return {"matchUrl": orchestrator.get_source_url() or ""}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)
