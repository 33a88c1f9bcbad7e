"""Management endpoints for reloading the in-memory indices."""

from __future__ import annotations

import logging
import threading
import time

from fastapi import APIRouter, Request

from weather_risk.ingest.orchestrator import load_variables
from weather_risk.store import TimeSeriesStore

logger = logging.getLogger(__name__)
router = APIRouter()

# Simple in-memory status for the background reload job
_reload_status: dict = {"running": False, "last_result": None}
_reload_lock = threading.Lock()


def _run_reload(store: TimeSeriesStore, files: dict | None) -> None:
    """Background worker: re-parse every configured file into the store."""
    t0 = time.time()
    try:
        results = load_variables(store, files)
        failed = {r.variable_id: r.errors for r in results if not r.ok}
        duration = round(time.time() - t0, 1)
        logger.info(
            "Reload complete: %d variables, %d failed in %.1fs",
            len(results), len(failed), duration,
        )
        with _reload_lock:
            _reload_status["last_result"] = {
                "status": "completed",
                "loaded": len(results) - len(failed),
                "failed": len(failed),
                "errors": failed,
                "duration_s": duration,
            }
    except Exception:
        logger.exception("Reload failed")
        with _reload_lock:
            _reload_status["last_result"] = {
                "status": "failed",
                "error": "See server logs",
                "duration_s": round(time.time() - t0, 1),
            }
    finally:
        with _reload_lock:
            _reload_status["running"] = False


@router.post("/reload")
def trigger_reload(request: Request) -> dict:
    """Start a background reload of all variable files.

    Queries keep answering from the previous indices until each variable's
    new rows are committed. Poll GET /manage/reload-status for progress.
    """
    with _reload_lock:
        if _reload_status["running"]:
            return {"status": "already_running"}
        _reload_status["running"] = True
        _reload_status["last_result"] = None

    store = request.app.state.store
    files = getattr(request.app.state, "files", None)
    thread = threading.Thread(target=_run_reload, args=(store, files), daemon=True)
    thread.start()

    return {"status": "started"}


@router.get("/reload-status")
def get_reload_status() -> dict:
    """Check the status of the last reload job."""
    with _reload_lock:
        return {
            "running": _reload_status["running"],
            "last_result": _reload_status["last_result"],
        }
