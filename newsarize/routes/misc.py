"""
Miscellaneous routes: health check.
"""

from fastapi import APIRouter

from .. import __version__
from ..config import state

router = APIRouter(tags=["misc"])


@router.get("/status")
async def health_check() -> dict:
    """API health check."""
    return {
        "status": "ok",
        "version": __version__,
        "model_ready": state.engine.is_model_ready.value if state.engine else False,
        "worker_running": state.worker.running if state.worker else False,
        "unprocessed_articles": state.db.get_unprocessed_count() if state.db else 0,
    }
