from typing import Any, Dict

from fastapi import APIRouter

from ..core.wallet.session_manager import get_session_manager
from ..workers.reachability_worker import get_reachability_worker

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Liveness plus the current network and session summary"""
    worker = get_reachability_worker()
    status = worker.status
    session = get_session_manager().session

    return {
        "status": "healthy" if status.connected else "degraded",
        "mode": "mock" if status.is_mock_mode else "live",
        "network": status.to_dict(),
        "worker_running": worker.running,
        "session": {
            "backend_kind": session.backend_kind.value,
            "connected": session.connected,
        },
    }
