from typing import Optional

from fastapi import APIRouter

from ..services.reachability import ReachabilityStatus
from ..types import NetworkStatusResponse, RefreshRequest
from ..workers.reachability_worker import get_reachability_worker

router = APIRouter(prefix="/network")


def status_response(status: ReachabilityStatus) -> NetworkStatusResponse:
    return NetworkStatusResponse(
        connected=status.connected,
        selected_endpoint=status.selected_endpoint,
        network_kind=status.network_kind.value,
        network_name=status.network_name,
        is_mock_mode=status.is_mock_mode,
        latency_ms=status.latency_ms,
        last_checked_at=status.last_checked_at,
        error=status.error,
    )


@router.get("/status", response_model=NetworkStatusResponse)
async def network_status() -> NetworkStatusResponse:
    """Last published reachability snapshot; does not probe."""
    return status_response(get_reachability_worker().status)


@router.post("/refresh", response_model=NetworkStatusResponse)
async def refresh_network(request: Optional[RefreshRequest] = None) -> NetworkStatusResponse:
    """Probe now, optionally with a new custom endpoint."""
    worker = get_reachability_worker()
    if request is not None and "custom_endpoint" in request.model_fields_set:
        status = await worker.refresh(request.custom_endpoint)
    else:
        status = await worker.refresh()
    return status_response(status)
