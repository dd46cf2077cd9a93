from fastapi import APIRouter, HTTPException

from ..core.errors import ErrorCategory, WalletError
from ..core.wallet.binder import InMemoryGameStateBinder
from ..core.wallet.models import Session
from ..core.wallet.session_manager import get_session_manager
from ..providers.bridged import detect_injected_wallets
from ..types import (
    BackendsResponse,
    BalanceAdjustRequest,
    ConnectRequest,
    DiscoveredPlayerResponse,
    FaucetResponse,
    PlayersResponse,
    SessionResponse,
    SignRequest,
    SignResponse,
)

router = APIRouter(prefix="/session")

_STATUS_BY_CATEGORY = {
    ErrorCategory.BACKEND_UNAVAILABLE: 400,
    ErrorCategory.INVALID_BACKEND: 400,
    ErrorCategory.USER_REJECTED: 403,
    ErrorCategory.NOT_CONNECTED: 409,
    ErrorCategory.OPERATION_IN_PROGRESS: 409,
}


def _http_error(exc: WalletError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_CATEGORY.get(exc.category, 502),
        detail=exc.to_dict(),
    )


def _session_response(session: Session) -> SessionResponse:
    return SessionResponse(
        backend_kind=session.backend_kind.value,
        connected=session.connected,
        identity=session.identity,
        account_handles=list(session.account_handles),
        balance=session.balance,
        public_key=session.public_key,
    )


@router.get("", response_model=SessionResponse)
async def get_session() -> SessionResponse:
    return _session_response(get_session_manager().session)


@router.get("/backends", response_model=BackendsResponse)
async def list_backends() -> BackendsResponse:
    manager = get_session_manager()
    return BackendsResponse(
        available=manager.backend_availability(),
        detected_wallets=[w.name for w in detect_injected_wallets(manager.environment)],
    )


@router.post("/connect", response_model=SessionResponse)
async def connect(request: ConnectRequest) -> SessionResponse:
    try:
        session = await get_session_manager().connect(request.backend)
    except WalletError as exc:
        raise _http_error(exc) from exc
    return _session_response(session)


@router.post("/disconnect", response_model=SessionResponse)
async def disconnect() -> SessionResponse:
    manager = get_session_manager()
    try:
        await manager.disconnect()
    except WalletError as exc:
        raise _http_error(exc) from exc
    return _session_response(manager.session)


@router.post("/sign", response_model=SignResponse)
async def sign(request: SignRequest) -> SignResponse:
    manager = get_session_manager()
    try:
        signature = await manager.sign(request.message)
    except WalletError as exc:
        raise _http_error(exc) from exc
    return SignResponse(signature=signature, backend_kind=manager.session.backend_kind.value)


@router.post("/faucet", response_model=FaucetResponse)
async def faucet() -> FaucetResponse:
    try:
        result = await get_session_manager().request_faucet()
    except WalletError as exc:
        raise _http_error(exc) from exc
    return FaucetResponse(
        success=result.success,
        message=result.message,
        amount=result.amount,
        chain_id=result.chain_id,
        error=result.error,
    )


@router.post("/balance", response_model=SessionResponse)
async def adjust_balance(request: BalanceAdjustRequest) -> SessionResponse:
    try:
        session = await get_session_manager().adjust_local_balance(request.delta)
    except WalletError as exc:
        raise _http_error(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _session_response(session)


@router.get("/players", response_model=PlayersResponse)
async def discovered_players() -> PlayersResponse:
    """Identities seen earlier in this process, for picking steal targets."""
    binder = get_session_manager().binder
    if not isinstance(binder, InMemoryGameStateBinder):
        return PlayersResponse()
    return PlayersResponse(
        current_identity=binder.current_identity,
        players=[
            DiscoveredPlayerResponse(
                identity=p.identity,
                name=p.name,
                chain_id=p.chain_id,
                total_staked=p.total_staked,
                registered_at=p.registered_at,
            )
            for p in binder.discover()
        ],
    )
