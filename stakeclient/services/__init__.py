from .executor import ReachabilityAwareExecutor, StaticMockResponder, graphql_endpoint
from .faucet import FaucetClient, FaucetResult
from .reachability import (
    NetworkKind,
    ProbeCandidate,
    ReachabilityProber,
    ReachabilityStatus,
    detect_network_kind,
)

__all__ = [
    "ReachabilityAwareExecutor",
    "StaticMockResponder",
    "graphql_endpoint",
    "FaucetClient",
    "FaucetResult",
    "NetworkKind",
    "ProbeCandidate",
    "ReachabilityProber",
    "ReachabilityStatus",
    "detect_network_kind",
]
