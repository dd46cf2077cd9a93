#!/usr/bin/env python3
"""Simple CLI for driving the Stake and Steal client locally"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from stakeclient.core.errors import WalletError
from stakeclient.core.wallet.models import Session
from stakeclient.core.wallet.session_manager import get_session_manager
from stakeclient.logging_config import setup_logging
from stakeclient.services.reachability import ReachabilityProber, ReachabilityStatus


def print_session(session: Session):
    """Pretty print the active session"""
    if not session.connected:
        print("🔌 No wallet connected")
        return

    print("\n👛 Wallet Session")
    print("=" * 50)
    print(f"Backend: {session.backend_kind.value}")
    print(f"Identity: {session.identity}")
    if session.public_key:
        print(f"Address: {session.public_key}")
    if session.account_handles:
        print(f"Chains: {', '.join(session.account_handles)}")
    print(f"Balance: {session.balance}")


def print_status(status: ReachabilityStatus):
    """Pretty print a reachability snapshot"""
    indicator = "🟢" if status.connected else "🟡"
    print(f"\n{indicator} Network: {status.network_name}")
    print("=" * 50)
    print(f"Mode: {'mock' if status.is_mock_mode else 'live'}")
    if status.selected_endpoint:
        print(f"Endpoint: {status.selected_endpoint}")
    if status.latency_ms is not None:
        print(f"Latency: {status.latency_ms:.0f} ms")
    if status.error:
        print(f"Note: {status.error}")


async def cli_probe(custom_endpoint: Optional[str] = None):
    """Run one reachability cycle"""
    print("🔍 Probing endpoints...")
    status = await ReachabilityProber().check(custom_endpoint)
    print_status(status)


async def cli_status():
    manager = get_session_manager()
    await manager.restore()
    print_session(manager.session)
    availability = manager.backend_availability()
    print("\nBackends:")
    for kind, available in availability.items():
        print(f"  {'✅' if available else '❌'} {kind}")


async def cli_connect(backend: str):
    manager = get_session_manager()
    await manager.restore()
    session = await manager.connect(backend)
    print(f"✅ Connected via {backend}")
    print_session(session)


async def cli_disconnect():
    manager = get_session_manager()
    await manager.restore()
    if not manager.session.connected:
        print("🔌 Nothing to disconnect")
        return
    await manager.disconnect()
    print("✅ Disconnected")


async def cli_sign(message: str):
    manager = get_session_manager()
    await manager.restore()
    signature = await manager.sign(message)
    print(f"✍️  {signature}")


async def cli_faucet():
    manager = get_session_manager()
    await manager.restore()
    result = await manager.request_faucet()
    if result.success:
        print(f"💧 {result.message}")
        print_session(manager.session)
    else:
        print(f"❌ {result.message}" + (f": {result.error}" if result.error else ""))


async def cli_export(output: Optional[str]):
    payload = get_session_manager().export_local_wallet()
    if payload is None:
        print("❌ No local wallet to export")
        return
    if output:
        Path(output).write_text(payload)
        print(f"✅ Local wallet written to {output}")
    else:
        print(payload)


async def cli_import(path: str):
    payload = Path(path).read_text()
    if await get_session_manager().import_local_wallet(payload):
        print("✅ Local wallet imported")
    else:
        print("❌ Not a valid wallet export")


async def cli_clear(confirm: bool):
    if not confirm:
        print("⚠️  This deletes the local wallet for good. Re-run with --yes to confirm.")
        return
    manager = get_session_manager()
    await manager.restore()
    await manager.clear_local_data()
    print("🗑️  Local wallet cleared")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stake and Steal client CLI")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("status", help="Show the restored session and available backends")

    probe_parser = subparsers.add_parser("probe", help="Run one network reachability check")
    probe_parser.add_argument("--endpoint", help="Custom endpoint to try first")

    connect_parser = subparsers.add_parser("connect", help="Connect a wallet backend")
    connect_parser.add_argument(
        "backend",
        nargs="?",
        default="local-simulated",
        help="local-simulated, native-extension or bridged-provider (default: local-simulated)",
    )

    subparsers.add_parser("disconnect", help="Disconnect the active wallet")

    sign_parser = subparsers.add_parser("sign", help="Sign a message with the active wallet")
    sign_parser.add_argument("message", help="Message to sign")

    subparsers.add_parser("faucet", help="Request test tokens for the active wallet")

    export_parser = subparsers.add_parser("export", help="Export the local wallet as JSON")
    export_parser.add_argument("-o", "--output", help="Write to a file instead of stdout")

    import_parser = subparsers.add_parser("import", help="Import a local wallet export")
    import_parser.add_argument("path", help="Path to the JSON export")

    clear_parser = subparsers.add_parser("clear", help="Delete the local wallet")
    clear_parser.add_argument("--yes", action="store_true", help="Confirm deletion")

    return parser


async def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args.log_level)
    command = args.command.lower()

    try:
        if command == "status":
            await cli_status()
        elif command == "probe":
            await cli_probe(args.endpoint)
        elif command == "connect":
            await cli_connect(args.backend)
        elif command == "disconnect":
            await cli_disconnect()
        elif command == "sign":
            await cli_sign(args.message)
        elif command == "faucet":
            await cli_faucet()
        elif command == "export":
            await cli_export(args.output)
        elif command == "import":
            await cli_import(args.path)
        elif command == "clear":
            await cli_clear(args.yes)
        else:
            print(f"❌ Unknown command: {command}")
            parser.print_help()
            return 2
    except WalletError as e:
        print(f"❌ {e.user_message}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
