#!/usr/bin/env python3
"""
Reconcile one wallet's bet history with the chain.

Reads every BetPlaced event sent by the wallet, inserts mirror rows that are
missing and moves settled bets out of `pending`.

Usage: python scripts/reconcile_wallet.py <wallet_address> [--dry-run]

--dry-run only prints the on-chain history.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from betting.mirror import BetMirrorWriter
from betting.onchain import BetChainReader
from betting.reconciliation import BetReconciler
from clients.sui import SuiRpcClient, SuiRpcError
from config.settings import ChainConfig, settings
from database.client import BetMirrorDatabase
from utils.rich_logging import console, render_bet_history, render_reconciliation, setup_logging


async def main() -> int:
    """Run reconciliation for the wallet given on the command line"""
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if not args:
        console.print("[bold red]Usage: reconcile_wallet.py <wallet_address> [--dry-run][/bold red]")
        return 2
    wallet = args[0]
    dry_run = "--dry-run" in sys.argv

    setup_logging(settings.LOG_LEVEL, "rich")
    console.rule(f"[bold blue]BET RECONCILIATION · {settings.SUI_NETWORK}[/bold blue]")

    chain = ChainConfig.from_settings(settings)
    sui = SuiRpcClient(settings.rpc_url, timeout=settings.SUI_RPC_TIMEOUT_SECONDS)
    reader = BetChainReader(chain, sui)

    try:
        if dry_run:
            history = [b.to_history_dict() for b in await reader.get_wallet_bets(wallet)]
            console.print(render_bet_history(history))
            console.rule(f"[bold green]✅ {len(history)} bets on-chain[/bold green]")
            return 0

        db = BetMirrorDatabase(settings.SUPABASE_URL, settings.supabase_key)
        writer = BetMirrorWriter(db, reader=reader, verify_against_chain=False)
        report = await BetReconciler(db, reader, writer).reconcile_wallet(wallet)
    except SuiRpcError as e:
        console.print(f"\n[bold red]❌ Sui RPC error: {e}[/bold red]\n")
        return 1

    console.print(render_reconciliation(report.to_dict()))
    for error in report.errors:
        console.print(f"[yellow]⚠️ {error}[/yellow]")
    console.rule("[bold green]✅ RECONCILIATION COMPLETE[/bold green]")
    return 0 if not report.errors else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
