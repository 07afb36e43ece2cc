"""
Logging setup and rich console rendering for bet placement and reconciliation.
"""
import logging
from typing import Any, Dict, List

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

console = Console()

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", fmt: str = "plain") -> None:
    """Configure root logging once, plain lines or rich console output."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    if fmt == "rich":
        logging.basicConfig(
            level=log_level,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        )
    else:
        logging.basicConfig(level=log_level, format=PLAIN_FORMAT)


def create_styled_table(columns: List[str], header_style: str = "bold cyan") -> Table:
    table = Table(show_header=True, header_style=header_style, box=box.ROUNDED)
    for col in columns:
        table.add_column(col, style="cyan" if col != columns[-1] else "yellow")
    return table


def render_reconciliation(report: Dict[str, Any]) -> Panel:
    """Summary panel for a reconciliation sweep."""
    table = create_styled_table(["Metric", "Count"])
    for key in ("scanned", "inserted", "linked", "status_updated", "unchanged", "unmatched_parlays"):
        table.add_row(key.replace("_", " "), str(report.get(key, 0)))
    table.add_row("errors", str(len(report.get("errors", []))))

    color = "green" if not report.get("errors") else "yellow"
    return Panel(
        table,
        title=f"[bold {color}]Reconciliation {report.get('wallet_address', '')}[/bold {color}]",
        border_style=color,
    )


def render_bet_history(bets: List[Dict[str, Any]]) -> Table:
    table = create_styled_table(["Bet object", "Event", "Prediction", "Stake", "Odds", "Status"])
    for bet in bets:
        table.add_row(
            (bet.get("betObjectId") or "")[:14] + "...",
            str(bet.get("eventId", "")),
            str(bet.get("prediction", ""))[:40],
            f"{bet.get('betAmount', 0):,} {bet.get('currency', '')}",
            f"{bet.get('odds', 0):.2f}",
            bet.get("status", ""),
        )
    return table
