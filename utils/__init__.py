"""Utility modules for SuiBets."""
from .rich_logging import console, render_bet_history, render_reconciliation, setup_logging

__all__ = [
    'console',
    'render_bet_history',
    'render_reconciliation',
    'setup_logging',
]
