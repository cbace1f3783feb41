"""
CLI runner module.

Provides commands:
- balance: Show an invoice's outstanding balance
- writeoff: Write an invoice off
- login: Check private API credentials
- init: Create a default config file
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
