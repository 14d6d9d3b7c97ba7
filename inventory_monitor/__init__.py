"""
Inventory price monitor package.

This package contains modules for polling a vehicle inventory API,
remembering which listings were already reported, notifying an ntfy
topic about new or re-priced listings and coordinating the polling
loop.  See README.md for details.
"""

__all__ = [
    "config",
    "detector",
    "ledger",
    "notifier",
    "scraper",
    "main",
    "utils",
]
