"""Configuration loader.

Reads environment variables and `.env` to configure the service.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load variables from a .env file if present (project root).
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env")


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes")


def _parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _parse_float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


# ---- Inventory query ---------------------------------------------------------

# Fully pre-encoded inventory query (used Model 3, LR trims, 2021-2024, market DE,
# sorted by price ascending). Treated as opaque; override to point at a mock.
DEFAULT_INVENTORY_URL = (
    "https://www.tesla.com/inventory/api/v4/inventory-results?query="
    "%7B%22query%22%3A%7B%22model%22%3A%22m3%22%2C%22condition%22%3A%22used%22%2C"
    "%22options%22%3A%7B%22TRIM%22%3A%5B%22LRAWD%22%2C%22LRRWD%22%5D%2C%22Year%22%3A"
    "%5B%222021%22%2C%222022%22%2C%222023%22%2C%222024%22%5D%7D%2C%22arrangeby%22%3A"
    "%22Price%22%2C%22order%22%3A%22asc%22%2C%22market%22%3A%22DE%22%2C%22language%22"
    "%3A%22de%22%2C%22super_region%22%3A%22north%20america%22%2C%22lng%22%3A11.0262%2C"
    "%22lat%22%3A49.3257%2C%22zip%22%3A%2291126%22%2C%22range%22%3A0%2C%22region%22%3A"
    "%22BY%22%7D%2C%22offset%22%3A0%2C%22count%22%3A24%2C%22outsideOffset%22%3A0%2C"
    "%22outsideSearch%22%3Afalse%2C%22isFalconDeliverySelectionEnabled%22%3Afalse%2C"
    "%22version%22%3Anull%7D"
)

INVENTORY_URL: str = _get_env("INVENTORY_URL", DEFAULT_INVENTORY_URL) or ""

# Site the browser-like Referer/Origin headers point at.
SITE_ORIGIN: str = _get_env("SITE_ORIGIN", "https://www.tesla.com") or ""

# ---- Notifications -----------------------------------------------------------

# ntfy topic URL. Messages are POSTed as text/plain.
NTFY_URL: str = _get_env("NTFY_URL", "https://ntfy.sh/tesla-alerts-23d47c8d601fc648fe171a2ddb60b0da") or ""

# Only listings strictly below this price are reported.
PRICE_LIMIT: float = _parse_float(_get_env("PRICE_LIMIT"), 28000.0)

# ---- Ledger ------------------------------------------------------------------

# JSON file mapping VIN -> last notified price.
SEEN_FILE: str = _get_env("SEEN_FILE", "seen.json") or "seen.json"

# Cap on remembered VINs; least recently updated are dropped first. 0 = unbounded.
LEDGER_MAX_ENTRIES: int = _parse_int(_get_env("LEDGER_MAX_ENTRIES"), 5000)

# ---- Loop & HTTP -------------------------------------------------------------

# Interval in minutes between inventory polls.
SCRAPE_INTERVAL_MINUTES: float = _parse_float(_get_env("SCRAPE_INTERVAL_MINUTES"), 10.0)

# Run a single cycle and exit (cron usage).
RUN_ONCE: bool = _parse_bool(_get_env("RUN_ONCE", "false"), False)

REQUEST_TIMEOUT_SECONDS: float = _parse_float(_get_env("REQUEST_TIMEOUT_SECONDS"), 30.0)
NOTIFY_TIMEOUT_SECONDS: float = _parse_float(_get_env("NOTIFY_TIMEOUT_SECONDS"), 10.0)

# Attempts for the inventory GET (transport errors and 5xx only). 1 disables retry.
FETCH_MAX_ATTEMPTS: int = max(1, _parse_int(_get_env("FETCH_MAX_ATTEMPTS"), 3))

# Logging level: DEBUG, INFO, WARNING, ERROR.
LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO") or "INFO"

# ---- Validation --------------------------------------------------------------

def validate() -> None:
    """Validate required configuration parameters."""
    if not INVENTORY_URL:
        raise RuntimeError("INVENTORY_URL must be set. See .env.example for details.")
    if not NTFY_URL:
        raise RuntimeError("NTFY_URL must be set. See .env.example for details.")
    if PRICE_LIMIT <= 0:
        raise RuntimeError(f"PRICE_LIMIT must be positive, got {PRICE_LIMIT}.")


__all__ = [
    "DEFAULT_INVENTORY_URL",
    "INVENTORY_URL",
    "SITE_ORIGIN",
    "NTFY_URL",
    "PRICE_LIMIT",
    "SEEN_FILE",
    "LEDGER_MAX_ENTRIES",
    "SCRAPE_INTERVAL_MINUTES",
    "RUN_ONCE",
    "REQUEST_TIMEOUT_SECONDS",
    "NOTIFY_TIMEOUT_SECONDS",
    "FETCH_MAX_ATTEMPTS",
    "LOG_LEVEL",
    "validate",
]
