"""JSON-file persistence for the notification ledger.

The ledger maps a listing VIN to the last price we sent a notification
for.  It is a plain dict owned by the caller; this module only loads,
saves and updates it.  Dict order is "least recently updated first" and
is preserved in the file, which is what eviction relies on.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from .config import LEDGER_MAX_ENTRIES, SEEN_FILE

logger = logging.getLogger(__name__)

Ledger = Dict[str, float]


def _resolve(path: Optional[str | Path]) -> Path:
    return Path(path if path is not None else SEEN_FILE)


def _is_number(v: object) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _json_number(v: float) -> int | float:
    # 25000.0 -> 25000 so the file reads like the prices the API sends
    if isinstance(v, float) and v.is_integer():
        return int(v)
    return v


def load_ledger(path: Optional[str | Path] = None) -> Ledger:
    """Load the ledger; a missing or corrupt file means no prior history."""
    p = _resolve(path)
    if not p.exists():
        logger.info("No ledger at %s; starting fresh.", p)
        return {}
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        logger.warning("Failed to load ledger %s: %s. Starting fresh.", p, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Ledger %s is not a JSON object. Starting fresh.", p)
        return {}

    ledger: Ledger = {}
    for vin, price in data.items():
        if not _is_number(price):
            logger.warning("Dropping ledger entry %s with non-numeric price %r", vin, price)
            continue
        ledger[str(vin)] = price
    logger.info("Loaded %d ledger entries from %s", len(ledger), p)
    return ledger


def save_ledger(ledger: Mapping[str, float], path: Optional[str | Path] = None) -> bool:
    """Write the whole ledger, replacing the file. Returns False on I/O failure."""
    p = _resolve(path)
    tmp = p.with_name(p.name + ".tmp")
    payload = {vin: _json_number(price) for vin, price in ledger.items()}
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        os.replace(tmp, p)
    except OSError as e:
        logger.error("Failed to save ledger to %s: %s", p, e)
        return False
    logger.debug("Ledger saved to %s (%d entries)", p, len(payload))
    return True


def record_price(
    ledger: Ledger,
    vin: str,
    price: float,
    max_entries: int = LEDGER_MAX_ENTRIES,
) -> None:
    """Remember ``price`` for ``vin`` and evict the stalest entries past the cap."""
    ledger.pop(vin, None)
    ledger[vin] = price
    if max_entries > 0:
        while len(ledger) > max_entries:
            stale = next(iter(ledger))
            del ledger[stale]
            logger.debug("Evicted ledger entry %s", stale)


__all__ = ["Ledger", "load_ledger", "save_ledger", "record_price"]
