from __future__ import annotations

import logging
import signal
import sys
import time
from pathlib import Path
from typing import Callable, List, Optional

from . import config, detector, ledger, notifier, scraper

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run_cycle(
    seen: ledger.Ledger,
    *,
    fetch: Optional[Callable[[], List[scraper.Listing]]] = None,
    notify: Optional[Callable[[scraper.Listing], object]] = None,
    price_limit: Optional[float] = None,
    max_entries: Optional[int] = None,
) -> List[scraper.Listing]:
    """Perform one fetch-and-notify cycle against ``seen`` (updated in place)."""
    if fetch is None:
        fetch = lambda: scraper.fetch_listings(config.INVENTORY_URL)
    if notify is None:
        notify = lambda listing: notifier.send_listing_alert(listing, url=config.NTFY_URL)

    limit = config.PRICE_LIMIT if price_limit is None else price_limit

    listings = fetch()
    if not listings:
        logger.info("No listings returned this cycle.")
        return []

    matched = detector.detect_changes(
        listings,
        seen,
        price_limit=limit,
        on_match=notify,
        max_entries=config.LEDGER_MAX_ENTRIES if max_entries is None else max_entries,
    )
    if matched:
        logger.info("Notified about %d of %d listings.", len(matched), len(listings))
    else:
        logger.info("No new or re-priced listings under %.0f among %d.", limit, len(listings))
    return matched


def run_forever(
    ledger_path: Optional[str | Path] = None,
    interval_minutes: Optional[float] = None,
    max_cycles: Optional[int] = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
    **cycle_kwargs,
) -> ledger.Ledger:
    """Load the ledger, then cycle -> save -> sleep until interrupted.

    ``max_cycles`` stops the loop after that many cycles (no trailing sleep).
    Returns the in-memory ledger when the loop ends.
    """
    if ledger_path is None:
        ledger_path = config.SEEN_FILE
    if interval_minutes is None:
        interval_minutes = config.SCRAPE_INTERVAL_MINUTES

    seen = ledger.load_ledger(ledger_path)
    cycles = 0
    try:
        while True:
            try:
                run_cycle(seen, **cycle_kwargs)
            except Exception:
                logger.exception("Unexpected error during inventory cycle.")
            ledger.save_ledger(seen, ledger_path)
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            logger.info("Sleeping for %s minutes before next poll.", interval_minutes)
            sleep(interval_minutes * 60)
    except KeyboardInterrupt:
        logger.info("Interrupted; saving ledger and stopping.")
        ledger.save_ledger(seen, ledger_path)
    return seen


def _handle_sigterm(signum, frame) -> None:
    raise KeyboardInterrupt


def main() -> int:
    """Validate configuration and run the monitoring loop."""
    config.validate()
    setup_logging()
    signal.signal(signal.SIGTERM, _handle_sigterm)

    logger.info(
        "Starting inventory monitor (limit=%.0f, interval=%s min, ledger=%s).",
        config.PRICE_LIMIT,
        config.SCRAPE_INTERVAL_MINUTES,
        config.SEEN_FILE,
    )
    run_forever(max_cycles=1 if config.RUN_ONCE else None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
