"""Decide which listings are worth a notification."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Mapping, Optional

from .config import LEDGER_MAX_ENTRIES, PRICE_LIMIT
from .ledger import Ledger, record_price
from .scraper import Listing

logger = logging.getLogger(__name__)


def should_notify(listing: Listing, ledger: Mapping[str, float], price_limit: float = PRICE_LIMIT) -> bool:
    """True for a listing under the ceiling that is unseen or re-priced."""
    if not listing.price < price_limit:
        return False
    if listing.vin not in ledger:
        return True
    return ledger[listing.vin] != listing.price


def detect_changes(
    listings: Iterable[Listing],
    ledger: Ledger,
    price_limit: float = PRICE_LIMIT,
    on_match: Optional[Callable[[Listing], object]] = None,
    max_entries: int = LEDGER_MAX_ENTRIES,
) -> List[Listing]:
    """Run detection over a batch, in order, updating ``ledger`` as it goes.

    ``on_match`` runs before the ledger is updated.  A VIN repeated later in
    the same batch is compared against the price just recorded, so it is
    reported at most once per distinct price.
    """
    matched: List[Listing] = []
    for listing in listings:
        if not should_notify(listing, ledger, price_limit):
            continue
        previous = ledger.get(listing.vin)
        if previous is None:
            logger.info("New listing %s at %.0f", listing.vin, listing.price)
        else:
            logger.info("Price change for %s: %.0f -> %.0f", listing.vin, previous, listing.price)
        if on_match is not None:
            on_match(listing)
        record_price(ledger, listing.vin, listing.price, max_entries)
        matched.append(listing)
    return matched


__all__ = ["should_notify", "detect_changes"]
