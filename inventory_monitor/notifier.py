"""ntfy notifier.

Formats a listing into a short multi-line text message and POSTs it
once to an ntfy topic.  Delivery is best effort: failures are logged,
never raised, and never retried.
"""
from __future__ import annotations

import logging
from typing import Optional

import requests

from .config import NTFY_URL, NOTIFY_TIMEOUT_SECONDS
from .scraper import Listing
from .utils import get_http_session

logger = logging.getLogger(__name__)

RANGE_GROUP = "SPECS_RANGE"
TOWING_PRESENT = "✔️"
TOWING_ABSENT = "❌"
BOOST_BADGE = "🚀 Acceleration Boost"


def format_number_de(value: float, decimals: int = 0) -> str:
    """Format with German grouping: 28000 -> '28.000', 1234.5 (2) -> '1.234,50'."""
    s = f"{value:,.{decimals}f}"
    return s.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


def extract_range(listing: Listing) -> str:
    for opt in listing.options:
        if opt.group == RANGE_GROUP and opt.value:
            return f"{opt.value} km"
    return ""


def towing_indicator(listing: Listing) -> str:
    if any("TOWING" in a for a in listing.adl_opts):
        return TOWING_PRESENT
    return TOWING_ABSENT


def boost_badge(listing: Listing) -> str:
    if any("ACCELERATION_BOOST" in a for a in listing.adl_opts):
        return BOOST_BADGE
    return ""


def build_message(listing: Listing) -> str:
    lines = [
        f"🚗 {listing.model} ({listing.year}) in {listing.city}",
        f"💶 {format_number_de(listing.price)}€ • {format_number_de(listing.odometer)} km",
        f"🎨 {', '.join(listing.paint)}",
        f"🪑 {', '.join(listing.interior)}",
        f"🔋 {extract_range(listing)}",
        f"🧲 Towing: {towing_indicator(listing)} {boost_badge(listing)}",
    ]
    return "\n".join(lines)


def send_listing_alert(
    listing: Listing,
    url: Optional[str] = None,
    session: Optional[requests.Session] = None,
    timeout: float = NOTIFY_TIMEOUT_SECONDS,
) -> bool:
    """Post one listing alert. Returns True if the endpoint answered 2xx."""
    if url is None:
        url = NTFY_URL
    message = build_message(listing)
    logger.info("🔔 New car for ntfy:\n%s", message)

    if not url:
        logger.error("ntfy URL is not configured. Cannot send notification.")
        return False

    close_session = False
    if session is None:
        session = get_http_session()
        close_session = True

    try:
        resp = session.post(
            url,
            data=message.encode("utf-8"),
            headers={"Content-Type": "text/plain; charset=utf-8"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        logger.warning("Failed to post notification for %s: %s", listing.vin, e)
        return False
    finally:
        if close_session:
            session.close()

    if not 200 <= resp.status_code < 300:
        logger.warning("ntfy returned HTTP %s for %s", resp.status_code, listing.vin)
        return False
    return True


__all__ = [
    "format_number_de",
    "extract_range",
    "towing_indicator",
    "boost_badge",
    "build_message",
    "send_listing_alert",
]
