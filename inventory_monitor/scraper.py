from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import requests

from .config import INVENTORY_URL, REQUEST_TIMEOUT_SECONDS
from .utils import HTTPError, get_http_session, retryable_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OptionRecord:
    code: str = ""
    group: str = ""
    value: str = ""
    name: str = ""


@dataclass(frozen=True)
class Listing:
    vin: str
    price: float = 0.0
    odometer: int = 0
    paint: tuple[str, ...] = ()
    interior: tuple[str, ...] = ()
    trim: tuple[str, ...] = ()
    model: str = ""
    city: str = ""
    year: int = 0
    options: tuple[OptionRecord, ...] = ()
    adl_opts: tuple[str, ...] = ()


@retryable_request
def _get(session: requests.Session, url: str, **kwargs: Any) -> requests.Response:
    """Thin wrapper around session.get with retry policy from utils.retryable_request."""
    return session.get(url, **kwargs)


# ---- Decoding helpers --------------------------------------------------------
# The upstream schema is not under our control; every helper falls back to
# the zero value instead of raising.

def _as_str(v: Any) -> str:
    if v is None or isinstance(v, (dict, list)):
        return ""
    return str(v)


def _as_float(v: Any) -> float:
    if isinstance(v, bool):
        return 0.0
    if isinstance(v, (int, float, str)):
        try:
            return float(v.strip() if isinstance(v, str) else v)
        except (ValueError, OverflowError):
            return 0.0
    return 0.0


def _as_int(v: Any) -> int:
    if isinstance(v, bool):
        return 0
    if isinstance(v, int):
        return v
    f = _as_float(v)
    # NaN and infinities have no integer value
    if f != f or f in (float("inf"), float("-inf")):
        return 0
    return int(f)


def _as_str_tuple(v: Any) -> tuple[str, ...]:
    if not isinstance(v, list):
        return ()
    return tuple(_as_str(x) for x in v if isinstance(x, (str, int, float)) and not isinstance(x, bool))


def _parse_options(v: Any) -> tuple[OptionRecord, ...]:
    if not isinstance(v, list):
        return ()
    out: list[OptionRecord] = []
    for o in v:
        if not isinstance(o, dict):
            continue
        out.append(
            OptionRecord(
                code=_as_str(o.get("code")),
                group=_as_str(o.get("group")),
                value=_as_str(o.get("value")),
                name=_as_str(o.get("name")),
            )
        )
    return tuple(out)


def parse_listing(item: dict) -> Listing:
    """Build a Listing from one upstream result; unknown keys are ignored."""
    return Listing(
        vin=_as_str(item.get("VIN")),
        price=_as_float(item.get("Price")),
        odometer=_as_int(item.get("Odometer")),
        paint=_as_str_tuple(item.get("PAINT")),
        interior=_as_str_tuple(item.get("INTERIOR")),
        trim=_as_str_tuple(item.get("TRIM")),
        model=_as_str(item.get("Model")),
        city=_as_str(item.get("City")),
        year=_as_int(item.get("Year")),
        options=_parse_options(item.get("OptionCodeData")),
        adl_opts=_as_str_tuple(item.get("ADL_OPTS")),
    )


def build_listings(payload: Any) -> List[Listing]:
    """Decode a parsed response body of the form ``{"results": [...]}``."""
    if not isinstance(payload, dict):
        logger.warning("Unexpected inventory payload type: %s", type(payload).__name__)
        return []
    results = payload.get("results")
    if results is None:
        return []
    if not isinstance(results, list):
        logger.warning("Inventory 'results' is %s, expected a list", type(results).__name__)
        return []

    listings: List[Listing] = []
    skipped = 0
    for item in results:
        if not isinstance(item, dict):
            skipped += 1
            continue
        listings.append(parse_listing(item))
    if skipped:
        logger.debug("Skipped %d non-object inventory results", skipped)
    return listings


def fetch_listings(
    url: str = INVENTORY_URL,
    session: Optional[requests.Session] = None,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> List[Listing]:
    """Fetch the inventory query once and return the decoded listings.

    Any failure (network, non-200 status, malformed JSON) is logged and
    yields an empty list; the next scheduled cycle is the retry.
    """
    close_session = False
    if session is None:
        session = get_http_session()
        close_session = True

    try:
        try:
            resp = _get(session, url, timeout=timeout)
        except (HTTPError, requests.RequestException) as e:
            logger.warning("Inventory request failed: %s", e)
            return []

        if resp.status_code != 200:
            logger.warning("Inventory request returned HTTP %s", resp.status_code)
            return []

        try:
            data = resp.json()
        except ValueError as e:
            logger.warning("Inventory JSON parse failed: %s", e)
            return []

        listings = build_listings(data)
        logger.info("Fetched %d listings", len(listings))
        return listings
    finally:
        if close_session:
            session.close()


__all__ = [
    "OptionRecord",
    "Listing",
    "parse_listing",
    "build_listings",
    "fetch_listings",
]
