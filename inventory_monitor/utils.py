"""Helper utilities.

This module centralises common helper functions such as creating a
configured HTTP session and applying retry policies to network calls.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import requests
from requests import Response
from tenacity import (after_log, retry, retry_if_exception_type,
                      stop_after_attempt, wait_exponential)

from .config import FETCH_MAX_ATTEMPTS, SITE_ORIGIN


logger = logging.getLogger(__name__)


def browser_headers(origin: str = SITE_ORIGIN) -> dict:
    """Headers of a desktop browser; the inventory API rejects generic clients."""
    return {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "de-DE,de;q=0.9,en;q=0.8",
        "Referer": origin.rstrip("/") + "/",
        "Origin": origin.rstrip("/"),
    }


def get_http_session(origin: str = SITE_ORIGIN) -> requests.Session:
    """Return a new HTTP session that looks like a desktop browser.

    Caller is responsible for closing the session or letting it be
    garbage collected.
    """
    session = requests.Session()
    session.headers.update(browser_headers(origin))
    return session


class HTTPError(Exception):
    """Raised when an HTTP request fails after retries."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ServerError(HTTPError):
    """5xx response; worth another attempt."""


def _raise_for_status(resp: Response) -> None:
    try:
        resp.raise_for_status()
    except requests.RequestException as e:
        raise HTTPError(str(e), status_code=resp.status_code) from e


def retryable_request(method: Callable[..., Response]) -> Callable[..., Response]:
    """Decorator factory to apply retry logic to HTTP calls.

    The decorated function must accept a `requests.Session` as its first
    argument, followed by URL and optional kwargs, and return a
    `requests.Response`.  Retries are attempted for network errors and
    HTTP status >= 500, up to ``FETCH_MAX_ATTEMPTS`` attempts with
    exponential back-off between 1 and 10 seconds.  Client errors (4xx)
    are raised immediately as :class:`HTTPError`.
    """

    @retry(
        reraise=True,
        stop=stop_after_attempt(FETCH_MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=(
            retry_if_exception_type(requests.RequestException)
            | retry_if_exception_type(ServerError)
        ),
        after=after_log(logger, logging.WARNING),
    )
    def wrapper(session: requests.Session, url: str, **kwargs: Any) -> Response:
        response = method(session, url, **kwargs)
        # If server returned >= 500, raise to trigger retry
        if response.status_code >= 500:
            raise ServerError(
                f"Server returned status {response.status_code}",
                status_code=response.status_code,
            )
        _raise_for_status(response)
        return response

    return wrapper


__all__ = ["browser_headers", "get_http_session", "retryable_request", "HTTPError", "ServerError"]
