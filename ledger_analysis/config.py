"""Environment-driven settings.

Every setting is read at call time so tests (and long-running hosts) can
change the environment without reloading modules. Malformed values fall back
to the defaults below. The CLI loads a local ``.env`` before any of these are
consulted.

Variables
---------
- ``LEDGER_API_BASE_URL``: base URL of the dashboard REST API (required for
  remote fetches).
- ``LEDGER_API_TOKEN``: optional bearer token sent with API requests.
- ``LEDGER_API_TIMEOUT``: request timeout in seconds (default ``30``).
- ``LEDGER_SUMMARY_TOLERANCE``: allowed difference between authoritative and
  locally derived summary values (default ``0.01``).
- ``LEDGER_PAGE_SIZE``: default rows per page for projections (default ``10``).
- ``LEDGER_ANALYSIS_LOG_LEVEL``: package log level name or number (default
  ``INFO``).
"""

from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation

DEFAULT_API_TIMEOUT = 30.0
DEFAULT_SUMMARY_TOLERANCE = Decimal("0.01")
DEFAULT_PAGE_SIZE = 10
DEFAULT_LOG_LEVEL = "INFO"


def _env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def get_api_base_url(override: str | None = None) -> str:
    """Return the API base URL (without a trailing slash).

    Raises ``RuntimeError`` when neither ``override`` nor
    ``LEDGER_API_BASE_URL`` is set.
    """

    url = (override or "").strip() or _env("LEDGER_API_BASE_URL")
    if not url:
        raise RuntimeError("LEDGER_API_BASE_URL is not set; cannot fetch ledger data")
    return url.rstrip("/")


def get_api_token(override: str | None = None) -> str | None:
    return (override or "").strip() or _env("LEDGER_API_TOKEN")


def get_api_timeout() -> float:
    raw = _env("LEDGER_API_TIMEOUT")
    try:
        value = float(raw) if raw else DEFAULT_API_TIMEOUT
    except ValueError:
        return DEFAULT_API_TIMEOUT
    return value if value > 0 else DEFAULT_API_TIMEOUT


def get_summary_tolerance() -> Decimal:
    raw = _env("LEDGER_SUMMARY_TOLERANCE")
    if not raw:
        return DEFAULT_SUMMARY_TOLERANCE
    try:
        value = Decimal(raw)
    except InvalidOperation:
        return DEFAULT_SUMMARY_TOLERANCE
    if not value.is_finite() or value < 0:
        return DEFAULT_SUMMARY_TOLERANCE
    return value


def get_page_size() -> int:
    raw = _env("LEDGER_PAGE_SIZE")
    try:
        value = int(raw) if raw else DEFAULT_PAGE_SIZE
    except ValueError:
        return DEFAULT_PAGE_SIZE
    return value if value > 0 else DEFAULT_PAGE_SIZE


def get_log_level() -> str:
    """Return the configured level as an upper-case name or numeric string."""

    return (_env("LEDGER_ANALYSIS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()


__all__ = [
    "DEFAULT_API_TIMEOUT",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SUMMARY_TOLERANCE",
    "get_api_base_url",
    "get_api_timeout",
    "get_api_token",
    "get_log_level",
    "get_page_size",
    "get_summary_tolerance",
]
