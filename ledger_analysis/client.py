"""Thin client for the dashboard's ledger REST endpoints.

Non-streaming ``GET`` requests against ``LEDGER_API_BASE_URL`` (bearer token
from ``LEDGER_API_TOKEN`` when set). Returns the parsed JSON body; turning it
into records and authoritative objects is :mod:`ledger_analysis.payloads`'s
job. Retries and caching are left to the caller.

Endpoints
---------
- customer: ``vendorCustomer/customer-ledger/{party_id}/{company_id}``
- vendor: ``vendorCustomer/vendor-ledger/{party_id}/{company_id}``
- general: ``ledger-report/ledger/{company_id}``
- account: ``account/ledger/{company_id}/{party_id}``
"""

from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from .config import get_api_base_url, get_api_timeout, get_api_token
from .logging_setup import get_logger
from .sources import get_source

_logger = get_logger("ledger_analysis.client")

_ENDPOINTS: dict[str, str] = {
    "customer": "vendorCustomer/customer-ledger/{party_id}/{company_id}",
    "vendor": "vendorCustomer/vendor-ledger/{party_id}/{company_id}",
    "general": "ledger-report/ledger/{company_id}",
    "account": "account/ledger/{company_id}/{party_id}",
}


class LedgerApiError(RuntimeError):
    """The ledger endpoint answered with an HTTP error or could not be reached."""

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


def ledger_url(
    source: str,
    *,
    company_id: str | int,
    party_id: str | int | None = None,
    base_url: str | None = None,
) -> str:
    """Build the endpoint URL for ``source``.

    Raises ``ValueError`` when the source needs a ``party_id`` and none is
    given.
    """

    name = get_source(source).name
    template = _ENDPOINTS[name]
    if "{party_id}" in template and party_id in (None, ""):
        raise ValueError(f"the {name} ledger needs a party id (customer/vendor/account id)")
    path = template.format(
        company_id=urllib.parse.quote(str(company_id), safe=""),
        party_id=urllib.parse.quote(str(party_id), safe=""),
    )
    return f"{get_api_base_url(base_url)}/{path}"


def fetch_ledger(
    source: str,
    *,
    company_id: str | int,
    party_id: str | int | None = None,
    base_url: str | None = None,
    token: str | None = None,
    timeout: float | None = None,
) -> Any:
    """Fetch a ledger response body and return the decoded JSON."""

    url = ledger_url(source, company_id=company_id, party_id=party_id, base_url=base_url)
    req = urllib.request.Request(url, method="GET")
    req.add_header("Accept", "application/json")
    bearer = get_api_token(token)
    if bearer:
        req.add_header("Authorization", f"Bearer {bearer}")

    _logger.info("Fetching %s ledger from %s", get_source(source).name, url)
    try:
        with urllib.request.urlopen(req, timeout=timeout or get_api_timeout()) as resp:
            body = resp.read()
    except urllib.error.HTTPError as e:
        try:
            err_body = e.read().decode("utf-8", errors="replace")
        except Exception:  # noqa: BLE001 - the status line is still worth reporting
            err_body = ""
        raise LedgerApiError(
            f"ledger API error: {e.code} {e.reason}: {err_body}", status=e.code, body=err_body
        ) from e
    except urllib.error.URLError as e:
        raise LedgerApiError(f"ledger API unreachable: {e.reason}") from e

    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to parse JSON from ledger API at {url}") from e


__all__ = ["LedgerApiError", "fetch_ledger", "ledger_url"]
