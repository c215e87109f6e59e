# ruff: noqa: I001
"""CLI for the ``ledger_analysis`` package.

This module exposes callable command handlers (``cmd_statement``,
``cmd_summary``, ``cmd_counts``) and a Typer-based console interface on top
of them. Environment variables (``LEDGER_API_BASE_URL``, ``LEDGER_API_TOKEN``
and friends) are loaded from a local ``.env`` using ``python-dotenv`` before
any command runs. Ledger logic lives in :mod:`ledger_analysis.ledger`.

Input is either a JSON file holding a ledger endpoint's response body
(``--input``) or a live fetch from the dashboard API (``--company-id`` plus
``--party-id`` for customer, vendor and account ledgers).
"""

from __future__ import annotations

import json
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .config import get_page_size
from .ledger import LedgerView, build_ledger
from .logging_setup import configure_logging
from .models import AnnotatedTransaction, FilterCriteria, Page
from .money import format_amount, format_balance, quantize_currency, to_decimal


# ---- Small module-level helpers used by CLI commands -------------------------


def _load_view(
    *,
    source: str,
    input_path: str | None,
    company_id: str | None,
    party_id: str | None,
    opening_balance: str | None,
) -> LedgerView:
    """Load a ledger response (file or API) and build the full view.

    An explicit ``opening_balance`` overrides any seed carried by the payload.
    """

    from .client import fetch_ledger
    from .payloads import extract_payload, load_payload_file

    if input_path:
        payload = load_payload_file(input_path, source=source)
    elif company_id:
        payload = extract_payload(
            fetch_ledger(source, company_id=company_id, party_id=party_id), source=source
        )
    else:
        raise ValueError("provide --input PATH or --company-id to load a ledger")

    seed = payload.opening_balance
    if opening_balance is not None and opening_balance.strip():
        seed = to_decimal(opening_balance, default=None)

    return build_ledger(
        payload.records,
        source=payload.source,
        opening_balance=seed,
        authoritative_summary=payload.authoritative_summary,
        authoritative_counts=payload.authoritative_counts,
    )


def _report_warnings(view: LedgerView) -> None:
    for w in view.warnings:
        print(f"Warning: {w.message}", file=sys.stderr)


def _row_json(row: AnnotatedTransaction) -> dict[str, Any]:
    return {
        "id": row.id,
        "date": row.date.isoformat(),
        "voucher_no": row.voucher_no,
        "voucher_type": row.voucher_type,
        "particulars": row.particulars,
        "narration": row.narration,
        "debit": str(quantize_currency(row.debit)),
        "credit": str(quantize_currency(row.credit)),
        "running_balance": str(quantize_currency(row.running_balance)),
        "balance_type": row.balance_type,
    }


def _print_summary_lines(view: LedgerView) -> None:
    s = view.summary
    print(f"Opening balance: {format_balance(s.opening_balance)}")
    print(f"Total debit:     {format_amount(s.total_debit)}")
    print(f"Total credit:    {format_amount(s.total_credit)}")
    print(f"Closing balance: {format_balance(s.closing_balance)}")


def _as_date(value: datetime | None) -> date | None:
    return value.date() if value is not None else None


# ---- Command handlers ----------------------------------------------------------


def cmd_statement(
    *,
    source: str = "customer",
    input_path: str | None = None,
    company_id: str | None = None,
    party_id: str | None = None,
    opening_balance: str | None = None,
    criteria: FilterCriteria | None = None,
    page_number: int = 1,
    page_size: int | None = None,
    as_json: bool = False,
) -> int:
    """Print the filtered, paginated ledger rows followed by the summary.

    ``page_number`` is 1-based. Errors are written to stderr and the function
    returns ``1``; on success it returns ``0``.
    """

    try:
        view = _load_view(
            source=source,
            input_path=input_path,
            company_id=company_id,
            party_id=party_id,
            opening_balance=opening_balance,
        )
        page = Page(index=max(page_number, 1) - 1, size=page_size or get_page_size())
    except FileNotFoundError:
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {input_path}", file=sys.stderr)
        return 1
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    projection = view.project(criteria, page)
    _report_warnings(view)

    if as_json:
        out = {
            "source": view.source,
            "rows": [_row_json(r) for r in projection.rows],
            "total_matched": projection.total_matched,
            "page": page.index + 1,
            "page_count": projection.page_count,
            "summary": view.summary.as_dict(),
            "skipped": view.skipped_count,
        }
        print(json.dumps(out, indent=2))
        return 0

    header = f"{'Date':<10}  {'Vch No':<10}  {'Vch Type':<16}  {'Particulars':<28}"
    print(f"{header}  {'Debit':>14}  {'Credit':>14}  {'Balance':>17}")
    for r in projection.rows:
        print(
            f"{r.date.isoformat():<10}  {r.voucher_no[:10]:<10}  {r.voucher_type[:16]:<16}  "
            f"{(r.particulars or '')[:28]:<28}  {format_amount(r.debit):>14}  "
            f"{format_amount(r.credit):>14}  {r.balance_display:>17}"
        )
    if projection.rows:
        first = page.start + 1
        last = page.start + len(projection.rows)
        print(
            f"Showing {first}-{last} of {projection.total_matched} "
            f"(page {page.index + 1}/{projection.page_count})"
        )
    else:
        print(f"No matching transactions ({projection.total_matched} matched).")
    print()
    _print_summary_lines(view)
    return 0


def cmd_summary(
    *,
    source: str = "customer",
    input_path: str | None = None,
    company_id: str | None = None,
    party_id: str | None = None,
    opening_balance: str | None = None,
    as_json: bool = False,
) -> int:
    """Print the reconciled ledger summary and any authoritative/local mismatches."""

    try:
        view = _load_view(
            source=source,
            input_path=input_path,
            company_id=company_id,
            party_id=party_id,
            opening_balance=opening_balance,
        )
    except FileNotFoundError:
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {input_path}", file=sys.stderr)
        return 1
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _report_warnings(view)
    if as_json:
        print(json.dumps(view.summary.as_dict(), indent=2))
        return 0

    _print_summary_lines(view)
    for d in view.summary.discrepancies:
        print(
            f"Mismatch: {d.field} authoritative={format_amount(d.authoritative)} "
            f"computed={format_amount(d.local)}"
        )
    return 0


def cmd_counts(
    *,
    source: str = "customer",
    input_path: str | None = None,
    company_id: str | None = None,
    party_id: str | None = None,
    as_json: bool = False,
) -> int:
    """Print the voucher-type count table."""

    try:
        view = _load_view(
            source=source,
            input_path=input_path,
            company_id=company_id,
            party_id=party_id,
            opening_balance=None,
        )
    except FileNotFoundError:
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {input_path}", file=sys.stderr)
        return 1
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    counts = view.counts
    if as_json:
        print(
            json.dumps(
                {"counts": dict(counts.counts), "total": counts.total, "source": counts.source},
                indent=2,
            )
        )
        return 0

    for label, n in counts.counts.items():
        print(f"{label:<24}{n:>6}")
    print(f"{'Total Transactions':<24}{counts.total:>6}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Compute running balances, reconciled summaries and voucher counts for "
        "customer, vendor, general and account ledgers."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer inspects these when used in ``Annotated`` below.
SOURCE_OPTION: OptionInfo = typer.Option(
    "--source", "-s", help="Ledger source: customer, vendor, general or account."
)
INPUT_OPTION: OptionInfo = typer.Option(
    "--input",
    "-i",
    help="JSON file holding a ledger endpoint response body.",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
COMPANY_OPTION: OptionInfo = typer.Option(
    "--company-id", help="Company id for a live API fetch (uses LEDGER_API_BASE_URL)."
)
PARTY_OPTION: OptionInfo = typer.Option(
    "--party-id", help="Customer, vendor or account id for a live API fetch."
)
OPENING_OPTION: OptionInfo = typer.Option(
    "--opening-balance", help="Opening balance seed (signed; negative is Cr)."
)
JSON_OPTION: OptionInfo = typer.Option("--json", help="Emit JSON instead of a table.")


@app.command("statement")
def statement_cmd(
    source: Annotated[str, SOURCE_OPTION] = "customer",
    input_path: Annotated[Path | None, INPUT_OPTION] = None,
    company_id: Annotated[str | None, COMPANY_OPTION] = None,
    party_id: Annotated[str | None, PARTY_OPTION] = None,
    opening_balance: Annotated[str | None, OPENING_OPTION] = None,
    from_date: Annotated[
        datetime | None, typer.Option("--from", formats=["%Y-%m-%d"], help="From date.")
    ] = None,
    to_date: Annotated[
        datetime | None,
        typer.Option("--to", formats=["%Y-%m-%d"], help="To date (whole day included)."),
    ] = None,
    voucher_type: Annotated[str | None, typer.Option("--voucher-type")] = None,
    voucher_no: Annotated[str | None, typer.Option("--voucher-no")] = None,
    search: Annotated[
        str | None, typer.Option("--search", help="Match voucher no, party or type.")
    ] = None,
    balance_type: Annotated[
        str | None, typer.Option("--balance-type", help="Dr, Cr or all.")
    ] = None,
    page: Annotated[int, typer.Option("--page", min=1, help="1-based page number.")] = 1,
    page_size: Annotated[
        int | None, typer.Option("--page-size", min=1, help="Rows per page (LEDGER_PAGE_SIZE).")
    ] = None,
    as_json: Annotated[bool, JSON_OPTION] = False,
) -> None:
    """Show ledger rows with running balances, then the reconciled summary."""

    criteria = FilterCriteria(
        from_date=_as_date(from_date),
        to_date=_as_date(to_date),
        voucher_type=voucher_type,
        voucher_no=voucher_no,
        free_text=search,
        balance_type=balance_type,
    )
    code = cmd_statement(
        source=source,
        input_path=str(input_path) if input_path else None,
        company_id=company_id,
        party_id=party_id,
        opening_balance=opening_balance,
        criteria=criteria,
        page_number=page,
        page_size=page_size,
        as_json=as_json,
    )
    raise typer.Exit(code)


@app.command("summary")
def summary_cmd(
    source: Annotated[str, SOURCE_OPTION] = "customer",
    input_path: Annotated[Path | None, INPUT_OPTION] = None,
    company_id: Annotated[str | None, COMPANY_OPTION] = None,
    party_id: Annotated[str | None, PARTY_OPTION] = None,
    opening_balance: Annotated[str | None, OPENING_OPTION] = None,
    as_json: Annotated[bool, JSON_OPTION] = False,
) -> None:
    """Show total debit/credit and opening/closing balances."""

    code = cmd_summary(
        source=source,
        input_path=str(input_path) if input_path else None,
        company_id=company_id,
        party_id=party_id,
        opening_balance=opening_balance,
        as_json=as_json,
    )
    raise typer.Exit(code)


@app.command("counts")
def counts_cmd(
    source: Annotated[str, SOURCE_OPTION] = "customer",
    input_path: Annotated[Path | None, INPUT_OPTION] = None,
    company_id: Annotated[str | None, COMPANY_OPTION] = None,
    party_id: Annotated[str | None, PARTY_OPTION] = None,
    as_json: Annotated[bool, JSON_OPTION] = False,
) -> None:
    """Show how many transactions each voucher type has."""

    code = cmd_counts(
        source=source,
        input_path=str(input_path) if input_path else None,
        company_id=company_id,
        party_id=party_id,
        as_json=as_json,
    )
    raise typer.Exit(code)


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()


if __name__ == "__main__":  # pragma: no cover - exercised via the console script
    # Running as a module: `python -m ledger_analysis.cli`
    app()
