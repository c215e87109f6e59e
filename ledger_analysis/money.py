"""Decimal helpers: amount coercion and presentation-time rounding.

All ledger arithmetic runs on unrounded :class:`~decimal.Decimal` values.
Rounding to currency scale happens only in :func:`quantize_currency` and the
formatting helpers, which are meant for rendering.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")

_CURRENCY_MARKS = ("$", "₹", "€", "£", "KWD", "INR", "SAR", "AED")


def to_decimal(raw: Any, *, default: Decimal | None = ZERO) -> Decimal:
    """Coerce an upstream amount to ``Decimal``.

    ``None`` and blank strings map to ``default`` (``0`` unless overridden).
    Strings may carry a leading sign, a currency mark, thousands separators,
    or accounting parentheses. Floats go through ``str`` so ``0.1`` stays
    ``Decimal("0.1")``. Booleans, NaN and infinities are rejected.

    Raises ``ValueError`` when the value cannot be read as a finite number, or
    when it is missing and ``default`` is ``None``.
    """

    if raw is None:
        if default is None:
            raise ValueError("amount is required")
        return default
    if isinstance(raw, bool):
        raise ValueError(f"invalid amount: {raw!r}")
    if isinstance(raw, Decimal):
        d = raw
    elif isinstance(raw, int):
        d = Decimal(raw)
    elif isinstance(raw, float):
        d = Decimal(str(raw))
    elif isinstance(raw, str):
        d = _parse_amount_text(raw, default=default)
    else:
        raise ValueError(f"invalid amount: {raw!r}")

    if not d.is_finite():
        raise ValueError(f"invalid amount: {raw!r}")
    return d


def _parse_amount_text(raw: str, *, default: Decimal | None) -> Decimal:
    s = raw.strip()
    if not s:
        if default is None:
            raise ValueError("amount is empty")
        return default

    negative = False
    # Strip sign, currency marks, and surrounding parentheses until stable so
    # orderings like "-(₹1,234.56)" and "($ 12)" both parse.
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        for mark in _CURRENCY_MARKS:
            if s.upper().startswith(mark):
                s = s[len(mark) :].lstrip()
                changed = True
                break
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = s.replace(",", "").strip()
    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    return -d if negative else d


def quantize_currency(value: Decimal) -> Decimal:
    """Round to two decimal places (half-up) for display."""

    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Format with thousands separators and exactly two decimals."""

    return f"{quantize_currency(value):,.2f}"


def format_balance(value: Decimal) -> str:
    """Render a signed balance as ``"13,500.00 Dr"`` / ``"250.00 Cr"``."""

    side = "Dr" if value >= 0 else "Cr"
    return f"{format_amount(abs(value))} {side}"


__all__ = [
    "CENT",
    "ZERO",
    "format_amount",
    "format_balance",
    "quantize_currency",
    "to_decimal",
]
