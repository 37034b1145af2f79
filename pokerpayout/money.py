"""
pokerpayout/money.py

Money conversion at the edges of the system.  Everything inside the package
works in integer cents; ledger and payout CSVs carry dollar strings such as
"$1,234.50".
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, getcontext

import pandas as pd

getcontext().prec = 28
CENT = Decimal("0.01")


def parse_money(x) -> Decimal:
    if x is None or (not isinstance(x, str) and pd.isna(x)):
        return Decimal("0")
    if isinstance(x, Decimal):
        d = x
    else:
        d = _decimal(x)
    if not d.is_finite():
        raise ValueError(f"not a money amount: {x!r}")
    return d


def _decimal(x) -> Decimal:
    s = str(x).replace("$", "").replace(",", "").strip()
    if not s:
        return Decimal("0")
    try:
        return Decimal(s)
    except InvalidOperation:
        raise ValueError(f"not a money amount: {x!r}") from None


def to_cents(x) -> int:
    """Convert a money value to whole cents, refusing fractional cents."""
    if isinstance(x, int) and not isinstance(x, bool):
        return x * 100
    amount = parse_money(x) * 100
    if amount != amount.to_integral_value():
        raise ValueError(f"fractional cents in {x!r}")
    return int(amount)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def money_str(cents: int) -> str:
    return f"{from_cents(cents)}"
