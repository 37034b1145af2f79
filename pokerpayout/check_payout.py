#!/usr/bin/env python3
"""
check_payout.py   –   Stand-alone validator

• Load one or more ledger CSVs (the same format you feed to payout-settle).
• Ignore rows whose Voided? == "Yes".
• Collapse duplicate names into a single net balance.
• Load the transactions CSV that payout-settle produced (or one edited by
  hand).
• Make sure every player (and BANK) balances to $0.

Run:

    payout-check --ledgers "Ledger Data/T1.csv" "Ledger Data/T2.csv" \
                 --payout  "Transactions/T1_transactions.csv"
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

import pandas as pd

from pokerpayout import config
from pokerpayout.errors import LedgerFormatError, SettlementError
from pokerpayout.ledger import balances_from_ledger, canonical_id, read_ledger_csv
from pokerpayout.models import Payment, SettlementPlan, ValidationResult
from pokerpayout.money import money_str, to_cents
from pokerpayout.payout_system import cents_arg
from pokerpayout.validator import validate_settlement

logger = logging.getLogger(__name__)


def _party(row, id_col: str, name_col: str) -> str:
    raw = row.get(id_col)
    if raw is not None and not pd.isna(raw) and str(raw).strip():
        return str(raw).strip()
    name = str(row[name_col]).strip()
    return name if name == config.BANK_NAME else canonical_id(name)


def read_payout_csv(path) -> SettlementPlan:
    df = pd.read_csv(path, dtype=str)
    for col in ("From", "To", "Amount"):
        if col not in df.columns:
            raise LedgerFormatError(f"payout file is missing {col!r}", column=col)

    payments: List[Payment] = []
    for idx, r in df.iterrows():
        try:
            cents = to_cents(r["Amount"])
            if cents == 0:
                continue
            payments.append(Payment(_party(r, "From ID", "From"), _party(r, "To ID", "To"), cents))
        except ValueError as exc:
            raise LedgerFormatError(str(exc), row=idx) from None
    return SettlementPlan(payments=tuple(payments), heuristic=Path(path).stem)


def check_payout(ledger_paths, payout_path, tolerance_cents=None) -> ValidationResult:
    entries = []
    for fp in map(Path, ledger_paths):
        entries.extend(read_ledger_csv(fp))
    balances = balances_from_ledger(entries)
    plan = read_payout_csv(payout_path)
    return validate_settlement(plan, balances, tolerance_cents=tolerance_cents)


def main(argv=None) -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--ledgers", nargs="+", required=True, help="One or more ledger CSVs")
    ap.add_argument("--payout", required=True, help="CSV produced by payout-settle")
    ap.add_argument("--tolerance", type=cents_arg, default=None,
                    help="Cents the ledgers may be off by; BANK must cover the rest")
    args = ap.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    for fp in map(Path, args.ledgers):
        if not fp.exists():
            sys.exit(f"ledger not found: {fp}")
    pay = Path(args.payout)
    if not pay.exists():
        sys.exit(f"payout file not found: {pay}")

    try:
        result = check_payout(args.ledgers, pay, args.tolerance)
    except SettlementError as exc:
        sys.exit(f"✗ {exc}")

    if not result.is_valid:
        print("⚠️  mismatches:\n")
        for d in sorted(result.discrepancies, key=lambda d: d.player_id):
            print(f"{d.player_id:<20}  expected {money_str(d.expected_cents):>10}   "
                  f"payout net {money_str(d.actual_cents):>10}   → diff {money_str(d.difference)}")
        sys.exit(1)
    print(f"✅  every player (and {config.BANK_NAME}) is fully settled "
          f"({money_str(result.total_debits_cents)} moved).")


if __name__ == "__main__":
    main()
