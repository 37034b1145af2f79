#!/usr/bin/env python3
"""
pokerpayout/payout_system.py

Reads a poker ledger CSV (buy-ins, cash-outs, chips on the table), works out
who owes money and who is owed, then writes the smallest set of peer-to-peer
transfers that settles everyone.

• Amounts are converted to cents once, on the way in.
• --heuristic picks the plan to write (greedy by default, or "recommended"
  to let the comparison choose); --compare prints every candidate.
• Output: Transactions/{ledger stem}_transactions.csv next to the ledger
  folder, unless --out is given.

Run:

    payout-settle --csv "Ledger Data/6_25_25.csv" --compare
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

from pokerpayout import config
from pokerpayout.alternatives import HEURISTICS, compare_plans
from pokerpayout.errors import EmptyInputError, SettlementError
from pokerpayout.ledger import balances_from_ledger, bank_balance, read_ledger_csv
from pokerpayout.money import money_str
from pokerpayout.optimizer import compute_settlement

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = ["From ID", "From", "To ID", "To", "Amount"]


def cents_arg(value: str) -> int:
    """argparse type for a non-negative whole number of cents."""
    try:
        cents = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a whole number of cents: {value!r}") from None
    if cents < 0:
        raise argparse.ArgumentTypeError(f"tolerance must be >= 0, got {cents}")
    return cents


def default_output(ledger: Path) -> Path:
    project_root = ledger.resolve().parent.parent
    return project_root / "Transactions" / f"{ledger.stem}_transactions.csv"


def settle_transactions(csv_path, out_path=None, heuristic="greedy",
                        compare=False, tolerance_cents=None) -> Path:
    ledger = Path(csv_path).expanduser()
    entries = read_ledger_csv(ledger)
    balances = balances_from_ledger(entries)
    if not balances:
        raise EmptyInputError(f"no players in {ledger}")

    bank = bank_balance(entries)
    if not bank.is_balanced:
        logger.warning("Ledger off by %s (cash-outs + chips - buy-ins)",
                       money_str(bank.discrepancy))

    names = {b.player_id: b.name for b in balances}
    names.setdefault(config.BANK_NAME, config.BANK_NAME)

    if compare or heuristic == "recommended":
        comparison = compare_plans(balances, tolerance_cents=tolerance_cents)
        if compare:
            print(comparison.to_frame().to_string(index=False))
        chosen = comparison.recommended if heuristic == "recommended" else comparison.get(heuristic)
        if chosen is None:
            raise SettlementError(f"heuristic {heuristic!r} did not produce a valid plan")
        plan = chosen.plan
    elif heuristic == "greedy":
        plan = compute_settlement(balances, tolerance_cents=tolerance_cents)
    else:
        plan = HEURISTICS[heuristic](balances, tolerance_cents=tolerance_cents)

    out = Path(out_path).expanduser() if out_path else default_output(ledger)
    out.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(plan.to_records(names), columns=OUTPUT_COLUMNS).to_csv(out, index=False)

    print(f"✅  Wrote {out} ({plan.payment_count} transfers via {plan.heuristic}, "
          f"{plan.reduction_pct:.0f}% fewer than {plan.baseline_count} direct)")
    return out


def main(argv=None) -> None:
    p = argparse.ArgumentParser(
        description="Poker Ledger Payout System — settle all debts with minimal transfers"
    )
    p.add_argument("--csv", required=True,
                   help="Path to your ledger CSV (e.g. \"Ledger Data/6_25_25.csv\")")
    p.add_argument("--out", help="Where to write the transactions CSV")
    p.add_argument("--heuristic", default="greedy",
                   choices=sorted(HEURISTICS) + ["recommended"],
                   help="Which plan to write")
    p.add_argument("--compare", action="store_true",
                   help="Print every candidate plan with its score")
    p.add_argument("--tolerance", type=cents_arg, default=None,
                   help="Cents the ledger may be off by; the bank absorbs the rest")
    p.add_argument("--verbose", action="store_true")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format=config.LOG_FORMAT,
    )

    ledger = Path(args.csv).expanduser()
    if not ledger.exists():
        sys.exit(f"Ledger not found: {ledger}")
    try:
        settle_transactions(ledger, args.out, args.heuristic, args.compare, args.tolerance)
    except SettlementError as exc:
        sys.exit(f"✗ {exc}")


if __name__ == "__main__":
    main()
