"""
pokerpayout/validator.py

Stand-alone check that a settlement plan really settles a list of balances.

• Works on any plan: ones the optimizer produced, alternative heuristics, or
  plans read back from a transactions CSV and edited by hand.
• For every party:  received - sent  must equal its net balance, to the cent.
• Parties that only show up in the plan are expected at 0, except the bank
  party, which is expected to absorb whatever the balances fail to net out
  as long as that residual is inside the tolerance.
• Read-only: never repairs the plan.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from pokerpayout import config
from pokerpayout.errors import DuplicatePlayerError, ValidationMismatchError
from pokerpayout.models import (
    AuditStep,
    Discrepancy,
    PlayerBalance,
    SettlementPlan,
    ValidationResult,
)

logger = logging.getLogger(__name__)


def resolve_tolerance(tolerance_cents: Optional[int] = None) -> int:
    tolerance = config.TOLERANCE_CENTS if tolerance_cents is None else tolerance_cents
    if tolerance < 0:
        raise ValueError("tolerance_cents must be >= 0")
    return tolerance


def index_balances(balances: Iterable[PlayerBalance]) -> Dict[str, PlayerBalance]:
    """Map player_id -> balance, keeping input order and refusing duplicates."""
    out: Dict[str, PlayerBalance] = {}
    for b in balances:
        if b.player_id in out:
            raise DuplicatePlayerError(b.player_id)
        out[b.player_id] = b
    return out


def validate_settlement(
    plan: SettlementPlan,
    balances: Iterable[PlayerBalance],
    bank_id: Optional[str] = None,
    tolerance_cents: Optional[int] = None,
) -> ValidationResult:
    bank_id = bank_id or config.BANK_NAME
    tolerance = resolve_tolerance(tolerance_cents)
    expected = {pid: b.net_balance for pid, b in index_balances(balances).items()}
    balance_total = sum(expected.values())

    # --- actual net flow per party --------------------------------------------
    flow: Dict[str, int] = defaultdict(int)
    total_debits = total_credits = 0
    for p in plan.payments:
        flow[p.from_player_id] -= p.amount_cents
        flow[p.to_player_id] += p.amount_cents
        total_debits += p.amount_cents
        total_credits += p.amount_cents

    # the bank only covers a residual the optimizer itself would accept
    bank_covers = (bank_id in flow and bank_id not in expected
                   and abs(balance_total) <= tolerance)
    steps: List[AuditStep] = []
    if bank_covers:
        expected[bank_id] = -balance_total
        steps.append(AuditStep(
            "player balances offset by bank residual", 0, balance_total + flow[bank_id]))
    else:
        steps.append(AuditStep("player balances sum to zero", 0, balance_total))
    steps.append(AuditStep("total debits equal total credits", total_debits, total_credits))

    # --- compare ----------------------------------------------------------------
    discrepancies: List[Discrepancy] = []
    parties = list(expected) + [pid for pid in flow if pid not in expected]
    for pid in parties:
        exp, act = expected.get(pid, 0), flow.get(pid, 0)
        steps.append(AuditStep(f"{pid} received minus sent", exp, act))
        if exp != act:
            discrepancies.append(Discrepancy(pid, exp, act))

    is_valid = not discrepancies and all(s.ok for s in steps)
    if not is_valid:
        logger.debug("Plan %s failed validation: %s", plan.heuristic, discrepancies)
    return ValidationResult(
        is_valid=is_valid,
        discrepancies=discrepancies,
        total_debits_cents=total_debits,
        total_credits_cents=total_credits,
        steps=steps,
    )


def ensure_valid(
    plan: SettlementPlan,
    balances: Iterable[PlayerBalance],
    bank_id: Optional[str] = None,
    tolerance_cents: Optional[int] = None,
) -> ValidationResult:
    result = validate_settlement(plan, balances, bank_id=bank_id,
                                 tolerance_cents=tolerance_cents)
    if not result.is_valid:
        raise ValidationMismatchError(result)
    return result
