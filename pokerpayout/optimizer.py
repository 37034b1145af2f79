"""
pokerpayout/optimizer.py
────────────────────────
Greedy minimum-transfer settlement.

• Players with a zero balance are dropped.
• Largest remaining debtor pays largest remaining creditor min(owe, need);
  whoever reaches zero leaves the table.  Every round retires at least one
  party, so N parties never need more than N-1 payments.
• All arithmetic is integer cents.
• A balance total inside the configured tolerance (but not zero) is
  absorbed by the bank party; outside it the input is rejected.
• The finished plan is re-checked by the validator before it is returned.
"""

from __future__ import annotations

import heapq
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from pokerpayout import config
from pokerpayout.errors import (
    EmptyInputError,
    ImbalancedInputError,
    IterationLimitError,
    ReservedPlayerError,
)
from pokerpayout.models import Payment, PlayerBalance, SettlementPlan
from pokerpayout.validator import ensure_valid, index_balances, resolve_tolerance

logger = logging.getLogger(__name__)

Party = Tuple[str, int]     # (player_id, magnitude in cents)


def check_balanced(
    balances: Sequence[PlayerBalance],
    tolerance_cents: Optional[int] = None,
) -> int:
    """Return the balance total, raising when it is outside the tolerance."""
    tolerance = resolve_tolerance(tolerance_cents)
    index_balances(balances)
    total = sum(b.net_balance for b in balances)
    if abs(total) > tolerance:
        raise ImbalancedInputError(total, tolerance, [b.player_id for b in balances])
    return total


def split_parties(
    balances: Iterable[PlayerBalance],
    residual_cents: int = 0,
    bank_id: Optional[str] = None,
) -> Tuple[List[Party], List[Party]]:
    """
    Partition into (debtors, creditors), both as positive magnitudes, sorted
    largest first with ties broken by player id.  A non-zero residual (the
    balance total) puts the bank on the side that cancels it; a real player
    already using the bank's id is then refused.
    """
    bank_id = bank_id or config.BANK_NAME
    debtors: List[Party] = []
    creditors: List[Party] = []
    for b in balances:
        if residual_cents and b.player_id == bank_id:
            raise ReservedPlayerError(bank_id)
        if b.net_balance < 0:
            debtors.append((b.player_id, -b.net_balance))
        elif b.net_balance > 0:
            creditors.append((b.player_id, b.net_balance))

    if residual_cents > 0:
        debtors.append((bank_id, residual_cents))
    elif residual_cents < 0:
        creditors.append((bank_id, -residual_cents))

    debtors.sort(key=lambda x: (-x[1], x[0]))
    creditors.sort(key=lambda x: (-x[1], x[0]))
    return debtors, creditors


def baseline_payment_count(balances: Iterable[PlayerBalance]) -> int:
    """Payments needed if every debtor paid every creditor directly."""
    debtors, creditors = split_parties(balances)
    return len(debtors) * len(creditors)


def greedy_payments(
    debtors: Sequence[Party],
    creditors: Sequence[Party],
    limit: Optional[int] = None,
) -> List[Payment]:
    if limit is None:
        limit = max(len(debtors) + len(creditors) - 1, 0)
    debt_heap = [(-owe, pid) for pid, owe in debtors]
    cred_heap = [(-need, pid) for pid, need in creditors]
    heapq.heapify(debt_heap)
    heapq.heapify(cred_heap)

    payments: List[Payment] = []
    while debt_heap and cred_heap:
        if len(payments) >= limit:
            raise IterationLimitError(limit)
        owe, debtor = heapq.heappop(debt_heap)
        need, creditor = heapq.heappop(cred_heap)
        owe, need = -owe, -need
        pay = min(owe, need)
        payments.append(Payment(debtor, creditor, pay))
        logger.debug("%s pays %s %d cents", debtor, creditor, pay)
        if owe > pay:
            heapq.heappush(debt_heap, (-(owe - pay), debtor))
        if need > pay:
            heapq.heappush(cred_heap, (-(need - pay), creditor))
    return payments


def compute_settlement(
    balances: Sequence[PlayerBalance],
    tolerance_cents: Optional[int] = None,
    allow_empty: bool = True,
) -> SettlementPlan:
    balances = list(balances)
    if not balances:
        if not allow_empty:
            raise EmptyInputError()
        return SettlementPlan(heuristic="greedy")

    residual = check_balanced(balances, tolerance_cents)
    if residual:
        logger.warning("Balances off by %+d cents; %s absorbs the residual",
                       residual, config.BANK_NAME)

    debtors, creditors = split_parties(balances, residual_cents=residual)
    payments = greedy_payments(debtors, creditors)
    plan = SettlementPlan(
        payments=tuple(payments),
        heuristic="greedy",
        baseline_count=len(debtors) * len(creditors),
    )
    ensure_valid(plan, balances, tolerance_cents=tolerance_cents)
    logger.info("Settled %d players with %d payments (%.1f%% fewer than %d)",
                len(balances), plan.payment_count, plan.reduction_pct, plan.baseline_count)
    return plan
