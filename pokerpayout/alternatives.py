"""
pokerpayout/alternatives.py
───────────────────────────
Generate several candidate settlement plans, score them and recommend one.

Heuristics (all take the same balances and return a SettlementPlan):
  greedy  largest debtor pays largest creditor (see optimizer.py)
  flow    min-cost flow on the debtor → creditor graph (networkx simplex)
  hub     everybody settles with one hub player
  direct  every debtor pays every creditor pro rata, no netting

Scores are a weighted mean of three metrics in [0, 1]:
  transactions  fewest payments among the candidates / this plan's payments
  fairness      1 / (1 + cv²) of the payment sizes
  simplicity    1 / most payments any one party has to deal with
"""

from __future__ import annotations

import logging
import statistics
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import networkx as nx
import pandas as pd

from pokerpayout import config
from pokerpayout.errors import SettlementError
from pokerpayout.models import Payment, PlayerBalance, SettlementPlan, ValidationResult
from pokerpayout.optimizer import check_balanced, compute_settlement, split_parties
from pokerpayout.validator import validate_settlement

logger = logging.getLogger(__name__)


# ───────────────────────── heuristics ───────────────────────────────────────
def _parties(balances, tolerance_cents):
    residual = check_balanced(balances, tolerance_cents)
    return split_parties(balances, residual_cents=residual)


def _plan(payments: List[Payment], name: str, debtors, creditors) -> SettlementPlan:
    return SettlementPlan(
        payments=tuple(payments),
        heuristic=name,
        baseline_count=len(debtors) * len(creditors),
    )


def greedy_settlement(balances: Sequence[PlayerBalance],
                      tolerance_cents: Optional[int] = None) -> SettlementPlan:
    return compute_settlement(balances, tolerance_cents=tolerance_cents)


def flow_settlement(balances: Sequence[PlayerBalance],
                    tolerance_cents: Optional[int] = None) -> SettlementPlan:
    debtors, creditors = _parties(list(balances), tolerance_cents)
    if not debtors:
        return _plan([], "flow", debtors, creditors)

    # cents-based network so every flow is a whole number of cents
    G = nx.DiGraph()
    for pid, owe in debtors:
        G.add_node(pid, demand=-owe)
    for pid, need in creditors:
        G.add_node(pid, demand=need)
    cap = sum(owe for _, owe in debtors)
    for d, _ in debtors:
        for c, _ in creditors:
            G.add_edge(d, c, weight=1, capacity=cap)

    _, flow = nx.network_simplex(G)

    payments = []
    for d, _ in debtors:
        for c, _ in creditors:
            cents = flow[d].get(c, 0)
            if cents > 0:
                payments.append(Payment(d, c, int(cents)))
    return _plan(payments, "flow", debtors, creditors)


def hub_settlement(balances: Sequence[PlayerBalance],
                   tolerance_cents: Optional[int] = None,
                   hub_id: Optional[str] = None) -> SettlementPlan:
    """
    Route everything through one hub.  Without a designated hub_id the
    non-zero party whose balance is closest to zero is used.
    """
    balances = list(balances)
    debtors, creditors = _parties(balances, tolerance_cents)
    signed = [(pid, -owe) for pid, owe in debtors] + list(creditors)
    if not signed:
        return _plan([], "hub", debtors, creditors)

    if hub_id is None:
        hub_id = min(signed, key=lambda x: (abs(x[1]), x[0]))[0]
    elif hub_id not in {b.player_id for b in balances} | {pid for pid, _ in signed}:
        raise ValueError(f"unknown hub player {hub_id!r}")

    payments = []
    for pid, bal in signed:
        if pid == hub_id:
            continue
        if bal < 0:
            payments.append(Payment(pid, hub_id, -bal))
        else:
            payments.append(Payment(hub_id, pid, bal))
    return _plan(payments, "hub", debtors, creditors)


def direct_settlement(balances: Sequence[PlayerBalance],
                      tolerance_cents: Optional[int] = None) -> SettlementPlan:
    """
    Every debtor pays every creditor in proportion to what the creditor is
    still owed.  Shares are whole cents (largest remainder), so creditors are
    paid off exactly once the last debtor has paid.
    """
    debtors, creditors = _parties(list(balances), tolerance_cents)
    remaining: Dict[str, int] = dict(creditors)
    payments = []
    for debtor, owe in debtors:
        pool = sum(remaining.values())
        shares = []
        for creditor, need in remaining.items():
            q, r = divmod(owe * need, pool)
            shares.append([creditor, q, r])
        short = owe - sum(s[1] for s in shares)
        for s in sorted(shares, key=lambda s: (-s[2], s[0]))[:short]:
            s[1] += 1
        for creditor, amt, _ in shares:
            if amt:
                payments.append(Payment(debtor, creditor, amt))
                remaining[creditor] -= amt
        remaining = {c: n for c, n in remaining.items() if n}
    return _plan(payments, "direct", debtors, creditors)


Heuristic = Callable[..., SettlementPlan]

HEURISTICS: Dict[str, Heuristic] = {
    "greedy": greedy_settlement,
    "flow": flow_settlement,
    "hub": hub_settlement,
    "direct": direct_settlement,
}


# ───────────────────────── scoring ──────────────────────────────────────────
@dataclass(frozen=True)
class ScoringWeights:
    transactions: float = config.WEIGHT_TRANSACTIONS
    fairness: float = config.WEIGHT_FAIRNESS
    simplicity: float = config.WEIGHT_SIMPLICITY

    def __post_init__(self) -> None:
        values = (self.transactions, self.fairness, self.simplicity)
        if min(values) < 0:
            raise ValueError("scoring weights must be >= 0")
        if sum(values) == 0:
            raise ValueError("at least one scoring weight must be positive")


def plan_metrics(plan: SettlementPlan, best_count: int) -> Dict[str, float]:
    if not plan.payments:
        return {"transactions": 1.0, "fairness": 1.0, "simplicity": 1.0}

    amounts = [p.amount_cents for p in plan.payments]
    mean = statistics.fmean(amounts)
    cv2 = statistics.pvariance(amounts) / (mean * mean)

    involvement = Counter()
    for p in plan.payments:
        involvement[p.from_player_id] += 1
        involvement[p.to_player_id] += 1

    return {
        "transactions": min(best_count, plan.payment_count) / plan.payment_count,
        "fairness": 1 / (1 + cv2),
        "simplicity": 1 / max(involvement.values()),
    }


def score_plan(plan: SettlementPlan, weights: ScoringWeights, best_count: int) -> float:
    m = plan_metrics(plan, best_count)
    total = weights.transactions + weights.fairness + weights.simplicity
    return round(
        (m["transactions"] * weights.transactions
         + m["fairness"] * weights.fairness
         + m["simplicity"] * weights.simplicity) / total,
        4,
    )


# ───────────────────────── comparison ───────────────────────────────────────
@dataclass
class ScoredPlan:
    plan: SettlementPlan
    score: float
    metrics: Dict[str, float]
    validation: ValidationResult
    rank: int = 0

    @property
    def heuristic(self) -> str:
        return self.plan.heuristic


@dataclass
class PlanComparison:
    ranked: List[ScoredPlan] = field(default_factory=list)
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    @property
    def recommended(self) -> Optional[ScoredPlan]:
        return self.ranked[0] if self.ranked else None

    def get(self, heuristic: str) -> Optional[ScoredPlan]:
        return next((s for s in self.ranked if s.heuristic == heuristic), None)

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "rank": s.rank,
                "heuristic": s.heuristic,
                "payments": s.plan.payment_count,
                "reduction_pct": s.plan.reduction_pct,
                **{k: round(v, 4) for k, v in s.metrics.items()},
                "score": s.score,
                "recommended": s.rank == 1,
            }
            for s in self.ranked
        ]
        return pd.DataFrame(rows, columns=[
            "rank", "heuristic", "payments", "reduction_pct",
            "transactions", "fairness", "simplicity", "score", "recommended",
        ])


def compare_plans(
    balances: Sequence[PlayerBalance],
    heuristics: Optional[Sequence[str]] = None,
    weights: Optional[ScoringWeights] = None,
    tolerance_cents: Optional[int] = None,
) -> PlanComparison:
    balances = list(balances)
    names = list(heuristics) if heuristics is not None else list(HEURISTICS)
    unknown = [n for n in names if n not in HEURISTICS]
    if unknown:
        raise ValueError(f"unknown heuristic(s): {', '.join(unknown)}")
    weights = weights or ScoringWeights()

    # bad input is the caller's problem, not a reason to skip a candidate
    residual = check_balanced(balances, tolerance_cents)
    split_parties(balances, residual_cents=residual)

    candidates = []
    for order, name in enumerate(names):
        try:
            plan = HEURISTICS[name](balances, tolerance_cents=tolerance_cents)
        except SettlementError as exc:
            logger.warning("Heuristic %s failed: %s", name, exc)
            continue
        result = validate_settlement(plan, balances, tolerance_cents=tolerance_cents)
        if not result.is_valid:
            logger.warning("Heuristic %s produced an unbalanced plan: %s",
                           name, result.discrepancies)
            continue
        candidates.append((order, plan, result))

    if not candidates:
        raise SettlementError("no heuristic produced a valid settlement plan")

    best_count = min(plan.payment_count for _, plan, _ in candidates)
    scored = []
    for order, plan, result in candidates:
        scored.append((order, ScoredPlan(
            plan=plan,
            score=score_plan(plan, weights, best_count),
            metrics=plan_metrics(plan, best_count),
            validation=result,
        )))
    scored.sort(key=lambda x: (-x[1].score, x[1].plan.payment_count, x[0]))

    ranked = []
    for rank, (_, s) in enumerate(scored, start=1):
        s.rank = rank
        ranked.append(s)
    logger.info("Compared %d plans; recommending %s (score %.3f)",
                len(ranked), ranked[0].heuristic, ranked[0].score)
    return PlanComparison(ranked=ranked, weights=weights)
