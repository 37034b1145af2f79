from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from pokerpayout.money import money_str


@dataclass(frozen=True)
class PlayerBalance:
    player_id: str
    name: str
    # cents; negative = owes money, positive = is owed money
    net_balance: int


@dataclass(frozen=True)
class Payment:
    from_player_id: str
    to_player_id: str
    amount_cents: int

    def __post_init__(self) -> None:
        if isinstance(self.amount_cents, bool) or not isinstance(self.amount_cents, int):
            raise ValueError(f"amount_cents must be an int, got {self.amount_cents!r}")
        if self.amount_cents <= 0:
            raise ValueError(f"amount_cents must be positive, got {self.amount_cents}")
        if self.from_player_id == self.to_player_id:
            raise ValueError(f"payment from {self.from_player_id!r} to itself")


@dataclass(frozen=True)
class SettlementPlan:
    payments: Tuple[Payment, ...] = ()
    heuristic: str = "greedy"
    # payments needed if every debtor paid every creditor
    baseline_count: int = 0

    @property
    def payment_count(self) -> int:
        return len(self.payments)

    @property
    def total_cents(self) -> int:
        return sum(p.amount_cents for p in self.payments)

    @property
    def reduction_pct(self) -> float:
        if self.baseline_count <= 0:
            return 0.0
        return round((self.baseline_count - self.payment_count) / self.baseline_count * 100, 2)

    def sent_by(self, player_id: str) -> int:
        return sum(p.amount_cents for p in self.payments if p.from_player_id == player_id)

    def received_by(self, player_id: str) -> int:
        return sum(p.amount_cents for p in self.payments if p.to_player_id == player_id)

    def to_records(self, names: Dict[str, str] = None) -> List[dict]:
        names = names or {}
        return [
            {
                "From ID": p.from_player_id,
                "From": names.get(p.from_player_id, p.from_player_id),
                "To ID": p.to_player_id,
                "To": names.get(p.to_player_id, p.to_player_id),
                "Amount": money_str(p.amount_cents),
            }
            for p in self.payments
        ]


@dataclass(frozen=True)
class Discrepancy:
    player_id: str
    expected_cents: int
    actual_cents: int

    @property
    def difference(self) -> int:
        return self.actual_cents - self.expected_cents


@dataclass(frozen=True)
class AuditStep:
    description: str
    expected_cents: int
    actual_cents: int

    @property
    def ok(self) -> bool:
        return self.expected_cents == self.actual_cents


@dataclass
class ValidationResult:
    is_valid: bool
    discrepancies: List[Discrepancy] = field(default_factory=list)
    total_debits_cents: int = 0
    total_credits_cents: int = 0
    steps: List[AuditStep] = field(default_factory=list)
