"""
Settle a poker night: net balances in, fewest payments out.
"""

from .alternatives import HEURISTICS, PlanComparison, ScoringWeights, compare_plans
from .errors import (
    EmptyInputError,
    ImbalancedInputError,
    IterationLimitError,
    ReservedPlayerError,
    SettlementError,
    ValidationMismatchError,
)
from .ledger import LedgerEntry, balances_from_ledger
from .models import Payment, PlayerBalance, SettlementPlan, ValidationResult
from .optimizer import compute_settlement
from .validator import ensure_valid, validate_settlement

__all__ = [
    "compute_settlement",
    "validate_settlement",
    "ensure_valid",
    "compare_plans",
    "balances_from_ledger",
    "HEURISTICS",
    "LedgerEntry",
    "Payment",
    "PlanComparison",
    "PlayerBalance",
    "ScoringWeights",
    "SettlementPlan",
    "ValidationResult",
    "SettlementError",
    "ImbalancedInputError",
    "EmptyInputError",
    "ValidationMismatchError",
    "IterationLimitError",
    "ReservedPlayerError",
]
