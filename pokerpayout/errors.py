"""
Exceptions raised by the settlement core.

Every error carries the structured detail a caller needs to log or display a
precise diagnostic (offending player ids, expected vs. actual cents).
"""

from __future__ import annotations

from typing import Optional, Sequence


class SettlementError(Exception):
    """Base class for everything the settlement core raises."""


class ImbalancedInputError(SettlementError, ValueError):
    def __init__(self, total_cents: int, tolerance_cents: int, player_ids: Sequence[str]):
        self.total_cents = total_cents
        self.tolerance_cents = tolerance_cents
        self.player_ids = list(player_ids)
        super().__init__(
            f"balances sum to {total_cents:+d} cents, "
            f"tolerance is {tolerance_cents} (players: {', '.join(self.player_ids)})"
        )


class EmptyInputError(SettlementError):
    def __init__(self, message: str = "no players to settle"):
        super().__init__(message)


class ValidationMismatchError(SettlementError):
    def __init__(self, result):
        self.result = result
        self.discrepancies = list(result.discrepancies)
        details = "; ".join(
            f"{d.player_id}: expected {d.expected_cents:+d}, got {d.actual_cents:+d}"
            for d in self.discrepancies
        )
        super().__init__(f"settlement plan does not balance ({details})")


class IterationLimitError(SettlementError, RuntimeError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"settlement loop exceeded {limit} iterations")


class DuplicatePlayerError(SettlementError, ValueError):
    def __init__(self, player_id: str):
        self.player_id = player_id
        super().__init__(f"player {player_id!r} appears more than once")


class LedgerFormatError(SettlementError, ValueError):
    def __init__(self, message: str, row: Optional[int] = None, column: Optional[str] = None):
        self.row = row
        self.column = column
        where = []
        if row is not None:
            where.append(f"row {row}")
        if column is not None:
            where.append(f"column {column!r}")
        super().__init__(f"{message} ({', '.join(where)})" if where else message)


class ReservedPlayerError(SettlementError, ValueError):
    """A player id clashes with the bank party that absorbs the residual."""

    def __init__(self, player_id: str):
        self.player_id = player_id
        super().__init__(
            f"player id {player_id!r} is reserved for the bank residual; "
            f"rename the player or set PAYOUT_BANK_NAME"
        )
