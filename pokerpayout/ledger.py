"""
pokerpayout/ledger.py
─────────────────────
From buy-in / cash-out events to net balances.

• net = cash-outs + chips still on the table - buy-ins
  (positive = the player is owed money, negative = the player owes money)
• Voided entries are ignored.
• Ledger CSV columns:
    Player Name, Type, Amount            required
    Player ID, Voided?                   optional
  Type is one of buy-in / cash-out / chips.  Without a Player ID the player
  is keyed by the canonical alias of the name, so "CSizzle (siz)" and
  "csizzle" are the same person.
"""

from __future__ import annotations

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Union

import pandas as pd

from pokerpayout.errors import LedgerFormatError
from pokerpayout.models import PlayerBalance
from pokerpayout.money import to_cents

logger = logging.getLogger(__name__)

BUY_IN, CASH_OUT, CHIPS = "buy_in", "cash_out", "chips"
ENTRY_KINDS = (BUY_IN, CASH_OUT, CHIPS)


@dataclass(frozen=True)
class LedgerEntry:
    player_id: str
    name: str
    kind: str
    amount_cents: int
    voided: bool = False

    def __post_init__(self) -> None:
        if self.kind not in ENTRY_KINDS:
            raise LedgerFormatError(f"unknown entry type {self.kind!r}", column="Type")
        if self.amount_cents < 0:
            raise LedgerFormatError(f"negative amount for {self.player_id}", column="Amount")


@dataclass(frozen=True)
class BankBalance:
    total_buy_ins: int
    total_cash_outs: int
    chips_in_play: int

    @property
    def available_for_cash_out(self) -> int:
        return self.total_buy_ins - self.total_cash_outs

    @property
    def discrepancy(self) -> int:
        return self.total_cash_outs + self.chips_in_play - self.total_buy_ins

    @property
    def is_balanced(self) -> bool:
        return self.discrepancy == 0


@dataclass(frozen=True)
class EarlyCashOut:
    player_id: str
    chip_count_cents: int
    total_buy_ins: int
    net_position: int
    settlement_cents: int
    # "payment_to_player", "payment_from_player" or "even"
    settlement_type: str
    bank_before: int
    bank_after: int


# ───────────────────────── alias helpers ────────────────────────────────────
PAR_RE = re.compile(r"\(([^)]+)\)")       # grab text inside every ( … )
TOK_RE = re.compile(r"^\s*([^\s(]+)")     # first token in ledger string


def clean(token: str) -> str:
    """lower-case and strip leading '.' or '@'."""
    return token.lstrip(".@").strip().lower()


def aliases_from_name(raw: str) -> List[str]:
    """
    Ledger 'Player Name' field, e.g. "CSizzle (siz)"
    returns ["csizzle", "siz"]
    """
    raw = str(raw).strip()
    aliases: List[str] = []
    m = TOK_RE.match(raw)
    if m:
        alias = clean(m.group(1))
        if alias:
            aliases.append(alias)
    for grp in PAR_RE.findall(raw):
        alias = clean(grp)
        if alias and alias not in aliases:
            aliases.append(alias)
    return aliases


def canonical_id(raw: str) -> str:
    aliases = aliases_from_name(raw)
    return aliases[0] if aliases else clean(str(raw))


def normalize_kind(raw) -> str:
    kind = str(raw).strip().lower().replace("-", "_").replace(" ", "_")
    return {"buyin": BUY_IN, "cashout": CASH_OUT, "chip": CHIPS}.get(kind, kind)


# ───────────────────────── calculations ─────────────────────────────────────
def _live(entries: Iterable[LedgerEntry]) -> List[LedgerEntry]:
    return [e for e in entries if not e.voided]


def balances_from_ledger(entries: Iterable[LedgerEntry]) -> List[PlayerBalance]:
    net: Dict[str, int] = OrderedDict()
    names: Dict[str, str] = {}
    for e in entries:
        names.setdefault(e.player_id, e.name)
        net.setdefault(e.player_id, 0)
        if e.voided:
            continue
        if e.kind == BUY_IN:
            net[e.player_id] -= e.amount_cents
        else:
            net[e.player_id] += e.amount_cents
    return [PlayerBalance(pid, names[pid], bal) for pid, bal in net.items()]


def bank_balance(entries: Iterable[LedgerEntry]) -> BankBalance:
    totals = {BUY_IN: 0, CASH_OUT: 0, CHIPS: 0}
    for e in _live(entries):
        totals[e.kind] += e.amount_cents
    return BankBalance(totals[BUY_IN], totals[CASH_OUT], totals[CHIPS])


def early_cash_out(entries: Iterable[LedgerEntry], player_id: str,
                   chip_count_cents: int) -> EarlyCashOut:
    """Settle one player who leaves mid-game with chip_count_cents in chips."""
    if chip_count_cents < 0:
        raise ValueError("chip count cannot be negative")
    entries = _live(entries)
    if not any(e.player_id == player_id for e in entries):
        raise KeyError(player_id)

    buy_ins = sum(e.amount_cents for e in entries
                  if e.player_id == player_id and e.kind == BUY_IN)
    bank = bank_balance(entries).available_for_cash_out
    net = chip_count_cents - buy_ins

    if net > 0:
        # the bank can only hand out what it still holds
        amount = min(net, max(bank, 0))
        kind, after = "payment_to_player", bank - amount
    elif net < 0:
        amount, kind, after = -net, "payment_from_player", bank - net
    else:
        amount, kind, after = 0, "even", bank

    return EarlyCashOut(
        player_id=player_id,
        chip_count_cents=chip_count_cents,
        total_buy_ins=buy_ins,
        net_position=net,
        settlement_cents=amount,
        settlement_type=kind,
        bank_before=bank,
        bank_after=after,
    )


# ───────────────────────── CSV boundary ─────────────────────────────────────
REQUIRED_COLUMNS = ("Player Name", "Type", "Amount")


def entries_from_frame(df: pd.DataFrame) -> List[LedgerEntry]:
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise LedgerFormatError(f"missing column(s): {', '.join(missing)}", column=missing[0])

    entries: List[LedgerEntry] = []
    for idx, row in df.iterrows():
        name = row["Player Name"]
        if pd.isna(name) or not str(name).strip():
            continue
        name = str(name).strip()
        raw_id = row.get("Player ID")
        pid = str(raw_id).strip() if raw_id is not None and not pd.isna(raw_id) else canonical_id(name)
        try:
            amount = to_cents(row["Amount"])
        except ValueError as exc:
            raise LedgerFormatError(str(exc), row=idx, column="Amount") from None
        if amount < 0:
            raise LedgerFormatError("negative amount", row=idx, column="Amount")
        kind = normalize_kind(row["Type"])
        if kind not in ENTRY_KINDS:
            raise LedgerFormatError(f"unknown entry type {row['Type']!r}", row=idx, column="Type")
        voided = str(row.get("Voided?", "")).strip().lower() == "yes"
        entries.append(LedgerEntry(pid, name, kind, amount, voided))
    return entries


def read_ledger_csv(path: Union[str, Path]) -> List[LedgerEntry]:
    path = Path(path).expanduser()
    df = pd.read_csv(path, dtype=str)
    entries = entries_from_frame(df)
    logger.info("Read %d ledger entries from %s", len(entries), path)
    return entries
