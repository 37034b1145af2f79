import pandas as pd
import pytest

from pokerpayout.errors import LedgerFormatError
from pokerpayout.ledger import (
    BUY_IN,
    CASH_OUT,
    CHIPS,
    LedgerEntry,
    aliases_from_name,
    balances_from_ledger,
    bank_balance,
    canonical_id,
    early_cash_out,
    entries_from_frame,
    read_ledger_csv,
)
from pokerpayout.models import PlayerBalance
from pokerpayout.optimizer import compute_settlement


@pytest.fixture
def entries():
    return [
        LedgerEntry("ann", "Ann", BUY_IN, 5000),
        LedgerEntry("bob", "Bob", BUY_IN, 5000),
        LedgerEntry("ann", "Ann", BUY_IN, 2000),
        LedgerEntry("cat", "Cat", BUY_IN, 3000),
        LedgerEntry("bob", "Bob", CASH_OUT, 9000),
        LedgerEntry("cat", "Cat", BUY_IN, 1000, voided=True),
        LedgerEntry("ann", "Ann", CHIPS, 1500),
        LedgerEntry("cat", "Cat", CHIPS, 4500),
    ]


def test_balances_from_ledger(entries):
    assert balances_from_ledger(entries) == [
        PlayerBalance("ann", "Ann", -5500),
        PlayerBalance("bob", "Bob", 4000),
        PlayerBalance("cat", "Cat", 1500),
    ]


def test_ledger_balances_settle(entries):
    plan = compute_settlement(balances_from_ledger(entries))
    assert plan.sent_by("ann") == 5500
    assert plan.payment_count == 2


def test_bank_balance(entries):
    bank = bank_balance(entries)
    assert bank.total_buy_ins == 15000
    assert bank.total_cash_outs == 9000
    assert bank.chips_in_play == 6000
    assert bank.available_for_cash_out == 6000
    assert bank.is_balanced


def test_bank_balance_reports_discrepancy(entries):
    bank = bank_balance(entries + [LedgerEntry("bob", "Bob", CHIPS, 100)])
    assert bank.discrepancy == 100
    assert not bank.is_balanced


def test_early_cash_out_winner(entries):
    result = early_cash_out(entries, "cat", 4500)
    assert result.total_buy_ins == 3000
    assert result.net_position == 1500
    assert result.settlement_type == "payment_to_player"
    assert result.settlement_cents == 1500
    assert result.bank_before == 6000
    assert result.bank_after == 4500


def test_early_cash_out_capped_by_bank():
    entries = [
        LedgerEntry("a", "A", BUY_IN, 1000),
        LedgerEntry("b", "B", BUY_IN, 1000),
        LedgerEntry("b", "B", CASH_OUT, 1800),
    ]
    result = early_cash_out(entries, "a", 1500)
    assert result.net_position == 500
    assert result.settlement_cents == 200
    assert result.bank_after == 0


def test_early_cash_out_loser_and_even(entries):
    loser = early_cash_out(entries, "ann", 1000)
    assert loser.settlement_type == "payment_from_player"
    assert loser.settlement_cents == 6000
    assert loser.bank_after == 12000

    even = early_cash_out(entries, "cat", 3000)
    assert even.settlement_type == "even"
    assert even.settlement_cents == 0


def test_early_cash_out_rejects_bad_input(entries):
    with pytest.raises(ValueError):
        early_cash_out(entries, "ann", -1)
    with pytest.raises(KeyError):
        early_cash_out(entries, "zed", 100)


def test_entry_validation():
    with pytest.raises(LedgerFormatError):
        LedgerEntry("a", "A", "rebuy", 100)
    with pytest.raises(LedgerFormatError):
        LedgerEntry("a", "A", BUY_IN, -100)


def test_aliases():
    assert aliases_from_name("CSizzle (siz)") == ["csizzle", "siz"]
    assert aliases_from_name("  @Joonga (.joonga) (jg)") == ["joonga", "jg"]
    assert canonical_id("CSizzle") == "csizzle"


def test_read_ledger_csv(write_ledger):
    path = write_ledger("6_25_25.csv", "\n".join([
        "Player Name,Type,Amount,Voided?",
        "CSizzle (siz),buy-in,\"$1,000.00\",",
        "csizzle,Buy In,$500,",
        "Dana,buy-in,$200,",
        "Dana,buy-in,$999,Yes",
        "Dana,cash-out,$1500.00,",
        "CSizzle (siz),chips,$200.00,",
    ]))
    entries = read_ledger_csv(path)
    assert len(entries) == 6
    assert [e.kind for e in entries[:2]] == [BUY_IN, BUY_IN]
    assert entries[3].voided
    assert balances_from_ledger(entries) == [
        PlayerBalance("csizzle", "CSizzle (siz)", -130000),
        PlayerBalance("dana", "Dana", 130000),
    ]


def test_player_id_column_wins(write_ledger):
    path = write_ledger("ids.csv", "\n".join([
        "Player ID,Player Name,Type,Amount",
        "007,Sam,buy-in,10",
        "008,Sam,cash-out,10",
    ]))
    ids = [b.player_id for b in balances_from_ledger(read_ledger_csv(path))]
    assert ids == ["007", "008"]


def test_missing_column():
    with pytest.raises(LedgerFormatError) as exc_info:
        entries_from_frame(pd.DataFrame({"Player Name": ["A"], "Amount": ["1"]}))
    assert exc_info.value.column == "Type"


def test_bad_rows():
    frame = pd.DataFrame({"Player Name": ["A"], "Type": ["rebuy"], "Amount": ["1"]})
    with pytest.raises(LedgerFormatError) as exc_info:
        entries_from_frame(frame)
    assert exc_info.value.row == 0

    frame = pd.DataFrame({"Player Name": ["A"], "Type": ["buy-in"], "Amount": ["1.005"]})
    with pytest.raises(LedgerFormatError) as exc_info:
        entries_from_frame(frame)
    assert exc_info.value.column == "Amount"


def test_infinite_amount_is_a_format_error(write_ledger):
    path = write_ledger("inf.csv", "Player Name,Type,Amount\nA,buy-in,inf\n")
    with pytest.raises(LedgerFormatError) as exc_info:
        read_ledger_csv(path)
    assert exc_info.value.row == 0
    assert exc_info.value.column == "Amount"
