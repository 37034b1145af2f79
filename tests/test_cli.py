import pandas as pd
import pytest

from pokerpayout import check_payout, payout_system

LEDGER = "\n".join([
    "Player Name,Type,Amount",
    "Ann,buy-in,$70.00",
    "Bob,buy-in,$50.00",
    "Cat,buy-in,$30.00",
    "Bob,cash-out,$90.00",
    "Ann,chips,$15.00",
    "Cat,chips,$45.00",
])


def test_settle_writes_transactions(write_ledger, tmp_path, capsys):
    ledger = write_ledger("6_25_25.csv", LEDGER)
    payout_system.main(["--csv", str(ledger)])

    out = tmp_path / "Transactions" / "6_25_25_transactions.csv"
    assert out.exists()
    df = pd.read_csv(out, dtype=str)
    assert list(df.columns) == ["From ID", "From", "To ID", "To", "Amount"]
    assert df.to_dict("records") == [
        {"From ID": "ann", "From": "Ann", "To ID": "bob", "To": "Bob", "Amount": "40.00"},
        {"From ID": "ann", "From": "Ann", "To ID": "cat", "To": "Cat", "Amount": "15.00"},
    ]
    assert "2 transfers via greedy" in capsys.readouterr().out


def test_settle_compare_and_recommended(write_ledger, tmp_path, capsys):
    ledger = write_ledger("night.csv", LEDGER)
    out = tmp_path / "plan.csv"
    payout_system.main(["--csv", str(ledger), "--out", str(out),
                        "--heuristic", "recommended", "--compare"])
    printed = capsys.readouterr().out
    assert "heuristic" in printed and "score" in printed
    assert out.exists()


def test_settle_rejects_imbalanced_ledger(write_ledger):
    ledger = write_ledger("bad.csv", "\n".join([
        "Player Name,Type,Amount",
        "Ann,buy-in,$10.00",
        "Bob,cash-out,$12.00",
    ]))
    with pytest.raises(SystemExit) as exc_info:
        payout_system.main(["--csv", str(ledger)])
    assert "sum to" in str(exc_info.value.code)

    # within tolerance the bank covers the difference
    payout_system.main(["--csv", str(ledger), "--tolerance", "200"])


def test_settle_missing_ledger(tmp_path):
    with pytest.raises(SystemExit):
        payout_system.main(["--csv", str(tmp_path / "nope.csv")])


def test_settle_empty_ledger(write_ledger):
    ledger = write_ledger("empty.csv", "Player Name,Type,Amount\n")
    with pytest.raises(SystemExit) as exc_info:
        payout_system.main(["--csv", str(ledger)])
    assert "no players" in str(exc_info.value.code)


def test_round_trip_check(write_ledger, tmp_path, capsys):
    ledger = write_ledger("6_25_25.csv", LEDGER)
    out = payout_system.settle_transactions(ledger, heuristic="direct")
    check_payout.main(["--ledgers", str(ledger), "--payout", str(out)])
    assert "fully settled" in capsys.readouterr().out


def test_check_reports_mismatch(write_ledger, tmp_path, capsys):
    ledger = write_ledger("6_25_25.csv", LEDGER)
    payout = tmp_path / "edited.csv"
    payout.write_text("From,To,Amount\nAnn,Bob,40.00\nAnn,Cat,10.00\n")
    with pytest.raises(SystemExit) as exc_info:
        check_payout.main(["--ledgers", str(ledger), "--payout", str(payout)])
    assert exc_info.value.code == 1
    printed = capsys.readouterr().out
    assert "mismatches" in printed
    assert "ann" in printed and "cat" in printed


def test_check_merges_ledgers(write_ledger, tmp_path):
    first = write_ledger("t1.csv", "Player Name,Type,Amount\nAnn,buy-in,20\nBob,cash-out,20\n")
    second = write_ledger("t2.csv", "Player Name,Type,Amount\nBob,buy-in,5\nAnn,cash-out,5\n")
    payout = tmp_path / "p.csv"
    payout.write_text("From,To,Amount\nAnn (annie),Bob,15\n")
    result = check_payout.check_payout([first, second], payout)
    assert result.is_valid


def test_settle_rejects_negative_tolerance(write_ledger, capsys):
    ledger = write_ledger("6_25_25.csv", LEDGER)
    with pytest.raises(SystemExit) as exc_info:
        payout_system.main(["--csv", str(ledger), "--tolerance", "-1"])
    assert exc_info.value.code == 2
    assert "tolerance must be >= 0" in capsys.readouterr().err


def test_check_bank_row_needs_tolerance(write_ledger, tmp_path, capsys):
    ledger = write_ledger("bad.csv", "\n".join([
        "Player Name,Type,Amount",
        "Ann,buy-in,$10.00",
        "Bob,cash-out,$12.00",
    ]))
    out = payout_system.settle_transactions(ledger, tmp_path / "p.csv", tolerance_cents=200)
    assert check_payout.check_payout([ledger], out, tolerance_cents=200).is_valid
    assert not check_payout.check_payout([ledger], out).is_valid

    check_payout.main(["--ledgers", str(ledger), "--payout", str(out), "--tolerance", "200"])
    assert "fully settled" in capsys.readouterr().out
    with pytest.raises(SystemExit) as exc_info:
        check_payout.main(["--ledgers", str(ledger), "--payout", str(out)])
    assert exc_info.value.code == 1
