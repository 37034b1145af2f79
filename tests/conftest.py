import random
import sys
from pathlib import Path

import pytest

# Ensure project root is importable for test modules
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pokerpayout.models import PlayerBalance


def make_balances(spec):
    """{"A": -3000, "C": 5000} -> [PlayerBalance("A", "A", -3000), ...]"""
    return [PlayerBalance(pid, pid, cents) for pid, cents in spec.items()]


def random_balances(seed, n=8, spread=50_000):
    rng = random.Random(seed)
    cents = [rng.randint(-spread, spread) for _ in range(n - 1)]
    cents.append(-sum(cents))
    return [PlayerBalance(f"p{i}", f"Player {i}", c) for i, c in enumerate(cents)]


@pytest.fixture
def three_players():
    return make_balances({"A": -3000, "B": -2000, "C": 5000})


@pytest.fixture
def ledger_dir(tmp_path):
    d = tmp_path / "Ledger Data"
    d.mkdir()
    return d


@pytest.fixture
def write_ledger(ledger_dir):
    def _write(name, text):
        path = ledger_dir / name
        path.write_text(text)
        return path
    return _write
