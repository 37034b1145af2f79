import os

# Largest |sum of balances| (in cents) accepted as "balanced".  Anything
# inside the tolerance but non-zero is routed to the bank party.
TOLERANCE_CENTS = int(os.getenv("PAYOUT_TOLERANCE_CENTS", "0"))
if TOLERANCE_CENTS < 0:
    raise RuntimeError("PAYOUT_TOLERANCE_CENTS must be >= 0")

BANK_NAME = os.getenv("PAYOUT_BANK_NAME", "BANK").strip()
if not BANK_NAME:
    raise RuntimeError("PAYOUT_BANK_NAME must not be empty")

# Default weights for ranking alternative plans
WEIGHT_TRANSACTIONS = float(os.getenv("PAYOUT_WEIGHT_TRANSACTIONS", "0.5"))
WEIGHT_FAIRNESS = float(os.getenv("PAYOUT_WEIGHT_FAIRNESS", "0.25"))
WEIGHT_SIMPLICITY = float(os.getenv("PAYOUT_WEIGHT_SIMPLICITY", "0.25"))
if min(WEIGHT_TRANSACTIONS, WEIGHT_FAIRNESS, WEIGHT_SIMPLICITY) < 0:
    raise RuntimeError("PAYOUT_WEIGHT_* values must be >= 0")

LOG_LEVEL = os.getenv("PAYOUT_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'
