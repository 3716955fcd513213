"""
FinanSmart - personal finance ledger.

Importing the package sets up the "finansmart" logger once; modules log
through logging.getLogger(__name__) and propagate to it.
"""

import logging

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

from finansmart.models import Transaction, TransactionInput, TransactionType  # noqa: E402
from finansmart.ledger import Ledger  # noqa: E402
from finansmart.storage import LocalStorage  # noqa: E402

__all__ = ["Ledger", "LocalStorage", "Transaction", "TransactionInput", "TransactionType"]
