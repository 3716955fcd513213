"""
models.py - Data model definitions

This file defines the Transaction dataclass used by the ledger, the
aggregation helpers, the sync client and the UI. Transactions are
serialized to/from plain dicts with camelCase keys so the same payload can be
stored locally and exchanged with the spreadsheet script endpoint.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional
import math


class TransactionType(str, Enum):
    INCOME = "INCOME"
    FIXED_EXPENSE = "FIXED_EXPENSE"
    CARD_EXPENSE = "CARD_EXPENSE"
    MISC_EXPENSE = "MISC_EXPENSE"

    @classmethod
    def parse(cls, value: Any) -> "TransactionType":
        """
        Coerce a stored/remote value into a TransactionType.
        Accepts the enum itself, its value in any casing, or the names used by
        the older Portuguese spreadsheet layout (RECEITA, GASTO_FIXO, ...).
        Raises ValueError for anything else.
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().upper()
        if text in LEGACY_TYPE_NAMES:
            return LEGACY_TYPE_NAMES[text]
        return cls(text)


LEGACY_TYPE_NAMES = {
    "RECEITA": TransactionType.INCOME,
    "GASTO_FIXO": TransactionType.FIXED_EXPENSE,
    "GASTO_CARTAO": TransactionType.CARD_EXPENSE,
    "GASTO_DIVERSO": TransactionType.MISC_EXPENSE,
}

# human labels used by the form and table headers
TYPE_LABELS = {
    TransactionType.INCOME: "Income",
    TransactionType.FIXED_EXPENSE: "Fixed",
    TransactionType.CARD_EXPENSE: "Card",
    TransactionType.MISC_EXPENSE: "Misc",
}


def _optional_text(value: Any) -> Optional[str]:
    """Plain scalars become text; missing or structured values (lists, objects) become None."""
    if value is None or isinstance(value, (list, dict)):
        return None
    return str(value)


@dataclass
class Transaction:
    """
    Represents a single ledger entry.

    Fields:
      - id: opaque unique string assigned by the ledger
      - description: free text, required when the entry is created
      - amount: numeric amount (sign is not validated)
      - date: ISO date string "YYYY-MM-DD", also used as the due date
      - type: TransactionType, fixed at creation
      - category: mirrors type.value at creation
      - is_paid: True for income, False for expenses until toggled
      - due_date: copy of date written at creation (kept for the sheet layout)
      - card_name: card bucket, only for CARD_EXPENSE
      - installments: label like "2/6", only for CARD_EXPENSE, never parsed
    """
    id: str
    description: str
    amount: float
    date: str
    type: TransactionType
    category: str = ""
    is_paid: bool = False
    due_date: Optional[str] = None
    card_name: Optional[str] = None
    installments: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a plain dict suitable for JSON serialization.
        Optional fields are left out when unset.
        """
        d: Dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "date": self.date,
            "type": self.type.value,
            "category": self.category,
            "isPaid": self.is_paid,
        }
        if self.due_date is not None:
            d["dueDate"] = self.due_date
        if self.card_name is not None:
            d["cardName"] = self.card_name
        if self.installments is not None:
            d["installments"] = self.installments
        return d

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Transaction":
        """
        Construct a Transaction from a dict (inverse of to_dict).
        Uses defaults for missing keys so older files and hand-edited sheet
        rows are tolerated; an unknown type falls back to MISC_EXPENSE.
        """
        try:
            tx_type = TransactionType.parse(d.get("type"))
        except ValueError:
            tx_type = TransactionType.MISC_EXPENSE
        try:
            amount = float(d.get("amount", 0.0) or 0.0)
        except (TypeError, ValueError):
            amount = 0.0
        if not math.isfinite(amount):
            amount = 0.0
        is_paid = d.get("isPaid", d.get("is_paid", False))
        if isinstance(is_paid, str):
            # sheet cells come back as "TRUE"/"FALSE"
            is_paid = is_paid.strip().lower() in ("true", "1", "yes")
        return Transaction(
            id=str(d.get("id", "") or ""),
            description=str(d.get("description", "") or ""),
            amount=amount,
            date=str(d.get("date", "") or ""),
            type=tx_type,
            category=str(d.get("category", "") or tx_type.value),
            is_paid=bool(is_paid),
            due_date=_optional_text(d.get("dueDate", d.get("due_date"))),
            card_name=_optional_text(d.get("cardName", d.get("card_name"))),
            installments=_optional_text(d.get("installments")),
        )


@dataclass
class TransactionInput:
    """Lightweight container produced by the entry form and passed to Ledger.add."""
    description: str
    amount: Any  # raw form value; Ledger.add parses it
    date: str  # ISO date string
    type: TransactionType = TransactionType.FIXED_EXPENSE
    card_name: Optional[str] = None
    installments: Optional[str] = None
