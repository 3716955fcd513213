"""
ledger.py - the record store

Responsibilities:
 - keep the in-memory list of Transaction objects (newest insertion first)
 - mirror the whole list to local storage after every change
 - expose the only supported mutations: add, toggle_paid, remove and
   replace_all (used after a remote load)
 - keep the configured sheet endpoint next to the data

Display order is not stored here; see aggregation.py.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union
import datetime
import logging
import math
import uuid

from finansmart.config import DATA_KEY, SHEET_URL_KEY
from finansmart.models import Transaction, TransactionInput, TransactionType
from finansmart.storage import LocalStorage

logger = logging.getLogger(__name__)

# confirmation hook: receives a question, returns True to proceed
ConfirmHook = Callable[[str], bool]

DELETE_PROMPT = "Delete this record?"


def _always_confirm(message: str) -> bool:
    return True


def _parse_amount(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            amount = float(text)
        except ValueError:
            return None
    if not math.isfinite(amount):
        return None
    return amount


class Ledger:
    """
    Record store for one user's ledger. The UI builds one Ledger per run and
    hands it (by reference) to the aggregation helpers and the sync session.
    """

    def __init__(self, storage: LocalStorage, confirm: Optional[ConfirmHook] = None, default_sheet_url: str = ""):
        self.storage = storage
        # in-memory list of Transaction objects
        self.records: List[Transaction] = []
        self._confirm = confirm or _always_confirm
        self._default_sheet_url = default_sheet_url
        self.load()

    # -----------------------
    # Persistence
    # -----------------------
    def load(self):
        """
        Load the collection from storage. Missing data leaves an empty ledger;
        entries that are not objects are skipped.
        """
        raw = self.storage.get(DATA_KEY, []) or []
        if not isinstance(raw, list):
            logger.warning("Stored ledger under %s is not a list, starting empty", DATA_KEY)
            raw = []
        self.records = [Transaction.from_dict(d) for d in raw if isinstance(d, dict)]
        if self._normalize_ids():
            # ids must stay stable across reruns, so write the repaired ones back
            try:
                self.save()
            except OSError:
                logger.exception("Could not persist repaired ids to %s", self.storage.path)
        logger.info("Loaded %d records from %s", len(self.records), self.storage.path)

    def save(self):
        """Serialize the full collection to storage."""
        logger.info("Saving data to %s (records=%d)", self.storage.path, len(self.records))
        self.storage.set(DATA_KEY, [t.to_dict() for t in self.records])

    def _save_or_restore(self, previous: List[Transaction]):
        """
        Persist the current list; if the write fails, put the previous list
        back so memory and disk keep matching, then re-raise.
        """
        try:
            self.save()
        except Exception:
            logger.exception("Error saving ledger, restoring previous in-memory state")
            self.records = previous
            raise

    @property
    def sheet_url(self) -> str:
        stored = self.storage.get(SHEET_URL_KEY)
        if stored is None:
            return self._default_sheet_url
        return str(stored)

    @sheet_url.setter
    def sheet_url(self, url: str):
        self.storage.set(SHEET_URL_KEY, (url or "").strip())

    # -----------------------
    # Queries
    # -----------------------
    def get(self, record_id: str) -> Optional[Transaction]:
        for t in self.records:
            if t.id == record_id:
                return t
        return None

    def snapshot(self) -> List[Transaction]:
        """Return a shallow copy of the collection for read-only consumers."""
        return list(self.records)

    def __len__(self) -> int:
        return len(self.records)

    # -----------------------
    # Mutations
    # -----------------------
    def _new_id(self) -> str:
        existing = {t.id for t in self.records}
        while True:
            candidate = uuid.uuid4().hex[:12]
            if candidate not in existing:
                return candidate

    def _normalize_ids(self) -> int:
        """
        Give a fresh id to every record whose id is blank or already used by an
        earlier record. Returns how many ids were replaced.
        """
        seen = set()
        fixed = 0
        for t in self.records:
            if not t.id.strip() or t.id in seen:
                t.id = self._new_id()
                fixed += 1
            seen.add(t.id)
        if fixed:
            logger.warning("Assigned new ids to %d records with blank or duplicate ids", fixed)
        return fixed

    def add(self, data: Union[TransactionInput, Mapping[str, Any]]) -> Optional[Transaction]:
        """
        Create a Transaction from form data, prepend it and persist.

        Description, amount and date must be present and the amount must parse
        as a finite number; otherwise nothing happens and None is returned.
        category, is_paid and due_date are derived from type and date; card
        fields are dropped unless the type is CARD_EXPENSE.
        """
        if isinstance(data, Mapping):
            fields: Dict[str, Any] = dict(data)
        else:
            fields = {
                "description": data.description,
                "amount": data.amount,
                "date": data.date,
                "type": data.type,
                "card_name": data.card_name,
                "installments": data.installments,
            }

        description = str(fields.get("description") or "").strip()
        amount = _parse_amount(fields.get("amount"))
        date_val = fields.get("date")
        if isinstance(date_val, datetime.date):
            date_val = date_val.isoformat()
        date_str = str(date_val or "").strip()
        try:
            tx_type = TransactionType.parse(fields.get("type", TransactionType.FIXED_EXPENSE))
        except ValueError:
            tx_type = None
        if not description or amount is None or not date_str or tx_type is None:
            logger.debug("Skipping incomplete entry: %r", fields)
            return None

        is_card = tx_type == TransactionType.CARD_EXPENSE
        card_name = fields.get("card_name", fields.get("cardName"))
        installments = fields.get("installments")
        tx = Transaction(
            id=self._new_id(),
            description=description,
            amount=amount,
            date=date_str,
            type=tx_type,
            category=tx_type.value,
            is_paid=tx_type == TransactionType.INCOME,
            due_date=date_str,
            card_name=(str(card_name) if card_name is not None else "") if is_card else None,
            installments=(str(installments) if installments is not None else "") if is_card else None,
        )
        previous = list(self.records)
        self.records.insert(0, tx)
        self._save_or_restore(previous)
        logger.info("Added %s record id=%s amount=%s", tx.type.value, tx.id, tx.amount)
        return tx

    def toggle_paid(self, record_id: str) -> Optional[Transaction]:
        """Flip is_paid for the matching record. Unknown ids are ignored."""
        tx = self.get(record_id)
        if tx is None:
            logger.info("Record id=%s not found", record_id)
            return None
        tx.is_paid = not tx.is_paid
        try:
            self.save()
        except Exception:
            tx.is_paid = not tx.is_paid
            raise
        return tx

    def remove(self, record_id: str, confirm: Optional[ConfirmHook] = None) -> bool:
        """
        Delete the matching record once the confirmation hook agrees.
        Returns True if a record was deleted; unknown ids and declined
        confirmations return False.
        """
        tx = self.get(record_id)
        if tx is None:
            logger.info("Record id=%s not found", record_id)
            return False
        hook = confirm or self._confirm
        if not hook(DELETE_PROMPT):
            logger.info("Deletion of id=%s cancelled", record_id)
            return False
        previous = self.records
        self.records = [t for t in self.records if t.id != record_id]
        self._save_or_restore(previous)
        logger.info("Deleted record id=%s. Remaining records=%d.", record_id, len(self.records))
        return True

    def replace_all(self, records: Iterable[Union[Transaction, Dict[str, Any]]]):
        """
        Substitute the whole collection (no merge, no diff) and persist.
        Dicts are converted with Transaction.from_dict; anything else is dropped.
        """
        new_records: List[Transaction] = []
        for r in records:
            if isinstance(r, Transaction):
                new_records.append(r)
            elif isinstance(r, dict):
                new_records.append(Transaction.from_dict(r))
        previous = self.records
        self.records = new_records
        self._normalize_ids()
        self._save_or_restore(previous)
        logger.info("Replaced ledger contents (records=%d)", len(self.records))
