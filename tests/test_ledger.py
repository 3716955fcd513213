import json

import pytest

from finansmart.config import DATA_KEY, SHEET_URL_KEY
from finansmart.ledger import Ledger
from finansmart.models import Transaction, TransactionInput, TransactionType


@pytest.mark.parametrize("tx_type", list(TransactionType))
def test_add_then_get_returns_input_fields(ledger, tx_type):
    tx = ledger.add(TransactionInput("Groceries", "123.45", "2024-03-01", tx_type))
    assert tx is not None
    found = ledger.get(tx.id)
    assert found is tx
    assert found.description == "Groceries"
    assert found.amount == 123.45
    assert found.date == "2024-03-01"
    assert found.type == tx_type
    assert found.category == tx_type.value
    assert found.is_paid == (tx_type == TransactionType.INCOME)
    assert found.due_date == "2024-03-01"


def test_add_prepends(ledger):
    first = ledger.add(TransactionInput("Salary", 5000, "2024-01-05", TransactionType.INCOME))
    second = ledger.add(TransactionInput("Rent", 1500, "2024-01-10", TransactionType.FIXED_EXPENSE))
    assert [t.id for t in ledger.records] == [second.id, first.id]


def test_add_assigns_unique_ids(ledger):
    ids = {ledger.add(TransactionInput(f"item {i}", i + 1, "2024-01-01")).id for i in range(50)}
    assert len(ids) == 50


def test_add_keeps_card_fields_only_for_card_expenses(ledger):
    card = ledger.add(
        TransactionInput("Shoes", 300, "2024-02-01", TransactionType.CARD_EXPENSE, card_name="Torra", installments="2/6")
    )
    fixed = ledger.add(
        TransactionInput("Water", 80, "2024-02-01", TransactionType.FIXED_EXPENSE, card_name="Torra", installments="1/1")
    )
    assert card.card_name == "Torra"
    assert card.installments == "2/6"
    assert fixed.card_name is None
    assert fixed.installments is None


def test_add_accepts_mapping(ledger):
    tx = ledger.add({"description": "Gym", "amount": 99.9, "date": "2024-05-02", "type": "MISC_EXPENSE"})
    assert tx.type == TransactionType.MISC_EXPENSE
    assert tx.is_paid is False


@pytest.mark.parametrize(
    "description,amount,date",
    [
        ("", "10", "2024-01-01"),
        ("Rent", "", "2024-01-01"),
        ("Rent", "10", ""),
        ("Rent", "abc", "2024-01-01"),
        ("Rent", None, "2024-01-01"),
        ("Rent", "nan", "2024-01-01"),
    ],
)
def test_add_incomplete_input_is_skipped(ledger, description, amount, date):
    before = len(ledger)
    assert ledger.add(TransactionInput(description, amount, date)) is None
    assert len(ledger) == before
    assert ledger.storage.get(DATA_KEY) is None


def test_add_unknown_type_is_skipped(ledger):
    assert ledger.add({"description": "x", "amount": 1, "date": "2024-01-01", "type": "LOAN"}) is None
    assert len(ledger) == 0


def test_toggle_paid_twice_restores_value(ledger):
    tx = ledger.add(TransactionInput("Rent", 1500, "2024-01-10", TransactionType.FIXED_EXPENSE))
    assert ledger.toggle_paid(tx.id).is_paid is True
    assert ledger.toggle_paid(tx.id).is_paid is False


def test_toggle_paid_unknown_id_is_noop(ledger):
    ledger.add(TransactionInput("Rent", 1500, "2024-01-10", TransactionType.FIXED_EXPENSE))
    assert ledger.toggle_paid("missing") is None
    assert ledger.records[0].is_paid is False


def test_remove_is_idempotent(ledger):
    tx = ledger.add(TransactionInput("Rent", 1500, "2024-01-10", TransactionType.FIXED_EXPENSE))
    assert ledger.remove(tx.id) is True
    assert ledger.remove(tx.id) is False
    assert len(ledger) == 0


def test_remove_requires_confirmation(ledger):
    tx = ledger.add(TransactionInput("Rent", 1500, "2024-01-10", TransactionType.FIXED_EXPENSE))
    questions = []

    def decline(message):
        questions.append(message)
        return False

    assert ledger.remove(tx.id, confirm=decline) is False
    assert ledger.get(tx.id) is not None
    assert questions == ["Delete this record?"]


def test_default_confirm_hook_is_used(storage):
    ledger = Ledger(storage, confirm=lambda message: False)
    tx = ledger.add(TransactionInput("Rent", 1500, "2024-01-10", TransactionType.FIXED_EXPENSE))
    assert ledger.remove(tx.id) is False
    assert ledger.remove(tx.id, confirm=lambda message: True) is True


def test_replace_all_substitutes_collection(ledger):
    ledger.add(TransactionInput("Old", 1, "2024-01-01"))
    ledger.replace_all(
        [
            {"id": "a1", "description": "Salary", "amount": 10, "date": "2024-01-01", "type": "INCOME", "isPaid": True},
            Transaction("b2", "Rent", 5.0, "2024-01-02", TransactionType.FIXED_EXPENSE),
            "garbage",
        ]
    )
    assert [t.id for t in ledger.records] == ["a1", "b2"]


def test_mutations_persist_and_reload(storage):
    ledger = Ledger(storage)
    tx = ledger.add(TransactionInput("Rent", 1500, "2024-01-10", TransactionType.FIXED_EXPENSE))
    ledger.toggle_paid(tx.id)

    reloaded = Ledger(storage)
    assert len(reloaded) == 1
    assert reloaded.records[0] == tx

    with open(storage.path, encoding="utf-8") as f:
        raw = json.load(f)
    assert raw[DATA_KEY][0]["isPaid"] is True


def test_load_ignores_non_list_payload(storage):
    storage.set(DATA_KEY, {"not": "a list"})
    assert len(Ledger(storage)) == 0


def test_sheet_url_is_stored(storage):
    ledger = Ledger(storage, default_sheet_url="https://example.test/default")
    assert ledger.sheet_url == "https://example.test/default"
    ledger.sheet_url = "  https://example.test/exec  "
    assert storage.get(SHEET_URL_KEY) == "https://example.test/exec"
    assert Ledger(storage).sheet_url == "https://example.test/exec"


def test_replace_all_gives_blank_and_duplicate_ids_fresh_ones(ledger):
    ledger.replace_all(
        [
            {"description": "Water", "amount": 80, "date": "2024-01-03", "type": "FIXED_EXPENSE"},
            {"id": "", "description": "Power", "amount": 120, "date": "2024-01-04", "type": "FIXED_EXPENSE"},
            {"id": "dup", "description": "Gym", "amount": 90, "date": "2024-01-05", "type": "MISC_EXPENSE"},
            {"id": "dup", "description": "Bus", "amount": 10, "date": "2024-01-06", "type": "MISC_EXPENSE"},
        ]
    )
    ids = [t.id for t in ledger.records]
    assert all(ids)
    assert len(set(ids)) == 4
    assert ids[2] == "dup"

    assert ledger.remove(ids[0]) is True
    assert [t.description for t in ledger.records] == ["Power", "Gym", "Bus"]
    assert ledger.remove("") is False
    assert len(ledger) == 3


def test_load_repairs_blank_and_duplicate_ids(storage):
    storage.set(
        DATA_KEY,
        [
            {"id": "", "description": "Water", "amount": 80, "date": "2024-01-03", "type": "FIXED_EXPENSE"},
            {"description": "Power", "amount": 120, "date": "2024-01-04", "type": "FIXED_EXPENSE"},
            {"id": "x", "description": "Gym", "amount": 90, "date": "2024-01-05", "type": "MISC_EXPENSE"},
            {"id": "x", "description": "Bus", "amount": 10, "date": "2024-01-06", "type": "MISC_EXPENSE"},
        ],
    )
    ledger = Ledger(storage)
    ids = [t.id for t in ledger.records]
    assert all(ids)
    assert len(set(ids)) == 4
    # repaired ids are written back, so the next run sees the same ones
    assert [t.id for t in Ledger(storage).records] == ids


@pytest.fixture
def broken_ledger(ledger, monkeypatch):
    ledger.add(TransactionInput("Salary", 5000, "2024-01-05", TransactionType.INCOME))
    ledger.add(TransactionInput("Rent", 1500, "2024-01-10", TransactionType.FIXED_EXPENSE))

    def broken_set(key, value):
        raise OSError("disk full")

    monkeypatch.setattr(ledger.storage, "set", broken_set)
    return ledger


def test_add_failed_write_keeps_memory_unchanged(broken_ledger):
    ledger = broken_ledger
    before = ledger.snapshot()
    with pytest.raises(OSError):
        ledger.add(TransactionInput("Gym", 90, "2024-01-12", TransactionType.MISC_EXPENSE))
    assert ledger.snapshot() == before


def test_toggle_paid_failed_write_keeps_memory_unchanged(broken_ledger):
    ledger = broken_ledger
    rent = ledger.records[0]
    with pytest.raises(OSError):
        ledger.toggle_paid(rent.id)
    assert rent.is_paid is False


def test_remove_failed_write_keeps_memory_unchanged(broken_ledger):
    ledger = broken_ledger
    before = ledger.snapshot()
    with pytest.raises(OSError):
        ledger.remove(before[0].id)
    assert ledger.snapshot() == before


def test_replace_all_failed_write_keeps_memory_unchanged(broken_ledger):
    ledger = broken_ledger
    before = ledger.snapshot()
    with pytest.raises(OSError):
        ledger.replace_all([{"id": "n1", "description": "New", "amount": 1, "date": "2024-02-01", "type": "INCOME"}])
    assert ledger.snapshot() == before
