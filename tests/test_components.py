import io

import pandas as pd

from finansmart.models import TransactionInput, TransactionType
from finansmart.ui.components import ledger_to_xlsx, record_options


def test_ledger_to_xlsx(ledger):
    ledger.add(TransactionInput("Salary", 5000, "2024-01-05", TransactionType.INCOME))
    ledger.add(
        TransactionInput("Shoes", 300, "2024-01-12", TransactionType.CARD_EXPENSE, card_name="Torra", installments="2/6")
    )
    data = ledger_to_xlsx(ledger.snapshot())
    assert data[:2] == b"PK"
    df = pd.read_excel(io.BytesIO(data), sheet_name="ledger")
    assert list(df["description"]) == ["Shoes", "Salary"]
    assert list(df["cardName"].fillna("")) == ["Torra", ""]


def test_record_options_are_keyed_by_id(ledger):
    first = ledger.add(TransactionInput("Coffee", 5, "2024-01-05", TransactionType.MISC_EXPENSE))
    second = ledger.add(TransactionInput("Coffee", 5, "2024-01-05", TransactionType.MISC_EXPENSE))
    options = record_options(ledger.snapshot())
    assert list(options) == [second.id, first.id]
    assert options[first.id] == options[second.id]
    assert options[first.id] == "5/1 Misc - Coffee (R$ 5,00)"
