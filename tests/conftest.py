import pytest

from finansmart.ledger import Ledger
from finansmart.storage import LocalStorage


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "data" / "finansmart.json"))


@pytest.fixture
def ledger(storage):
    return Ledger(storage)
