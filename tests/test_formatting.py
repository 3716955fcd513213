from decimal import Decimal

from finansmart.formatting import format_day_month, format_money


def test_format_money_brazilian_separators():
    assert format_money(1234.56) == "R$ 1.234,56"
    assert format_money(Decimal("3500")) == "R$ 3.500,00"
    assert format_money(-20) == "-R$ 20,00"


def test_format_day_month():
    assert format_day_month("2024-01-05") == "5/1"
    assert format_day_month("soon") == "soon"
