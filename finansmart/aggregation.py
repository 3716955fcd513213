"""
aggregation.py - derived views and totals over a ledger snapshot

Everything here is a pure function of the records passed in (and of "today"
for the overdue checks). Nothing is cached: the dashboard recomputes the whole
snapshot on every run.

Totals are accumulated as Decimal built from str(amount) so that
income - expenses == balance holds exactly for any snapshot.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Union
import datetime

from finansmart.models import Transaction, TransactionType


def parse_date(value: str) -> Optional[datetime.date]:
    """Parse the day part of an ISO date string; None when it is not a date."""
    if not value:
        return None
    try:
        return datetime.date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def sort_by_date(records: Iterable[Transaction]) -> List[Transaction]:
    """
    Ascending by date. The sort is stable so records sharing a date keep their
    stored order; records with unparseable dates go last.
    """
    def key(t: Transaction):
        d = parse_date(t.date)
        return (d is None, d or datetime.date.min)

    return sorted(records, key=key)


@dataclass
class LedgerGroups:
    income: List[Transaction] = field(default_factory=list)
    fixed: List[Transaction] = field(default_factory=list)
    cards: List[Transaction] = field(default_factory=list)
    misc: List[Transaction] = field(default_factory=list)
    # one bucket per configured card, in configuration order
    by_card: Dict[str, List[Transaction]] = field(default_factory=dict)


def group_by_type(records: Iterable[Transaction], card_names: Sequence[str]) -> LedgerGroups:
    """
    Partition a snapshot by type. Income is newest first; the expense groups
    stay chronological. Card expenses whose card_name is not configured are
    kept in `cards` (and in the totals) but appear in no `by_card` bucket.
    """
    ordered = sort_by_date(records)
    groups = LedgerGroups(by_card={name: [] for name in card_names})
    for t in ordered:
        if t.type == TransactionType.INCOME:
            groups.income.append(t)
        elif t.type == TransactionType.FIXED_EXPENSE:
            groups.fixed.append(t)
        elif t.type == TransactionType.CARD_EXPENSE:
            groups.cards.append(t)
            if t.card_name in groups.by_card:
                groups.by_card[t.card_name].append(t)
        elif t.type == TransactionType.MISC_EXPENSE:
            groups.misc.append(t)
    groups.income.reverse()
    return groups


def _sum(records: Iterable[Transaction]) -> Decimal:
    return sum((Decimal(str(t.amount)) for t in records), Decimal("0"))


@dataclass
class Totals:
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    fixed_pending: Decimal = Decimal("0")
    cards_pending: Decimal = Decimal("0")


def compute_totals(groups: Union[LedgerGroups, Iterable[Transaction]]) -> Totals:
    """Totals from grouped data or straight from a record snapshot."""
    if not isinstance(groups, LedgerGroups):
        groups = group_by_type(groups, ())
    income = _sum(groups.income)
    expenses = _sum(groups.fixed) + _sum(groups.cards) + _sum(groups.misc)
    return Totals(
        income=income,
        expenses=expenses,
        balance=income - expenses,
        fixed_pending=_sum(t for t in groups.fixed if not t.is_paid),
        cards_pending=_sum(t for t in groups.cards if not t.is_paid),
    )


def is_overdue(record: Transaction, today: Optional[datetime.date] = None) -> bool:
    """
    True iff the record is unpaid and its date is strictly before today.
    Paid records and records with an invalid date are never overdue.
    """
    if record.is_paid:
        return False
    due = parse_date(record.date)
    if due is None:
        return False
    if today is None:
        today = datetime.date.today()
    return due < today


def has_overdue(records: Iterable[Transaction], today: Optional[datetime.date] = None) -> bool:
    if today is None:
        today = datetime.date.today()
    return any(is_overdue(t, today) for t in records)


def efficiency_score(totals: Totals) -> float:
    """
    Display heuristic: 100 when nothing was spent, 0 once expenses reach
    income. Zero income counts as 1.
    """
    income = totals.income if totals.income != 0 else Decimal("1")
    spent_pct = min(Decimal("100"), totals.expenses / income * 100)
    return float(max(Decimal("0"), Decimal("100") - spent_pct))


@dataclass
class CardSummary:
    name: str
    total: Decimal
    all_paid: bool
    has_overdue: bool


def card_summaries(groups: LedgerGroups, today: Optional[datetime.date] = None) -> List[CardSummary]:
    """
    One row per configured card for the card panel. Cards whose bucket sums
    to zero are left out.
    """
    if today is None:
        today = datetime.date.today()
    out: List[CardSummary] = []
    for name, items in groups.by_card.items():
        total = _sum(items)
        if total == 0:
            continue
        out.append(
            CardSummary(
                name=name,
                total=total,
                all_paid=bool(items) and all(t.is_paid for t in items),
                has_overdue=has_overdue(items, today),
            )
        )
    return out


@dataclass
class LedgerSnapshot:
    groups: LedgerGroups
    totals: Totals
    any_overdue: bool
    score: float
    cards: List[CardSummary]
    today: datetime.date


def build_snapshot(
    records: Iterable[Transaction],
    card_names: Sequence[str],
    today: Optional[datetime.date] = None,
) -> LedgerSnapshot:
    """Compute everything the dashboard shows from one pass over the records."""
    if today is None:
        today = datetime.date.today()
    records = list(records)
    groups = group_by_type(records, card_names)
    totals = compute_totals(groups)
    return LedgerSnapshot(
        groups=groups,
        totals=totals,
        any_overdue=has_overdue(records, today),
        score=efficiency_score(totals),
        cards=card_summaries(groups, today),
        today=today,
    )
