from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Optional, Sequence

from inout.domain import Category, Transaction
from inout.functional import find_category, maybe, pipe

ALL = "all"
UNCATEGORIZED = "Uncategorized"
UNKNOWN_CATEGORY = "Unknown Category"
DEFAULT_COLOR = "#6B7280"

Predicate = Callable[[Transaction], bool]


def by_search(term: str) -> Predicate:
    needle = term.lower()

    def _filter(t: Transaction) -> bool:
        return needle in (t.description or "").lower()

    return _filter


def by_type(tx_type: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.type == tx_type

    return _filter


def by_category(cat_id: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.category_id == cat_id

    return _filter


def by_date_range(start: date, end: Optional[date] = None, now: Optional[datetime] = None) -> Predicate:
    """Inclusive on both calendar days; an open end means "until now"."""
    lower = datetime.combine(start, time.min)
    upper = datetime.combine(end, time.max) if end else (now or datetime.now())

    def _filter(t: Transaction) -> bool:
        return lower <= t.date <= upper

    return _filter


@dataclass(frozen=True)
class TransactionFilter:
    search: str = ""
    type: str = ALL
    category_id: str = ALL
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def is_active(self) -> bool:
        return bool(self.search or self.type != ALL or self.category_id != ALL or self.date_from)

    def predicates(self, now: Optional[datetime] = None) -> tuple[Predicate, ...]:
        preds = []
        if self.search:
            preds.append(by_search(self.search))
        if self.type != ALL:
            preds.append(by_type(self.type))
        if self.category_id != ALL:
            preds.append(by_category(self.category_id))
        if self.date_from:
            preds.append(by_date_range(self.date_from, self.date_to, now))
        return tuple(preds)


def apply_filters(
    trans: Sequence[Transaction], criteria: TransactionFilter, now: Optional[datetime] = None
) -> tuple[Transaction, ...]:
    steps = [lambda ts, p=p: tuple(filter(p, ts)) for p in criteria.predicates(now)]
    return pipe(tuple(trans), *steps)


def category_label(cats: Sequence[Category], cat_id: Optional[str]) -> str:
    if not cat_id:
        return UNCATEGORIZED
    return find_category(cats, cat_id).map(lambda c: c.name).get_or_else(UNKNOWN_CATEGORY)


def category_color(cats: Sequence[Category], cat_id: Optional[str]) -> str:
    return find_category(cats, cat_id).bind(lambda c: maybe(c.color)).get_or_else(DEFAULT_COLOR)
