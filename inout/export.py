"""CSV export of an owner's raw transactions."""
from datetime import date
from typing import Optional, Sequence

from inout.domain import Category, Transaction
from inout.filters import UNCATEGORIZED
from inout.functional import find_category

CSV_HEADER = "Date,Type,Amount,Description,Category"


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def transaction_row(t: Transaction, cats: Sequence[Category]) -> str:
    category = find_category(cats, t.category_id).map(lambda c: c.name).get_or_else(UNCATEGORIZED)
    return ",".join([
        t.date.date().isoformat(),
        t.type,
        _amount(t.amount),
        _quote(t.description or ""),
        _quote(category),
    ])


def transactions_to_csv(trans: Sequence[Transaction], cats: Sequence[Category]) -> str:
    """Header plus one row per transaction, in the order given.

    Description and Category are always quoted; Date, Type and Amount never
    contain separators.
    """
    return "\n".join([CSV_HEADER, *(transaction_row(t, cats) for t in trans)])


def export_filename(today: Optional[date] = None) -> str:
    return f"inout-export-{(today or date.today()).isoformat()}.csv"
