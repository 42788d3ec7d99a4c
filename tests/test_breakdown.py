from datetime import datetime, timedelta

import pytest

from inout.aggregator import (
    category_breakdown,
    recent_transactions,
    summarize_period,
    top_categories,
)
from inout.domain import EXPENSE, INCOME, Category, Transaction

D = datetime(2026, 3, 5, 12, 0)
CREATED = datetime(2026, 1, 1)


def make_tx(id, type, amount, cat_id=None, when=D):
    return Transaction(id=id, type=type, amount=amount, owner_id="u1", date=when, category_id=cat_id)


def make_cat(id, name, color=None):
    return Category(id=id, name=name, owner_id="u1", created_at=CREATED, color=color)


CATS = (
    make_cat("c1", "Entertainment"),
    make_cat("c2", "Food", "#10B981"),
    make_cat("c3", "Health"),
    make_cat("c4", "Housing"),
)


def test_breakdown_sorted_and_filtered():
    trans = [
        make_tx("t1", EXPENSE, 50, "c2"),
        make_tx("t2", EXPENSE, 300, "c4"),
        make_tx("t3", EXPENSE, 30, "c2"),
        make_tx("t4", EXPENSE, 20, "c1"),
    ]
    result = category_breakdown(trans, CATS)

    assert [r.id for r in result] == ["c4", "c2", "c1"]
    assert [r.total_amount for r in result] == [300, 80, 20]
    assert [r.transaction_count for r in result] == [1, 2, 1]
    assert result[0].percentage_of_expenses == 75.0
    assert result[1].percentage_of_expenses == pytest.approx(20.0)
    assert result[1].name == "Food"
    assert result[1].color == "#10B981"


def test_breakdown_ties_keep_category_order():
    trans = [
        make_tx("t1", EXPENSE, 40, "c3"),
        make_tx("t2", EXPENSE, 40, "c1"),
        make_tx("t3", EXPENSE, 40, "c2"),
    ]
    result = category_breakdown(trans, CATS)
    assert [r.id for r in result] == ["c1", "c2", "c3"]


def test_breakdown_is_strictly_ordered():
    trans = [make_tx(str(i), EXPENSE, (i % 4) * 10 + 5, f"c{i % 4 + 1}") for i in range(40)]
    totals = [r.total_amount for r in category_breakdown(trans, CATS)]
    assert totals == sorted(totals, reverse=True)


def test_breakdown_dangling_reference_with_no_categories():
    trans = [make_tx("t1", EXPENSE, 10, "missing"), make_tx("t2", INCOME, 5, "missing")]
    assert category_breakdown(trans, []) == ()


def test_breakdown_ignores_uncategorized_and_dangling():
    trans = [
        make_tx("t1", EXPENSE, 10, None),
        make_tx("t2", EXPENSE, 30, "gone"),
        make_tx("t3", EXPENSE, 60, "c2"),
    ]
    result = category_breakdown(trans, CATS)
    assert [r.id for r in result] == ["c2"]
    assert result[0].percentage_of_expenses == pytest.approx(60.0)


def test_breakdown_counts_income_against_expense_total():
    trans = [make_tx("t1", INCOME, 200, "c2"), make_tx("t2", EXPENSE, 100, "c1")]
    result = category_breakdown(trans, CATS)
    assert [r.id for r in result] == ["c2", "c1"]
    assert result[0].percentage_of_expenses == 200.0


def test_breakdown_without_expenses_has_zero_percentages():
    result = category_breakdown([make_tx("t1", INCOME, 200, "c2")], CATS)
    assert result[0].total_amount == 200
    assert result[0].percentage_of_expenses == 0.0


def test_summarize_period():
    trans = [
        make_tx("t1", INCOME, 1000),
        make_tx("t2", EXPENSE, 250.5),
        make_tx("t3", EXPENSE, 49.5),
    ]
    summary = summarize_period(trans)
    assert summary.total_income == 1000
    assert summary.total_expenses == 300
    assert summary.net_income == 700
    assert summary.income_count == 1
    assert summary.expense_count == 2
    assert summary.transaction_count == 3


def test_summarize_empty_period():
    summary = summarize_period([])
    assert summary.total_income == 0
    assert summary.transaction_count == 0


def test_top_categories_is_lazy_and_limited():
    breakdown = category_breakdown(
        [make_tx(str(i), EXPENSE, 10 * (i + 1), f"c{i + 1}") for i in range(4)], CATS
    )
    gen = top_categories(breakdown, 2)
    assert next(gen).id == "c4"
    assert [r.id for r in gen] == ["c3"]
    assert list(top_categories(breakdown, 0)) == []


def test_recent_transactions_newest_first():
    trans = [make_tx(str(i), EXPENSE, 1, when=D - timedelta(days=i)) for i in (3, 0, 5, 1, 2, 4)]
    recent = recent_transactions(trans, 3)
    assert [t.id for t in recent] == ["0", "1", "2"]
    assert recent_transactions([], 5) == ()


@pytest.mark.parametrize("limit", [0, -1])
def test_recent_transactions_non_positive_limit(limit):
    assert recent_transactions([make_tx("t1", INCOME, 1)], limit) == ()
