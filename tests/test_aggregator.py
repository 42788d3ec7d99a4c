from datetime import datetime, timedelta

import pytest

from inout.aggregator import bucket_series, compute_totals
from inout.domain import DAY, EXPENSE, INCOME, WEEK, DashboardStats, Transaction
from inout.periods import end_of_week, in_window, start_of_week

# Thursday; its week runs Mon 2 March .. Sun 8 March 2026
D = datetime(2026, 3, 5, 12, 0)


def make_tx(id, type, amount, when, cat_id=None, description=""):
    return Transaction(
        id=id, type=type, amount=amount, owner_id="u1", date=when,
        description=description, category_id=cat_id,
    )


def test_compute_totals_empty():
    assert compute_totals([], D) == DashboardStats()


def test_compute_totals_scenario():
    trans = [
        make_tx("t1", INCOME, 1000, D),
        make_tx("t2", EXPENSE, 300, D),
        make_tx("t3", EXPENSE, 200, D - timedelta(days=40)),
    ]
    stats = compute_totals(trans, D)

    assert stats.total_income == 1000
    assert stats.total_expenses == 500
    assert stats.total_balance == 500
    assert stats.monthly_income == 1000
    assert stats.monthly_expenses == 300
    assert stats.weekly_income == 1000
    assert stats.weekly_expenses == 300


def test_compute_totals_balance_can_be_negative():
    stats = compute_totals([make_tx("t1", EXPENSE, 80, D), make_tx("t2", INCOME, 30, D)], D)
    assert stats.total_balance == -50


def test_balance_is_exact_difference():
    trans = [make_tx(str(i), INCOME, a, D) for i, a in enumerate([0.1, 0.2, 0.3])]
    trans += [make_tx("e1", EXPENSE, 0.7, D), make_tx("e2", EXPENSE, 0.05, D)]
    stats = compute_totals(trans, D)
    assert stats.total_balance == stats.total_income - stats.total_expenses


def test_week_starts_on_monday():
    trans = [
        make_tx("sun_before", INCOME, 1, datetime(2026, 3, 1, 23, 59)),
        make_tx("mon", INCOME, 10, datetime(2026, 3, 2, 0, 0)),
        make_tx("sun_after", INCOME, 100, datetime(2026, 3, 8, 23, 59)),
        make_tx("next_mon", INCOME, 1000, datetime(2026, 3, 9, 0, 0)),
    ]
    stats = compute_totals(trans, D)
    assert stats.weekly_income == 110
    assert stats.monthly_income == 1111


def test_week_spanning_month_boundary():
    reference = datetime(2026, 4, 1, 9, 0)  # Wednesday, week starts 30 March
    trans = [make_tx("t1", INCOME, 50, datetime(2026, 3, 31, 18, 0))]
    stats = compute_totals(trans, reference)
    assert stats.weekly_income == 50
    assert stats.monthly_income == 0


def test_window_totals_only_count_matching_transactions():
    trans = [make_tx(str(i), INCOME, 10 + i, D - timedelta(days=3 * i)) for i in range(20)]
    stats = compute_totals(trans, D)

    week_start, week_end = start_of_week(D), end_of_week(D)
    expected = sum(t.amount for t in trans if in_window(t.date, week_start, week_end))
    assert stats.weekly_income == expected


def test_daily_series_shape_and_labels():
    points = bucket_series([], DAY, 7, D)

    assert len(points) == 7
    assert [p.label for p in points] == ["Fri", "Sat", "Sun", "Mon", "Tue", "Wed", "Thu"]
    assert points[0].date == "2026-02-27"
    assert points[-1].date == "2026-03-05"
    assert all(p.income == 0 and p.expense == 0 for p in points)


@pytest.mark.parametrize("size", [0, 1, 1000])
def test_bucket_count_is_fixed(size):
    trans = [make_tx(str(i), INCOME, 1, D - timedelta(hours=7 * i)) for i in range(size)]
    assert len(bucket_series(trans, DAY, 7, D)) == 7
    assert len(bucket_series(trans, WEEK, 4, D)) == 4


def test_daily_series_uses_calendar_day():
    trans = [
        make_tx("late", EXPENSE, 20, datetime(2026, 3, 4, 23, 59)),
        make_tx("early", EXPENSE, 5, datetime(2026, 3, 5, 0, 0)),
        make_tx("income", INCOME, 70, datetime(2026, 3, 4, 8, 0)),
        make_tx("too_old", INCOME, 999, datetime(2026, 2, 26, 23, 0)),
    ]
    points = bucket_series(trans, DAY, 7, D)

    assert points[-2].expense == 20
    assert points[-2].income == 70
    assert points[-1].expense == 5
    assert sum(p.income for p in points) == 70


def test_daily_bucket_income_matches_window_total():
    trans = [make_tx(str(i), INCOME, 1.5 * i, D - timedelta(hours=11 * i)) for i in range(50)]
    points = bucket_series(trans, DAY, 7, D)

    first_day = datetime(2026, 2, 27)
    expected = sum(t.amount for t in trans if first_day <= t.date and t.date.date() <= D.date())
    assert sum(p.income for p in points) == pytest.approx(expected)


def test_weekly_series_buckets():
    trans = [
        make_tx("before", INCOME, 1, datetime(2026, 2, 8, 23, 0)),
        make_tx("first", INCOME, 10, datetime(2026, 2, 9, 0, 0)),
        make_tx("second", EXPENSE, 20, datetime(2026, 2, 20, 15, 0)),
        make_tx("last", INCOME, 40, datetime(2026, 3, 8, 22, 0)),
    ]
    points = bucket_series(trans, WEEK, 4, D)

    assert [p.label for p in points] == ["Week 1", "Week 2", "Week 3", "Week 4"]
    assert [p.date for p in points] == ["2026-02-09", "2026-02-16", "2026-02-23", "2026-03-02"]
    assert [p.income for p in points] == [10, 0, 0, 40]
    assert [p.expense for p in points] == [0, 20, 0, 0]


def test_bucket_series_zero_count():
    assert bucket_series([make_tx("t1", INCOME, 5, D)], DAY, 0, D) == ()
    assert bucket_series([make_tx("t1", INCOME, 5, D)], WEEK, 0, D) == ()


def test_bucket_series_rejects_bad_arguments():
    with pytest.raises(ValueError):
        bucket_series([], DAY, -1, D)
    with pytest.raises(ValueError):
        bucket_series([], "hour", 3, D)


def test_aggregation_does_not_mutate_input():
    trans = [make_tx("t1", INCOME, 5, D), make_tx("t2", EXPENSE, 3, D)]
    snapshot = list(trans)
    compute_totals(trans, D)
    bucket_series(trans, WEEK, 4, D)
    assert trans == snapshot
