"""Dashboard and analytics aggregation.

Every function here is pure: it reads the transaction/category snapshots it
is given, never mutates them and never performs I/O. Sums are accumulated in
input order so results are reproducible to the last float bit.
"""
from datetime import datetime, timedelta
from functools import reduce
from typing import Iterable, Iterator, Optional, Sequence

from inout.domain import (
    DAY,
    EXPENSE,
    INCOME,
    WEEK,
    Category,
    CategoryBreakdown,
    ChartPoint,
    DashboardStats,
    PeriodComparison,
    PeriodSummary,
    Transaction,
)
from inout.periods import (
    end_of_month,
    end_of_week,
    in_window,
    shift_period,
    start_of_month,
    start_of_week,
)

DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def sum_by_type(trans: Iterable[Transaction], tx_type: str) -> float:
    return reduce(lambda acc, t: acc + t.amount if t.type == tx_type else acc, trans, 0.0)


def percent_of(part: float, whole: float) -> float:
    # a zero denominator is defined as 0%, never inf/nan
    if whole == 0:
        return 0.0
    return part / whole * 100


def compute_totals(
    trans: Sequence[Transaction], reference: Optional[datetime] = None
) -> DashboardStats:
    """All-time totals plus the current calendar month and week.

    The week runs Monday to Sunday. ``reference`` defaults to now.
    """
    reference = reference or datetime.now()
    month_start, month_end = start_of_month(reference), end_of_month(reference)
    week_start, week_end = start_of_week(reference), end_of_week(reference)

    totals = {INCOME: 0.0, EXPENSE: 0.0}
    monthly = {INCOME: 0.0, EXPENSE: 0.0}
    weekly = {INCOME: 0.0, EXPENSE: 0.0}

    for t in trans:
        if t.type not in totals:
            continue
        totals[t.type] += t.amount
        if in_window(t.date, month_start, month_end):
            monthly[t.type] += t.amount
        if in_window(t.date, week_start, week_end):
            weekly[t.type] += t.amount

    return DashboardStats(
        total_balance=totals[INCOME] - totals[EXPENSE],
        total_income=totals[INCOME],
        total_expenses=totals[EXPENSE],
        monthly_income=monthly[INCOME],
        monthly_expenses=monthly[EXPENSE],
        weekly_income=weekly[INCOME],
        weekly_expenses=weekly[EXPENSE],
    )


def bucket_series(
    trans: Sequence[Transaction],
    granularity: str,
    bucket_count: int,
    reference: Optional[datetime] = None,
) -> tuple[ChartPoint, ...]:
    """Zero-filled income/expense series, oldest bucket first.

    The last bucket always contains ``reference``. Each transaction lands in
    at most one bucket.
    """
    if bucket_count < 0:
        raise ValueError(f"bucket_count must be non-negative, got {bucket_count}")
    reference = reference or datetime.now()

    if granularity == DAY:
        return _daily_series(trans, bucket_count, reference)
    if granularity == WEEK:
        return _weekly_series(trans, bucket_count, reference)
    raise ValueError(f"Unknown granularity: {granularity!r}")


def _daily_series(
    trans: Sequence[Transaction], bucket_count: int, reference: datetime
) -> tuple[ChartPoint, ...]:
    days = [reference.date() - timedelta(days=i) for i in range(bucket_count - 1, -1, -1)]
    slot_by_day = {d.isoformat(): i for i, d in enumerate(days)}
    income = [0.0] * bucket_count
    expense = [0.0] * bucket_count

    for t in trans:
        # compare normalised day strings, not intervals
        slot = slot_by_day.get(t.date.date().isoformat())
        if slot is None:
            continue
        if t.type == INCOME:
            income[slot] += t.amount
        elif t.type == EXPENSE:
            expense[slot] += t.amount

    return tuple(
        ChartPoint(label=DAY_LABELS[d.weekday()], income=income[i], expense=expense[i], date=d.isoformat())
        for i, d in enumerate(days)
    )


def _weekly_series(
    trans: Sequence[Transaction], bucket_count: int, reference: datetime
) -> tuple[ChartPoint, ...]:
    if bucket_count == 0:
        return ()
    first_start = start_of_week(reference) - timedelta(weeks=bucket_count - 1)
    last_end = end_of_week(reference)
    income = [0.0] * bucket_count
    expense = [0.0] * bucket_count

    for t in trans:
        if not in_window(t.date, first_start, last_end):
            continue
        slot = (start_of_week(t.date) - first_start).days // 7
        if t.type == INCOME:
            income[slot] += t.amount
        elif t.type == EXPENSE:
            expense[slot] += t.amount

    return tuple(
        ChartPoint(
            label=f"Week {i + 1}",
            income=income[i],
            expense=expense[i],
            date=(first_start + timedelta(weeks=i)).date().isoformat(),
        )
        for i in range(bucket_count)
    )


def period_start(period: str, reference: datetime) -> datetime:
    return shift_period(reference, period, -1)


def filter_by_period(
    trans: Sequence[Transaction], period: str, reference: Optional[datetime] = None
) -> tuple[Transaction, ...]:
    """Transactions dated on or after ``reference`` minus one period."""
    start = period_start(period, reference or datetime.now())
    return tuple(filter(lambda t: t.date >= start, trans))


def period_comparison(
    trans: Sequence[Transaction], period: str, reference: Optional[datetime] = None
) -> PeriodComparison:
    """Current trailing period against the one immediately before it.

    The previous window is ``[start - period, start)``; the boundary instant
    belongs to the current window only.
    """
    reference = reference or datetime.now()
    current_start = period_start(period, reference)
    previous_start = shift_period(current_start, period, -1)

    current = filter_by_period(trans, period, reference)
    previous = tuple(filter(lambda t: previous_start <= t.date < current_start, trans))

    current_expenses = sum_by_type(current, EXPENSE)
    previous_expenses = sum_by_type(previous, EXPENSE)

    return PeriodComparison(
        current=current,
        previous=previous,
        percent_change=percent_of(current_expenses - previous_expenses, previous_expenses),
        current_expenses=current_expenses,
        previous_expenses=previous_expenses,
    )


def category_breakdown(
    trans: Sequence[Transaction], cats: Sequence[Category]
) -> tuple[CategoryBreakdown, ...]:
    """Per-category totals, largest first.

    Callers pass an already period-filtered set; transactions of either type
    count towards their category. Categories with nothing matched are left
    out, and ties keep the order of ``cats``.
    """
    totals: dict[str, float] = {}
    counts: dict[str, int] = {}
    for t in trans:
        if t.category_id is None:
            continue
        totals[t.category_id] = totals.get(t.category_id, 0.0) + t.amount
        counts[t.category_id] = counts.get(t.category_id, 0) + 1

    expense_sum = sum_by_type(trans, EXPENSE)

    rows = [
        CategoryBreakdown.from_category(
            c,
            total_amount=totals.get(c.id, 0.0),
            transaction_count=counts.get(c.id, 0),
            percentage=percent_of(totals.get(c.id, 0.0), expense_sum),
        )
        for c in cats
    ]
    # sorted() is stable with reverse=True as well
    return tuple(
        sorted((r for r in rows if r.total_amount > 0), key=lambda r: r.total_amount, reverse=True)
    )


def summarize_period(trans: Sequence[Transaction]) -> PeriodSummary:
    total_income = sum_by_type(trans, INCOME)
    total_expenses = sum_by_type(trans, EXPENSE)
    return PeriodSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_income=total_income - total_expenses,
        income_count=sum(1 for t in trans if t.type == INCOME),
        expense_count=sum(1 for t in trans if t.type == EXPENSE),
    )


def top_categories(breakdown: Iterable[CategoryBreakdown], limit: int = 5) -> Iterator[CategoryBreakdown]:
    for i, row in enumerate(breakdown):
        if i >= limit:
            return
        yield row


def recent_transactions(trans: Sequence[Transaction], limit: int = 5) -> tuple[Transaction, ...]:
    ordered = sorted(trans, key=lambda t: t.date, reverse=True)
    return tuple(ordered[: max(0, limit)])
