"""Service facades sitting between the provider and the presentation layer.

Each view load re-fetches the owner's full data, validates it at the
boundary and hands plain tuples to the pure aggregation functions. Nothing is
cached between loads.
"""
import asyncio
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from inout import aggregator
from inout.async_reports import fetch_owner_data, parse_records
from inout.config import Settings
from inout.domain import (
    DAY,
    MONTH,
    PERIODS,
    WEEK,
    YEAR,
    Category,
    CategoryBreakdown,
    ChartPoint,
    DashboardStats,
    Insight,
    PeriodComparison,
    PeriodSummary,
    Transaction,
    User,
)
from inout.events import AuthNotifier
from inout.exceptions import ProviderError, ValidationError
from inout.export import export_filename, transactions_to_csv
from inout.filters import TransactionFilter, apply_filters
from inout.insights import build_insights
from inout.logger import get_logger
from inout.provider import CATEGORIES, TRANSACTIONS, RecordStore
from inout.validation import parse_category, parse_transaction, parse_user

logger = get_logger("services")

# period -> (granularity, bucket count) of its trend chart
CHART_WINDOWS = {
    WEEK: (DAY, 7),
    MONTH: (WEEK, 4),
    YEAR: (WEEK, 52),
}


@dataclass(frozen=True)
class DashboardView:
    stats: DashboardStats
    chart: Tuple[ChartPoint, ...]
    recent: Tuple[Transaction, ...]


@dataclass(frozen=True)
class AnalyticsView:
    period: str
    summary: PeriodSummary
    comparison: PeriodComparison
    breakdown: Tuple[CategoryBreakdown, ...]
    top_categories: Tuple[CategoryBreakdown, ...]
    insights: Tuple[Insight, ...]
    chart: Tuple[ChartPoint, ...]


def load_owner_data(store: RecordStore, owner_id: str) -> Tuple[Tuple[Transaction, ...], Tuple[Category, ...]]:
    return asyncio.run(fetch_owner_data(store, owner_id))


def _owned_record(store: RecordStore, kind: str, owner_id: str, record_id: str) -> Dict[str, Any]:
    """Fetch one of the owner's records; other owners' ids count as missing."""
    record = next((r for r in store.list(kind, owner_id) if r["id"] == record_id), None)
    if record is None:
        raise ProviderError(f"{kind} record {record_id} not found")
    return record


def _chart(trans, period: str, reference: datetime) -> Tuple[ChartPoint, ...]:
    granularity, count = CHART_WINDOWS[period]
    return aggregator.bucket_series(trans, granularity, count, reference)


class DashboardService:
    """Totals, the trend chart and the latest transactions for one owner."""

    def __init__(self, store: RecordStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or Settings()

    def load(self, owner_id: str, chart_period: str = WEEK, reference: Optional[datetime] = None) -> DashboardView:
        if chart_period not in (WEEK, MONTH):
            raise ValueError(f"Dashboard chart period must be week or month, got {chart_period!r}")
        reference = reference or datetime.now()
        transactions, _ = load_owner_data(self.store, owner_id)

        view = DashboardView(
            stats=aggregator.compute_totals(transactions, reference),
            chart=_chart(transactions, chart_period, reference),
            recent=aggregator.recent_transactions(transactions, self.settings.recent_limit),
        )
        logger.debug(f"Dashboard built from {len(transactions)} transactions")
        return view


class AnalyticsService:
    """Trailing-period summary, comparison, category breakdown and insights."""

    def __init__(self, store: RecordStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or Settings()

    def load(self, owner_id: str, period: str = MONTH, reference: Optional[datetime] = None) -> AnalyticsView:
        if period not in PERIODS:
            raise ValueError(f"Unknown period: {period!r}")
        reference = reference or datetime.now()
        transactions, categories = load_owner_data(self.store, owner_id)

        comparison = aggregator.period_comparison(transactions, period, reference)
        summary = aggregator.summarize_period(comparison.current)
        breakdown = aggregator.category_breakdown(comparison.current, categories)

        return AnalyticsView(
            period=period,
            summary=summary,
            comparison=comparison,
            breakdown=breakdown,
            top_categories=tuple(aggregator.top_categories(breakdown, self.settings.top_categories)),
            insights=build_insights(period, summary, comparison, breakdown),
            chart=_chart(transactions, period, reference),
        )


class TransactionService:
    def __init__(self, store: RecordStore):
        self.store = store

    def list(self, owner_id: str) -> Tuple[Transaction, ...]:
        transactions, _ = load_owner_data(self.store, owner_id)
        return transactions

    def search(
        self, owner_id: str, criteria: TransactionFilter, now: Optional[datetime] = None
    ) -> Tuple[Transaction, ...]:
        return apply_filters(self.list(owner_id), criteria, now)

    def add(
        self,
        owner_id: str,
        tx_type: str,
        amount: float,
        when: date,
        description: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> Transaction:
        record = {
            "owner_id": owner_id,
            "type": tx_type,
            "amount": amount,
            "date": when.isoformat(),
            "description": (description or "").strip() or None,
            "category_id": category_id or None,
        }
        # validate before anything is written
        checked = parse_transaction({"id": "pending", **record})
        if checked.is_left():
            raise ValidationError(checked.get_error()["message"], checked.get_error())

        created = self.store.create(TRANSACTIONS, record)
        logger.info(f"Added {tx_type} transaction {created['id']}")
        return parse_transaction(created).get_or_else(None)

    def update(self, owner_id: str, record_id: str, changes: Dict[str, Any]) -> Transaction:
        current = _owned_record(self.store, TRANSACTIONS, owner_id, record_id)

        checked = parse_transaction({**current, **changes})
        if checked.is_left():
            raise ValidationError(checked.get_error()["message"], checked.get_error())

        updated = self.store.update(TRANSACTIONS, record_id, changes)
        logger.info(f"Updated transaction {record_id}")
        return parse_transaction(updated).get_or_else(None)

    def delete(self, owner_id: str, record_id: str) -> None:
        _owned_record(self.store, TRANSACTIONS, owner_id, record_id)
        self.store.delete(TRANSACTIONS, record_id)
        logger.info(f"Deleted transaction {record_id}")


class CategoryService:
    def __init__(self, store: RecordStore):
        self.store = store

    def list(self, owner_id: str) -> Tuple[Category, ...]:
        return parse_records(CATEGORIES, self.store.list(CATEGORIES, owner_id, "name"), parse_category)

    def add(self, owner_id: str, name: str, icon: Optional[str] = None, color: Optional[str] = None) -> Category:
        record = {"owner_id": owner_id, "name": (name or "").strip(), "icon": icon, "color": color}
        checked = parse_category({"id": "pending", **record})
        if checked.is_left():
            raise ValidationError(checked.get_error()["message"], checked.get_error())

        created = self.store.create(CATEGORIES, record)
        logger.info(f"Added category {created['name']!r}")
        return parse_category(created).get_or_else(None)

    def update(self, owner_id: str, record_id: str, changes: Dict[str, Any]) -> Category:
        current = _owned_record(self.store, CATEGORIES, owner_id, record_id)

        checked = parse_category({**current, **changes})
        if checked.is_left():
            raise ValidationError(checked.get_error()["message"], checked.get_error())

        updated = self.store.update(CATEGORIES, record_id, changes)
        return parse_category(updated).get_or_else(None)

    def delete(self, owner_id: str, record_id: str) -> None:
        # transactions keep their category_id and show up as "Unknown Category"
        _owned_record(self.store, CATEGORIES, owner_id, record_id)
        self.store.delete(CATEGORIES, record_id)
        logger.info(f"Deleted category {record_id}")


class DataService:
    """Whole-account operations from the settings page."""

    def __init__(self, store: RecordStore):
        self.store = store

    def export_csv(self, owner_id: str, today: Optional[date] = None) -> Tuple[str, str]:
        transactions, categories = load_owner_data(self.store, owner_id)
        return export_filename(today), transactions_to_csv(transactions, categories)

    def delete_all(self, owner_id: str) -> int:
        deleted = 0
        for kind in (TRANSACTIONS, CATEGORIES):
            for record in self.store.list(kind, owner_id):
                self.store.delete(kind, record["id"])
                deleted += 1
        logger.info(f"Deleted {deleted} records")
        return deleted


class AccountService:
    """Profile changes for the signed-in user."""

    def __init__(self, store: RecordStore, auth: AuthNotifier):
        self.store = store
        self.auth = auth

    def update_display_name(self, user_id: str, display_name: Optional[str]) -> User:
        current = self.store.get_user(user_id)
        if current is None:
            raise ProviderError(f"user {user_id} not found")

        changes = {"display_name": (display_name or "").strip() or None}
        checked = parse_user({**current, **changes})
        if checked.is_left():
            raise ValidationError(checked.get_error()["message"], checked.get_error())

        user = parse_user(self.store.update_user(user_id, changes)).get_or_else(None)
        self.auth.refresh_user(user)
        logger.info(f"Updated display name for {user_id}")
        return user
