import asyncio
from typing import Any, Callable, Dict, List, Tuple

from inout.domain import Category, Transaction
from inout.functional import Either
from inout.logger import get_logger
from inout.provider import CATEGORIES, TRANSACTIONS, RecordStore
from inout.validation import parse_category, parse_transaction

logger = get_logger("reports")


def parse_records(
    kind: str, records: List[Dict[str, Any]], parser: Callable[[Dict[str, Any]], Either]
) -> tuple:
    """Keep the records that pass validation, log the rest."""
    parsed = []
    for record in records:
        result = parser(record)
        if result.is_right():
            parsed.append(result.get_or_else(None))
        else:
            error = result.get_error()
            logger.warning(f"Skipping invalid {kind} record: {error['message']}")
    return tuple(parsed)


async def _fetch(store: RecordStore, kind: str, owner_id: str, order_by: str, descending: bool) -> list:
    return await asyncio.to_thread(store.list, kind, owner_id, order_by, descending)


async def fetch_owner_data(
    store: RecordStore, owner_id: str
) -> Tuple[Tuple[Transaction, ...], Tuple[Category, ...]]:
    """Load an owner's transactions (newest first) and categories (by name) in parallel.

    A failed fetch is logged and treated as an empty list; the aggregation
    code never sees partial or malformed data.
    """
    tx_result, cat_result = await asyncio.gather(
        _fetch(store, TRANSACTIONS, owner_id, "date", True),
        _fetch(store, CATEGORIES, owner_id, "name", False),
        return_exceptions=True,
    )

    if isinstance(tx_result, Exception):
        logger.error(f"Failed to load transactions: {tx_result}")
        tx_result = []
    if isinstance(cat_result, Exception):
        logger.error(f"Failed to load categories: {cat_result}")
        cat_result = []

    transactions = parse_records(TRANSACTIONS, tx_result, parse_transaction)
    categories = parse_records(CATEGORIES, cat_result, parse_category)
    logger.debug(f"Fetched {len(transactions)} transactions and {len(categories)} categories")
    return transactions, categories
