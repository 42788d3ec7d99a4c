"""Provider boundary: turn raw records into domain objects.

Records come back from the store as plain dicts. Each parser is a chain of
small ``Either`` steps; the first failing step short-circuits the rest, so
anything malformed is reported as ``Left`` and never reaches the aggregation
code.
"""
import math
from datetime import date, datetime
from numbers import Real
from typing import Any, Callable, Dict, Mapping, Optional

from inout.domain import TRANSACTION_TYPES, Category, Transaction, User
from inout.functional import Either, Left, Right

Step = Callable[[Dict[str, Any]], Either]


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accept ISO strings, dates and datetimes; return a naive local datetime."""
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, date):
        ts = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return ts


def _error(code: str, message: str, **extra) -> Left:
    return Left({"error": code, "message": message, **extra})


def _require(label: str, *keys: str) -> Step:
    def _step(record: Dict[str, Any]) -> Either:
        for key in keys:
            if not record.get(key):
                if key == "id":
                    return _error("missing_field", f"{label} has no id", field="id")
                return _error(
                    "missing_field", f"{label} {record['id']} has no {key}", field=key, id=record["id"]
                )
        return Right(record)

    return _step


def _optional_text(label: str, *keys: str) -> Step:
    """Optional string fields: non-strings are rejected, blanks become None."""
    def _step(record: Dict[str, Any]) -> Either:
        cleaned = dict(record)
        for key in keys:
            value = record.get(key)
            if value is not None and not isinstance(value, str):
                return _error(
                    "invalid_field",
                    f"{label} {record['id']} field {key} is not text",
                    field=key,
                    id=record["id"],
                )
            cleaned[key] = value or None
        return Right(cleaned)

    return _step


def _check_type(record: Dict[str, Any]) -> Either:
    if record.get("type") not in TRANSACTION_TYPES:
        return _error(
            "invalid_type", f"Transaction {record['id']} has unknown type {record.get('type')!r}", id=record["id"]
        )
    return Right(record)


def _check_amount(record: Dict[str, Any]) -> Either:
    record_id = record["id"]
    amount = record.get("amount")
    if isinstance(amount, str):
        try:
            amount = float(amount)
        except ValueError:
            return _error("invalid_amount", f"Transaction {record_id} amount is not a number", id=record_id)
    if isinstance(amount, bool) or not isinstance(amount, Real):
        return _error("invalid_amount", f"Transaction {record_id} amount is not a number", id=record_id)
    if not math.isfinite(amount):
        return _error("invalid_amount", f"Transaction {record_id} amount is not finite", id=record_id)
    if amount < 0:
        return _error(
            "negative_amount",
            f"Transaction {record_id} amount must not be negative",
            id=record_id,
            amount=amount,
        )
    return Right({**record, "amount": float(amount)})


def _check_date(record: Dict[str, Any]) -> Either:
    when = parse_timestamp(record.get("date"))
    if when is None:
        return _error("invalid_date", f"Transaction {record['id']} has an unreadable date", id=record["id"])
    return Right({**record, "date": when})


def _build_transaction(record: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=str(record["id"]),
        type=record["type"],
        amount=record["amount"],
        owner_id=str(record["owner_id"]),
        date=record["date"],
        description=record["description"],
        category_id=record["category_id"],
        created_at=parse_timestamp(record.get("created_at")),
    )


def parse_transaction(record: Mapping[str, Any]) -> Either[dict, Transaction]:
    return (
        Right(dict(record))
        .bind(_require("Transaction", "id", "owner_id"))
        .bind(_check_type)
        .bind(_check_amount)
        .bind(_check_date)
        .bind(_optional_text("Transaction", "description", "category_id"))
        .map(_build_transaction)
    )


def _check_name(record: Dict[str, Any]) -> Either:
    name = (record["name"] or "").strip()
    if not name:
        return _error("empty_name", f"Category {record['id']} has an empty name", id=record["id"])
    return Right({**record, "name": name})


def _build_category(record: Dict[str, Any]) -> Category:
    return Category(
        id=str(record["id"]),
        name=record["name"],
        owner_id=str(record["owner_id"]),
        created_at=parse_timestamp(record.get("created_at")) or datetime.min,
        icon=record["icon"],
        color=record["color"],
    )


def parse_category(record: Mapping[str, Any]) -> Either[dict, Category]:
    return (
        Right(dict(record))
        .bind(_require("Category", "id"))
        .bind(_optional_text("Category", "name", "icon", "color"))
        .bind(_check_name)
        .bind(_require("Category", "owner_id"))
        .map(_build_category)
    )


def parse_user(record: Optional[Mapping[str, Any]]) -> Either[dict, User]:
    if not record:
        return _error("missing_user", "No user record")
    return (
        Right(dict(record))
        .bind(_require("User", "id", "email"))
        .bind(_optional_text("User", "display_name"))
        .map(lambda r: User(id=str(r["id"]), email=str(r["email"]), display_name=r["display_name"]))
    )
