"""Persistence provider contract and the in-memory reference store."""
import copy
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol
from uuid import uuid4

from inout.exceptions import ProviderError
from inout.logger import get_logger

TRANSACTIONS = "transactions"
CATEGORIES = "categories"
KINDS = (TRANSACTIONS, CATEGORIES)

logger = get_logger("provider")


class RecordStore(Protocol):
    """What the services need from a hosted backend client.

    Every ``list`` call is scoped to one owner and returns fresh copies.
    """

    def list(
        self, kind: str, owner_id: str, order_by: Optional[str] = None, descending: bool = False
    ) -> List[Dict[str, Any]]:
        ...

    def create(self, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def update(self, kind: str, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def delete(self, kind: str, record_id: str) -> None:
        ...

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        ...

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        ...


class InMemoryStore:
    """Dict-backed RecordStore, optionally seeded from a JSON file."""

    def __init__(self, seed: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self._records: Dict[str, Dict[str, Dict[str, Any]]] = {kind: {} for kind in KINDS}
        self._users: Dict[str, Dict[str, Any]] = {}
        seed = seed or {}
        for user in seed.get("users", []):
            self._users[user["id"]] = dict(user)
        for kind in KINDS:
            for record in seed.get(kind, []):
                self._records[kind][record["id"]] = dict(record)

    @classmethod
    def from_file(cls, path: str) -> "InMemoryStore":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ProviderError(f"Failed to load seed data from {path}: {e}") from e
        logger.info(
            f"Loaded seed {Path(path).name}: {len(data.get(TRANSACTIONS, []))} transactions, "
            f"{len(data.get(CATEGORIES, []))} categories"
        )
        return cls(data)

    def _table(self, kind: str) -> Dict[str, Dict[str, Any]]:
        if kind not in self._records:
            raise ProviderError(f"Unknown record kind: {kind}")
        return self._records[kind]

    def list(
        self, kind: str, owner_id: str, order_by: Optional[str] = None, descending: bool = False
    ) -> List[Dict[str, Any]]:
        rows = [copy.deepcopy(r) for r in self._table(kind).values() if r.get("owner_id") == owner_id]
        if order_by:
            rows.sort(key=lambda r: str(r.get(order_by) or ""), reverse=descending)
        return rows

    def create(self, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        table = self._table(kind)
        stored = dict(record)
        stored.setdefault("id", f"{kind[:3]}_{uuid4().hex[:12]}")
        stored.setdefault("created_at", datetime.now().isoformat(timespec="seconds"))
        if stored["id"] in table:
            raise ProviderError(f"{kind} record {stored['id']} already exists")
        table[stored["id"]] = stored
        return copy.deepcopy(stored)

    def update(self, kind: str, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        table = self._table(kind)
        if record_id not in table:
            raise ProviderError(f"{kind} record {record_id} not found")
        updated = {**table[record_id], **changes, "id": record_id}
        table[record_id] = updated
        return copy.deepcopy(updated)

    def delete(self, kind: str, record_id: str) -> None:
        table = self._table(kind)
        if record_id not in table:
            raise ProviderError(f"{kind} record {record_id} not found")
        del table[record_id]

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        user = self._users.get(user_id)
        return dict(user) if user else None

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if user_id not in self._users:
            raise ProviderError(f"user {user_id} not found")
        updated = {**self._users[user_id], **changes, "id": user_id}
        self._users[user_id] = updated
        return dict(updated)

    def users(self) -> List[Dict[str, Any]]:
        return [dict(u) for u in self._users.values()]
