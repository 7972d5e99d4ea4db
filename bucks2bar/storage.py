"""Persistence gateway for transactions, budget overrides and preferences.

The gateway serializes application data to JSON and stores it under three
independent keys of a key-value byte store:

* ``bucks2bar_data`` - ``{"version", "lastModified", "transactions"}``
* ``bucks2bar_budgets`` - flat mapping of category key to monthly limit
* ``bucks2bar_dark_mode`` - boolean display preference

Save failures raise :class:`~bucks2bar.errors.StorageError`; callers are
expected to have already applied the in-memory change, which is not rolled
back.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .categories import DEFAULT_BUDGETS
from .config import (
    BUDGETS_KEY,
    DARK_MODE_KEY,
    STORAGE_KEY,
    STORAGE_VERSION,
    WARNING_THRESHOLD,
)
from .db import KeyValueStore, SQLiteKeyValueStore
from .errors import StorageError
from .logging_setup import get_logger
from .models import Transaction

logger = get_logger(__name__)


@dataclass(frozen=True)
class QuotaStatus:
    used_bytes: int
    quota_bytes: Optional[int]
    usage_percent: float
    warning: bool


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PersistenceGateway:
    """Handles reading and writing application data to a key-value store."""

    def __init__(
        self,
        kv: Optional[KeyValueStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the gateway.

        Args:
            kv: Key-value store to use. Defaults to the SQLite store at
                ``config.DB_PATH``.
            clock: Callable returning the current time (used for
                ``lastModified``).
        """
        self.kv = kv if kv is not None else SQLiteKeyValueStore()
        self.clock = clock or _utcnow

    # Transactions ----------------------------------------------------------

    def save_transactions(self, transactions: Iterable[Transaction]) -> QuotaStatus:
        """Persist the full transaction collection.

        Returns:
            Quota usage after the write.

        Raises:
            StorageError: If the store rejects the write (e.g. quota exceeded).
        """
        payload = {
            "version": STORAGE_VERSION,
            "lastModified": int(self.clock().timestamp() * 1000),
            "transactions": [t.to_dict() for t in transactions],
        }
        try:
            self.kv.set(STORAGE_KEY, json.dumps(payload))
        except StorageError as e:
            logger.error("Failed to save data: %s", e)
            raise StorageError("Failed to save data. Storage might be full.") from e
        return self.check_quota()

    def load_transactions(self) -> Optional[List[Transaction]]:
        """Load stored transactions.

        Returns:
            The stored transactions, or ``None`` when nothing has been saved.

        Raises:
            StorageError: If the stored payload cannot be decoded.
        """
        stored = self.kv.get(STORAGE_KEY)
        if stored is None:
            return None
        try:
            data = json.loads(stored)
            if not isinstance(data, dict):
                raise TypeError("stored payload is not an object")
            records = data.get("transactions") or []
            return [Transaction.from_dict(record) for record in records]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.error("Failed to load data: %s", e)
            raise StorageError(f"Failed to load data: {e}") from e

    # Budgets ----------------------------------------------------------------

    def save_budgets(self, budgets: Mapping[str, Any]) -> None:
        """Persist budget overrides.

        Raises:
            ValueError: If a category is empty or a limit is not a positive number.
            StorageError: If the store rejects the write.
        """
        normalized: Dict[str, float] = {}
        for category, limit in budgets.items():
            if not category or not str(category).strip():
                raise ValueError("Budget category cannot be empty")
            value = _positive_limit(limit)
            if value is None:
                raise ValueError(f"Budget limit for '{category}' must be a positive number")
            normalized[str(category)] = value
        try:
            self.kv.set(BUDGETS_KEY, json.dumps(normalized))
        except StorageError as e:
            logger.error("Failed to save budgets: %s", e)
            raise

    def load_budgets(self) -> Optional[Dict[str, float]]:
        """Load budget overrides, or ``None`` if none are stored or readable.

        Entries with non-numeric or non-positive limits are skipped.
        """
        stored = self.kv.get(BUDGETS_KEY)
        if stored is None:
            return None
        try:
            data = json.loads(stored)
        except json.JSONDecodeError as e:
            logger.warning("Failed to load budgets: %s", e)
            return None
        if not isinstance(data, dict):
            return None
        budgets: Dict[str, float] = {}
        for category, limit in data.items():
            value = _positive_limit(limit)
            if value is not None:
                budgets[category] = value
        return budgets

    def get_budgets(self) -> Dict[str, float]:
        """Stored budget overrides, or a copy of the defaults."""
        stored = self.load_budgets()
        return stored if stored is not None else dict(DEFAULT_BUDGETS)

    def set_budget(self, category: str, limit: float) -> Dict[str, float]:
        budgets = self.get_budgets()
        budgets[category] = limit
        self.save_budgets(budgets)
        return self.get_budgets()

    def reset_budgets(self) -> None:
        self.kv.delete(BUDGETS_KEY)

    # Preferences ------------------------------------------------------------

    def save_dark_mode(self, enabled: bool) -> None:
        try:
            self.kv.set(DARK_MODE_KEY, json.dumps(bool(enabled)))
        except StorageError as e:
            logger.error("Failed to save dark mode preference: %s", e)
            raise

    def load_dark_mode(self) -> bool:
        stored = self.kv.get(DARK_MODE_KEY)
        if stored is None:
            return False
        try:
            return bool(json.loads(stored))
        except json.JSONDecodeError as e:
            logger.warning("Failed to load dark mode preference: %s", e)
            return False

    # Quota ------------------------------------------------------------------

    def check_quota(self) -> QuotaStatus:
        """Report storage usage, logging a warning past the threshold."""
        used = self.kv.total_bytes()
        quota = self.kv.quota_bytes
        percent = (used / quota) * 100 if quota else 0.0
        warning = bool(quota) and percent > WARNING_THRESHOLD * 100
        if warning:
            logger.warning("Storage usage at %.1f%% of available space", percent)
        return QuotaStatus(used_bytes=used, quota_bytes=quota, usage_percent=percent, warning=warning)


def _positive_limit(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number
