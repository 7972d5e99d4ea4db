"""Tests for the key-value stores and the persistence gateway."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import pytest

from bucks2bar.categories import DEFAULT_BUDGETS
from bucks2bar.config import BUDGETS_KEY, DARK_MODE_KEY, STORAGE_KEY
from bucks2bar.db import KeyValueStore, MemoryKeyValueStore, SQLiteKeyValueStore, entry_size
from bucks2bar.errors import StorageError
from bucks2bar.models import Transaction
from bucks2bar.storage import PersistenceGateway

FIXED_NOW = datetime(2026, 2, 1, tzinfo=timezone.utc)


def _gateway(kv=None) -> PersistenceGateway:
    return PersistenceGateway(kv or MemoryKeyValueStore(), clock=lambda: FIXED_NOW)


def _txn(txn_id: str = "t1", date: str = "2026-01-05") -> Transaction:
    return Transaction(id=txn_id, type="expense", amount=1200, category="rent",
                       date=date, description="Rent")


@pytest.fixture(params=["memory", "sqlite"])
def kv(request, tmp_path):
    if request.param == "memory":
        return MemoryKeyValueStore(quota_bytes=1000)
    return SQLiteKeyValueStore(tmp_path / "kv.db", quota_bytes=1000)


def test_kv_get_set_delete(kv) -> None:
    assert kv.get("a") is None
    kv.set("a", "one")
    kv.set("a", "two")
    assert kv.get("a") == "two"
    assert kv.total_bytes() == entry_size("a", "two")
    kv.delete("a")
    assert kv.get("a") is None
    assert kv.total_bytes() == 0


def test_kv_counts_utf8_bytes(kv) -> None:
    kv.set("k", "é€")
    assert kv.total_bytes() == 1 + 5


def test_kv_rejects_writes_over_quota(kv) -> None:
    kv.set("small", "x")
    with pytest.raises(StorageError):
        kv.set("big", "x" * 1000)
    assert kv.get("big") is None
    assert kv.get("small") == "x"


def test_partial_store_cannot_be_created() -> None:
    class ReadOnlyStore(KeyValueStore):
        def get(self, key):
            return None

    with pytest.raises(TypeError):
        ReadOnlyStore()


def test_sqlite_store_persists_across_instances(tmp_path) -> None:
    path = tmp_path / "nested" / "kv.db"
    SQLiteKeyValueStore(path).set("key", "value")
    assert SQLiteKeyValueStore(path).get("key") == "value"


def test_save_transactions_payload() -> None:
    kv = MemoryKeyValueStore()
    status = _gateway(kv).save_transactions([_txn()])
    payload = json.loads(kv.get(STORAGE_KEY))
    assert payload["version"] == "1.0"
    assert payload["lastModified"] == int(FIXED_NOW.timestamp() * 1000)
    assert payload["transactions"][0]["id"] == "t1"
    assert status.used_bytes == kv.total_bytes()
    assert status.warning is False


def test_load_transactions_round_trip(tmp_path) -> None:
    gateway = _gateway(SQLiteKeyValueStore(tmp_path / "kv.db"))
    assert gateway.load_transactions() is None
    gateway.save_transactions([_txn("b", "2026-02-01"), _txn("a")])
    loaded = gateway.load_transactions()
    assert [t.id for t in loaded] == ["b", "a"]
    assert loaded[1] == _txn("a")


def test_load_transactions_wrapped_empty_list() -> None:
    gateway = _gateway()
    gateway.save_transactions([])
    assert gateway.load_transactions() == []


@pytest.mark.parametrize("stored", ["{broken", "[1, 2]", '{"transactions": [{"id": "x"}]}'])
def test_load_transactions_corrupt_payload(stored: str) -> None:
    kv = MemoryKeyValueStore()
    kv.set(STORAGE_KEY, stored)
    with pytest.raises(StorageError):
        _gateway(kv).load_transactions()


def test_save_transactions_over_quota() -> None:
    gateway = _gateway(MemoryKeyValueStore(quota_bytes=50))
    with pytest.raises(StorageError, match="Storage might be full"):
        gateway.save_transactions([_txn()])


def test_quota_warning_past_threshold(caplog) -> None:
    kv = MemoryKeyValueStore(quota_bytes=100)
    kv.set("k", "x" * 90)
    with caplog.at_level(logging.WARNING, logger="bucks2bar"):
        status = _gateway(kv).check_quota()
    assert status.used_bytes == 91
    assert status.usage_percent == pytest.approx(91.0)
    assert status.warning is True
    assert "Storage usage" in caplog.text


def test_budgets_default_when_absent() -> None:
    gateway = _gateway()
    assert gateway.load_budgets() is None
    budgets = gateway.get_budgets()
    assert budgets == DEFAULT_BUDGETS
    budgets["rent"] = 1.0
    assert gateway.get_budgets()["rent"] == 1500.0


def test_set_and_reset_budget() -> None:
    gateway = _gateway()
    budgets = gateway.set_budget("groceries", 650)
    assert budgets["groceries"] == 650.0
    assert budgets["rent"] == 1500.0
    gateway.reset_budgets()
    assert gateway.load_budgets() is None
    assert gateway.get_budgets() == DEFAULT_BUDGETS


def test_empty_budget_map_is_kept() -> None:
    gateway = _gateway()
    gateway.save_budgets({})
    assert gateway.load_budgets() == {}
    assert gateway.get_budgets() == {}
    gateway.reset_budgets()
    assert gateway.get_budgets() == DEFAULT_BUDGETS


@pytest.mark.parametrize("budgets", [{"": 10}, {"rent": 0}, {"rent": -5}, {"rent": "lots"}])
def test_save_budgets_validates(budgets) -> None:
    gateway = _gateway()
    with pytest.raises(ValueError):
        gateway.save_budgets(budgets)
    assert gateway.load_budgets() is None


def test_load_budgets_skips_bad_entries() -> None:
    kv = MemoryKeyValueStore()
    kv.set(BUDGETS_KEY, json.dumps({"rent": 900, "transport": "abc", "fun": -1}))
    assert _gateway(kv).load_budgets() == {"rent": 900.0}


def test_load_budgets_unreadable_falls_back() -> None:
    kv = MemoryKeyValueStore()
    kv.set(BUDGETS_KEY, "{nope")
    gateway = _gateway(kv)
    assert gateway.load_budgets() is None
    assert gateway.get_budgets() == DEFAULT_BUDGETS


def test_dark_mode_preference() -> None:
    kv = MemoryKeyValueStore()
    gateway = _gateway(kv)
    assert gateway.load_dark_mode() is False
    gateway.save_dark_mode(True)
    assert gateway.load_dark_mode() is True
    kv.set(DARK_MODE_KEY, "garbage")
    assert gateway.load_dark_mode() is False
