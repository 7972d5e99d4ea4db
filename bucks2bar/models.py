"""Data models for transactions and per-session application state."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

ALL_MONTHS = "all"

# Fields a caller may supply or patch; ``id`` and ``sort_key`` are managed by the store.
EDITABLE_FIELDS = ("type", "amount", "category", "date", "description")


def compute_sort_key(date: str) -> int:
    """Epoch milliseconds of ``date`` (``YYYY-MM-DD``) at UTC midnight.

    Raises:
        ValueError: If ``date`` is not an ISO calendar date.
    """
    parsed = datetime.strptime(str(date).strip()[:10], "%Y-%m-%d")
    return int(parsed.replace(tzinfo=timezone.utc).timestamp() * 1000)


@dataclass
class Transaction:
    """A single dated income or expense record."""
    id: str
    type: str
    amount: float
    category: str
    date: str
    description: str
    sort_key: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self.amount = float(self.amount)
        self.sort_key = compute_sort_key(self.date)

    def with_changes(self, changes: Mapping[str, Any]) -> "Transaction":
        """Return a copy with ``changes`` applied and the sort key recomputed."""
        return replace(self, **dict(changes))

    def to_dict(self) -> Dict[str, Any]:
        # ``timestamp`` is the persisted name of the sort key
        return {
            "id": self.id,
            "type": self.type,
            "amount": self.amount,
            "category": self.category,
            "date": self.date,
            "description": self.description,
            "timestamp": self.sort_key,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Transaction":
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            amount=float(data["amount"]),
            category=str(data["category"]),
            date=str(data["date"]),
            description=str(data["description"]),
        )


@dataclass
class AppState:
    """Session state: the transaction collection plus transient view state."""
    transactions: List[Transaction] = field(default_factory=list)
    current_filter: str = ALL_MONTHS
    search_query: str = ""
    editing_id: Optional[str] = None
