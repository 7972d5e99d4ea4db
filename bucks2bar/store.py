"""Transaction store: the session's transaction collection and view state.

A :class:`TransactionStore` owns one :class:`~bucks2bar.models.AppState`.
Mutations keep the collection sorted newest first and persist through the
optional gateway; view-state setters never persist.
"""

from __future__ import annotations

import uuid
from typing import Any, Callable, Iterable, List, Mapping, Optional

from .errors import NotFoundError
from .logging_setup import get_logger
from .models import ALL_MONTHS, EDITABLE_FIELDS, AppState, Transaction
from .storage import PersistenceGateway

logger = get_logger(__name__)

DEMO_TRANSACTIONS = [
    {"type": "income", "amount": 4500, "category": "salary",
     "description": "January Salary", "date": "2026-01-31"},
    {"type": "expense", "amount": 1200, "category": "rent",
     "description": "January Rent Payment", "date": "2026-01-05"},
    {"type": "expense", "amount": 320, "category": "groceries",
     "description": "Weekly grocery shopping", "date": "2026-01-15"},
    {"type": "expense", "amount": 85, "category": "utilities",
     "description": "Electric bill", "date": "2026-01-20"},
    {"type": "income", "amount": 800, "category": "freelance",
     "description": "Website design project", "date": "2026-02-05"},
    {"type": "expense", "amount": 150, "category": "entertainment",
     "description": "Concert tickets", "date": "2026-02-10"},
    {"type": "expense", "amount": 245, "category": "groceries",
     "description": "Monthly grocery shopping", "date": "2026-02-12"},
    {"type": "income", "amount": 4500, "category": "salary",
     "description": "February Salary", "date": "2026-02-28"},
]


def _new_id() -> str:
    return str(uuid.uuid4())


class TransactionStore:
    """Manages the transaction collection for a single session."""

    def __init__(
        self,
        transactions: Optional[Iterable[Transaction]] = None,
        gateway: Optional[PersistenceGateway] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        """Initialize the store.

        Args:
            transactions: Initial collection (re-sorted on load).
            gateway: Persistence gateway; ``None`` keeps data in memory only.
            id_factory: Callable producing unique ids. Defaults to UUID4 strings.
        """
        self.state = AppState(transactions=list(transactions or []))
        self.gateway = gateway
        self.id_factory = id_factory or _new_id
        self._sort()

    @property
    def transactions(self) -> List[Transaction]:
        return self.state.transactions

    # Mutations --------------------------------------------------------------

    def add(self, record: Mapping[str, Any]) -> Transaction:
        """Add a transaction built from ``record`` (no id) and persist.

        Callers validate the fields beforehand; see
        :func:`bucks2bar.ingestion.validate_record`.
        """
        transaction = self._build(record)
        self.state.transactions.insert(0, transaction)
        self._sort()
        self.save()
        return transaction

    def extend(self, records: Iterable[Mapping[str, Any]]) -> List[Transaction]:
        """Append many records with fresh ids, re-sort once and persist once."""
        added = [self._build(record) for record in records]
        if not added:
            return added
        self.state.transactions.extend(added)
        self._sort()
        self.save()
        return added

    def update(self, transaction_id: str, patch: Mapping[str, Any]) -> Transaction:
        """Apply ``patch`` to the transaction with ``transaction_id`` and persist.

        Raises:
            NotFoundError: If no transaction has that id. Nothing is changed.
            ValueError: If the patch touches a field other than the editable ones.
        """
        unknown = sorted(set(patch) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(unknown)}")
        index = self._index_of(transaction_id)
        updated = self.state.transactions[index].with_changes(patch)
        self.state.transactions[index] = updated
        self._sort()
        self.save()
        return updated

    def remove(self, transaction_id: str) -> bool:
        """Remove the transaction with ``transaction_id``; ``False`` if absent."""
        remaining = [t for t in self.state.transactions if t.id != transaction_id]
        if len(remaining) == len(self.state.transactions):
            return False
        self.state.transactions = remaining
        if self.state.editing_id == transaction_id:
            self.state.editing_id = None
        self.save()
        return True

    def replace_all(self, transactions: Iterable[Transaction]) -> None:
        self.state.transactions = list(transactions)
        self._sort()
        self.save()

    def save(self) -> None:
        if self.gateway is not None:
            self.gateway.save_transactions(self.state.transactions)

    # Reads ----------------------------------------------------------------

    def get(self, transaction_id: str) -> Transaction:
        return self.state.transactions[self._index_of(transaction_id)]

    def filtered_view(self) -> List[Transaction]:
        """Transactions matching the month filter and search query, newest first."""
        filtered = self.state.transactions
        month = self.state.current_filter
        if month != ALL_MONTHS:
            filtered = [t for t in filtered if t.date.startswith(month)]
        if self.state.search_query.strip():
            query = self.state.search_query.lower()
            filtered = [t for t in filtered if query in t.description.lower()]
        return list(filtered)

    @property
    def is_filtering(self) -> bool:
        return self.state.current_filter != ALL_MONTHS or bool(self.state.search_query.strip())

    # View state -------------------------------------------------------------

    def set_filter(self, value: str) -> None:
        self.state.current_filter = value or ALL_MONTHS

    def set_search_query(self, value: str) -> None:
        self.state.search_query = value or ""

    def set_editing_id(self, transaction_id: Optional[str]) -> None:
        self.state.editing_id = transaction_id

    def start_edit(self, transaction_id: str) -> Transaction:
        transaction = self.get(transaction_id)
        self.set_editing_id(transaction_id)
        return transaction

    def cancel_edit(self) -> None:
        self.set_editing_id(None)

    # Internal ----------------------------------------------------------------

    def _build(self, record: Mapping[str, Any]) -> Transaction:
        return Transaction(id=self.id_factory(), **{k: record[k] for k in EDITABLE_FIELDS})

    def _index_of(self, transaction_id: str) -> int:
        for index, transaction in enumerate(self.state.transactions):
            if transaction.id == transaction_id:
                return index
        raise NotFoundError(f"Transaction '{transaction_id}' not found")

    def _sort(self) -> None:
        # list.sort is stable, so equal dates keep their relative order
        self.state.transactions.sort(key=lambda t: t.sort_key, reverse=True)


def seed_demo_data(store: TransactionStore) -> List[Transaction]:
    """Replace the store contents with the first-run demo transactions."""
    store.replace_all(
        Transaction(id=store.id_factory(), **record) for record in DEMO_TRANSACTIONS
    )
    return store.transactions


def open_session(
    gateway: Optional[PersistenceGateway] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> TransactionStore:
    """Create the session store, hydrated from storage or seeded with demo data."""
    gateway = gateway if gateway is not None else PersistenceGateway()
    stored = gateway.load_transactions()
    store = TransactionStore(stored, gateway=gateway, id_factory=id_factory)
    if stored is None:
        logger.info("No stored data found; seeding demo transactions")
        seed_demo_data(store)
    else:
        logger.info("Loaded %d stored transactions", len(stored))
    return store
