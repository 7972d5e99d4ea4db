"""Export the transaction collection as CSV or JSON text."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from .categories import label_for
from .models import Transaction

CSV_HEADERS = ["Date", "Type", "Category", "Amount", "Description"]


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def to_csv(transactions: Iterable[Transaction]) -> str:
    """CSV with raw type, category label and an always-quoted description.

    Rows are joined with ``\\n`` and there is no trailing newline.
    """
    rows = [",".join(CSV_HEADERS)]
    for t in transactions:
        rows.append(
            ",".join(
                [
                    t.date,
                    t.type,
                    label_for(t.category),
                    f"{t.amount:.2f}",
                    _quote(t.description),
                ]
            )
        )
    return "\n".join(rows)


def to_json(transactions: Iterable[Transaction], now: Optional[datetime] = None) -> str:
    """Pretty-printed backup: ``{"exportDate": ..., "transactions": [...]}``."""
    exported_at = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    data = {
        "exportDate": exported_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "transactions": [t.to_dict() for t in transactions],
    }
    return json.dumps(data, indent=2)


def export_filename(kind: str, today: Optional[date] = None) -> str:
    """Download name for an export of ``kind`` (``csv`` or ``json``).

    Example:
        >>> export_filename("csv", date(2026, 2, 1))
        'bucks2bar_transactions_2026-02-01.csv'
    """
    stamp = (today or datetime.now(timezone.utc).date()).isoformat()
    if kind == "csv":
        return f"bucks2bar_transactions_{stamp}.csv"
    if kind == "json":
        return f"bucks2bar_backup_{stamp}.json"
    raise ValueError(f"Unknown export kind '{kind}'")
