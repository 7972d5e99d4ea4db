"""Import pipeline: parse CSV/JSON backups, validate records and merge them.

The pipeline runs in a fixed order:

1. :func:`detect_format` picks ``json`` or ``csv`` from the file extension.
2. :func:`parse_json` / :func:`parse_csv` turn the payload into candidate
   records.
3. :func:`validate_records` drops invalid candidates and collects
   ``Row N: reason`` diagnostics (logged, never fatal on their own).
4. :func:`import_file` asks the caller to confirm the accepted count.
5. :func:`commit_import` appends the accepted records to the store.

Nothing touches the store before step 5, so every failure earlier in the
pipeline leaves prior state untouched. Re-importing the same file adds the
records again; there is no duplicate detection.
"""

from __future__ import annotations

import csv
import json
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from .categories import TRANSACTION_TYPES, resolve_category
from .errors import FormatError, ValidationError
from .logging_setup import get_logger
from .models import Transaction
from .store import TransactionStore

logger = get_logger(__name__)

SUPPORTED_FORMATS = ("json", "csv")
CSV_MIN_TOKENS = 5
MAX_LOGGED_DIAGNOSTICS = 10


@dataclass
class ImportCandidates:
    """Validated records ready to commit, plus what was rejected."""
    records: List[Dict[str, Any]]
    diagnostics: List[str]
    attempted: int
    format: str

    @property
    def accepted(self) -> int:
        return len(self.records)


@dataclass
class ImportReport:
    attempted: int
    accepted: int
    committed: bool
    message: str
    diagnostics: List[str] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Format detection and parsing
# ---------------------------------------------------------------------------


def detect_format(name_or_extension: str) -> str:
    """Return ``json`` or ``csv`` for a filename or bare extension.

    Raises:
        FormatError: For any other extension.
    """
    extension = str(name_or_extension).strip().rsplit(".", 1)[-1].lower()
    if extension not in SUPPORTED_FORMATS:
        raise FormatError("Unsupported file format. Please use CSV or JSON files.")
    return extension


def decode_content(content: Union[bytes, str]) -> str:
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FormatError("Failed to import data. The file is not valid UTF-8 text.") from e


def parse_json(text: str) -> List[Any]:
    """Candidate records from a bare array or an object with ``transactions``."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError("Failed to import data. Please check the file format.") from e
    if isinstance(data, dict) and "transactions" in data:
        data = data["transactions"]
    if not isinstance(data, list):
        raise FormatError("Invalid data format.")
    return data


def split_csv_line(line: str) -> List[str]:
    """Tokenize one CSV line; quoted fields may hold commas and ``""`` escapes.

    Example:
        >>> split_csv_line('2026-01-05, expense,Rent,1200.00,"Rent, Jan"')
        ['2026-01-05', 'expense', 'Rent', '1200.00', 'Rent, Jan']
    """
    try:
        tokens = next(csv.reader([line]), [])
    except csv.Error as e:
        raise FormatError(f"Failed to import data. Malformed CSV line: {e}") from e
    return [token.strip() for token in tokens]


def parse_csv(text: str) -> List[Dict[str, Any]]:
    """Candidate records from ``Date,Type,Category,Amount,Description`` rows.

    The header line is discarded. Lines with fewer than five tokens are
    skipped. Category labels are resolved back to category keys.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise FormatError("CSV file is empty or invalid.")

    records: List[Dict[str, Any]] = []
    for line in lines[1:]:
        tokens = split_csv_line(line)
        if len(tokens) < CSV_MIN_TOKENS:
            continue
        date, type_, category, amount, description = tokens[:CSV_MIN_TOKENS]
        records.append(
            {
                "date": date,
                "type": type_.lower(),
                "category": resolve_category(category) if category else "",
                "amount": amount,
                "description": description,
            }
        )
    return records


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def coerce_amount(value: Any) -> Optional[float]:
    """Finite positive float from a number or numeric string, else ``None``."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def normalize_date(value: Any) -> Optional[str]:
    """``YYYY-MM-DD`` for a parseable calendar date string, else ``None``.

    Relative words pandas understands (``now``, ``today``) are not dates.
    """
    if not isinstance(value, str) or not value.strip()[:1].isdigit():
        return None
    try:
        parsed = pd.to_datetime(value.strip(), errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.date().isoformat()


def validate_record(record: Any) -> Tuple[Optional[Dict[str, Any]], List[str]]:
    """Check one candidate record.

    Returns:
        ``(normalized, [])`` when the record is valid, otherwise
        ``(None, issues)`` with human-readable reasons.
    """
    if not isinstance(record, Mapping):
        return None, ["invalid record"]

    issues: List[str] = []
    type_ = record.get("type")
    if type_ not in TRANSACTION_TYPES:
        issues.append("invalid type")
    amount = coerce_amount(record.get("amount"))
    if amount is None:
        issues.append("invalid amount")
    category = record.get("category")
    if not isinstance(category, str) or not category.strip():
        issues.append("missing category")
    date = normalize_date(record.get("date"))
    if date is None:
        issues.append("invalid date")
    description = record.get("description")
    if not isinstance(description, str) or not description.strip():
        issues.append("missing description")

    if issues:
        return None, issues
    return {
        "type": type_,
        "amount": amount,
        "category": category.strip(),
        "date": date,
        "description": description,
    }, []


def validate_records(records: Sequence[Any]) -> Tuple[List[Dict[str, Any]], List[str]]:
    """Split candidates into accepted records and ``Row N: ...`` diagnostics."""
    accepted: List[Dict[str, Any]] = []
    diagnostics: List[str] = []
    for index, record in enumerate(records, start=1):
        normalized, issues = validate_record(record)
        if issues:
            diagnostics.append(f"Row {index}: {', '.join(issues)}")
        else:
            accepted.append(normalized)
    return accepted, diagnostics


def parse_and_validate(content: Union[bytes, str], extension: str) -> ImportCandidates:
    """Run detection, parsing and validation without touching any store.

    Raises:
        FormatError: Unsupported extension or unparseable payload.
        ValidationError: No record survived validation.
    """
    fmt = detect_format(extension)
    text = decode_content(content)
    raw = parse_json(text) if fmt == "json" else parse_csv(text)
    accepted, diagnostics = validate_records(raw)

    if diagnostics:
        logger.warning(
            "Import warnings (%d of %d rejected): %s",
            len(diagnostics),
            len(raw),
            "; ".join(diagnostics[:MAX_LOGGED_DIAGNOSTICS]),
        )
    if not accepted:
        raise ValidationError("No valid transactions found in the file.", diagnostics)
    return ImportCandidates(records=accepted, diagnostics=diagnostics, attempted=len(raw), format=fmt)


# ---------------------------------------------------------------------------
# Confirmation and commit
# ---------------------------------------------------------------------------


def confirmation_prompt(count: int) -> str:
    return f"Import {count} transaction(s)? This will add them to your existing data."


def commit_import(store: TransactionStore, candidates: ImportCandidates) -> List[Transaction]:
    """Append accepted records to ``store`` with fresh ids and persist."""
    added = store.extend(candidates.records)
    logger.info("Imported %d transaction(s) from %s", len(added), candidates.format)
    return added


def import_file(
    store: TransactionStore,
    content: Union[bytes, str],
    filename: str,
    confirm: Callable[[int], bool],
) -> ImportReport:
    """Parse, validate, confirm and commit an uploaded file.

    ``confirm`` receives the accepted record count and returns whether to
    proceed. Declining leaves the store untouched.
    """
    candidates = parse_and_validate(content, filename)
    if not confirm(candidates.accepted):
        return ImportReport(
            attempted=candidates.attempted,
            accepted=candidates.accepted,
            committed=False,
            message="Import cancelled.",
            diagnostics=candidates.diagnostics,
        )
    added = commit_import(store, candidates)
    return ImportReport(
        attempted=candidates.attempted,
        accepted=candidates.accepted,
        committed=True,
        message=f"Successfully imported {len(added)} transaction(s)!",
        diagnostics=candidates.diagnostics,
        transactions=added,
    )
