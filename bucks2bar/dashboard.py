"""Streamlit app for Bucks2Bar.

This module is the presentation adapter: it owns widgets, rendering and
session wiring, and calls into the store, analytics, import and export
modules with plain data. To run it::

    streamlit run bucks2bar/dashboard.py

or use ``run_dashboard.py`` at the project root.
"""

from __future__ import annotations

import os
import sys
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import streamlit as st

# Support both ``streamlit run bucks2bar/dashboard.py`` and package imports.
if __package__:
    from . import analytics
    from . import visualization as viz
    from .categories import TRANSACTION_TYPES, categories_for, is_valid_category, label_for
    from .errors import Bucks2BarError
    from .export import export_filename, to_csv, to_json
    from .formatting import escape_dollar_for_markdown, format_currency, format_transaction_amount
    from .ingestion import ImportCandidates, commit_import, confirmation_prompt, parse_and_validate, validate_record
    from .logging_setup import configure_logging
    from .models import ALL_MONTHS
    from .storage import PersistenceGateway
    from .store import TransactionStore, open_session
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from bucks2bar import analytics  # type: ignore
    from bucks2bar import visualization as viz  # type: ignore
    from bucks2bar.categories import (  # type: ignore
        TRANSACTION_TYPES,
        categories_for,
        is_valid_category,
        label_for,
    )
    from bucks2bar.errors import Bucks2BarError  # type: ignore
    from bucks2bar.export import export_filename, to_csv, to_json  # type: ignore
    from bucks2bar.formatting import (  # type: ignore
        escape_dollar_for_markdown,
        format_currency,
        format_transaction_amount,
    )
    from bucks2bar.ingestion import (  # type: ignore
        ImportCandidates,
        commit_import,
        confirmation_prompt,
        parse_and_validate,
        validate_record,
    )
    from bucks2bar.logging_setup import configure_logging  # type: ignore
    from bucks2bar.models import ALL_MONTHS  # type: ignore
    from bucks2bar.storage import PersistenceGateway  # type: ignore
    from bucks2bar.store import TransactionStore, open_session  # type: ignore

STORE_KEY = "bucks2bar_store"
PENDING_IMPORT_KEY = "pending_import"
TABS = ("Data", "Insights")

FORM_MESSAGES = {
    "invalid type": "Please choose income or expense",
    "invalid amount": "Amount must be greater than 0",
    "missing category": "Please choose a category",
    "invalid category": "Please choose a category that matches the transaction type",
    "invalid date": "Please enter a valid date",
    "missing description": "Please enter a description",
}

DARK_MODE_CSS = """
<style>
.stApp { background-color: #1e1e2e; color: #e0e0e0; }
</style>
"""


# ---------------------------------------------------------------------------
# Session wiring
# ---------------------------------------------------------------------------


def _ensure_session(gateway_factory: Callable[[], PersistenceGateway] = PersistenceGateway) -> TransactionStore:
    """Return the session store, creating it on first use."""
    state = st.session_state
    if STORE_KEY not in state:
        state[STORE_KEY] = open_session(gateway_factory())
    return state[STORE_KEY]


def submit_transaction(store: TransactionStore, values: Mapping[str, Any]) -> List[str]:
    """Validate form values and add or update a transaction.

    Returns:
        User-facing error messages; empty when the submit succeeded.
    """
    normalized, issues = validate_record(dict(values))
    txn_type, category = values.get("type"), values.get("category")
    if (
        txn_type in TRANSACTION_TYPES
        and "missing category" not in issues
        and not is_valid_category(txn_type, category.strip())
    ):
        issues.append("invalid category")
    if issues:
        return [FORM_MESSAGES.get(issue, issue) for issue in issues]
    if store.state.editing_id:
        store.update(store.state.editing_id, normalized)
        store.cancel_edit()
    else:
        store.add(normalized)
    return []


def stage_upload(name: str, content: bytes) -> Tuple[bool, str]:
    """Parse and validate an uploaded file, keeping the result for confirmation."""
    try:
        candidates = parse_and_validate(content, name)
    except Bucks2BarError as exc:
        st.session_state.pop(PENDING_IMPORT_KEY, None)
        return False, str(exc)
    st.session_state[PENDING_IMPORT_KEY] = candidates
    message = confirmation_prompt(candidates.accepted)
    if candidates.diagnostics:
        message += f" ({len(candidates.diagnostics)} of {candidates.attempted} rows were invalid and skipped.)"
    return True, message


def confirm_pending_import(store: TransactionStore) -> Tuple[bool, str]:
    """Commit the staged import into ``store``."""
    candidates: Optional[ImportCandidates] = st.session_state.pop(PENDING_IMPORT_KEY, None)
    if candidates is None:
        return False, "Nothing to import."
    try:
        added = commit_import(store, candidates)
    except Bucks2BarError as exc:
        return False, str(exc)
    return True, f"Successfully imported {len(added)} transaction(s)!"


def cancel_pending_import() -> None:
    st.session_state.pop(PENDING_IMPORT_KEY, None)


def _rerun() -> None:
    rerun = getattr(st, "rerun", None) or getattr(st, "experimental_rerun", None)
    if rerun is not None:
        rerun()


# ---------------------------------------------------------------------------
# Data tab
# ---------------------------------------------------------------------------


def _render_form(store: TransactionStore) -> None:
    editing = store.get(store.state.editing_id) if store.state.editing_id else None
    st.subheader("Update Transaction" if editing else "Add Transaction")

    type_index = TRANSACTION_TYPES.index(editing.type) if editing else 0
    txn_type = st.radio("Type", TRANSACTION_TYPES, index=type_index, horizontal=True,
                        format_func=str.capitalize)
    options = categories_for(txn_type)
    category_index = options.index(editing.category) if editing and editing.category in options else 0

    with st.form("transaction-form", clear_on_submit=not editing):
        amount = st.number_input("Amount", min_value=0.0, step=0.01,
                                 value=float(editing.amount) if editing else 0.0)
        category = st.selectbox("Category", options, index=category_index, format_func=label_for)
        when = st.date_input("Date", value=date.fromisoformat(editing.date) if editing else date.today())
        description = st.text_input("Description", value=editing.description if editing else "")
        submitted = st.form_submit_button("Update Transaction" if editing else "Add Transaction")

    if editing and st.button("Cancel edit"):
        store.cancel_edit()
        _rerun()

    if submitted:
        try:
            errors = submit_transaction(
                store,
                {
                    "type": txn_type,
                    "amount": amount,
                    "category": category,
                    "date": when.isoformat(),
                    "description": description.strip(),
                },
            )
        except Bucks2BarError as exc:
            st.error(str(exc))
            return
        if errors:
            for message in errors:
                st.error(message)
        else:
            _rerun()


def _render_transaction_list(store: TransactionStore) -> None:
    months = [ALL_MONTHS] + analytics.available_months(store.transactions)
    col_filter, col_search = st.columns(2)
    month = col_filter.selectbox(
        "Month",
        months,
        index=months.index(store.state.current_filter) if store.state.current_filter in months else 0,
        format_func=lambda m: "All months" if m == ALL_MONTHS else m,
    )
    store.set_filter(month)
    store.set_search_query(col_search.text_input("Search descriptions", value=store.state.search_query))

    transactions = store.filtered_view()
    if store.is_filtering:
        st.caption(f"{len(transactions)} result{'s' if len(transactions) != 1 else ''}")

    if not transactions:
        st.info("Try a different search term" if store.state.search_query
                else "No transactions found. Add your first transaction to get started!")
        return

    for t in transactions:
        cols = st.columns([2, 2, 4, 2, 1, 1])
        cols[0].write(date.fromisoformat(t.date).strftime("%b %d, %Y"))
        cols[1].write("💵 Income" if t.type == "income" else "💸 Expense")
        cols[2].markdown(f"**{t.description}**  \n{label_for(t.category)}")
        cols[3].markdown(format_transaction_amount(t).replace("$", "\\$"))
        if cols[4].button("Edit", key=f"edit-{t.id}"):
            store.start_edit(t.id)
            _rerun()
        if cols[5].button("Delete", key=f"delete-{t.id}"):
            try:
                store.remove(t.id)
            except Bucks2BarError as exc:
                st.error(str(exc))
            else:
                _rerun()


def _render_import_export(store: TransactionStore) -> None:
    st.subheader("Import / Export")
    col_csv, col_json = st.columns(2)
    col_csv.download_button("Export CSV", to_csv(store.transactions),
                            file_name=export_filename("csv"), mime="text/csv")
    col_json.download_button("Export JSON", to_json(store.transactions),
                             file_name=export_filename("json"), mime="application/json")

    uploaded = st.file_uploader("Import CSV or JSON", type=["csv", "json"])
    if uploaded is not None and st.button("Read file"):
        ok, message = stage_upload(uploaded.name, uploaded.getvalue())
        (st.info if ok else st.error)(message)

    if PENDING_IMPORT_KEY in st.session_state:
        col_yes, col_no = st.columns(2)
        if col_yes.button("Confirm import"):
            ok, message = confirm_pending_import(store)
            (st.success if ok else st.error)(message)
        if col_no.button("Cancel import"):
            cancel_pending_import()


def render_data_tab(store: TransactionStore) -> None:
    _render_form(store)
    st.divider()
    _render_transaction_list(store)
    st.divider()
    _render_import_export(store)


# ---------------------------------------------------------------------------
# Insights tab
# ---------------------------------------------------------------------------


def render_insights_tab(store: TransactionStore, gateway: PersistenceGateway) -> None:
    totals = analytics.summary_totals(store.transactions)
    col_income, col_expense, col_net = st.columns(3)
    col_income.metric("Total Income", format_currency(totals["total_income"]))
    col_expense.metric("Total Expenses", format_currency(totals["total_expenses"]))
    col_net.metric("Net Balance", format_currency(totals["net_balance"]))

    months = analytics.available_months(store.transactions)
    years = sorted({int(m[:4]) for m in months}, reverse=True) or [date.today().year]
    year = st.selectbox("Year", years)
    st.plotly_chart(viz.create_monthly_chart(analytics.monthly_series(store.transactions, year)),
                    use_container_width=True)
    st.plotly_chart(viz.create_category_pie_chart(analytics.category_breakdown(store.transactions)),
                    use_container_width=True)

    month = analytics.current_month()
    budgets = gateway.get_budgets()
    statuses = analytics.budget_utilization(store.transactions, budgets, month)
    st.subheader(f"Budgets for {month}")
    st.plotly_chart(viz.create_budget_chart(statuses), use_container_width=True)
    counts = viz.tier_counts(statuses)
    if statuses:
        st.caption(f"{counts['danger']} at 90% or more, {counts['warning']} at 70% or more, {counts['normal']} on track")
    for status in statuses:
        st.markdown(
            f"{status.label}: {escape_dollar_for_markdown(status.spent)} / "
            f"{escape_dollar_for_markdown(status.limit)}"
        )

    with st.expander("Edit budgets"):
        with st.form("budget-form"):
            edited: Dict[str, float] = {
                category: st.number_input(label_for(category), min_value=0.01,
                                          value=float(limit), step=10.0)
                for category, limit in budgets.items()
            }
            if st.form_submit_button("Save budgets"):
                try:
                    gateway.save_budgets(edited)
                except (Bucks2BarError, ValueError) as exc:
                    st.error(str(exc))
                else:
                    st.success("Budgets saved.")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Entry point for the Streamlit app."""
    configure_logging()
    st.set_page_config(page_title="Bucks2Bar", layout="wide", initial_sidebar_state="expanded")
    st.title("Bucks2Bar - Income & Expense Tracker")

    try:
        store = _ensure_session()
    except Bucks2BarError as exc:
        st.error(str(exc))
        st.stop()
    gateway = store.gateway

    stored_dark_mode = gateway.load_dark_mode()
    dark_mode = st.sidebar.toggle("Dark mode", value=stored_dark_mode)
    if dark_mode != stored_dark_mode:
        try:
            gateway.save_dark_mode(dark_mode)
        except Bucks2BarError as exc:
            st.sidebar.error(str(exc))
    if dark_mode:
        st.markdown(DARK_MODE_CSS, unsafe_allow_html=True)

    quota = gateway.check_quota()
    if quota.warning:
        st.warning(
            f"Storage Warning: You're using {quota.usage_percent:.1f}% of available space. "
            "Export your data to back it up."
        )

    tab = st.sidebar.radio("View", TABS)
    if tab == "Insights":
        render_insights_tab(store, gateway)
    else:
        render_data_tab(store)


if __name__ == "__main__":
    main()
