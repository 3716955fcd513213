"""
dashboard.py - Streamlit UI entrypoint and orchestration

This module wires the UI components (finansmart.ui.components) with the
ledger, the aggregation helpers and the sheet sync session.

Design notes:
 - Keep the dashboard responsible only for UI orchestration and presentation.
 - All persistence rules live in finansmart.ledger, totals in
   finansmart.aggregation, network access in finansmart.sync.
 - Streamlit reruns this script on every interaction, so the ledger is
   rebuilt from local storage each time; only the sync status is kept in
   st.session_state.
"""

import streamlit as st

from finansmart.aggregation import build_snapshot
from finansmart.config import Settings
from finansmart.ledger import Ledger
from finansmart.storage import LocalStorage
from finansmart.sync import SheetSyncClient, SyncSession, SyncStatus
from finansmart.ui import components

SYNC_STATUS_KEY = "sync_status"
SYNC_ERROR_KEY = "sync_error"


def _sidebar_sync(ledger: Ledger, session: SyncSession):
    """Endpoint setting plus the save/load buttons."""
    st.sidebar.header("Cloud sheet")
    url = st.sidebar.text_input(
        "Apps Script URL",
        value=ledger.sheet_url,
        placeholder="Paste the Apps Script URL here...",
    )
    if url.strip() != ledger.sheet_url:
        ledger.sheet_url = url

    # the session object is rebuilt per run; carry its status across reruns
    session.status = SyncStatus(st.session_state.get(SYNC_STATUS_KEY, SyncStatus.IDLE.value))
    busy = session.is_syncing

    if st.sidebar.button("Save to cloud", disabled=busy, use_container_width=True):
        if not ledger.sheet_url:
            st.sidebar.warning("Please configure the sheet URL first.")
        else:
            st.session_state[SYNC_STATUS_KEY] = SyncStatus.SYNCING.value
            with st.spinner("Syncing..."):
                session.save_to_sheet()
            st.session_state[SYNC_STATUS_KEY] = session.status.value
            st.session_state[SYNC_ERROR_KEY] = str(session.last_error or "")

    if ledger.sheet_url:
        replace_ok = st.sidebar.checkbox("Replace my local data with the sheet contents")
        if st.sidebar.button("Load from sheet", disabled=busy, use_container_width=True):
            st.session_state[SYNC_STATUS_KEY] = SyncStatus.SYNCING.value
            with st.spinner("Loading..."):
                loaded = session.load_from_sheet(confirm=lambda _msg: replace_ok)
            if loaded:
                st.session_state[SYNC_STATUS_KEY] = session.status.value
                st.sidebar.success("Data loaded successfully!")
            elif session.status == SyncStatus.ERROR:
                st.session_state[SYNC_STATUS_KEY] = session.status.value
                st.session_state[SYNC_ERROR_KEY] = str(session.last_error or "")
            else:
                st.session_state[SYNC_STATUS_KEY] = SyncStatus.IDLE.value
                st.sidebar.info("Tick the box above to confirm replacing local data.")

    status = SyncStatus(st.session_state.get(SYNC_STATUS_KEY, SyncStatus.IDLE.value))
    if status == SyncStatus.SUCCESS:
        st.sidebar.success("Data saved!")
    elif status == SyncStatus.ERROR:
        st.sidebar.error(
            "Sync failed. Check that the Apps Script URL is correct and allows access. "
            + st.session_state.get(SYNC_ERROR_KEY, "")
        )


def main():
    """
    Streamlit page: sidebar handles the cloud sheet, the main area shows the
    entry form and the ledger panels.
    """
    st.set_page_config(page_title="FinanSmart", layout="wide")
    st.title("FinanSmart ledger")

    settings = Settings.from_env()
    ledger = Ledger(LocalStorage(settings.data_file), default_sheet_url=settings.sheet_url)
    session = SyncSession(ledger, SheetSyncClient(timeout=settings.sync_timeout))

    _sidebar_sync(ledger, session)

    with st.expander("New entry", expanded=False):
        components.display_entry_form(ledger.add, settings.card_names)

    snap = build_snapshot(ledger.snapshot(), settings.card_names)
    components.display_overdue_banner(snap.any_overdue)

    col_left, col_mid, col_right = st.columns([1, 1, 2])
    with col_left:
        components.display_income_table(snap.groups.income, snap.totals.income, snap.today)
        components.display_summary(snap.totals, snap.score)
    with col_mid:
        components.display_fixed_table(snap.groups.fixed, snap.totals.fixed_pending, snap.today, ledger.toggle_paid)
        components.display_card_summary(snap.cards, snap.totals.cards_pending)
    with col_right:
        card_cols = st.columns(2)
        for i, name in enumerate(settings.card_names):
            with card_cols[i % 2]:
                components.display_card_detail(name, snap.groups.by_card[name], snap.today)
        components.display_misc_table(snap.groups.misc, snap.today)

    st.markdown("---")
    components.display_expense_share_chart(snap.groups)
    components.display_export(ledger.snapshot())
    components.display_manage_records(ledger)


if __name__ == "__main__":
    main()
