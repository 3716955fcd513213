"""
components.py - reusable Streamlit components / forms / displays

This module contains pure-UI helpers used by the dashboard:
 - display_entry_form(on_submit, card_names)
 - display_overdue_banner / display_summary
 - display_income_table / display_fixed_table / display_misc_table
 - display_card_summary / display_card_detail
 - display_expense_share_chart / display_export
 - display_manage_records(ledger)

Components never touch storage directly: they receive data from the
aggregation snapshot and hand user actions back through callbacks.
"""

from typing import Callable, Dict, List, Optional
from io import BytesIO
import datetime
import time

import altair as alt
import pandas as pd
import streamlit as st

from finansmart.aggregation import CardSummary, LedgerGroups, Totals, is_overdue
from finansmart.formatting import format_day_month, format_money
from finansmart.models import TYPE_LABELS, Transaction, TransactionInput, TransactionType

OVERDUE_STYLE = "background-color: #fde2e2; color: #c00000; font-weight: bold"


# Trigger a Streamlit rerun in a way compatible with multiple Streamlit versions.
def _trigger_rerun():
    if hasattr(st, "rerun"):
        st.rerun()
        return
    if hasattr(st, "experimental_rerun"):
        st.experimental_rerun()
        return
    # Last resort: toggle a session_state key
    st.session_state["_rerun_flag"] = st.session_state.get("_rerun_flag", 0) + 1
    st.session_state["_rerun_at"] = int(time.time())


def display_entry_form(on_submit: Callable[[TransactionInput], Optional[Transaction]], card_names: List[str]):
    """
    Display the 'New entry' form.

    The type selector sits outside the st.form so the card fields can appear
    as soon as "Card" is picked. on_submit receives a TransactionInput and
    returns the created Transaction, or None when the ledger skipped it.
    """
    st.subheader("New entry")
    type_options = list(TransactionType)
    tx_type = st.radio(
        "Type",
        options=type_options,
        index=type_options.index(TransactionType.FIXED_EXPENSE),
        format_func=lambda t: TYPE_LABELS[t],
        horizontal=True,
        key="entry_type",
    )
    with st.form(key="entry_form", clear_on_submit=True):
        description = st.text_input("Description")
        amount = st.text_input("Amount", placeholder="0.00")
        date_val = st.date_input("Date / due date", value=datetime.date.today())
        card_name = None
        installments = None
        if tx_type == TransactionType.CARD_EXPENSE:
            col1, col2 = st.columns(2)
            with col1:
                card_name = st.selectbox("Card", options=card_names)
            with col2:
                installments = st.text_input("Installment", placeholder="e.g. 2/6")

        submitted = st.form_submit_button("Add entry")
        if submitted:
            entry = TransactionInput(
                description=description,
                amount=amount.replace(",", "."),
                date=date_val.isoformat() if date_val else "",
                type=tx_type,
                card_name=card_name,
                installments=installments,
            )
            created = on_submit(entry)
            if created is None:
                st.error("Description, a numeric amount and a date are required.")
            else:
                st.success("Entry added.")


def display_overdue_banner(any_overdue: bool):
    if any_overdue:
        st.error("Attention: you have bills with overdue payments!")


def _records_frame(records: List[Transaction], today: datetime.date, with_card: bool = False) -> pd.DataFrame:
    rows = []
    for t in records:
        row = {
            "Date": format_day_month(t.date),
            "Description": t.description,
            "Amount": format_money(t.amount),
            "Paid": t.is_paid,
        }
        if with_card:
            row["Installment"] = t.installments or "-"
        row["_overdue"] = is_overdue(t, today)
        rows.append(row)
    columns = ["Date", "Description", "Amount", "Paid"] + (["Installment"] if with_card else []) + ["_overdue"]
    return pd.DataFrame(rows, columns=columns)


def _show_frame(df: pd.DataFrame):
    """Render a records frame, painting overdue rows red."""
    if df.empty:
        st.caption("No entries")
        return
    overdue = df["_overdue"].tolist()
    view = df.drop(columns=["_overdue"])
    styled = view.style.apply(
        lambda row: [OVERDUE_STYLE if overdue[row.name] else "" for _ in row],
        axis=1,
    )
    st.dataframe(styled, use_container_width=True, hide_index=True)


def display_income_table(income: List[Transaction], total, today: datetime.date):
    st.markdown("#### Income")
    df = _records_frame(income, today).drop(columns=["Paid"])
    _show_frame(df)
    st.markdown(f"**Total: {format_money(total)}**")


def display_summary(totals: Totals, score: float):
    """Consolidated summary: income, expenses and what is left."""
    st.markdown("#### Summary")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Income", format_money(totals.income))
    col2.metric("Expenses", format_money(totals.expenses))
    col3.metric("Left", format_money(totals.balance))
    col4.metric("Efficiency", f"{score:.0f}%")
    if totals.balance < 0:
        st.warning("Expenses exceed income for the recorded period.")


def display_fixed_table(
    fixed: List[Transaction],
    pending,
    today: datetime.date,
    on_toggle: Callable[[str], object],
):
    """
    Fixed expenses with one "paid" checkbox per row. Checkbox changes go
    through on_toggle(record_id) before the script reruns.
    """
    st.markdown("#### Fixed expenses")
    if not fixed:
        st.caption("No entries")
    for t in fixed:
        late = is_overdue(t, today)
        col1, col2, col3, col4 = st.columns([1, 4, 2, 1])
        label = format_day_month(t.date)
        col1.markdown(f":red[**{label}**]" if late else label)
        col2.write(t.description)
        col3.markdown(f":red[**{format_money(t.amount)}**]" if late else format_money(t.amount))
        col4.checkbox(
            "Paid",
            value=t.is_paid,
            key=f"paid_{t.id}",
            on_change=on_toggle,
            args=(t.id,),
            label_visibility="collapsed",
            help="OVERDUE!" if late else None,
        )
    st.markdown(f"**Still to pay: {format_money(pending)}**")


def display_card_summary(cards: List[CardSummary], pending):
    st.markdown("#### Card expenses")
    if not cards:
        st.caption("No card expenses")
    for c in cards:
        if c.all_paid:
            status = ":green[paid]"
        elif c.has_overdue:
            status = ":red[**overdue**]"
        else:
            status = ":orange[open]"
        st.markdown(f"- **{c.name}**: {format_money(c.total)} ({status})")
    st.markdown(f"**Still to pay: {format_money(pending)}**")


def display_card_detail(name: str, items: List[Transaction], today: datetime.date):
    st.markdown(f"##### {name}")
    _show_frame(_records_frame(items, today, with_card=True))
    total = sum(t.amount for t in items)
    st.caption(f"Total: {format_money(total)}")


def display_misc_table(misc: List[Transaction], today: datetime.date):
    st.markdown("#### Misc expenses")
    _show_frame(_records_frame(misc, today))
    st.caption(f"Total: {format_money(sum(t.amount for t in misc))}")


def display_expense_share_chart(groups: LedgerGroups):
    """Pie chart of expenses per group (fixed, each card, misc)."""
    rows: Dict[str, float] = {}
    rows["Fixed"] = sum(t.amount for t in groups.fixed)
    for name, items in groups.by_card.items():
        rows[name] = sum(t.amount for t in items)
    unassigned = sum(t.amount for t in groups.cards if t.card_name not in groups.by_card)
    if unassigned:
        rows["Other cards"] = unassigned
    rows["Misc"] = sum(t.amount for t in groups.misc)

    df = pd.DataFrame([{"group": k, "amount": float(v)} for k, v in rows.items() if v > 0])
    if df.empty:
        st.info("No positive amounts to chart.")
        return
    total = df["amount"].sum()
    df["percent"] = df["amount"] / total * 100

    pie = alt.Chart(df).mark_arc(innerRadius=50).encode(
        theta=alt.Theta(field="amount", type="quantitative"),
        color=alt.Color(field="group", type="nominal", legend=alt.Legend(title="Group")),
        tooltip=[
            alt.Tooltip("group:N", title="Group"),
            alt.Tooltip("amount:Q", title="Amount", format=".2f"),
            alt.Tooltip("percent:Q", title="Share", format=".1f"),
        ],
    ).properties(title="Expense share")
    st.altair_chart(pie, use_container_width=True)


def ledger_to_xlsx(records: List[Transaction]) -> bytes:
    """Serialize the ledger as an XLSX workbook with one 'ledger' sheet."""
    df = pd.DataFrame(
        [t.to_dict() for t in records],
        columns=["id", "date", "type", "category", "description", "amount", "isPaid", "cardName", "installments"],
    )
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="ledger")
    buffer.seek(0)
    return buffer.getvalue()


def display_export(records: List[Transaction]):
    if not records:
        return
    st.download_button(
        label="Download as XLSX",
        data=ledger_to_xlsx(records),
        file_name="ledger.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


def record_options(records: List[Transaction]) -> Dict[str, str]:
    """Selector entries keyed by record id; labels may repeat, ids do not."""
    return {
        t.id: f"{format_day_month(t.date)} {TYPE_LABELS[t.type]} - {t.description} ({format_money(t.amount)})"
        for t in records
    }


def display_manage_records(ledger):
    """
    UI to pick a record and delete it. Deletion needs the confirmation
    checkbox, which is passed to the ledger as its confirm hook.
    """
    st.subheader("Delete entry")
    records = ledger.snapshot()
    if not records:
        st.info("No entries recorded.")
        return

    options = record_options(records)
    record_id = st.selectbox("Select entry", options=list(options), format_func=options.get)
    delete_confirm = st.checkbox("Delete this record?", key=f"confirm_delete_{record_id}")
    if st.button("Delete entry"):
        if not delete_confirm:
            st.warning("Tick the confirmation box first.")
            return
        if ledger.remove(record_id, confirm=lambda _msg: delete_confirm):
            st.success("Entry deleted.")
            _trigger_rerun()
        else:
            st.error("Entry not found.")
