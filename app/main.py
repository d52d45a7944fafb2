"""
Streamlit Frontend for Household Ledger

The single page the user interacts with daily.

DESIGN PRINCIPLES:
1. Budget, total and balance always visible
2. Loading is shown as loading, never as an empty ledger
3. Explicit confirmation before reset
4. Clear notices for every rejected or failed action
5. No hidden actions

The page only reads the LedgerStore snapshot. Writes go through the
LedgerFlow; with the Firestore backend their result shows up on the next
live-sync push, not immediately after the button press. Pushes land on the
SDK's listener thread, so a fragment polls LedgerFlow.snapshot_version and
reruns the page when it moved.
"""

import asyncio
import atexit
from datetime import date

import streamlit as st

from household_ledger.config import get_settings
from household_ledger.formatting import (
    format_currency,
    format_date,
    over_budget_message,
)
from household_ledger.models.expense import LedgerNotice, NoticeLevel
from household_ledger.orchestrator import (
    RESET_CONFIRMATION_PROMPT,
    LedgerFlow,
    create_app_components,
)


# Page configuration
st.set_page_config(
    page_title="간단한 가계부",
    page_icon="💰",
    layout="centered",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .budget-box {
        padding: 16px;
        background-color: #eff6ff;
        border-radius: 10px;
        margin: 10px 0;
    }
    .positive { color: #16a34a; font-weight: bold; }
    .negative { color: #dc2626; font-weight: bold; }
    .warning-box {
        padding: 12px;
        background-color: #fee2e2;
        border: 1px solid #f87171;
        color: #b91c1c;
        border-radius: 10px;
        text-align: center;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_flow() -> LedgerFlow:
    """Get or create the ledger flow (cached for the server process)."""
    flow = create_app_components()
    # Cached resources live until the server exits
    atexit.register(flow.stop)
    return flow


@st.fragment(run_every=get_settings().ledger.refresh_interval_seconds)
def live_sync_watcher(flow: LedgerFlow) -> None:
    """Rerun the whole page when a live-sync push arrived after the last render."""
    if flow.snapshot_version != st.session_state.seen_version:
        st.rerun()


def show_notice(notice: LedgerNotice) -> None:
    if notice.level == NoticeLevel.SUCCESS:
        st.success(notice.message)
    elif notice.level == NoticeLevel.INFO:
        st.info(notice.message)
    elif notice.level == NoticeLevel.BLOCKING:
        st.warning(notice.message)
    else:
        st.error(notice.message)


def clear_form() -> None:
    # New widget keys give empty inputs and today's date
    st.session_state.form_version += 1


def main():
    """Main application entry point."""
    flow = get_flow()
    symbol = get_settings().ledger.currency_symbol

    if "form_version" not in st.session_state:
        st.session_state.form_version = 0
    if "confirm_reset" not in st.session_state:
        st.session_state.confirm_reset = False
    if "notice" not in st.session_state:
        st.session_state.notice = None

    # Read the version before the snapshot so a push in between is not missed
    st.session_state.seen_version = flow.snapshot_version
    snapshot = flow.snapshot

    st.title("💰 간단한 가계부")
    header, refresh = st.columns([4, 1])
    with header:
        if flow.backend_name == "remote":
            st.caption("☁️ 클라우드 동기화")
    with refresh:
        if st.button("🔄 새로고침"):
            st.rerun()

    if flow.backend_name == "remote":
        live_sync_watcher(flow)

    if snapshot is None:
        st.info("데이터를 불러오는 중...")
        return

    if st.session_state.notice is not None:
        show_notice(st.session_state.notice)
        st.session_state.notice = None

    render_budget_panel(flow, snapshot, symbol)
    render_expense_form(flow)
    render_expense_list(flow, snapshot, symbol)

    warning = over_budget_message(snapshot, symbol)
    if warning:
        st.markdown(f'<div class="warning-box">{warning}</div>', unsafe_allow_html=True)


def render_budget_panel(flow: LedgerFlow, snapshot, symbol: str):
    """Budget, total spent, remaining, and the reset action."""
    balance_class = "positive" if snapshot.remaining >= 0 else "negative"
    st.markdown(f"""
    <div class="budget-box">
        <p>초기 예산: <strong>{format_currency(snapshot.budget, symbol)}</strong></p>
        <p>총 지출: <strong class="negative">{format_currency(snapshot.total_spent, symbol)}</strong></p>
        <hr/>
        <p>잔액: <span class="{balance_class}">{format_currency(snapshot.remaining, symbol)}</span></p>
    </div>
    """, unsafe_allow_html=True)

    if snapshot.is_empty:
        return

    if not st.session_state.confirm_reset:
        if st.button("🔄 전체 리셋", type="secondary"):
            st.session_state.confirm_reset = True
            st.rerun()
        return

    st.warning(RESET_CONFIRMATION_PROMPT)
    col1, col2 = st.columns(2)
    with col1:
        if st.button("확인", type="primary"):
            notice = run_async(flow.reset(confirmed=True))
            if notice.ok:
                clear_form()
            st.session_state.confirm_reset = False
            st.session_state.notice = notice
            st.rerun()
    with col2:
        if st.button("취소"):
            st.session_state.confirm_reset = False
            st.rerun()


def render_expense_form(flow: LedgerFlow):
    """The add-expense form."""
    st.subheader("지출 추가")
    version = st.session_state.form_version

    with st.form(f"expense_form_{version}"):
        amount = st.text_input(
            "금액",
            placeholder="금액을 입력하세요",
            key=f"amount_{version}",
        )
        description = st.text_input(
            "지출 내용",
            placeholder="지출 내용 (선택사항)",
            key=f"description_{version}",
        )
        expense_date = st.date_input(
            "날짜",
            value=date.today(),
            key=f"date_{version}",
        )
        submitted = st.form_submit_button("지출 추가", type="primary")

    if submitted:
        notice = run_async(
            flow.submit_expense(
                amount_input=amount,
                description=description,
                expense_date=expense_date,
            )
        )
        if notice.level == NoticeLevel.SUCCESS:
            clear_form()
        st.session_state.notice = notice
        st.rerun()


def render_expense_list(flow: LedgerFlow, snapshot, symbol: str):
    """Logged expenses with a delete button each."""
    if snapshot.is_empty:
        return

    st.subheader("지출 내역")
    for record in snapshot.records:
        col1, col2, col3 = st.columns([4, 2, 1])
        with col1:
            st.markdown(f"**{record.description}**  \n{format_date(record.expense_date)}")
        with col2:
            st.markdown(f":red[{format_currency(record.amount, symbol)}]")
        with col3:
            if st.button("삭제", key=f"delete_{record.id}"):
                st.session_state.notice = run_async(flow.delete_expense(record.id))
                st.rerun()


if __name__ == "__main__":
    main()
