import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date, datetime

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from inout.aggregator import sum_by_type
from inout.config import load_settings
from inout.domain import EXPENSE, INCOME, MONTH, WEEK, YEAR, AuthState
from inout.events import AuthNotifier
from inout.exceptions import InOutError, ValidationError
from inout.filters import ALL, DEFAULT_COLOR, TransactionFilter, category_color, category_label
from inout.formatting import format_currency, format_percent, format_signed_currency
from inout.logger import configure_logging
from inout.provider import InMemoryStore
from inout.services import (
    AccountService,
    AnalyticsService,
    CategoryService,
    DashboardService,
    DataService,
    TransactionService,
)
from inout.validation import parse_user

CATEGORY_COLORS = [
    "#10B981", "#EF4444", "#3B82F6", "#F59E0B", "#8B5CF6",
    "#EC4899", "#06B6D4", "#84CC16", "#F97316", "#6366F1",
]
CATEGORY_ICONS = ["🍔", "🏠", "🚗", "💼", "🎮", "🛒", "💊", "✈️", "📚", "🎵", "💰", "☕", "🎬", "👕", "📱"]

st.set_page_config(page_title="InOut Expense Tracker", layout="wide")

settings = load_settings()
configure_logging(settings.log_level, settings.log_file)
money = lambda v: format_currency(v, settings.currency)

if "store" not in st.session_state:
    st.session_state.store = InMemoryStore.from_file(settings.seed_path) if settings.seed_path else InMemoryStore()
if "auth" not in st.session_state:
    st.session_state.auth = AuthNotifier(AuthState(user=None, is_loading=False))
    st.session_state.auth_state = st.session_state.auth.state

    def _remember(state: AuthState) -> None:
        st.session_state.auth_state = state

    st.session_state.auth_unsubscribe = st.session_state.auth.on_auth_state_changed(_remember)

store = st.session_state.store
auth: AuthNotifier = st.session_state.auth

dashboard_service = DashboardService(store, settings)
analytics_service = AnalyticsService(store, settings)
transaction_service = TransactionService(store)
category_service = CategoryService(store)
data_service = DataService(store)
account_service = AccountService(store, auth)


def chart_figure(points, title):
    df = pd.DataFrame([{"label": p.label, "Income": p.income, "Expense": p.expense} for p in points])
    fig = go.Figure()
    if not df.empty:
        fig.add_trace(go.Bar(x=df["label"], y=df["Income"], name="Income", marker_color="#10B981"))
        fig.add_trace(go.Bar(x=df["label"], y=df["Expense"], name="Expense", marker_color="#EF4444"))
    fig.update_layout(title=title, barmode="group", margin=dict(t=40, b=10, l=10, r=10))
    return fig


# --- Sign in
st.sidebar.markdown("### 👤 Account")
users = store.users()
state: AuthState = st.session_state.auth_state
if state.user is None:
    emails = [u["email"] for u in users]
    chosen = st.sidebar.selectbox("Sign in as", options=emails) if emails else None
    if chosen and st.sidebar.button("Sign in"):
        parsed = parse_user(next(u for u in users if u["email"] == chosen))
        if parsed.is_right():
            auth.sign_in(parsed.get_or_else(None))
            st.rerun()
        else:
            st.sidebar.error(parsed.get_error()["message"])
    st.title("InOut")
    st.info("Sign in to see your finances.")
    st.stop()

user = state.user
st.sidebar.caption(f"Hello, {user.display_name or user.email}!")

menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "🧾 Transactions", "📊 Analytics", "🏷️ Categories", "⚙️ Settings"]
)

if menu == "🏠 Dashboard":
    st.title("Welcome back!")
    st.caption("Here's your financial overview")

    chart_period = st.radio("Spending Overview", [WEEK, MONTH], horizontal=True, format_func=str.title)
    view = dashboard_service.load(user.id, chart_period)

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Total Balance", money(view.stats.total_balance))
        st.caption("Current balance")
    with k2:
        st.metric("Total Income", money(view.stats.total_income))
        st.caption(f"+{money(view.stats.monthly_income)} this month")
    with k3:
        st.metric("Total Expenses", money(view.stats.total_expenses))
        st.caption(f"-{money(view.stats.monthly_expenses)} this month")

    left, right = st.columns([2, 1])
    with left:
        st.plotly_chart(chart_figure(view.chart, "Spending Overview"), use_container_width=True)
    with right:
        st.subheader("📅 Recent Transactions")
        if not view.recent:
            st.info("No transactions yet")
        for t in view.recent:
            arrow = "📈" if t.type == INCOME else "📉"
            st.markdown(
                f"{arrow} **{t.description or 'Transaction'}** · {t.date:%b %d}  \n"
                f"{format_signed_currency(t.amount, t.type, settings.currency)}"
            )

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")
    categories = category_service.list(user.id)
    cat_options = [ALL] + [c.id for c in categories]

    with st.expander("➕ Add Transaction"):
        with st.form("add_transaction", clear_on_submit=True):
            tx_type = st.radio("Type", [EXPENSE, INCOME], horizontal=True, format_func=str.title)
            amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
            description = st.text_input("Description")
            category_id = st.selectbox(
                "Category", [None] + [c.id for c in categories],
                format_func=lambda cid: category_label(categories, cid),
            )
            when = st.date_input("Date", value=date.today())
            if st.form_submit_button("Add Transaction"):
                try:
                    transaction_service.add(user.id, tx_type, amount, when, description, category_id)
                    st.success("Transaction added")
                except ValidationError as e:
                    st.error(str(e))

    c1, c2, c3, c4 = st.columns(4)
    with c1:
        search = st.text_input("Search", placeholder="Search transactions...")
    with c2:
        type_filter = st.selectbox("Type", [ALL, INCOME, EXPENSE], format_func=str.title)
    with c3:
        cat_filter = st.selectbox(
            "Category", cat_options,
            format_func=lambda cid: "All" if cid == ALL else category_label(categories, cid),
        )
    with c4:
        date_range = st.date_input("Date Range", value=())

    criteria = TransactionFilter(
        search=search,
        type=type_filter,
        category_id=cat_filter,
        date_from=date_range[0] if len(date_range) >= 1 else None,
        date_to=date_range[1] if len(date_range) == 2 else None,
    )
    everything = transaction_service.list(user.id)
    shown = transaction_service.search(user.id, criteria)
    st.caption(f"{len(shown)} of {len(everything)} transactions")

    if not shown:
        st.info("No transactions match your filters" if criteria.is_active() else "No transactions yet")
    for t in shown:
        row = st.columns([4, 2, 2, 1])
        row[0].markdown(f"**{t.description or 'Transaction'}**  \n{category_label(categories, t.category_id)}")
        row[1].write(t.date.strftime("%Y-%m-%d"))
        row[2].write(format_signed_currency(t.amount, t.type, settings.currency))
        if row[3].button("🗑", key=f"del_{t.id}"):
            try:
                transaction_service.delete(user.id, t.id)
                st.rerun()
            except InOutError as e:
                st.error(f"Failed to delete transaction: {e}")

elif menu == "📊 Analytics":
    st.title("📊 Analytics")
    st.caption("Insights into your spending patterns")
    period = st.selectbox(
        "Period", [WEEK, MONTH, YEAR], index=1,
        format_func=lambda p: f"Last {p.title()}",
    )
    view = analytics_service.load(user.id, period)
    summary = view.summary

    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Total Income", money(summary.total_income), f"{summary.income_count} transactions", delta_color="off")
    k2.metric("Total Expenses", money(summary.total_expenses), f"{summary.expense_count} transactions", delta_color="off")
    k3.metric("Net Income", money(summary.net_income), "Positive cash flow" if summary.net_income >= 0 else "Negative cash flow", delta_color="off")
    k4.metric(
        "Expense Change",
        format_percent(view.comparison.percent_change, signed=True),
        f"vs previous {period}",
        delta_color="off",
    )

    left, right = st.columns(2)
    with left:
        st.plotly_chart(chart_figure(view.chart, "Spending Trend"), use_container_width=True)
    with right:
        st.subheader("Top Categories")
        if not view.top_categories:
            st.info("No expense data available")
        else:
            df_cat = pd.DataFrame([
                {"Category": f"{c.icon or '🏷️'} {c.name}", "Total": c.total_amount, "Share": c.percentage_of_expenses}
                for c in view.top_categories
            ])
            fig_cat = px.pie(
                df_cat, values="Total", names="Category",
                color_discrete_sequence=[c.color or DEFAULT_COLOR for c in view.top_categories],
            )
            fig_cat.update_layout(height=300, margin=dict(t=10, b=10, l=10, r=10))
            st.plotly_chart(fig_cat, use_container_width=True)
            for c in view.top_categories:
                st.markdown(
                    f"{c.icon or '🏷️'} **{c.name}** · {c.transaction_count} transactions · "
                    f"{money(c.total_amount)} ({format_percent(c.percentage_of_expenses)})"
                )

    if view.insights:
        st.subheader("Insights")
        for insight in view.insights:
            st.info(insight.message)

elif menu == "🏷️ Categories":
    st.title("🏷️ Categories")
    categories = category_service.list(user.id)
    transactions = transaction_service.list(user.id)

    with st.form("add_category", clear_on_submit=True):
        name = st.text_input("Name")
        icon = st.selectbox("Icon", CATEGORY_ICONS)
        color = st.selectbox("Color", CATEGORY_COLORS)
        if st.form_submit_button("Add Category"):
            try:
                category_service.add(user.id, name, icon, color)
                st.rerun()
            except ValidationError as e:
                st.error(str(e))

    if not categories:
        st.info("No categories yet")
    for c in categories:
        used = [t for t in transactions if t.category_id == c.id]
        row = st.columns([4, 2, 1])
        row[0].markdown(
            f"<span style='color:{category_color(categories, c.id)}'>{c.icon or '🏷️'}</span> **{c.name}**",
            unsafe_allow_html=True,
        )
        row[1].caption(f"{len(used)} transactions · {money(sum_by_type(used, EXPENSE))} spent")
        with st.expander(f"Edit {c.name}"):
            with st.form(f"edit_category_{c.id}"):
                new_name = st.text_input("Name", value=c.name, key=f"name_{c.id}")
                new_icon = st.selectbox(
                    "Icon", CATEGORY_ICONS,
                    index=CATEGORY_ICONS.index(c.icon) if c.icon in CATEGORY_ICONS else 0,
                    key=f"icon_{c.id}",
                )
                new_color = st.selectbox(
                    "Color", CATEGORY_COLORS,
                    index=CATEGORY_COLORS.index(c.color) if c.color in CATEGORY_COLORS else 0,
                    key=f"color_{c.id}",
                )
                if st.form_submit_button("Save"):
                    try:
                        category_service.update(
                            user.id, c.id, {"name": new_name.strip(), "icon": new_icon, "color": new_color}
                        )
                        st.rerun()
                    except InOutError as e:
                        st.error(f"Failed to update category: {e}")
        if row[2].button("🗑", key=f"delcat_{c.id}"):
            try:
                category_service.delete(user.id, c.id)
                st.rerun()
            except InOutError as e:
                st.error(f"Failed to delete category: {e}")

elif menu == "⚙️ Settings":
    st.title("⚙️ Settings")
    st.caption("Manage your account and application preferences")

    st.subheader("Profile")
    with st.form("profile"):
        display_name = st.text_input("Display name", value=user.display_name or "")
        if st.form_submit_button("Save Profile"):
            try:
                account_service.update_display_name(user.id, display_name)
                st.success("Profile updated")
                st.rerun()
            except InOutError as e:
                st.error(f"Failed to update profile: {e}")
    st.text_input("Email", value=user.email, disabled=True, help="Email cannot be changed")
    st.caption(f"Display currency: {settings.currency} (set INOUT_CURRENCY to change)")

    st.subheader("Data Management")
    try:
        filename, csv = data_service.export_csv(user.id)
        st.download_button("⬇ Export CSV", csv, file_name=filename, mime="text/csv")
    except InOutError as e:
        st.error(f"Failed to export data: {e}")

    confirm = st.checkbox("I understand that deleting all data cannot be undone")
    if st.button("Delete All", disabled=not confirm):
        try:
            deleted = data_service.delete_all(user.id)
            st.success(f"Deleted {deleted} records")
        except InOutError as e:
            st.error(f"Failed to delete data: {e}")

    st.subheader("Account")
    if st.button("Sign Out"):
        auth.sign_out()
        st.rerun()

    st.caption(f"Last refreshed {datetime.now():%Y-%m-%d %H:%M}")
