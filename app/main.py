"""
Streamlit Frontend for Payment Tracker

The dashboard the office uses to keep track of what is owed to which company,
across projects and currencies.

DESIGN PRINCIPLES:
1. Everything on one page: ticker, summary, filters, table
2. Every change is saved immediately; a failed save is shown, never hidden
3. Clear notice when working from the local copy (saves will be rejected)

The UI only talks to the orchestrator. Validation, id assignment and
saving all happen below it.
"""

import asyncio

import streamlit as st

from payment_tracker.auth import AuthenticationError
from payment_tracker.config import validate_all_settings
from payment_tracker.export import format_currency
from payment_tracker.ledger import (
    DataSource,
    DataUnavailableError,
    NotFoundError,
    SaveFailedError,
)
from payment_tracker.models.payment import Currency, FilterCriteria, InvoiceStatus
from payment_tracker.orchestrator import create_app_components, PaymentDashboard
from payment_tracker.queries import distinct_projects


# Page configuration
st.set_page_config(
    page_title="Payment Tracker",
    page_icon="💳",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .ticker {
        font-size: 1.1em;
        font-weight: bold;
        color: #2c3e50;
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
def get_components():
    """Get or create application components (cached)."""
    dashboard, authenticator, audit_logger = create_app_components()
    run_async(dashboard.start())
    return dashboard, authenticator, audit_logger


def main():
    """Main application entry point."""
    try:
        dashboard, authenticator, _ = get_components()
    except DataUnavailableError as e:
        st.error(f"Payments could not be loaded: {e}")
        st.stop()

    if "session_token" not in st.session_state:
        st.session_state.session_token = None

    try:
        session = authenticator.check(st.session_state.session_token)
    except AuthenticationError:
        render_login_page(authenticator)
        return

    st.sidebar.title("💳 Payment Tracker")
    st.sidebar.markdown(f"Signed in as **{session.full_name}**")
    if st.sidebar.button("Log out"):
        run_async(authenticator.logout(session))
        st.session_state.session_token = None
        st.rerun()
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Payments", "➕ Add Payment", "⚙️ Settings"],
        index=0,
    )

    if page == "📊 Payments":
        render_payments_page(dashboard)
    elif page == "➕ Add Payment":
        render_form_page(dashboard)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_login_page(authenticator):
    st.title("💳 Payment Tracker")
    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")

    if submitted:
        try:
            session = run_async(authenticator.login(username, password))
        except AuthenticationError as e:
            st.error(str(e))
        else:
            st.session_state.session_token = session.token
            st.rerun()


def render_ticker(rates: dict):
    parts = [
        f"{code.value}: {format_currency(rates[code], Currency.TRY)}"
        for code in (Currency.USD, Currency.EUR, Currency.GBP)
        if code in rates
    ]
    st.markdown(f'<div class="ticker">{" · ".join(parts)}</div>', unsafe_allow_html=True)


def render_payments_page(dashboard: PaymentDashboard):
    """Render the dashboard: ticker, summary cards, filters and table."""
    st.title("📊 Payments")

    # Filters
    col1, col2, col3, col4 = st.columns(4)
    with col4:
        search = st.text_input("Search", placeholder="Item or company")
    with col2:
        currency = st.selectbox(
            "Currency",
            options=[None] + list(Currency),
            format_func=lambda x: "All currencies" if x is None else x.value,
        )
    with col3:
        status = st.selectbox(
            "Invoice status",
            options=[None] + list(InvoiceStatus),
            format_func=lambda x: "All statuses" if x is None else x.label.title(),
        )

    with col1:
        project = st.selectbox(
            "Project",
            options=[None] + distinct_projects(dashboard.store.payments),
            format_func=lambda x: "All projects" if x is None else x,
        )

    criteria = FilterCriteria(
        project=project,
        currency=currency,
        invoice_status=status,
        search=search,
    )
    view = run_async(dashboard.view(criteria))

    render_ticker(view.rates)

    if view.source == DataSource.LOCAL:
        st.markdown("""
        <div class="warning-box">
            <h4>⚠️ Working from the local copy</h4>
            <p>The remote data could not be reached. Changes cannot be saved until it is back.</p>
        </div>
        """, unsafe_allow_html=True)

    # Summary cards
    totals = view.summary.total_in_reporting_currency
    reporting = view.summary.reporting_currency
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total debt", format_currency(totals.total_debt, reporting))
    col2.metric("Paid", format_currency(totals.paid, reporting))
    col3.metric("Remaining", format_currency(totals.remaining, reporting))
    col4.metric("Not invoiced", view.uninvoiced_count)

    with st.expander("Totals by currency"):
        for code, by_currency in view.summary.by_currency.items():
            st.markdown(
                f"**{code.value}**: debt {format_currency(by_currency.total_debt, code)}, "
                f"remaining {format_currency(by_currency.remaining, code)}"
            )

    st.markdown("---")

    if not view.payments:
        st.info("No payments match the current filters.")
    else:
        st.dataframe(
            [
                {
                    "ID": p.id,
                    "Item": p.item_name,
                    "Company": p.company_name,
                    "Service": p.service_type,
                    "Project": p.project_name,
                    "Total debt": format_currency(p.total_debt, p.currency),
                    "Paid": format_currency(p.paid, p.currency),
                    "Remaining": format_currency(p.remaining, p.currency),
                    "Status": p.invoice_status.label,
                }
                for p in view.payments
            ],
            use_container_width=True,
            hide_index=True,
        )

    # Rendered on every rerun; only the click is audited
    filename, csv_text = dashboard.build_export(view.payments)
    st.download_button(
        "⬇️ Export CSV",
        data=csv_text.encode("utf-8"),
        file_name=filename,
        mime="text/csv",
        on_click=lambda: run_async(dashboard.record_export(filename, len(view.payments))),
    )

    if view.payments:
        st.markdown("### Edit or delete")
        selected = st.selectbox(
            "Payment",
            options=[p.id for p in view.payments],
            format_func=lambda pid: next(
                f"#{p.id} {p.item_name} ({p.company_name})" for p in view.payments if p.id == pid
            ),
        )
        col1, col2 = st.columns(2)
        with col1:
            if st.button("✏️ Edit"):
                st.session_state.editing_id = selected
                st.rerun()
        with col2:
            if st.button("🗑️ Delete"):
                try:
                    run_async(dashboard.remove(selected))
                    st.success(f"Payment #{selected} deleted")
                    st.rerun()
                except SaveFailedError as e:
                    st.error(f"Delete was not saved: {e}")

    if st.session_state.get("editing_id") is not None:
        render_payment_form(dashboard, st.session_state.editing_id)


def render_form_page(dashboard: PaymentDashboard):
    st.title("➕ Add Payment")
    render_payment_form(dashboard, None)


def render_payment_form(dashboard: PaymentDashboard, payment_id):
    """Add (payment_id None) or edit form."""
    existing = None
    if payment_id is not None:
        try:
            existing = dashboard.store.get(payment_id)
        except NotFoundError:
            st.session_state.editing_id = None
            st.warning(f"Payment #{payment_id} no longer exists")
            return
        st.markdown(f"### Editing payment #{payment_id}")

    currencies = list(Currency)
    statuses = list(InvoiceStatus)

    with st.form(f"payment_form_{payment_id or 'new'}"):
        col1, col2 = st.columns(2)
        with col1:
            item_name = st.text_input("Item *", value=existing.item_name if existing else "")
            company_name = st.text_input("Company", value=existing.company_name if existing else "")
            service_type = st.text_input("Service", value=existing.service_type if existing else "")
            project_name = st.text_input("Project", value=existing.project_name if existing else "")
            currency = st.selectbox(
                "Currency *",
                options=currencies,
                index=currencies.index(existing.currency) if existing else 0,
                format_func=lambda x: x.value,
            )
        with col2:
            previous_debt = st.text_input(
                "Previous debt", value=f"{existing.previous_debt:.2f}" if existing else ""
            )
            current_debt = st.text_input(
                "Current debt", value=f"{existing.current_debt:.2f}" if existing else ""
            )
            paid = st.text_input("Paid", value=f"{existing.paid:.2f}" if existing else "")
            invoice_status = st.selectbox(
                "Invoice status",
                options=statuses,
                index=statuses.index(existing.invoice_status) if existing else 1,
                format_func=lambda x: x.label.title(),
            )
        submitted = st.form_submit_button("💾 Save", type="primary")

    if not submitted:
        return

    form = {
        "itemName": item_name,
        "companyName": company_name,
        "serviceType": service_type,
        "projectName": project_name,
        "currency": currency.value,
        "previousDebt": previous_debt,
        "currentDebt": current_debt,
        "paid": paid,
        "invoiceStatus": invoice_status.value,
    }
    try:
        submission = run_async(dashboard.submit_form(form, payment_id))
    except NotFoundError as e:
        st.error(str(e))
        return
    except SaveFailedError as e:
        st.error(f"The change was not saved: {e}")
        return

    for issue in submission.validation.issues:
        if issue.severity == "error":
            st.error(issue.message)
        else:
            st.warning(issue.message)

    if submission.saved:
        st.success(f"Payment #{submission.payment.id} saved")
        st.session_state.editing_id = None


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")
    st.markdown("### Connection Status")

    status = validate_all_settings()

    sections = [
        ("GitHub (Remote data)", "github"),
        ("Exchange rates", "currency"),
        ("Login", "auth"),
        ("Application", "app"),
    ]
    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your settings. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
