"""
Streamlit Frontend for Bank Statement Parser

Upload a statement, review what the AI extracted, export it.

DESIGN PRINCIPLES:
1. One screen, three steps: upload -> processing -> preview
2. Nothing leaves the app until the user clicks an export button
3. Clear error messages, with the last progress step shown
4. Google export only after an explicit sign-in

Run with:  streamlit run app/main.py
"""

import asyncio
from typing import Optional

import streamlit as st

from statement_parser.agents import ExtractionError
from statement_parser.audit import create_correlation_id
from statement_parser.config import get_settings, validate_all_settings
from statement_parser.models.transaction import ExtractionResult, GoogleUser
from statement_parser.orchestrator import (
    ExportFlow,
    GoogleSignInFlow,
    StatementParseFlow,
    create_app_components,
)
from statement_parser.services import (
    GoogleAuthError,
    SheetsAuthError,
    SheetsExportError,
    StatementReadError,
    detect_statement_type,
)
from statement_parser.services.export import CSV_MIME_TYPE


# Page configuration
st.set_page_config(
    page_title="Bank Statement Parser",
    page_icon="🏦",
    layout="wide",
    initial_sidebar_state="collapsed",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button, .stDownloadButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
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
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def init_session_state():
    defaults = {
        "step": "upload",  # upload, preview
        "extraction": None,
        "validation": None,
        "validation_message": "",
        "correlation_id": None,
        "error": None,
        "debug_info": "",
        "google_token": None,
        "google_user": None,
        "sheets_result": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def reset_upload():
    st.session_state.step = "upload"
    st.session_state.extraction = None
    st.session_state.validation = None
    st.session_state.validation_message = ""
    st.session_state.correlation_id = None
    st.session_state.error = None
    st.session_state.debug_info = ""
    st.session_state.sheets_result = None


def sign_out(sign_in_flow: Optional[GoogleSignInFlow], reason: Optional[str] = None):
    if sign_in_flow:
        sign_in_flow.sign_out(st.session_state.google_user, reason=reason)
    st.session_state.google_token = None
    st.session_state.google_user = None


def handle_oauth_redirect(sign_in_flow: Optional[GoogleSignInFlow]):
    """Finish sign-in when Google redirects back with ?code=..."""
    params = st.query_params
    if "code" not in params and "error" not in params:
        return

    if "error" in params:
        st.session_state.error = f"Google sign-in was cancelled: {params['error']}"
    elif sign_in_flow:
        try:
            token, user = sign_in_flow.complete_sign_in(
                code=params["code"],
                state=params.get("state"),
            )
            st.session_state.google_token = token
            st.session_state.google_user = user
        except GoogleAuthError as e:
            st.session_state.error = str(e)

    st.query_params.clear()
    st.rerun()


def render_google_card(sign_in_flow: Optional[GoogleSignInFlow]):
    """Connect / connected box above the upload area."""
    with st.container(border=True):
        user: Optional[GoogleUser] = st.session_state.google_user
        col1, col2 = st.columns([3, 1])

        if sign_in_flow is None:
            with col1:
                st.markdown("#### Google Sheets export unavailable")
                st.caption("Set GOOGLE_OAUTH_CLIENT_ID and GOOGLE_OAUTH_CLIENT_SECRET to enable it.")
            return

        if not st.session_state.google_token:
            with col1:
                st.markdown("#### Connect Google Sheets")
                st.caption("Sign in to export transactions directly")
            with col2:
                st.link_button(
                    "Sign in with Google",
                    sign_in_flow.authorization_url(),
                    use_container_width=True,
                )
        else:
            with col1:
                st.markdown("#### ✅ Connected to Google")
                st.caption(user.display_name if user else "Signed in")
            with col2:
                if st.button("Sign Out"):
                    sign_out(sign_in_flow)
                    st.rerun()


def render_upload_step(parse_flow: StatementParseFlow):
    uploaded_file = st.file_uploader(
        "Drop your bank statement here",
        type=get_settings().app.supported_formats_list,
        help="Supports PDF and CSV files",
    )

    if uploaded_file and st.button("🔍 Extract Transactions", type="primary"):
        st.session_state.error = None
        st.session_state.correlation_id = create_correlation_id()

        with st.spinner("Processing your statement... Using AI to extract transactions"):
            try:
                st.session_state.debug_info = "Reading file..."
                statement_type = detect_statement_type(uploaded_file.name)
                st.session_state.debug_info = (
                    f"{statement_type.value.upper()} detected, sending to AI for extraction..."
                )

                extraction, validation = run_async(
                    parse_flow.process_statement(
                        filename=uploaded_file.name,
                        data=uploaded_file.getvalue(),
                        correlation_id=st.session_state.correlation_id,
                    )
                )

                st.session_state.extraction = extraction
                st.session_state.validation = validation
                st.session_state.validation_message = parse_flow.summarize_validation(validation)
                st.session_state.step = "preview"
                st.rerun()
            except (StatementReadError, ExtractionError) as e:
                st.session_state.error = str(e)
                st.session_state.debug_info = f"Error: {e}"

    if st.session_state.error:
        debug = st.session_state.debug_info
        st.markdown(f"""
        <div class="error-box">
            <h4>❌ {st.session_state.error}</h4>
            {f"<p>{debug}</p>" if debug else ""}
        </div>
        """, unsafe_allow_html=True)


def render_transactions_table(extraction: ExtractionResult):
    rows = [
        {
            "Date": t.date,
            "Description": t.description,
            "Amount": f"-${t.display_amount}" if t.amount < 0 else f"${t.display_amount}",
            "Balance": f"${t.display_balance}" if t.balance is not None else "-",
            "Type": t.type.value,
        }
        for t in extraction.transactions
    ]
    st.dataframe(rows, use_container_width=True, hide_index=True, height=384)


def render_preview_step(
    export_flow: ExportFlow,
    sign_in_flow: Optional[GoogleSignInFlow],
):
    extraction: ExtractionResult = st.session_state.extraction
    validation = st.session_state.validation

    col1, col2 = st.columns([4, 1])
    with col1:
        st.subheader(f"✅ Found {extraction.transaction_count} transactions")
        st.caption("Review and export")
    with col2:
        if st.button("Upload Another"):
            reset_upload()
            st.rerun()

    if extraction.transaction_count == 0:
        st.markdown(f"""
        <div class="warning-box">
            <h4>⚠️ {st.session_state.validation_message}</h4>
        </div>
        """, unsafe_allow_html=True)
        return

    m1, m2, m3 = st.columns(3)
    m1.metric("Money in", f"${extraction.total_in:,.2f}")
    m2.metric("Money out", f"${extraction.total_out:,.2f}")
    m3.metric("Net change", f"${extraction.net_change:,.2f}")

    if validation and not validation.is_clean:
        with st.expander(f"⚠️ {st.session_state.validation_message}"):
            for issue in validation.issues:
                st.markdown(f"- {issue.message}")

    render_transactions_table(extraction)

    col1, col2 = st.columns(2)

    with col1:
        filename, payload = export_flow.prepare_csv(extraction.transactions)
        st.download_button(
            "⬇️ Download CSV",
            data=payload,
            file_name=filename,
            mime=CSV_MIME_TYPE,
            type="primary",
            on_click=export_flow.record_csv_download,
            kwargs={
                "filename": filename,
                "row_count": extraction.transaction_count,
                "correlation_id": st.session_state.correlation_id,
            },
        )

    with col2:
        signed_in = bool(st.session_state.google_token)
        label = "📄 Export to Google Sheets" if signed_in else "📄 Sign in to Export"
        if st.button(label, disabled=not signed_in):
            with st.spinner("Exporting..."):
                try:
                    credentials = sign_in_flow.credentials(st.session_state.google_token)
                    st.session_state.sheets_result = export_flow.export_to_sheets(
                        extraction.transactions,
                        credentials,
                        correlation_id=st.session_state.correlation_id,
                    )
                except SheetsAuthError as e:
                    sign_out(sign_in_flow, reason=str(e))
                    st.error(f"Failed to export to Google Sheets: {e}")
                except (SheetsExportError, GoogleAuthError) as e:
                    st.error(f"Failed to export to Google Sheets: {e}")

    result = st.session_state.sheets_result
    if result:
        st.markdown(f"""
        <div class="success-box">
            <h4>✓ Success!</h4>
            <p>{result.row_count} transactions exported to Google Sheets.</p>
        </div>
        """, unsafe_allow_html=True)
        st.link_button("Open spreadsheet", result.spreadsheet_url)

    if not st.session_state.google_token:
        st.warning("⚠️ Sign in with Google above to export directly to Google Sheets")


def render_settings_sidebar():
    st.sidebar.markdown("### Connection Status")

    status = validate_all_settings()
    services = [
        ("Gemini (AI extraction)", "gemini"),
        ("Google OAuth (Sheets export)", "google_oauth"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.sidebar.success(f"✅ {name}")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.sidebar.error(f"❌ {name} - {error}")

    st.sidebar.caption(
        "Configure API keys in a `.env` file. "
        "See `.env.example` for the required variables."
    )


def main():
    """Main application entry point."""
    parse_flow, export_flow, sign_in_flow = get_components()
    init_session_state()
    handle_oauth_redirect(sign_in_flow)

    st.title("Bank Statement Parser")
    st.markdown("Upload your bank statement and export directly to Google Sheets")

    render_settings_sidebar()
    render_google_card(sign_in_flow)

    if st.session_state.step == "preview" and st.session_state.extraction is not None:
        render_preview_step(export_flow, sign_in_flow)
    else:
        render_upload_step(parse_flow)


if __name__ == "__main__":
    main()
