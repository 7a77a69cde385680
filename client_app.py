"""
Student Portal - UniFind Lost & Found

A mobile-friendly Streamlit application for students: browse found items,
report something lost and claim an item that is yours.
Connects to the UniFind FastAPI backend.
"""
import html
from datetime import date
from typing import Optional

import requests
import streamlit as st

from unifind.client import UniFindAPIError, UniFindClient
from unifind.config import settings
from unifind.core.states import ItemCategory

# ============================================
# CONFIGURATION
# ============================================

# Default API URL (can be overridden in sidebar)
DEFAULT_API_URL = settings.API_BASE_URL


def get_api_url() -> str:
    """Get the API base URL from session state."""
    return st.session_state.get("api_url", DEFAULT_API_URL)


def get_client() -> UniFindClient:
    return UniFindClient(get_api_url(), token=st.session_state.get("token") or None)


# ============================================
# PAGE CONFIG & STYLING
# ============================================

st.set_page_config(
    page_title="UniFind - Campus Lost & Found",
    page_icon="🎒",
    layout="centered",
    initial_sidebar_state="collapsed"
)

# Mobile-friendly CSS
st.markdown("""
<style>
    .stApp {
        max-width: 100%;
    }

    /* Header styling */
    .main-header {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        padding: 2rem;
        border-radius: 16px;
        color: white;
        text-align: center;
        margin-bottom: 2rem;
        box-shadow: 0 10px 40px rgba(102, 126, 234, 0.3);
    }

    .main-header h1 {
        margin: 0;
        font-size: 2rem;
        font-weight: 700;
    }

    .main-header p {
        margin: 0.5rem 0 0 0;
        opacity: 0.9;
        font-size: 1rem;
    }

    /* Card styling */
    .item-card {
        background: white;
        border-radius: 16px;
        padding: 1.25rem;
        box-shadow: 0 4px 20px rgba(0, 0, 0, 0.08);
        margin-bottom: 0.5rem;
        border: 1px solid #f0f0f0;
    }

    .item-card .meta {
        color: #757575;
        font-size: 0.85rem;
    }

    .success-box {
        background: linear-gradient(135deg, #43a047 0%, #66bb6a 100%);
        color: white;
        padding: 1.5rem;
        border-radius: 16px;
        text-align: center;
        margin-bottom: 1.5rem;
    }
</style>
""", unsafe_allow_html=True)


# ============================================
# API HELPER FUNCTIONS
# ============================================

def search_found_items(category: Optional[str], q: Optional[str],
                       date_from: Optional[date], date_to: Optional[date]) -> Optional[dict]:
    """Public listing of found items."""
    try:
        return get_client().list_found_items(category=category, q=q, date_from=date_from, date_to=date_to)
    except UniFindAPIError as e:
        st.error(f"❌ Search failed: {e.detail}")
    except requests.exceptions.RequestException as e:
        st.error(f"❌ Cannot reach server: {e}")
    return None


def report_lost_item(title: str, description: str, location: str,
                     event_date: date, category: str) -> Optional[dict]:
    try:
        return get_client().report_lost(title, description, location, event_date, category)
    except UniFindAPIError as e:
        st.error(f"❌ Could not file the report: {e.detail}")
    except requests.exceptions.RequestException as e:
        st.error(f"❌ Cannot reach server: {e}")
    return None


def submit_claim(item_id: int, proof_text: str) -> Optional[dict]:
    """Submit a claim; a duplicate or a no-longer-available item is reported inline."""
    try:
        return get_client().submit_claim(item_id, proof_text)
    except UniFindAPIError as e:
        if e.status_code == 409:
            st.warning(f"⚠️ {e.detail}")
        else:
            st.error(f"❌ Claim failed: {e.detail}")
    except requests.exceptions.RequestException as e:
        st.error(f"❌ Cannot reach server: {e}")
    return None


# ============================================
# UI COMPONENTS
# ============================================

def render_header():
    """Render the main header."""
    st.markdown("""
    <div class="main-header">
        <h1>🎒 UniFind</h1>
        <p>Lost something on campus? Look here first.</p>
    </div>
    """, unsafe_allow_html=True)


def item_card_html(item: dict) -> str:
    """Card markup for one item; user-supplied text is escaped."""
    return f"""
    <div class="item-card">
        <strong>{html.escape(item['title'])}</strong><br/>
        <span class="meta">{item['category']} · {html.escape(item['location'])} · found {item['eventDate']}</span>
        <p>{html.escape(item['description'])}</p>
    </div>
    """


def render_item_card(item: dict):
    st.markdown(item_card_html(item), unsafe_allow_html=True)


def render_claim_form(item: dict):
    """Inline claim form for one found item."""
    if not st.session_state.get("token"):
        st.caption("Sign in (sidebar token) to claim this item")
        return

    with st.form(f"claim_form_{item['id']}"):
        proof_text = st.text_area(
            "Why is this yours?",
            placeholder="Describe something only the owner would know: contents, marks, serial number...",
            height=80,
        )
        if st.form_submit_button("🙋 This is mine", use_container_width=True):
            result = submit_claim(item["id"], proof_text)
            if result:
                st.session_state.last_claim = result
                st.success(f"Claim #{result['claimId']} submitted. Staff will review it.")


def render_browse():
    """Render the found item search."""
    st.subheader("🔎 Found Items")

    col1, col2 = st.columns([2, 1])
    with col1:
        q = st.text_input("Search", placeholder="e.g., blue umbrella")
    with col2:
        category = st.selectbox("Category", options=["ALL"] + [c.value for c in ItemCategory])

    with st.expander("📅 Date range"):
        date_from = st.date_input("From", value=None)
        date_to = st.date_input("To", value=None)

    result = search_found_items(
        category=None if category == "ALL" else category,
        q=q or None,
        date_from=date_from,
        date_to=date_to,
    )
    if result is None:
        return

    if not result["items"]:
        st.info("Nothing matches yet. Report your item as lost and check back later.")
        return

    st.caption(f"{result['count']} item(s) waiting to be collected")
    for item in result["items"]:
        render_item_card(item)
        render_claim_form(item)


def render_report_form():
    """Render the lost item report form."""
    st.subheader("📝 Report a Lost Item")

    if not st.session_state.get("token"):
        st.info("Sign in (sidebar token) to report a lost item")
        return

    with st.form("lost_form", clear_on_submit=True):
        title = st.text_input("What did you lose? *", placeholder="e.g., Student ID card")
        category = st.selectbox("Category", options=[c.value for c in ItemCategory])
        location = st.text_input("Where? *", placeholder="e.g., Cafeteria")
        event_date = st.date_input("When? *", value=date.today(), max_value=date.today())
        description = st.text_area(
            "Description *",
            placeholder="Colour, brand, distinguishing marks...",
            height=120,
        )

        submitted = st.form_submit_button("🚀 Submit Report", use_container_width=True, type="primary")

        if submitted:
            if not title:
                st.error("Please say what you lost")
            elif not location:
                st.error("Please enter where you lost it")
            elif not description:
                st.error("Please describe the item")
            else:
                result = report_lost_item(title, description, location, event_date, category)
                if result:
                    st.markdown(f"""
                    <div class="success-box">
                        <h2 style="margin: 0;">✅ Report Filed</h2>
                        <p style="margin: 0.5rem 0 0 0;">Reference: <strong>#{result['id']}</strong></p>
                    </div>
                    """, unsafe_allow_html=True)


# ============================================
# MAIN APPLICATION
# ============================================

def main():
    """Main application entry point."""

    # Sidebar for settings
    with st.sidebar:
        st.header("⚙️ Settings")
        st.session_state.api_url = st.text_input(
            "API Server URL",
            value=DEFAULT_API_URL,
            help="URL of the FastAPI backend server"
        )
        st.session_state.token = st.text_input(
            "Student bearer token",
            type="password",
            help="Issued by the campus sign-in service"
        )

        st.divider()

        # Health check
        if st.button("Test Connection"):
            if get_client().health():
                st.success("✅ Connected!")
            else:
                st.error("❌ Cannot reach server")

        if st.session_state.get("last_claim"):
            st.caption(f"Last claim: #{st.session_state.last_claim['claimId']} (PENDING)")

    render_header()

    tab1, tab2 = st.tabs(["🔎 Browse Found Items", "📝 Report Lost"])
    with tab1:
        render_browse()
    with tab2:
        render_report_form()


if __name__ == "__main__":
    main()
