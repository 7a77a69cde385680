"""
Staff Dashboard for the UniFind Lost & Found Desk

A Streamlit dashboard providing:
- Item and claim counts per status
- Registration of found items
- Review queue for pending claims (approve / reject)
- Item browser with status override and audit trail
"""
import html
from datetime import date, datetime

import requests
import streamlit as st

from unifind.client import UniFindAPIError, UniFindClient
from unifind.config import settings
from unifind.core.states import ItemCategory, ItemStatus
from unifind.state_machine import item_state_machine

# Configuration
API_BASE_URL = settings.API_BASE_URL

# Page configuration
st.set_page_config(
    page_title="UniFind Staff Dashboard",
    page_icon="🗂️",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS for better styling
st.markdown("""
<style>
    .stAlert {margin-top: 1rem;}
    .timeline-item {
        padding: 10px 15px;
        border-left: 3px solid #4CAF50;
        margin-left: 20px;
        margin-bottom: 10px;
        background: #f8f9fa;
        border-radius: 0 8px 8px 0;
    }
    .timeline-item.override {border-left-color: #f44336;}
    .state-badge {
        padding: 4px 12px;
        border-radius: 12px;
        font-size: 0.85rem;
        font-weight: 500;
    }
    .state-LOST {background: #fff3e0; color: #ef6c00;}
    .state-FOUND {background: #e3f2fd; color: #1565c0;}
    .state-CLAIMED {background: #e8f5e9; color: #2e7d32;}
    .state-ARCHIVED {background: #eeeeee; color: #616161;}
    .state-PENDING {background: #fff8e1; color: #f9a825;}
    .state-APPROVED {background: #e8f5e9; color: #2e7d32;}
    .state-REJECTED {background: #ffebee; color: #c62828;}
</style>
""", unsafe_allow_html=True)


def get_client() -> UniFindClient:
    """Client bound to the URL and staff token entered in the sidebar."""
    return UniFindClient(
        st.session_state.get("api_url", API_BASE_URL),
        token=st.session_state.get("token") or None,
    )


def call_api(action: str, func, *args, **kwargs):
    """Run a client call, reporting failures in the page. Returns None on failure."""
    try:
        return func(*args, **kwargs)
    except UniFindAPIError as e:
        st.error(f"{action} failed: {e.detail}")
    except requests.exceptions.RequestException as e:
        st.error(f"{action} failed: cannot reach API ({e})")
    return None


def render_state_badge(state: str) -> str:
    """Render a styled state badge."""
    return f'<span class="state-badge state-{state}">{state}</span>'


def format_timestamp(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except (AttributeError, ValueError):
        return value or ""


def is_off_table(entry: dict) -> bool:
    """True for a history entry that moved the item outside the normal flow."""
    if not entry.get("oldStatus"):
        return False
    return not item_state_machine.is_conventional(
        ItemStatus(entry["oldStatus"]), ItemStatus(entry["newStatus"])
    )


def render_history_entry(entry: dict) -> str:
    old = entry.get("oldStatus") or "NEW"
    new = entry["newStatus"]
    reason = html.escape(entry.get("changeReason") or "")
    css = "timeline-item override" if is_off_table(entry) else "timeline-item"
    return f"""
    <div class="{css}">
        <strong>{format_timestamp(entry['changedAt'])}</strong> - {old} → {new}<br/>
        <small>by user {entry.get('changedByUserId')}: {reason}</small>
    </div>
    """


def render_history(client: UniFindClient, item_id: int):
    """Render the status audit trail of an item."""
    st.subheader("📜 Status History")

    history = call_api("Loading history", client.item_history, item_id)
    if not history:
        return

    for entry in history["history"]:
        st.markdown(render_history_entry(entry), unsafe_allow_html=True)


def render_register_found(client: UniFindClient):
    """Render the found item registration form."""
    st.subheader("📦 Register Found Item")

    with st.form("register_found_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            title = st.text_input("Title *", placeholder="e.g., Black backpack")
            location = st.text_input("Location found *", placeholder="e.g., Library, 2nd floor")
        with col2:
            category = st.selectbox("Category", options=[c.value for c in ItemCategory])
            event_date = st.date_input("Date found *", value=date.today(), max_value=date.today())
        description = st.text_area("Description *", height=100)

        if st.form_submit_button("Register", type="primary", use_container_width=True):
            if not title or not description or not location:
                st.error("Title, description and location are required")
            else:
                result = call_api(
                    "Registration", client.register_found,
                    title, description, location, event_date, category,
                )
                if result:
                    st.success(f"Item #{result['id']} registered as {result['status']}")


def render_claim_queue(client: UniFindClient):
    """Render pending claims with approve and reject controls."""
    st.subheader("🧾 Pending Claims")

    claims = call_api("Loading claims", client.list_claims, "PENDING")
    if claims is None:
        return
    if not claims["claims"]:
        st.info("No pending claims")
        return

    for claim in claims["claims"]:
        claim_id = claim["claimId"]
        with st.expander(f"Claim #{claim_id} - {claim['title']} ({claim['studentName'] or claim['studentEmail']})"):
            col1, col2 = st.columns([2, 1])
            with col1:
                st.markdown(f"**Item:** #{claim['itemId']} {claim['title']} at {claim['location']}")
                st.markdown(f"**Claimant:** {claim['studentName']} <{claim['studentEmail']}>")
                st.markdown(f"**Proof:** {claim.get('proofText') or '_none given_'}")
            with col2:
                st.markdown(
                    f"Item {render_state_badge(claim['itemStatus'])} "
                    f"Claim {render_state_badge(claim['claimStatus'])}",
                    unsafe_allow_html=True,
                )
                st.caption(f"Submitted {format_timestamp(claim['createdAt'])}")

            note = st.text_input("Admin note", key=f"note_{claim_id}",
                                 help="Required for rejection")

            col1, col2, col3 = st.columns([1, 1, 2])
            with col1:
                if st.button("✅ Approve", key=f"approve_{claim_id}", type="primary",
                             use_container_width=True):
                    result = call_api("Approval", client.approve_claim, claim_id, note)
                    if result:
                        st.success(f"Claim approved; item #{result['itemId']} is {result['itemStatus']}")
                        st.rerun()
            with col2:
                if st.button("❌ Reject", key=f"reject_{claim_id}", use_container_width=True):
                    if not note.strip():
                        st.error("Enter a note before rejecting")
                    else:
                        result = call_api("Rejection", client.reject_claim, claim_id, note)
                        if result:
                            st.success("Claim rejected")
                            st.rerun()


def render_status_override(client: UniFindClient, item: dict):
    """Render the administrative status override controls."""
    st.markdown(f"**Current State:** {render_state_badge(item['status'])}", unsafe_allow_html=True)

    next_statuses = item.get("nextStatuses", [])
    if next_statuses:
        st.caption(f"Normal next steps: {', '.join(next_statuses)}")
    else:
        st.caption("No further steps in the normal flow")

    statuses = [s.value for s in ItemStatus]
    default = statuses.index(next_statuses[0]) if next_statuses else statuses.index(item["status"])

    col1, col2 = st.columns(2)
    with col1:
        new_status = st.selectbox("New status", options=statuses, index=default,
                                  key=f"status_{item['id']}")
    with col2:
        reason = st.text_input("Reason (optional)", key=f"reason_{item['id']}")

    if new_status not in next_statuses and new_status != item["status"]:
        st.warning(f"{item['status']} → {new_status} is outside the normal flow and will be logged")

    if st.button("Apply", key=f"apply_{item['id']}", type="primary"):
        result = call_api("Status update", client.set_item_status, item["id"], new_status, reason)
        if result:
            st.success(f"Item #{result['id']}: {result['oldStatus']} → {result['newStatus']}")
            st.rerun()


def render_item_browser(client: UniFindClient):
    """Render the filterable item list with per-item details."""
    st.subheader("🔎 Items")

    col1, col2, col3 = st.columns([1, 1, 2])
    with col1:
        status = st.selectbox("Status", options=["ALL"] + [s.value for s in ItemStatus])
    with col2:
        category = st.selectbox("Category", options=["ALL"] + [c.value for c in ItemCategory],
                                key="browser_category")
    with col3:
        q = st.text_input("Search", placeholder="title, description or location")

    items = call_api(
        "Loading items", client.list_items,
        status=None if status == "ALL" else status,
        category=None if category == "ALL" else category,
        q=q or None,
    )
    if items is None:
        return

    st.caption(f"{items['count']} item(s)")
    for item in items["items"]:
        if st.button(
            f"#{item['id']} {item['title']} - {item['status']}",
            key=f"item_{item['id']}",
            use_container_width=True,
            help=f"{item['category']} at {item['location']} on {item['eventDate']}"
        ):
            st.session_state.selected_item = item["id"]

    if "selected_item" not in st.session_state:
        return

    item = call_api("Loading item", client.get_item, st.session_state.selected_item)
    if not item:
        return

    st.markdown("---")
    st.markdown(f"### #{item['id']} {item['title']}")
    st.markdown(f"**{item['category']}** · {item['location']} · {item['eventDate']}")
    st.write(item["description"])

    tab1, tab2 = st.tabs(["🛠️ Status Override", "📜 History"])
    with tab1:
        render_status_override(client, item)
    with tab2:
        render_history(client, item["id"])


def main():
    """Main dashboard application."""
    st.title("🗂️ UniFind Staff Dashboard")
    st.markdown("Campus Lost & Found Desk")

    with st.sidebar:
        st.header("⚙️ Connection")
        st.session_state.api_url = st.text_input("API Server URL", value=API_BASE_URL)
        st.session_state.token = st.text_input("Staff bearer token", type="password")

        if st.button("🔄 Refresh", use_container_width=True):
            st.rerun()

        client = get_client()
        if not client.health():
            st.error("⚠️ Cannot connect to API. Is the server running?")
            st.code("python -m unifind --reload")
            return

        if not client.token:
            st.info("Enter a staff token to continue")
            return

        summary = call_api("Loading summary", client.summary)
        if summary is None:
            return

        st.markdown("---")
        st.markdown("**📊 Statistics**")
        col1, col2 = st.columns(2)
        with col1:
            st.metric("Items", summary["totalItems"])
        with col2:
            st.metric("Claims", summary["totalClaims"])

        for state, count in summary["itemsByStatus"].items():
            st.markdown(f"{render_state_badge(state)} {count}", unsafe_allow_html=True)
        st.metric("Pending claims", summary["claimsByStatus"].get("PENDING", 0))

    tab1, tab2, tab3 = st.tabs(["🧾 Claims", "🔎 Items", "📦 Register Found"])
    with tab1:
        render_claim_queue(client)
    with tab2:
        render_item_browser(client)
    with tab3:
        render_register_found(client)


if __name__ == "__main__":
    main()
