"""Helpers of the Streamlit consoles, with Streamlit replaced by a recorder."""
import pytest
import requests

import client_app
import dashboard
from fakes import FakeResponse, FakeSession
from unifind.client import UniFindAPIError, UniFindClient


class RecordingStreamlit:
    def __init__(self, token="t"):
        self.session_state = {"token": token}
        self.messages = []

    def error(self, text):
        self.messages.append(("error", text))

    def warning(self, text):
        self.messages.append(("warning", text))


@pytest.fixture
def recorder():
    return RecordingStreamlit()


class TestDashboardHelpers:
    def test_call_api_reports_unreachable_server(self, monkeypatch, recorder):
        monkeypatch.setattr(dashboard, "st", recorder)

        def refuse():
            raise requests.exceptions.ConnectionError("refused")

        assert dashboard.call_api("Loading summary", refuse) is None
        assert recorder.messages[0][0] == "error"
        assert "cannot reach API" in recorder.messages[0][1]

    def test_call_api_reports_api_errors(self, monkeypatch, recorder):
        monkeypatch.setattr(dashboard, "st", recorder)

        def conflict():
            raise UniFindAPIError(409, "INVALID_STATE", "Item must be FOUND to approve claim")

        assert dashboard.call_api("Approval", conflict) is None
        assert recorder.messages == [("error", "Approval failed: Item must be FOUND to approve claim")]

    def test_call_api_does_not_hide_programming_errors(self, monkeypatch, recorder):
        monkeypatch.setattr(dashboard, "st", recorder)

        def broken():
            raise KeyError("claimId")

        with pytest.raises(KeyError):
            dashboard.call_api("Approval", broken)

    @pytest.mark.parametrize(
        "old,new,off_table",
        [
            (None, "FOUND", False),
            ("FOUND", "CLAIMED", False),
            ("CLAIMED", "ARCHIVED", False),
            ("FOUND", "FOUND", False),
            ("ARCHIVED", "FOUND", True),
            ("LOST", "CLAIMED", True),
        ],
    )
    def test_off_table_moves_are_flagged(self, old, new, off_table):
        entry = {"oldStatus": old, "newStatus": new}
        assert dashboard.is_off_table(entry) is off_table

    def test_history_entry_styles_and_escapes(self):
        entry = {
            "oldStatus": "ARCHIVED",
            "newStatus": "FOUND",
            "changeReason": "Admin status update <img src=x onerror=alert(1)>",
            "changedAt": "2024-03-01T10:15:00",
            "changedByUserId": 100,
        }

        markup = dashboard.render_history_entry(entry)

        assert 'class="timeline-item override"' in markup
        assert "<img" not in markup
        assert "&lt;img src=x onerror=alert(1)&gt;" in markup
        assert "2024-03-01 10:15" in markup


class TestStudentPortalHelpers:
    def test_item_card_escapes_user_text(self):
        markup = client_app.item_card_html({
            "title": "<script>alert('x')</script>",
            "category": "BAG",
            "location": "Gym & Pool",
            "eventDate": "2024-02-12",
            "description": "<b>bold</b>",
        })

        assert "<script>" not in markup
        assert "&lt;script&gt;" in markup
        assert "Gym &amp; Pool" in markup
        assert "&lt;b&gt;bold&lt;/b&gt;" in markup

    def test_claim_conflict_is_a_warning(self, monkeypatch, recorder):
        session = FakeSession(
            FakeResponse(409, {"error": "CONFLICT", "detail": "You already have a pending claim for this item"})
        )
        monkeypatch.setattr(client_app, "st", recorder)
        monkeypatch.setattr(
            client_app, "get_client", lambda: UniFindClient("http://api.test", token="t", session=session)
        )

        assert client_app.submit_claim(3, "mine") is None
        assert recorder.messages == [("warning", "⚠️ You already have a pending claim for this item")]

    def test_unreachable_server_is_reported(self, monkeypatch, recorder):
        session = FakeSession(requests.exceptions.ConnectTimeout("timed out"))
        monkeypatch.setattr(client_app, "st", recorder)
        monkeypatch.setattr(
            client_app, "get_client", lambda: UniFindClient("http://api.test", session=session)
        )

        assert client_app.search_found_items(None, "umbrella", None, None) is None
        assert recorder.messages[0][0] == "error"
        assert "Cannot reach server" in recorder.messages[0][1]
