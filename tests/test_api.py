from datetime import timedelta

import pytest
from jose import jwt

from unifind.config import settings
from unifind.core.models import Principal
from unifind.core.states import Role
from unifind.security import create_access_token

WALLET = {
    "title": "Black Wallet",
    "description": "Leather, 10 digits embossed",
    "location": "Library",
    "eventDate": "2024-01-05",
}

UMBRELLA = {
    "title": "Green umbrella",
    "description": "Folding umbrella with a wooden handle",
    "category": "OTHER",
    "location": "Lecture Hall B",
    "eventDate": "2024-02-12",
}


@pytest.fixture
def found_id(client, admin_headers):
    response = client.post("/items/found", json=UMBRELLA, headers=admin_headers)
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def claim_id(client, student_headers, found_id):
    response = client.post(
        "/claims", json={"itemId": found_id, "proofText": "Initials carved on the handle"},
        headers=student_headers,
    )
    assert response.status_code == 201
    return response.json()["claimId"]


class TestSystemRoutes:
    def test_root(self, client):
        assert client.get("/").json()["system"] == "UniFind Lost & Found"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_db_health(self, client):
        response = client.get("/health/db")
        assert response.status_code == 200
        assert response.json() == {"db": "connected", "result": {"ok": 1}}


class TestAuth:
    def test_missing_token(self, client):
        response = client.post("/items/lost", json=WALLET)
        assert response.status_code == 401
        assert response.json()["detail"] == "Missing bearer token"

    def test_garbage_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_expired_token(self, client, student):
        token = create_access_token(student, expires_in=timedelta(seconds=-5))
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_me(self, client, student_headers, student):
        user = client.get("/auth/me", headers=student_headers).json()["user"]
        assert user["id"] == student.id
        assert user["role"] == "STUDENT"
        assert user["fullName"] == student.full_name
        assert user["universityId"] == student.university_id

    def test_wrong_role(self, client, admin_headers, student_headers):
        response = client.post("/items/lost", json=WALLET, headers=admin_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "STUDENT role required"

        response = client.get("/admin/summary", headers=student_headers)
        assert response.status_code == 403


class TestItems:
    def test_report_lost(self, client, student_headers, admin_headers):
        response = client.post("/items/lost", json=WALLET, headers=student_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "LOST"

        lost = client.get("/admin/items", params={"status": "LOST"}, headers=admin_headers).json()
        assert body["id"] in [i["id"] for i in lost["items"]]
        assert lost["items"][0]["category"] == "OTHER"

    def test_missing_fields(self, client, student_headers):
        response = client.post("/items/lost", json={"title": "Wallet"}, headers=student_headers)
        assert response.status_code == 400
        assert response.json() == {
            "error": "VALIDATION_ERROR",
            "detail": "Missing required fields: description, location, eventDate",
        }

    def test_unknown_category_is_rejected_by_schema(self, client, student_headers):
        response = client.post(
            "/items/lost", json={**WALLET, "category": "SPACESHIP"}, headers=student_headers
        )
        assert response.status_code == 422

    def test_public_found_listing(self, client, student_headers, found_id):
        client.post("/items/lost", json=WALLET, headers=student_headers)

        body = client.get("/items/found").json()

        assert body["count"] == 1
        assert body["items"][0]["id"] == found_id
        assert body["items"][0]["eventDate"] == "2024-02-12"

    def test_found_listing_filters(self, client, found_id):
        assert client.get("/items/found", params={"q": "WOODEN"}).json()["count"] == 1
        assert client.get("/items/found", params={"q": "laptop"}).json()["count"] == 0
        assert client.get("/items/found", params={"category": "KEYS"}).json()["count"] == 0
        in_range = client.get("/items/found", params={"from": "2024-02-01", "to": "2024-02-28"})
        assert in_range.json()["count"] == 1
        too_late = client.get("/items/found", params={"from": "2024-03-01"})
        assert too_late.json()["count"] == 0

    def test_get_item(self, client, student_headers, found_id):
        body = client.get(f"/items/{found_id}", headers=student_headers).json()
        assert body["status"] == "FOUND"
        assert body["nextStatuses"] == ["ARCHIVED", "CLAIMED"]

    def test_get_unknown_item(self, client, student_headers):
        response = client.get("/items/999", headers=student_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "NOT_FOUND", "detail": "Item not found"}

    def test_status_override_and_history(self, client, admin_headers, found_id):
        response = client.patch(
            f"/items/{found_id}/status",
            json={"newStatus": "ARCHIVED", "reason": "Donated"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"id": found_id, "oldStatus": "FOUND", "newStatus": "ARCHIVED"}

        history = client.get(f"/items/{found_id}/history", headers=admin_headers).json()
        assert history["count"] == 2
        assert history["history"][-1]["changeReason"] == "Donated"
        assert history["history"][0]["oldStatus"] is None

    def test_status_override_validation(self, client, admin_headers, found_id):
        response = client.patch(f"/items/{found_id}/status", json={}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing newStatus"

        response = client.patch(
            f"/items/{found_id}/status", json={"newStatus": "GONE"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid status GONE")

    def test_status_override_unknown_item(self, client, admin_headers):
        response = client.patch("/items/999/status", json={"newStatus": "ARCHIVED"}, headers=admin_headers)
        assert response.status_code == 404


class TestClaims:
    def test_claim_approve_flow(self, client, student_headers, other_student_headers, admin_headers,
                                found_id, claim_id):
        response = client.patch(
            f"/claims/{claim_id}/approve", json={"adminNote": "matches"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json() == {
            "claimId": claim_id,
            "claimStatus": "APPROVED",
            "itemId": found_id,
            "itemStatus": "CLAIMED",
        }
        assert client.get(f"/items/{found_id}", headers=student_headers).json()["status"] == "CLAIMED"

        again = client.post("/claims", json={"itemId": found_id}, headers=other_student_headers)
        assert again.status_code == 409
        assert again.json() == {"error": "INVALID_STATE", "detail": "Item must be FOUND to claim"}

        claimed = client.get("/admin/items/claimed", headers=admin_headers).json()
        assert [i["id"] for i in claimed["items"]] == [found_id]

    def test_approve_without_body(self, client, admin_headers, claim_id):
        response = client.patch(f"/claims/{claim_id}/approve", headers=admin_headers)
        assert response.status_code == 200

    def test_duplicate_claim(self, client, student_headers, found_id, claim_id):
        response = client.post("/claims", json={"itemId": found_id}, headers=student_headers)
        assert response.status_code == 409
        assert response.json() == {
            "error": "CONFLICT",
            "detail": "You already have a pending claim for this item",
        }

    def test_claim_missing_item_id(self, client, student_headers):
        response = client.post("/claims", json={}, headers=student_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing itemId"

    def test_claim_unknown_item(self, client, student_headers):
        response = client.post("/claims", json={"itemId": 999}, headers=student_headers)
        assert response.status_code == 404

    def test_reject_requires_note(self, client, student_headers, admin_headers, found_id, claim_id):
        response = client.patch(
            f"/claims/{claim_id}/reject", json={"adminNote": ""}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json() == {
            "error": "VALIDATION_ERROR",
            "detail": "adminNote is required for rejection",
        }

        response = client.patch(
            f"/claims/{claim_id}/reject", json={"adminNote": "insufficient proof"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json() == {"claimId": claim_id, "claimStatus": "REJECTED"}
        assert client.get(f"/items/{found_id}", headers=student_headers).json()["status"] == "FOUND"

        response = client.patch(
            f"/claims/{claim_id}/approve", headers=admin_headers
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "Only PENDING claims can be approved"

    def test_unknown_claim(self, client, admin_headers):
        response = client.patch("/claims/999/approve", headers=admin_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "NOT_FOUND", "detail": "Claim not found"}

    def test_list_and_get_claims(self, client, admin_headers, student, claim_id):
        listing = client.get("/claims", params={"status": "PENDING"}, headers=admin_headers).json()
        assert listing["count"] == 1
        entry = listing["claims"][0]
        assert entry["claimId"] == claim_id
        assert entry["studentName"] == student.full_name
        assert entry["itemStatus"] == "FOUND"

        assert client.get("/claims", params={"status": "APPROVED"}, headers=admin_headers).json()["count"] == 0

        claim = client.get(f"/claims/{claim_id}", headers=admin_headers).json()
        assert claim["status"] == "PENDING"
        assert claim["proofText"] == "Initials carved on the handle"

    def test_students_cannot_review(self, client, student_headers, claim_id):
        response = client.patch(f"/claims/{claim_id}/approve", headers=student_headers)
        assert response.status_code == 403


class TestAdmin:
    def test_summary(self, client, admin_headers, student_headers, claim_id):
        client.post("/items/lost", json=WALLET, headers=student_headers)

        summary = client.get("/admin/summary", headers=admin_headers).json()

        assert summary["totalItems"] == 2
        assert summary["itemsByStatus"]["FOUND"] == 1
        assert summary["itemsByStatus"]["LOST"] == 1
        assert summary["claimsByStatus"] == {"PENDING": 1, "APPROVED": 0, "REJECTED": 0}

    def test_lost_listing(self, client, admin_headers, student_headers, found_id):
        lost_id = client.post("/items/lost", json=WALLET, headers=student_headers).json()["id"]
        lost = client.get("/admin/items/lost", headers=admin_headers).json()
        assert [i["id"] for i in lost["items"]] == [lost_id]

    def test_token_with_display_fields_omitted(self, client):
        token = create_access_token(Principal(id=7, role=Role.ADMIN))
        response = client.get("/admin/summary", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

    def test_token_without_role_is_rejected(self, client):
        token = jwt.encode({"id": 7, "email": "x@uni.example"}, settings.JWT_SECRET,
                           algorithm=settings.JWT_ALGORITHM)
        response = client.get("/admin/summary", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Token does not describe a user"
