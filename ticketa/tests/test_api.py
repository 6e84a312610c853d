"""
Test API endpoints.
"""
from unittest.mock import patch

from fastapi.testclient import TestClient


def create_published_event(client: TestClient, headers, total: int = 5, title: str = "API Event") -> dict:
    admin = headers(900, "admin")
    response = client.post("/events", json={"title": title, "total_tickets": total}, headers=admin)
    assert response.status_code == 201
    event = response.json()
    response = client.patch(f"/events/{event['id']}/publish", headers=admin)
    assert response.status_code == 200
    return response.json()


def reserve(client: TestClient, headers, event_id: int, user_id: int):
    return client.post("/reservations", json={"eventId": event_id}, headers=headers(user_id))


class TestPrincipal:
    """Test the principal headers."""

    def test_missing_headers(self, client: TestClient):
        response = client.get("/reservations")
        assert response.status_code == 401

    def test_unknown_role(self, client: TestClient):
        response = client.get("/reservations", headers={"X-User-Id": "1", "X-User-Role": "owner"})
        assert response.status_code == 401

    def test_malformed_user_id(self, client: TestClient):
        response = client.get("/reservations", headers={"X-User-Id": "abc", "X-User-Role": "admin"})
        assert response.status_code == 401


class TestEventEndpoints:
    """Test event administration endpoints."""

    def test_create_event(self, client: TestClient, headers):
        response = client.post(
            "/events",
            json={"title": "API Test Event", "total_tickets": 100, "location": "Hall A"},
            headers=headers(1, "admin"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "API Test Event"
        assert data["status"] == "draft"
        assert data["total_tickets"] == 100
        assert data["available_tickets"] == 100

    def test_create_event_requires_admin(self, client: TestClient, headers):
        response = client.post("/events", json={"title": "x", "total_tickets": 1}, headers=headers(1))
        assert response.status_code == 403

    def test_create_event_validation(self, client: TestClient, headers):
        response = client.post("/events", json={"title": "Test", "total_tickets": 0}, headers=headers(1, "admin"))
        assert response.status_code == 422

    def test_draft_event_hidden_from_participants(self, client: TestClient, headers):
        created = client.post(
            "/events", json={"title": "Secret", "total_tickets": 3}, headers=headers(1, "admin")
        ).json()

        assert client.get(f"/events/{created['id']}", headers=headers(2)).status_code == 404
        assert client.get(f"/events/{created['id']}", headers=headers(1, "admin")).status_code == 200

    def test_publish_and_cancel(self, client: TestClient, headers):
        event = create_published_event(client, headers)
        assert event["status"] == "published"

        response = client.patch(f"/events/{event['id']}/cancel", headers=headers(1, "admin"))
        assert response.status_code == 200
        assert response.json()["status"] == "canceled"

    def test_publish_missing_event(self, client: TestClient, headers):
        assert client.patch("/events/999/publish", headers=headers(1, "admin")).status_code == 404

    def test_list_events_shows_published_only(self, client: TestClient, headers):
        published = create_published_event(client, headers, title="Open Air")
        client.post("/events", json={"title": "Draft", "total_tickets": 2}, headers=headers(1, "admin"))

        response = client.get("/events")

        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == [published["id"]]

    def test_admin_list_includes_drafts(self, client: TestClient, headers):
        create_published_event(client, headers, title="Open Air")
        client.post("/events", json={"title": "Draft", "total_tickets": 2}, headers=headers(1, "admin"))

        response = client.get("/events/admin", headers=headers(1, "admin"))

        assert response.status_code == 200
        assert sorted(e["status"] for e in response.json()) == ["draft", "published"]

    def test_admin_list_requires_admin(self, client: TestClient, headers):
        assert client.get("/events/admin", headers=headers(1)).status_code == 403


class TestReservationEndpoints:
    """Test reservation endpoints."""

    def test_create_reservation(self, client: TestClient, headers, make_user):
        make_user(42)
        event = create_published_event(client, headers)

        response = reserve(client, headers, event["id"], 42)

        assert response.status_code == 201
        data = response.json()
        assert data["event_id"] == event["id"]
        assert data["user_id"] == 42
        assert data["status"] == "pending"
        assert data["event"]["title"] == "API Event"
        assert client.get(f"/events/{event['id']}", headers=headers(42)).json()["available_tickets"] == 4

    def test_create_for_unknown_principal(self, client: TestClient, headers):
        """Callers never registered in the users table can still reserve."""
        event = create_published_event(client, headers)

        response = reserve(client, headers, event["id"], 4242)

        assert response.status_code == 201
        assert response.json()["user_id"] == 4242

    def test_create_accepts_snake_case_body(self, client: TestClient, headers, make_user):
        make_user(1)
        event = create_published_event(client, headers)

        response = client.post("/reservations", json={"event_id": event["id"]}, headers=headers(1))
        assert response.status_code == 201

    def test_create_missing_event(self, client: TestClient, headers):
        response = reserve(client, headers, 9999, 1)

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_create_duplicate(self, client: TestClient, headers, make_user):
        make_user(1)
        event = create_published_event(client, headers)
        reserve(client, headers, event["id"], 1)

        response = reserve(client, headers, event["id"], 1)

        assert response.status_code == 400
        assert response.json()["code"] == "DUPLICATE_ACTIVE_RESERVATION"

    def test_create_sold_out(self, client: TestClient, headers, make_user):
        make_user(1)
        make_user(2)
        event = create_published_event(client, headers, total=1)
        reserve(client, headers, event["id"], 1)

        response = reserve(client, headers, event["id"], 2)

        assert response.status_code == 400
        assert response.json()["code"] == "SOLD_OUT"

    def test_create_not_published(self, client: TestClient, headers, make_user):
        make_user(1)
        draft = client.post(
            "/events", json={"title": "Draft", "total_tickets": 3}, headers=headers(1, "admin")
        ).json()

        response = reserve(client, headers, draft["id"], 1)

        assert response.status_code == 400
        assert response.json()["code"] == "EVENT_NOT_PUBLISHED"

    def test_create_enqueues_audit(self, client: TestClient, headers, make_user):
        make_user(1)
        event = create_published_event(client, headers)

        with patch("ticketa.routes.reservations.enqueue_inventory_audit") as enqueue:
            reserve(client, headers, event["id"], 1)

        enqueue.assert_called_once_with(event["id"])

    def test_list_scoped_per_role(self, client: TestClient, headers, make_user):
        make_user(1)
        make_user(2)
        event = create_published_event(client, headers)
        reserve(client, headers, event["id"], 1)
        reserve(client, headers, event["id"], 2)

        mine = client.get("/reservations", params={"userId": 2}, headers=headers(1)).json()
        everyone = client.get("/reservations", headers=headers(99, "admin")).json()
        filtered = client.get(
            "/reservations", params={"userId": 2, "status": "pending"}, headers=headers(99, "admin")
        ).json()

        assert [r["user_id"] for r in mine] == [1]
        assert len(everyone) == 2
        assert [r["user_id"] for r in filtered] == [2]

    def test_list_empty_for_participant_without_reservations(self, client: TestClient, headers, make_user):
        make_user(1)
        event = create_published_event(client, headers)
        reserve(client, headers, event["id"], 1)

        response = client.get("/reservations", headers=headers(2))

        assert response.status_code == 200
        assert response.json() == []

    def test_list_rejects_unknown_status(self, client: TestClient, headers):
        response = client.get("/reservations", params={"status": "finalized"}, headers=headers(1))
        assert response.status_code == 422

    def test_get_other_users_reservation(self, client: TestClient, headers, make_user):
        make_user(1)
        event = create_published_event(client, headers)
        reservation = reserve(client, headers, event["id"], 1).json()

        response = client.get(f"/reservations/{reservation['id']}", headers=headers(2))

        assert response.status_code == 400
        assert response.json()["code"] == "FORBIDDEN"

    def test_get_missing_reservation(self, client: TestClient, headers):
        assert client.get("/reservations/9999", headers=headers(1)).status_code == 404

    def test_confirm_requires_admin(self, client: TestClient, headers, make_user):
        make_user(1)
        event = create_published_event(client, headers)
        reservation = reserve(client, headers, event["id"], 1).json()

        response = client.patch(f"/reservations/{reservation['id']}/confirm", headers=headers(1))
        assert response.status_code == 403

    def test_confirm_twice(self, client: TestClient, headers, make_user):
        make_user(1)
        event = create_published_event(client, headers)
        reservation = reserve(client, headers, event["id"], 1).json()
        url = f"/reservations/{reservation['id']}/confirm"

        assert client.patch(url, headers=headers(9, "admin")).json()["status"] == "confirmed"
        response = client.patch(url, headers=headers(9, "admin"))

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_TRANSITION"
        assert "confirmed" in response.json()["detail"]

    def test_refuse_releases(self, client: TestClient, headers, make_user):
        make_user(1)
        event = create_published_event(client, headers)
        reservation = reserve(client, headers, event["id"], 1).json()

        response = client.patch(f"/reservations/{reservation['id']}/refuse", headers=headers(9, "admin"))

        assert response.status_code == 200
        assert response.json()["status"] == "refused"
        assert client.get(f"/events/{event['id']}", headers=headers(1)).json()["available_tickets"] == 5
        assert reserve(client, headers, event["id"], 1).status_code == 201

    def test_cancel_flow(self, client: TestClient, headers, make_user):
        make_user(1)
        event = create_published_event(client, headers)
        reservation = reserve(client, headers, event["id"], 1).json()

        forbidden = client.delete(f"/reservations/{reservation['id']}", headers=headers(2))
        cancelled = client.delete(f"/reservations/{reservation['id']}", headers=headers(1))
        again = client.delete(f"/reservations/{reservation['id']}", headers=headers(1))

        assert forbidden.status_code == 400
        assert forbidden.json()["code"] == "FORBIDDEN"
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"
        assert again.status_code == 400
        assert again.json()["code"] == "ALREADY_CANCELLED"


class TestTicketDownload:
    """Test the ticket document endpoint."""

    def test_download_confirmed_ticket(self, client: TestClient, headers, make_user):
        make_user(1)
        event = create_published_event(client, headers)
        reservation = reserve(client, headers, event["id"], 1).json()
        client.patch(f"/reservations/{reservation['id']}/confirm", headers=headers(9, "admin"))

        response = client.get(f"/reservations/{reservation['id']}/pdf", headers=headers(1))

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == f"attachment; filename=ticket-{reservation['id']}.pdf"
        assert response.content.startswith(b"%PDF")

    def test_download_ticket_for_unknown_principal(self, client: TestClient, headers):
        event = create_published_event(client, headers)
        reservation = reserve(client, headers, event["id"], 4242).json()
        client.patch(f"/reservations/{reservation['id']}/confirm", headers=headers(9, "admin"))

        response = client.get(f"/reservations/{reservation['id']}/pdf", headers=headers(4242))

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    def test_download_pending_ticket(self, client: TestClient, headers, make_user):
        make_user(1)
        event = create_published_event(client, headers)
        reservation = reserve(client, headers, event["id"], 1).json()

        response = client.get(f"/reservations/{reservation['id']}/pdf", headers=headers(1))

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STATE"

    def test_download_missing_ticket(self, client: TestClient, headers):
        assert client.get("/reservations/9999/pdf", headers=headers(1)).status_code == 404


class TestReportEndpoints:
    """Test report endpoints."""

    def test_event_report(self, client: TestClient, headers, make_user):
        make_user(1)
        make_user(2)
        event = create_published_event(client, headers, total=10)
        first = reserve(client, headers, event["id"], 1).json()
        reserve(client, headers, event["id"], 2)
        client.patch(f"/reservations/{first['id']}/confirm", headers=headers(9, "admin"))

        response = client.get(f"/reports/events/{event['id']}", headers=headers(9, "admin"))

        assert response.status_code == 200
        data = response.json()
        assert data["total_tickets"] == 10
        assert data["available_tickets"] == 8
        assert data["pending_count"] == 1
        assert data["confirmed_count"] == 1
        assert data["consistent"] is True

    def test_event_report_not_found(self, client: TestClient, headers):
        assert client.get("/reports/events/9999", headers=headers(9, "admin")).status_code == 404

    def test_reports_require_admin(self, client: TestClient, headers):
        assert client.get("/reports", headers=headers(1)).status_code == 403

    def test_overall_report(self, client: TestClient, headers, make_user):
        make_user(1)
        first = create_published_event(client, headers, total=10, title="A")
        create_published_event(client, headers, total=20, title="B")
        reserve(client, headers, first["id"], 1)

        response = client.get("/reports", headers=headers(9, "admin"))

        assert response.status_code == 200
        data = response.json()
        assert data["total_tickets"] == 30
        assert data["total_available"] == 29
        assert data["total_reserved"] == 1
        assert data["total_pending"] == 1

    def test_overall_report_empty(self, client: TestClient, headers):
        response = client.get("/reports", headers=headers(9, "admin"))

        assert response.status_code == 200
        assert response.json()["total_tickets"] == 0
