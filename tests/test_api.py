"""
End-to-end tests of the HTTP surface through FastAPI's TestClient.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from auth import issue_token


def test_root_points_to_docs(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["documentation"] == "/api-docs"


class TestFlights:

    def test_list_is_public_and_camel_cased(self, client):
        response = client.get("/api/flights")
        assert response.status_code == 200
        flights = response.json()
        assert len(flights) == 6
        assert flights[0] == {
            "id": 1,
            "flightNumber": "VL001",
            "origin": "Barcelona",
            "destination": "Madrid",
            "departureDate": "2024-06-15",
            "departureTime": "08:00",
            "arrivalTime": "09:15",
            "price": 89.99,
            "availableSeats": 120,
            "airline": "Vueling",
        }

    def test_filters(self, client):
        response = client.get("/api/flights", params={"origin": "barcelona", "date": "2024-06-15"})
        assert [f["flightNumber"] for f in response.json()] == ["VL001", "IB234"]

    def test_malformed_date_is_a_bad_request(self, client):
        response = client.get("/api/flights", params={"date": "15/06/2024"})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_detail_and_not_found(self, client):
        assert client.get("/api/flights/2").json()["flightNumber"] == "IB234"

        response = client.get("/api/flights/999")
        assert response.status_code == 404
        assert response.json() == {"error": "Flight not found"}

    def test_distinct_origins_and_destinations(self, client):
        assert client.get("/api/flights/search/origins").json() == ["Barcelona", "Madrid"]
        destinations = client.get("/api/flights/search/destinations").json()
        assert sorted(destinations) == sorted(
            ["Madrid", "París", "Londres", "Barcelona", "Roma", "Amsterdam"]
        )


class TestAuth:

    def test_register_returns_token_and_public_profile(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "Joan Garcia", "email": "joan@example.com", "password": "password123"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["token"]
        assert body["user"] == {"id": 1, "name": "Joan Garcia", "email": "joan@example.com"}

    def test_register_validation(self, client, auth_headers):
        response = client.post(
            "/api/auth/register",
            json={"name": "Joan", "email": "joan@example.com", "password": "12345"},
        )
        assert response.status_code == 400
        assert "error" in response.json()

        auth_headers(email="joan@example.com")
        response = client.post(
            "/api/auth/register",
            json={"name": "Joan", "email": "joan@example.com", "password": "123456"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "This email is already registered"}

    def test_login(self, client, auth_headers):
        auth_headers(email="joan@example.com", password="password123")

        response = client.post(
            "/api/auth/login", json={"email": "joan@example.com", "password": "password123"}
        )
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "joan@example.com"

        wrong = client.post(
            "/api/auth/login", json={"email": "joan@example.com", "password": "nope-nope"}
        )
        unknown = client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "password123"}
        )
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json() == {"error": "Invalid credentials"}

        missing = client.post("/api/auth/login", json={"email": "joan@example.com"})
        assert missing.status_code == 400

    def test_profile(self, client, auth_headers):
        headers = auth_headers(email="joan@example.com", name="Joan Garcia")
        response = client.get("/api/auth/profile", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"id": 1, "name": "Joan Garcia", "email": "joan@example.com"}

    def test_profile_of_unknown_account(self, client):
        token = issue_token(SimpleNamespace(id=99, email="ghost@example.com", name="Ghost"))
        response = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 404

    def test_missing_and_invalid_tokens(self, client):
        missing = client.get("/api/bookings")
        assert missing.status_code == 401
        assert missing.json() == {"error": "Access token required"}

        invalid = client.get("/api/bookings", headers={"Authorization": "Bearer garbage"})
        assert invalid.status_code == 403
        assert invalid.json() == {"error": "Invalid or expired token"}


class TestBookings:

    def test_booking_lifecycle(self, client, auth_headers):
        headers = auth_headers()

        created = client.post(
            "/api/bookings", json={"flightId": 1, "passengers": 2}, headers=headers
        )
        assert created.status_code == 201
        booking = created.json()["booking"]
        assert booking["status"] == "confirmed"
        assert booking["passengers"] == 2
        assert booking["totalPrice"] == 179.98
        assert booking["flight"]["availableSeats"] == 118
        assert client.get("/api/flights/1").json()["availableSeats"] == 118

        modified = client.put(
            f"/api/bookings/{booking['id']}", json={"passengers": 4}, headers=headers
        )
        assert modified.status_code == 200
        assert modified.json()["booking"]["totalPrice"] == 359.96
        assert modified.json()["booking"]["flight"]["availableSeats"] == 116

        cancelled = client.delete(f"/api/bookings/{booking['id']}", headers=headers)
        assert cancelled.status_code == 200
        assert cancelled.json()["booking"]["status"] == "cancelled"
        assert client.get("/api/flights/1").json()["availableSeats"] == 120

        again = client.delete(f"/api/bookings/{booking['id']}", headers=headers)
        assert again.status_code == 400
        assert again.json() == {"error": "Booking is already cancelled"}

        listed = client.get("/api/bookings", headers=headers).json()
        assert [b["status"] for b in listed] == ["cancelled"]
        assert listed[0]["flight"]["flightNumber"] == "VL001"

    def test_create_validation_and_lookup(self, client, auth_headers):
        headers = auth_headers()

        too_many = client.post(
            "/api/bookings", json={"flightId": 999, "passengers": 10}, headers=headers
        )
        assert too_many.status_code == 400

        missing = client.post("/api/bookings", json={"flightId": 1}, headers=headers)
        assert missing.status_code == 400

        unknown = client.post(
            "/api/bookings", json={"flightId": 999, "passengers": 1}, headers=headers
        )
        assert unknown.status_code == 404

    def test_capacity_conflict_reports_available_seats(self, client, auth_headers, small_flight):
        headers = auth_headers()
        first = client.post(
            "/api/bookings", json={"flightId": small_flight.id, "passengers": 4}, headers=headers
        )
        assert first.status_code == 201

        response = client.post(
            "/api/bookings", json={"flightId": small_flight.id, "passengers": 2}, headers=headers
        )
        assert response.status_code == 409
        assert response.json()["availableSeats"] == 1

        grow = client.put(
            f"/api/bookings/{first.json()['booking']['id']}",
            json={"passengers": 6},
            headers=headers,
        )
        assert grow.status_code == 409
        assert grow.json()["availableSeats"] == 5

    def test_other_users_cannot_touch_a_booking(self, client, auth_headers):
        owner = auth_headers(email="owner@example.com")
        intruder = auth_headers(email="intruder@example.com")
        booking_id = client.post(
            "/api/bookings", json={"flightId": 3, "passengers": 1}, headers=owner
        ).json()["booking"]["id"]

        assert client.get(f"/api/bookings/{booking_id}", headers=intruder).status_code == 403
        assert client.put(
            f"/api/bookings/{booking_id}", json={"passengers": 2}, headers=intruder
        ).status_code == 403
        assert client.delete(f"/api/bookings/{booking_id}", headers=intruder).status_code == 403
        assert client.get("/api/bookings", headers=intruder).json() == []

        assert client.get(f"/api/bookings/{booking_id}", headers=owner).status_code == 200

    def test_unknown_booking(self, client, auth_headers):
        headers = auth_headers()
        assert client.get("/api/bookings/42", headers=headers).status_code == 404
        assert client.put("/api/bookings/42", json={"passengers": 1}, headers=headers).status_code == 404
        assert client.delete("/api/bookings/42", headers=headers).status_code == 404

    def test_ids_beyond_integer_range_are_not_found(self, client, auth_headers):
        headers = auth_headers()
        huge = 99999999999999999999

        flight = client.get(f"/api/flights/{huge}")
        assert flight.status_code == 404
        assert flight.json() == {"error": "Flight not found"}

        created = client.post(
            "/api/bookings", json={"flightId": huge, "passengers": 1}, headers=headers
        )
        assert created.status_code == 404

        assert client.get(f"/api/bookings/{huge}", headers=headers).status_code == 404
        assert client.put(
            f"/api/bookings/{huge}", json={"passengers": 1}, headers=headers
        ).status_code == 404
        assert client.delete(f"/api/bookings/{-huge}", headers=headers).status_code == 404

    def test_boolean_counts_are_rejected(self, client, auth_headers):
        headers = auth_headers()

        created = client.post(
            "/api/bookings", json={"flightId": 1, "passengers": True}, headers=headers
        )
        assert created.status_code == 400
        assert "error" in created.json()
        assert client.post(
            "/api/bookings", json={"flightId": True, "passengers": 1}, headers=headers
        ).status_code == 400
        assert client.get("/api/flights/1").json()["availableSeats"] == 120

        booking_id = client.post(
            "/api/bookings", json={"flightId": 1, "passengers": 2}, headers=headers
        ).json()["booking"]["id"]
        modified = client.put(
            f"/api/bookings/{booking_id}", json={"passengers": True}, headers=headers
        )
        assert modified.status_code == 400
        assert client.get(f"/api/bookings/{booking_id}", headers=headers).json()["passengers"] == 2

    def test_created_at_is_utc(self, client, auth_headers):
        headers = auth_headers()
        booking = client.post(
            "/api/bookings", json={"flightId": 1, "passengers": 1}, headers=headers
        ).json()["booking"]

        created_at = datetime.fromisoformat(booking["createdAt"].replace("Z", "+00:00"))
        assert booking["createdAt"].endswith("Z")
        assert created_at.utcoffset() == timedelta(0)
        assert abs(datetime.now(timezone.utc) - created_at) < timedelta(minutes=5)

        listed = client.get("/api/bookings", headers=headers).json()
        assert listed[0]["createdAt"] == booking["createdAt"]
