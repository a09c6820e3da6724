"""
Integration tests for the HTTP API.

Tests the full request/response cycle through FastAPI against the
in-memory storage backend.
"""

import pytest
from httpx import AsyncClient

API = "/api/v1"

VENDOR_PAYLOAD = {
    "business_name": "Bloom & Petal",
    "category": "Florist",
    "description": "Fresh flowers for every occasion",
}

SERVICE_PAYLOAD = {
    "name": "Wedding bouquet",
    "category": "Flowers",
    "description": "Hand tied seasonal bouquet",
    "price": "$120",
}


# =============================================================================
# Helpers
# =============================================================================

async def register(client: AsyncClient, username: str, vendor: dict = None, name: str = None) -> dict:
    payload = {
        "name": name or username.title(),
        "username": username,
        "email": f"{username}@example.com",
        "password": "secret123",
    }
    if vendor is not None:
        payload["vendor"] = vendor
    response = await client.post(f"{API}/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def auth(account: dict) -> dict:
    return {"Authorization": f"Bearer {account['token']}"}


async def book(client: AsyncClient, customer: dict, vendor_id: int) -> dict:
    response = await client.post(
        f"{API}/bookings",
        json={"user_id": customer["user"]["id"], "vendor_id": vendor_id, "date": "2025-09-01T10:00:00Z"},
        headers=auth(customer),
    )
    assert response.status_code == 201, response.text
    return response.json()


# =============================================================================
# Auth
# =============================================================================

class TestAuth:
    async def test_register_user(self, client: AsyncClient):
        account = await register(client, "alice")

        assert account["user"]["id"] == 1
        assert account["user"]["role"] == "user"
        assert "password" not in account["user"]
        assert account["vendor_profile"] is None
        assert account["token"]

    async def test_register_vendor(self, client: AsyncClient):
        account = await register(client, "florist", vendor=VENDOR_PAYLOAD)

        assert account["user"]["role"] == "vendor"
        assert account["vendor_profile"]["business_name"] == "Bloom & Petal"
        assert account["vendor_profile"]["user_id"] == account["user"]["id"]

    async def test_invalid_vendor_payload_uses_defaults(self, client: AsyncClient):
        account = await register(client, "florist", vendor={"business_name": "X"}, name="Flora Smith")

        profile = account["vendor_profile"]
        assert profile["business_name"] == "Flora Smith's Business"
        assert profile["category"] == "General Services"

    async def test_duplicate_email(self, client: AsyncClient):
        await register(client, "alice")

        response = await client.post(
            f"{API}/auth/register",
            json={"name": "Alice Two", "username": "alice2", "email": "alice@example.com", "password": "secret123"},
        )

        assert response.status_code == 400

    async def test_invalid_payload(self, client: AsyncClient):
        response = await client.post(
            f"{API}/auth/register",
            json={"name": "A", "username": "al", "email": "not-an-email", "password": "123"},
        )

        assert response.status_code == 422

    async def test_login(self, client: AsyncClient):
        await register(client, "florist", vendor=VENDOR_PAYLOAD)

        response = await client.post(
            f"{API}/auth/login", json={"email": "florist@example.com", "password": "secret123"}
        )

        assert response.status_code == 200
        assert response.json()["vendor_profile"]["id"] == 1

    async def test_login_with_wrong_password(self, client: AsyncClient):
        await register(client, "alice")

        response = await client.post(
            f"{API}/auth/login", json={"email": "alice@example.com", "password": "wrong-password"}
        )

        assert response.status_code == 401


# =============================================================================
# Users
# =============================================================================

class TestUsers:
    async def test_me_requires_token(self, client: AsyncClient):
        assert (await client.get(f"{API}/users/me")).status_code == 401
        response = await client.get(f"{API}/users/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    async def test_read_and_update_me(self, client: AsyncClient):
        account = await register(client, "alice")

        me = await client.get(f"{API}/users/me", headers=auth(account))
        updated = await client.put(f"{API}/users/me", json={"bio": "Plans weddings"}, headers=auth(account))

        assert me.json()["username"] == "alice"
        assert updated.status_code == 200
        assert updated.json()["bio"] == "Plans weddings"
        assert "password" not in updated.json()

    async def test_update_to_taken_username(self, client: AsyncClient):
        await register(client, "alice")
        bob = await register(client, "bob")

        response = await client.put(f"{API}/users/me", json={"username": "alice"}, headers=auth(bob))

        assert response.status_code == 400

    async def test_change_password(self, client: AsyncClient):
        account = await register(client, "alice")

        wrong = await client.put(
            f"{API}/users/password",
            json={"current_password": "nope", "new_password": "newsecret"},
            headers=auth(account),
        )
        changed = await client.put(
            f"{API}/users/password",
            json={"current_password": "secret123", "new_password": "newsecret"},
            headers=auth(account),
        )
        login = await client.post(f"{API}/auth/login", json={"email": "alice@example.com", "password": "newsecret"})

        assert wrong.status_code == 401
        assert changed.status_code == 200
        assert login.status_code == 200


# =============================================================================
# Vendors
# =============================================================================

class TestVendors:
    async def test_list_and_search(self, client: AsyncClient):
        await register(client, "florist", vendor=VENDOR_PAYLOAD)
        await register(
            client,
            "dj",
            vendor={"business_name": "Sound Waves", "category": "Music", "description": "Music for your party"},
            name="Ferdinand Falk",
        )

        everything = await client.get(f"{API}/vendors")
        by_category = await client.get(f"{API}/vendors", params={"search": "music"})
        by_owner = await client.get(f"{API}/vendors", params={"search": "falk"})

        assert [v["business_name"] for v in everything.json()] == ["Bloom & Petal", "Sound Waves"]
        assert [v["business_name"] for v in by_category.json()] == ["Sound Waves"]
        assert [v["user"]["name"] for v in by_owner.json()] == ["Ferdinand Falk"]
        assert "password" not in everything.json()[0]["user"]

    async def test_profile(self, client: AsyncClient):
        florist = await register(client, "florist", vendor=VENDOR_PAYLOAD)
        customer = await register(client, "customer")
        await client.post(f"{API}/services", json=SERVICE_PAYLOAD, headers=auth(florist))
        await client.post(
            f"{API}/reviews",
            json={"user_id": customer["user"]["id"], "vendor_id": 1, "rating": 4, "comment": "Lovely"},
            headers=auth(customer),
        )

        response = await client.get(f"{API}/vendors/1")

        profile = response.json()
        assert response.status_code == 200
        assert profile["user"]["username"] == "florist"
        assert [s["name"] for s in profile["services"]] == ["Wedding bouquet"]
        assert [r["user"]["username"] for r in profile["reviews"]] == ["customer"]
        assert profile["rating"] == 4

    async def test_unknown_vendor(self, client: AsyncClient):
        assert (await client.get(f"{API}/vendors/99")).status_code == 404

    async def test_vendor_for_user(self, client: AsyncClient):
        florist = await register(client, "florist", vendor=VENDOR_PAYLOAD)

        found = await client.get(f"{API}/vendors/user/{florist['user']['id']}")
        missing = await client.get(f"{API}/vendors/user/99")

        assert found.json()["id"] == 1
        assert missing.status_code == 404

    @pytest.mark.parametrize("user_ref", ["²", "١٢", "99999999999999999999", "not-a-user"])
    async def test_vendor_for_unknown_user_reference(self, client: AsyncClient, user_ref: str):
        await register(client, "florist", vendor=VENDOR_PAYLOAD)

        response = await client.get(f"{API}/vendors/user/{user_ref}")

        assert response.status_code == 404

    async def test_vendor_id_too_large_to_store(self, client: AsyncClient):
        await register(client, "florist", vendor=VENDOR_PAYLOAD)

        assert (await client.get(f"{API}/vendors/{2**70}")).status_code == 404
        assert (await client.get(f"{API}/vendors/{2**70}/services")).json() == []

    async def test_update_own_profile(self, client: AsyncClient):
        florist = await register(client, "florist", vendor=VENDOR_PAYLOAD)
        customer = await register(client, "customer")

        updated = await client.put(f"{API}/vendors/me", json={"category": "Events"}, headers=auth(florist))
        forbidden = await client.put(f"{API}/vendors/me", json={"category": "Events"}, headers=auth(customer))

        assert updated.json()["category"] == "Events"
        assert updated.json()["business_name"] == "Bloom & Petal"
        assert forbidden.status_code == 403


# =============================================================================
# Services
# =============================================================================

class TestServices:
    async def test_create_and_list(self, client: AsyncClient):
        florist = await register(client, "florist", vendor=VENDOR_PAYLOAD)

        created = await client.post(f"{API}/services", json={**SERVICE_PAYLOAD, "vendor_id": 42}, headers=auth(florist))
        mine = await client.get(f"{API}/services/vendor", headers=auth(florist))
        public = await client.get(f"{API}/vendors/1/services")

        assert created.status_code == 201
        assert created.json()["vendor_id"] == 1
        assert [s["id"] for s in mine.json()] == [1]
        assert [s["id"] for s in public.json()] == [1]

    async def test_customers_cannot_create(self, client: AsyncClient):
        customer = await register(client, "customer")

        response = await client.post(f"{API}/services", json=SERVICE_PAYLOAD, headers=auth(customer))

        assert response.status_code == 403

    async def test_only_owner_may_modify(self, client: AsyncClient):
        florist = await register(client, "florist", vendor=VENDOR_PAYLOAD)
        rival = await register(
            client,
            "rival",
            vendor={"business_name": "Petal Rival", "category": "Florist", "description": "Cheaper flowers, honest"},
        )
        await client.post(f"{API}/services", json=SERVICE_PAYLOAD, headers=auth(florist))

        forbidden = await client.put(f"{API}/services/1", json={"price": "$1"}, headers=auth(rival))
        updated = await client.put(f"{API}/services/1", json={"price": "$150"}, headers=auth(florist))
        not_deleted = await client.delete(f"{API}/services/1", headers=auth(rival))
        deleted = await client.delete(f"{API}/services/1", headers=auth(florist))
        gone = await client.delete(f"{API}/services/1", headers=auth(florist))

        assert forbidden.status_code == 403
        assert updated.json()["price"] == "$150"
        assert not_deleted.status_code == 403
        assert deleted.status_code == 204
        assert gone.status_code == 404


# =============================================================================
# Bookings
# =============================================================================

class TestBookings:
    async def test_create_and_list(self, client: AsyncClient):
        florist = await register(client, "florist", vendor=VENDOR_PAYLOAD)
        customer = await register(client, "customer")

        booking = await book(client, customer, vendor_id=1)
        mine = await client.get(f"{API}/bookings/user", headers=auth(customer))
        incoming = await client.get(f"{API}/bookings/vendor", headers=auth(florist))

        assert booking["status"] == "pending"
        assert [b["id"] for b in mine.json()] == [booking["id"]]
        assert [b["id"] for b in incoming.json()] == [booking["id"]]

    async def test_cannot_book_for_someone_else(self, client: AsyncClient):
        customer = await register(client, "customer")

        response = await client.post(
            f"{API}/bookings",
            json={"user_id": 99, "vendor_id": 1, "date": "2025-09-01T10:00:00Z"},
            headers=auth(customer),
        )

        assert response.status_code == 403

    async def test_status_flow(self, client: AsyncClient):
        florist = await register(client, "florist", vendor=VENDOR_PAYLOAD)
        customer = await register(client, "customer")
        booking = await book(client, customer, vendor_id=1)
        url = f"{API}/bookings/{booking['id']}/status"

        customer_confirms = await client.put(url, json={"status": "confirmed"}, headers=auth(customer))
        vendor_confirms = await client.put(url, json={"status": "confirmed"}, headers=auth(florist))
        back_to_pending = await client.put(url, json={"status": "pending"}, headers=auth(florist))
        completed = await client.put(url, json={"status": "completed"}, headers=auth(florist))
        cancel_completed = await client.put(url, json={"status": "cancelled"}, headers=auth(customer))

        assert customer_confirms.status_code == 403
        assert vendor_confirms.json()["status"] == "confirmed"
        assert back_to_pending.status_code == 403
        assert completed.json()["status"] == "completed"
        assert cancel_completed.status_code == 400

    async def test_customer_may_cancel(self, client: AsyncClient):
        await register(client, "florist", vendor=VENDOR_PAYLOAD)
        customer = await register(client, "customer")
        booking = await book(client, customer, vendor_id=1)

        response = await client.put(
            f"{API}/bookings/{booking['id']}/status", json={"status": "cancelled"}, headers=auth(customer)
        )

        assert response.json()["status"] == "cancelled"

    @pytest.mark.parametrize("status, expected", [("archived", 400), ("confirmed", 403)])
    async def test_status_errors(self, client: AsyncClient, status, expected):
        await register(client, "florist", vendor=VENDOR_PAYLOAD)
        customer = await register(client, "customer")
        outsider = await register(client, "outsider")
        booking = await book(client, customer, vendor_id=1)

        response = await client.put(
            f"{API}/bookings/{booking['id']}/status", json={"status": status}, headers=auth(outsider)
        )

        assert response.status_code == expected

    async def test_unknown_booking(self, client: AsyncClient):
        customer = await register(client, "customer")

        response = await client.put(f"{API}/bookings/99/status", json={"status": "cancelled"}, headers=auth(customer))

        assert response.status_code == 404


# =============================================================================
# Reviews
# =============================================================================

class TestReviews:
    async def test_review_updates_rating(self, client: AsyncClient):
        await register(client, "florist", vendor=VENDOR_PAYLOAD)
        first = await register(client, "first")
        second = await register(client, "second")

        for account, rating in ((first, 5), (second, 4)):
            response = await client.post(
                f"{API}/reviews",
                json={"user_id": account["user"]["id"], "vendor_id": 1, "rating": rating},
                headers=auth(account),
            )
            assert response.status_code == 201

        vendor = (await client.get(f"{API}/vendors/1")).json()
        reviews = (await client.get(f"{API}/vendors/1/reviews")).json()
        assert (vendor["rating"], vendor["review_count"]) == (5, 2)
        assert len(reviews) == 2

    async def test_rating_out_of_range(self, client: AsyncClient):
        await register(client, "florist", vendor=VENDOR_PAYLOAD)
        customer = await register(client, "customer")

        response = await client.post(
            f"{API}/reviews",
            json={"user_id": customer["user"]["id"], "vendor_id": 1, "rating": 6},
            headers=auth(customer),
        )

        assert response.status_code == 400

    async def test_cannot_review_as_someone_else(self, client: AsyncClient):
        customer = await register(client, "customer")

        response = await client.post(
            f"{API}/reviews", json={"user_id": 99, "vendor_id": 1, "rating": 5}, headers=auth(customer)
        )

        assert response.status_code == 403


class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get(f"{API}/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "storage": "memory", "version": "1.0.0"}
