"""Tests for the tier-gated group endpoints."""

import asyncio

from modules.billing.models import SubscriptionStatus, SubscriptionTier


class TestCreateGroup:
    def test_create_and_list(self, client, register_user):
        _, headers = register_user()
        response = client.post("/api/groups", json={"name": "Household"}, headers=headers)
        assert response.status_code == 201
        data = response.json()
        assert data["group"]["name"] == "Household"
        assert data["tier_decision"]["kind"] == "groups"

        listed = client.get("/api/groups", headers=headers)
        assert listed.status_code == 200
        assert listed.json()["total"] == 1

    def test_second_free_group_is_limited(self, client, register_user):
        _, headers = register_user()
        assert client.post("/api/groups", json={"name": "One"}, headers=headers).status_code == 201

        response = client.post("/api/groups", json={"name": "Two"}, headers=headers)

        assert response.status_code == 429
        body = response.json()
        assert body["error"] == "LIMIT_EXCEEDED"
        assert body["details"]["kind"] == "groups"
        assert body["details"]["current"] == 1
        assert body["details"]["limit"] == 1
        assert body["details"]["current_tier"] == "free"
        assert body["details"]["suggested_tier"] == "family"
        assert body["details"]["suggested_price_usd"] == "9.99"

    def test_upgraded_tier_allows_more(self, client, container, register_user):
        user_id, headers = register_user()
        asyncio.run(container.subscriptions.change_tier(user_id, SubscriptionTier.FAMILY))

        codes = [
            client.post("/api/groups", json={"name": f"G{i}"}, headers=headers).status_code
            for i in range(4)
        ]

        assert codes == [201, 201, 201, 429]

    def test_inactive_subscription_requires_payment(self, client, container, register_user):
        user_id, headers = register_user()
        asyncio.run(container.subscriptions.set_status(user_id, SubscriptionStatus.INACTIVE))

        response = client.post("/api/groups", json={"name": "Household"}, headers=headers)

        assert response.status_code == 402

    def test_cycle_start_day_is_clamped(self, client, register_user):
        _, headers = register_user()
        response = client.post(
            "/api/groups", json={"name": "Household", "cycle_start_day": 31}, headers=headers
        )
        assert response.status_code == 201
        assert response.json()["group"]["cycle_start_day"] == 28


class TestGroupAccess:
    def test_other_users_group_is_forbidden(self, client, register_user):
        _, alice = register_user("alice@ledgerly.io")
        _, bob = register_user("bob@ledgerly.io")
        group_id = client.post("/api/groups", json={"name": "Alice's"}, headers=alice).json()["group"]["id"]

        assert client.get(f"/api/groups/{group_id}", headers=bob).status_code == 403
        assert client.delete(f"/api/groups/{group_id}", headers=bob).status_code == 403

    def test_missing_group(self, client, register_user):
        _, headers = register_user()
        response = client.get("/api/groups/6f1c1d36-4f57-4d0e-9a51-3c1c9a0f6b11", headers=headers)
        assert response.status_code == 404

    def test_delete_frees_the_slot(self, client, register_user):
        _, headers = register_user()
        group_id = client.post("/api/groups", json={"name": "One"}, headers=headers).json()["group"]["id"]

        assert client.delete(f"/api/groups/{group_id}", headers=headers).status_code == 204
        assert client.post("/api/groups", json={"name": "Two"}, headers=headers).status_code == 201
