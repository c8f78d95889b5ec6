"""Contract tests for the admin user management endpoints."""

from datetime import datetime, timezone

from tests.helpers import ADMIN_UID, USER_UID

NEW_USER = {
    "userName": "Basil Leaf",
    "userEmail": "basil@leafora.app",
    "userPhone": "01898765432",
    "password": "S3cret!pass",
}


class TestAccessControl:
    def test_missing_token_is_rejected(self, client):
        response = client.get("/admin/users")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_TOKEN"
        assert body["error"]["message"] == "No token provided"

    def test_wrong_scheme_is_rejected(self, client):
        response = client.get("/admin/users", headers={"Authorization": "Basic abc"})

        assert response.status_code == 401

    def test_invalid_token_is_rejected(self, client):
        response = client.get("/admin/users", headers={"Authorization": "Bearer forged"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token"

    def test_non_admin_is_forbidden(self, client, user_headers):
        for method, path in [
            ("get", "/admin/users"),
            ("get", f"/admin/users/{ADMIN_UID}"),
            ("delete", f"/admin/users/{ADMIN_UID}"),
            ("get", "/admin/analytics"),
            ("post", "/admin/logout"),
        ]:
            response = client.request(method, path, headers=user_headers)
            assert response.status_code == 403, path
            assert response.json()["error"]["code"] == "FORBIDDEN"


class TestUserCrud:
    def test_list_users_contract(self, client, admin_headers):
        response = client.get("/admin/users", params={"limit": 1, "page": 2}, headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"users", "totalUsers", "currentPage", "totalPages"}
        assert data["totalUsers"] == 2
        assert data["currentPage"] == 2
        assert data["totalPages"] == 2
        assert len(data["users"]) == 1

    def test_list_users_filters(self, client, admin_headers):
        response = client.get("/admin/users", params={"plan": "pro", "status": "verified"}, headers=admin_headers)

        assert [user["userId"] for user in response.json()["users"]] == [USER_UID]

    def test_list_users_rejects_zero_limit(self, client, admin_headers):
        response = client.get("/admin/users", params={"limit": 0}, headers=admin_headers)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    def test_get_user_returns_full_record(self, client, admin_headers, store):
        store.docs[USER_UID]["otp"] = "123456"

        response = client.get(f"/admin/users/{USER_UID}", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["userId"] == USER_UID
        assert data["otp"] == "123456"
        assert data["isOnline"] is False
        assert data["plan"] == "pro"

    def test_get_unknown_user(self, client, admin_headers):
        response = client.get("/admin/users/nobody", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_create_user(self, client, admin_headers, store, gateway):
        response = client.post("/admin/users", json=NEW_USER, headers=admin_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "User created successfully"
        uid = data["user"]["userId"]
        assert "password" not in data["user"]
        assert "password" not in store.docs[uid]
        assert gateway.accounts[uid]["password"] == "S3cret!pass"

    def test_create_user_reports_all_errors(self, client, admin_headers):
        response = client.post(
            "/admin/users",
            json={"userName": "Al", "userEmail": "bad", "userPhone": "123"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]["errors"] == [
            "Valid email is required",
            "Valid phone number is required",
        ]

    def test_create_user_with_numeric_phone(self, client, admin_headers, store):
        response = client.post("/admin/users", json={**NEW_USER, "userPhone": 1898765432}, headers=admin_headers)

        assert response.status_code == 201
        uid = response.json()["user"]["userId"]
        assert store.docs[uid]["userPhone"] == "1898765432"

    def test_update_with_unreadable_phone_is_a_rule_error(self, client, admin_headers):
        response = client.put(
            f"/admin/users/{USER_UID}",
            json={"userPhone": {"number": "01712345678"}},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]["errors"] == ["Valid phone number is required"]

    def test_update_user(self, client, admin_headers, store):
        response = client.put(
            f"/admin/users/{USER_UID}",
            json={"status": "suspended", "credits": 40, "unknownField": True},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["user"]["status"] == "suspended"
        assert store.docs[USER_UID]["credits"] == 40
        assert "unknownField" not in store.docs[USER_UID]

    def test_delete_user(self, client, admin_headers, store, gateway):
        response = client.delete(f"/admin/users/{USER_UID}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "User deleted successfully"}
        assert USER_UID not in store.docs
        assert USER_UID not in gateway.accounts

    def test_store_failure_is_generic_500(self, client, admin_headers, gateway):
        gateway.fail_on = "delete"

        response = client.delete(f"/admin/users/{USER_UID}", headers=admin_headers)

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "STORE_ERROR"


class TestSubscriptionEndpoint:
    def test_activate(self, client, admin_headers, store):
        response = client.put(
            f"/admin/users/{USER_UID}/subscription",
            json={"action": "activate", "type": "monthly", "duration": "monthly", "autoRenewal": True},
            headers=admin_headers,
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["subscriptionStatus"] == "active"
        assert user["subscriptionType"] == "monthly"
        assert user["autoRenewal"] is True
        assert isinstance(store.docs[USER_UID]["subscriptionEndDate"], datetime)

    def test_cancel(self, client, admin_headers):
        response = client.put(
            f"/admin/users/{USER_UID}/subscription",
            json={"action": "cancel"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["user"]["subscriptionStatus"] == "cancelled"

    def test_extend(self, client, admin_headers, store):
        store.docs[USER_UID]["subscriptionEndDate"] = datetime(2030, 6, 1, tzinfo=timezone.utc)

        response = client.put(
            f"/admin/users/{USER_UID}/subscription",
            json={"action": "extend", "duration": "monthly"},
            headers=admin_headers,
        )

        assert response.json()["user"]["subscriptionEndDate"] == "2030-07-01T00:00:00.000Z"

    def test_extend_with_unparseable_end_date(self, client, admin_headers, store):
        store.docs[USER_UID]["subscriptionEndDate"] = "soon"

        response = client.put(
            f"/admin/users/{USER_UID}/subscription",
            json={"action": "extend", "duration": "monthly"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    def test_unknown_action(self, client, admin_headers):
        response = client.put(
            f"/admin/users/{USER_UID}/subscription",
            json={"action": "refund"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid action"

    def test_unknown_duration_is_rejected(self, client, admin_headers):
        response = client.put(
            f"/admin/users/{USER_UID}/subscription",
            json={"action": "activate", "type": "monthly", "duration": "weekly"},
            headers=admin_headers,
        )

        assert response.status_code == 422


class TestAnalytics:
    def test_analytics_contract(self, client, admin_headers):
        response = client.get("/admin/analytics", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["totalUsers"] == 2
        assert data["usersByRole"] == {"user": 1, "admin": 1, "expert": 0}
        assert data["usersByPlan"] == {"basic": 1, "premium": 0, "pro": 1}
        assert data["subscriptionStats"]["inactive"] == 2
        assert [user["userId"] for user in data["recentUsers"]] == [USER_UID, ADMIN_UID]
