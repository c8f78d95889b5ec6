"""Contract tests for the self-service profile endpoints."""

from tests.helpers import NEWCOMER_TOKEN, NEWCOMER_UID, USER_UID


def test_get_profile(client, user_headers):
    response = client.get("/users/profile", headers=user_headers)

    assert response.status_code == 200
    assert response.json()["userId"] == USER_UID


def test_get_profile_requires_token(client):
    response = client.get("/users/profile")

    assert response.status_code == 401


def test_first_fetch_creates_profile(client, store):
    response = client.get("/users/profile", headers={"Authorization": f"Bearer {NEWCOMER_TOKEN}"})

    assert response.status_code == 200
    data = response.json()
    assert data["userId"] == NEWCOMER_UID
    assert data["userEmail"] == "newcomer@leafora.app"
    assert data["status"] == "unverified"
    assert NEWCOMER_UID in store.docs


def test_update_profile_cannot_escalate_role(client, store, user_headers):
    response = client.put(
        "/users/profile",
        json={"role": "admin", "subscriptionStatus": "active", "userName": "Rosa P.", "gender": "female"},
        headers=user_headers,
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["role"] == "user"
    assert user["userName"] == "Rosa P."
    assert store.docs[USER_UID]["role"] == "user"
    assert store.docs[USER_UID]["subscriptionStatus"] == "inactive"
    assert store.docs[USER_UID]["gender"] == "female"


def test_update_profile_image_map(client, store, user_headers):
    image = {"thumbnail": "https://res.cloudinary.com/leafora/t.png", "full": "https://res.cloudinary.com/leafora/f.png"}

    response = client.put("/users/profile", json={"userImage": image}, headers=user_headers)

    assert response.status_code == 200
    assert store.docs[USER_UID]["userImage"] == image
