import pytest
from pydantic import ValidationError as SchemaValidationError

from core.exceptions import DuplicateEntityError, NotFoundError
from main import app
from core.security import get_current_user
from models.user import User
from schemas.user import UserCreate, UserUpdate
from services.auth_service import AuthService
from services.user_service import UserService
from conftest import MockUser


def create_user(db, username="clerk", password="secret1", **kwargs):
    payload = {"username": username, "email": f"{username}@gestcont.com", "password": password}
    payload.update(kwargs)
    return UserService.create_user(UserCreate(**payload), db)


def login(client, username, password):
    return client.post("/auth/login", data={"username": username, "password": password})


def test_password_hash_round_trip():
    hashed = AuthService.get_password_hash("secret1")
    assert hashed != "secret1"
    assert AuthService.verify_password("secret1", hashed)
    assert not AuthService.verify_password("wrong", hashed)
    assert not AuthService.verify_password("secret1", "not-a-bcrypt-hash")


def test_create_user_hashes_password_and_allocates_id(db_session):
    user = create_user(db_session, role="ADMIN", permissions=["all", "all"])

    assert user.id == "1"
    assert user.role == "admin"
    assert user.permissions == ["all"]
    assert user.hashed_password != "secret1"
    assert AuthService.verify_password("secret1", user.hashed_password)


def test_duplicate_username_or_email_is_rejected(db_session):
    create_user(db_session, username="clerk")

    with pytest.raises(DuplicateEntityError):
        create_user(db_session, username="clerk", email="other@gestcont.com")
    with pytest.raises(DuplicateEntityError):
        create_user(db_session, username="other", email="clerk@gestcont.com")


def test_update_rehashes_password_and_keeps_other_fields(db_session):
    user = create_user(db_session, permissions=["read:containers"])

    updated = UserService.update_user(user.id, UserUpdate(password="newpass1"), db_session)

    assert AuthService.verify_password("newpass1", updated.hashed_password)
    assert updated.permissions == ["read:containers"]
    assert updated.email == "clerk@gestcont.com"


def test_delete_user(db_session):
    user = create_user(db_session)
    UserService.delete_user(user.id, db_session)
    with pytest.raises(NotFoundError):
        UserService.get_user(user.id, db_session)


def test_unknown_role_or_permission_is_rejected():
    with pytest.raises(SchemaValidationError):
        UserCreate(username="clerk", email="clerk@gestcont.com", password="secret1", role="root")
    with pytest.raises(SchemaValidationError):
        UserCreate(username="clerk", email="clerk@gestcont.com", password="secret1", permissions=["fly:planes"])


def test_login_returns_bearer_token_for_me(anon_client, db_session):
    create_user(db_session, username="clerk", permissions=["read:containers"])

    response = login(anon_client, "clerk", "secret1")
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["username"] == "clerk"
    assert "hashedPassword" not in body["user"]
    assert "password" not in body["user"]

    me = anon_client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["isActive"] is True


def test_login_rejects_bad_credentials_and_inactive_accounts(anon_client, db_session):
    user = create_user(db_session, username="clerk")
    assert login(anon_client, "clerk", "wrong-password").status_code == 401
    assert login(anon_client, "nobody", "secret1").status_code == 401

    UserService.update_user(user.id, UserUpdate(is_active=False), db_session)
    assert login(anon_client, "clerk", "secret1").status_code == 403


def test_api_requires_a_token(anon_client):
    assert anon_client.get("/api/containers").status_code == 401
    assert anon_client.get("/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_permissions_are_enforced_per_route(client):
    app.dependency_overrides[get_current_user] = lambda: MockUser("user", ["read:containers"], user_id="7")

    assert client.get("/api/containers").status_code == 200
    assert client.get("/api/dashboard/stats").status_code == 200
    assert client.post("/api/containers", json={"containerNumber": "MSCU1234567"}).status_code == 403
    assert client.get("/api/shipping-lines").status_code == 403
    assert client.get("/api/clients").status_code == 200
    assert client.post("/api/clients", json={"name": "Acme"}).status_code == 403
    assert client.get("/api/users").status_code == 403


def test_all_permission_grants_everything(client):
    app.dependency_overrides[get_current_user] = lambda: MockUser("user", ["all"], user_id="7")

    response = client.post("/api/shipping-lines", json={"name": "MSC", "code": "MSC"})
    assert response.status_code == 201, response.text


def test_user_admin_endpoints(client):
    response = client.post(
        "/api/users",
        json={"username": "clerk", "email": "clerk@gestcont.com", "password": "secret1",
              "permissions": ["read:containers"]},
    )
    assert response.status_code == 201, response.text
    user_id = response.json()["id"]

    duplicate = client.post(
        "/api/users", json={"username": "clerk", "email": "x@gestcont.com", "password": "secret1"}
    )
    assert duplicate.status_code == 409

    response = client.put(f"/api/users/{user_id}", json={"permissions": ["read:containers", "create:containers"]})
    assert response.status_code == 200
    assert response.json()["permissions"] == ["read:containers", "create:containers"]

    assert [u["username"] for u in client.get("/api/users").json()] == ["clerk"]
    assert client.delete(f"/api/users/{user_id}").status_code == 204
    assert client.get(f"/api/users/{user_id}").status_code == 404


def test_admin_cannot_remove_own_account(client):
    # The signed-in admin is MockUser id "900"
    assert client.put("/api/users/900", json={"isActive": False}).status_code == 400
    assert client.delete("/api/users/900").status_code == 400


def test_route_permissions_follow_the_user_record(client):
    clerk = User(id="8", username="clerk", email="clerk@gestcont.com", role="user", permissions=["read:containers"])
    app.dependency_overrides[get_current_user] = lambda: clerk

    assert client.get("/api/containers").status_code == 200
    assert client.delete("/api/containers/1").status_code == 403

    clerk.permissions = ["read:containers", "delete:containers"]
    assert client.delete("/api/containers/1").status_code == 404

    clerk.role = "ADMIN"
    clerk.permissions = []
    assert client.get("/api/users").status_code == 200
