"""
Tests de l'API /api/users : liste, recherche, création, modification, suppression.
"""

import pytest

from models.gateway import QueryGateway
from utils.errors import InfrastructureError
from tests.conftest import SEEDED_USERS, all_users, find_user

NEW_USER = {
    "prenom": "Chloé",
    "nom": "Bernard",
    "login": "cbernard",
    "password": "chloe",
    "role": "user",
}


def logins(response):
    return sorted(row["login"] for row in response.get_json())


# ========================================
# GARDE D'AUTHENTIFICATION
# ========================================


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/api/users"),
        ("post", "/api/users"),
        ("put", "/api/users/1"),
        ("delete", "/api/users/1"),
        ("put", "/api/users/abc"),
        ("delete", "/api/users/abc"),
    ],
)
def test_api_redirects_when_unauthenticated(app, client, method, path):
    response = getattr(client, method)(path, json=NEW_USER)

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/login")
    assert len(all_users(app)) == len(SEEDED_USERS)


# ========================================
# LISTE / RECHERCHE
# ========================================


def test_list_returns_all_records(auth_client):
    response = auth_client.get("/api/users")

    assert response.status_code == 200
    assert logins(response) == sorted(u["login"] for u in SEEDED_USERS)
    assert set(response.get_json()[0]) == {"id", "prenom", "nom", "login", "password", "role"}


def test_empty_search_returns_all_records(auth_client):
    response = auth_client.get("/api/users?search=")

    assert len(response.get_json()) == len(SEEDED_USERS)


@pytest.mark.parametrize(
    "search,expected",
    [
        ("Ali", ["adurand"]),  # prenom
        ("Peti", ["bpetit"]),  # nom
        ("yan", ["yann"]),  # login
        ("an", ["adurand", "yann"]),  # Durand, Yann
        ("zzz", []),
    ],
)
def test_search_matches_substring_of_prenom_nom_or_login(auth_client, search, expected):
    response = auth_client.get("/api/users", query_string={"search": search})

    assert response.status_code == 200
    assert logins(response) == expected


def test_search_wildcards_are_not_escaped(auth_client):
    response = auth_client.get("/api/users", query_string={"search": "%"})

    assert len(response.get_json()) == len(SEEDED_USERS)


def test_list_store_failure_returns_json_500(auth_client, monkeypatch):
    def failing_execute(self, sql, params=None):
        raise InfrastructureError(cause=RuntimeError("timeout"))

    monkeypatch.setattr(QueryGateway, "execute", failing_execute)

    response = auth_client.get("/api/users")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Erreur serveur"}


# ========================================
# CREATION
# ========================================


def test_create_user(app, auth_client):
    response = auth_client.post("/api/users", json=NEW_USER)

    assert response.status_code == 201
    assert response.get_json() == {"message": "Utilisateur créé"}

    listed = auth_client.get("/api/users", query_string={"search": "cbernard"})
    assert logins(listed) == ["cbernard"]
    created = find_user(app, "cbernard")
    assert {k: created[k] for k in NEW_USER} == NEW_USER


def test_create_user_with_form_body(app, auth_client):
    response = auth_client.post("/api/users", data=NEW_USER)

    assert response.status_code == 201
    assert find_user(app, "cbernard") is not None


def test_create_duplicate_login_is_rejected(app, auth_client):
    duplicate = dict(NEW_USER, login="yann")

    response = auth_client.post("/api/users", json=duplicate)

    assert response.status_code == 400
    assert response.get_json() == {"error": "Ce login existe déjà"}
    assert len(all_users(app)) == len(SEEDED_USERS)


@pytest.mark.parametrize("field", ["prenom", "nom", "login", "password", "role"])
def test_create_missing_field_is_rejected(app, auth_client, field):
    payload = {k: v for k, v in NEW_USER.items() if k != field}

    response = auth_client.post("/api/users", json=payload)

    assert response.status_code == 400
    assert response.get_json() == {"error": "Tous les champs sont obligatoires"}
    assert len(all_users(app)) == len(SEEDED_USERS)


def test_create_empty_field_is_rejected(app, auth_client):
    response = auth_client.post("/api/users", json=dict(NEW_USER, role=""))

    assert response.status_code == 400
    assert find_user(app, "cbernard") is None


def test_create_store_failure_returns_500(auth_client, monkeypatch):
    def failing_execute(self, sql, params=None):
        raise InfrastructureError(cause=RuntimeError("disk full"))

    monkeypatch.setattr(QueryGateway, "execute", failing_execute)

    response = auth_client.post("/api/users", json=NEW_USER)

    assert response.status_code == 500
    assert response.get_json() == {"error": "Erreur serveur"}


# ========================================
# MODIFICATION
# ========================================


def test_update_overwrites_all_fields(app, auth_client):
    target = find_user(app, "adurand")
    changes = {
        "prenom": "Alicia",
        "nom": "Dupont",
        "login": "adupont",
        "password": "nouveau",
        "role": "admin",
    }

    response = auth_client.put(f"/api/users/{target['id']}", json=changes)

    assert response.status_code == 200
    assert response.get_json() == {"message": "Utilisateur mis à jour"}
    assert find_user(app, "adurand") is None
    assert find_user(app, "adupont") == dict(changes, id=target["id"])


def test_update_nonexistent_id_succeeds_without_change(app, auth_client):
    before = all_users(app)

    response = auth_client.put("/api/users/9999", json=NEW_USER)

    assert response.status_code == 200
    assert all_users(app) == before


def test_update_duplicate_login_is_rejected(app, auth_client):
    target = find_user(app, "adurand")

    response = auth_client.put(
        f"/api/users/{target['id']}", json=dict(NEW_USER, login="bpetit")
    )

    assert response.status_code == 400
    assert response.get_json() == {"error": "Ce login existe déjà"}
    assert find_user(app, "adurand") == target


def test_update_requires_every_field(app, auth_client):
    target = find_user(app, "adurand")

    response = auth_client.put(f"/api/users/{target['id']}", json={"prenom": "Alicia"})

    assert response.status_code == 400
    assert response.get_json() == {"error": "Tous les champs sont obligatoires"}
    assert find_user(app, "adurand") == target


def test_update_non_numeric_id_succeeds_without_change(app, auth_client):
    before = all_users(app)

    response = auth_client.put("/api/users/abc", json=NEW_USER)

    assert response.status_code == 200
    assert response.get_json() == {"message": "Utilisateur mis à jour"}
    assert all_users(app) == before


def test_update_non_numeric_id_still_validates_fields(auth_client):
    response = auth_client.put("/api/users/abc", json={"prenom": "Alicia"})

    assert response.status_code == 400


def test_update_store_failure_returns_500(app, auth_client, monkeypatch):
    target = find_user(app, "adurand")

    def failing_execute(self, sql, params=None):
        raise InfrastructureError(cause=RuntimeError("deadlock"))

    monkeypatch.setattr(QueryGateway, "execute", failing_execute)

    response = auth_client.put(f"/api/users/{target['id']}", json=NEW_USER)

    assert response.status_code == 500
    assert response.get_json() == {"error": "Erreur serveur"}


# ========================================
# SUPPRESSION
# ========================================


def test_delete_removes_user(app, auth_client):
    target = find_user(app, "bpetit")

    response = auth_client.delete(f"/api/users/{target['id']}")

    assert response.status_code == 200
    assert response.get_json() == {"message": "Utilisateur supprimé"}
    assert "bpetit" not in logins(auth_client.get("/api/users"))


def test_delete_nonexistent_id_succeeds(app, auth_client):
    response = auth_client.delete("/api/users/9999")

    assert response.status_code == 200
    assert len(all_users(app)) == len(SEEDED_USERS)


def test_delete_non_numeric_id_succeeds_without_change(app, auth_client):
    response = auth_client.delete("/api/users/abc")

    assert response.status_code == 200
    assert response.get_json() == {"message": "Utilisateur supprimé"}
    assert len(all_users(app)) == len(SEEDED_USERS)


def test_delete_store_failure_returns_500(auth_client, monkeypatch):
    def failing_execute(self, sql, params=None):
        raise InfrastructureError(cause=RuntimeError("lost connection"))

    monkeypatch.setattr(QueryGateway, "execute", failing_execute)

    response = auth_client.delete("/api/users/1")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Erreur serveur"}


# ========================================
# CYCLE COMPLET
# ========================================


def test_create_read_update_delete_round_trip(auth_client):
    assert auth_client.post("/api/users", json=NEW_USER).status_code == 201

    found = auth_client.get("/api/users", query_string={"search": "Bernard"}).get_json()
    assert len(found) == 1
    user_id = found[0]["id"]

    updated = dict(NEW_USER, prenom="Camille", role="admin")
    assert auth_client.put(f"/api/users/{user_id}", json=updated).status_code == 200

    found = auth_client.get("/api/users", query_string={"search": "Camille"}).get_json()
    assert found == [dict(updated, id=user_id)]

    assert auth_client.delete(f"/api/users/{user_id}").status_code == 200
    assert auth_client.get("/api/users", query_string={"search": "cbernard"}).get_json() == []
