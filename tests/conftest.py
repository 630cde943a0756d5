"""
Fixtures pytest partagées.

- Application en configuration "testing" (SQLite en mémoire, sessions en mémoire)
- Un compte seedé pour se connecter
- Clients anonymes et authentifiés
"""

import pytest

from app import create_app
from models.database import db, Utilisateur

SEEDED_USERS = [
    {"prenom": "Yann", "nom": "Martin", "login": "yann", "password": "secret", "role": "admin"},
    {"prenom": "Alice", "nom": "Durand", "login": "adurand", "password": "alice", "role": "user"},
    {"prenom": "Bruno", "nom": "Petit", "login": "bpetit", "password": "bruno", "role": "user"},
]


@pytest.fixture
def app():
    app = create_app("testing")

    with app.app_context():
        for fields in SEEDED_USERS:
            db.session.add(Utilisateur(**fields))
        db.session.commit()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session_store(app):
    return app.extensions["session_store"]


def login(client, login="yann", password="secret"):
    return client.post("/login", data={"login": login, "password": password})


@pytest.fixture
def auth_client(client):
    response = login(client)
    assert response.status_code == 302
    return client


def all_users(app):
    with app.app_context():
        return [u.to_dict() for u in Utilisateur.query.order_by(Utilisateur.id).all()]


def find_user(app, login_value):
    with app.app_context():
        user = Utilisateur.query.filter_by(login=login_value).first()
        return user.to_dict() if user else None
