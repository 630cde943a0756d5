"""
Tests de la fabrique d'application en configuration production :
journalisation fichier et cookie de session.
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from app import create_app
from config import ProductionConfig
from models.database import db, Utilisateur


@pytest.fixture
def log_file(tmp_path):
    return tmp_path / "logs" / "app.log"


@pytest.fixture
def production_app(monkeypatch, log_file):
    monkeypatch.setattr(ProductionConfig, "LOG_FILE", str(log_file))
    monkeypatch.setattr(ProductionConfig, "SQLALCHEMY_DATABASE_URI", "sqlite://")
    monkeypatch.setattr(ProductionConfig, "SQLALCHEMY_ENGINE_OPTIONS", {})
    root = logging.getLogger()
    handlers_before = list(root.handlers)
    level_before = root.level

    app = create_app("production")
    with app.app_context():
        db.session.add(
            Utilisateur(prenom="Yann", nom="Martin", login="yann", password="secret", role="admin")
        )
        db.session.commit()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
    for handler in list(root.handlers):
        if isinstance(handler, RotatingFileHandler) and handler not in handlers_before:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level_before)


def file_handlers(path):
    return [
        h
        for h in logging.getLogger().handlers
        if isinstance(h, RotatingFileHandler) and h.baseFilename == str(path)
    ]


def test_request_is_logged_once(production_app, log_file):
    production_app.test_client().get("/")

    for handler in file_handlers(log_file):
        handler.flush()
    lines = [line for line in log_file.read_text(encoding="utf-8").splitlines() if "GET / " in line]
    assert len(lines) == 1


def test_repeated_factory_calls_share_one_file_handler(production_app, log_file):
    create_app("production")

    assert len(file_handlers(log_file)) == 1
    assert not any(isinstance(h, RotatingFileHandler) for h in production_app.logger.handlers)


def test_production_session_cookie_works_over_http(production_app):
    client = production_app.test_client()

    response = client.post("/login", data={"login": "yann", "password": "secret"})

    assert response.headers["Location"].endswith("/users")
    assert "Secure" not in response.headers["Set-Cookie"]
    assert client.get("/users").status_code == 200
