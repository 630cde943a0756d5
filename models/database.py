"""
Database models for gestion-users
Таблица utilisateur + таблица сессий для DatabaseSessionStore
"""

from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

db = SQLAlchemy()


class Utilisateur(db.Model):
    """User record - пароль хранится в открытом виде (как в исходной схеме)"""

    __tablename__ = "utilisateur"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    prenom = db.Column(db.String(100), nullable=False)
    nom = db.Column(db.String(100), nullable=False)
    login = db.Column(db.String(100), nullable=False, unique=True)
    password = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(50), nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "prenom": self.prenom,
            "nom": self.nom,
            "login": self.login,
            "password": self.password,
            "role": self.role,
        }

    def __repr__(self):
        return f"<Utilisateur(id={self.id}, login={self.login})>"


class UserSessions(db.Model):
    """Server-side sessions keyed by an opaque token"""

    __tablename__ = "user_sessions"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    session_token = db.Column(db.String(255), nullable=False, unique=True, index=True)
    # Проекция пользователя на момент входа (не обновляется)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    prenom = db.Column(db.String(100))
    nom = db.Column(db.String(100))
    role = db.Column(db.String(50))
    ip_address = db.Column(db.String(45))  # IPv4 или IPv6
    user_agent = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<UserSessions(id={self.id}, user_id={self.user_id})>"
