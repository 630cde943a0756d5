"""
========================================
SESSION STORE
========================================
Серверные сессии с непрозрачным токеном и явным сроком действия.

Токен хранится в подписанной cookie Flask (session["session_token"]),
данные пользователя - в хранилище сессий:
- MemorySessionStore: словарь в памяти процесса (тесты, разработка)
- DatabaseSessionStore: таблица user_sessions
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

from flask import current_app, g, request, session

from models.database import db, UserSessions
from utils.helpers import get_client_ip

logger = logging.getLogger(__name__)

EXTENSION_KEY = "session_store"
TOKEN_COOKIE_KEY = "session_token"


# ========================================
# ДАННЫЕ СЕССИИ
# ========================================


@dataclass(frozen=True)
class SessionUser:
    """Проекция пользователя, снятая в момент входа"""

    id: int
    prenom: str
    nom: str
    role: str

    @classmethod
    def from_row(cls, row):
        return cls(id=row["id"], prenom=row["prenom"], nom=row["nom"], role=row["role"])

    def to_dict(self):
        return {"id": self.id, "prenom": self.prenom, "nom": self.nom, "role": self.role}


@dataclass
class SessionRecord:
    user: SessionUser
    expires_at: datetime

    def is_expired(self, now=None):
        return (now or datetime.utcnow()) >= self.expires_at


def generate_session_token():
    return secrets.token_urlsafe(43)


# ========================================
# ХРАНИЛИЩА
# ========================================


class SessionStore:
    """Интерфейс хранилища сессий"""

    def get(self, token) -> Optional[SessionRecord]:
        raise NotImplementedError

    def save(self, token, record, ip_address=None, user_agent=None):
        raise NotImplementedError

    def delete(self, token):
        raise NotImplementedError

    def purge_expired(self) -> int:
        raise NotImplementedError


class MemorySessionStore(SessionStore):
    def __init__(self):
        self._records: Dict[str, SessionRecord] = {}

    def get(self, token):
        record = self._records.get(token)
        if record is None:
            return None
        if record.is_expired():
            self._records.pop(token, None)
            return None
        return record

    def save(self, token, record, ip_address=None, user_agent=None):
        self._records[token] = record

    def delete(self, token):
        self._records.pop(token, None)

    def purge_expired(self):
        now = datetime.utcnow()
        expired = [t for t, r in self._records.items() if r.is_expired(now)]
        for token in expired:
            del self._records[token]
        return len(expired)

    def __len__(self):
        return len(self._records)


class DatabaseSessionStore(SessionStore):
    """Сессии в таблице user_sessions (общие для нескольких процессов)"""

    def get(self, token):
        row = UserSessions.query.filter_by(session_token=token).first()
        if row is None:
            return None

        record = SessionRecord(
            user=SessionUser(id=row.user_id, prenom=row.prenom, nom=row.nom, role=row.role),
            expires_at=row.expires_at,
        )
        if record.is_expired():
            logger.info(f"Session expired at {row.expires_at}, removing")
            db.session.delete(row)
            db.session.commit()
            return None
        return record

    def save(self, token, record, ip_address=None, user_agent=None):
        row = UserSessions(
            session_token=token,
            user_id=record.user.id,
            prenom=record.user.prenom,
            nom=record.user.nom,
            role=record.user.role,
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=record.expires_at,
        )
        db.session.add(row)
        db.session.commit()

    def delete(self, token):
        UserSessions.query.filter_by(session_token=token).delete()
        db.session.commit()

    def purge_expired(self):
        count = UserSessions.query.filter(
            UserSessions.expires_at <= datetime.utcnow()
        ).delete()
        db.session.commit()
        if count:
            logger.info(f"✅ Cleaned up {count} expired sessions")
        return count


SESSION_BACKENDS = {
    "memory": MemorySessionStore,
    "database": DatabaseSessionStore,
}


# ========================================
# КОНТЕКСТ СЕССИИ ЗАПРОСА
# ========================================


class SessionContext:
    """
    Сессия текущего запроса.

    Создаётся перед каждым запросом из токена в cookie и хранится в g.session_ctx.
    """

    def __init__(self, store, token=None, user=None, lifetime=timedelta(hours=24)):
        self.store = store
        self.token = token
        self.user = user
        self.lifetime = lifetime

    @property
    def is_authenticated(self):
        return self.user is not None

    @classmethod
    def load(cls, store, token, lifetime):
        user = None
        if token:
            record = store.get(token)
            if record is not None:
                user = record.user
            else:
                token = None
        return cls(store, token=token, user=user, lifetime=lifetime)

    def login(self, user, ip_address=None, user_agent=None):
        """Открыть новую сессию для пользователя, старый токен отзывается"""
        if self.token:
            self.store.delete(self.token)
        # Брошенные без logout сессии удаляются при каждом входе
        self.store.purge_expired()

        token = generate_session_token()
        record = SessionRecord(user=user, expires_at=datetime.utcnow() + self.lifetime)
        self.store.save(token, record, ip_address=ip_address, user_agent=user_agent)

        session.clear()
        session[TOKEN_COOKIE_KEY] = token
        session.permanent = True

        self.token = token
        self.user = user
        logger.info(f"✅ Session created for user {user.id}: {token[:8]}...")
        return token

    def destroy(self):
        """Уничтожить сессию; повторный вызов не является ошибкой"""
        if self.token:
            self.store.delete(self.token)
            logger.info(f"Session destroyed: {self.token[:8]}...")
        session.clear()
        self.token = None
        self.user = None


# ========================================
# ИНИЦИАЛИЗАЦИЯ
# ========================================


def init_sessions(app, store=None):
    """Выбрать хранилище по SESSION_BACKEND и подключить загрузку контекста"""
    if store is None:
        backend = app.config.get("SESSION_BACKEND", "memory")
        try:
            store = SESSION_BACKENDS[backend]()
        except KeyError:
            raise ValueError(f"Unknown SESSION_BACKEND: {backend}") from None

    lifetime = timedelta(hours=app.config.get("SESSION_LIFETIME_HOURS", 24))
    app.permanent_session_lifetime = lifetime
    app.extensions[EXTENSION_KEY] = store

    @app.before_request
    def load_session_context():
        g.session_ctx = SessionContext.load(
            store, session.get(TOKEN_COOKIE_KEY), lifetime
        )

    logger.debug(f"Session store: {type(store).__name__}")
    return store


def get_session_store():
    return current_app.extensions[EXTENSION_KEY]


def get_session_context():
    """SessionContext текущего запроса"""
    ctx = getattr(g, "session_ctx", None)
    if ctx is None:
        ctx = SessionContext.load(
            get_session_store(),
            session.get(TOKEN_COOKIE_KEY),
            current_app.permanent_session_lifetime,
        )
        g.session_ctx = ctx
    return ctx


def client_info():
    """IP и User-Agent для записи сессии"""
    return get_client_ip(), request.headers.get("User-Agent")
