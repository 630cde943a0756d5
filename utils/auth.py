"""
========================================
AUTHENTICATION UTILITIES - SESSION GATE
========================================
Защита маршрутов на основе серверной сессии.

Неаутентифицированный запрос перенаправляется на /login,
как для HTML страниц, так и для /api/* (JSON 401 не используется).
Проверка ролей отсутствует: любой вошедший пользователь имеет полный доступ.
"""

from functools import wraps
from flask import g, redirect, request, url_for
import logging

from utils.sessions import get_session_context

logger = logging.getLogger(__name__)


def login_required(f):
    """
    Декоратор для защиты эндпоинтов, требующих аутентификации

    Usage:
        @users_bp.route("")
        @login_required
        def list_users():
            ...

    Пользователь сессии доступен в g.session_user
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        ctx = get_session_context()

        if not ctx.is_authenticated:
            logger.info(f"🔒 Unauthenticated {request.method} {request.path}, redirecting")
            return redirect(url_for("auth.login_page"))

        g.session_user = ctx.user
        return f(*args, **kwargs)

    return decorated_function


def get_current_user():
    """
    Получить пользователя текущей сессии

    Returns:
        SessionUser or None
    """
    user = getattr(g, "session_user", None)
    if user is None:
        user = get_session_context().user
    return user


__all__ = ["login_required", "get_current_user"]
