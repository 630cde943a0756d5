"""
Auth Blueprint - вход и выход по логину/паролю
"""

from flask import Blueprint, current_app, redirect, send_from_directory, url_for
import logging

from models.gateway import get_gateway
from utils.errors import StoreError, SERVER_ERROR_MESSAGE
from utils.helpers import get_request_data
from utils.sessions import SessionUser, client_info, get_session_context

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

FIND_BY_CREDENTIALS = (
    "SELECT * FROM utilisateur WHERE login = :login AND password = :password"
)


@auth_bp.route("/login", methods=["GET"])
def login_page():
    """Статическая страница входа; ?error=1 обрабатывается на клиенте"""
    return send_from_directory(current_app.static_folder, "login.html")


@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Аутентифицировать пользователя и открыть сессию.

    Логин и пароль сравниваются как есть (без нормализации и хеширования).
    Нет совпадений -> /login?error=1, сессия не создаётся.
    Есть совпадения -> первая запись попадает в сессию, редирект на /users.
    """
    data = get_request_data()
    login_value = data.get("login")
    password = data.get("password")

    try:
        result = get_gateway().execute(
            FIND_BY_CREDENTIALS, {"login": login_value, "password": password}
        )
    except StoreError as e:
        logger.error(f"❌ LOGIN ERROR: {e.cause or e}")
        return SERVER_ERROR_MESSAGE, 500, {"Content-Type": "text/plain; charset=utf-8"}

    user_row = result.first
    if user_row is None:
        logger.warning(f"❌ Invalid credentials for login: {login_value}")
        return redirect(url_for("auth.login_page", error=1))

    user = SessionUser.from_row(user_row)
    ip_address, user_agent = client_info()
    get_session_context().login(user, ip_address=ip_address, user_agent=user_agent)

    logger.info(f"✅ LOGIN SUCCESSFUL: {login_value} (ID: {user.id}, role: {user.role})")
    return redirect(url_for("pages.users_page"))


@auth_bp.route("/logout", methods=["GET"])
def logout():
    """Уничтожить сессию (идемпотентно) и вернуться на страницу входа"""
    ctx = get_session_context()
    if ctx.user is not None:
        logger.info(f"User logout: ID {ctx.user.id}")
    ctx.destroy()
    return redirect(url_for("auth.login_page"))
