"""
Pages Blueprint - приветствие, проверка БД, защищённая страница пользователей
"""

from flask import Blueprint, current_app, jsonify, send_from_directory
import logging

from models.gateway import get_gateway
from utils.auth import login_required
from utils.errors import StoreError

logger = logging.getLogger(__name__)

pages_bp = Blueprint("pages", __name__)

GREETING = "Hello Yann, ton serveur Express fonctionne !"
DB_ERROR_MESSAGE = "Erreur de connexion à la base de données"


@pages_bp.route("/", methods=["GET"])
def index():
    """Текстовое приветствие"""
    return GREETING, 200, {"Content-Type": "text/plain; charset=utf-8"}


@pages_bp.route("/test-db", methods=["GET"])
def test_db():
    """Все записи utilisateur - отладочная проверка соединения с БД"""
    try:
        result = get_gateway().execute("SELECT * FROM utilisateur")
        return jsonify(result.rows)
    except StoreError as e:
        logger.error(f"❌ Database connection error: {e.cause or e}")
        return DB_ERROR_MESSAGE, 500, {"Content-Type": "text/plain; charset=utf-8"}


@pages_bp.route("/users", methods=["GET"])
@login_required
def users_page():
    return send_from_directory(current_app.static_folder, "users.html")
