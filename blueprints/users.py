"""
Users Blueprint - CRUD API над таблицей utilisateur
Все маршруты защищены login_required (редирект на /login без сессии)
"""

from flask import Blueprint, request, jsonify
import logging

from models.gateway import get_gateway
from utils.auth import login_required, get_current_user
from utils.errors import ConflictError, StoreError, ValidationError
from utils.helpers import (
    create_error_response,
    create_message_response,
    get_request_data,
    validate_required_fields,
)

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__)

SELECT_ALL = "SELECT * FROM utilisateur"
SEARCH_CLAUSE = " WHERE prenom LIKE :like OR nom LIKE :like OR login LIKE :like"
INSERT_USER = (
    "INSERT INTO utilisateur (prenom, nom, login, password, role) "
    "VALUES (:prenom, :nom, :login, :password, :role)"
)
UPDATE_USER = (
    "UPDATE utilisateur SET prenom = :prenom, nom = :nom, login = :login, "
    "password = :password, role = :role WHERE id = :id"
)
DELETE_USER = "DELETE FROM utilisateur WHERE id = :id"


def build_list_query(search):
    """
    SQL и параметры для списка пользователей.

    Пустой поиск - все записи без фильтра. Иначе подстрока в prenom/nom/login;
    символы % и _ в search не экранируются и работают как шаблон LIKE.
    """
    if not search:
        return SELECT_ALL, {}
    return SELECT_ALL + SEARCH_CLAUSE, {"like": f"%{search}%"}


def parse_user_id(raw):
    """
    id из пути после проверки сессии.

    Нечисловой id не соответствует ни одной записи: None, запрос к БД не выполняется.
    """
    raw = str(raw).strip()
    return int(raw) if raw.isascii() and raw.isdigit() else None


@users_bp.route("", methods=["GET"])
@login_required
def list_users():
    """Список пользователей, ?search= фильтрует по подстроке"""
    sql, params = build_list_query(request.args.get("search", ""))

    try:
        result = get_gateway().execute(sql, params)
    except StoreError as e:
        logger.error(f"Failed to list users: {e.cause or e}")
        return create_error_response(e.public_message, 500)

    return jsonify(result.rows)


@users_bp.route("", methods=["POST"])
@login_required
def create_user():
    """Создать пользователя; все пять полей обязательны"""
    try:
        fields = validate_required_fields(get_request_data())
    except ValidationError as e:
        logger.warning(f"Missing fields on create: {', '.join(e.missing_fields)}")
        return create_error_response(e.public_message, e.status_code)

    try:
        get_gateway().execute(INSERT_USER, fields)
    except ConflictError as e:
        logger.warning(f"Duplicate login on create: {fields['login']}")
        return create_error_response(e.public_message, e.status_code)
    except StoreError as e:
        logger.error(f"Failed to create user: {e.cause or e}")
        return create_error_response(e.public_message, 500)

    logger.info(f"User created: {fields['login']} by user {get_current_user().id}")
    return create_message_response("Utilisateur créé", 201)


@users_bp.route("/<user_id>", methods=["PUT"])
@login_required
def update_user(user_id):
    """Полная перезапись записи по id; несуществующий id - не ошибка"""
    try:
        fields = validate_required_fields(get_request_data())
    except ValidationError as e:
        logger.warning(f"Missing fields on update {user_id}: {', '.join(e.missing_fields)}")
        return create_error_response(e.public_message, e.status_code)

    record_id = parse_user_id(user_id)
    if record_id is None:
        logger.info(f"Update of user {user_id}: non-numeric id, no row changed")
        return create_message_response("Utilisateur mis à jour")

    try:
        result = get_gateway().execute(UPDATE_USER, dict(fields, id=record_id))
    except ConflictError as e:
        logger.warning(f"Duplicate login on update {user_id}: {fields['login']}")
        return create_error_response(e.public_message, e.status_code)
    except StoreError as e:
        logger.error(f"Failed to update user {user_id}: {e.cause or e}")
        return create_error_response(e.public_message, 500)

    if result.affected_rows == 0:
        logger.info(f"Update of user {user_id}: no row changed")
    else:
        logger.info(f"User updated: {user_id} by user {get_current_user().id}")
    return create_message_response("Utilisateur mis à jour")


@users_bp.route("/<user_id>", methods=["DELETE"])
@login_required
def delete_user(user_id):
    """Удалить пользователя по id; несуществующий id - не ошибка"""
    record_id = parse_user_id(user_id)
    if record_id is None:
        logger.info(f"Delete user {user_id}: non-numeric id, 0 row(s) removed")
        return create_message_response("Utilisateur supprimé")

    try:
        result = get_gateway().execute(DELETE_USER, {"id": record_id})
    except StoreError as e:
        logger.error(f"Failed to delete user {user_id}: {e.cause or e}")
        return create_error_response(e.public_message, 500)

    logger.info(f"Delete user {user_id}: {result.affected_rows} row(s) removed")
    return create_message_response("Utilisateur supprimé")
