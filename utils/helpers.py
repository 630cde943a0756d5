"""
Utility helper functions for gestion-users
"""

import secrets
from datetime import datetime
from flask import request, jsonify

from utils.errors import ValidationError

USER_FIELDS = ("prenom", "nom", "login", "password", "role")


# ========================================
# ID GENERATION
# ========================================


def generate_request_id():
    """Generate request ID"""
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    unique = secrets.token_hex(4)
    return f"req_{timestamp}_{unique}"


# ========================================
# REQUEST DATA
# ========================================


def get_request_data():
    """JSON body if present, otherwise form fields"""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def get_client_ip():
    """Получить IP адрес клиента"""
    if request.headers.get("X-Forwarded-For"):
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    elif request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return request.remote_addr or "unknown"


# ========================================
# VALIDATION
# ========================================


def validate_required_fields(data, required_fields=USER_FIELDS):
    """
    Проверка наличия обязательных полей (только наличие, без формата)

    Поле считается отсутствующим, если его нет, оно None или пустое.

    Returns:
        dict: значения обязательных полей

    Raises:
        ValidationError: если хотя бы одно поле отсутствует
    """
    missing_fields = [field for field in required_fields if not data.get(field)]

    if missing_fields:
        raise ValidationError(missing_fields)

    return {field: data[field] for field in required_fields}


# ========================================
# RESPONSE HELPERS
# ========================================


def create_message_response(message, code=200):
    """{"message": ...}"""
    return jsonify({"message": message}), code


def create_error_response(message, code=500):
    """{"error": ...}"""
    return jsonify({"error": message}), code
