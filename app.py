"""
===============================================================================
Flask gestion-users Application
===============================================================================

Мини-бэкенд управления пользователями:
- вход/выход по логину и паролю, серверные сессии
- статические страницы login.html / users.html из папки public
- JSON API /api/users: список с поиском, создание, изменение, удаление

Запуск для разработки:
    python app.py
Продакшен:
    gunicorn wsgi:application
===============================================================================
"""

# =============================================================================
# ИМПОРТЫ
# =============================================================================
import os
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime

from flask import Flask, g, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import get_config
from models.database import db
from models.gateway import init_gateway
from utils.errors import UserManagementError, SERVER_ERROR_MESSAGE
from utils.helpers import create_error_response, generate_request_id, get_client_ip
from utils.sessions import init_sessions

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PUBLIC_DIR = os.path.join(BASE_DIR, "public")

logger = logging.getLogger(__name__)


# =============================================================================
# СОЗДАНИЕ ПРИЛОЖЕНИЯ
# =============================================================================
def create_app(config_name=None, session_store=None):
    """
    Фабрика приложения Flask

    Args:
        config_name: Имя конфигурации (development, production, testing)
        session_store: Хранилище сессий (по умолчанию - по SESSION_BACKEND)

    Returns:
        Flask приложение с настроенными компонентами
    """
    # public/ отдаётся от корня, как статические файлы исходного сервера
    app = Flask(__name__, static_folder=PUBLIC_DIR, static_url_path="")

    config_class = get_config(config_name)
    app.config.from_object(config_class)
    config_class.init_app(app)

    db.init_app(app)
    CORS(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)

    setup_logging(app)
    init_sessions(app, store=session_store)
    init_gateway(app)
    register_blueprints(app)
    register_error_handlers(app)
    register_request_handlers(app)

    if app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            try:
                db.create_all()
                app.logger.info("✅ Tables checked/created")
            except Exception as e:
                # Сервер стартует и без БД: ошибки вернутся как 500 на запросах
                app.logger.error(f"❌ Table creation failed: {e}")

    app.logger.info(f"🚀 gestion-users started ({config_class.__name__})")
    return app


def setup_logging(app):
    """Настройка системы логирования"""
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    app.logger.setLevel(level)

    if app.debug or app.testing:
        return

    # Один обработчик на корневом логгере: app.logger и логгеры модулей
    # (blueprints, models, utils) попадают в файл через propagate
    root = logging.getLogger()
    root.setLevel(level)

    log_path = os.path.abspath(app.config["LOG_FILE"])
    if any(
        isinstance(h, RotatingFileHandler) and h.baseFilename == log_path
        for h in root.handlers
    ):
        return

    handler = RotatingFileHandler(
        log_path,
        maxBytes=app.config["LOG_MAX_BYTES"],
        backupCount=app.config["LOG_BACKUP_COUNT"],
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"
        )
    )
    handler.setLevel(level)
    root.addHandler(handler)


def register_blueprints(app):
    """Регистрация blueprints"""
    from blueprints import auth_bp, pages_bp, users_bp

    app.register_blueprint(pages_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp, url_prefix="/api/users")


def register_error_handlers(app):
    """Регистрация обработчиков ошибок"""

    @app.errorhandler(UserManagementError)
    def domain_error(error):
        if error.status_code >= 500:
            app.logger.error(f"❌ {error.kind} error: {error.cause or error}")
        return create_error_response(error.public_message, error.status_code)

    @app.errorhandler(HTTPException)
    def http_error(error):
        if request.path.startswith("/api/"):
            return create_error_response(error.description, error.code)
        return error

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.exception(f"❌ Unhandled error: {type(error).__name__}: {error}")
        db.session.rollback()
        return create_error_response(SERVER_ERROR_MESSAGE, 500)


def register_request_handlers(app):
    """Регистрация обработчиков запросов/ответов"""

    @app.before_request
    def before_request():
        g.request_id = generate_request_id()
        g.request_start_time = datetime.utcnow()
        g.client_ip = get_client_ip()

    @app.after_request
    def after_request(response):
        if hasattr(g, "request_id"):
            response.headers["X-Request-ID"] = g.request_id

        if hasattr(g, "request_start_time") and not request.path.endswith(
            (".css", ".js", ".ico")
        ):
            duration = (datetime.utcnow() - g.request_start_time).total_seconds()
            app.logger.info(
                f"[{g.request_id}] {request.method} {request.path} от {g.client_ip} "
                f"-> {response.status_code} ({duration:.3f}s)"
            )
        return response

    @app.teardown_appcontext
    def shutdown_session(exception=None):
        db.session.remove()


# =============================================================================
# ЗАПУСК
# =============================================================================
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = create_app()
    logger.info(
        f"Serveur lancé sur http://localhost:{app.config['PORT']}"
    )
    app.run(host=app.config["HOST"], port=app.config["PORT"], debug=app.debug)
