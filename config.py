"""
========================================
CONFIGURATION MODULE
========================================
Централизованная конфигурация приложения
с поддержкой переменных окружения (.env)
"""

import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Загружаем переменные окружения из .env
env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)
    logger.info(f"✅ .env loaded: {env_path}")

DEFAULT_SECRET_KEY = "mini-projet-secret"


def _env_bool(name, default):
    return os.getenv(name, default).lower() == "true"


class Config:
    """Базовая конфигурация"""

    # ========================================
    # ОСНОВНЫЕ НАСТРОЙКИ
    # ========================================
    SECRET_KEY = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)
    DEBUG = _env_bool("DEBUG", "False")
    TESTING = False

    # ========================================
    # БАЗА ДАННЫХ
    # ========================================
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = int(os.getenv("DB_PORT", "3306"))
    DB_USER = os.getenv("DB_USER", "root")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    DB_NAME = os.getenv("DB_NAME", "gestion_users")

    if DB_PASSWORD:
        SQLALCHEMY_DATABASE_URI = (
            f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
            "?charset=utf8mb4"
        )
    else:
        SQLALCHEMY_DATABASE_URI = (
            f"mysql+pymysql://{DB_USER}@{DB_HOST}:{DB_PORT}/{DB_NAME}?charset=utf8mb4"
        )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_size": int(os.getenv("DB_POOL_SIZE", "10")),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "20")),
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }

    # Создавать таблицы при запуске (db.create_all, без миграций)
    AUTO_CREATE_TABLES = _env_bool("AUTO_CREATE_TABLES", "True")

    # ========================================
    # СЕССИИ
    # ========================================
    # memory | database
    SESSION_BACKEND = os.getenv("SESSION_BACKEND", "memory")
    SESSION_LIFETIME_HOURS = int(os.getenv("SESSION_LIFETIME_HOURS", "24"))
    SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "gestion_users_session")
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # ========================================
    # CORS
    # ========================================
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # ========================================
    # СЕРВЕР
    # ========================================
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "3000"))

    # ========================================
    # ЛОГИРОВАНИЕ
    # ========================================
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE", "logs/app.log")
    LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "10485760"))  # 10MB
    LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

    @staticmethod
    def init_app(app):
        """Инициализация приложения с конфигурацией"""
        if not app.debug and not app.testing:
            log_dir = os.path.dirname(app.config["LOG_FILE"])
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)


class DevelopmentConfig(Config):
    """Конфигурация для разработки"""

    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Конфигурация для продакшена"""

    DEBUG = False
    TESTING = False

    # True только за HTTPS, иначе браузер не вернёт cookie сессии
    SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE", "False")

    @staticmethod
    def init_app(app):
        Config.init_app(app)

        if app.config["SECRET_KEY"] == DEFAULT_SECRET_KEY:
            app.logger.warning("⚠️ Using default SECRET_KEY in production!")


class TestingConfig(Config):
    """Конфигурация для тестирования"""

    TESTING = True
    DEBUG = False

    # SQLite в памяти, без параметров пула MySQL
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URI", "sqlite://")
    SQLALCHEMY_ENGINE_OPTIONS = {}
    AUTO_CREATE_TABLES = True

    SESSION_BACKEND = "memory"
    SECRET_KEY = "test-secret-key"


# ========================================
# ЭКСПОРТ КОНФИГУРАЦИЙ
# ========================================
config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}


def get_config(config_name=None):
    """Вернуть класс конфигурации по имени окружения (FLASK_ENV)"""
    if config_name is None:
        config_name = os.getenv("FLASK_ENV", "development")
    return config.get(config_name, config["default"])


__all__ = [
    "Config",
    "DevelopmentConfig",
    "ProductionConfig",
    "TestingConfig",
    "config",
    "get_config",
]
