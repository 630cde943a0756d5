"""
WSGI Entry Point for Production Deployment
"""

import os
import logging
from pathlib import Path

from dotenv import load_dotenv

# Настройка логирования
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

# Загружаем переменные окружения из .env (если есть)
env_path = BASE_DIR / '.env'
if env_path.exists():
    load_dotenv(env_path)
    logger.info(f"Loaded environment variables from {env_path}")

# Устанавливаем переменные окружения по умолчанию
os.environ.setdefault('FLASK_ENV', 'production')
os.environ.setdefault('PYTHONUNBUFFERED', '1')

from app import create_app  # noqa: E402

try:
    application = create_app(os.environ['FLASK_ENV'])
    logger.info("Flask application successfully loaded")
    logger.info(f"Debug mode: {application.debug}")
except Exception as e:
    logger.error(f"Failed to create Flask application: {e}", exc_info=True)
    raise

# Точка входа для WSGI серверов (Gunicorn, uWSGI)
if __name__ == "__main__":
    logger.info("Starting Flask development server")
    application.run(
        host=application.config['HOST'],
        port=application.config['PORT'],
        debug=False
    )
