"""
Query gateway - единственная точка выполнения SQL

Выполняет один параметризованный запрос через пул соединений
Flask-SQLAlchemy и переводит ошибки драйвера в доменные ошибки.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy import text

from models.database import db
from utils.errors import classify_store_error

logger = logging.getLogger(__name__)

EXTENSION_KEY = "query_gateway"


@dataclass
class QueryResult:
    """Rows for reads, affected-row count for writes"""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    affected_rows: int = 0

    @property
    def first(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None


class QueryGateway:
    def __init__(self, database=None):
        self.db = database or db

    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> QueryResult:
        """
        Выполнить параметризованный запрос

        Args:
            sql (str): SQL с именованными параметрами (:name)
            params (dict): значения параметров

        Returns:
            QueryResult: строки (SELECT) или число затронутых строк

        Raises:
            ConflictError: нарушение уникальности (дубликат login)
            InfrastructureError: любая другая ошибка хранилища
        """
        session = self.db.session
        try:
            result = session.execute(text(sql), params or {})

            if result.returns_rows:
                rows = [dict(row) for row in result.mappings().all()]
                # Завершаем транзакцию чтения, соединение возвращается в пул
                session.commit()
                return QueryResult(rows=rows, affected_rows=len(rows))

            affected = result.rowcount
            session.commit()
            logger.debug(f"Statement affected {affected} row(s)")
            return QueryResult(affected_rows=affected)

        except Exception as e:
            session.rollback()
            error = classify_store_error(e)
            logger.error(f"❌ Query failed ({error.kind}): {type(e).__name__}: {e}")
            raise error from e


def init_gateway(app, gateway=None):
    """Зарегистрировать gateway в app.extensions"""
    gateway = gateway or QueryGateway(db)
    app.extensions[EXTENSION_KEY] = gateway
    return gateway


def get_gateway() -> QueryGateway:
    return current_app.extensions[EXTENSION_KEY]
