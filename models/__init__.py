"""
Models package initialization
"""

from .database import db, Utilisateur, UserSessions
from .gateway import QueryGateway, QueryResult, init_gateway, get_gateway

__all__ = [
    "db",
    "Utilisateur",
    "UserSessions",
    "QueryGateway",
    "QueryResult",
    "init_gateway",
    "get_gateway",
]
