"""
Blueprints package initialization
"""

from .pages import pages_bp
from .auth import auth_bp
from .users import users_bp

__all__ = [
    "pages_bp",
    "auth_bp",
    "users_bp",
]
