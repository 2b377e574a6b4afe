"""
Routes package
Flask Blueprint들을 관리하는 패키지
"""

from app.routes.base import base_blueprint
from app.routes.auth import auth_blueprint
from app.routes.users import users_blueprint
from app.routes.gadgets import gadgets_blueprint
from app.routes.rentals import rentals_blueprint
from app.routes.messages import messages_blueprint
from app.routes.admin import admin_blueprint

__all__ = [
    'base_blueprint',
    'auth_blueprint',
    'users_blueprint',
    'gadgets_blueprint',
    'rentals_blueprint',
    'messages_blueprint',
    'admin_blueprint'
]
