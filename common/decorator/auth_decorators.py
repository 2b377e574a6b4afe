from functools import wraps
from flask import request, g, current_app

import common.extensions as extensions
from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError
from common.utils import verify_access_token


def extract_token():
    # NOTE : HTTP-only 쿠키 우선, 없으면 Authorization 헤더 사용
    cookie_name = current_app.config.get('AUTH_COOKIE_NAME', 'token')
    token = request.cookies.get(cookie_name)
    if token:
        return token

    auth_header = request.headers.get('Authorization')
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ")[1]

    return None


def is_blacklisted(token):
    redis_client = extensions.redis_client
    return bool(redis_client and redis_client.exists(f"gadgetswap:blacklist:{token}"))


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = extract_token()

        if not token or is_blacklisted(token):
            raise BusinessError(APIError.AUTH_INVALID_TOKEN)

        g.identity = verify_access_token(token)
        g.token = token

        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        identity = getattr(g, 'identity', None)
        if identity is None or not identity.is_admin:
            raise BusinessError(APIError.AUTH_FORBIDDEN, "관리자 권한이 필요합니다.")

        return f(*args, **kwargs)
    return decorated_function


def public_route(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        return f(*args, **kwargs)
    return decorated_function
