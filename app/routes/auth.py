from flask import g, current_app, after_this_request
from flask_smorest import Blueprint

import common.extensions as extensions
from app.schemas.auth import EmailCheckRequestSchema, EmailCheckResponseSchema, LoginRequestSchema, \
    LoginResponseSchema, LoginFailureRequestSchema, LoginAttemptResponseSchema
from app.schemas.common_schema import SuccessResponseSchema
from app.services import get_auth_service, get_user_service
from common.decorator.auth_decorators import login_required, public_route

auth_blueprint = Blueprint(
    'auth',
    __name__,
    url_prefix='/api/v1/auth',
    description='인증 관련 API'
)


@auth_blueprint.route('/check-email', methods=['POST'])
@public_route
@auth_blueprint.arguments(EmailCheckRequestSchema)
@auth_blueprint.response(200, EmailCheckResponseSchema)
def check_email_availability(data):
    is_available = get_user_service().check_email_availability(data['email'])

    if is_available:
        message_text = "사용 가능한 이메일입니다."
    else:
        message_text = "이미 가입된 이메일입니다."

    return {
        "is_available": is_available,
        "message": message_text
    }


@auth_blueprint.route('/login', methods=['POST'])
@public_route
@auth_blueprint.arguments(LoginRequestSchema)
@auth_blueprint.response(200, LoginResponseSchema)
def login(data):
    result = get_auth_service().login(data['email'])

    @after_this_request
    def set_token_cookie(response):
        config = current_app.config
        response.set_cookie(
            config['AUTH_COOKIE_NAME'],
            result.token,
            max_age=int(config['JWT_ACCESS_TOKEN_EXPIRES'].total_seconds()),
            httponly=True,
            secure=config['AUTH_COOKIE_SECURE'],
            samesite=config['AUTH_COOKIE_SAMESITE']
        )
        return response

    return result


@auth_blueprint.route('/login-failures', methods=['POST'])
@public_route
@auth_blueprint.arguments(LoginFailureRequestSchema)
@auth_blueprint.response(200, LoginAttemptResponseSchema)
def record_failed_login(data):
    return get_auth_service().record_failed_login(data['email'])


@auth_blueprint.route('/logout', methods=['POST'])
@login_required
@auth_blueprint.response(200, SuccessResponseSchema)
@auth_blueprint.doc(security=[{"BearerAuth": []}])
def logout():
    get_auth_service().logout(g.token, extensions.redis_client)

    @after_this_request
    def clear_token_cookie(response):
        config = current_app.config
        response.delete_cookie(
            config['AUTH_COOKIE_NAME'],
            httponly=True,
            secure=config['AUTH_COOKIE_SECURE'],
            samesite=config['AUTH_COOKIE_SAMESITE']
        )
        return response

    return {
        "result": "success",
        "message": "로그아웃되었습니다."
    }
