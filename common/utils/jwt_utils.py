import jwt
import datetime
from flask import current_app
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from common.enum.role import Identity, Role
from common.exception.exceptions import BusinessError
from common.enum.error_code import APIError

def get_jwt_config():
    try:
        secret_key = current_app.config.get('JWT_SECRET_KEY')
        algorithm = current_app.config.get('JWT_ALGORITHM', 'HS256')

        if not secret_key:
            raise BusinessError(APIError.INTERNAL_SERVER_ERROR, "JWT KEY가 설정되지 않았습니다.")

        return secret_key, algorithm
    except RuntimeError:
        raise BusinessError(APIError.INTERNAL_SERVER_ERROR, "Application Context Error")

def encode_token(identity: Identity, expires_delta, token_type):
    secret_key, algorithm = get_jwt_config()

    current_time = datetime.datetime.utcnow()

    payload = {
        "sub": identity.email,               # Subject (유저 이메일)
        "role": identity.role.value,         # 인증 시점에 한 번만 결정되는 권한
        "iat": current_time,                 # Issued At (발급 시간)
        "exp": current_time + expires_delta, # Expiration (만료 시간)
        "type": token_type                   # 커스텀: 토큰 타입
    }

    encoded_token = jwt.encode(payload, secret_key, algorithm=algorithm)
    return encoded_token

def decode_token(encoded_token):
    secret_key, algorithm = get_jwt_config()

    try:
        payload = jwt.decode(encoded_token, secret_key, algorithms=[algorithm])
        return payload

    except ExpiredSignatureError:
        raise BusinessError(APIError.AUTH_TOKEN_EXPIRED)

    except InvalidTokenError:
        raise BusinessError(APIError.AUTH_INVALID_TOKEN)

def create_access_token(identity: Identity):
    expires = current_app.config.get('JWT_ACCESS_TOKEN_EXPIRES', datetime.timedelta(hours=1))
    return encode_token(identity, expires, 'access')

def verify_access_token(encoded_token) -> Identity:
    payload = decode_token(encoded_token)

    if payload.get('type') != 'access' or not payload.get('sub'):
        raise BusinessError(APIError.AUTH_INVALID_TOKEN)

    return Identity(
        email=payload['sub'],
        role=Role.from_value(payload.get('role'))
    )
