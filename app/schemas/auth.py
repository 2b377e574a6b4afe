from marshmallow import Schema, fields


class EmailCheckRequestSchema(Schema):
    email = fields.Email(required=True, metadata={'description': '확인할 이메일'})


class EmailCheckResponseSchema(Schema):
    is_available = fields.Boolean(required=True, metadata={'description': '사용 가능 여부 (True면 가입 가능)'})
    message = fields.String(required=True, metadata={'description': '안내 메시지'})


class LoginRequestSchema(Schema):
    email = fields.Email(required=True, metadata={'description': '이메일 (외부 인증을 마친 사용자)'})


class LoginResponseSchema(Schema):
    access_token = fields.String(attribute='token', required=True, metadata={'description': 'JWT 액세스 토큰 (1시간)'})
    email = fields.Email(metadata={'description': '이메일'})
    role = fields.String(metadata={'description': '사용자 권한 (user, admin)'})


class LoginFailureRequestSchema(Schema):
    email = fields.Email(required=True, metadata={'description': '로그인에 실패한 이메일'})


class LoginAttemptResponseSchema(Schema):
    email = fields.Email(metadata={'description': '이메일'})
    failed_login_attempts = fields.Integer(
        data_key='failedLoginAttempts',
        metadata={'description': '연속 로그인 실패 횟수'}
    )
    login_restricted = fields.Boolean(
        data_key='loginRestricted',
        metadata={'description': '로그인 제한 여부'}
    )
    login_restricted_until = fields.DateTime(
        data_key='loginRestrictedUntil',
        allow_none=True,
        metadata={'description': '로그인 제한 해제 시각'}
    )
