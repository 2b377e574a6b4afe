"""
Services package
비즈니스 로직을 처리하는 서비스 레이어

- auth_service: 로그인 실패 기록, 토큰 발급, 로그아웃
- user_service: 회원가입(온보딩 사가), 탈퇴, 프로필, 위시리스트
- rental_service: 대여 예약 사가
- message_service: 메시지 체인
- gadget_service: 가젯 카탈로그

서비스는 요청마다 current_app.mongo 로 생성한다.
"""

from flask import current_app

import common.extensions as extensions
from common.utils.gadget_lock import GadgetCalendarLock

from .auth_service import AuthService
from .user_service import UserService
from .rental_service import RentalService
from .message_service import MessageService
from .gadget_service import GadgetService


def get_auth_service() -> AuthService:
    return AuthService(
        current_app.mongo,
        max_failed_attempts=current_app.config['LOGIN_MAX_FAILED_ATTEMPTS'],
        restriction_minutes=current_app.config['LOGIN_RESTRICTION_MINUTES'],
        lockout_enforced=current_app.config['LOGIN_LOCKOUT_ENFORCED']
    )


def get_user_service() -> UserService:
    return UserService(current_app.mongo)


def get_rental_service() -> RentalService:
    gadget_lock = GadgetCalendarLock(
        extensions.redis_client,
        timeout=current_app.config['GADGET_LOCK_TIMEOUT_SECONDS']
    )
    return RentalService(current_app.mongo, gadget_lock=gadget_lock)


def get_message_service() -> MessageService:
    return MessageService(current_app.mongo)


def get_gadget_service() -> GadgetService:
    return GadgetService(current_app.mongo)


__all__ = [
    'AuthService',
    'UserService',
    'RentalService',
    'MessageService',
    'GadgetService',
    'get_auth_service',
    'get_user_service',
    'get_rental_service',
    'get_message_service',
    'get_gadget_service'
]
