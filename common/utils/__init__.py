"""
Utils package
유틸리티 함수들을 모아둔 패키지

- jwt_utils: JWT 토큰 생성 및 검증
- clock: 현재 시각 제공
- gadget_lock: 가젯 예약 날짜 변경 직렬화
"""

from common.utils.jwt_utils import (
    decode_token,
    create_access_token,
    verify_access_token
)

__all__ = [
    'decode_token',
    'create_access_token',
    'verify_access_token'
]
