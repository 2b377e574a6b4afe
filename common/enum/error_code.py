from enum import Enum

class APIError(Enum):
    # 1. 공통 에러
    INTERNAL_SERVER_ERROR = ("C001", "서버 내부 오류가 발생했습니다.", 500)
    INVALID_INPUT_VALUE  = ("C002", "입력값이 올바르지 않습니다.", 400)
    DB_ERROR = ("C003", "DB 작업 처리 중 오류가 발생하였습니다.", 500)

    # 2. 인증(Auth) 관련
    AUTH_TOKEN_EXPIRED   = ("A001", "토큰이 만료되었습니다.", 401)
    AUTH_INVALID_TOKEN   = ("A002", "유효하지 않은 토큰입니다.", 401)
    AUTH_FORBIDDEN = ("A003", "접근 권한이 없습니다.", 403)
    AUTH_DUPLICATE_EMAIL = ("A004", "이미 가입된 이메일입니다.", 409)
    AUTH_LOGIN_RESTRICTED = ("A005", "로그인 시도 횟수를 초과했습니다. 잠시 후 다시 시도해주세요.", 429)

    # 3. 사용자(User) 관련
    USER_NOT_FOUND       = ("U001", "사용자를 찾을 수 없습니다.", 404)

    # 4. 가젯(Gadget) 관련
    GADGET_NOT_FOUND      = ("G001", "가젯을 찾을 수 없습니다.", 404)

    # 5. 대여(Rental) 관련
    RENTAL_ORDER_NOT_FOUND = ("R001", "대여 주문을 찾을 수 없습니다.", 404)

    # 6. 메시지/알림/활동 체인 관련
    MESSAGE_CHAIN_NOT_FOUND = ("M001", "메시지 체인을 찾을 수 없습니다.", 404)
    NOTIFICATION_CHAIN_NOT_FOUND = ("M002", "알림 체인을 찾을 수 없습니다.", 404)
    ACTIVITY_HISTORY_CHAIN_NOT_FOUND = ("M003", "활동 기록 체인을 찾을 수 없습니다.", 404)

    # 7. 사가(Saga) 관련
    SAGA_COMPENSATION_FAILED = ("S001", "보상 트랜잭션에 실패했습니다. 관리자 확인이 필요합니다.", 500)

    def __init__(self, code, message, status):
        self.code = code
        self.message = message
        self.status = status
