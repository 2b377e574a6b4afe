import datetime

from app.dto.auth import AuthTokenDto, LoginAttemptDto
from app.models.mongodb.user import User, UserRepository
from common.enum.error_code import APIError
from common.enum.role import Identity
from common.exception.exceptions import BusinessError
from common.utils import create_access_token, decode_token
from common.utils.clock import Clock, system_clock
from common.utils.logging_utils import get_logger

logger = get_logger('auth_service')


class AuthService:

    def __init__(
        self,
        db,
        clock: Clock = system_clock,
        max_failed_attempts: int = 3,
        restriction_minutes: int = 10,
        lockout_enforced: bool = False
    ):
        self.clock = clock
        self.max_failed_attempts = max_failed_attempts
        self.restriction_window = datetime.timedelta(minutes=restriction_minutes)
        self.lockout_enforced = lockout_enforced
        self.user_repo = UserRepository(db)

    def record_failed_login(self, email: str) -> LoginAttemptDto:
        """
        로그인 실패 기록

        normal -> restricted: 연속 실패가 max_failed_attempts 에 도달하면
        loginRestricted = True, loginRestrictedUntil = now + 제한 시간

        제한 시간이 이미 지났다면 새 연속 실패로 보고 횟수를 0부터 다시 센다.
        """
        now = self.clock.now()

        if self.user_repo.release_expired_restriction(email, now):
            logger.info(f"Expired login restriction released: {email}")

        user =self.user_repo.record_failed_login(email, now)
        if not user:
            raise BusinessError(APIError.USER_NOT_FOUND)

        if user.failed_login_attempts >= self.max_failed_attempts and not user.login_restricted:
            restricted_until = now + self.restriction_window
            self.user_repo.restrict_login(email, restricted_until)
            user.login_restricted = True
            user.login_restricted_until = restricted_until
            logger.warning(f"Login restricted until {restricted_until.isoformat()}: {email}")

        return LoginAttemptDto(
            email=user.email,
            failed_login_attempts=user.failed_login_attempts,
            login_restricted=user.login_restricted,
            login_restricted_until=user.login_restricted_until
        )

    def get_user_for_login(self, email: str) -> User:
        """
        로그인용 사용자 조회

        restricted -> normal: 조회에 성공하면 로그인 보안 필드 4개를 초기화하고 로그인 진행.
        lockout_enforced 가 켜져 있으면 제한 시간이 남은 동안에는 로그인을 막는다.
        """
        user = self.user_repo.find_onboarded_by_email(email)
        if not user:
            raise BusinessError(APIError.USER_NOT_FOUND)

        if user.login_restricted and self.lockout_enforced:
            restricted_until = user.login_restricted_until
            if restricted_until is not None and self.clock.now() < restricted_until:
                raise BusinessError(APIError.AUTH_LOGIN_RESTRICTED)

        if user.login_restricted or user.failed_login_attempts:
            self.user_repo.clear_login_restriction(email)
            user.failed_login_attempts = 0
            user.last_failed_login_attempt = 0
            user.login_restricted = False
            user.login_restricted_until = None

        return user

    def login(self, email: str) -> AuthTokenDto:
        user = self.get_user_for_login(email)

        # NOTE : 권한은 토큰 발급 시점에 한 번만 결정
        identity = Identity(email=user.email, role=user.role)
        token = create_access_token(identity)

        return AuthTokenDto(
            token=token,
            email=user.email,
            role=user.role.value
        )

    @staticmethod
    def logout(token: str, redis_client=None):
        if not token:
            return

        if redis_client is None:
            logger.warning("Redis 사용 불가, 토큰 블랙리스트 기능 비활성화")
            return

        payload = decode_token(token)
        exp_timestamp = payload.get('exp')

        if exp_timestamp:
            current_timestamp = datetime.datetime.utcnow().timestamp()
            ttl_seconds = int(exp_timestamp - current_timestamp)

            #NOTE: 만료 시간이 남아있으면 블랙리스트에 추가
            if ttl_seconds > 0:
                redis_client.setex(
                    f"gadgetswap:blacklist:{token}",
                    ttl_seconds,
                    "1"
                )
