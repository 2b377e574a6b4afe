from typing import Any, Dict

from app.dto.user import OnboardingResultDto, WishlistDto
from app.models.mongodb.user import User, UserRepository
from app.models.mongodb.message_chain import MessageChain, MessageChainRepository
from app.models.mongodb.notification_chain import NotificationChain, NotificationChainRepository
from app.models.mongodb.activity_history_chain import ActivityHistoryChain, ActivityHistoryChainRepository
from app.models.mongodb.saga_transaction_log import SagaTransactionLogRepository
from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError
from common.saga import SagaOrchestrator, raise_saga_failure
from common.utils.clock import Clock, system_clock
from common.utils.logging_utils import get_logger

logger = get_logger('user_service')

ONBOARD_USER_SAGA = 'onboard_user'
OFFBOARD_USER_SAGA = 'offboard_user'


def _require_email(email) -> str:
    if not isinstance(email, str) or not email.strip():
        raise BusinessError(APIError.INVALID_INPUT_VALUE, "이메일은 필수 입력값입니다.")
    return email.strip()


class UserService:

    def __init__(self, db, clock: Clock = system_clock):
        self.clock = clock
        self.user_repo = UserRepository(db)
        self.message_chain_repo = MessageChainRepository(db)
        self.notification_chain_repo = NotificationChainRepository(db)
        self.activity_history_chain_repo = ActivityHistoryChainRepository(db)
        self.saga_repo = SagaTransactionLogRepository(db)

    def check_email_availability(self, email: str) -> bool:
        return not self.user_repo.exists_by_email(_require_email(email))

    # ==================== 회원가입 (온보딩 사가) ====================

    def onboard_user(self, new_user: Dict[str, Any]) -> OnboardingResultDto:
        """
        User + MessageChain + NotificationChain + ActivityHistoryChain 생성

        모든 단계가 성공해야 사용자와 세 체인이 서로 연결된 상태로 남고,
        중간에 실패하면 앞서 만든 도큐먼트를 역순으로 삭제한 뒤 에러를 발생시킨다.
        """
        if not new_user:
            raise BusinessError(APIError.INVALID_INPUT_VALUE, "newUser and email are required!")
        email = _require_email(new_user.get('email'))

        if self.user_repo.exists_by_email(email):
            raise BusinessError(APIError.AUTH_DUPLICATE_EMAIL)

        user = User.from_new_user_record(dict(new_user, email=email), self.clock.now())

        orchestrator = SagaOrchestrator(
            saga_repo=self.saga_repo,
            saga_name=ONBOARD_USER_SAGA,
            metadata={'email': email}
        )

        orchestrator.add_step(
            name='insert_user',
            execute=lambda ctx: self.user_repo.insert(user),
            compensate=self.user_repo.compensate_insert,
            extract_compensation_data=lambda result: result
        )
        self._add_chain_steps(
            orchestrator, 'message_chain', 'messageChain_id',
            self.message_chain_repo, MessageChain(user_email=email)
        )
        self._add_chain_steps(
            orchestrator, 'notification_chain', 'notificationChain_id',
            self.notification_chain_repo, NotificationChain(user_email=email)
        )
        self._add_chain_steps(
            orchestrator, 'activity_history_chain', 'activityHistoryChain_id',
            self.activity_history_chain_repo, ActivityHistoryChain(user_email=email)
        )

        success, error = orchestrator.execute()
        if not success:
            # NOTE : 이메일 중복은 사용자 insert 에서만, 체인 insert 의 중복 키는 DB 오류
            duplicate_error = APIError.AUTH_DUPLICATE_EMAIL if orchestrator.failed_step == 'insert_user' else APIError.DB_ERROR
            raise_saga_failure(error, duplicate_error=duplicate_error)

        ctx = orchestrator.context
        logger.info(f"User onboarded: {email}")

        return OnboardingResultDto(
            user_id=str(ctx.get_result('insert_user')['user_id']),
            message_chain_id=str(ctx.get_result('insert_message_chain')['chain_id']),
            notification_chain_id=str(ctx.get_result('insert_notification_chain')['chain_id']),
            activity_history_chain_id=str(ctx.get_result('insert_activity_history_chain')['chain_id'])
        )

    def _add_chain_steps(self, orchestrator, chain_name, reference_field, repo, chain):
        insert_step = f'insert_{chain_name}'

        def link_chain(ctx):
            user_id = ctx.get_result('insert_user')['user_id']
            chain_id = str(ctx.get_result(insert_step)['chain_id'])
            if not self.user_repo.set_chain_reference(user_id, reference_field, chain_id):
                raise BusinessError(APIError.USER_NOT_FOUND)
            return chain_id

        orchestrator.add_step(
            name=insert_step,
            execute=lambda ctx: repo.insert(chain),
            compensate=repo.compensate_insert,
            extract_compensation_data=lambda result: result
        )
        # NOTE : 연결 단계는 사용자 삭제 보상으로 함께 사라지므로 별도 보상 없음
        orchestrator.add_step(
            name=f'link_{chain_name}',
            execute=link_chain
        )

    # ==================== 회원 탈퇴 (사용자 + 체인 일괄 삭제) ====================

    def offboard_user(self, email: str):
        email = _require_email(email)

        if not self.user_repo.exists_by_email(email):
            raise BusinessError(APIError.USER_NOT_FOUND)

        orchestrator = SagaOrchestrator(
            saga_repo=self.saga_repo,
            saga_name=OFFBOARD_USER_SAGA,
            metadata={'email': email}
        )

        for name, repo in (
            ('delete_activity_history_chain', self.activity_history_chain_repo),
            ('delete_notification_chain', self.notification_chain_repo),
            ('delete_message_chain', self.message_chain_repo),
        ):
            orchestrator.add_step(
                name=name,
                execute=lambda ctx, repo=repo: repo.delete_by_user_email(email),
                compensate=repo.compensate_delete,
                extract_compensation_data=lambda result: result
            )

        orchestrator.add_step(
            name='delete_user',
            execute=lambda ctx: self.user_repo.delete_by_email(email),
            compensate=self.user_repo.compensate_delete,
            extract_compensation_data=lambda result: result
        )

        success, error = orchestrator.execute()
        if not success:
            raise_saga_failure(error)

        logger.info(f"User offboarded: {email}")

    # ==================== 조회 ====================

    def get_full_user_profile(self, email: str) -> Dict[str, Any]:
        user = self.user_repo.find_onboarded_by_email(_require_email(email))
        if not user:
            raise BusinessError(APIError.USER_NOT_FOUND)

        profile = user.to_dict()
        # 민감 정보 제외
        profile.pop('uid', None)
        return profile

    def get_notification_chain(self, email: str) -> NotificationChain:
        chain = self.notification_chain_repo.find_by_user_email(_require_email(email))
        if not chain:
            raise BusinessError(APIError.NOTIFICATION_CHAIN_NOT_FOUND)
        return chain

    def get_activity_history_chain(self, email: str) -> ActivityHistoryChain:
        chain = self.activity_history_chain_repo.find_by_user_email(_require_email(email))
        if not chain:
            raise BusinessError(APIError.ACTIVITY_HISTORY_CHAIN_NOT_FOUND)
        return chain

    # ==================== 위시리스트 ====================

    def toggle_wishlist(self, email: str, gadget_id: str) -> WishlistDto:
        email = _require_email(email)
        if not isinstance(gadget_id, str) or not gadget_id:
            raise BusinessError(APIError.INVALID_INPUT_VALUE, "userEmail and gadgetId are required!")

        user = self.user_repo.find_by_email(email)
        if not user:
            raise BusinessError(APIError.USER_NOT_FOUND)

        if gadget_id in user.wishlist:
            wishlist = self.user_repo.remove_from_wishlist(email, gadget_id)
            added, message = False, "Gadget removed from wishlist successfully!"
        else:
            wishlist = self.user_repo.add_to_wishlist(email, gadget_id)
            added, message = True, "Gadget added to wishlist successfully!"

        if wishlist is None:
            raise BusinessError(APIError.USER_NOT_FOUND)

        return WishlistDto(wishlist=wishlist, added=added, message=message)
