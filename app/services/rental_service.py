from numbers import Number
from typing import Any, Dict, List

from app.models.mongodb.gadget import GadgetRepository, to_object_id
from app.models.mongodb.rental_order import RentalOrder, RentalOrderRepository
from app.models.mongodb.user import UserRepository
from app.models.mongodb.saga_transaction_log import SagaTransactionLogRepository
from common.enum.error_code import APIError
from common.enum.role import Identity
from common.exception.exceptions import BusinessError
from common.saga import SagaOrchestrator, raise_saga_failure
from common.utils.clock import Clock, system_clock
from common.utils.gadget_lock import GadgetCalendarLock
from common.utils.logging_utils import get_logger

logger = get_logger('rental_service')

BOOK_RENTAL_SAGA = 'book_rental'


def _is_number(value) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


class RentalService:

    def __init__(self, db, gadget_lock: GadgetCalendarLock = None, clock: Clock = system_clock):
        self.clock = clock
        self.gadget_lock = gadget_lock or GadgetCalendarLock()
        self.user_repo = UserRepository(db)
        self.gadget_repo = GadgetRepository(db)
        self.rental_order_repo = RentalOrderRepository(db)
        self.saga_repo = SagaTransactionLogRepository(db)

    def _build_order(self, renter_email: str, order: Dict[str, Any]) -> RentalOrder:
        if not isinstance(renter_email, str) or not renter_email.strip():
            raise BusinessError(APIError.INVALID_INPUT_VALUE, "렌터 이메일은 필수 입력값입니다.")
        if not isinstance(order, dict):
            raise BusinessError(APIError.INVALID_INPUT_VALUE, "주문 정보가 필요합니다.")

        if to_object_id(order.get('gadget_id')) is None:
            raise BusinessError(APIError.INVALID_INPUT_VALUE, "유효하지 않은 gadget_id 입니다.")

        rental_streak = order.get('rentalStreak')
        if not isinstance(rental_streak, list) or not rental_streak:
            raise BusinessError(APIError.INVALID_INPUT_VALUE, "rentalStreak 은 비어있을 수 없습니다.")
        if not all(isinstance(entry, dict) for entry in rental_streak):
            raise BusinessError(APIError.INVALID_INPUT_VALUE, "rentalStreak 항목 형식이 올바르지 않습니다.")

        # NOTE : 통계에 반영되는 것은 마지막 항목뿐이므로 마지막 항목만 숫자 검증
        latest = rental_streak[-1]
        for key in ('points', 'payableFinalAmount', 'rentalDuration'):
            if not _is_number(latest.get(key)):
                raise BusinessError(APIError.INVALID_INPUT_VALUE, f"rentalStreak 마지막 항목의 {key} 값이 올바르지 않습니다.")

        blocked_dates = order.get('blockedDates', [])
        if not isinstance(blocked_dates, list):
            raise BusinessError(APIError.INVALID_INPUT_VALUE, "blockedDates 는 배열이어야 합니다.")

        return RentalOrder.from_dict(dict(
            order,
            gadget_id=str(order['gadget_id']),
            userEmail=renter_email.strip(),
            blockedDates=blocked_dates,
            status='active',
            createdAt=self.clock.now()
        ))

    def book_rental(self, renter_email: str, order: Dict[str, Any]) -> RentalOrder:
        """
        대여 예약 사가

        RentalOrder 생성 -> 렌터 통계 반영 -> 가젯 확인 -> 가젯 캘린더 반영.
        중간에 실패하면 앞 단계들을 역순으로 되돌린다 (통계 증감 포함).
        """
        rental_order = self._build_order(renter_email, order)
        renter_email = rental_order.user_email

        if not self.user_repo.exists_by_email(renter_email):
            raise BusinessError(APIError.USER_NOT_FOUND)

        latest = rental_order.latest_streak_entry

        orchestrator = SagaOrchestrator(
            saga_repo=self.saga_repo,
            saga_name=BOOK_RENTAL_SAGA,
            metadata={'email': renter_email, 'gadget_id': rental_order.gadget_id}
        )

        def apply_renter_stats(ctx):
            order_id = str(ctx.get_result('insert_rental_order')['order_id'])
            applied = self.user_repo.apply_rental(
                renter_email,
                order_id,
                points=latest.points,
                total_spent=latest.payable_final_amount,
                rental_duration=latest.rental_duration
            )
            if not applied:
                raise BusinessError(APIError.USER_NOT_FOUND)

            return {
                'email': renter_email,
                'order_id': order_id,
                'points': latest.points,
                'total_spent': latest.payable_final_amount,
                'rental_duration': latest.rental_duration
            }

        def verify_gadget(ctx):
            if not self.gadget_repo.find_by_id(rental_order.gadget_id):
                raise BusinessError(APIError.GADGET_NOT_FOUND)
            return rental_order.gadget_id

        def block_gadget_dates(ctx):
            with self.gadget_lock.hold(rental_order.gadget_id):
                if not self.gadget_repo.block_dates(rental_order.gadget_id, rental_order.blocked_dates):
                    raise BusinessError(APIError.GADGET_NOT_FOUND)

            return {
                'gadget_id': rental_order.gadget_id,
                'blocked_dates': list(rental_order.blocked_dates)
            }

        def unblock_gadget_dates(compensation_data):
            with self.gadget_lock.hold(compensation_data['gadget_id']):
                self.gadget_repo.compensate_block_dates(compensation_data)

        orchestrator.add_step(
            name='insert_rental_order',
            execute=lambda ctx: self.rental_order_repo.insert(rental_order),
            compensate=self.rental_order_repo.compensate_insert,
            extract_compensation_data=lambda result: result
        ).add_step(
            name='apply_renter_stats',
            execute=apply_renter_stats,
            compensate=self.user_repo.compensate_apply_rental,
            extract_compensation_data=lambda result: result
        ).add_step(
            name='verify_gadget',
            execute=verify_gadget
        ).add_step(
            name='block_gadget_dates',
            execute=block_gadget_dates,
            compensate=unblock_gadget_dates,
            extract_compensation_data=lambda result: result
        )

        success, error = orchestrator.execute()
        if not success:
            raise_saga_failure(error)

        logger.info(f"Rental booked: {rental_order.id} ({renter_email} -> {rental_order.gadget_id})")
        return rental_order

    def get_rental_orders(self, email: str) -> List[RentalOrder]:
        return self.rental_order_repo.find_by_user_email(email)

    def get_rental_order(self, order_id: str, requester: Identity) -> RentalOrder:
        rental_order = self.rental_order_repo.find_by_id(order_id)
        if not rental_order:
            raise BusinessError(APIError.RENTAL_ORDER_NOT_FOUND)

        if not requester.is_admin and rental_order.user_email != requester.email:
            raise BusinessError(APIError.AUTH_FORBIDDEN)

        return rental_order
