from typing import List, Optional

from common.enum.error_code import APIError

class BusinessError(Exception):
    def __init__(self, error_enum: APIError, message=None):
        self.error_enum = error_enum
        self.message = message if message else error_enum.message
        super().__init__(self.message)


class SagaCompensationError(BusinessError):
    """
    보상 트랜잭션 자체가 실패한 경우
    원래 에러와 달리 잔여 데이터가 남아 있으므로 수동 정리가 필요함
    """

    def __init__(
        self,
        transaction_id: str,
        failed_steps: List[str],
        original_error: Optional[Exception] = None
    ):
        self.transaction_id = transaction_id
        self.failed_steps = failed_steps
        self.original_error = original_error
        super().__init__(
            APIError.SAGA_COMPENSATION_FAILED,
            f"CRITICAL: Compensation failed for steps {failed_steps}. "
            f"Manual intervention required. Transaction ID: {transaction_id}"
        )
