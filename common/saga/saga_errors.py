from pymongo.errors import DuplicateKeyError, PyMongoError

from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError


def raise_saga_failure(error: Exception, duplicate_error: APIError = APIError.DB_ERROR):
    """
    사가 실패 에러를 호출자에게 보여줄 BusinessError 로 변환해서 발생

    - BusinessError (SagaCompensationError 포함): 그대로
    - DuplicateKeyError: duplicate_error (온보딩의 사용자 insert 단계에서는 이메일 중복)
    - 그 외 PyMongoError: DB_ERROR
    """
    if isinstance(error, BusinessError):
        raise error

    if isinstance(error, DuplicateKeyError):
        raise BusinessError(duplicate_error) from error

    if isinstance(error, PyMongoError):
        raise BusinessError(APIError.DB_ERROR) from error

    raise error
