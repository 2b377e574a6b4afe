from flask import jsonify
from pymongo.errors import DuplicateKeyError, PyMongoError

from common.enum.error_code import APIError
from common.exception.exceptions import BusinessError, SagaCompensationError
from common.utils.logging_utils import get_logger

logger = get_logger('error_handler')


def fail_response(error: APIError, message=None, data=None):
    """{"result": "fail", "message", "code", "data"} 형태의 실패 응답"""
    return jsonify({
        "result": "fail",
        "message": message or error.message,
        "code": error.code,
        "data": data
    }), error.status


def register_error_handlers(app):
    @app.errorhandler(SagaCompensationError)
    def handle_compensation_error(e):
        # 잔여 데이터가 남았으므로 운영자 확인 필요
        logger.critical(f"{e.message} (original: {e.original_error})")
        return fail_response(e.error_enum, data={"transaction_id": e.transaction_id})

    @app.errorhandler(BusinessError)
    def handle_business_error(e):
        return fail_response(e.error_enum, e.message)

    @app.errorhandler(DuplicateKeyError)
    def handle_duplicate_key_error(e):
        logger.warning(f"Duplicate key: {e}")
        return fail_response(APIError.AUTH_DUPLICATE_EMAIL)

    @app.errorhandler(PyMongoError)
    def handle_db_error(e):
        logger.error(f"MongoDB error: {e}")
        return fail_response(APIError.DB_ERROR)

    @app.errorhandler(Exception)
    def handle_internal_error(e):
        logger.exception(f"Unhandled error: {e}")
        return fail_response(APIError.INTERNAL_SERVER_ERROR)
