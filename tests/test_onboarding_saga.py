import pytest
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.models.mongodb.saga_transaction_log import SagaTransactionLogRepository, SagaStatus
from app.services.user_service import UserService
from common.enum.error_code import APIError
from common.enum.role import Role
from common.exception.exceptions import BusinessError, SagaCompensationError

EMAIL = 'new.user@example.com'

CHAIN_COLLECTIONS = ('messagesCollection', 'notificationsCollection', 'activityHistoriesCollection')


@pytest.fixture
def service(db, clock):
    return UserService(db, clock=clock)


def _documents_for(db, email):
    return {
        'user': db['userCollection'].count_documents({'email': email}),
        **{name: db[name].count_documents({'user_email': email}) for name in CHAIN_COLLECTIONS}
    }


def test_onboarding_links_user_and_three_chains(service, db):
    result = service.onboard_user({'email': EMAIL, 'name': 'New User', 'photo': 'https://img/me.png'})

    user_doc = db['userCollection'].find_one({'email': EMAIL})
    assert str(user_doc['_id']) == result.user_id
    assert user_doc['name'] == 'New User'

    for reference_field, collection_name, chain_id in (
        ('messageChain_id', 'messagesCollection', result.message_chain_id),
        ('notificationChain_id', 'notificationsCollection', result.notification_chain_id),
        ('activityHistoryChain_id', 'activityHistoriesCollection', result.activity_history_chain_id),
    ):
        assert user_doc[reference_field] == chain_id
        chain_doc = db[collection_name].find_one({'user_email': EMAIL})
        assert str(chain_doc['_id']) == chain_id
        assert chain_doc['user_email'] == user_doc['email']


def test_onboarding_starts_counters_and_security_fields_at_defaults(service, db, clock):
    service.onboard_user({
        'email': EMAIL,
        'role': 'admin',
        'failedLoginAttempts': 7,
        'loginRestricted': True,
        'stats': {'activeRentals': 4, 'pointsEarned': 500, 'totalSpent': 900},
        'membershipDetails': {'points': 10000, 'tier': 'Platinum', 'rentalStreak': 30},
        'rentalOrders': ['65f000000000000000000009'],
        'wishlist': ['65f000000000000000000008']
    })

    user_doc = db['userCollection'].find_one({'email': EMAIL})
    assert user_doc['role'] == Role.USER.value
    assert user_doc['stats'] == {'activeRentals': 0, 'pointsEarned': 0, 'totalSpent': 0}
    assert user_doc['membershipDetails'] == {'points': 0, 'tier': 'Bronze', 'rentalStreak': 0}
    assert user_doc['rentalOrders'] == []
    assert user_doc['wishlist'] == []
    assert user_doc['failedLoginAttempts'] == 0
    assert user_doc['lastFailedLoginAttempt'] == 0
    assert user_doc['loginRestricted'] is False
    assert user_doc['loginRestrictedUntil'] is None
    assert user_doc['createdAt'] == clock.now()

    message_chain = db['messagesCollection'].find_one({'user_email': EMAIL})
    assert message_chain['message_chain'] == []
    assert message_chain['total_count'] == 0
    assert message_chain['unreadByUser_count'] == 0
    assert message_chain['unreadByAdmin_count'] == 0

    notification_chain = db['notificationsCollection'].find_one({'user_email': EMAIL})
    assert notification_chain['total_count'] == 0
    assert notification_chain['unread_count'] == 0


def test_duplicate_email_is_rejected_without_new_documents(service, db):
    service.onboard_user({'email': EMAIL})
    before = _documents_for(db, EMAIL)

    with pytest.raises(BusinessError) as exc_info:
        service.onboard_user({'email': EMAIL, 'name': 'Someone Else'})

    assert exc_info.value.error_enum == APIError.AUTH_DUPLICATE_EMAIL
    assert _documents_for(db, EMAIL) == before


@pytest.mark.parametrize('record', [None, {}, {'email': ''}, {'email': '   '}, {'name': 'No Email'}])
def test_missing_email_is_rejected_before_any_write(service, db, record):
    with pytest.raises(BusinessError) as exc_info:
        service.onboard_user(record)

    assert exc_info.value.error_enum == APIError.INVALID_INPUT_VALUE
    assert db['userCollection'].count_documents({}) == 0
    assert db['saga_transaction_log'].count_documents({}) == 0


@pytest.mark.parametrize('failing_repo, failing_method', [
    ('message_chain_repo', 'insert'),
    ('notification_chain_repo', 'insert'),
    ('activity_history_chain_repo', 'insert'),
    ('user_repo', 'set_chain_reference'),
])
def test_failure_at_any_step_leaves_nothing_behind(service, db, failing_repo, failing_method):
    def fail(*args, **kwargs):
        raise PyMongoError("store unavailable")

    setattr(getattr(service, failing_repo), failing_method, fail)

    with pytest.raises(BusinessError) as exc_info:
        service.onboard_user({'email': EMAIL})

    assert exc_info.value.error_enum == APIError.DB_ERROR
    assert _documents_for(db, EMAIL) == {
        'user': 0,
        'messagesCollection': 0,
        'notificationsCollection': 0,
        'activityHistoriesCollection': 0
    }

    saga_log = SagaTransactionLogRepository(db).collection.find_one({'saga_name': 'onboard_user'})
    assert saga_log['status'] == SagaStatus.COMPENSATED.value


def test_retry_after_compensated_failure_behaves_like_first_attempt(db, clock):
    failing = UserService(db, clock=clock)

    def fail(*args, **kwargs):
        raise PyMongoError("store unavailable")

    failing.activity_history_chain_repo.insert = fail

    with pytest.raises(BusinessError):
        failing.onboard_user({'email': EMAIL})

    result = UserService(db, clock=clock).onboard_user({'email': EMAIL})

    assert result.user_id
    assert _documents_for(db, EMAIL) == {
        'user': 1,
        'messagesCollection': 1,
        'notificationsCollection': 1,
        'activityHistoriesCollection': 1
    }


def test_compensation_failure_surfaces_as_saga_compensation_error(service, db):
    def fail_insert(*args, **kwargs):
        raise PyMongoError("store unavailable")

    def fail_delete(*args, **kwargs):
        raise PyMongoError("delete failed too")

    service.notification_chain_repo.insert = fail_insert
    service.message_chain_repo.compensate_insert = fail_delete

    with pytest.raises(SagaCompensationError) as exc_info:
        service.onboard_user({'email': EMAIL})

    error = exc_info.value
    assert error.error_enum == APIError.SAGA_COMPENSATION_FAILED
    assert error.failed_steps == ['insert_message_chain']
    assert isinstance(error.original_error, PyMongoError)

    # 보상에 실패한 메시지 체인만 남고 사용자는 삭제됨
    assert _documents_for(db, EMAIL) == {
        'user': 0,
        'messagesCollection': 1,
        'notificationsCollection': 0,
        'activityHistoriesCollection': 0
    }

    saga_log = db['saga_transaction_log'].find_one({'transaction_id': error.transaction_id})
    assert saga_log['status'] == SagaStatus.FAILED.value


def test_check_email_availability(service):
    assert service.check_email_availability(EMAIL) is True

    service.onboard_user({'email': EMAIL})

    assert service.check_email_availability(EMAIL) is False


def test_concurrent_signup_losing_the_unique_index_is_a_conflict(service, db):
    def lose_race(*args, **kwargs):
        raise DuplicateKeyError("E11000 duplicate key error collection: userCollection index: email_1")

    service.user_repo.insert = lose_race

    with pytest.raises(BusinessError) as exc_info:
        service.onboard_user({'email': EMAIL})

    assert exc_info.value.error_enum == APIError.AUTH_DUPLICATE_EMAIL


def test_leftover_chain_is_a_db_error_not_a_taken_email(service, db):
    # 이전 보상이 남긴 메시지 체인 (사용자는 없음)
    db['messagesCollection'].insert_one({'user_email': EMAIL, 'message_chain': []})

    with pytest.raises(BusinessError) as exc_info:
        service.onboard_user({'email': EMAIL})

    assert exc_info.value.error_enum == APIError.DB_ERROR
    assert db['userCollection'].count_documents({'email': EMAIL}) == 0
    assert service.check_email_availability(EMAIL) is True


def test_saga_log_write_failure_mid_saga_still_compensates(service, db):
    update_step = service.saga_repo.update_step

    def fail_when_third_step_starts(transaction_id, step_index, update_data):
        if step_index == 2 and update_data.get('status') == 'pending':
            raise PyMongoError("saga log unavailable")
        return update_step(transaction_id, step_index, update_data)

    service.saga_repo.update_step = fail_when_third_step_starts

    with pytest.raises(BusinessError) as exc_info:
        service.onboard_user({'email': EMAIL})

    assert exc_info.value.error_enum == APIError.DB_ERROR
    assert _documents_for(db, EMAIL) == {
        'user': 0,
        'messagesCollection': 0,
        'notificationsCollection': 0,
        'activityHistoriesCollection': 0
    }
    assert service.check_email_availability(EMAIL) is True

    saga_log = db['saga_transaction_log'].find_one({'saga_name': 'onboard_user'})
    assert saga_log['status'] == SagaStatus.COMPENSATED.value


def test_saga_log_outage_during_compensation_still_removes_documents(service, db):
    def fail_always(*args, **kwargs):
        raise PyMongoError("saga log unavailable")

    update_step = service.saga_repo.update_step
    calls = {'count': 0}

    def fail_from_third_write(*args, **kwargs):
        calls['count'] += 1
        if calls['count'] >= 3:
            raise PyMongoError("saga log unavailable")
        return update_step(*args, **kwargs)

    service.saga_repo.update_step = fail_from_third_write
    service.saga_repo.start_compensation = fail_always
    service.saga_repo.mark_failed = fail_always

    with pytest.raises(SagaCompensationError) as exc_info:
        service.onboard_user({'email': EMAIL})

    # 보상 자체는 끝났지만 로그에 남기지 못한 단계는 실패로 보고
    assert exc_info.value.failed_steps == ['insert_user']
    assert _documents_for(db, EMAIL) == {
        'user': 0,
        'messagesCollection': 0,
        'notificationsCollection': 0,
        'activityHistoriesCollection': 0
    }
