import pytest
from pymongo.errors import PyMongoError

from app.models.mongodb.gadget import to_object_id
from app.services.rental_service import RentalService
from common.enum.error_code import APIError
from common.enum.role import Identity, Role
from common.exception.exceptions import BusinessError, SagaCompensationError
from common.utils.gadget_lock import GadgetCalendarLock

RENTER = 'renter@example.com'


@pytest.fixture
def service(db, clock):
    return RentalService(db, gadget_lock=GadgetCalendarLock(timeout=1), clock=clock)


def _order(gadget_id, blocked_dates=None):
    return {
        'gadget_id': gadget_id,
        'rentalStreak': [
            {'points': 10, 'payableFinalAmount': 40, 'rentalDuration': 1, 'label': '1 day'},
            {'points': 25, 'payableFinalAmount': 99, 'rentalDuration': 3, 'label': '3 days'}
        ],
        'blockedDates': blocked_dates if blocked_dates is not None else ['2024-05-01', '2024-05-02']
    }


def _renter(db):
    return db['userCollection'].find_one({'email': RENTER})


def _gadget(db, gadget_id):
    return db['gadgetsCollection'].find_one({'_id': to_object_id(gadget_id)})


def test_only_last_streak_entry_is_applied_to_renter_stats(service, db, onboard, make_gadget):
    onboard(RENTER)
    gadget_id = make_gadget()

    order = service.book_rental(RENTER, _order(gadget_id))

    renter = _renter(db)
    assert renter['membershipDetails']['points'] == 25
    assert renter['stats']['pointsEarned'] == 25
    assert renter['stats']['totalSpent'] == 99
    assert renter['membershipDetails']['rentalStreak'] == 3
    assert renter['stats']['activeRentals'] == 1
    assert renter['rentalOrders'] == [str(order.id)]


def test_booking_persists_rental_order(service, db, onboard, make_gadget, clock):
    onboard(RENTER)
    gadget_id = make_gadget()

    order = service.book_rental(RENTER, _order(gadget_id))

    order_doc = db['rentalOrdersCollection'].find_one({'_id': order.id})
    assert order_doc['userEmail'] == RENTER
    assert order_doc['gadget_id'] == gadget_id
    assert order_doc['status'] == 'active'
    assert order_doc['createdAt'] == clock.now()
    assert order_doc['rentalStreak'][-1]['label'] == '3 days'
    assert order_doc['blockedDates'] == ['2024-05-01', '2024-05-02']


def test_blocked_dates_are_appended_with_duplicates(service, db, onboard, make_gadget):
    onboard(RENTER)
    gadget_id = make_gadget(blocked_dates=['2024-05-02'], total_rental_count=4)

    service.book_rental(RENTER, _order(gadget_id))

    gadget = _gadget(db, gadget_id)
    assert gadget['availability']['blockedDates'] == ['2024-05-02', '2024-05-01', '2024-05-02']
    assert gadget['totalRentalCount'] == 5


def test_empty_blocked_dates_leave_calendar_untouched(service, db, onboard, make_gadget):
    onboard(RENTER)
    gadget_id = make_gadget(blocked_dates=['2024-06-01'])

    service.book_rental(RENTER, _order(gadget_id, blocked_dates=[]))

    gadget = _gadget(db, gadget_id)
    assert gadget['availability']['blockedDates'] == ['2024-06-01']
    assert gadget['totalRentalCount'] == 1


def test_unknown_renter_is_rejected_before_any_write(service, db, make_gadget):
    gadget_id = make_gadget()

    with pytest.raises(BusinessError) as exc_info:
        service.book_rental('nobody@example.com', _order(gadget_id))

    assert exc_info.value.error_enum == APIError.USER_NOT_FOUND
    assert db['rentalOrdersCollection'].count_documents({}) == 0


@pytest.mark.parametrize('order', [
    {'rentalStreak': [{'points': 1, 'payableFinalAmount': 1, 'rentalDuration': 1}]},
    {'gadget_id': 'not-an-object-id', 'rentalStreak': [{'points': 1, 'payableFinalAmount': 1, 'rentalDuration': 1}]},
    {'gadget_id': '65f000000000000000000001', 'rentalStreak': []},
    {'gadget_id': '65f000000000000000000001', 'rentalStreak': [{'points': 'ten', 'payableFinalAmount': 1, 'rentalDuration': 1}]},
    {'gadget_id': '65f000000000000000000001', 'rentalStreak': [{'points': 1, 'payableFinalAmount': 1, 'rentalDuration': 1}],
     'blockedDates': '2024-05-01'},
])
def test_malformed_order_is_rejected(service, db, onboard, order):
    onboard(RENTER)

    with pytest.raises(BusinessError) as exc_info:
        service.book_rental(RENTER, order)

    assert exc_info.value.error_enum == APIError.INVALID_INPUT_VALUE
    assert db['rentalOrdersCollection'].count_documents({}) == 0


def test_missing_gadget_rolls_back_order_reference_and_stats(service, db, onboard, missing_gadget_id):
    onboard(RENTER)
    before = _renter(db)

    with pytest.raises(BusinessError) as exc_info:
        service.book_rental(RENTER, _order(missing_gadget_id))

    assert exc_info.value.error_enum == APIError.GADGET_NOT_FOUND
    assert db['rentalOrdersCollection'].count_documents({}) == 0

    after = _renter(db)
    assert after['rentalOrders'] == []
    # 통계 증감도 함께 되돌림
    assert after['stats'] == before['stats']
    assert after['membershipDetails'] == before['membershipDetails']


def test_calendar_failure_rolls_back_everything(service, db, onboard, make_gadget):
    onboard(RENTER)
    gadget_id = make_gadget(blocked_dates=['2024-05-02'])
    before = _renter(db)

    def fail(*args, **kwargs):
        raise PyMongoError("write conflict")

    service.gadget_repo.block_dates = fail

    with pytest.raises(BusinessError) as exc_info:
        service.book_rental(RENTER, _order(gadget_id))

    assert exc_info.value.error_enum == APIError.DB_ERROR
    assert db['rentalOrdersCollection'].count_documents({}) == 0
    assert _renter(db)['stats'] == before['stats']
    assert _gadget(db, gadget_id)['availability']['blockedDates'] == ['2024-05-02']


def test_stats_failure_deletes_the_order(service, db, onboard, make_gadget):
    onboard(RENTER)
    gadget_id = make_gadget()

    def fail(*args, **kwargs):
        raise PyMongoError("store unavailable")

    service.user_repo.apply_rental = fail

    with pytest.raises(BusinessError):
        service.book_rental(RENTER, _order(gadget_id))

    assert db['rentalOrdersCollection'].count_documents({}) == 0
    assert _renter(db)['rentalOrders'] == []


def test_rollback_failure_is_reported_as_compensation_error(service, db, onboard, missing_gadget_id):
    onboard(RENTER)

    def fail(*args, **kwargs):
        raise PyMongoError("delete failed")

    service.rental_order_repo.compensate_insert = fail

    with pytest.raises(SagaCompensationError) as exc_info:
        service.book_rental(RENTER, _order(missing_gadget_id))

    error = exc_info.value
    assert error.failed_steps == ['insert_rental_order']
    assert isinstance(error.original_error, BusinessError)
    assert error.original_error.error_enum == APIError.GADGET_NOT_FOUND
    # 나머지 보상(통계 되돌리기)은 계속 진행됨
    assert _renter(db)['rentalOrders'] == []
    assert db['rentalOrdersCollection'].count_documents({}) == 1


def test_compensating_calendar_removes_only_the_appended_dates(db, make_gadget):
    from app.models.mongodb.gadget import GadgetRepository

    repo = GadgetRepository(db)
    gadget_id = make_gadget(blocked_dates=['2024-05-02'], total_rental_count=2)

    repo.block_dates(gadget_id, ['2024-05-01', '2024-05-02'])
    repo.compensate_block_dates({'gadget_id': gadget_id, 'blocked_dates': ['2024-05-01', '2024-05-02']})

    gadget = _gadget(db, gadget_id)
    assert gadget['availability']['blockedDates'] == ['2024-05-02']
    assert gadget['totalRentalCount'] == 2


def test_rental_order_lookup_is_limited_to_owner_or_admin(service, onboard, make_gadget):
    onboard(RENTER)
    onboard('other@example.com')
    order = service.book_rental(RENTER, _order(make_gadget()))

    assert service.get_rental_order(str(order.id), Identity(RENTER)).id == order.id
    assert service.get_rental_order(str(order.id), Identity('boss@example.com', Role.ADMIN)).id == order.id

    with pytest.raises(BusinessError) as exc_info:
        service.get_rental_order(str(order.id), Identity('other@example.com'))
    assert exc_info.value.error_enum == APIError.AUTH_FORBIDDEN

    with pytest.raises(BusinessError) as exc_info:
        service.get_rental_order('65f000000000000000000001', Identity(RENTER))
    assert exc_info.value.error_enum == APIError.RENTAL_ORDER_NOT_FOUND
