from datetime import datetime, timedelta

import mongomock
import pytest
from bson import ObjectId

from app import create_app
from app.models.mongodb.gadget import Gadget, GadgetRepository
from app.services.user_service import UserService


class FixedClock:
    """테스트용 고정 시계 (advance 로만 시간이 흐름)"""

    def __init__(self, now=None):
        self.current = now or datetime(2024, 5, 1, 9, 0, 0)

    def now(self):
        return self.current

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def db():
    return mongomock.MongoClient()['gadgetswap_test']


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def onboard(db, clock):
    """온보딩 사가로 사용자 + 체인 3개 생성"""
    service = UserService(db, clock=clock)

    def _onboard(email='renter@example.com', **profile):
        record = dict(profile, email=email)
        record.setdefault('name', 'Renter')
        return service.onboard_user(record)

    return _onboard


@pytest.fixture
def make_gadget(db):
    repo = GadgetRepository(db)

    def _make_gadget(name='Pixel 8', category='Smartphones', total_rental_count=0, blocked_dates=None, **extra):
        gadget = Gadget(
            name=name,
            category=category,
            description=f'{name} for rent',
            images=[f'https://img.example.com/{name}.png'],
            pricing={'perDay': 12.5},
            average_rating=4.5,
            total_rental_count=total_rental_count,
            blocked_dates=list(blocked_dates or []),
            details=extra
        )
        return str(repo.insert(gadget))

    return _make_gadget


@pytest.fixture
def missing_gadget_id():
    return str(ObjectId())


# ==================== Flask 앱 ====================

@pytest.fixture(scope='session')
def app():
    # NOTE : flask-smorest Api 가 모듈 전역이므로 앱은 세션당 하나만 생성
    return create_app('testing', mongo_client=mongomock.MongoClient())


@pytest.fixture
def app_db(app):
    for name in app.mongo.list_collection_names():
        app.mongo.drop_collection(name)
    return app.mongo


@pytest.fixture
def client(app, app_db):
    return app.test_client()
