from datetime import datetime
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from bson import ObjectId
from pymongo import ReturnDocument

from common.enum.role import Role
from common.utils.logging_utils import get_logger

logger = get_logger('user')

CHAIN_REFERENCE_FIELDS = ('messageChain_id', 'notificationChain_id', 'activityHistoryChain_id')


@dataclass
class UserStats:
    active_rentals: int = 0
    points_earned: float = 0
    total_spent: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'activeRentals': self.active_rentals,
            'pointsEarned': self.points_earned,
            'totalSpent': self.total_spent
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'UserStats':
        data = data or {}
        return cls(
            active_rentals=data.get('activeRentals', 0),
            points_earned=data.get('pointsEarned', 0),
            total_spent=data.get('totalSpent', 0)
        )


@dataclass
class MembershipDetails:
    points: float = 0
    tier: str = 'Bronze'
    rental_streak: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'points': self.points,
            'tier': self.tier,
            'rentalStreak': self.rental_streak
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'MembershipDetails':
        data = data or {}
        return cls(
            points=data.get('points', 0),
            tier=data.get('tier', 'Bronze'),
            rental_streak=data.get('rentalStreak', 0)
        )


@dataclass
class User:
    email: str
    role: Role = Role.USER

    # 이름, 사진 등 클라이언트가 보내는 나머지 프로필 필드
    profile: Dict[str, Any] = field(default_factory=dict)

    wishlist: List[str] = field(default_factory=list)
    rental_orders: List[str] = field(default_factory=list)
    stats: UserStats = field(default_factory=UserStats)
    membership_details: MembershipDetails = field(default_factory=MembershipDetails)

    failed_login_attempts: int = 0
    last_failed_login_attempt: Any = 0
    login_restricted: bool = False
    login_restricted_until: Optional[datetime] = None

    message_chain_id: Optional[str] = None
    notification_chain_id: Optional[str] = None
    activity_history_chain_id: Optional[str] = None

    created_at: Optional[datetime] = None
    id: Optional[ObjectId] = None

    KNOWN_KEYS = (
        '_id', 'email', 'role', 'wishlist', 'rentalOrders', 'stats', 'membershipDetails',
        'failedLoginAttempts', 'lastFailedLoginAttempt', 'loginRestricted', 'loginRestrictedUntil',
        'messageChain_id', 'notificationChain_id', 'activityHistoryChain_id', 'createdAt'
    )

    @property
    def is_onboarded(self) -> bool:
        return all([self.message_chain_id, self.notification_chain_id, self.activity_history_chain_id])

    def to_dict(self) -> Dict[str, Any]:
        doc = dict(self.profile)
        doc.update({
            'email': self.email,
            'role': self.role.value,
            'wishlist': list(self.wishlist),
            'rentalOrders': list(self.rental_orders),
            'stats': self.stats.to_dict(),
            'membershipDetails': self.membership_details.to_dict(),
            'failedLoginAttempts': self.failed_login_attempts,
            'lastFailedLoginAttempt': self.last_failed_login_attempt,
            'loginRestricted': self.login_restricted,
            'loginRestrictedUntil': self.login_restricted_until,
            'createdAt': self.created_at
        })
        # NOTE : 체인 참조는 온보딩 사가의 연결 단계에서만 채워짐
        for key, value in (
            ('messageChain_id', self.message_chain_id),
            ('notificationChain_id', self.notification_chain_id),
            ('activityHistoryChain_id', self.activity_history_chain_id)
        ):
            if value is not None:
                doc[key] = value
        return doc

    @classmethod
    def from_dict(cls, data: Dict) -> 'User':
        return cls(
            email=data['email'],
            role=Role.from_value(data.get('role', Role.USER.value)),
            profile={k: v for k, v in data.items() if k not in cls.KNOWN_KEYS},
            wishlist=list(data.get('wishlist') or []),
            rental_orders=list(data.get('rentalOrders') or []),
            stats=UserStats.from_dict(data.get('stats')),
            membership_details=MembershipDetails.from_dict(data.get('membershipDetails')),
            failed_login_attempts=data.get('failedLoginAttempts', 0),
            last_failed_login_attempt=data.get('lastFailedLoginAttempt', 0),
            login_restricted=bool(data.get('loginRestricted', False)),
            login_restricted_until=data.get('loginRestrictedUntil'),
            message_chain_id=data.get('messageChain_id'),
            notification_chain_id=data.get('notificationChain_id'),
            activity_history_chain_id=data.get('activityHistoryChain_id'),
            created_at=data.get('createdAt'),
            id=data.get('_id')
        )

    @classmethod
    def from_new_user_record(cls, record: Dict, created_at: datetime) -> 'User':
        """회원가입 요청 레코드 -> 신규 User (체인 참조, 보안/통계/멤버십 필드는 항상 초기값)"""
        user = cls.from_dict({
            k: v for k, v in record.items()
            if k not in CHAIN_REFERENCE_FIELDS and k != '_id'
        })
        # NOTE : 관리자 계정은 가입 경로로 만들 수 없음
        user.role = Role.USER
        user.wishlist = []
        user.rental_orders = []
        user.stats = UserStats()
        user.membership_details = MembershipDetails()
        user.failed_login_attempts = 0
        user.last_failed_login_attempt = 0
        user.login_restricted = False
        user.login_restricted_until = None
        user.created_at = created_at
        return user


class UserRepository:

    COLLECTION_NAME = 'userCollection'

    def __init__(self, db):
        self.collection = db[self.COLLECTION_NAME]
        # NOTE : 동시 가입 요청도 두 번째 insert 에서 DuplicateKeyError
        self.collection.create_index('email', unique=True)

    def insert(self, user: User) -> Dict[str, Any]:
        result = self.collection.insert_one(user.to_dict())
        user.id = result.inserted_id

        return {
            'user_id': result.inserted_id,
            'email': user.email
        }

    def find_by_email(self, email: str) -> Optional[User]:
        doc = self.collection.find_one({'email': email})
        return User.from_dict(doc) if doc else None

    def find_document_by_email(self, email: str) -> Optional[Dict]:
        return self.collection.find_one({'email': email})

    def find_onboarded_by_email(self, email: str) -> Optional[User]:
        # 온보딩이 끝나지 않은(체인 참조가 빠진) 사용자는 일반 조회에서 제외
        query = {'email': email}
        for key in CHAIN_REFERENCE_FIELDS:
            query[key] = {'$exists': True, '$ne': None}

        doc = self.collection.find_one(query)
        return User.from_dict(doc) if doc else None

    def exists_by_email(self, email: str) -> bool:
        return self.collection.find_one({'email': email}, {'_id': 1}) is not None

    def set_chain_reference(self, user_id: ObjectId, reference_field: str, chain_id: str) -> bool:
        result = self.collection.update_one(
            {'_id': user_id},
            {'$set': {reference_field: chain_id}}
        )
        return result.matched_count > 0

    # ==================== 대여 통계 ====================

    def apply_rental(self, email: str, order_id: str, points, total_spent, rental_duration) -> bool:
        result = self.collection.update_one(
            {'email': email},
            {
                '$push': {'rentalOrders': order_id},
                '$inc': {
                    'stats.activeRentals': 1,
                    'stats.pointsEarned': points,
                    'stats.totalSpent': total_spent,
                    'membershipDetails.points': points,
                    'membershipDetails.rentalStreak': rental_duration
                }
            }
        )
        return result.matched_count > 0

    def compensate_apply_rental(self, compensation_data: Dict[str, Any]):
        points = compensation_data['points']
        rental_duration = compensation_data['rental_duration']

        # #NOTE: 주문 참조 제거 + 통계 증감 되돌리기 (Saga Compensation)
        self.collection.update_one(
            {'email': compensation_data['email']},
            {
                '$pull': {'rentalOrders': compensation_data['order_id']},
                '$inc': {
                    'stats.activeRentals': -1,
                    'stats.pointsEarned': -points,
                    'stats.totalSpent': -compensation_data['total_spent'],
                    'membershipDetails.points': -points,
                    'membershipDetails.rentalStreak': -rental_duration
                }
            }
        )
        logger.info(f"Reverted rental {compensation_data['order_id']} on user {compensation_data['email']}")

    # ==================== 위시리스트 ====================

    def add_to_wishlist(self, email: str, gadget_id: str) -> Optional[List[str]]:
        doc = self.collection.find_one_and_update(
            {'email': email},
            {'$addToSet': {'wishlist': gadget_id}},
            return_document=ReturnDocument.AFTER
        )
        return list(doc.get('wishlist') or []) if doc else None

    def remove_from_wishlist(self, email: str, gadget_id: str) -> Optional[List[str]]:
        doc = self.collection.find_one_and_update(
            {'email': email},
            {'$pull': {'wishlist': gadget_id}},
            return_document=ReturnDocument.AFTER
        )
        return list(doc.get('wishlist') or []) if doc else None

    # ==================== 로그인 시도 제한 ====================

    def record_failed_login(self, email: str, failed_at: datetime) -> Optional[User]:
        doc = self.collection.find_one_and_update(
            {'email': email},
            {
                '$inc': {'failedLoginAttempts': 1},
                '$set': {'lastFailedLoginAttempt': failed_at}
            },
            return_document=ReturnDocument.AFTER
        )
        return User.from_dict(doc) if doc else None

    def restrict_login(self, email: str, restricted_until: datetime):
        self.collection.update_one(
            {'email': email},
            {'$set': {'loginRestricted': True, 'loginRestrictedUntil': restricted_until}}
        )

    def release_expired_restriction(self, email: str, now: datetime) -> bool:
        """제한 시간이 지난 경우에만 연속 실패 횟수와 제한 플래그를 초기화"""
        result = self.collection.update_one(
            {
                'email': email,
                'loginRestricted': True,
                'loginRestrictedUntil': {'$lte': now}
            },
            {
                '$set': {
                    'failedLoginAttempts': 0,
                    'loginRestricted': False,
                    'loginRestrictedUntil': None
                }
            }
        )
        return result.modified_count > 0

    def clear_login_restriction(self, email: str):
        self.collection.update_one(
            {'email': email},
            {
                '$set': {
                    'failedLoginAttempts': 0,
                    'lastFailedLoginAttempt': 0,
                    'loginRestricted': False,
                    'loginRestrictedUntil': None
                }
            }
        )

    # ==================== 삭제 / 보상 ====================

    def delete_by_email(self, email: str) -> Dict[str, Any]:
        deleted_data = self.collection.find_one({'email': email})

        self.collection.delete_one({'email': email})

        return {
            'email': email,
            'deleted_data': deleted_data
        }

    def compensate_insert(self, compensation_data: Dict[str, Any]):
        user_id = compensation_data['user_id']

        # #NOTE: 삽입된 사용자 삭제 (Saga Compensation)
        result = self.collection.delete_one({'_id': user_id})
        if result.deleted_count == 0:
            logger.warning(f"User to compensate was already gone: {user_id}")
        else:
            logger.info(f"Deleted user: {user_id}")

    def compensate_delete(self, compensation_data: Dict[str, Any]):
        deleted_data = compensation_data['deleted_data']

        if deleted_data:
            # #NOTE: 삭제된 사용자 복원 (Saga Compensation)
            self.collection.insert_one(deleted_data)
            logger.info(f"Restored deleted user: {deleted_data['email']}")
