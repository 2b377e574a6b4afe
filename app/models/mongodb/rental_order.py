from datetime import datetime
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from bson import ObjectId

from common.utils.logging_utils import get_logger

logger = get_logger('rental_order')


@dataclass
class RentalStreakEntry:
    points: float = 0
    payable_final_amount: float = 0
    rental_duration: int = 0

    # 기간, 할인 내역 등 표시용 필드
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        doc = dict(self.details)
        doc.update({
            'points': self.points,
            'payableFinalAmount': self.payable_final_amount,
            'rentalDuration': self.rental_duration
        })
        return doc

    @classmethod
    def from_dict(cls, data: Dict) -> 'RentalStreakEntry':
        return cls(
            points=data.get('points', 0),
            payable_final_amount=data.get('payableFinalAmount', 0),
            rental_duration=data.get('rentalDuration', 0),
            details={
                k: v for k, v in data.items()
                if k not in ('points', 'payableFinalAmount', 'rentalDuration')
            }
        )


@dataclass
class RentalOrder:
    gadget_id: str
    user_email: str

    # 기간별 요금/포인트 기록 - 마지막 항목만 사용자 통계에 반영됨
    rental_streak: List[RentalStreakEntry] = field(default_factory=list)

    # 가젯 캘린더에 추가될 날짜들
    blocked_dates: List[Any] = field(default_factory=list)

    status: str = 'active'
    created_at: Optional[datetime] = None

    details: Dict[str, Any] = field(default_factory=dict)

    id: Optional[ObjectId] = None

    KNOWN_KEYS = ('_id', 'gadget_id', 'userEmail', 'rentalStreak', 'blockedDates', 'status', 'createdAt')

    @property
    def latest_streak_entry(self) -> Optional[RentalStreakEntry]:
        return self.rental_streak[-1] if self.rental_streak else None

    def to_dict(self) -> Dict[str, Any]:
        doc = dict(self.details)
        doc.update({
            'gadget_id': self.gadget_id,
            'userEmail': self.user_email,
            'rentalStreak': [entry.to_dict() for entry in self.rental_streak],
            'blockedDates': list(self.blocked_dates),
            'status': self.status,
            'createdAt': self.created_at
        })
        return doc

    @classmethod
    def from_dict(cls, data: Dict) -> 'RentalOrder':
        return cls(
            gadget_id=data['gadget_id'],
            user_email=data['userEmail'],
            rental_streak=[RentalStreakEntry.from_dict(e) for e in data.get('rentalStreak', [])],
            blocked_dates=list(data.get('blockedDates') or []),
            status=data.get('status', 'active'),
            created_at=data.get('createdAt'),
            details={k: v for k, v in data.items() if k not in cls.KNOWN_KEYS},
            id=data.get('_id')
        )


class RentalOrderRepository:

    COLLECTION_NAME = 'rentalOrdersCollection'

    def __init__(self, db):
        self.collection = db[self.COLLECTION_NAME]
        # 인덱스 생성
        self.collection.create_index([('userEmail', 1), ('createdAt', -1)])
        self.collection.create_index('gadget_id')

    def insert(self, order: RentalOrder) -> Dict[str, Any]:
        result = self.collection.insert_one(order.to_dict())
        order.id = result.inserted_id

        return {
            'order_id': result.inserted_id
        }

    def find_by_id(self, order_id) -> Optional[RentalOrder]:
        if isinstance(order_id, str):
            if not ObjectId.is_valid(order_id):
                return None
            order_id = ObjectId(order_id)

        doc = self.collection.find_one({'_id': order_id})
        return RentalOrder.from_dict(doc) if doc else None

    def find_by_user_email(self, user_email: str) -> List[RentalOrder]:
        docs = self.collection.find({'userEmail': user_email}).sort('createdAt', -1)
        return [RentalOrder.from_dict(doc) for doc in docs]

    def compensate_insert(self, compensation_data: Dict[str, Any]):
        order_id = compensation_data['order_id']

        # #NOTE: 삽입된 주문 삭제 (Saga Compensation)
        self.collection.delete_one({'_id': order_id})
        logger.info(f"Deleted rental order: {order_id}")
