from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from bson import ObjectId

from common.utils.logging_utils import get_logger

logger = get_logger('gadget')


def to_object_id(gadget_id) -> Optional[ObjectId]:
    if isinstance(gadget_id, ObjectId):
        return gadget_id
    if isinstance(gadget_id, str) and ObjectId.is_valid(gadget_id):
        return ObjectId(gadget_id)
    return None


@dataclass
class Gadget:
    name: str
    category: str
    description: str = ''
    images: List[str] = field(default_factory=list)
    pricing: Dict[str, Any] = field(default_factory=dict)
    average_rating: float = 0.0
    total_rental_count: int = 0

    # 예약(차단)된 날짜들 - 순서 유지, 중복 허용
    blocked_dates: List[Any] = field(default_factory=list)

    # 스펙, 소유자 정보 등 나머지 필드
    details: Dict[str, Any] = field(default_factory=dict)

    id: Optional[ObjectId] = None

    KNOWN_KEYS = (
        '_id', 'name', 'category', 'description', 'images', 'pricing',
        'average_rating', 'totalRentalCount', 'availability'
    )

    def to_dict(self) -> Dict[str, Any]:
        doc = dict(self.details)
        doc.update({
            'name': self.name,
            'category': self.category,
            'description': self.description,
            'images': list(self.images),
            'pricing': dict(self.pricing),
            'average_rating': self.average_rating,
            'totalRentalCount': self.total_rental_count,
            'availability': {'blockedDates': list(self.blocked_dates)}
        })
        return doc

    @classmethod
    def from_dict(cls, data: Dict) -> 'Gadget':
        availability = data.get('availability') or {}
        return cls(
            name=data.get('name', ''),
            category=data.get('category', ''),
            description=data.get('description', ''),
            images=list(data.get('images') or []),
            pricing=dict(data.get('pricing') or {}),
            average_rating=data.get('average_rating', 0.0),
            total_rental_count=data.get('totalRentalCount', 0),
            blocked_dates=list(availability.get('blockedDates') or []),
            details={k: v for k, v in data.items() if k not in cls.KNOWN_KEYS},
            id=data.get('_id')
        )

    @property
    def first_image(self) -> Optional[str]:
        return self.images[0] if self.images else None

    @property
    def price_per_day(self):
        return self.pricing.get('perDay')


class GadgetRepository:

    COLLECTION_NAME = 'gadgetsCollection'

    def __init__(self, db):
        self.collection = db[self.COLLECTION_NAME]
        # 인덱스 생성
        self.collection.create_index([('category', 1), ('totalRentalCount', -1)])

    def insert(self, gadget: Gadget) -> ObjectId:
        result = self.collection.insert_one(gadget.to_dict())
        gadget.id = result.inserted_id
        return result.inserted_id

    def find_by_id(self, gadget_id) -> Optional[Gadget]:
        object_id = to_object_id(gadget_id)
        if object_id is None:
            return None

        doc = self.collection.find_one({'_id': object_id})
        return Gadget.from_dict(doc) if doc else None

    def find_by_ids(self, gadget_ids: List[str]) -> List[Gadget]:
        object_ids = [oid for oid in (to_object_id(g) for g in gadget_ids) if oid is not None]
        if not object_ids:
            return []

        docs = self.collection.find({'_id': {'$in': object_ids}})
        return [Gadget.from_dict(doc) for doc in docs]

    def find_top_by_category(self, category: str, limit: int = 3) -> List[Gadget]:
        docs = self.collection.find(
            {'category': category}
        ).sort('totalRentalCount', -1).limit(limit)

        return [Gadget.from_dict(doc) for doc in docs]

    def find_all(self) -> List[Gadget]:
        return [Gadget.from_dict(doc) for doc in self.collection.find()]

    def block_dates(self, gadget_id, blocked_dates: List[Any]) -> bool:
        """예약 날짜를 기존 blockedDates 뒤에 이어 붙이고 대여 횟수 증가 (덮어쓰기 아님)"""
        update: Dict[str, Any] = {'$inc': {'totalRentalCount': 1}}
        if blocked_dates:
            update['$push'] = {'availability.blockedDates': {'$each': list(blocked_dates)}}

        result = self.collection.update_one({'_id': to_object_id(gadget_id)}, update)
        return result.matched_count > 0

    def compensate_block_dates(self, compensation_data: Dict[str, Any]):
        object_id = to_object_id(compensation_data['gadget_id'])

        if not compensation_data['blocked_dates']:
            self.collection.update_one({'_id': object_id}, {'$inc': {'totalRentalCount': -1}})
            return

        doc = self.collection.find_one({'_id': object_id})
        if not doc:
            logger.warning(f"Gadget to compensate was already gone: {object_id}")
            return

        # NOTE : $pull 은 같은 값을 모두 지우므로 붙였던 개수만큼 뒤에서부터 하나씩 제거
        current = list((doc.get('availability') or {}).get('blockedDates') or [])
        remaining = list(current)
        for blocked in reversed(compensation_data['blocked_dates']):
            for i in range(len(remaining) - 1, -1, -1):
                if remaining[i] == blocked:
                    del remaining[i]
                    break

        result = self.collection.update_one(
            {'_id': object_id, 'availability.blockedDates': current},
            {
                '$set': {'availability.blockedDates': remaining},
                '$inc': {'totalRentalCount': -1}
            }
        )
        if result.matched_count == 0:
            raise RuntimeError(f"Calendar of gadget {object_id} changed during compensation")

        logger.info(f"Removed {len(current) - len(remaining)} blocked dates from gadget {object_id}")
