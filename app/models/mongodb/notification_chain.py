from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from bson import ObjectId

from app.models.mongodb.user_chain import UserChainRepository


@dataclass
class NotificationChain:
    user_email: str
    notifications: List[Dict[str, Any]] = field(default_factory=list)
    total_count: int = 0
    unread_count: int = 0
    id: Optional[ObjectId] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_email': self.user_email,
            'notification_chain': list(self.notifications),
            'total_count': self.total_count,
            'unread_count': self.unread_count
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'NotificationChain':
        return cls(
            user_email=data['user_email'],
            notifications=list(data.get('notification_chain', [])),
            total_count=data.get('total_count', 0),
            unread_count=data.get('unread_count', 0),
            id=data.get('_id')
        )


class NotificationChainRepository(UserChainRepository):

    COLLECTION_NAME = 'notificationsCollection'

    def find_by_user_email(self, user_email: str) -> Optional[NotificationChain]:
        doc = self.find_document_by_user_email(user_email)
        return NotificationChain.from_dict(doc) if doc else None
