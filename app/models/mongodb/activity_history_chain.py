from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from bson import ObjectId

from app.models.mongodb.user_chain import UserChainRepository


@dataclass
class ActivityHistoryChain:
    user_email: str
    activities: List[Dict[str, Any]] = field(default_factory=list)
    id: Optional[ObjectId] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_email': self.user_email,
            'activityHistory_chain': list(self.activities)
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ActivityHistoryChain':
        return cls(
            user_email=data['user_email'],
            activities=list(data.get('activityHistory_chain', [])),
            id=data.get('_id')
        )


class ActivityHistoryChainRepository(UserChainRepository):

    COLLECTION_NAME = 'activityHistoriesCollection'

    def find_by_user_email(self, user_email: str) -> Optional[ActivityHistoryChain]:
        doc = self.find_document_by_user_email(user_email)
        return ActivityHistoryChain.from_dict(doc) if doc else None
