from datetime import datetime
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from bson import ObjectId
from pymongo import ReturnDocument

from app.models.mongodb.user_chain import UserChainRepository
from common.enum.role import Role


@dataclass
class Message:
    sender: Role
    sender_email: str
    message: str
    sent_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sender': self.sender.value,
            'senderEmail': self.sender_email,
            'message': self.message,
            'sentAt': self.sent_at
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Message':
        return cls(
            sender=Role.from_value(data.get('sender')),
            sender_email=data.get('senderEmail', ''),
            message=data.get('message', ''),
            sent_at=data.get('sentAt')
        )


@dataclass
class MessageChain:
    user_email: str
    messages: List[Message] = field(default_factory=list)

    # 카운터는 message_chain 과 읽음 시각으로부터 항상 다시 계산 가능해야 함
    total_count: int = 0
    unread_by_user_count: int = 0
    unread_by_admin_count: int = 0

    last_read_by_user_at: Optional[datetime] = None
    last_read_by_admin_at: Optional[datetime] = None

    id: Optional[ObjectId] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_email': self.user_email,
            'message_chain': [m.to_dict() for m in self.messages],
            'total_count': self.total_count,
            'unreadByUser_count': self.unread_by_user_count,
            'unreadByAdmin_count': self.unread_by_admin_count,
            'lastReadByUser_at': self.last_read_by_user_at,
            'lastReadByAdmin_at': self.last_read_by_admin_at
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'MessageChain':
        return cls(
            user_email=data['user_email'],
            messages=[Message.from_dict(m) for m in data.get('message_chain', [])],
            total_count=data.get('total_count', 0),
            unread_by_user_count=data.get('unreadByUser_count', 0),
            unread_by_admin_count=data.get('unreadByAdmin_count', 0),
            last_read_by_user_at=data.get('lastReadByUser_at'),
            last_read_by_admin_at=data.get('lastReadByAdmin_at'),
            id=data.get('_id')
        )


class MessageChainRepository(UserChainRepository):

    COLLECTION_NAME = 'messagesCollection'

    def find_by_user_email(self, user_email: str) -> Optional[MessageChain]:
        doc = self.find_document_by_user_email(user_email)
        return MessageChain.from_dict(doc) if doc else None

    def find_all(self, only_unread_by_admin: bool = False) -> List[MessageChain]:
        query = {'unreadByAdmin_count': {'$gt': 0}} if only_unread_by_admin else {}
        docs = self.collection.find(query).sort('unreadByAdmin_count', -1)
        return [MessageChain.from_dict(doc) for doc in docs]

    def append_message(self, user_email: str, message: Message) -> Optional[MessageChain]:
        # NOTE : 보낸 쪽은 지금까지의 체인을 본 것으로 간주 -> 보낸 쪽 unread 0, 받는 쪽 +1
        if message.sender == Role.ADMIN:
            increment_field, reset_field = 'unreadByUser_count', 'unreadByAdmin_count'
        else:
            increment_field, reset_field = 'unreadByAdmin_count', 'unreadByUser_count'

        doc = self.collection.find_one_and_update(
            {'user_email': user_email},
            {
                '$push': {'message_chain': message.to_dict()},
                '$inc': {'total_count': 1, increment_field: 1},
                '$set': {reset_field: 0}
            },
            return_document=ReturnDocument.AFTER
        )
        return MessageChain.from_dict(doc) if doc else None

    def mark_read(self, user_email: str, reader: Role, read_at: datetime) -> Optional[MessageChain]:
        if reader == Role.ADMIN:
            update = {'unreadByAdmin_count': 0, 'lastReadByAdmin_at': read_at}
        else:
            update = {'unreadByUser_count': 0, 'lastReadByUser_at': read_at}

        doc = self.collection.find_one_and_update(
            {'user_email': user_email},
            {'$set': update},
            return_document=ReturnDocument.AFTER
        )
        return MessageChain.from_dict(doc) if doc else None
