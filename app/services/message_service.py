from typing import List

from app.models.mongodb.message_chain import Message, MessageChain, MessageChainRepository
from common.enum.error_code import APIError
from common.enum.role import Identity, Role
from common.exception.exceptions import BusinessError
from common.utils.clock import Clock, system_clock
from common.utils.logging_utils import get_logger

logger = get_logger('message_service')


class MessageService:

    def __init__(self, db, clock: Clock = system_clock):
        self.clock = clock
        self.message_chain_repo = MessageChainRepository(db)

    def append_message(self, user_email: str, text: str, sender: Identity) -> MessageChain:
        """
        user_email 의 메시지 체인에 메시지 추가

        메시지 push 와 total_count / unread 카운터 변경은 하나의 도큐먼트 업데이트로 처리된다.
        """
        if not isinstance(text, str) or not text.strip():
            raise BusinessError(APIError.INVALID_INPUT_VALUE, "메시지 내용은 필수 입력값입니다.")

        if sender.role == Role.USER and sender.email != user_email:
            raise BusinessError(APIError.AUTH_FORBIDDEN)

        message = Message(
            sender=sender.role,
            sender_email=sender.email,
            message=text.strip(),
            sent_at=self.clock.now()
        )

        chain = self.message_chain_repo.append_message(user_email, message)
        if not chain:
            raise BusinessError(APIError.MESSAGE_CHAIN_NOT_FOUND)

        logger.debug(f"Message appended to chain of {user_email} by {sender.role.value}")
        return chain

    def get_message_chain(self, user_email: str) -> MessageChain:
        chain = self.message_chain_repo.find_by_user_email(user_email)
        if not chain:
            raise BusinessError(APIError.MESSAGE_CHAIN_NOT_FOUND)
        return chain

    def mark_read(self, user_email: str, reader: Identity) -> MessageChain:
        chain = self.message_chain_repo.mark_read(user_email, reader.role, self.clock.now())
        if not chain:
            raise BusinessError(APIError.MESSAGE_CHAIN_NOT_FOUND)
        return chain

    def get_message_chains(self, only_unread: bool = False) -> List[MessageChain]:
        return self.message_chain_repo.find_all(only_unread_by_admin=only_unread)
