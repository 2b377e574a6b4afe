from typing import Any, Dict, Optional

from common.utils.logging_utils import get_logger

logger = get_logger('user_chain')


class UserChainRepository:
    """
    사용자별 체인(메시지/알림/활동 기록) 컬렉션 공통 동작

    체인은 사용자당 하나 (user_email unique), 온보딩 사가에서만 생성되고
    회원 탈퇴 사가에서 사용자와 함께 삭제된다.
    """

    COLLECTION_NAME: str = ''

    def __init__(self, db):
        self.collection = db[self.COLLECTION_NAME]
        self.collection.create_index('user_email', unique=True)

    def insert(self, chain) -> Dict[str, Any]:
        result = self.collection.insert_one(chain.to_dict())
        chain.id = result.inserted_id

        return {
            'chain_id': result.inserted_id,
            'user_email': chain.user_email
        }

    def find_document_by_user_email(self, user_email: str) -> Optional[Dict]:
        return self.collection.find_one({'user_email': user_email})

    def delete_by_user_email(self, user_email: str) -> Dict[str, Any]:
        deleted_data = self.find_document_by_user_email(user_email)

        self.collection.delete_one({'user_email': user_email})

        return {
            'user_email': user_email,
            'deleted_data': deleted_data
        }

    def compensate_insert(self, compensation_data: Dict[str, Any]):
        chain_id = compensation_data['chain_id']

        # #NOTE: 삽입된 체인 삭제 (Saga Compensation)
        self.collection.delete_one({'_id': chain_id})
        logger.info(f"Deleted {self.COLLECTION_NAME} document: {chain_id}")

    def compensate_delete(self, compensation_data: Dict[str, Any]):
        deleted_data = compensation_data['deleted_data']

        if deleted_data:
            # #NOTE: 삭제된 체인 복원 (Saga Compensation)
            self.collection.insert_one(deleted_data)
            logger.info(f"Restored deleted {self.COLLECTION_NAME} document of {deleted_data['user_email']}")
