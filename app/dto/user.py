from dataclasses import dataclass
from typing import List


@dataclass
class OnboardingResultDto:
    user_id: str
    message_chain_id: str
    notification_chain_id: str
    activity_history_chain_id: str

@dataclass
class WishlistDto:
    wishlist: List[str]
    added: bool  # True: 추가됨, False: 제거됨
    message: str
