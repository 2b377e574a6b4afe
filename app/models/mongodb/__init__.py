"""
MongoDB Collections Models
MongoDB 콜렉션용 데이터 모델 및 Repository
"""

from .user import User, UserStats, MembershipDetails, UserRepository
from .message_chain import Message, MessageChain, MessageChainRepository
from .notification_chain import NotificationChain, NotificationChainRepository
from .activity_history_chain import ActivityHistoryChain, ActivityHistoryChainRepository
from .gadget import Gadget, GadgetRepository
from .rental_order import RentalOrder, RentalStreakEntry, RentalOrderRepository
from .saga_transaction_log import SagaTransactionLog, SagaTransactionLogRepository

__all__ = [
    'User',
    'UserStats',
    'MembershipDetails',
    'UserRepository',
    'Message',
    'MessageChain',
    'MessageChainRepository',
    'NotificationChain',
    'NotificationChainRepository',
    'ActivityHistoryChain',
    'ActivityHistoryChainRepository',
    'Gadget',
    'GadgetRepository',
    'RentalOrder',
    'RentalStreakEntry',
    'RentalOrderRepository',
    'SagaTransactionLog',
    'SagaTransactionLogRepository'
]
