"""
사가 패턴 (Saga Pattern) 모듈

MongoDB 멀티 도큐먼트 트랜잭션 없이 여러 컬렉션에 걸친 쓰기를
단계별 실행 + 역순 보상으로 처리하기 위한 사가 패턴
"""

from .saga_orchestrator import SagaOrchestrator, SagaContext, SagaStepDefinition, run_compensations
from .saga_errors import raise_saga_failure

__all__ = [
    'SagaOrchestrator',
    'SagaContext',
    'SagaStepDefinition',
    'run_compensations',
    'raise_saga_failure'
]
