from contextlib import contextmanager
from threading import Lock
from typing import Dict


class GadgetCalendarLock:
    """
    가젯 단위 예약 날짜 변경 직렬화

    Redis 사용 가능 시 분산 락(redis-py Lock), 불가 시 프로세스 내부 락을 사용
    """

    _local_locks: Dict[str, Lock] = {}
    _registry_lock = Lock()

    def __init__(self, redis_client=None, timeout: int = 10):
        self.redis_client = redis_client
        self.timeout = timeout

    @classmethod
    def _get_local_lock(cls, gadget_id: str) -> Lock:
        with cls._registry_lock:
            lock = cls._local_locks.get(gadget_id)
            if lock is None:
                lock = Lock()
                cls._local_locks[gadget_id] = lock
            return lock

    @contextmanager
    def hold(self, gadget_id: str):
        if self.redis_client is not None:
            # NOTE : 획득 실패 시 redis.exceptions.LockError 발생
            with self.redis_client.lock(
                f"gadgetswap:lock:gadget:{gadget_id}",
                timeout=self.timeout,
                blocking_timeout=self.timeout
            ):
                yield
            return

        lock = self._get_local_lock(gadget_id)
        if not lock.acquire(timeout=self.timeout):
            raise TimeoutError(f"Could not lock calendar of gadget {gadget_id}")
        try:
            yield
        finally:
            lock.release()
