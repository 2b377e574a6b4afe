from datetime import datetime


class Clock:
    """타임스탬프 / 로그인 제한 시간 계산용 시계 (테스트에서 교체 가능)"""

    def now(self) -> datetime:
        return datetime.utcnow()


system_clock = Clock()
