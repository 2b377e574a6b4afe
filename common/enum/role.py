from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"

    @classmethod
    def from_value(cls, value) -> 'Role':
        # NOTE : 역할 값이 없거나 알 수 없는 경우 일반 사용자로 취급
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.USER


@dataclass(frozen=True)
class Identity:
    email: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
