from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class AuthTokenDto:
    token: str
    email: str
    role: str

@dataclass
class LoginAttemptDto:
    email: str
    failed_login_attempts: int
    login_restricted: bool
    login_restricted_until: Optional[datetime]  # datetime 객체 (Schema가 직렬화)
