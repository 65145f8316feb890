# core/security.py
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from jose import jwt
from passlib.context import CryptContext

from core.config import SECRET_KEY, ALGORITHM, access_token_delta

# ---- Password hashing ----
_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")

# lowercase, uppercase, digit and special character; nothing outside that alphabet
_STRONG_PASSWORD = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,72}$"
)

PASSWORD_RULES = (
    "Password must be 8-72 characters long and include at least one uppercase "
    "letter, one lowercase letter, one number, and one special character (@$!%*?&)"
)


def is_strong_password(password: str) -> bool:
    return bool(_STRONG_PASSWORD.match(password or ""))

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _pwd.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return _pwd.hash(password)

# ---- JWT ----
def create_access_token(subject: str, extra_claims: Dict[str, Any] | None = None) -> str:
    now = datetime.now(timezone.utc)
    exp = now + access_token_delta()
    claims: Dict[str, Any] = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "jti": uuid.uuid4().hex,
    }
    if extra_claims:
        claims.update(extra_claims)
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)

def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a token. Raises ``jose.JWTError`` on a bad signature or expiry."""
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
