# campus_issues/core/security.py
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials, APIKeyHeader
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import hmac, logging, time, jwt
from sqlalchemy.orm import Session
from campus_issues.core.config import settings
from passlib.hash import bcrypt_sha256
from campus_issues.db.session import get_db
from campus_issues.models.user import User

log = logging.getLogger(__name__)

ALGO = "HS256"
ACCESS_TTL = 24 * 3600
ADMIN_ROLE = "admin"
bearer = HTTPBearer(auto_error=False)
admin_header = APIKeyHeader(name="X-Admin-Session", auto_error=False)

def hash_password(raw: str) -> str:
    return bcrypt_sha256.hash(raw)

def verify_password(raw: str, hashed: str) -> bool:
    return bcrypt_sha256.verify(raw, hashed)

def _make_token(sub: str, role: str, ttl: int) -> str:
    now = int(time.time())
    payload = {"sub": sub, "role": role, "iat": now, "exp": now + ttl}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)

def make_tokens(email: str) -> dict:
    return {
        "access_token": _make_token(email, "user", ACCESS_TTL),
        "token_type": "bearer",
        "expires_in": ACCESS_TTL,
    }

def _decode_token(creds: Optional[HTTPAuthorizationCredentials]) -> dict:
    if not creds:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        return jwt.decode(creds.credentials, settings.jwt_secret, algorithms=[ALGO])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

def get_current_user(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                     db: Session = Depends(get_db)) -> User:
    payload = _decode_token(creds)
    email = payload.get("sub")
    if not email or payload.get("role") != "user":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="user_inactive")
    return user

def get_optional_user(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                      db: Session = Depends(get_db)) -> Optional[User]:
    if not creds:
        return None
    try:
        payload = jwt.decode(creds.credentials, settings.jwt_secret, algorithms=[ALGO])
    except jwt.InvalidTokenError:
        return None
    email = payload.get("sub")
    if not email or payload.get("role") != "user":
        return None
    user = db.query(User).filter(User.email == email).first()
    if user and not user.is_active:
        return None
    return user


# ---------------------------------------------------------------------------
# Admin session
#
# Independent of the end-user identity above: a request may carry a bearer
# token, an admin session header, both or neither.
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AdminSession:
    subject: str
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def start(cls, subject: str, now: Optional[datetime] = None) -> "AdminSession":
        issued = now or datetime.now(timezone.utc)
        return cls(subject, issued, issued + timedelta(hours=settings.admin_session_hours))

    def is_valid(self, at: Optional[datetime] = None) -> bool:
        """Absolute window: valid strictly before ``expires_at``, regardless of activity."""
        at = at or datetime.now(timezone.utc)
        return at < self.expires_at

    def encode(self) -> str:
        payload = {
            "sub": self.subject,
            "role": ADMIN_ROLE,
            # fractional seconds kept so the restored window matches the issued one
            "iat": self.issued_at.timestamp(),
            "exp": self.expires_at.timestamp(),
        }
        return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)

    @classmethod
    def decode(cls, token: str) -> Optional["AdminSession"]:
        try:
            # expiry is judged by is_valid, not by the JWT layer
            data = jwt.decode(token, settings.jwt_secret, algorithms=[ALGO], options={"verify_exp": False})
        except jwt.InvalidTokenError:
            return None
        if data.get("role") != ADMIN_ROLE or "iat" not in data or "exp" not in data:
            return None
        return cls(
            subject=data["sub"],
            issued_at=datetime.fromtimestamp(data["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(data["exp"], tz=timezone.utc),
        )

def admin_login(admin_id: str, password: str) -> Optional[AdminSession]:
    id_ok = hmac.compare_digest(admin_id.encode(), settings.admin_id.encode())
    pw_ok = hmac.compare_digest(password.encode(), settings.admin_password.encode())
    if not (id_ok and pw_ok):
        log.warning("Rejected admin login for id %r", admin_id)
        return None
    return AdminSession.start(admin_id)

def restore_admin_session(token: Optional[str], now: Optional[datetime] = None) -> Optional[AdminSession]:
    if not token:
        return None
    session = AdminSession.decode(token)
    if session is None:
        return None
    if not session.is_valid(now):
        log.info("Discarding expired admin session for %s", session.subject)
        return None
    return session

def get_admin_session(token: Optional[str] = Depends(admin_header)) -> Optional[AdminSession]:
    return restore_admin_session(token)

def require_admin(session: Optional[AdminSession] = Depends(get_admin_session)) -> AdminSession:
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin session required")
    return session
