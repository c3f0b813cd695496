import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict

from ..config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Session(BaseModel):
    """Signed-in console user, as handed over by the auth provider."""

    session_id: str
    user_id: str
    name: str = ""
    access_token: str
    expires_at: datetime

    model_config = ConfigDict(frozen=True)


class SessionManager:
    """Signs sessions into a cookie value and reads them back."""

    def __init__(self, settings: Settings = None):
        self.settings = settings or default_settings

    def issue(self, session_id: str, user_id: str, access_token: str, name: str = "") -> tuple:
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=self.settings.SESSION_TTL_MINUTES)
        session = Session(
            session_id=session_id,
            user_id=user_id,
            name=name,
            access_token=access_token,
            expires_at=expires_at,
        )
        claims = {
            "sid": session_id,
            "sub": user_id,
            "name": name,
            "tok": access_token,
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self.settings.SESSION_SECRET_KEY, algorithm=self.settings.SESSION_ALGORITHM)
        return session, token

    def read(self, cookie: Optional[str]) -> Optional[Session]:
        """Decode a session cookie; anything absent, expired or tampered yields ``None``."""
        if not cookie:
            return None
        try:
            claims = jwt.decode(cookie, self.settings.SESSION_SECRET_KEY, algorithms=[self.settings.SESSION_ALGORITHM])
        except JWTError as e:
            logger.info(f"Rejected session cookie: {e}")
            return None
        try:
            return Session(
                session_id=claims["sid"],
                user_id=claims["sub"],
                name=claims.get("name", ""),
                access_token=claims["tok"],
                expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            )
        except KeyError as e:
            logger.warning(f"Session cookie missing claim {e}")
            return None
