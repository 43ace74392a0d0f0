import logging
import secrets
from datetime import datetime, timedelta, timezone

import jwt
from sqlalchemy.orm import Session

from raggnet.core import config
from raggnet.database import utcnow
from raggnet.models.session_token import SessionToken

logger = logging.getLogger(__name__)


class TokenStore:
    """Issues, resolves and revokes bearer tokens.

    The bearer string is a signed JWT whose ``jti`` points at a row in
    ``session_tokens``; a token is only valid while that row exists and has
    not expired, which is what makes logout effective.
    """

    def __init__(self, db: Session, expires_minutes: int | None = None) -> None:
        self.db = db
        self.expires_minutes = config.TOKEN_EXPIRES_MINUTES if expires_minutes is None else expires_minutes

    def issue(self, user_id: str, expires_minutes: int | None = None) -> str:
        lifetime = self.expires_minutes if expires_minutes is None else expires_minutes
        issued_at = utcnow()
        expires_at = issued_at + timedelta(minutes=lifetime)

        token_id = self._new_token_id()
        self.db.add(SessionToken(id=token_id, user_id=user_id, issued_at=issued_at, expires_at=expires_at))
        self.db.commit()

        payload = {
            "sub": user_id,
            "jti": token_id,
            "iat": issued_at.replace(tzinfo=timezone.utc),
            "exp": expires_at.replace(tzinfo=timezone.utc),
        }
        return jwt.encode(payload, config.TOKEN_SECRET_KEY, algorithm=config.TOKEN_ALGORITHM)

    def resolve(self, token: str | None) -> str | None:
        payload = self._decode(token)
        if payload is None:
            return None

        record = self.db.query(SessionToken).filter(SessionToken.id == payload.get("jti")).first()
        if record is None or record.user_id != payload.get("sub"):
            return None
        if record.expires_at <= utcnow():
            return None
        return record.user_id

    def revoke(self, token: str | None) -> None:
        payload = self._decode(token, verify_exp=False)
        if payload is None:
            return

        deleted = self.db.query(SessionToken).filter(SessionToken.id == payload.get("jti")).delete()
        self.db.commit()
        if deleted:
            logger.debug("Revoked session token for user %s", payload.get("sub"))

    def revoke_all(self, user_id: str) -> int:
        deleted = self.db.query(SessionToken).filter(SessionToken.user_id == user_id).delete()
        self.db.commit()
        return deleted

    def purge_expired(self, now: datetime | None = None) -> int:
        cutoff = now or utcnow()
        deleted = self.db.query(SessionToken).filter(SessionToken.expires_at <= cutoff).delete()
        self.db.commit()
        return deleted

    def _new_token_id(self) -> str:
        while True:
            token_id = secrets.token_urlsafe(32)
            if self.db.query(SessionToken.id).filter(SessionToken.id == token_id).first() is None:
                return token_id

    @staticmethod
    def _decode(token: str | None, verify_exp: bool = True) -> dict | None:
        if not token:
            return None
        try:
            return jwt.decode(
                token,
                config.TOKEN_SECRET_KEY,
                algorithms=[config.TOKEN_ALGORITHM],
                options={"verify_exp": verify_exp, "require": ["sub", "jti", "exp"]},
            )
        except jwt.PyJWTError:
            return None
