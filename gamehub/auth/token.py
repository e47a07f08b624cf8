# auth/token.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import uuid
from typing import Optional

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from gamehub.core.config import settings
from gamehub.core.errors import AuthError
from gamehub.database import get_db
from gamehub.models.user import User
from gamehub.schemas.auth_schema import CredentialPair

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"

security = HTTPBearer(auto_error=False)  # don't auto-fail if no header


class CredentialIssuer:
    """Stateless signer for access/refresh JWT pairs bound to a user id."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, s=settings) -> "CredentialIssuer":
        return cls(
            secret=s.JWT_SECRET,
            algorithm=s.JWT_ALG,
            access_ttl=timedelta(minutes=s.ACCESS_TOKEN_EXPIRES_MINUTES),
            refresh_ttl=timedelta(days=s.REFRESH_TOKEN_EXPIRES_DAYS),
        )

    def _encode(self, user_id: int, token_type: str, expires_delta: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": str(user_id),
            "typ": token_type,
            "iat": now,
            "exp": now + expires_delta,
            "jti": uuid.uuid4().hex,  # two pairs minted in the same second still differ
        }
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def create_access_token(self, user_id: int, expires_delta: Optional[timedelta] = None) -> str:
        return self._encode(user_id, ACCESS, expires_delta or self.access_ttl)

    def create_refresh_token(self, user_id: int, expires_delta: Optional[timedelta] = None) -> str:
        return self._encode(user_id, REFRESH, expires_delta or self.refresh_ttl)

    def issue(self, user_id: int) -> CredentialPair:
        return CredentialPair(
            access_token=self.create_access_token(user_id),
            refresh_token=self.create_refresh_token(user_id),
        )

    def user_id_from(self, token: str, expected_type: str = ACCESS) -> int:
        """Verify ``token`` and return the user id it is bound to.

        Signature, expiry and the ``typ`` claim are all checked; any failure
        raises ``AuthError``.
        """
        if not token:
            raise AuthError("credential missing")
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            raise AuthError(f"credential rejected: {e}") from e

        if payload.get("typ") != expected_type:
            raise AuthError(f"expected a {expected_type} credential")
        sub = payload.get("sub")
        try:
            return int(sub)
        except (TypeError, ValueError):
            raise AuthError("invalid credential payload")

    def refresh(self, refresh_token: str) -> CredentialPair:
        user_id = self.user_id_from(refresh_token, expected_type=REFRESH)
        return self.issue(user_id)


credential_issuer = CredentialIssuer.from_settings()


def get_credential_issuer() -> CredentialIssuer:
    return credential_issuer


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security),
    issuer: CredentialIssuer = Depends(get_credential_issuer),
) -> User:
    """
    Resolve current user from:
      1) Authorization: Bearer <token>  (launcher, API clients)
      2) Cookie: settings.SESSION_COOKIE_NAME (browser session)
    """
    token = credentials.credentials if credentials else request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    try:
        user_id = issuer.user_id_from(token, expected_type=ACCESS)
    except AuthError as e:
        logger.info("Rejected access credential: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
