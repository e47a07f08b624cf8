"""
Identity resolution for login/registration.

``IdentityResolver.resolve`` turns a bag of identity hints into exactly
one user record. Matching is wallet-first: a wallet hit wins, an email
hit is used when no wallet matched, and a wallet hit and an email hit
on two different users is a conflict, never a merge. Existing records
only gain data: empty or placeholder fields are promoted, real values
are left alone.

The resolver never opens sessions itself. It is built per request with
an ``AccountStore`` and a ``CredentialIssuer``.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from gamehub.auth.token import CredentialIssuer
from gamehub.core.errors import ConflictError, NotFoundError, ValidationError
from gamehub.models.user import User
from gamehub.schemas.auth_schema import CredentialPair
from gamehub.services.account_store import AccountStore
from gamehub.services.placeholders import (
    PLACEHOLDER_NAME,
    clean,
    is_placeholder_email,
    is_placeholder_name,
    is_placeholder_phone,
    is_placeholder_wallet,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class IdentityHints:
    email: Optional[str] = None
    wallet_address: Optional[str] = None
    mobile_number: Optional[str] = None
    name: Optional[str] = None

    def normalized(self) -> "IdentityHints":
        email = clean(self.email)
        wallet = clean(self.wallet_address)
        return IdentityHints(
            email=email.lower() if email else None,
            wallet_address=wallet.lower() if wallet else None,
            mobile_number=clean(self.mobile_number),
            name=clean(self.name),
        )

    def has_identifier(self) -> bool:
        return any((self.email, self.wallet_address, self.mobile_number))


class IdentityResolver:
    def __init__(
        self,
        store: AccountStore,
        issuer: CredentialIssuer,
        verification_ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.issuer = issuer
        self.verification_ttl = verification_ttl
        self.clock = clock

    # ---------- Login / registration ----------

    def resolve(
        self, hints: IdentityHints, verification_token: Optional[str] = None
    ) -> tuple[User, bool]:
        """Find or create the user ``hints`` identify.

        Returns ``(user, is_new)``. Raises ``ValidationError`` when no
        email, wallet or phone is supplied and ``ConflictError`` when the
        hints disagree with each other or with the stored record.
        """
        hints = hints.normalized()
        if not hints.has_identifier():
            raise ValidationError("no identifying hint supplied")
        token = clean(verification_token)
        now = self.clock()

        with self.store.transaction():
            user = self._match(hints)
            if user is None:
                user = self._create(hints, now)
                is_new = True
            else:
                changes = self._promotions(user, hints)
                if changes:
                    self.store.update_user(user, changes, now)
                    logger.info("Promoted %s on user %s", ", ".join(sorted(changes)), user.id)
                is_new = False

            if token and not self.store.add_verification_token(user.id, token, now):
                logger.info("Verification token already registered, keeping first owner")

        return user, is_new

    def _match(self, hints: IdentityHints) -> Optional[User]:
        by_wallet = self.store.find_by_wallet(hints.wallet_address) if hints.wallet_address else None
        by_email = self.store.find_by_email(hints.email) if hints.email else None

        if by_wallet is not None and by_email is not None and by_wallet.id != by_email.id:
            logger.warning(
                "Wallet matches user %s but email matches user %s", by_wallet.id, by_email.id
            )
            raise ConflictError("wallet address and email belong to different accounts")

        if by_wallet is not None:
            return by_wallet
        if by_email is not None:
            return by_email

        # Phone numbers are not unique; only used when nothing stronger was given
        if hints.mobile_number and not (hints.wallet_address or hints.email):
            return self.store.find_by_phone(hints.mobile_number)
        return None

    def _create(self, hints: IdentityHints, now: datetime) -> User:
        user = self.store.create_user(
            now=now,
            name=hints.name or PLACEHOLDER_NAME,
            email=hints.email,
            wallet_address=hints.wallet_address,
            mobile_number=hints.mobile_number,
        )
        logger.info("Created user %s", user.id)
        return user

    def _promotions(self, user: User, hints: IdentityHints) -> dict:
        changes = {}

        if (
            hints.name
            and not is_placeholder_name(hints.name)
            and is_placeholder_name(user.name)
            and hints.name != clean(user.name)
        ):
            changes["name"] = hints.name

        stored_email = (clean(user.email) or "").lower()
        if hints.email and hints.email != stored_email:
            if is_placeholder_email(stored_email):
                if not is_placeholder_email(hints.email):
                    changes["email"] = hints.email
            elif not is_placeholder_email(hints.email):
                logger.warning("User %s is bound to a different email", user.id)
                raise ConflictError("account is already bound to a different email")

        if hints.wallet_address and is_placeholder_wallet(user.wallet_address):
            changes["wallet_address"] = hints.wallet_address

        if hints.mobile_number and is_placeholder_phone(user.mobile_number):
            changes["mobile_number"] = hints.mobile_number

        return changes

    # ---------- Launcher / device tokens ----------

    def consume_verification_token(self, token: Optional[str]) -> tuple[User, CredentialPair]:
        """Exchange a single-use verification token for the owner and fresh credentials."""
        token = clean(token)
        if not token:
            raise ValidationError("verification token required")
        now = self.clock()
        expired = False

        with self.store.transaction():
            row = self.store.take_verification_token(token)
            if row is None:
                raise NotFoundError("invalid verification token", resource="verification_token")
            if self._is_expired(row.created_at, now):
                expired = True
            else:
                user = self.store.get_user(row.user_id)
                if user is None:
                    raise NotFoundError("user not found", resource="user")

        # the lapsed row is deleted by the commit above
        if expired:
            raise NotFoundError("verification token expired", resource="verification_token")

        logger.info("Verification token consumed for user %s", user.id)
        return user, self.issuer.issue(user.id)

    def _is_expired(self, created_at: datetime, now: datetime) -> bool:
        if not self.verification_ttl:
            return False
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return now - created_at > self.verification_ttl

    # ---------- Credentials ----------

    def issue_credentials(self, user: User) -> CredentialPair:
        return self.issuer.issue(user.id)

    def refresh(self, refresh_token: Optional[str]) -> CredentialPair:
        return self.issuer.refresh(refresh_token)
