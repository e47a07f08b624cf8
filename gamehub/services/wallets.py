"""
Linked wallets.

A user may connect several wallets besides the one stored on the account
row. Every address belongs to at most one user, whether it is held as the
account wallet or as a linked one, and each user with linked wallets has
exactly one primary.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from gamehub.core.errors import ConflictError, NotFoundError, ValidationError
from gamehub.models.user import User
from gamehub.models.user_wallet import UserWallet
from gamehub.services.account_store import AccountStore
from gamehub.services.placeholders import clean

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WalletService:
    def __init__(self, store: AccountStore, clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self.clock = clock

    def connect(
        self,
        user: User,
        wallet_address: Optional[str],
        wallet_type: Optional[str] = None,
        chain_id: Optional[int] = None,
        label: Optional[str] = None,
    ) -> tuple[UserWallet, bool]:
        """Link ``wallet_address`` to ``user``.

        Returns ``(wallet, created)``. Linking an address the user already
        holds returns the existing link. An address owned by anyone else
        raises ``ConflictError``.
        """
        address = clean(wallet_address)
        if not address:
            raise ValidationError("wallet address required")
        address = address.lower()

        with self.store.transaction():
            linked = self.store.find_linked_wallet(address)
            if linked is not None:
                if linked.user_id != user.id:
                    raise ConflictError("wallet is already connected to another account")
                return linked, False

            owner = self.store.find_by_wallet(address)
            if owner is not None and owner.id != user.id:
                raise ConflictError("wallet is already connected to another account")

            is_first = not self.store.list_wallets(user.id)
            wallet = self.store.add_wallet(
                user_id=user.id,
                now=self.clock(),
                wallet_address=address,
                wallet_type=clean(wallet_type) or "unknown",
                chain_id=chain_id,
                label=clean(label),
                is_primary=is_first,
            )

        logger.info("Wallet %s connected to user %s", wallet.id, user.id)
        return wallet, True

    def list_wallets(self, user: User) -> list[UserWallet]:
        return self.store.list_wallets(user.id)

    def disconnect(self, user: User, wallet_id: int) -> None:
        with self.store.transaction():
            wallet = self._owned(user, wallet_id)
            was_primary = wallet.is_primary
            self.store.delete_wallet(wallet)
            if was_primary:
                remaining = self.store.list_wallets(user.id)
                if remaining:
                    # oldest remaining link takes over
                    self.store.set_primary_wallet(user.id, remaining[0])
        logger.info("Wallet %s disconnected from user %s", wallet_id, user.id)

    def set_primary(self, user: User, wallet_id: int) -> UserWallet:
        with self.store.transaction():
            wallet = self._owned(user, wallet_id)
            self.store.set_primary_wallet(user.id, wallet)
        return wallet

    def update_label(self, user: User, wallet_id: int, label: Optional[str]) -> UserWallet:
        label = clean(label)
        if not label:
            raise ValidationError("label required")
        with self.store.transaction():
            wallet = self._owned(user, wallet_id)
            self.store.update_wallet(wallet, {"label": label})
        return wallet

    def _owned(self, user: User, wallet_id: int) -> UserWallet:
        wallet = self.store.get_wallet(wallet_id, user.id)
        if wallet is None:
            raise NotFoundError("wallet not found", resource="wallet")
        return wallet
