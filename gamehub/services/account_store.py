"""
Account store: the persistence handle the identity resolver works through.

An ``AccountStore`` wraps one SQLAlchemy ``Session`` for the lifetime of
a request. ``transaction()`` is the only place that commits or rolls
back; everything else only flushes, so a match read, the write it
decides on and an optional token insert land in one database
transaction.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gamehub.core.errors import ConflictError, StoreError
from gamehub.models.user import User
from gamehub.models.user_wallet import UserWallet
from gamehub.models.verification import VerificationToken

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _folded(column):
    return func.lower(func.trim(column))


class AccountStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator["AccountStore"]:
        """Commit on success, roll back on any failure.

        Unique-constraint violations surface as ``ConflictError`` (the
        caller lost a race and may re-resolve); any other database error
        surfaces as ``StoreError``.
        """
        try:
            yield self
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Uniqueness violation, rolled back: %s", e.orig)
            raise ConflictError("account already exists for one of the supplied identifiers") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Account store failure")
            raise StoreError("account store unavailable") from e
        except Exception:
            self.db.rollback()
            raise

    # ---------- Users ----------

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_by_wallet(self, wallet_address: str) -> Optional[User]:
        """Owner of ``wallet_address``, either as the account wallet or a linked one."""
        linked = select(UserWallet.user_id).where(_folded(UserWallet.wallet_address) == wallet_address)
        stmt = (
            select(User)
            .where(or_(_folded(User.wallet_address) == wallet_address, User.id.in_(linked)))
            .order_by(User.id)
            .with_for_update()
        )
        return self.db.execute(stmt).scalars().first()

    def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(_folded(User.email) == email).with_for_update()
        return self.db.execute(stmt).scalars().first()

    def find_by_phone(self, mobile_number: str) -> Optional[User]:
        stmt = (
            select(User)
            .where(User.mobile_number == mobile_number)
            .order_by(User.id)
            .limit(1)
            .with_for_update()
        )
        return self.db.execute(stmt).scalars().first()

    def create_user(self, *, now: datetime, **fields) -> User:
        user = User(coins=0, created_at=now, updated_at=now, **fields)
        self.db.add(user)
        self.db.flush()
        return user

    def update_user(self, user: User, changes: dict, now: datetime) -> User:
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = now
        self.db.flush()
        return user

    # ---------- Verification tokens ----------

    def add_verification_token(self, user_id: int, token: str, now: datetime) -> bool:
        """Insert a token row unless the token already exists.

        Returns ``True`` when a row was written. The first writer of a
        given token keeps it.
        """
        insert_fn = _UPSERT_INSERTS.get(self.db.get_bind().dialect.name)
        if insert_fn is None:
            exists = self.db.execute(
                select(VerificationToken.id).where(VerificationToken.token == token)
            ).first()
            if exists:
                return False
            self.db.add(VerificationToken(user_id=user_id, token=token, created_at=now))
            self.db.flush()
            return True

        stmt = (
            insert_fn(VerificationToken.__table__)
            .values(user_id=user_id, token=token, created_at=now)
            .on_conflict_do_nothing(index_elements=["token"])
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def take_verification_token(self, token: str):
        """Delete ``token`` and return its ``(user_id, created_at)`` row.

        Done as a single ``DELETE ... RETURNING`` so two concurrent callers
        can never both receive the row. Returns ``None`` when absent.
        """
        tokens = VerificationToken.__table__
        stmt = (
            delete(tokens)
            .where(tokens.c.token == token)
            .returning(tokens.c.user_id, tokens.c.created_at)
        )
        return self.db.execute(stmt).first()

    # ---------- Linked wallets ----------

    def list_wallets(self, user_id: int) -> list[UserWallet]:
        stmt = (
            select(UserWallet)
            .where(UserWallet.user_id == user_id)
            .order_by(UserWallet.is_primary.desc(), UserWallet.connected_at, UserWallet.id)
        )
        return list(self.db.execute(stmt).scalars())

    def find_linked_wallet(self, wallet_address: str) -> Optional[UserWallet]:
        stmt = select(UserWallet).where(_folded(UserWallet.wallet_address) == wallet_address).with_for_update()
        return self.db.execute(stmt).scalars().first()

    def get_wallet(self, wallet_id: int, user_id: int) -> Optional[UserWallet]:
        stmt = (
            select(UserWallet)
            .where(UserWallet.id == wallet_id, UserWallet.user_id == user_id)
            .with_for_update()
        )
        return self.db.execute(stmt).scalars().first()

    def add_wallet(self, *, user_id: int, now: datetime, **fields) -> UserWallet:
        wallet = UserWallet(user_id=user_id, connected_at=now, **fields)
        self.db.add(wallet)
        self.db.flush()
        return wallet

    def delete_wallet(self, wallet: UserWallet) -> None:
        self.db.delete(wallet)
        self.db.flush()

    def set_primary_wallet(self, user_id: int, wallet: UserWallet) -> UserWallet:
        self.db.execute(
            update(UserWallet)
            .where(UserWallet.user_id == user_id, UserWallet.id != wallet.id)
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )
        wallet.is_primary = True
        self.db.flush()
        return wallet

    def update_wallet(self, wallet: UserWallet, changes: dict) -> UserWallet:
        for field, value in changes.items():
            setattr(wallet, field, value)
        self.db.flush()
        return wallet
