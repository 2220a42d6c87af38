"""
Talent Console - Credential Store
Contract and SQLAlchemy implementation for the persisted account table.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from sqlalchemy import select, update as sql_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from talent_console.core.schemas.auth import AccountDraft, AccountRecord
from .models import AdminUser
from .session import transaction

logger = logging.getLogger(__name__)

FILTERABLE_FIELDS = ("id", "email", "role", "is_active")
ORDERABLE_FIELDS = ("created_at", "email", "name")
# Patch keys accepted by update() and the column each one writes.
UPDATABLE_FIELDS = {
    "is_active": "is_active",
    "name": "name",
    "password_material": "password_hash",
    "password_scheme": "password_scheme",
}


class CredentialStoreError(Exception):
    """Credential store read or write failed."""
    pass


class DuplicateAccountError(CredentialStoreError):
    """An account with this email or id already exists."""
    pass


@runtime_checkable
class CredentialStore(Protocol):
    """
    Store-agnostic contract over the account table.

    Filters are equality predicates over ``id``, ``email``, ``role`` and
    ``is_active``.
    """

    def find_one(self, **filters: Any) -> Optional[AccountRecord]:
        ...

    def find_many(
        self,
        order_by: str = "created_at",
        descending: bool = True,
        **filters: Any,
    ) -> List[AccountRecord]:
        ...

    def insert(self, draft: AccountDraft) -> AccountRecord:
        ...

    def update(self, account_id: str, patch: Dict[str, Any], **filters: Any) -> bool:
        ...


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _where_clauses(filters: Dict[str, Any]) -> list:
    clauses = []
    for key, value in filters.items():
        if key not in FILTERABLE_FIELDS:
            raise ValueError(f"Cannot filter accounts by '{key}'")
        clauses.append(getattr(AdminUser, key) == _plain(value))
    return clauses


def _to_record(row: AdminUser) -> AccountRecord:
    return AccountRecord(
        id=row.id,
        email=row.email,
        password_material=row.password_hash,
        password_scheme=row.password_scheme,
        name=row.name,
        role=row.role,
        is_active=row.is_active,
        created_at=row.created_at,
    )


class SQLAlchemyCredentialStore:
    """
    Credential store backed by the ``admin_users`` table.

    Usage:
        store = SQLAlchemyCredentialStore(create_session_factory(engine))
        record = store.find_one(email="r1@x.com", role=Role.RECRUITER, is_active=True)
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def find_one(self, **filters: Any) -> Optional[AccountRecord]:
        """
        Get the single account matching all filters.

        Args:
            **filters: Equality predicates

        Returns:
            AccountRecord or None if no row matches

        Raises:
            CredentialStoreError: If the read fails
        """
        stmt = select(AdminUser).where(*_where_clauses(filters)).limit(1)
        try:
            with transaction(self.session_factory) as session:
                row = session.execute(stmt).scalars().first()
                return _to_record(row) if row is not None else None
        except SQLAlchemyError as e:
            raise CredentialStoreError(f"Account lookup failed: {e}") from e

    def find_many(
        self,
        order_by: str = "created_at",
        descending: bool = True,
        **filters: Any,
    ) -> List[AccountRecord]:
        """
        List accounts matching all filters.

        Args:
            order_by: Column to order by
            descending: Most recent / highest first when True
            **filters: Equality predicates

        Returns:
            Ordered list of AccountRecord

        Raises:
            CredentialStoreError: If the read fails
        """
        if order_by not in ORDERABLE_FIELDS:
            raise ValueError(f"Cannot order accounts by '{order_by}'")
        column = getattr(AdminUser, order_by)
        stmt = (
            select(AdminUser)
            .where(*_where_clauses(filters))
            .order_by(column.desc() if descending else column.asc())
        )
        try:
            with transaction(self.session_factory) as session:
                return [_to_record(row) for row in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            raise CredentialStoreError(f"Account listing failed: {e}") from e

    def insert(self, draft: AccountDraft) -> AccountRecord:
        """
        Insert a new account row.

        Args:
            draft: Values for the new row

        Returns:
            The stored AccountRecord with id and created_at assigned

        Raises:
            DuplicateAccountError: If the email or id is already taken
            CredentialStoreError: If the insert fails
        """
        row = AdminUser(
            email=draft.email,
            password_hash=draft.password_material,
            password_scheme=_plain(draft.password_scheme),
            name=draft.name,
            role=_plain(draft.role),
            is_active=draft.is_active,
        )
        if draft.id:
            row.id = draft.id

        try:
            with transaction(self.session_factory) as session:
                session.add(row)
                session.flush()
                session.refresh(row)
                return _to_record(row)
        except IntegrityError as e:
            logger.error(f"Database integrity error inserting account {draft.email}: {e.orig}")
            raise DuplicateAccountError(f"Account with email {draft.email} already exists") from e
        except SQLAlchemyError as e:
            raise CredentialStoreError(f"Account insert failed: {e}") from e

    def update(self, account_id: str, patch: Dict[str, Any], **filters: Any) -> bool:
        """
        Update the row with this id that also matches the filters.

        Args:
            account_id: Account id
            patch: Field values to write
            **filters: Extra equality predicates the row must satisfy

        Returns:
            True if a row was updated, False if none matched

        Raises:
            CredentialStoreError: If the write fails
        """
        values = {}
        for key, value in patch.items():
            if key not in UPDATABLE_FIELDS:
                raise ValueError(f"Account field '{key}' cannot be updated")
            values[UPDATABLE_FIELDS[key]] = _plain(value)
        if not values:
            return False

        stmt = (
            sql_update(AdminUser)
            .where(AdminUser.id == account_id, *_where_clauses(filters))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            with transaction(self.session_factory) as session:
                result = session.execute(stmt)
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise CredentialStoreError(f"Account update failed: {e}") from e
