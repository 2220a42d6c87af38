"""
Talent Console - Recruiter Provisioning Journal
Durable record of each two-phase recruiter creation so a crash between
phases can be detected and compensated on restart.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from talent_console.core.schemas.auth import PENDING_PHASES, ProvisioningPhase
from .credential_store import CredentialStoreError
from .models import RecruiterProvisioning
from .session import transaction

logger = logging.getLogger(__name__)


class JournalError(CredentialStoreError):
    """Provisioning journal read or write failed."""
    pass


class JournalEntry(BaseModel):
    """One provisioning attempt and the phase it reached."""

    id: str
    email: str
    identity_id: Optional[str] = None
    phase: ProvisioningPhase
    error: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProvisioningJournal:
    """
    Intent log for recruiter provisioning.

    Phases move ``started -> identity_created -> committed``; a failed
    attempt ends in ``failed``, ``compensated`` or ``compensation_failed``.
    Entries still in ``started`` or ``identity_created`` are incomplete.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def start(self, email: str) -> str:
        """
        Record the intent to create a recruiter.

        Args:
            email: Recruiter email

        Returns:
            Journal entry id

        Raises:
            JournalError: If the entry cannot be written
        """
        entry = RecruiterProvisioning(email=email, phase=ProvisioningPhase.STARTED.value)
        try:
            with transaction(self.session_factory) as session:
                session.add(entry)
                session.flush()
                return entry.id
        except SQLAlchemyError as e:
            raise JournalError(f"Could not record provisioning intent for {email}: {e}") from e

    def mark(
        self,
        entry_id: str,
        phase: ProvisioningPhase,
        identity_id: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        """
        Move an entry to a new phase.

        Args:
            entry_id: Journal entry id
            phase: Phase reached
            identity_id: Identity-provider id, once known
            error: Failure detail

        Raises:
            JournalError: If the entry is missing or cannot be written
        """
        try:
            with transaction(self.session_factory) as session:
                entry = session.get(RecruiterProvisioning, entry_id)
                if entry is None:
                    raise JournalError(f"Unknown provisioning entry {entry_id}")
                entry.phase = phase.value
                if identity_id is not None:
                    entry.identity_id = identity_id
                if error is not None:
                    entry.error = error
        except SQLAlchemyError as e:
            raise JournalError(f"Could not update provisioning entry {entry_id}: {e}") from e

    def get(self, entry_id: str) -> Optional[JournalEntry]:
        try:
            with transaction(self.session_factory) as session:
                entry = session.get(RecruiterProvisioning, entry_id)
                return JournalEntry.model_validate(entry) if entry is not None else None
        except SQLAlchemyError as e:
            raise JournalError(f"Could not read provisioning entry {entry_id}: {e}") from e

    def pending(
        self,
        older_than: Optional[timedelta] = None,
        phases: Sequence[ProvisioningPhase] = PENDING_PHASES,
    ) -> List[JournalEntry]:
        """
        List provisioning attempts in the given phases, oldest first.

        Args:
            older_than: Only entries not updated within this window
            phases: Phases to include (defaults to unfinished attempts)

        Raises:
            JournalError: If the journal cannot be read
        """
        stmt = (
            select(RecruiterProvisioning)
            .where(RecruiterProvisioning.phase.in_([p.value for p in phases]))
            .order_by(RecruiterProvisioning.created_at.asc())
        )
        if older_than is not None:
            cutoff = datetime.now(timezone.utc) - older_than
            stmt = stmt.where(RecruiterProvisioning.updated_at < cutoff)
        try:
            with transaction(self.session_factory) as session:
                return [JournalEntry.model_validate(e) for e in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            raise JournalError(f"Could not read provisioning journal: {e}") from e
