"""
Talent Console - Database Models
SQLAlchemy models for operator accounts and the recruiter provisioning journal.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class AdminUser(Base):
    """Operator account (admin or recruiter) with its credential material."""

    __tablename__ = "admin_users"

    id = Column(String(64), primary_key=True, default=_new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # Either a passlib hash or, for legacy rows, the plaintext value
    password_hash = Column(Text, nullable=False)
    # NULL for rows written before the scheme was recorded
    password_scheme = Column(String(20), nullable=True)
    name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="recruiter", index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'recruiter')", name="ck_admin_users_role"),
    )

    def __repr__(self) -> str:
        return f"AdminUser(id={self.id!r}, email={self.email!r}, role={self.role!r}, is_active={self.is_active})"


class RecruiterProvisioning(Base):
    """Durable intent log for the two-phase recruiter creation."""

    __tablename__ = "recruiter_provisioning"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), nullable=False, index=True)
    identity_id = Column(String(64), nullable=True)
    phase = Column(String(32), nullable=False, index=True)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
