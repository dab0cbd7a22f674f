"""
SQL storage backend

SQLAlchemy declarative models for the credential cache and coach
verification state, plus a session-per-operation store implementing the
same interface as :class:`accredit.storage.memory.InMemoryStorage`.

Tables:
- verified_credentials: append-mostly cache of confirmed credentials
- coach_profiles: per-coach verification status written by the verifiers
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text, create_engine, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from accredit.errors import StorageError
from accredit.models import (
    AccreditationBody,
    CoachRecord,
    VerificationStatus,
    VerifiedBy,
    VerifiedCredential,
)
from accredit.utils import utcnow

logger = logging.getLogger(__name__)

Base = declarative_base()


class CredentialRow(Base):
    """Cache row for a confirmed (body, key) credential."""
    __tablename__ = "verified_credentials"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    accreditation_body = Column(String(8), nullable=False)
    credential_number = Column(String(255), nullable=False, comment="EIA reference or NAME_QUALIFIER")
    full_name = Column(String(255), nullable=False)
    accreditation_level = Column(String(100))
    country = Column(String(100))
    location = Column(String(255))
    profile_url = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    verified_by = Column(String(16), nullable=False, default=VerifiedBy.auto.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_verified_credentials_lookup", "accreditation_body", "credential_number", "is_active"),
    )

    def to_model(self) -> VerifiedCredential:
        return VerifiedCredential(
            body=AccreditationBody(self.accreditation_body),
            credential_number=self.credential_number,
            full_name=self.full_name,
            level=self.accreditation_level,
            country=self.country,
            location=self.location,
            profile_url=self.profile_url,
            is_active=self.is_active,
            verified_by=VerifiedBy(self.verified_by),
            created_at=self.created_at,
        )


class CoachProfileRow(Base):
    """Verification state for one coach."""
    __tablename__ = "coach_profiles"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False, default="")
    accreditation_body = Column(String(8))
    verified = Column(Boolean, nullable=False, default=False)
    verification_status = Column(String(32), nullable=False, default=VerificationStatus.unverified.value)
    accreditation_level = Column(String(100))
    profile_url = Column(Text)
    location = Column(String(255))
    verified_at = Column(DateTime(timezone=True))
    verification_notes = Column(Text)

    def to_model(self) -> CoachRecord:
        return CoachRecord(
            coach_id=self.id,
            name=self.name,
            body=AccreditationBody(self.accreditation_body) if self.accreditation_body else None,
            verified=self.verified,
            verification_status=VerificationStatus(self.verification_status),
            level=self.accreditation_level,
            profile_url=self.profile_url,
            location=self.location,
            verified_at=self.verified_at,
            notes=self.verification_notes,
        )


class SqlStorage:
    """Storage backed by any SQLAlchemy-supported database.

    Example:
        storage = SqlStorage("sqlite:///accredit.db")
        storage.create_all_tables()
    """

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        kwargs: dict = {"echo": echo}
        if database_url.startswith("sqlite") and (database_url in ("sqlite://", "sqlite:///:memory:")):
            # One shared connection so every session sees the same in-memory db
            kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
        self._engine = create_engine(database_url, **kwargs)
        self._session_factory = sessionmaker(bind=self._engine)
        logger.info("SQL storage initialized (dialect=%s)", self._engine.dialect.name)

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Transactional scope; wraps driver errors in StorageError."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(f"Database operation failed: {exc}") from exc
        finally:
            session.close()

    def create_all_tables(self) -> None:
        """Create tables; safe to call repeatedly."""
        Base.metadata.create_all(self._engine)
        logger.info("Database tables created")

    # -- Credentials ----------------------------------------------------------

    def add_credential(self, record: VerifiedCredential) -> None:
        with self.session_scope() as session:
            session.add(CredentialRow(
                accreditation_body=record.body.value,
                credential_number=record.credential_number,
                full_name=record.full_name,
                accreditation_level=record.level,
                country=record.country,
                location=record.location,
                profile_url=record.profile_url,
                is_active=record.is_active,
                verified_by=record.verified_by.value,
                created_at=record.created_at,
            ))

    def find_credentials(
        self,
        body: AccreditationBody,
        credential_number: str,
        *,
        active_only: bool = True,
    ) -> list[VerifiedCredential]:
        stmt = select(CredentialRow).where(
            CredentialRow.accreditation_body == body.value,
            CredentialRow.credential_number == credential_number,
        )
        if active_only:
            stmt = stmt.where(CredentialRow.is_active.is_(True))
        stmt = stmt.order_by(CredentialRow.created_at.desc())
        with self.session_scope() as session:
            return [row.to_model() for row in session.scalars(stmt)]

    # -- Coaches --------------------------------------------------------------

    def get_coach(self, coach_id: str) -> CoachRecord | None:
        with self.session_scope() as session:
            row = session.get(CoachProfileRow, coach_id)
            return row.to_model() if row is not None else None

    def save_coach(self, record: CoachRecord) -> None:
        with self.session_scope() as session:
            row = session.get(CoachProfileRow, record.coach_id)
            if row is None:
                row = CoachProfileRow(id=record.coach_id)
                session.add(row)
            row.name = record.name
            row.accreditation_body = record.body.value if record.body else None
            row.verified = record.verified
            row.verification_status = record.verification_status.value
            row.accreditation_level = record.level
            row.profile_url = record.profile_url
            row.location = record.location
            row.verified_at = record.verified_at
            row.verification_notes = record.notes

    def find_coaches(
        self,
        body: AccreditationBody,
        *,
        verified: bool | None = None,
        level: str | None = None,
        name_contains: str | None = None,
        profile_url: str | None = None,
        exclude_id: str | None = None,
    ) -> list[CoachRecord]:
        stmt = select(CoachProfileRow).where(CoachProfileRow.accreditation_body == body.value)
        if verified is not None:
            stmt = stmt.where(CoachProfileRow.verified.is_(verified))
        if level is not None:
            stmt = stmt.where(CoachProfileRow.accreditation_level == level)
        if name_contains:
            stmt = stmt.where(CoachProfileRow.name.ilike(f"%{name_contains}%"))
        if profile_url is not None:
            stmt = stmt.where(CoachProfileRow.profile_url == profile_url)
        if exclude_id is not None:
            stmt = stmt.where(CoachProfileRow.id != exclude_id)
        with self.session_scope() as session:
            return [row.to_model() for row in session.scalars(stmt)]

    def ping(self) -> bool:
        try:
            with self.session_scope() as session:
                session.execute(text("SELECT 1"))
            return True
        except StorageError:
            logger.warning("Database ping failed")
            return False
