"""SQLAlchemy models for the form tables."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    ForeignKey,
    Index,
    Integer,
    String,
    TIMESTAMP,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from onboarding.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FormDocumentRecord(Base):
    """One onboarding form of any of the five document types."""

    __tablename__ = "form_documents"
    __table_args__ = (
        Index("ix_form_documents_type_user", "document_type", "user_id"),
        Index("ix_form_documents_type_client", "document_type", "client_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    document_type: Mapped[str] = mapped_column(
        String, nullable=False
    )  # investor_profile | additional_holder | alt_order | accreditation | statement
    user_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    client_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default="draft"
    )  # draft | submitted | approved | rejected
    fields: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    step_completion: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    last_completed_step: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    submitted_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # Relationships
    account_holders: Mapped[list["AccountHolderRecord"]] = relationship(
        "AccountHolderRecord", back_populates="document", cascade="all, delete-orphan", passive_deletes=True
    )
    child_rows: Mapped[list["ChildRowRecord"]] = relationship(
        "ChildRowRecord",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChildRowRecord.position",
    )


class AccountHolderRecord(Base):
    """Primary or secondary holder of an investor profile."""

    __tablename__ = "form_account_holders"
    __table_args__ = (
        UniqueConstraint("document_id", "holder_type", name="uq_account_holder_document_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("form_documents.id", ondelete="CASCADE"), nullable=False
    )
    holder_type: Mapped[str] = mapped_column(String, nullable=False)  # primary | secondary
    fields: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    # Relationships
    document: Mapped["FormDocumentRecord"] = relationship(
        "FormDocumentRecord", back_populates="account_holders"
    )
    child_rows: Mapped[list["ChildRowRecord"]] = relationship(
        "ChildRowRecord",
        back_populates="account_holder",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChildRowRecord.position",
    )


class ChildRowRecord(Base):
    """One row of a full-replace child collection.

    Rows belong to the document directly, or to one of its account holders
    when ``account_holder_id`` is set.
    """

    __tablename__ = "form_child_rows"
    __table_args__ = (
        Index("ix_form_child_rows_owner_collection", "document_id", "account_holder_id", "collection"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("form_documents.id", ondelete="CASCADE"), nullable=False
    )
    account_holder_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("form_account_holders.id", ondelete="CASCADE"), nullable=True
    )
    collection: Mapped[str] = mapped_column(String, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    data: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)

    # Relationships
    document: Mapped["FormDocumentRecord"] = relationship(
        "FormDocumentRecord", back_populates="child_rows"
    )
    account_holder: Mapped["AccountHolderRecord | None"] = relationship(
        "AccountHolderRecord", back_populates="child_rows"
    )
