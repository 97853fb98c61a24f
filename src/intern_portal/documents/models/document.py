from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Boolean, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from intern_portal.database import Base


def _values(enum_cls):
    return [member.value for member in enum_cls]


class DocumentType(PyEnum):
    CV = "CV"
    ID_PASSPORT = "ID_PASSPORT"
    ERASMUS_FORMS = "ERASMUS_FORMS"
    INTERNSHIP_AGREEMENT = "INTERNSHIP_AGREEMENT"
    INSURANCE = "INSURANCE"
    ACCEPTANCE_LETTER = "ACCEPTANCE_LETTER"
    LEARNING_AGREEMENT = "LEARNING_AGREEMENT"
    FINAL_REPORT = "FINAL_REPORT"
    PROFILE_PICTURE = "PROFILE_PICTURE"
    OTHER = "OTHER"


class DocumentStatus(PyEnum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    VERIFIED = "verified"
    REJECTED = "rejected"


TERMINAL_STATUSES = frozenset({DocumentStatus.VERIFIED, DocumentStatus.REJECTED})

# At most one live submission per (intern, type); rejected and deleted rows don't count.
ACTIVE_SUBMISSION_CLAUSE = "is_active AND status <> 'rejected'"


class Document(Base):
    __tablename__ = 'documents'
    __table_args__ = (
        Index(
            "uq_documents_active_submission",
            "intern_id",
            "document_type",
            unique=True,
            postgresql_where=text(ACTIVE_SUBMISSION_CLAUSE),
            sqlite_where=text(ACTIVE_SUBMISSION_CLAUSE),
        ),
    )

    id = Column(Integer, primary_key=True)
    intern_id = Column(Integer, ForeignKey('intern_profiles.intern_id'), nullable=False, index=True)
    document_type = Column(Enum(DocumentType, name="document_type", values_callable=_values), nullable=False)

    file_name = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String, nullable=False)
    notes = Column(String(500), nullable=True)

    status = Column(
        Enum(DocumentStatus, name="document_status", values_callable=_values),
        nullable=False,
        default=DocumentStatus.PENDING,
    )
    verified_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejection_reason = Column(String(500), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    purged_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    intern = relationship("InternProfile", back_populates="documents")

    verifications = relationship(
        "VerificationEvent",
        back_populates="document",
        order_by="VerificationEvent.id",
    )

    @property
    def latest_verification(self):
        return self.verifications[-1] if self.verifications else None
