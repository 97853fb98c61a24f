from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from intern_portal.database import Base
from intern_portal.documents.models.document import DocumentStatus, _values


class VerificationAction(PyEnum):
    UPLOAD = "upload"
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_REVISION = "request_revision"
    DELETE = "delete"


class VerificationEvent(Base):
    """One immutable row per lifecycle event of a document."""
    __tablename__ = 'verification_events'

    id = Column(Integer, primary_key=True)
    document_id = Column(Integer, ForeignKey('documents.id'), nullable=False, index=True)
    intern_id = Column(Integer, ForeignKey('intern_profiles.intern_id'), nullable=False)
    verifier_id = Column(Integer, ForeignKey('users.id'), nullable=True)

    action = Column(Enum(VerificationAction, name="verification_action", values_callable=_values), nullable=False)
    previous_status = Column(Enum(DocumentStatus, name="document_status", values_callable=_values), nullable=False)
    new_status = Column(Enum(DocumentStatus, name="document_status", values_callable=_values), nullable=False)
    comments = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    document = relationship("Document", back_populates="verifications")
    verifier = relationship("User")
