from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from intern_portal.documents.models.document import DocumentStatus, DocumentType
from intern_portal.documents.models.verification_event import VerificationAction
from intern_portal.pagination import Pagination


class InternSummary(BaseModel):
    intern_id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class VerificationEventResponse(BaseModel):
    id: int
    document_id: int
    intern_id: int
    verifier_id: Optional[int] = None
    action: VerificationAction
    previous_status: DocumentStatus
    new_status: DocumentStatus
    comments: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class DocumentResponse(BaseModel):
    id: int
    intern_id: int
    document_type: DocumentType
    original_name: str
    file_size: int
    mime_type: str
    notes: Optional[str] = None
    status: DocumentStatus
    verified_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DocumentWithInternResponse(DocumentResponse):
    intern: Optional[InternSummary] = None


class DocumentSummaryResponse(DocumentWithInternResponse):
    latest_verification: Optional[VerificationEventResponse] = None


class DocumentWithHistoryResponse(DocumentWithInternResponse):
    verifications: List[VerificationEventResponse] = []


class DocumentUploadResponse(BaseModel):
    message: str
    document: DocumentWithInternResponse


class StatusUpdateRequest(BaseModel):
    action: Literal["approve", "reject", "request_revision"]
    comments: Optional[str] = Field(None, max_length=500)


class StatusUpdateResponse(BaseModel):
    message: str
    document: DocumentResponse


class MyDocumentsResponse(BaseModel):
    documents: List[DocumentSummaryResponse]


class InternDocumentsResponse(BaseModel):
    documents: List[DocumentWithHistoryResponse]


class DocumentListResponse(BaseModel):
    documents: List[DocumentSummaryResponse]
    pagination: Pagination


class DocumentHistoryResponse(BaseModel):
    document_id: int
    status: DocumentStatus
    events: List[VerificationEventResponse]


class DocumentStatsResponse(BaseModel):
    status_stats: Dict[str, int]
    document_type_stats: Dict[str, int]
    recent_documents: List[DocumentWithInternResponse]


class PurgeRequest(BaseModel):
    older_than_days: int = Field(30, ge=0)


class PurgeResponse(BaseModel):
    message: str
    purged_count: int
