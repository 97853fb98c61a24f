from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from intern_portal.auth.dependencies import get_current_user, require_capability, require_roles
from intern_portal.auth.schemas.auth_schemas import MessageResponse
from intern_portal.config import Settings, get_settings
from intern_portal.database import get_db
from intern_portal.documents.models.document import DocumentStatus, DocumentType
from intern_portal.documents.models.verification_event import VerificationAction
from intern_portal.documents.schemas.document_schemas import (
    DocumentHistoryResponse, DocumentListResponse, DocumentResponse, DocumentStatsResponse, DocumentSummaryResponse,
    DocumentUploadResponse, DocumentWithHistoryResponse, DocumentWithInternResponse, InternDocumentsResponse,
    MyDocumentsResponse, PurgeRequest, PurgeResponse, StatusUpdateRequest, StatusUpdateResponse,
    VerificationEventResponse
)
from intern_portal.documents.services.audit_log import VerificationAuditLog
from intern_portal.documents.services.cleanup import purge_deleted_documents
from intern_portal.documents.services.document_service import DocumentService
from intern_portal.documents.services.lifecycle_service import DocumentLifecycleManager
from intern_portal.errors import Forbidden, NotFound
from intern_portal.pagination import Pagination, offset_for
from intern_portal.rate_limit.dependencies import upload_rate_limit
from intern_portal.storage import BlobStorage, get_storage
from intern_portal.users.models.user import User, UserRole

router = APIRouter(prefix="/documents", tags=["documents"])

can_upload = require_capability("upload")
can_review = require_capability("review")
can_view_all = require_capability("view_all")
can_purge = require_capability("purge")


def get_lifecycle_manager(
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> DocumentLifecycleManager:
    return DocumentLifecycleManager(db, storage, max_file_size=settings.MAX_FILE_SIZE)


@router.get("/my-documents", response_model=MyDocumentsResponse)
def my_documents(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.INTERN)),
):
    """Active documents of the calling intern with their latest review"""
    if current_user.intern_id is None:
        raise NotFound("Intern details not found", code="INTERN_NOT_FOUND")
    documents = DocumentService.get_documents_by_intern(db, current_user.intern_id)
    return MyDocumentsResponse(documents=[DocumentSummaryResponse.model_validate(d) for d in documents])


@router.get("/all", response_model=DocumentListResponse)
def list_all_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[DocumentStatus] = Query(None),
    document_type: Optional[DocumentType] = Query(None),
    search: Optional[str] = Query(None, min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_view_all),
):
    documents, total = DocumentService.list_documents(
        db, offset_for(page, limit), limit, status, document_type, search
    )
    return DocumentListResponse(
        documents=[DocumentSummaryResponse.model_validate(d) for d in documents],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/stats/overview", response_model=DocumentStatsResponse)
def stats_overview(
    db: Session = Depends(get_db),
    current_user: User = Depends(can_view_all),
):
    overview = DocumentService.stats_overview(db)
    return DocumentStatsResponse(
        status_stats=overview["status_stats"],
        document_type_stats=overview["document_type_stats"],
        recent_documents=[DocumentWithInternResponse.model_validate(d) for d in overview["recent_documents"]],
    )


@router.post("/purge", response_model=PurgeResponse)
def purge_documents(
    data: PurgeRequest,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
    current_user: User = Depends(can_purge),
):
    """Remove stored files of documents deleted more than N days ago"""
    purged = purge_deleted_documents(db, storage, data.older_than_days)
    return PurgeResponse(message=f"Purged {purged} deleted documents", purged_count=purged)


@router.get("/intern/{intern_id}", response_model=InternDocumentsResponse)
def intern_documents(
    intern_id: int,
    status: Optional[DocumentStatus] = Query(None),
    document_type: Optional[DocumentType] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_view_all),
):
    documents = DocumentService.get_documents_by_intern(db, intern_id, status, document_type)
    return InternDocumentsResponse(
        documents=[DocumentWithHistoryResponse.model_validate(d) for d in documents]
    )


@router.post("/upload", response_model=DocumentUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_document(
    document_type: DocumentType = Form(...),
    notes: Optional[str] = Form(None),
    file: UploadFile = File(...),
    current_user: User = Depends(can_upload),
    _: None = Depends(upload_rate_limit),
    manager: DocumentLifecycleManager = Depends(get_lifecycle_manager),
):
    contents = file.file.read()
    document = manager.upload(
        current_user,
        document_type,
        file.filename,
        file.content_type,
        contents,
        notes=notes or None,
    )
    return DocumentUploadResponse(
        message="Document uploaded successfully",
        document=DocumentWithInternResponse.model_validate(document),
    )


@router.put("/{document_id}/status", response_model=StatusUpdateResponse)
def update_status(
    document_id: int,
    data: StatusUpdateRequest,
    current_user: User = Depends(can_review),
    manager: DocumentLifecycleManager = Depends(get_lifecycle_manager),
):
    document = manager.transition(document_id, VerificationAction(data.action), current_user, data.comments)
    return StatusUpdateResponse(
        message=f"Document {document.status.value} successfully",
        document=DocumentResponse.model_validate(document),
    )


@router.get("/{document_id}/download")
def download_document(
    document_id: int,
    current_user: User = Depends(get_current_user),
    manager: DocumentLifecycleManager = Depends(get_lifecycle_manager),
):
    document, data = manager.download(document_id, current_user)
    return Response(
        content=data,
        media_type=document.mime_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(document.original_name)}"},
    )


@router.delete("/{document_id}", response_model=MessageResponse)
def delete_document(
    document_id: int,
    current_user: User = Depends(get_current_user),
    manager: DocumentLifecycleManager = Depends(get_lifecycle_manager),
):
    manager.soft_delete(document_id, current_user)
    return MessageResponse(message="Document deleted successfully")


@router.get("/{document_id}/history", response_model=DocumentHistoryResponse)
def document_history(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    document = DocumentService.get_document(db, document_id)
    if not DocumentService.can_view(current_user, document):
        raise Forbidden("Access denied", code="ACCESS_DENIED")

    audit_log = VerificationAuditLog(db)
    events = audit_log.history(document_id)
    return DocumentHistoryResponse(
        document_id=document.id,
        status=audit_log.replay(events),
        events=[VerificationEventResponse.model_validate(e) for e in events],
    )
