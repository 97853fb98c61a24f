import io
import os
from typing import List, Optional, Tuple

from PyPDF2 import PdfReader
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from intern_portal.documents.models.document import Document, DocumentStatus, DocumentType
from intern_portal.errors import NotFound, ValidationFailed
from intern_portal.users.models import InternProfile, User, UserRole

MAX_NOTES_LENGTH = 500

ALLOWED_MIME_TYPES = {
    "application/pdf": (".pdf",),
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "application/msword": (".doc",),
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (".docx",),
}


class DocumentService:
    """Read side of documents plus upload validation"""

    @staticmethod
    def get_document(session: Session, document_id: int) -> Document:
        document = (
            session.query(Document)
            .options(joinedload(Document.intern).joinedload(InternProfile.user))
            .filter(Document.id == document_id)
            .first()
        )
        if not document:
            raise NotFound("Document not found", code="DOCUMENT_NOT_FOUND")
        return document

    @staticmethod
    def is_owner(user: User, document: Document) -> bool:
        return user.role == UserRole.INTERN and user.intern_id == document.intern_id

    @staticmethod
    def can_view(user: User, document: Document) -> bool:
        return user.is_staff or DocumentService.is_owner(user, document)

    @staticmethod
    def get_documents_by_intern(
        session: Session,
        intern_id: int,
        status: Optional[DocumentStatus] = None,
        document_type: Optional[DocumentType] = None,
    ) -> List[Document]:
        """
        Active documents of one intern, newest first
        """
        query = session.query(Document).filter(
            Document.intern_id == intern_id,
            Document.is_active.is_(True),
        )
        if status is not None:
            query = query.filter(Document.status == status)
        if document_type is not None:
            query = query.filter(Document.document_type == document_type)
        return query.order_by(Document.created_at.desc(), Document.id.desc()).all()

    @staticmethod
    def list_documents(
        session: Session,
        offset: int = 0,
        limit: int = 20,
        status: Optional[DocumentStatus] = None,
        document_type: Optional[DocumentType] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Document], int]:
        query = (
            session.query(Document)
            .join(InternProfile, InternProfile.intern_id == Document.intern_id)
            .options(joinedload(Document.intern))
            .filter(Document.is_active.is_(True))
        )
        if status is not None:
            query = query.filter(Document.status == status)
        if document_type is not None:
            query = query.filter(Document.document_type == document_type)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Document.original_name.ilike(pattern),
                InternProfile.name.ilike(pattern),
                InternProfile.email.ilike(pattern),
            ))

        total = query.count()
        documents = (
            query.order_by(Document.created_at.desc(), Document.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return documents, total

    @staticmethod
    def stats_overview(session: Session) -> dict:
        status_rows = (
            session.query(Document.status, func.count(Document.id))
            .filter(Document.is_active.is_(True))
            .group_by(Document.status)
            .all()
        )
        type_rows = (
            session.query(Document.document_type, func.count(Document.id))
            .filter(Document.is_active.is_(True))
            .group_by(Document.document_type)
            .all()
        )
        recent = (
            session.query(Document)
            .options(joinedload(Document.intern))
            .filter(Document.is_active.is_(True))
            .order_by(Document.created_at.desc(), Document.id.desc())
            .limit(5)
            .all()
        )
        return {
            "status_stats": {status.value: count for status, count in status_rows},
            "document_type_stats": {doc_type.value: count for doc_type, count in type_rows},
            "recent_documents": recent,
        }

    @staticmethod
    def validate_upload(
        file_contents: bytes,
        filename: str,
        content_type: str,
        max_file_size: int,
        notes: Optional[str] = None,
    ):
        """Reject files the portal will not store"""

        if not file_contents:
            raise ValidationFailed("Uploaded file is empty", code="EMPTY_FILE")

        if len(file_contents) > max_file_size:
            raise ValidationFailed(
                f"Maximum file size is {max_file_size // (1024 * 1024)} MB", code="FILE_TOO_LARGE"
            )

        extensions = ALLOWED_MIME_TYPES.get(content_type)
        if extensions is None:
            raise ValidationFailed(
                f"File type '{content_type}' is not allowed", code="INVALID_FILE_TYPE"
            )

        _, ext = os.path.splitext(filename or "")
        if ext.lower() not in extensions:
            raise ValidationFailed(
                f"Extension must be one of {', '.join(extensions)}", code="INVALID_FILE_TYPE"
            )

        if content_type == "application/pdf":
            try:
                reader = PdfReader(io.BytesIO(file_contents))
                _ = len(reader.pages)
            except Exception:
                raise ValidationFailed("Invalid or corrupted PDF", code="INVALID_PDF")

        if notes is not None and len(notes) > MAX_NOTES_LENGTH:
            raise ValidationFailed(
                f"Notes must be less than {MAX_NOTES_LENGTH} characters", code="VALIDATION_ERROR"
            )
