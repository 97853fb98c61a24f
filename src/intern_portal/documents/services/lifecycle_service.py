import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from intern_portal.documents.models.document import Document, DocumentStatus, DocumentType, TERMINAL_STATUSES
from intern_portal.documents.models.verification_event import VerificationAction
from intern_portal.documents.services.audit_log import TRANSITIONS, VerificationAuditLog
from intern_portal.documents.services.document_service import DocumentService, MAX_NOTES_LENGTH
from intern_portal.errors import (
    DuplicateActive, Forbidden, InvalidTransition, NotFound, StorageError, ValidationFailed
)
from intern_portal.notifications.repositories.notification_repository import NotificationRepository
from intern_portal.notifications.services.notification_service import NotificationDispatcher
from intern_portal.storage import BlobStorage
from intern_portal.users.models import User, UserRole

logger = logging.getLogger(__name__)

REVIEW_ACTIONS = frozenset(TRANSITIONS)


class DocumentLifecycleManager:
    """Owns every write to a document's status and active flag.

    Each write commits together with its audit event. Notifications are sent
    after the commit and their failures never undo the lifecycle change.
    """

    def __init__(
        self,
        session: Session,
        storage: BlobStorage,
        dispatcher: Optional[NotificationDispatcher] = None,
        max_file_size: int = 10 * 1024 * 1024,
    ):
        self.session = session
        self.storage = storage
        self.audit_log = VerificationAuditLog(session)
        self.dispatcher = dispatcher or NotificationDispatcher(NotificationRepository(session))
        self.max_file_size = max_file_size

    # -- upload -----------------------------------------------------------

    def _find_active_submission(self, intern_id: int, document_type: DocumentType) -> Optional[Document]:
        return (
            self.session.query(Document)
            .filter(
                Document.intern_id == intern_id,
                Document.document_type == document_type,
                Document.is_active.is_(True),
                Document.status != DocumentStatus.REJECTED,
            )
            .first()
        )

    @staticmethod
    def _duplicate(document_type: DocumentType) -> DuplicateActive:
        return DuplicateActive(f"{document_type.value} already uploaded and pending/verified")

    def _discard_staged(self, reference: str) -> None:
        try:
            self.storage.delete(reference)
        except (NotFound, StorageError) as e:
            logger.warning("Could not remove staged upload %s: %s", reference, e)

    def upload(
        self,
        uploader: User,
        document_type: DocumentType,
        filename: str,
        content_type: str,
        file_contents: bytes,
        notes: Optional[str] = None,
    ) -> Document:
        profile = uploader.intern_profile
        if profile is None:
            raise NotFound("Intern details not found", code="INTERN_NOT_FOUND")

        DocumentService.validate_upload(file_contents, filename, content_type, self.max_file_size, notes)

        if self._find_active_submission(profile.intern_id, document_type) is not None:
            raise self._duplicate(document_type)

        reference = self.storage.save(file_contents, filename)
        try:
            document = Document(
                intern_id=profile.intern_id,
                document_type=document_type,
                file_name=reference,
                original_name=filename,
                file_size=len(file_contents),
                mime_type=content_type,
                notes=notes,
                status=DocumentStatus.PENDING,
                is_active=True,
            )
            self.session.add(document)
            self.session.flush()
            self.audit_log.record(
                document,
                VerificationAction.UPLOAD,
                DocumentStatus.PENDING,
                DocumentStatus.PENDING,
                comments=notes,
            )
            self.session.commit()
        except IntegrityError as e:
            # Lost the race against a concurrent upload of the same type.
            self.session.rollback()
            self._discard_staged(reference)
            raise self._duplicate(document_type) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            self._discard_staged(reference)
            raise StorageError(f"Could not save document: {e}") from e
        except Exception:
            self.session.rollback()
            self._discard_staged(reference)
            raise

        self.session.refresh(document)
        logger.info(
            "Document %s (%s) uploaded by intern %s", document.id, document_type.value, profile.intern_id
        )
        self._dispatch(self.dispatcher.notify_uploaded, document)
        return document

    # -- review -----------------------------------------------------------

    def transition(
        self,
        document_id: int,
        action: VerificationAction,
        verifier: User,
        comments: Optional[str] = None,
    ) -> Document:
        if action not in REVIEW_ACTIONS:
            raise InvalidTransition(f"'{action.value}' is not a review action")
        if comments is not None and len(comments) > MAX_NOTES_LENGTH:
            raise ValidationFailed(f"Comments must be less than {MAX_NOTES_LENGTH} characters")

        document = DocumentService.get_document(self.session, document_id)
        if not document.is_active:
            raise InvalidTransition("Document has been deleted")

        previous_status = document.status
        if previous_status in TERMINAL_STATUSES:
            raise InvalidTransition(f"Document is already {previous_status.value}")

        allowed_from, new_status = TRANSITIONS[action]
        if previous_status not in allowed_from:
            raise InvalidTransition(
                f"Cannot {action.value} a document that is {previous_status.value}"
            )

        now = datetime.utcnow()
        values = {
            Document.status: new_status,
            Document.verified_at: now if action == VerificationAction.APPROVE else None,
            Document.rejected_at: now if action == VerificationAction.REJECT else None,
            Document.rejection_reason: comments if action == VerificationAction.REJECT else None,
            Document.updated_at: now,
        }
        try:
            # Check-and-set on the expected status so concurrent reviews cannot both win.
            updated = (
                self.session.query(Document)
                .filter(
                    Document.id == document.id,
                    Document.status == previous_status,
                    Document.is_active.is_(True),
                )
                .update(values, synchronize_session=False)
            )
            if updated != 1:
                self.session.rollback()
                raise InvalidTransition("Document was modified by another request")

            self.audit_log.record(
                document,
                action,
                previous_status,
                new_status,
                verifier_id=verifier.id,
                comments=comments,
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Could not update document: {e}") from e

        self.session.refresh(document)
        logger.info(
            "Document %s changed from %s to %s by user %s",
            document.id, previous_status.value, new_status.value, verifier.id,
        )
        self._dispatch(self.dispatcher.notify_status_changed, document, action.value, comments)
        return document

    # -- delete / download ------------------------------------------------

    def soft_delete(self, document_id: int, actor: User) -> Document:
        document = DocumentService.get_document(self.session, document_id)
        if not document.is_active:
            raise NotFound("Document not found", code="DOCUMENT_NOT_FOUND")

        status = document.status
        can_delete = actor.is_staff or (DocumentService.is_owner(actor, document) and status == DocumentStatus.PENDING)
        if not can_delete:
            raise Forbidden("Cannot delete this document", code="DELETE_NOT_ALLOWED")

        try:
            updated = (
                self.session.query(Document)
                .filter(
                    Document.id == document.id,
                    Document.status == status,
                    Document.is_active.is_(True),
                )
                .update({Document.is_active: False, Document.updated_at: datetime.utcnow()},
                        synchronize_session=False)
            )
            if updated != 1:
                self.session.rollback()
                raise InvalidTransition("Document was modified by another request")

            self.audit_log.record(
                document,
                VerificationAction.DELETE,
                status,
                status,
                verifier_id=None if actor.role == UserRole.INTERN else actor.id,
                comments="Document deleted",
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Could not delete document: {e}") from e

        self.session.refresh(document)
        try:
            self.storage.delete(document.file_name)
        except (NotFound, StorageError) as e:
            logger.warning("Could not delete physical file for document %s: %s", document.id, e)

        logger.info("Document %s deleted by user %s", document.id, actor.id)
        return document

    def download(self, document_id: int, requester: User) -> Tuple[Document, bytes]:
        document = DocumentService.get_document(self.session, document_id)
        if not DocumentService.can_view(requester, document):
            raise Forbidden("Access denied", code="ACCESS_DENIED")
        if document.purged_at is not None:
            raise NotFound("File not found on server", code="FILE_NOT_FOUND")
        return document, self.storage.read(document.file_name)

    # -- notifications ----------------------------------------------------

    def _dispatch(self, send: Callable, *args) -> None:
        try:
            send(*args)
        except Exception:
            self.session.rollback()
            logger.exception("Notification dispatch %s failed", getattr(send, "__name__", send))
