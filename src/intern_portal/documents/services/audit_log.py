from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from intern_portal.documents.models.document import Document, DocumentStatus
from intern_portal.documents.models.verification_event import VerificationAction, VerificationEvent
from intern_portal.errors import PortalError

# action -> (statuses it may start from, status it leads to)
TRANSITIONS = {
    VerificationAction.APPROVE: (
        frozenset({DocumentStatus.PENDING, DocumentStatus.UNDER_REVIEW}), DocumentStatus.VERIFIED
    ),
    VerificationAction.REJECT: (
        frozenset({DocumentStatus.PENDING, DocumentStatus.UNDER_REVIEW}), DocumentStatus.REJECTED
    ),
    VerificationAction.REQUEST_REVISION: (
        frozenset({DocumentStatus.PENDING}), DocumentStatus.UNDER_REVIEW
    ),
}


class AuditLogError(PortalError):
    """The event history of a document is not a valid lifecycle"""
    status_code = 500
    code = "AUDIT_LOG_INCONSISTENT"
    message = "Document history is inconsistent"


class VerificationAuditLog:
    """Append-only record of document lifecycle events.

    ``record`` only adds the row to the session; committing is left to the
    caller so the event lands in the same transaction as the change it
    describes.
    """

    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        document: Document,
        action: VerificationAction,
        previous_status: DocumentStatus,
        new_status: DocumentStatus,
        verifier_id: Optional[int] = None,
        comments: Optional[str] = None,
    ) -> VerificationEvent:
        event = VerificationEvent(
            document_id=document.id,
            intern_id=document.intern_id,
            verifier_id=verifier_id,
            action=action,
            previous_status=previous_status,
            new_status=new_status,
            comments=comments,
        )
        self.session.add(event)
        self.session.flush()
        return event

    def history(self, document_id: int) -> List[VerificationEvent]:
        return (
            self.session.query(VerificationEvent)
            .filter(VerificationEvent.document_id == document_id)
            .order_by(VerificationEvent.created_at, VerificationEvent.id)
            .all()
        )

    def latest(self, document_id: int) -> Optional[VerificationEvent]:
        return (
            self.session.query(VerificationEvent)
            .filter(VerificationEvent.document_id == document_id)
            .order_by(VerificationEvent.created_at.desc(), VerificationEvent.id.desc())
            .first()
        )

    @staticmethod
    def replay(events: Iterable[VerificationEvent]) -> DocumentStatus:
        """Rebuild a document's status from its ordered events."""
        status = None
        for event in events:
            if status is None:
                if event.action != VerificationAction.UPLOAD:
                    raise AuditLogError(f"History starts with '{event.action.value}' instead of 'upload'")
                status = DocumentStatus.PENDING
            elif event.action == VerificationAction.UPLOAD:
                raise AuditLogError("Upload recorded twice for the same document")
            else:
                if event.previous_status != status:
                    raise AuditLogError(
                        f"Event {event.id} starts from '{event.previous_status.value}', "
                        f"lifecycle is at '{status.value}'"
                    )
                if event.action != VerificationAction.DELETE:
                    allowed_from, target = TRANSITIONS[event.action]
                    if status not in allowed_from:
                        raise AuditLogError(
                            f"'{event.action.value}' is not valid from '{status.value}'"
                        )
                    status = target

            if event.new_status != status:
                raise AuditLogError(
                    f"Event {event.id} says '{event.new_status.value}', lifecycle says '{status.value}'"
                )

        if status is None:
            raise AuditLogError("Document has no recorded events")
        return status
