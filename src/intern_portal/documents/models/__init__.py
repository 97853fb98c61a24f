from .document import Document, DocumentStatus, DocumentType, TERMINAL_STATUSES
from .verification_event import VerificationEvent, VerificationAction

__all__ = [
    'Document', 'DocumentStatus', 'DocumentType', 'TERMINAL_STATUSES',
    'VerificationEvent', 'VerificationAction'
]
