from .audit_log import VerificationAuditLog, AuditLogError, TRANSITIONS
from .cleanup import purge_deleted_documents
from .document_service import DocumentService
from .lifecycle_service import DocumentLifecycleManager

__all__ = [
    'VerificationAuditLog', 'AuditLogError', 'TRANSITIONS',
    'purge_deleted_documents', 'DocumentService', 'DocumentLifecycleManager'
]
