from .document_schemas import (
    InternSummary, VerificationEventResponse, DocumentResponse, DocumentWithInternResponse,
    DocumentSummaryResponse, DocumentWithHistoryResponse, DocumentUploadResponse,
    StatusUpdateRequest, StatusUpdateResponse, MyDocumentsResponse, InternDocumentsResponse,
    DocumentListResponse, DocumentHistoryResponse, DocumentStatsResponse,
    PurgeRequest, PurgeResponse
)

__all__ = [
    'InternSummary', 'VerificationEventResponse', 'DocumentResponse', 'DocumentWithInternResponse',
    'DocumentSummaryResponse', 'DocumentWithHistoryResponse', 'DocumentUploadResponse',
    'StatusUpdateRequest', 'StatusUpdateResponse', 'MyDocumentsResponse', 'InternDocumentsResponse',
    'DocumentListResponse', 'DocumentHistoryResponse', 'DocumentStatsResponse',
    'PurgeRequest', 'PurgeResponse'
]
