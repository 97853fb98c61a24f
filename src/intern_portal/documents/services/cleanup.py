import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from intern_portal.documents.models.document import Document
from intern_portal.errors import NotFound, StorageError
from intern_portal.storage import BlobStorage

logger = logging.getLogger(__name__)


def purge_deleted_documents(session: Session, storage: BlobStorage, older_than_days: int = 30) -> int:
    """Irreversibly drop stored files of soft-deleted documents.

    Rows and their verification events stay; ``purged_at`` marks the row.
    Returns how many documents were purged.
    """
    cutoff_date = datetime.utcnow() - timedelta(days=older_than_days)

    documents = session.query(Document).filter(
        Document.is_active.is_(False),
        Document.purged_at.is_(None),
        Document.updated_at <= cutoff_date
    ).all()

    purged = 0
    for doc in documents:
        try:
            if storage.exists(doc.file_name):
                storage.delete(doc.file_name)
        except (NotFound, StorageError) as e:
            logger.warning("Error purging %s: %s", doc.file_name, e)
            continue
        doc.purged_at = datetime.utcnow()
        purged += 1

    session.commit()
    logger.info("Purged %d deleted documents older than %d days", purged, older_than_days)
    return purged
