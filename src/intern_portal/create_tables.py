import logging

from intern_portal.database import Base, engine
# Models register themselves on Base when imported
from intern_portal.documents.models import Document, VerificationEvent  # noqa: F401
from intern_portal.notifications.models import Notification  # noqa: F401
from intern_portal.users.models import InternProfile, SessionRecord, User  # noqa: F401

logger = logging.getLogger(__name__)


def create_tables(bind=None):
    """Create every table that does not exist yet"""
    bind = bind if bind is not None else engine
    logger.debug("Tables to create: %s", list(Base.metadata.tables.keys()))
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ready")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_tables()
