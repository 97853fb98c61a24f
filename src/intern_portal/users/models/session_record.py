from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from intern_portal.database import Base


class SessionRecord(Base):
    """Login audit row. Written once per successful login, never updated."""
    __tablename__ = 'session_records'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    email = Column(String, nullable=False)
    login_time = Column(DateTime, default=datetime.utcnow, nullable=False)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    session_id = Column(String(32), nullable=False)

    user = relationship("User", back_populates="session_records")
