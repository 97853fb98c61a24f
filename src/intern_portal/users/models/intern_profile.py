from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from intern_portal.database import Base


class InternProfile(Base):
    __tablename__ = 'intern_profiles'

    intern_id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), unique=True, nullable=True)

    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    nationality = Column(String, nullable=True)
    gender = Column(String, nullable=True)
    birthdate = Column(Date, nullable=True)
    phone = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="intern_profile")
    documents = relationship("Document", back_populates="intern", order_by="Document.created_at.desc()")
