# backend/models/admin.py
from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base

# Administrator account allowed into the management panel
class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
