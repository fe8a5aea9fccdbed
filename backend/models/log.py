from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from database import Base

# Audit trail of admin actions and kiosk withdrawals
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    admin_id = Column(Integer, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(50), index=True)
    resource = Column(String(50), index=True)
    status = Column(String(20), index=True)
    ip = Column(String(64), nullable=True)

    # Free-form context (ids, quantities, reasons)
    meta = Column(JSON, nullable=True)
