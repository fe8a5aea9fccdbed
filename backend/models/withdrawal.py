# backend/models/withdrawal.py
import enum
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, CheckConstraint, func
from database import Base

# Legacy text markers for manual corrections, kept for history consumers
MANUAL_ADJUSTMENT_DESTINATION = "AJUSTE_MANUAL"
MANUAL_ADJUSTMENT_SUPERVISOR = "SISTEMA"


class WithdrawalKind(str, enum.Enum):
    WITHDRAWAL = "WITHDRAWAL"
    MANUAL_ADJUSTMENT = "MANUAL_ADJUSTMENT"


# Append-only audit record of material leaving stock.
# product_id is a logical reference; product name and category are copied at
# creation so history survives product deletion.
class Withdrawal(Base):
    __tablename__ = "retiradas"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("produtos.id", ondelete="SET NULL"), nullable=True, index=True)
    product_name = Column(String, nullable=True)
    product_category = Column(String, nullable=True)

    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    destination = Column(String, nullable=False)
    supervisor = Column(String, nullable=False)

    # Public URLs of the evidence images
    photo_url = Column(String, nullable=True)
    signature_url = Column(String, nullable=True)

    kind = Column(Enum(WithdrawalKind), nullable=False, default=WithdrawalKind.WITHDRAWAL, index=True)
    reason = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
