"""
Payment database model.

One row per settlement action against an account.
"""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from ledger_backend.app.db.session import Base
from ledger_backend.app.models.account import utcnow


class Payment(Base):
    """
    Payment model.

    Written only together with its ``payment`` ledger entry and never
    updated afterwards.
    """
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Numeric(14, 2), nullable=False)
    date = Column(Date, nullable=False)
    method = Column(String(50), nullable=False)  # e.g. "cash", "cheque", "transfer"
    reference = Column(String(100), nullable=True)  # Cheque number, transfer id etc.
    note = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    account = relationship("Account", back_populates="payments")
    ledger_entry = relationship("LedgerEntry", back_populates="payment", uselist=False)

    def __repr__(self):
        return f"<Payment(id={self.id}, account_id={self.account_id}, amount={self.amount}, method='{self.method}')>"
