"""
Ledger Entry database model.

Append-only record of one balance-affecting event on an account.
"""

from decimal import Decimal

from sqlalchemy import (
    CheckConstraint, Column, Date, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String
)
from sqlalchemy.orm import relationship
from ledger_backend.app.db.session import Base
from ledger_backend.app.models.account import utcnow
from ledger_backend.app.models.ledger_enums import LedgerEntryType


class LedgerEntry(Base):
    """
    Ledger Entry model.

    Immutable record of financial movement. ``balance_after`` is the
    account's signed balance once this entry is applied, so for entries in
    ``(date, created_at, id)`` order:
    balance_after[i] == balance_after[i-1] + credit[i] - debit[i].
    NO updates or deletions allowed (rows only disappear with their account).
    """
    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint("debit >= 0", name="ck_ledger_entries_debit"),
        CheckConstraint("credit >= 0", name="ck_ledger_entries_credit"),
        CheckConstraint("debit = 0 OR credit = 0", name="ck_ledger_entries_one_side"),
        Index("ix_ledger_entries_account_order", "account_id", "date", "created_at", "id"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Linkage
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    payment_id = Column(Integer, ForeignKey("payments.id", ondelete="CASCADE"), nullable=True, unique=True)

    # Entry details
    entry_type = Column("type", Enum(LedgerEntryType), nullable=False)
    date = Column(Date, nullable=False)

    # Financials
    amount = Column(Numeric(14, 2), nullable=False)
    debit = Column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)
    credit = Column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)
    balance_after = Column(Numeric(14, 2), nullable=False)
    reference = Column(String(100), nullable=True)
    description = Column(String(255), nullable=True)

    # Timestamps (Immutable - no updated_at)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    account = relationship("Account", back_populates="ledger_entries")
    payment = relationship("Payment", back_populates="ledger_entry")

    def __repr__(self):
        return (
            f"<LedgerEntry(id={self.id}, account_id={self.account_id}, type='{self.entry_type.value}', "
            f"debit={self.debit}, credit={self.credit}, balance_after={self.balance_after})>"
        )
