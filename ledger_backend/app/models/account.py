"""
Account database model.

One row per supplier or client, holding the denormalized running balance.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint, Column, DateTime, Enum, Integer, Numeric, String, UniqueConstraint
)
from sqlalchemy.orm import relationship
from ledger_backend.app.db.session import Base
from ledger_backend.app.models.ledger_enums import AccountKind, AccountStatus, BalanceSign


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    """
    Account model.

    The balance is stored as a non-negative magnitude plus a sign flag;
    ``signed_balance`` is the single-number view. Only the ledger service
    writes the balance columns.
    """
    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("kind", "code", name="uq_accounts_kind_code"),
        CheckConstraint("balance_magnitude >= 0", name="ck_accounts_balance_magnitude"),
        CheckConstraint("total_paid >= 0", name="ck_accounts_total_paid"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    kind = Column(Enum(AccountKind), nullable=False, index=True)

    # Business identity
    code = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)
    status = Column(Enum(AccountStatus), default=AccountStatus.ACTIVE, nullable=False)

    # Financials
    balance_magnitude = Column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)
    balance_sign = Column(Enum(BalanceSign), default=BalanceSign.CREDIT, nullable=False)
    total_paid = Column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    ledger_entries = relationship(
        "LedgerEntry",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payments = relationship(
        "Payment",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def signed_balance(self) -> Decimal:
        magnitude = Decimal(self.balance_magnitude or 0)
        return magnitude.copy_negate() if self.balance_sign == BalanceSign.DEBIT else magnitude

    def __repr__(self):
        return f"<Account(id={self.id}, kind='{self.kind.value}', code='{self.code}', balance={self.signed_balance})>"
