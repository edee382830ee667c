"""
Ledger and payment schemas.
"""

from pydantic import AliasChoices, BaseModel, Field
from datetime import date as Date, datetime
from typing import Optional
from ledger_backend.app.models.ledger_enums import BalanceSign, LedgerEntryType


class PaymentCreate(BaseModel):
    """Schema for recording a payment."""
    amount: float = Field(..., gt=0)
    date: Date
    method: str = Field(..., min_length=1, max_length=50)
    reference: Optional[str] = Field(None, max_length=100)
    note: Optional[str] = None


class PaymentResponse(BaseModel):
    """Schema for displaying a payment."""
    id: int
    account_id: int
    amount: float
    date: Date
    method: str
    reference: Optional[str]
    note: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class RecordedPaymentResponse(PaymentResponse):
    """Payment plus the ledger entry written with it."""
    ledger_entry_id: int
    balance_after: float


class MovementCreate(BaseModel):
    """Schema for posting a purchase, sale or return."""
    type: LedgerEntryType
    amount: float = Field(..., gt=0)
    date: Date
    reference: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=255)


class LedgerEntryResponse(BaseModel):
    """Schema for displaying a ledger entry."""
    id: int
    account_id: int
    type: LedgerEntryType = Field(validation_alias=AliasChoices("type", "entry_type"))
    date: Date
    debit: float
    credit: float
    amount: float
    balance_after: float
    reference: Optional[str]
    description: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class BalanceResponse(BaseModel):
    """Current balance of an account and whether both sources agree."""
    account_id: int
    balance: float
    balance_sign: BalanceSign
    stored_balance: float
    ledger_balance: Optional[float]
    consistent: bool
    currency: str
