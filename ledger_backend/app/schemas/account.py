"""
Account Pydantic schemas.

Defines request and response models for supplier and client accounts.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional
from ledger_backend.app.models.ledger_enums import AccountKind, AccountStatus, BalanceSign


class AccountCreate(BaseModel):
    """Schema for creating a supplier or client account."""
    kind: AccountKind
    code: str = Field(..., min_length=1, max_length=50, description="Business code, unique per kind")
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    status: Optional[AccountStatus] = None
    opening_balance: float = Field(0, ge=0, description="Magnitude of the opening balance")
    opening_sign: BalanceSign = BalanceSign.CREDIT
    opening_date: Optional[date] = None

    def attributes(self) -> dict:
        return self.model_dump(
            include={"code", "name", "phone", "email", "address", "status"},
            exclude_none=True
        )


class AccountResponse(BaseModel):
    """Schema for account response."""
    id: int
    kind: AccountKind
    code: str
    name: str
    phone: Optional[str]
    email: Optional[str]
    address: Optional[str]
    status: AccountStatus
    balance_magnitude: float
    balance_sign: BalanceSign
    signed_balance: float
    total_paid: float
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AccountSummaryResponse(BaseModel):
    """Outstanding balances across all accounts."""
    client_count: int
    supplier_count: int
    client_debt: float
    supplier_debt: float
    currency: str
