"""
Account API Endpoints.

Supplier and client accounts; creation seeds the opening balance.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from ledger_backend.app.core.config import Settings
from ledger_backend.app.core.dependencies import get_account_service, get_settings
from ledger_backend.app.domain.ledger.account_service import AccountService
from ledger_backend.app.models.ledger_enums import AccountKind, AccountStatus
from ledger_backend.app.schemas.account import AccountCreate, AccountResponse, AccountSummaryResponse
from ledger_backend.app.schemas.common import ERROR_RESPONSES, Envelope

router = APIRouter(prefix="/accounts", tags=["Accounts"], responses=ERROR_RESPONSES)


@router.post("", response_model=Envelope[AccountResponse], status_code=status.HTTP_201_CREATED)
async def create_account(
    account_data: AccountCreate,
    service: AccountService = Depends(get_account_service)
):
    """
    Create a supplier or client account.

    A non-zero opening balance also writes the account's first ledger entry.
    """
    account = await service.create_account(
        account_data.kind,
        account_data.attributes(),
        opening_balance=account_data.opening_balance,
        opening_sign=account_data.opening_sign,
        opening_date=account_data.opening_date
    )
    return Envelope(data=AccountResponse.model_validate(account), message="Account created successfully")


@router.get("", response_model=Envelope[List[AccountResponse]])
async def list_accounts(
    kind: Optional[AccountKind] = Query(None, description="supplier or client"),
    account_status: Optional[AccountStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100, description="Matches name or code"),
    service: AccountService = Depends(get_account_service)
):
    """
    List accounts ordered by name, each with its signed balance.
    """
    accounts = await service.list_accounts(kind=kind, status=account_status, search=search)
    return Envelope(data=[AccountResponse.model_validate(account) for account in accounts])


@router.get("/summary", response_model=Envelope[AccountSummaryResponse])
async def get_summary(
    service: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_settings)
):
    """
    Client debt and supplier debt totals.
    """
    summary = await service.balance_summary()
    return Envelope(data=AccountSummaryResponse(
        client_count=summary.client_count,
        supplier_count=summary.supplier_count,
        client_debt=float(summary.client_debt),
        supplier_debt=float(summary.supplier_debt),
        currency=settings.default_currency
    ))


@router.get("/{account_id}", response_model=Envelope[AccountResponse])
async def get_account(
    account_id: int = Path(..., description="Account ID"),
    service: AccountService = Depends(get_account_service)
):
    account = await service.get_account(account_id)
    return Envelope(data=AccountResponse.model_validate(account))


@router.delete("/{account_id}", response_model=Envelope)
async def delete_account(
    account_id: int = Path(..., description="Account ID"),
    service: AccountService = Depends(get_account_service)
):
    """
    Delete an account with its payments and ledger entries.
    """
    await service.delete_account(account_id)
    return Envelope(message="Account deleted successfully")
