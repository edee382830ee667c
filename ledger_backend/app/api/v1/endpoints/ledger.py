"""
Ledger API Endpoints.

Payments, movements and the ledger read model of one account.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from ledger_backend.app.core.config import Settings
from ledger_backend.app.core.dependencies import get_ledger_query, get_ledger_service, get_settings
from ledger_backend.app.domain.ledger.balance import from_signed
from ledger_backend.app.domain.ledger.ledger_query import LedgerQueryService
from ledger_backend.app.domain.ledger.ledger_service import LedgerService
from ledger_backend.app.schemas.common import ERROR_RESPONSES, Envelope
from ledger_backend.app.schemas.ledger import (
    BalanceResponse, LedgerEntryResponse, MovementCreate, PaymentCreate, PaymentResponse,
    RecordedPaymentResponse
)

router = APIRouter(prefix="/accounts/{account_id}", tags=["Ledger"], responses=ERROR_RESPONSES)


@router.post("/payments", response_model=Envelope[RecordedPaymentResponse], status_code=status.HTTP_201_CREATED)
async def record_payment(
    payment_data: PaymentCreate,
    account_id: int = Path(..., description="Account ID"),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Record a payment.

    Payment, ledger entry and account balance are written in one transaction.
    """
    receipt = await service.record_payment(
        account_id,
        payment_data.amount,
        payment_data.date,
        payment_data.method,
        reference=payment_data.reference,
        note=payment_data.note
    )
    data = RecordedPaymentResponse(
        **PaymentResponse.model_validate(receipt.payment).model_dump(),
        ledger_entry_id=receipt.entry.id,
        balance_after=float(receipt.balance_after)
    )
    return Envelope(data=data, message="Payment recorded successfully")


@router.get("/payments", response_model=Envelope[List[PaymentResponse]])
async def list_payments(
    account_id: int = Path(..., description="Account ID"),
    query: LedgerQueryService = Depends(get_ledger_query)
):
    """
    Payments of an account, most recent first.
    """
    payments = await query.list_payments(account_id)
    return Envelope(data=[PaymentResponse.model_validate(payment) for payment in payments])


@router.post("/ledger", response_model=Envelope[LedgerEntryResponse], status_code=status.HTTP_201_CREATED)
async def post_movement(
    movement: MovementCreate,
    account_id: int = Path(..., description="Account ID"),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Post a purchase (supplier), sale (client) or return.
    """
    entry = await service.post_movement(
        account_id,
        movement.type,
        movement.amount,
        movement.date,
        reference=movement.reference,
        description=movement.description
    )
    return Envelope(data=LedgerEntryResponse.model_validate(entry), message="Ledger entry recorded successfully")


@router.get("/ledger", response_model=Envelope[List[LedgerEntryResponse]])
async def get_ledger(
    account_id: int = Path(..., description="Account ID"),
    date_from: Optional[date] = Query(None, description="Inclusive lower bound"),
    date_to: Optional[date] = Query(None, description="Inclusive upper bound"),
    q: Optional[str] = Query(None, max_length=100, description="Matches reference or description"),
    query: LedgerQueryService = Depends(get_ledger_query)
):
    """
    Ledger (situation) of an account, oldest entry first.
    """
    entries = await query.list_entries(account_id, date_from=date_from, date_to=date_to, text=q)
    return Envelope(data=[LedgerEntryResponse.model_validate(entry) for entry in entries])


@router.get("/balance", response_model=Envelope[BalanceResponse])
async def get_balance(
    account_id: int = Path(..., description="Account ID"),
    query: LedgerQueryService = Depends(get_ledger_query),
    settings: Settings = Depends(get_settings)
):
    """
    Current signed balance, with the stored and ledger-derived values side by side.
    """
    check = await query.reconcile(account_id)
    _, sign = from_signed(check.current)
    return Envelope(data=BalanceResponse(
        account_id=check.account_id,
        balance=float(check.current),
        balance_sign=sign,
        stored_balance=float(check.stored),
        ledger_balance=None if check.ledger is None else float(check.ledger),
        consistent=check.consistent,
        currency=settings.default_currency
    ))
