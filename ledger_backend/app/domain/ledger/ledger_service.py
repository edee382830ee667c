"""
Ledger Service (Domain Logic).

The only place where account balances change. Each mutation is a single
read-modify-write transaction over the account, payment and ledger stores.
"""

import logging
from dataclasses import dataclass
from datetime import date as date_type
from decimal import Decimal
from typing import Any, Optional

from ledger_backend.app.core.exceptions import AccountNotFoundError, ValidationError
from ledger_backend.app.db.session import Database
from ledger_backend.app.domain.ledger.balance import (
    apply_movement, apply_payment, from_signed, normalize_amount, split_delta
)
from ledger_backend.app.domain.ledger.transaction import atomic
from ledger_backend.app.models.account import Account
from ledger_backend.app.models.ledger_entry import LedgerEntry
from ledger_backend.app.models.ledger_enums import AccountKind, LedgerEntryType
from ledger_backend.app.models.payment import Payment
from ledger_backend.app.repositories.accounts import AccountRepository
from ledger_backend.app.repositories.ledger_entries import LedgerRepository
from ledger_backend.app.repositories.payments import PaymentRepository

logger = logging.getLogger(__name__)

# Movements accepted by post_movement; payments and opening balances have their own paths
MOVEMENT_TYPES = (LedgerEntryType.PURCHASE, LedgerEntryType.SALE, LedgerEntryType.RETURN)


@dataclass(frozen=True)
class PaymentReceipt:
    """Outcome of a recorded payment."""
    payment: Payment
    entry: LedgerEntry

    @property
    def balance_after(self) -> Decimal:
        return self.entry.balance_after


def describe_payment(method: str, note: Optional[str] = None) -> str:
    description = f"Payment {method}"
    if note:
        description += f": {note}"
    return description[:255]


def require_date(value: Any, field: str = "date") -> date_type:
    if isinstance(value, date_type):
        return value
    if isinstance(value, str):
        try:
            return date_type.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError(f"{field} must be an ISO date", details={field: str(value)})


def require_text(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", details={field: "required"})
    return str(value).strip()


class LedgerService:
    """
    Ledger transaction orchestrator.

    Flow of every mutation:
    1. Validate input (nothing touches storage on failure)
    2. Load the account inside the transaction
    3. Compute the new signed balance
    4. Write payment (if any), account balance and ledger entry
    5. Commit, or roll back everything
    """

    def __init__(self, database: Database):
        self.database = database

    async def record_payment(
        self,
        account_id: int,
        amount: Any,
        date: Any,
        method: str,
        reference: Optional[str] = None,
        note: Optional[str] = None
    ) -> PaymentReceipt:
        """
        Record a payment against an account.

        Args:
            account_id: Supplier or client account
            amount: Positive amount; rounded to cents
            date: Payment date (date or ISO string)
            method: Payment method, e.g. "cash" or "cheque"
            reference: Cheque number, transfer id...
            note: Free text, appended to the ledger description

        Returns:
            PaymentReceipt with the payment and its ledger entry

        Raises:
            InvalidAmountError, ValidationError: before any write
            AccountNotFoundError: account id does not resolve; nothing written
            ConstraintViolationError, StorageFailureError: rolled back
        """
        amount = normalize_amount(amount)
        payment_date = require_date(date)
        method = require_text(method, "method")

        async with atomic(self.database, "record_payment", account_id=account_id) as session:
            accounts = AccountRepository(session)
            payments = PaymentRepository(session)
            ledger = LedgerRepository(session)

            account = await self._load_account(accounts, account_id)
            await self._ensure_chronological(ledger, account, payment_date)

            payment = await payments.add(Payment(
                account_id=account.id,
                amount=amount,
                date=payment_date,
                method=method,
                reference=reference,
                note=note
            ))

            current_signed = account.signed_balance
            new_signed = apply_payment(account.kind, current_signed, amount)
            magnitude, sign = from_signed(new_signed)
            total_paid = None
            if account.kind == AccountKind.CLIENT:
                total_paid = Decimal(account.total_paid or 0) + amount
            await accounts.update_balance(account, magnitude, sign, total_paid)

            debit, credit = split_delta(new_signed - current_signed)
            entry = await ledger.add(LedgerEntry(
                account_id=account.id,
                payment_id=payment.id,
                entry_type=LedgerEntryType.PAYMENT,
                date=payment_date,
                amount=amount,
                debit=debit,
                credit=credit,
                balance_after=new_signed,
                reference=reference,
                description=describe_payment(method, note)
            ))

        logger.info(
            "Payment of %s recorded for %s account %s, balance %s -> %s",
            amount, account.kind.value, account.id, current_signed, new_signed
        )
        return PaymentReceipt(payment=payment, entry=entry)

    async def post_movement(
        self,
        account_id: int,
        entry_type: LedgerEntryType,
        amount: Any,
        date: Any,
        reference: Optional[str] = None,
        description: Optional[str] = None
    ) -> LedgerEntry:
        """
        Append a purchase, sale or return entry and move the balance with it.

        Suppliers take purchases and returns, clients take sales and returns.
        """
        try:
            entry_type = LedgerEntryType(entry_type)
        except ValueError:
            raise ValidationError(f"Unknown ledger entry type {entry_type!r}", details={"type": str(entry_type)})
        if entry_type not in MOVEMENT_TYPES:
            raise ValidationError(
                f"{entry_type.value} entries cannot be posted directly",
                details={"type": entry_type.value}
            )
        amount = normalize_amount(amount)
        entry_date = require_date(date)

        async with atomic(self.database, "post_movement", account_id=account_id) as session:
            accounts = AccountRepository(session)
            ledger = LedgerRepository(session)

            account = await self._load_account(accounts, account_id)
            await self._ensure_chronological(ledger, account, entry_date)

            current_signed = account.signed_balance
            new_signed = apply_movement(account.kind, entry_type, current_signed, amount)
            magnitude, sign = from_signed(new_signed)
            await accounts.update_balance(account, magnitude, sign)

            debit, credit = split_delta(new_signed - current_signed)
            entry = await ledger.add(LedgerEntry(
                account_id=account.id,
                entry_type=entry_type,
                date=entry_date,
                amount=amount,
                debit=debit,
                credit=credit,
                balance_after=new_signed,
                reference=reference,
                description=(description or entry_type.value.capitalize())[:255]
            ))

        logger.info(
            "%s of %s posted to %s account %s, balance %s -> %s",
            entry_type.value, amount, account.kind.value, account.id, current_signed, new_signed
        )
        return entry

    async def _load_account(self, accounts: AccountRepository, account_id: int) -> Account:
        account = await accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def _ensure_chronological(self, ledger: LedgerRepository, account: Account, entry_date: date_type):
        # Entries are immutable, so a back-dated entry would break the running balance
        latest = await ledger.latest(account.id)
        if latest is not None and entry_date < latest.date:
            raise ValidationError(
                f"Date {entry_date.isoformat()} is earlier than the latest ledger entry "
                f"({latest.date.isoformat()})",
                details={"date": entry_date.isoformat(), "latest_entry_date": latest.date.isoformat()}
            )
