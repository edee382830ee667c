"""
Account Service.

Creates supplier and client accounts, seeding the ledger with the opening
balance in the same transaction as the account insert.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, Optional

from ledger_backend.app.core.exceptions import AccountNotFoundError, ValidationError
from ledger_backend.app.db.session import Database
from ledger_backend.app.domain.ledger.balance import CENT, ZERO, normalize_amount, split_delta, to_signed
from ledger_backend.app.domain.ledger.ledger_service import require_date, require_text
from ledger_backend.app.domain.ledger.transaction import atomic
from ledger_backend.app.models.account import Account
from ledger_backend.app.models.ledger_entry import LedgerEntry
from ledger_backend.app.models.ledger_enums import AccountKind, AccountStatus, BalanceSign, LedgerEntryType
from ledger_backend.app.repositories.accounts import AccountRepository
from ledger_backend.app.repositories.ledger_entries import LedgerRepository

logger = logging.getLogger(__name__)

ACCOUNT_ATTRIBUTES = ("code", "name", "phone", "email", "address", "status")
OPENING_BALANCE_DESCRIPTION = "Opening balance"


@dataclass(frozen=True)
class BalanceSummary:
    """Outstanding balances across all accounts."""
    client_count: int
    supplier_count: int
    client_debt: Decimal  # what clients owe us
    supplier_debt: Decimal  # what we owe suppliers


def _opening_magnitude(raw: Any) -> Decimal:
    if raw is None:
        return ZERO
    try:
        if Decimal(str(raw)) == 0:
            return ZERO
    except ArithmeticError:
        pass
    # Anything else must be a proper positive amount
    return normalize_amount(raw)


class AccountService:

    def __init__(self, database: Database):
        self.database = database

    async def create_account(
        self,
        kind: AccountKind,
        attributes: Mapping[str, Any],
        opening_balance: Any = ZERO,
        opening_sign: BalanceSign = BalanceSign.CREDIT,
        opening_date: Optional[date] = None
    ) -> Account:
        """
        Create an account, optionally with an opening balance.

        A non-zero opening balance is written both to the account row and as
        one ``initial_balance`` ledger entry; the two commit together or not
        at all.

        Args:
            kind: supplier or client
            attributes: code, name and optional phone, email, address, status
            opening_balance: magnitude of the opening balance (>= 0)
            opening_sign: side of the opening balance
            opening_date: date of the opening entry, defaults to today

        Raises:
            ValidationError: missing/unknown attributes, bad opening balance
            ConstraintViolationError: duplicate code for this kind (DUPLICATE_ENTRY)
        """
        kind = AccountKind(kind)
        opening_sign = BalanceSign(opening_sign)
        values = self._validate_attributes(attributes)
        magnitude = _opening_magnitude(opening_balance)
        entry_date = require_date(opening_date or date.today(), "opening_date")

        async with atomic(self.database, "create_account", kind=kind.value, code=values["code"]) as session:
            accounts = AccountRepository(session)
            ledger = LedgerRepository(session)

            account = await accounts.add(Account(
                kind=kind,
                balance_magnitude=magnitude,
                balance_sign=opening_sign,
                total_paid=ZERO,
                **values
            ))

            if magnitude != 0:
                signed = to_signed(magnitude, opening_sign)
                debit, credit = split_delta(signed)
                await ledger.add(LedgerEntry(
                    account_id=account.id,
                    entry_type=LedgerEntryType.INITIAL_BALANCE,
                    date=entry_date,
                    amount=magnitude,
                    debit=debit,
                    credit=credit,
                    balance_after=signed,
                    description=OPENING_BALANCE_DESCRIPTION
                ))

        logger.info(
            "%s account %s created (code=%s, opening=%s %s)",
            kind.value, account.id, account.code, magnitude, opening_sign.value
        )
        return account

    async def get_account(self, account_id: int) -> Account:
        async with self.database.session() as session:
            account = await AccountRepository(session).get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def list_accounts(
        self,
        kind: Optional[AccountKind] = None,
        status: Optional[AccountStatus] = None,
        search: Optional[str] = None
    ) -> List[Account]:
        async with self.database.session() as session:
            return await AccountRepository(session).list(kind=kind, status=status, search=search)

    async def delete_account(self, account_id: int) -> None:
        """Delete an account together with its payments and ledger entries."""
        async with atomic(self.database, "delete_account", account_id=account_id) as session:
            accounts = AccountRepository(session)
            account = await accounts.get(account_id)
            if account is None:
                raise AccountNotFoundError(account_id)
            await accounts.delete(account)

        logger.info("Account %s deleted", account_id)

    async def balance_summary(self) -> BalanceSummary:
        """
        Totals for the dashboard.

        Client debt sums the debit balances of clients, supplier debt the
        credit balances of suppliers. Balances on the other side (advances)
        are not netted in.
        """
        async with self.database.session() as session:
            accounts = AccountRepository(session)
            client_count = await accounts.count(AccountKind.CLIENT)
            supplier_count = await accounts.count(AccountKind.SUPPLIER)
            client_debt = await accounts.total_magnitude(AccountKind.CLIENT, BalanceSign.DEBIT)
            supplier_debt = await accounts.total_magnitude(AccountKind.SUPPLIER, BalanceSign.CREDIT)

        return BalanceSummary(
            client_count=client_count,
            supplier_count=supplier_count,
            client_debt=client_debt.quantize(CENT),
            supplier_debt=supplier_debt.quantize(CENT)
        )

    def _validate_attributes(self, attributes: Mapping[str, Any]) -> dict:
        unknown = sorted(set(attributes) - set(ACCOUNT_ATTRIBUTES))
        if unknown:
            raise ValidationError(
                f"Unknown account attributes: {', '.join(unknown)}",
                details={"unknown": unknown}
            )

        errors = {}
        values = {key: attributes.get(key) for key in ACCOUNT_ATTRIBUTES if key in attributes}
        for field, limit in (("code", 50), ("name", 255)):
            try:
                values[field] = require_text(values.get(field), field)
            except ValidationError:
                errors[field] = f"{field} is required"
                continue
            if len(values[field]) > limit:
                errors[field] = f"{field} must be at most {limit} characters"

        if values.get("status") is not None:
            try:
                values["status"] = AccountStatus(values["status"])
            except ValueError:
                errors["status"] = f"status must be one of {', '.join(s.value for s in AccountStatus)}"
        else:
            values.pop("status", None)

        if errors:
            raise ValidationError("Validation failed", details={"errors": errors})
        return values
