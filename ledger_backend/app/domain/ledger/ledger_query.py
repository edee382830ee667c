"""
Ledger Query Service.

Read-only views over an account's ledger and payments. Every call opens a
fresh session, so results always reflect the latest committed state.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ledger_backend.app.core.exceptions import AccountNotFoundError
from ledger_backend.app.db.session import Database
from ledger_backend.app.models.account import Account
from ledger_backend.app.models.ledger_entry import LedgerEntry
from ledger_backend.app.models.payment import Payment
from ledger_backend.app.repositories.accounts import AccountRepository
from ledger_backend.app.repositories.ledger_entries import LedgerRepository
from ledger_backend.app.repositories.payments import PaymentRepository


@dataclass(frozen=True)
class BalanceCheck:
    """Stored balance of an account next to the balance its ledger implies."""
    account_id: int
    stored: Decimal
    ledger: Optional[Decimal]  # None when the account has no entries yet

    @property
    def consistent(self) -> bool:
        return self.ledger is None or self.ledger == self.stored

    @property
    def current(self) -> Decimal:
        return self.stored if self.ledger is None else self.ledger


class LedgerQueryService:

    def __init__(self, database: Database):
        self.database = database

    async def list_entries(
        self,
        account_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        text: Optional[str] = None
    ) -> List[LedgerEntry]:
        """Entries in ascending (date, created_at) order."""
        async with self.database.session() as session:
            await self._require_account(session, account_id)
            return await LedgerRepository(session).list_for_account(
                account_id, date_from=date_from, date_to=date_to, text=text
            )

    async def list_payments(self, account_id: int) -> List[Payment]:
        """Payments, most recent first."""
        async with self.database.session() as session:
            await self._require_account(session, account_id)
            return await PaymentRepository(session).list_for_account(account_id)

    async def latest_entry(self, account_id: int) -> Optional[LedgerEntry]:
        async with self.database.session() as session:
            await self._require_account(session, account_id)
            return await LedgerRepository(session).latest(account_id)

    async def current_balance(self, account_id: int) -> Decimal:
        """
        Signed balance of an account.

        The last ledger entry's ``balance_after`` when there is one, otherwise
        the balance stored on the account row.
        """
        return (await self.reconcile(account_id)).current

    async def reconcile(self, account_id: int) -> BalanceCheck:
        """Read both balance sources in one transaction."""
        async with self.database.session() as session:
            account = await self._require_account(session, account_id)
            latest = await LedgerRepository(session).latest(account_id)
        return BalanceCheck(
            account_id=account.id,
            stored=account.signed_balance,
            ledger=None if latest is None else Decimal(latest.balance_after)
        )

    async def _require_account(self, session: AsyncSession, account_id: int) -> Account:
        account = await AccountRepository(session).get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account
