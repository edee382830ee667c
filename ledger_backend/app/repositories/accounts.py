"""
Account store.

Typed access to the ``accounts`` table. Methods flush but never commit;
the unit of work that owns the session decides.
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_backend.app.models.account import Account
from ledger_backend.app.models.ledger_enums import AccountKind, AccountStatus, BalanceSign


class AccountRepository:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, account_id: int) -> Optional[Account]:
        result = await self.session.execute(select(Account).where(Account.id == account_id))
        return result.scalar_one_or_none()

    async def list(
        self,
        kind: Optional[AccountKind] = None,
        status: Optional[AccountStatus] = None,
        search: Optional[str] = None
    ) -> List[Account]:
        """Accounts ordered by name, optionally filtered; ``search`` matches name or code."""
        query = select(Account)
        if kind is not None:
            query = query.where(Account.kind == kind)
        if status is not None:
            query = query.where(Account.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Account.name.ilike(pattern), Account.code.ilike(pattern)))

        result = await self.session.execute(query.order_by(Account.name.asc(), Account.id.asc()))
        return list(result.scalars().all())

    async def count(self, kind: AccountKind) -> int:
        result = await self.session.execute(
            select(func.count(Account.id)).where(Account.kind == kind)
        )
        return result.scalar_one()

    async def total_magnitude(self, kind: AccountKind, sign: BalanceSign) -> Decimal:
        """Sum of balance magnitudes of one kind on one side."""
        result = await self.session.execute(
            select(func.coalesce(func.sum(Account.balance_magnitude), 0))
            .where(Account.kind == kind, Account.balance_sign == sign)
        )
        return Decimal(str(result.scalar_one()))

    async def add(self, account: Account) -> Account:
        self.session.add(account)
        await self.session.flush()  # Raises IntegrityError on a duplicate code
        return account

    async def update_balance(
        self,
        account: Account,
        magnitude: Decimal,
        sign: BalanceSign,
        total_paid: Optional[Decimal] = None
    ) -> Account:
        account.balance_magnitude = magnitude
        account.balance_sign = sign
        if total_paid is not None:
            account.total_paid = total_paid
        await self.session.flush()
        return account

    async def delete(self, account: Account) -> None:
        await self.session.delete(account)
        await self.session.flush()
