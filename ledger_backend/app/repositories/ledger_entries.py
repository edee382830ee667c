"""
Ledger store.

Append-only: no update or delete.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_backend.app.models.ledger_entry import LedgerEntry

# Chronological order; id breaks ties between entries created in the same instant
CHRONOLOGICAL = (LedgerEntry.date.asc(), LedgerEntry.created_at.asc(), LedgerEntry.id.asc())
REVERSE_CHRONOLOGICAL = (LedgerEntry.date.desc(), LedgerEntry.created_at.desc(), LedgerEntry.id.desc())


class LedgerRepository:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, entry: LedgerEntry) -> LedgerEntry:
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def latest(self, account_id: int) -> Optional[LedgerEntry]:
        result = await self.session.execute(
            select(LedgerEntry)
            .where(LedgerEntry.account_id == account_id)
            .order_by(*REVERSE_CHRONOLOGICAL)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_for_account(
        self,
        account_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        text: Optional[str] = None
    ) -> List[LedgerEntry]:
        """
        Entries of one account in chronological order.

        Args:
            date_from: inclusive lower bound on the entry date
            date_to: inclusive upper bound on the entry date
            text: case-insensitive match on reference or description
        """
        query = select(LedgerEntry).where(LedgerEntry.account_id == account_id)
        if date_from is not None:
            query = query.where(LedgerEntry.date >= date_from)
        if date_to is not None:
            query = query.where(LedgerEntry.date <= date_to)
        if text:
            pattern = f"%{text}%"
            query = query.where(or_(
                LedgerEntry.reference.ilike(pattern),
                LedgerEntry.description.ilike(pattern)
            ))

        result = await self.session.execute(query.order_by(*CHRONOLOGICAL))
        return list(result.scalars().all())
