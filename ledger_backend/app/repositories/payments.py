"""
Payment store.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_backend.app.models.payment import Payment


class PaymentRepository:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, payment: Payment) -> Payment:
        self.session.add(payment)
        await self.session.flush()  # To get payment.id for the ledger entry
        return payment

    async def list_for_account(self, account_id: int) -> List[Payment]:
        """Most recent first."""
        result = await self.session.execute(
            select(Payment)
            .where(Payment.account_id == account_id)
            .order_by(Payment.date.desc(), Payment.created_at.desc(), Payment.id.desc())
        )
        return list(result.scalars().all())
