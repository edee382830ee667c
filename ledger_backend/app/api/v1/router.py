"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from ledger_backend.app.api.v1.endpoints import accounts, ledger

router = APIRouter()

# Supplier and client accounts
router.include_router(accounts.router)

# Payments, movements and ledger reads
router.include_router(ledger.router)
