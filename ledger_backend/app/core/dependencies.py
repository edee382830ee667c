"""
Service dependencies for FastAPI.

Services are built per request around the process-wide Database handle
opened by the application lifespan.
"""

from fastapi import Depends, Request

from ledger_backend.app.core.config import Settings
from ledger_backend.app.db.session import Database, get_database
from ledger_backend.app.domain.ledger.account_service import AccountService
from ledger_backend.app.domain.ledger.ledger_query import LedgerQueryService
from ledger_backend.app.domain.ledger.ledger_service import LedgerService


def get_account_service(database: Database = Depends(get_database)) -> AccountService:
    return AccountService(database)


def get_ledger_service(database: Database = Depends(get_database)) -> LedgerService:
    return LedgerService(database)


def get_ledger_query(database: Database = Depends(get_database)) -> LedgerQueryService:
    return LedgerQueryService(database)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
