"""
Request-scoped dependencies shared by the routers.

The tenant and acting user come from request headers and are
handed to the services as an explicit LedgerContext.
"""

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from finance_ledger.context import LedgerContext
from finance_ledger.models.base import get_db
from finance_ledger.unit_of_work import UnitOfWork


def get_ledger_context(
    x_company_id: int = Header(...),
    x_user_id: int | None = Header(default=None),
) -> LedgerContext:
    return LedgerContext(company_id=x_company_id, user_id=x_user_id)


def get_uow(db: Session = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(db)
