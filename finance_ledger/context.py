"""
Caller context passed explicitly into every ledger operation.

The ledger never reads a "current company" or "current user"
from request-scoped globals; whoever calls it says who it is
acting for.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LedgerContext:
    company_id: int
    user_id: int | None = None
