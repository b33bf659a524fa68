"""Repository Protocol for the append-only trading ledger.

There is deliberately no update or delete operation on this Protocol.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_ledger.domain.models import LedgerEntry


class LedgerRepositoryProtocol(Protocol):
    async def append(self, db: AsyncSession, entry: LedgerEntry) -> LedgerEntry:
        """Insert one entry. Raises DuplicateTxHashError if tx_hash is taken."""
        ...

    async def list_entries(self, db: AsyncSession) -> list[LedgerEntry]:
        """All entries, newest timestamp first."""
        ...
