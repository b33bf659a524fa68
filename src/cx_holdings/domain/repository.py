"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock or in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation. Every operation is
scoped to one buyer.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_holdings.domain.models import CartItem, ClaimRecord, PortfolioItem


class HoldingsRepositoryProtocol(Protocol):
    # --- cart ---
    async def get_cart(self, db: AsyncSession, buyer_id: str) -> list[CartItem]: ...

    async def add_cart_item(self, db: AsyncSession, item: CartItem) -> CartItem | None:
        """Insert a cart line; None if this buyer already has a line for the listing."""
        ...

    async def delete_cart_item(
        self, db: AsyncSession, buyer_id: str, listing_id: str
    ) -> bool: ...

    async def clear_cart(self, db: AsyncSession, buyer_id: str) -> int: ...

    async def take_cart(self, db: AsyncSession, buyer_id: str) -> list[CartItem]:
        """Delete and return every cart line; empty if another checkout got there first."""
        ...

    # --- portfolio ---
    async def create_portfolio_item(
        self, db: AsyncSession, item: PortfolioItem
    ) -> PortfolioItem: ...

    async def list_portfolio(
        self, db: AsyncSession, buyer_id: str
    ) -> list[PortfolioItem]: ...

    async def take_portfolio_item(
        self, db: AsyncSession, buyer_id: str, item_id: str
    ) -> PortfolioItem | None:
        """Delete and return the item; None if it does not exist (or was claimed)."""
        ...

    # --- claim history ---
    async def create_claim_record(
        self, db: AsyncSession, record: ClaimRecord
    ) -> ClaimRecord: ...

    async def list_claims(self, db: AsyncSession, buyer_id: str) -> list[ClaimRecord]: ...
