"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock or in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_inventory.domain.models import CreditListing


class ListingRepositoryProtocol(Protocol):
    async def create_listing(
        self, db: AsyncSession, listing: CreditListing
    ) -> CreditListing: ...

    async def get_listing_by_id(
        self, db: AsyncSession, listing_id: str
    ) -> CreditListing | None: ...

    async def list_listings(
        self, db: AsyncSession, available_only: bool
    ) -> list[CreditListing]: ...

    async def increase_available(
        self, db: AsyncSession, listing_id: str, amount: int
    ) -> CreditListing:
        """Raises ListingNotFoundError when the listing does not exist."""
        ...

    async def decrement_for_sale(
        self, db: AsyncSession, listing_id: str, amount: int
    ) -> CreditListing:
        """Atomic compare-and-decrement.

        Raises ListingNotFoundError or InsufficientInventoryError; never leaves
        available_tons negative.
        """
        ...

    async def record_settlement(
        self, db: AsyncSession, portfolio_item_id: str, listing_id: str, tons: int
    ) -> None:
        """Mark a purchase as reflected in inventory (same transaction as the decrement)."""
        ...
