"""InventoryApplicationService — issuance and listing reads.

Sales go through ListingRepository.decrement_for_sale directly from the
holdings saga; this service only grows supply.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.errors import InvalidIssueAmountError, ListingNotFoundError
from src.cx_inventory.application.schemas import IssueResponse, ListingOut
from src.cx_inventory.domain.repository import ListingRepositoryProtocol
from src.cx_inventory.infrastructure.persistence import ListingRepository
from src.cx_notification.application.service import NotificationService
from src.cx_registry.domain.repository import ProjectRepositoryProtocol
from src.cx_registry.infrastructure.persistence import ProjectRepository

logger = logging.getLogger(__name__)


class InventoryApplicationService:
    def __init__(
        self,
        repo: ListingRepositoryProtocol | None = None,
        projects: ProjectRepositoryProtocol | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()
        self._projects: ProjectRepositoryProtocol = projects or ProjectRepository()
        self._notifications = notifications or NotificationService()

    async def get_listing(self, db: AsyncSession, listing_id: str) -> ListingOut:
        listing = await self._repo.get_listing_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return ListingOut.from_domain(listing)

    async def list_listings(
        self, db: AsyncSession, available_only: bool
    ) -> list[ListingOut]:
        listings = await self._repo.list_listings(db, available_only)
        return [ListingOut.from_domain(listing) for listing in listings]

    async def issue(
        self, db: AsyncSession, listing_id: str, amount: int
    ) -> IssueResponse:
        if amount <= 0:
            raise InvalidIssueAmountError(amount)
        try:
            listing = await self._repo.increase_available(db, listing_id, amount)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Issued %d t to listing %s (available=%d)",
            amount, listing_id, listing.available_tons,
        )

        warnings: list[str] = []
        project = await self._projects.get_project_by_id(db, listing.project_id)
        if project is not None:
            warning = await self._notifications.notify(
                db,
                project.owner_id,
                "Credits issued to your project",
                f'{amount:,} tCO2e have been issued to "{project.name}" and are '
                "now available on the marketplace.",
                "/developer/projects",
            )
            if warning:
                warnings.append(warning)

        return IssueResponse(
            listing=ListingOut.from_domain(listing),
            issued_tons=amount,
            warnings=warnings,
        )
