"""Unit tests for cx_inventory: service with mock repos, repository with a mock session."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.cx_common.errors import (
    InsufficientInventoryError,
    InvalidIssueAmountError,
    ListingNotFoundError,
)
from src.cx_inventory.application.service import InventoryApplicationService
from src.cx_inventory.domain.models import CreditListing
from src.cx_inventory.infrastructure.persistence import ListingRepository
from src.cx_registry.domain.models import Project

from test_holdings_service import World, _listing


def _make_listing(available: int = 0) -> CreditListing:
    return CreditListing(
        id="L-1",
        project_id="L-1",
        project_name="Amazon Restore",
        project_type="REFORESTATION",
        country="Brazil",
        vintage_year=2024,
        unit_price_cents=3600,
        integrity_score=92,
        additionality_score=98,
        permanence_score=85,
        mrv_score=90,
        corresponding_adjustment=False,
        available_tons=available,
        created_at=datetime.now(UTC),
        updated_at=datetime.now(UTC),
    )


def _make_listing_row(available: int = 1000) -> MagicMock:
    row = MagicMock()
    for field, value in vars(_make_listing(available)).items():
        setattr(row, field, value)
    return row


def _result(row: object) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    return result


class TestIssue:
    async def test_issue_increases_and_notifies_owner(self) -> None:
        repo = AsyncMock()
        repo.increase_available.return_value = _make_listing(available=1000)
        projects = AsyncMock()
        projects.get_project_by_id.return_value = Project(
            id="L-1",
            name="Amazon Restore",
            project_type="REFORESTATION",
            country="Brazil",
            vintage_year=2024,
            requested_tons=50000,
            methodology="VM0047",
            owner_id="owner-1",
            status="VERIFIED",
        )
        notifications = AsyncMock()
        notifications.notify.return_value = None
        db = AsyncMock()
        svc = InventoryApplicationService(repo=repo, projects=projects, notifications=notifications)

        result = await svc.issue(db, "L-1", 1000)

        assert result.issued_tons == 1000
        assert result.listing.available_tons == 1000
        assert result.listing.unit_price_display == "$36.00"
        assert result.warnings == []
        db.commit.assert_awaited_once()
        assert notifications.notify.call_args.args[1] == "owner-1"

    async def test_issue_unknown_listing(self) -> None:
        repo = AsyncMock()
        repo.increase_available.side_effect = ListingNotFoundError("L-x")
        db = AsyncMock()
        svc = InventoryApplicationService(repo=repo, projects=AsyncMock(), notifications=AsyncMock())

        with pytest.raises(ListingNotFoundError):
            await svc.issue(db, "L-x", 100)
        db.rollback.assert_awaited_once()

    @pytest.mark.parametrize("amount", [0, -5])
    async def test_non_positive_amount(self, amount: int) -> None:
        repo = AsyncMock()
        svc = InventoryApplicationService(repo=repo, projects=AsyncMock(), notifications=AsyncMock())
        with pytest.raises(InvalidIssueAmountError):
            await svc.issue(AsyncMock(), "L-1", amount)
        repo.increase_available.assert_not_awaited()

    async def test_notification_warning_is_surfaced(self) -> None:
        repo = AsyncMock()
        repo.increase_available.return_value = _make_listing(available=100)
        projects = AsyncMock()
        projects.get_project_by_id.return_value = Project(
            id="L-1", name="n", project_type="WIND", country="c", vintage_year=2024,
            requested_tons=1, methodology="m", owner_id="o", status="VERIFIED",
        )
        notifications = AsyncMock()
        notifications.notify.return_value = "notify o: boom"
        svc = InventoryApplicationService(repo=repo, projects=projects, notifications=notifications)

        result = await svc.issue(AsyncMock(), "L-1", 100)

        assert result.warnings == ["notify o: boom"]


class TestListingReads:
    async def test_get_missing_listing(self) -> None:
        repo = AsyncMock()
        repo.get_listing_by_id.return_value = None
        svc = InventoryApplicationService(repo=repo, projects=AsyncMock(), notifications=AsyncMock())
        with pytest.raises(ListingNotFoundError):
            await svc.get_listing(AsyncMock(), "L-x")


class TestDecrementForSale:
    async def test_returns_updated_listing(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(return_value=_result(_make_listing_row(available=500)))

        listing = await ListingRepository().decrement_for_sale(db, "L-1", 500)

        assert listing.available_tons == 500
        params = db.execute.call_args.args[1]
        assert params == {"listing_id": "L-1", "amount": 500}

    async def test_insufficient(self) -> None:
        avail = MagicMock()
        avail.available_tons = 300
        db = MagicMock()
        db.execute = AsyncMock(side_effect=[_result(None), _result(avail)])

        with pytest.raises(InsufficientInventoryError) as exc_info:
            await ListingRepository().decrement_for_sale(db, "L-1", 500)
        assert "300" in exc_info.value.message

    async def test_missing_listing(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(side_effect=[_result(None), _result(None)])

        with pytest.raises(ListingNotFoundError):
            await ListingRepository().decrement_for_sale(db, "L-x", 100)


class TestIncreaseAvailable:
    async def test_missing_listing(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(return_value=_result(None))
        with pytest.raises(ListingNotFoundError):
            await ListingRepository().increase_available(db, "L-x", 100)


class TestAvailableNeverNegative:
    async def test_issue_then_oversold_checkout(self) -> None:
        world = World(_listing(available=0))
        inventory = InventoryApplicationService(
            repo=world.listings,
            projects=AsyncMock(get_project_by_id=AsyncMock(return_value=None)),
            notifications=AsyncMock(),
        )
        listing = world.listings.listings["L-1"]

        await inventory.issue(world.db, "L-1", 300)
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 300)
        await world.svc.add_to_cart(world.db, "buyer-2", "L-1", 300)
        first = await world.svc.purchase(world.db, "buyer-1")
        assert listing.available_tons == 0
        assert first.inventory_settled == 1

        second = await world.svc.purchase(world.db, "buyer-2")
        assert listing.available_tons == 0
        assert second.inventory_settled == 0
        assert len(second.warnings) == 1
        assert "inventory decrement" in second.warnings[0]
        assert len(world.listings.settlements) == 1

        await inventory.issue(world.db, "L-1", 200)
        assert listing.available_tons == 200
