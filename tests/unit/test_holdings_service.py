"""Unit tests for HoldingsApplicationService against in-memory repositories.

Covers the cart, the purchase saga (authoritative portfolio write followed by
advisory inventory and ledger steps) and claims.
"""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from src.cx_common.errors import (
    CartItemExistsError,
    CartItemNotFoundError,
    EmptyCartError,
    InsufficientInventoryError,
    InvalidLotQuantityError,
    ListingNotFoundError,
    PortfolioItemNotFoundError,
    PurchaseFailedError,
)
from src.cx_holdings.application.service import (
    HoldingsApplicationService,
    default_certificate_id,
    validate_lot,
)
from src.cx_holdings.domain.models import CartItem, ClaimRecord, PortfolioItem
from src.cx_holdings.infrastructure.persistence import HoldingsRepository
from src.cx_inventory.domain.models import CreditListing
from src.cx_ledger.application.service import LedgerApplicationService

from test_ledger_service import InMemoryLedgerRepository


class InMemoryHoldingsRepository:
    def __init__(self) -> None:
        self.cart: dict[tuple[str, str], CartItem] = {}
        self.portfolio: dict[str, PortfolioItem] = {}
        self.claims: list[ClaimRecord] = []
        self._taken: list[CartItem] = []

    async def get_cart(self, db: object, buyer_id: str) -> list[CartItem]:
        return [i for (b, _), i in self.cart.items() if b == buyer_id]

    async def add_cart_item(self, db: object, item: CartItem) -> CartItem | None:
        key = (item.buyer_id, item.listing_id)
        if key in self.cart:
            return None
        self.cart[key] = item
        return item

    async def delete_cart_item(self, db: object, buyer_id: str, listing_id: str) -> bool:
        return self.cart.pop((buyer_id, listing_id), None) is not None

    async def clear_cart(self, db: object, buyer_id: str) -> int:
        keys = [k for k in self.cart if k[0] == buyer_id]
        for k in keys:
            del self.cart[k]
        return len(keys)

    async def take_cart(self, db: object, buyer_id: str) -> list[CartItem]:
        lines = await self.get_cart(db, buyer_id)
        for line in lines:
            del self.cart[(buyer_id, line.listing_id)]
        self._taken = lines
        return lines

    # Wired to the session mock so a rolled-back checkout puts its cart back.
    def commit(self) -> None:
        self._taken = []

    def rollback(self) -> None:
        for line in self._taken:
            self.cart[(line.buyer_id, line.listing_id)] = line
        self._taken = []

    async def create_portfolio_item(self, db: object, item: PortfolioItem) -> PortfolioItem:
        self.portfolio[item.id] = item
        return item

    async def list_portfolio(self, db: object, buyer_id: str) -> list[PortfolioItem]:
        return [i for i in self.portfolio.values() if i.buyer_id == buyer_id]

    async def take_portfolio_item(
        self, db: object, buyer_id: str, item_id: str
    ) -> PortfolioItem | None:
        item = self.portfolio.get(item_id)
        if item is None or item.buyer_id != buyer_id:
            return None
        return self.portfolio.pop(item_id)

    async def create_claim_record(self, db: object, record: ClaimRecord) -> ClaimRecord:
        self.claims.append(record)
        return record

    async def list_claims(self, db: object, buyer_id: str) -> list[ClaimRecord]:
        return [r for r in self.claims if r.buyer_id == buyer_id]


class InMemoryListingRepository:
    def __init__(self, *listings: CreditListing) -> None:
        self.listings = {listing.id: listing for listing in listings}
        self.settlements: dict[str, int] = {}

    async def get_listing_by_id(self, db: object, listing_id: str) -> CreditListing | None:
        return self.listings.get(listing_id)

    async def increase_available(
        self, db: object, listing_id: str, amount: int
    ) -> CreditListing:
        listing = self.listings.get(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        listing.available_tons += amount
        return listing

    async def decrement_for_sale(
        self, db: object, listing_id: str, amount: int
    ) -> CreditListing:
        listing = self.listings.get(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        if listing.available_tons < amount:
            raise InsufficientInventoryError(listing_id, amount, listing.available_tons)
        listing.available_tons -= amount
        return listing

    async def record_settlement(
        self, db: object, portfolio_item_id: str, listing_id: str, tons: int
    ) -> None:
        self.settlements[portfolio_item_id] = tons


def _listing(listing_id: str = "L-1", available: int = 1000, price: int = 3600) -> CreditListing:
    return CreditListing(
        id=listing_id,
        project_id=listing_id,
        project_name=f"Project {listing_id}",
        project_type="REFORESTATION",
        country="Brazil",
        vintage_year=2024,
        unit_price_cents=price,
        integrity_score=92,
        additionality_score=98,
        permanence_score=85,
        mrv_score=90,
        corresponding_adjustment=False,
        available_tons=available,
    )


class World:
    def __init__(self, *listings: CreditListing) -> None:
        self.holdings = InMemoryHoldingsRepository()
        self.listings = InMemoryListingRepository(*listings)
        self.ledger = InMemoryLedgerRepository()
        self.db = AsyncMock()
        self.db.commit.side_effect = self.holdings.commit
        self.db.rollback.side_effect = self.holdings.rollback
        self.svc = HoldingsApplicationService(
            repo=self.holdings,
            listings=self.listings,
            ledger=LedgerApplicationService(repo=self.ledger),
            lot_size=100,
        )

    def entries(self, action: str) -> list:
        return [e for e in self.ledger.entries if e.action == action]


class TestValidateLot:
    @pytest.mark.parametrize("quantity", [100, 500, 1000])
    def test_valid(self, quantity: int) -> None:
        validate_lot(quantity, 1000, 100)

    @pytest.mark.parametrize("quantity", [0, 50, 150, 1100])
    def test_invalid(self, quantity: int) -> None:
        with pytest.raises(InvalidLotQuantityError):
            validate_lot(quantity, 1000, 100)


class TestCart:
    async def test_add_snapshots_price(self) -> None:
        world = World(_listing())

        cart = await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 500)

        assert len(cart.items) == 1
        assert cart.items[0].unit_price_cents == 3600
        assert cart.total_cost_cents == 1_800_000
        assert cart.total_cost_display == "$18,000.00"

    async def test_same_listing_twice_is_rejected(self) -> None:
        world = World(_listing())
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 200)

        with pytest.raises(CartItemExistsError):
            await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 300)
        assert world.holdings.cart[("buyer-1", "L-1")].quantity == 200

    async def test_unknown_listing(self) -> None:
        world = World()
        with pytest.raises(ListingNotFoundError):
            await world.svc.add_to_cart(world.db, "buyer-1", "L-x", 100)

    async def test_quantity_over_available(self) -> None:
        world = World(_listing(available=300))
        with pytest.raises(InvalidLotQuantityError):
            await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 400)
        assert world.holdings.cart == {}

    async def test_remove_missing_line(self) -> None:
        world = World(_listing())
        with pytest.raises(CartItemNotFoundError):
            await world.svc.remove_from_cart(world.db, "buyer-1", "L-1")

    async def test_remove_then_readd(self) -> None:
        world = World(_listing())
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 200)
        cart = await world.svc.remove_from_cart(world.db, "buyer-1", "L-1")
        assert cart.items == []
        cart = await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 300)
        assert cart.items[0].quantity == 300


class TestPurchase:
    async def test_purchase_scenario(self) -> None:
        world = World(_listing(available=1000))
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 500)

        result = await world.svc.purchase(world.db, "buyer-1")

        assert [i.tons for i in result.items] == [500]
        assert world.listings.listings["L-1"].available_tons == 500
        sold = world.entries("SOLD")
        assert len(sold) == 1
        assert sold[0].amount_tons == 500
        assert sold[0].from_party == "Project L-1"
        assert sold[0].to_party == "buyer-1"
        assert world.holdings.cart == {}
        assert result.inventory_settled == 1
        assert result.ledger_recorded == 1
        assert result.warnings == []
        assert result.total_cost_cents == 1_800_000
        assert world.listings.settlements == {result.items[0].id: 500}

    async def test_multi_line(self) -> None:
        world = World(_listing("L-1"), _listing("L-2", price=1500))
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 100)
        await world.svc.add_to_cart(world.db, "buyer-1", "L-2", 200)

        result = await world.svc.purchase(world.db, "buyer-1")

        assert len(result.items) == 2
        assert result.total_cost_cents == 100 * 3600 + 200 * 1500
        assert len(world.entries("SOLD")) == 2

    async def test_empty_cart(self) -> None:
        world = World(_listing())
        with pytest.raises(EmptyCartError):
            await world.svc.purchase(world.db, "buyer-1")

    async def test_inventory_failure_keeps_purchase(self) -> None:
        world = World(_listing(available=1000))
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 500)
        # Another buyer drains the listing before checkout.
        world.listings.listings["L-1"].available_tons = 300

        result = await world.svc.purchase(world.db, "buyer-1")

        assert len(world.holdings.portfolio) == 1
        assert world.listings.listings["L-1"].available_tons == 300
        assert result.inventory_settled == 0
        assert result.ledger_recorded == 1
        assert len(result.warnings) == 1
        assert "inventory decrement" in result.warnings[0]
        assert world.listings.settlements == {}
        world.db.rollback.assert_awaited()

    async def test_ledger_failure_keeps_purchase(self) -> None:
        world = World(_listing(available=1000))
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 500)
        world.svc._ledger = LedgerApplicationService(
            repo=AsyncMock(append=AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("x"))))
        )

        result = await world.svc.purchase(world.db, "buyer-1")

        assert len(world.holdings.portfolio) == 1
        assert result.inventory_settled == 1
        assert result.ledger_recorded == 0
        assert "ledger SOLD" in result.warnings[0]

    async def test_portfolio_failure_fails_purchase(self) -> None:
        world = World(_listing(available=1000))
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 500)
        world.holdings.create_portfolio_item = AsyncMock(  # type: ignore[method-assign]
            side_effect=OperationalError("INSERT", {}, Exception("disk full"))
        )
        world.db.reset_mock()

        with pytest.raises(PurchaseFailedError):
            await world.svc.purchase(world.db, "buyer-1")

        world.db.rollback.assert_awaited_once()
        world.db.commit.assert_not_awaited()
        assert ("buyer-1", "L-1") in world.holdings.cart
        assert world.listings.listings["L-1"].available_tons == 1000
        assert world.ledger.entries == []

    async def test_repeat_purchase_finds_empty_cart(self) -> None:
        world = World(_listing(available=1000))
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 500)
        await world.svc.purchase(world.db, "buyer-1")

        with pytest.raises(EmptyCartError):
            await world.svc.purchase(world.db, "buyer-1")
        assert len(world.holdings.portfolio) == 1

    async def test_cart_taken_by_concurrent_checkout(self) -> None:
        world = World(_listing(available=1000))
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 500)
        # The other checkout committed first: the lines are still visible to a
        # plain read but the consuming DELETE returns nothing.
        world.holdings.take_cart = AsyncMock(return_value=[])  # type: ignore[method-assign]
        world.db.reset_mock()

        with pytest.raises(EmptyCartError):
            await world.svc.purchase(world.db, "buyer-1")

        world.db.rollback.assert_awaited_once()
        world.db.commit.assert_not_awaited()
        assert world.holdings.portfolio == {}
        assert world.listings.listings["L-1"].available_tons == 1000
        assert world.ledger.entries == []

    async def test_double_submitted_checkout_buys_once(self) -> None:
        world = World(_listing(available=1000))
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 500)

        results = await asyncio.gather(
            world.svc.purchase(world.db, "buyer-1"),
            world.svc.purchase(world.db, "buyer-1"),
            return_exceptions=True,
        )

        assert sorted(type(r).__name__ for r in results) == ["EmptyCartError", "PurchaseResponse"]
        assert len(world.holdings.portfolio) == 1
        assert world.listings.listings["L-1"].available_tons == 500
        assert len(world.entries("SOLD")) == 1


class TestClaim:
    async def _bought(self, tons: int = 500) -> tuple[World, str]:
        world = World(_listing(available=1000))
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", tons)
        result = await world.svc.purchase(world.db, "buyer-1")
        return world, result.items[0].id

    async def test_claim_scenario(self) -> None:
        world, item_id = await self._bought()
        before = await world.svc.summary(world.db, "buyer-1")

        result = await world.svc.claim(world.db, "buyer-1", item_id)

        after = await world.svc.summary(world.db, "buyer-1")
        assert world.holdings.portfolio == {}
        assert len(world.holdings.claims) == 1
        assert result.claim.tons == 500
        assert result.claim.portfolio_item_id == item_id
        assert result.claim.certificate_id == default_certificate_id("buyer-1", item_id)
        retired = world.entries("RETIRED")
        assert len(retired) == 1
        assert retired[0].amount_tons == 500
        assert retired[0].from_party == "buyer-1"
        assert retired[0].to_party == "Retired"
        assert before.credit_balance_tons - after.credit_balance_tons == 500
        assert after.total_offset_tons - before.total_offset_tons == 500

    async def test_custom_certificate(self) -> None:
        world, item_id = await self._bought()
        result = await world.svc.claim(world.db, "buyer-1", item_id, "VCS-2026-0001")
        assert result.claim.certificate_id == "VCS-2026-0001"

    async def test_second_claim_is_not_found(self) -> None:
        world, item_id = await self._bought()
        await world.svc.claim(world.db, "buyer-1", item_id)

        with pytest.raises(PortfolioItemNotFoundError):
            await world.svc.claim(world.db, "buyer-1", item_id)
        assert len(world.holdings.claims) == 1
        assert len(world.entries("RETIRED")) == 1

    async def test_other_buyers_item_is_not_found(self) -> None:
        world, item_id = await self._bought()
        with pytest.raises(PortfolioItemNotFoundError):
            await world.svc.claim(world.db, "buyer-2", item_id)
        assert item_id in world.holdings.portfolio

    async def test_ledger_failure_still_claims(self) -> None:
        world, item_id = await self._bought()
        world.svc._ledger = LedgerApplicationService(
            repo=AsyncMock(append=AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("x"))))
        )

        result = await world.svc.claim(world.db, "buyer-1", item_id)

        assert result.claim.tons == 500
        assert len(result.warnings) == 1
        assert world.holdings.portfolio == {}


class TestConservation:
    async def test_holdings_match_sold_entries(self) -> None:
        world = World(_listing("L-1"), _listing("L-2"))
        for listing_id, tons in [("L-1", 300), ("L-2", 200)]:
            await world.svc.add_to_cart(world.db, "buyer-1", listing_id, tons)
        bought = await world.svc.purchase(world.db, "buyer-1")
        await world.svc.add_to_cart(world.db, "buyer-1", "L-1", 100)
        await world.svc.purchase(world.db, "buyer-1")
        await world.svc.claim(world.db, "buyer-1", bought.items[0].id)

        held = sum(i.tons for i in world.holdings.portfolio.values())
        claimed = sum(r.tons for r in world.holdings.claims)
        sold = sum(e.amount_tons for e in world.entries("SOLD") if e.to_party == "buyer-1")
        retired = sum(e.amount_tons for e in world.entries("RETIRED"))

        assert held + claimed == sold == 600
        assert claimed == retired
        assert sum(listing.available_tons for listing in world.listings.listings.values()) == 2000 - 600


class TestTakeCartSql:
    async def test_single_delete_returning_in_cart_order(self) -> None:
        early = datetime(2026, 1, 1, tzinfo=UTC)
        late = datetime(2026, 1, 2, tzinfo=UTC)
        rows = []
        for listing_id, created_at in [("L-2", late), ("L-1", early)]:
            row = MagicMock()
            row.buyer_id = "buyer-1"
            row.listing_id = listing_id
            row.quantity = 100
            row.unit_price_cents = 3600
            row.project_name = f"Project {listing_id}"
            row.vintage_year = 2024
            row.created_at = created_at
            rows.append(row)
        db = AsyncMock()
        db.execute.return_value = MagicMock(fetchall=MagicMock(return_value=rows))

        lines = await HoldingsRepository().take_cart(db, "buyer-1")

        assert [line.listing_id for line in lines] == ["L-1", "L-2"]
        db.execute.assert_awaited_once()
        sql = str(db.execute.call_args.args[0])
        assert "DELETE FROM cart_items" in sql
        assert "RETURNING" in sql
