"""HoldingsRepository — concrete implementation of HoldingsRepositoryProtocol.

All queries use raw text() SQL (no ORM).
Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.errors import InternalError
from src.cx_holdings.domain.models import CartItem, ClaimRecord, PortfolioItem

# ---------------------------------------------------------------------------
# SQL: cart
# ---------------------------------------------------------------------------

_CART_COLUMNS = "buyer_id, listing_id, quantity, unit_price_cents, project_name, vintage_year, created_at"

_GET_CART_SQL = text(f"""
    SELECT {_CART_COLUMNS}
    FROM cart_items
    WHERE buyer_id = :buyer_id
    ORDER BY created_at, listing_id
""")

# (buyer_id, listing_id) is the primary key: a second add for the same
# listing returns no row instead of merging quantities.
_ADD_CART_ITEM_SQL = text(f"""
    INSERT INTO cart_items
        (buyer_id, listing_id, quantity, unit_price_cents, project_name, vintage_year)
    VALUES
        (:buyer_id, :listing_id, :quantity, :unit_price_cents, :project_name, :vintage_year)
    ON CONFLICT (buyer_id, listing_id) DO NOTHING
    RETURNING {_CART_COLUMNS}
""")

_DELETE_CART_ITEM_SQL = text("""
    DELETE FROM cart_items
    WHERE buyer_id = :buyer_id AND listing_id = :listing_id
    RETURNING listing_id
""")

_CLEAR_CART_SQL = text("""
    DELETE FROM cart_items
    WHERE buyer_id = :buyer_id
    RETURNING listing_id
""")

# Checkout consumes the cart in one statement. A concurrent checkout blocks on
# the row locks and then deletes (and buys) nothing.
_TAKE_CART_SQL = text(f"""
    DELETE FROM cart_items
    WHERE buyer_id = :buyer_id
    RETURNING {_CART_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: portfolio
# ---------------------------------------------------------------------------

_PORTFOLIO_COLUMNS = "id, buyer_id, listing_id, project_name, vintage_year, tons, purchased_at"

_INSERT_PORTFOLIO_SQL = text(f"""
    INSERT INTO portfolio_items
        (id, buyer_id, listing_id, project_name, vintage_year, tons, purchased_at)
    VALUES
        (:id, :buyer_id, :listing_id, :project_name, :vintage_year, :tons, :purchased_at)
    RETURNING {_PORTFOLIO_COLUMNS}
""")

_LIST_PORTFOLIO_SQL = text(f"""
    SELECT {_PORTFOLIO_COLUMNS}
    FROM portfolio_items
    WHERE buyer_id = :buyer_id
    ORDER BY purchased_at DESC, id DESC
""")

_TAKE_PORTFOLIO_SQL = text(f"""
    DELETE FROM portfolio_items
    WHERE id = :item_id AND buyer_id = :buyer_id
    RETURNING {_PORTFOLIO_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: claim history
# ---------------------------------------------------------------------------

_CLAIM_COLUMNS = (
    "id, buyer_id, listing_id, portfolio_item_id, project_name, tons, claimed_at, certificate_id"
)

_INSERT_CLAIM_SQL = text(f"""
    INSERT INTO claim_records
        (id, buyer_id, listing_id, portfolio_item_id, project_name, tons,
         claimed_at, certificate_id)
    VALUES
        (:id, :buyer_id, :listing_id, :portfolio_item_id, :project_name, :tons,
         :claimed_at, :certificate_id)
    RETURNING {_CLAIM_COLUMNS}
""")

_LIST_CLAIMS_SQL = text(f"""
    SELECT {_CLAIM_COLUMNS}
    FROM claim_records
    WHERE buyer_id = :buyer_id
    ORDER BY claimed_at DESC, id DESC
""")


def _row_to_cart_item(row: object) -> CartItem:
    return CartItem(
        buyer_id=row.buyer_id,  # type: ignore[attr-defined]
        listing_id=row.listing_id,  # type: ignore[attr-defined]
        quantity=row.quantity,  # type: ignore[attr-defined]
        unit_price_cents=row.unit_price_cents,  # type: ignore[attr-defined]
        project_name=row.project_name,  # type: ignore[attr-defined]
        vintage_year=row.vintage_year,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_portfolio_item(row: object) -> PortfolioItem:
    return PortfolioItem(
        id=row.id,  # type: ignore[attr-defined]
        buyer_id=row.buyer_id,  # type: ignore[attr-defined]
        listing_id=row.listing_id,  # type: ignore[attr-defined]
        project_name=row.project_name,  # type: ignore[attr-defined]
        vintage_year=row.vintage_year,  # type: ignore[attr-defined]
        tons=row.tons,  # type: ignore[attr-defined]
        purchased_at=row.purchased_at,  # type: ignore[attr-defined]
    )


def _row_to_claim(row: object) -> ClaimRecord:
    return ClaimRecord(
        id=row.id,  # type: ignore[attr-defined]
        buyer_id=row.buyer_id,  # type: ignore[attr-defined]
        listing_id=row.listing_id,  # type: ignore[attr-defined]
        portfolio_item_id=row.portfolio_item_id,  # type: ignore[attr-defined]
        project_name=row.project_name,  # type: ignore[attr-defined]
        tons=row.tons,  # type: ignore[attr-defined]
        claimed_at=row.claimed_at,  # type: ignore[attr-defined]
        certificate_id=row.certificate_id,  # type: ignore[attr-defined]
    )


class HoldingsRepository:
    # --- cart ---

    async def get_cart(self, db: AsyncSession, buyer_id: str) -> list[CartItem]:
        result = await db.execute(_GET_CART_SQL, {"buyer_id": buyer_id})
        return [_row_to_cart_item(row) for row in result.fetchall()]

    async def add_cart_item(self, db: AsyncSession, item: CartItem) -> CartItem | None:
        result = await db.execute(
            _ADD_CART_ITEM_SQL,
            {
                "buyer_id": item.buyer_id,
                "listing_id": item.listing_id,
                "quantity": item.quantity,
                "unit_price_cents": item.unit_price_cents,
                "project_name": item.project_name,
                "vintage_year": item.vintage_year,
            },
        )
        row = result.fetchone()
        return _row_to_cart_item(row) if row else None

    async def delete_cart_item(
        self, db: AsyncSession, buyer_id: str, listing_id: str
    ) -> bool:
        result = await db.execute(
            _DELETE_CART_ITEM_SQL, {"buyer_id": buyer_id, "listing_id": listing_id}
        )
        return result.fetchone() is not None

    async def clear_cart(self, db: AsyncSession, buyer_id: str) -> int:
        result = await db.execute(_CLEAR_CART_SQL, {"buyer_id": buyer_id})
        return len(result.fetchall())

    async def take_cart(self, db: AsyncSession, buyer_id: str) -> list[CartItem]:
        result = await db.execute(_TAKE_CART_SQL, {"buyer_id": buyer_id})
        items = [_row_to_cart_item(row) for row in result.fetchall()]
        # DELETE ... RETURNING has no ORDER BY
        items.sort(key=lambda i: (i.created_at is None, i.created_at, i.listing_id))
        return items

    # --- portfolio ---

    async def create_portfolio_item(
        self, db: AsyncSession, item: PortfolioItem
    ) -> PortfolioItem:
        result = await db.execute(
            _INSERT_PORTFOLIO_SQL,
            {
                "id": item.id,
                "buyer_id": item.buyer_id,
                "listing_id": item.listing_id,
                "project_name": item.project_name,
                "vintage_year": item.vintage_year,
                "tons": item.tons,
                "purchased_at": item.purchased_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Portfolio insert returned no rows — this should never happen")
        return _row_to_portfolio_item(row)

    async def list_portfolio(
        self, db: AsyncSession, buyer_id: str
    ) -> list[PortfolioItem]:
        result = await db.execute(_LIST_PORTFOLIO_SQL, {"buyer_id": buyer_id})
        return [_row_to_portfolio_item(row) for row in result.fetchall()]

    async def take_portfolio_item(
        self, db: AsyncSession, buyer_id: str, item_id: str
    ) -> PortfolioItem | None:
        result = await db.execute(
            _TAKE_PORTFOLIO_SQL, {"buyer_id": buyer_id, "item_id": item_id}
        )
        row = result.fetchone()
        return _row_to_portfolio_item(row) if row else None

    # --- claim history ---

    async def create_claim_record(
        self, db: AsyncSession, record: ClaimRecord
    ) -> ClaimRecord:
        result = await db.execute(
            _INSERT_CLAIM_SQL,
            {
                "id": record.id,
                "buyer_id": record.buyer_id,
                "listing_id": record.listing_id,
                "portfolio_item_id": record.portfolio_item_id,
                "project_name": record.project_name,
                "tons": record.tons,
                "claimed_at": record.claimed_at,
                "certificate_id": record.certificate_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Claim insert returned no rows — this should never happen")
        return _row_to_claim(row)

    async def list_claims(self, db: AsyncSession, buyer_id: str) -> list[ClaimRecord]:
        result = await db.execute(_LIST_CLAIMS_SQL, {"buyer_id": buyer_id})
        return [_row_to_claim(row) for row in result.fetchall()]
