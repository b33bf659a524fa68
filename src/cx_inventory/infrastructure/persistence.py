"""ListingRepository — concrete implementation of ListingRepositoryProtocol.

available_tons mutations are single UPDATE ... RETURNING statements.
The decrement carries its own guard (available_tons >= :amount), so two
concurrent sales can never both pass a stale check; a CHECK constraint on the
table backs it. 0 rows returned means missing listing or insufficient stock.

Transaction ownership: the CALLER commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.cx_common.errors import (
    InsufficientInventoryError,
    InternalError,
    ListingNotFoundError,
)
from src.cx_inventory.domain.models import CreditListing

_LISTING_COLUMNS = """
    id, project_id, project_name, project_type, country, vintage_year,
    unit_price_cents, integrity_score, additionality_score, permanence_score,
    mrv_score, corresponding_adjustment, available_tons, created_at, updated_at
"""

_INSERT_LISTING_SQL = text(f"""
    INSERT INTO credit_listings
        (id, project_id, project_name, project_type, country, vintage_year,
         unit_price_cents, integrity_score, additionality_score,
         permanence_score, mrv_score, corresponding_adjustment, available_tons)
    VALUES
        (:id, :project_id, :project_name, :project_type, :country, :vintage_year,
         :unit_price_cents, :integrity_score, :additionality_score,
         :permanence_score, :mrv_score, :corresponding_adjustment, 0)
    RETURNING {_LISTING_COLUMNS}
""")

_GET_LISTING_SQL = text(f"""
    SELECT {_LISTING_COLUMNS}
    FROM credit_listings
    WHERE id = :listing_id
""")

_LIST_LISTINGS_SQL = text(f"""
    SELECT {_LISTING_COLUMNS}
    FROM credit_listings
    WHERE (:available_only = FALSE OR available_tons > 0)
    ORDER BY created_at DESC, id DESC
""")

_INCREASE_SQL = text(f"""
    UPDATE credit_listings
    SET available_tons = available_tons + :amount,
        updated_at = NOW()
    WHERE id = :listing_id
    RETURNING {_LISTING_COLUMNS}
""")

_DECREMENT_SQL = text(f"""
    UPDATE credit_listings
    SET available_tons = available_tons - :amount,
        updated_at = NOW()
    WHERE id = :listing_id AND available_tons >= :amount
    RETURNING {_LISTING_COLUMNS}
""")

_GET_AVAILABLE_SQL = text("""
    SELECT available_tons FROM credit_listings WHERE id = :listing_id
""")

_INSERT_SETTLEMENT_SQL = text("""
    INSERT INTO inventory_settlements (portfolio_item_id, listing_id, tons)
    VALUES (:portfolio_item_id, :listing_id, :tons)
""")


def _row_to_listing(row: object) -> CreditListing:
    return CreditListing(
        id=row.id,  # type: ignore[attr-defined]
        project_id=row.project_id,  # type: ignore[attr-defined]
        project_name=row.project_name,  # type: ignore[attr-defined]
        project_type=row.project_type,  # type: ignore[attr-defined]
        country=row.country,  # type: ignore[attr-defined]
        vintage_year=row.vintage_year,  # type: ignore[attr-defined]
        unit_price_cents=row.unit_price_cents,  # type: ignore[attr-defined]
        integrity_score=row.integrity_score,  # type: ignore[attr-defined]
        additionality_score=row.additionality_score,  # type: ignore[attr-defined]
        permanence_score=row.permanence_score,  # type: ignore[attr-defined]
        mrv_score=row.mrv_score,  # type: ignore[attr-defined]
        corresponding_adjustment=row.corresponding_adjustment,  # type: ignore[attr-defined]
        available_tons=row.available_tons,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class ListingRepository:
    """Concrete repository — all inventory changes atomic at the SQL level."""

    async def create_listing(
        self, db: AsyncSession, listing: CreditListing
    ) -> CreditListing:
        result = await db.execute(
            _INSERT_LISTING_SQL,
            {
                "id": listing.id,
                "project_id": listing.project_id,
                "project_name": listing.project_name,
                "project_type": listing.project_type,
                "country": listing.country,
                "vintage_year": listing.vintage_year,
                "unit_price_cents": listing.unit_price_cents,
                "integrity_score": listing.integrity_score,
                "additionality_score": listing.additionality_score,
                "permanence_score": listing.permanence_score,
                "mrv_score": listing.mrv_score,
                "corresponding_adjustment": listing.corresponding_adjustment,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Listing insert returned no rows — this should never happen")
        return _row_to_listing(row)

    async def get_listing_by_id(
        self, db: AsyncSession, listing_id: str
    ) -> CreditListing | None:
        result = await db.execute(_GET_LISTING_SQL, {"listing_id": listing_id})
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def list_listings(
        self, db: AsyncSession, available_only: bool
    ) -> list[CreditListing]:
        result = await db.execute(_LIST_LISTINGS_SQL, {"available_only": available_only})
        return [_row_to_listing(row) for row in result.fetchall()]

    async def increase_available(
        self, db: AsyncSession, listing_id: str, amount: int
    ) -> CreditListing:
        result = await db.execute(
            _INCREASE_SQL, {"listing_id": listing_id, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            raise ListingNotFoundError(listing_id)
        return _row_to_listing(row)

    async def decrement_for_sale(
        self, db: AsyncSession, listing_id: str, amount: int
    ) -> CreditListing:
        result = await db.execute(
            _DECREMENT_SQL, {"listing_id": listing_id, "amount": amount}
        )
        row = result.fetchone()
        if row is None:
            avail_row = (
                await db.execute(_GET_AVAILABLE_SQL, {"listing_id": listing_id})
            ).fetchone()
            if avail_row is None:
                raise ListingNotFoundError(listing_id)
            raise InsufficientInventoryError(listing_id, amount, avail_row.available_tons)
        return _row_to_listing(row)

    async def record_settlement(
        self, db: AsyncSession, portfolio_item_id: str, listing_id: str, tons: int
    ) -> None:
        await db.execute(
            _INSERT_SETTLEMENT_SQL,
            {
                "portfolio_item_id": portfolio_item_id,
                "listing_id": listing_id,
                "tons": tons,
            },
        )
