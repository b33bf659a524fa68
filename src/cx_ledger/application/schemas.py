"""Pydantic schemas for the public ledger contract.

Wire format is camelCase and un-enveloped:
  {id, txHash, action, listingId, from, to, timestamp, amountTons}
Request fields are all optional at the schema level so that missing required
fields surface as HTTP 400 from the service, not as a framework 422.
amountTons is whole tons, matching the lot-sized trades that produce entries.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.cx_ledger.domain.models import LedgerEntry


class LedgerAppendRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tx_hash: str | None = Field(None, alias="txHash")
    action: str | None = None
    listing_id: str | None = Field(None, alias="listingId")
    from_party: str | None = Field(None, alias="from")
    to_party: str | None = Field(None, alias="to")
    timestamp: datetime | None = None
    amount_tons: int | None = Field(None, alias="amountTons")


class LedgerEntryOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    tx_hash: str = Field(alias="txHash")
    action: str
    listing_id: str = Field(alias="listingId")
    from_party: str | None = Field(alias="from")
    to_party: str | None = Field(alias="to")
    timestamp: str  # ISO8601 string
    amount_tons: int | None = Field(alias="amountTons")

    @classmethod
    def from_domain(cls, e: LedgerEntry) -> "LedgerEntryOut":
        return cls(
            id=e.id,
            tx_hash=e.tx_hash,
            action=e.action,
            listing_id=e.listing_id,
            from_party=e.from_party,
            to_party=e.to_party,
            timestamp=e.timestamp.isoformat(),
            amount_tons=e.amount_tons,
        )

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)
