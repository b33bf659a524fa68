"""Holdings vs. ledger conservation check (pure).

Conservation law, per (buyer, listing):
    portfolio tons + claimed tons == SOLD tons recorded to the buyer
    claimed tons                  == RETIRED tons recorded from the buyer

Holdings are authoritative. A ledger shortfall is repairable by appending a
compensating entry; a ledger surplus can only be reported because the ledger
is append-only.
"""

from dataclasses import dataclass

Key = tuple[str, str]  # (buyer_id, listing_id)


@dataclass(frozen=True)
class LedgerDrift:
    action: str
    buyer_id: str
    listing_id: str
    holdings_tons: int
    ledger_tons: int

    @property
    def shortfall(self) -> int:
        """Tons missing from the ledger (negative when the ledger over-records)."""
        return self.holdings_tons - self.ledger_tons

    @property
    def repairable(self) -> bool:
        return self.shortfall > 0

    def describe(self) -> str:
        return (
            f"{self.action} drift for buyer={self.buyer_id} listing={self.listing_id}: "
            f"holdings={self.holdings_tons} ledger={self.ledger_tons}"
        )


@dataclass(frozen=True)
class UnsettledPurchase:
    portfolio_item_id: str
    listing_id: str
    tons: int


def find_drifts(
    action: str,
    holdings: dict[Key, int],
    ledger: dict[Key, int],
) -> list[LedgerDrift]:
    drifts: list[LedgerDrift] = []
    for key in sorted(set(holdings) | set(ledger)):
        held = holdings.get(key, 0)
        recorded = ledger.get(key, 0)
        if held != recorded:
            buyer_id, listing_id = key
            drifts.append(
                LedgerDrift(
                    action=action,
                    buyer_id=buyer_id,
                    listing_id=listing_id,
                    holdings_tons=held,
                    ledger_tons=recorded,
                )
            )
    return drifts
