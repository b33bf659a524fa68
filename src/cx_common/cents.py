"""Integer money utilities.

All prices and totals use int cents. No float, no Decimal.
"""


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 3600 -> '$36.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def line_total(quantity: int, unit_price_cents: int) -> int:
    """Total cost of `quantity` tons at `unit_price_cents` per ton."""
    return quantity * unit_price_cents
