"""Currency and pricing utilities — booking fee, cabin multipliers, cent formatting.

All monetary amounts stored in the database are integer cents.
"""

from decimal import ROUND_HALF_UP, Decimal

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$", "CAD": "CA$", "GBP": "£", "EUR": "€",
    "BRL": "R$", "MXN": "MX$", "JPY": "¥", "AUD": "A$",
    "INR": "₹", "KRW": "₩", "HKD": "HK$",
}

# Cabin classes offered at checkout, with their indicative fare multiplier
TRAVEL_CLASSES: dict[str, dict] = {
    "ECONOMY": {"name": "Economy Class", "multiplier": 1.0},
    "PREMIUM_ECONOMY": {"name": "Premium Economy", "multiplier": 1.3},
    "BUSINESS": {"name": "Business Class", "multiplier": 2.5},
    "FIRST": {"name": "First Class", "multiplier": 4.0},
}

# Loyalty tiers, highest threshold first
LOYALTY_TIERS: list[tuple[int, str]] = [
    (10000, "platinum"),
    (5000, "gold"),
    (1000, "silver"),
    (0, "bronze"),
]


def to_cents(amount: str | float | Decimal) -> int:
    """Convert a provider decimal amount ("123.45") to integer cents."""
    value = Decimal(str(amount)) * 100
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_total_price(base_price_cents: int, passengers: int, booking_fee_cents: int = 0) -> int:
    """Total in cents for `passengers` seats at `base_price_cents` plus the booking fee."""
    return base_price_cents * passengers + booking_fee_cents


def format_price(amount_cents: int, currency: str = "USD") -> str:
    """Format integer cents for display, e.g. 2500 -> "$25.00"."""
    currency = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(currency, currency + " ")
    return f"{symbol}{amount_cents / 100:,.2f}"


def loyalty_points_for(amount_cents: int) -> int:
    """One point per whole currency unit paid."""
    return max(amount_cents, 0) // 100


def loyalty_tier_for(points: int) -> str:
    for threshold, tier in LOYALTY_TIERS:
        if points >= threshold:
            return tier
    return "bronze"
