"""Integer arithmetic utilities for cents-based member balances.

All balances, booking costs and ledger amounts use int (euro cents).
No float, no Decimal.
"""

from src.bc_common.errors import InvalidAmountError


def validate_positive_amount(amount: int) -> None:
    """Reject zero/negative credits before any row is touched."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError(f"must be a positive number of cents, got {amount!r}")


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 1000 -> '€10.00', -400 -> '-€4.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-€{abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"€{cents // 100:,}.{cents % 100:02d}"
