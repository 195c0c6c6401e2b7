"""
Currency presentation helpers.

PRESENTATION ONLY:
- MUST NOT be used to build payment payloads
- Amounts are whole Rupiah; no decimal subunits are rendered
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CURRENCY_SYMBOL = "Rp"
# id-ID separates symbol and digits with a no-break space.
SYMBOL_SEPARATOR = "\u00a0"
GROUP_SEPARATOR = "."


def format_currency(amount: Union[int, float, Decimal]) -> str:
    """
    Render an amount the way the id-ID locale renders IDR.

        >>> format_currency(150000)
        'Rp\\xa0150.000'
    """
    whole = int(
        Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    )
    sign = "-" if whole < 0 else ""
    digits = f"{abs(whole):,}".replace(",", GROUP_SEPARATOR)
    return f"{sign}{CURRENCY_SYMBOL}{SYMBOL_SEPARATOR}{digits}"
