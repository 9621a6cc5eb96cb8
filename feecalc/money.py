from decimal import ROUND_HALF_EVEN, Decimal
from typing import NamedTuple, Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(x: Number) -> Decimal:
    if isinstance(x, Decimal):
        return x
    # go through str so 75.1 stays 75.1 and not its binary expansion
    return Decimal(str(x))


def money(x: Number) -> int:
    """Round to the nearest whole currency unit (half to even), floored at zero."""
    q = to_decimal(x).quantize(Decimal("1"), rounding=ROUND_HALF_EVEN)
    return max(0, int(q))


class FeeAmounts(NamedTuple):
    net: int
    vat: int
    gross: int


ZERO_AMOUNTS = FeeAmounts(0, 0, 0)


def apply_vat(net: Number, vat_percent: Number) -> FeeAmounts:
    # each figure is rounded from the exact value, not from its rounded parts
    net = to_decimal(net)
    vat = net * to_decimal(vat_percent) / HUNDRED
    return FeeAmounts(net=money(net), vat=money(vat), gross=money(net + vat))
