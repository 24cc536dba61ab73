"""Invoice arithmetic. Shared by the server and the offline client.

All money is Decimal. Stored amounts are quantized to paise (0.01);
the payable amount is rounded half-up to whole rupees.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

PAISE = Decimal("0.01")
RUPEE = Decimal("1")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value) -> Decimal:
    return to_decimal(value).quantize(PAISE, rounding=ROUND_HALF_UP)


def apply_addon(base_price, addon_percent=None) -> Decimal:
    """Selling price after a per-line markup, e.g. 100 at 10% -> 110.00."""
    base = to_decimal(base_price)
    addon = to_decimal(addon_percent)
    if addon > 0:
        base = base * (HUNDRED + addon) / HUNDRED
    return money(base)


def line_total(selling_price, quantity: int) -> Decimal:
    return money(to_decimal(selling_price) * quantity)


@dataclass(frozen=True)
class CartSummary:
    cart_total: Decimal
    net_amount: Decimal
    net_payable_amount: Decimal

    @property
    def round_off(self) -> Decimal:
        return self.net_payable_amount - self.net_amount


@dataclass(frozen=True)
class TaxBreakdown:
    adjustment: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal


def tax_breakdown(cart_total, adjustment_percent=None, cgst=None, sgst=None, igst=None) -> TaxBreakdown:
    """Per-component amounts, each a percentage of the cart subtotal."""
    subtotal = to_decimal(cart_total)

    def share(percent) -> Decimal:
        return money(subtotal * to_decimal(percent) / HUNDRED)

    return TaxBreakdown(
        adjustment=share(adjustment_percent),
        cgst=share(cgst),
        sgst=share(sgst),
        igst=share(igst),
    )


def summarize_cart(
    line_totals: Iterable,
    adjustment_percent=None,
    cgst=None,
    sgst=None,
    igst=None,
) -> CartSummary:
    """
    cart_total = sum of line totals
    net_amount = cart_total * (100 + adjustment + cgst + sgst + igst) / 100
    net_payable_amount = net_amount rounded to whole rupees
    """
    cart_total = money(sum((to_decimal(t) for t in line_totals), Decimal("0")))
    percent = (
        HUNDRED
        + to_decimal(adjustment_percent)
        + to_decimal(cgst)
        + to_decimal(sgst)
        + to_decimal(igst)
    )
    net_amount = money(cart_total * percent / HUNDRED)
    net_payable = net_amount.quantize(RUPEE, rounding=ROUND_HALF_UP)
    return CartSummary(
        cart_total=cart_total,
        net_amount=net_amount,
        net_payable_amount=money(net_payable),
    )


def differs(submitted: Optional[Decimal], computed: Decimal, tolerance: Decimal = PAISE) -> bool:
    """True when a client-supplied figure disagrees with the server's."""
    if submitted is None:
        return False
    return abs(to_decimal(submitted) - computed) > tolerance
