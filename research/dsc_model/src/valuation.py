"""Valuation math - pure uint256 fixed point functions

Every amount is an unsigned integer. Values and debt are WAD (18 decimals),
collateral amounts are in the asset's own decimals.
"""
from .errors import ArithmeticError
from .constants import (
    WAD,
    WAD_DECIMALS,
    MAX_UINT256,
    THRESHOLD_PRECISION,
)

def checked_mul(a: int, b: int) -> int:
    """Multiply with overflow checking"""
    result = a * b
    if result > MAX_UINT256:
        raise ArithmeticError("Arithmetic overflow in multiplication")
    return result

def checked_div(a: int, b: int) -> int:
    """Divide with zero checking, rounds down"""
    if b == 0:
        raise ArithmeticError("Division by zero")
    return a // b

def checked_div_up(a: int, b: int) -> int:
    """Divide with zero checking, rounds up"""
    if b == 0:
        raise ArithmeticError("Division by zero")
    return -(-a // b)

def checked_add(a: int, b: int) -> int:
    """Add with overflow checking"""
    result = a + b
    if result > MAX_UINT256:
        raise ArithmeticError("Arithmetic overflow in addition")
    return result

def checked_sub(a: int, b: int) -> int:
    """Subtract with underflow checking"""
    if b > a:
        raise ArithmeticError("Arithmetic underflow in subtraction")
    return a - b

def scale_to_wad(amount: int, decimals: int) -> int:
    """Convert an amount in `decimals` precision to 18 decimals.

    Scaling up is exact, scaling down truncates.
    """
    if decimals == WAD_DECIMALS:
        return amount
    if decimals < WAD_DECIMALS:
        return checked_mul(amount, 10 ** (WAD_DECIMALS - decimals))
    return amount // 10 ** (decimals - WAD_DECIMALS)

def scale_from_wad(amount_wad: int, decimals: int) -> int:
    """Convert an 18 decimal amount back to `decimals` precision"""
    if decimals == WAD_DECIMALS:
        return amount_wad
    if decimals < WAD_DECIMALS:
        return amount_wad // 10 ** (WAD_DECIMALS - decimals)
    return checked_mul(amount_wad, 10 ** (decimals - WAD_DECIMALS))

def price_in_peg(collateral_price_in_quote: int, peg_price_in_quote: int) -> int:
    """Cross rate: price of one collateral unit in peg currency (WAD).

    Both inputs are WAD prices in the same quote currency (USD).
    """
    return checked_div(checked_mul(collateral_price_in_quote, WAD), peg_price_in_quote)

def collateral_value_in_peg(
    amount_collateral: int,
    peg_price: int,
    collateral_price: int,
    collateral_decimals: int,
) -> int:
    """Peg currency value (WAD) of a collateral amount"""
    amount_wad = scale_to_wad(amount_collateral, collateral_decimals)
    rate = price_in_peg(collateral_price, peg_price)
    return checked_mul(amount_wad, rate) // WAD

def credit_issuable_from_collateral(
    amount_collateral: int,
    peg_price: int,
    collateral_price: int,
    collateral_decimals: int,
    threshold: int,
) -> int:
    """Maximum credit mintable against a collateral amount at exactly the threshold"""
    value = collateral_value_in_peg(
        amount_collateral, peg_price, collateral_price, collateral_decimals
    )
    return checked_div(checked_mul(value, THRESHOLD_PRECISION), threshold)

def health_factor(collateral_value_peg: int, total_debt: int, threshold: int) -> int:
    """Health factor in WAD; MAX_UINT256 when there is no debt.

    health_factor = collateral_value * 100 * 1e18 / (total_debt * threshold)
    """
    if total_debt == 0:
        return MAX_UINT256
    numerator = checked_mul(checked_mul(collateral_value_peg, THRESHOLD_PRECISION), WAD)
    return checked_div(numerator, checked_mul(total_debt, threshold))

def collateral_out_for_redeem(
    amount_dsc: int,
    peg_price: int,
    collateral_price: int,
    collateral_decimals: int,
    threshold: int,
) -> int:
    """Collateral released when retiring `amount_dsc` of debt.

    Inverse of credit_issuable_from_collateral at the threshold rate. The WAD
    amount is rounded up, the conversion to native decimals rounds down, so a
    redemption never releases more than the matching deposit.
    """
    rate = price_in_peg(collateral_price, peg_price)
    numerator = checked_mul(checked_mul(amount_dsc, threshold), WAD)
    amount_wad = checked_div_up(numerator, checked_mul(THRESHOLD_PRECISION, rate))
    return scale_from_wad(amount_wad, collateral_decimals)

def liquidation_collateral_out(
    amount_dsc: int,
    peg_price: int,
    collateral_price: int,
    collateral_decimals: int,
    bonus_rate: int,
    bonus_precision: int,
) -> int:
    """Collateral paid to a liquidator covering `amount_dsc` of debt.

    Spot equivalent of the repaid debt (rounded up) plus the liquidation bonus.
    """
    rate = price_in_peg(collateral_price, peg_price)
    base_wad = checked_div_up(checked_mul(amount_dsc, WAD), rate)
    bonus_wad = checked_div(checked_mul(base_wad, bonus_rate), bonus_precision)
    return scale_from_wad(checked_add(base_wad, bonus_wad), collateral_decimals)

def collateral_amount_from_peg(
    amount_dsc: int,
    peg_price: int,
    collateral_price: int,
    collateral_decimals: int,
) -> int:
    """Spot collateral amount worth `amount_dsc` of peg currency, rounded down"""
    rate = price_in_peg(collateral_price, peg_price)
    amount_wad = checked_div(checked_mul(amount_dsc, WAD), rate)
    return scale_from_wad(amount_wad, collateral_decimals)
