"""Commission resolution and arithmetic — pure functions, no I/O.

Rate resolution:
  admin    → {percentage, 0}, whatever is stored: admins never pay commission
  exchange → the stored rate for the direction when well-formed, else
             outgoing {percentage, 2} / incoming {fixed, 0}

Well-formed means a known type and a finite, non-negative numeric value.
Legacy records store a bare number per direction; it reads as a fixed rate.
"""

import math
from typing import Any

from src.mt_commission.domain.models import CommissionQuote, CommissionRate, UserProfile
from src.mt_common.enums import CommissionType, TransferDirection, UserRole
from src.mt_common.money import is_valid_amount, round_money

ADMIN_RATE = CommissionRate(CommissionType.PERCENTAGE.value, 0)

DEFAULT_RATES: dict[TransferDirection, CommissionRate] = {
    TransferDirection.OUTGOING: CommissionRate(CommissionType.PERCENTAGE.value, 2),
    TransferDirection.INCOMING: CommissionRate(CommissionType.FIXED.value, 0),
}

_TYPES = {t.value for t in CommissionType}


def _is_number(value: Any) -> bool:
    return (
        not isinstance(value, bool)
        and isinstance(value, (int, float))
        and math.isfinite(value)
    )


def parse_rate(raw: Any) -> CommissionRate | None:
    """Stored rate → CommissionRate, or None when malformed."""
    if _is_number(raw):
        return CommissionRate(CommissionType.FIXED.value, raw) if raw >= 0 else None
    if not isinstance(raw, dict):
        return None
    rate_type, value = raw.get("type"), raw.get("value")
    if rate_type not in _TYPES or not _is_number(value) or value < 0:
        return None
    return CommissionRate(rate_type, value)


def resolve_rate(user: UserProfile, direction: TransferDirection | str) -> CommissionRate:
    direction = TransferDirection(direction)
    if user.role == UserRole.ADMIN.value:
        return ADMIN_RATE
    rates = user.commission_rates if isinstance(user.commission_rates, dict) else {}
    return parse_rate(rates.get(direction.value)) or DEFAULT_RATES[direction]


def calculate_commission(amount: Any, rate: CommissionRate | None) -> float:
    """percentage → amount * value / 100; fixed → value. Rounded to 2 dp.

    Invalid amounts or rates yield 0 rather than an error.
    """
    if rate is None or not is_valid_amount(amount):
        return 0.0
    if rate.type not in _TYPES or not _is_number(rate.value) or rate.value < 0:
        return 0.0
    if rate.type == CommissionType.PERCENTAGE.value:
        return round_money(amount * rate.value / 100)
    return round_money(rate.value)


def calculate_net_amount(
    submitted_amount: float, commission: float, direction: TransferDirection | str
) -> float:
    """Incoming: the exchange receives submitted - commission.
    Outgoing: the submitted amount is paid out; commission is charged separately.
    """
    if TransferDirection(direction) == TransferDirection.INCOMING:
        return round_money(submitted_amount - commission)
    return round_money(submitted_amount)


def quote(user: UserProfile, amount: float, direction: TransferDirection | str) -> CommissionQuote:
    rate = resolve_rate(user, direction)
    commission = calculate_commission(amount, rate)
    return CommissionQuote(
        rate=rate,
        amount=amount,
        commission=commission,
        net_amount=calculate_net_amount(amount, commission, direction),
    )
