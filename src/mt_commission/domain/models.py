"""Domain models for mt_commission — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CommissionRate:
    type: str  # CommissionType value
    value: float


@dataclass
class UserProfile:
    """The slice of a user record commission resolution reads.

    commission_rates holds the raw stored mapping ({"incoming": ..., "outgoing": ...});
    entries may be rate dicts, legacy bare numbers, or missing.
    """

    id: str
    role: str  # UserRole value
    commission_rates: dict[str, Any] = field(default_factory=dict)
    exchange_name: str | None = None


@dataclass(frozen=True)
class CommissionQuote:
    rate: CommissionRate
    amount: float
    commission: float
    net_amount: float
