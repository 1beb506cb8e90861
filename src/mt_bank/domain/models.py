"""Domain models for mt_bank — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime

from src.mt_common.datetime_utils import utc_now


@dataclass
class CliqDetails:
    """Payout addressing for outgoing transfers: an alias or a mobile number."""

    type: str = "alias"  # CliqType value
    value: str = ""


@dataclass
class PlatformBank:
    id: str
    name: str
    cliq_details: CliqDetails
    account_holder: str
    balance: float
    is_active: bool
    description: str | None = None
    priority: int = 1  # lower is preferred
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass
class BankAssignment:
    """Grant of a bank to an exchange. Removal flips is_active; never deleted."""

    id: str
    exchange_id: str
    bank_id: str
    assignment_type: str  # AssignmentType value
    is_active: bool
    priority: int = 1
    assigned_at: datetime = field(default_factory=utc_now)
    assigned_by: str = ""


@dataclass
class AssignedBank:
    """An active assignment joined with its (active) bank."""

    assignment: BankAssignment
    bank: PlatformBank
