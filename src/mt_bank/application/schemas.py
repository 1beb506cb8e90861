"""Pydantic schemas for mt_bank API requests and responses."""

from typing import Literal

from pydantic import BaseModel, Field

from src.mt_bank.domain.models import AssignedBank, BankAssignment, CliqDetails, PlatformBank

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CliqDetailsIn(BaseModel):
    type: Literal["alias", "mobile"] = "alias"
    value: str = ""

    def to_domain(self) -> CliqDetails:
        return CliqDetails(type=self.type, value=self.value)


class BankCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    account_holder: str = Field(min_length=1, max_length=200)
    cliq_details: CliqDetailsIn = Field(default_factory=CliqDetailsIn)
    balance: float = Field(0, ge=0)
    is_active: bool = True
    description: str | None = None
    priority: int = Field(1, ge=1)


class BankUpdateRequest(BaseModel):
    """Partial update; omitted fields are left untouched."""

    name: str | None = Field(None, min_length=1, max_length=200)
    account_holder: str | None = None
    cliq_details: CliqDetailsIn | None = None
    is_active: bool | None = None
    description: str | None = None
    priority: int | None = Field(None, ge=1)

    def to_updates(self) -> dict[str, object]:
        updates: dict[str, object] = self.model_dump(exclude_unset=True, exclude={"cliq_details"})
        if self.cliq_details is not None:
            updates["cliq_details"] = self.cliq_details.to_domain()
        return updates


class BalanceUpdateRequest(BaseModel):
    balance: float = Field(ge=0)


class BulkStatusRequest(BaseModel):
    bank_ids: list[str] = Field(min_length=1)
    is_active: bool


class AssignmentCreateRequest(BaseModel):
    exchange_id: str = Field(min_length=1)
    bank_id: str = Field(min_length=1)
    assignment_type: Literal["private", "public"] = "private"
    priority: int = Field(1, ge=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class BankOut(BaseModel):
    id: str
    name: str
    cliq_type: str
    cliq_value: str
    account_holder: str
    balance: float
    is_active: bool
    description: str | None
    priority: int
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, bank: PlatformBank) -> "BankOut":
        return cls(
            id=bank.id,
            name=bank.name,
            cliq_type=bank.cliq_details.type,
            cliq_value=bank.cliq_details.value,
            account_holder=bank.account_holder,
            balance=bank.balance,
            is_active=bank.is_active,
            description=bank.description,
            priority=bank.priority,
            created_at=bank.created_at.isoformat(),
            updated_at=bank.updated_at.isoformat(),
        )


class AssignmentOut(BaseModel):
    id: str
    exchange_id: str
    bank_id: str
    assignment_type: str
    is_active: bool
    priority: int
    assigned_at: str
    assigned_by: str

    @classmethod
    def from_domain(cls, a: BankAssignment) -> "AssignmentOut":
        return cls(
            id=a.id,
            exchange_id=a.exchange_id,
            bank_id=a.bank_id,
            assignment_type=a.assignment_type,
            is_active=a.is_active,
            priority=a.priority,
            assigned_at=a.assigned_at.isoformat(),
            assigned_by=a.assigned_by,
        )


class AssignedBankOut(BaseModel):
    assignment: AssignmentOut
    bank: BankOut

    @classmethod
    def from_domain(cls, ab: AssignedBank) -> "AssignedBankOut":
        return cls(
            assignment=AssignmentOut.from_domain(ab.assignment),
            bank=BankOut.from_domain(ab.bank),
        )


class CreatedOut(BaseModel):
    id: str


class BulkStatusOut(BaseModel):
    updated: int
    is_active: bool


class RemovedOut(BaseModel):
    deactivated: int
