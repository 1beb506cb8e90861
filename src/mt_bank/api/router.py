"""mt_bank REST endpoints.

GET    /banks                               — all banks by name (admin)
GET    /banks/active                        — active banks by priority
POST   /banks                               — create (admin)
PATCH  /banks/{bank_id}                     — partial update (admin)
PUT    /banks/{bank_id}/balance             — set balance (admin)
DELETE /banks/{bank_id}                     — delete unassigned bank (admin)
POST   /banks/bulk-status                   — atomic activate/deactivate (admin)
GET    /assignments                         — all active assignments (admin)
POST   /assignments                         — assign bank to exchange (admin)
DELETE /assignments/{exchange_id}/{bank_id} — soft-remove assignment (admin)
GET    /exchanges/{exchange_id}/banks       — usable banks for an exchange

Read endpoints answer 200 with an empty list when the store is offline and
set `degraded: true` in the envelope.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from src.mt_bank.api.deps import get_reference_data
from src.mt_bank.application.schemas import (
    AssignedBankOut,
    AssignmentCreateRequest,
    AssignmentOut,
    BalanceUpdateRequest,
    BankCreateRequest,
    BankOut,
    BankUpdateRequest,
    BulkStatusOut,
    BulkStatusRequest,
    CreatedOut,
    RemovedOut,
)
from src.mt_bank.application.wiring import ReferenceData
from src.mt_common.response import ApiResponse, success_response
from src.mt_gateway.auth.dependencies import (
    CurrentUser,
    ensure_exchange_access,
    get_current_user,
    require_admin,
)

router = APIRouter(tags=["banks"])

RefData = Annotated[ReferenceData, Depends(get_reference_data)]
Admin = Annotated[CurrentUser, Depends(require_admin)]
User = Annotated[CurrentUser, Depends(get_current_user)]


def _respond(request: Request, data: Any, refdata: ReferenceData | None = None) -> ApiResponse:
    degraded = refdata is not None and not refdata.gateway.is_online
    resp = success_response(data, degraded=degraded)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


# ---------------------------------------------------------------------------
# Platform banks
# ---------------------------------------------------------------------------


@router.get("/banks")
async def list_banks(request: Request, admin: Admin, refdata: RefData) -> ApiResponse:
    banks = await refdata.banks.list_all_banks()
    return _respond(request, [BankOut.from_domain(b).model_dump() for b in banks], refdata)


@router.get("/banks/active")
async def list_active_banks(request: Request, user: User, refdata: RefData) -> ApiResponse:
    banks = await refdata.banks.list_active_banks()
    return _respond(request, [BankOut.from_domain(b).model_dump() for b in banks], refdata)


@router.post("/banks", status_code=201)
async def create_bank(
    body: BankCreateRequest, request: Request, admin: Admin, refdata: RefData
) -> ApiResponse:
    bank_id = await refdata.banks.create_bank(
        name=body.name,
        account_holder=body.account_holder,
        cliq_details=body.cliq_details.to_domain(),
        balance=body.balance,
        is_active=body.is_active,
        description=body.description,
        priority=body.priority,
    )
    return _respond(request, CreatedOut(id=bank_id).model_dump())


@router.patch("/banks/{bank_id}")
async def update_bank(
    bank_id: str, body: BankUpdateRequest, request: Request, admin: Admin, refdata: RefData
) -> ApiResponse:
    await refdata.banks.update_bank(bank_id, **body.to_updates())
    return _respond(request, None)


@router.put("/banks/{bank_id}/balance")
async def update_balance(
    bank_id: str, body: BalanceUpdateRequest, request: Request, admin: Admin, refdata: RefData
) -> ApiResponse:
    await refdata.banks.update_balance(bank_id, body.balance)
    return _respond(request, None)


@router.delete("/banks/{bank_id}")
async def delete_bank(
    bank_id: str, request: Request, admin: Admin, refdata: RefData
) -> ApiResponse:
    await refdata.banks.delete_bank(bank_id)
    return _respond(request, None)


@router.post("/banks/bulk-status")
async def bulk_status(
    body: BulkStatusRequest, request: Request, admin: Admin, refdata: RefData
) -> ApiResponse:
    updated = await refdata.bulk.bulk_set_bank_active(body.bank_ids, body.is_active)
    return _respond(request, BulkStatusOut(updated=updated, is_active=body.is_active).model_dump())


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------


@router.get("/assignments")
async def list_assignments(request: Request, admin: Admin, refdata: RefData) -> ApiResponse:
    items = await refdata.registry.list_all()
    return _respond(request, [AssignmentOut.from_domain(a).model_dump() for a in items], refdata)


@router.post("/assignments", status_code=201)
async def create_assignment(
    body: AssignmentCreateRequest, request: Request, admin: Admin, refdata: RefData
) -> ApiResponse:
    assignment_id = await refdata.registry.assign(
        exchange_id=body.exchange_id,
        bank_id=body.bank_id,
        assignment_type=body.assignment_type,
        assigned_by=admin.id,
        priority=body.priority,
    )
    return _respond(request, CreatedOut(id=assignment_id).model_dump())


@router.delete("/assignments/{exchange_id}/{bank_id}")
async def remove_assignment(
    exchange_id: str, bank_id: str, request: Request, admin: Admin, refdata: RefData
) -> ApiResponse:
    deactivated = await refdata.registry.remove(exchange_id, bank_id)
    return _respond(request, RemovedOut(deactivated=deactivated).model_dump())


@router.get("/exchanges/{exchange_id}/banks")
async def exchange_banks(
    exchange_id: str, request: Request, user: User, refdata: RefData
) -> ApiResponse:
    ensure_exchange_access(user, exchange_id)
    joined = await refdata.registry.resolve_assigned_banks(exchange_id)
    data = [AssignedBankOut.from_domain(ab).model_dump() for ab in joined]
    return _respond(request, data, refdata)
