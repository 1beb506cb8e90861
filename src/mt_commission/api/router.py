"""mt_commission REST endpoints.

GET  /commission/rate?direction=incoming|outgoing — caller's applicable rate
POST /commission/quote                             — rate, commission and net for an amount
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request

from src.mt_bank.api.deps import get_reference_data
from src.mt_bank.application.wiring import ReferenceData
from src.mt_commission.application.schemas import CommissionRateOut, QuoteOut, QuoteRequest
from src.mt_common.response import ApiResponse, success_response
from src.mt_gateway.auth.dependencies import CurrentUser, get_current_user

router = APIRouter(prefix="/commission", tags=["commission"])


@router.get("/rate")
async def get_rate(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    refdata: Annotated[ReferenceData, Depends(get_reference_data)],
    direction: Literal["incoming", "outgoing"] = Query(...),
) -> ApiResponse:
    rate = await refdata.commission.rate_for_user(current_user.id, direction, current_user.role)
    resp = success_response(CommissionRateOut.from_domain(rate).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/quote")
async def get_quote(
    body: QuoteRequest,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    refdata: Annotated[ReferenceData, Depends(get_reference_data)],
) -> ApiResponse:
    result = await refdata.commission.quote_for_user(
        current_user.id, body.amount, body.direction, current_user.role
    )
    resp = success_response(QuoteOut.from_domain(result).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
