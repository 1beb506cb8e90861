"""FastAPI dependency: the process-wide ReferenceData built in lifespan."""

from fastapi import Request

from src.mt_bank.application.wiring import ReferenceData
from src.mt_common.errors import InternalError


def get_reference_data(request: Request) -> ReferenceData:
    refdata = getattr(request.app.state, "refdata", None)
    if refdata is None:
        raise InternalError("Reference data services not initialised")
    return refdata
