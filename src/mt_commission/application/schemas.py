"""Pydantic schemas for mt_commission API."""

from typing import Literal

from pydantic import BaseModel, Field

from src.mt_commission.domain.models import CommissionQuote, CommissionRate
from src.mt_common.money import to_display


class CommissionRateOut(BaseModel):
    type: str
    value: float

    @classmethod
    def from_domain(cls, rate: CommissionRate) -> "CommissionRateOut":
        return cls(type=rate.type, value=rate.value)


class QuoteRequest(BaseModel):
    amount: float = Field(gt=0)
    direction: Literal["incoming", "outgoing"]


class QuoteOut(BaseModel):
    rate: CommissionRateOut
    amount: float
    commission: float
    commission_display: str
    net_amount: float
    net_amount_display: str

    @classmethod
    def from_domain(cls, q: CommissionQuote) -> "QuoteOut":
        return cls(
            rate=CommissionRateOut.from_domain(q.rate),
            amount=q.amount,
            commission=q.commission,
            commission_display=to_display(q.commission),
            net_amount=q.net_amount,
            net_amount_display=to_display(q.net_amount),
        )
