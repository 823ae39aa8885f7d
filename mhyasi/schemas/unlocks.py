from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class UnlockRequestCreate(BaseModel):
    amount: Optional[int] = None
    details: Optional[str] = None


class ApproveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request_id: int = Field(alias="requestId")
    duration: Optional[float] = Field(default=None, allow_inf_nan=False)
    unit: Literal["days", "months", "years"] = "days"


class DeclineRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request_id: int = Field(alias="requestId")


class RedeemRequest(BaseModel):
    code: str = ""
