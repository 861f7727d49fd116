from typing import List, Optional
from pydantic import BaseModel, Field

from core.exceptions import RedemptionFailureReason
from schemas.participant import ParticipantData


class ValidateReferenceRequest(BaseModel):
    # format is checked by the handler so it can answer with BAD_FORMAT
    reference: str


class ValidateReferenceResponse(BaseModel):
    valid: bool
    reference: Optional[str] = None
    ticket_count: Optional[int] = None
    ticket_value: Optional[float] = None
    reason: Optional[RedemptionFailureReason] = None
    message: Optional[str] = None


class GenerateTicketsRequest(BaseModel):
    reference: str
    user_data: ParticipantData
    ticket_count: Optional[int] = Field(default=None, ge=1)


class GenerateTicketsResponse(BaseModel):
    success: bool = True
    participant_id: str
    tickets: List[str]
    message: str


class RedemptionFailureResponse(BaseModel):
    success: bool = False
    reason: RedemptionFailureReason
    message: str


class PublicStatsResponse(BaseModel):
    total_tickets: int
    used: int
    available: int
    percentage_used: float
