from datetime import datetime
from typing import List, Optional
from uuid import UUID
from fastapi import Query
from pydantic import BaseModel


class TicketQuery(BaseModel):
    page: int = Query(1, ge=1, description="Page Number")
    limit: int = Query(50, ge=1, le=500, description="Page Size")
    used: Optional[bool] = Query(None, description="Filter by used flag")
    search: Optional[str] = Query(None, description="Search by ticket number")


class TicketResponseItem(BaseModel):
    id: UUID
    number: str
    used: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class TicketListResponse(BaseModel):
    tickets: List[TicketResponseItem]
    total: int
    page: int
    limit: int


class TicketStatsResponse(BaseModel):
    total: int
    used: int
    available: int
    percentage_used: float


class TicketDistributionItem(BaseModel):
    name: str
    value: int
