from datetime import datetime
from typing import Any, Dict, List, Literal
from fastapi import Query
from pydantic import BaseModel


class DashboardStatsResponse(BaseModel):
    total_participants: int
    active_participants: int
    total_references: int
    used_references: int
    available_references: int
    total_tickets: int
    used_tickets: int
    available_tickets: int
    conversion_rate: float
    total_value: float
    used_value: float
    available_value: float
    average_ticket_value: float
    total_tickets_with_value: int
    used_tickets_with_value: int
    revenue_today: float
    revenue_this_week: float
    revenue_this_month: float
    total_revenue: float
    projected_revenue: float


class ParticipantStatsResponse(BaseModel):
    total: int
    today: int
    this_week: int
    this_month: int


class ActivityQuery(BaseModel):
    limit: int = Query(10, ge=1, le=100, description="Number of activities")


class ActivityItem(BaseModel):
    id: str
    type: Literal["participant_registered", "reference_used"]
    description: str
    timestamp: datetime
    metadata: Dict[str, Any]


class ActivityListResponse(BaseModel):
    results: List[ActivityItem]
