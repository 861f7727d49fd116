from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.responses import Ok, Unauthorized, common_response
from core.security import get_current_admin
from models import get_db_sync
from models.AdminUser import AdminUser
from repository import analytics as analyticsRepo
from repository import ticket as ticketRepo
from schemas.analytics import (
    ActivityListResponse,
    ActivityQuery,
    DashboardStatsResponse,
    ParticipantStatsResponse,
)
from schemas.common import UnauthorizedResponse
from schemas.ticket import TicketStatsResponse

router = APIRouter(prefix="/admin/analytics", tags=["Admin Analytics"])


@router.get(
    "/dashboard",
    responses={
        "200": {"model": DashboardStatsResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def dashboard(
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    stats = analyticsRepo.get_dashboard_stats(db=db)
    return common_response(
        Ok(data=DashboardStatsResponse(**stats).model_dump(mode="json"))
    )


@router.get(
    "/participants",
    responses={
        "200": {"model": ParticipantStatsResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def participant_stats(
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    stats = analyticsRepo.get_participant_stats(db=db)
    return common_response(
        Ok(data=ParticipantStatsResponse(**stats).model_dump(mode="json"))
    )


@router.get(
    "/tickets",
    responses={
        "200": {"model": TicketStatsResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def ticket_stats(
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    stats = ticketRepo.get_ticket_stats(db=db)
    return common_response(Ok(data=TicketStatsResponse(**stats).model_dump(mode="json")))


@router.get(
    "/activity",
    responses={
        "200": {"model": ActivityListResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def recent_activity(
    query: ActivityQuery = Depends(),
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    activities = analyticsRepo.get_recent_activity(db=db, limit=query.limit)
    return common_response(
        Ok(
            data=ActivityListResponse(results=activities).model_dump(mode="json")
        )
    )
