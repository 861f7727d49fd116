from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.responses import BadRequest, NotFound, Ok, Unauthorized, common_response
from core.security import get_current_admin
from models import get_db_sync
from models.AdminUser import AdminUser
from repository import ticket as ticketRepo
from schemas.common import BadRequestResponse, NotFoundResponse, UnauthorizedResponse
from schemas.ticket import (
    TicketDistributionItem,
    TicketListResponse,
    TicketQuery,
    TicketResponseItem,
    TicketStatsResponse,
)
from validators.reference import is_valid_ticket_number

router = APIRouter(prefix="/admin/tickets", tags=["Admin Tickets"])


@router.get(
    "/stats",
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
    "/distribution",
    responses={
        "200": {"model": List[TicketDistributionItem]},
        "401": {"model": UnauthorizedResponse},
    },
)
def ticket_distribution(
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    distribution = ticketRepo.get_ticket_distribution(db=db)
    return common_response(
        Ok(data=[TicketDistributionItem(**item).model_dump() for item in distribution])
    )


@router.get(
    "/",
    responses={
        "200": {"model": TicketListResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def list_tickets(
    query: TicketQuery = Depends(),
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    data = ticketRepo.get_tickets_per_page(
        db=db,
        page=query.page,
        limit=query.limit,
        used=query.used,
        search=query.search,
    )
    return common_response(
        Ok(data=TicketListResponse.model_validate(data).model_dump(mode="json"))
    )


@router.get(
    "/{number}",
    responses={
        "200": {"model": TicketResponseItem},
        "400": {"model": BadRequestResponse},
        "401": {"model": UnauthorizedResponse},
        "404": {"model": NotFoundResponse},
    },
)
def get_ticket(
    number: str,
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    if not is_valid_ticket_number(number):
        return common_response(BadRequest(message="Ticket number must be 4 digits"))

    ticket = ticketRepo.get_ticket_by_number(db=db, number=number)
    if ticket is None:
        return common_response(NotFound(message="Ticket not found"))

    return common_response(
        Ok(data=TicketResponseItem.model_validate(ticket).model_dump(mode="json"))
    )
