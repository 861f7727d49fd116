from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from core.exceptions import RedemptionError
from core.export import PARTICIPANT_HEADERS, csv_response, participant_rows
from core.log import logger
from core.responses import (
    NotFound,
    Ok,
    Unauthorized,
    common_response,
    redemption_failure,
)
from core.security import get_current_admin
from models import get_db_sync
from models.AdminUser import AdminUser
from repository import participant as participantRepo
from repository import redemption as redemptionRepo
from schemas.common import (
    InternalServerErrorResponse,
    NotFoundResponse,
    UnauthorizedResponse,
    ValidationErrorResponse,
)
from schemas.participant import (
    ParticipantCreateRequest,
    ParticipantData,
    ParticipantExportQuery,
    ParticipantListResponse,
    ParticipantQuery,
    ParticipantResponseItem,
    ParticipantTicketsUpdateRequest,
)
from schemas.public import RedemptionFailureResponse

router = APIRouter(prefix="/admin/participants", tags=["Admin Participants"])


def _participant_data(participant) -> dict:
    return ParticipantResponseItem.model_validate(participant).model_dump(mode="json")


@router.get(
    "/",
    responses={
        "200": {"model": ParticipantListResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def list_participants(
    query: ParticipantQuery = Depends(),
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    data = participantRepo.get_participants_per_page(
        db=db,
        page=query.page,
        limit=query.limit,
        search=query.search,
        date_from=query.date_from,
        date_to=query.date_to,
        reference=query.reference,
    )
    return common_response(
        Ok(data=ParticipantListResponse.model_validate(data).model_dump(mode="json"))
    )


@router.get(
    "/search",
    responses={
        "200": {"model": List[ParticipantResponseItem]},
        "401": {"model": UnauthorizedResponse},
    },
)
def search_participants(
    q: str = Query(None, description="Name, email, national id or reference"),
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    participants = participantRepo.search_participants(db=db, query=q)
    return common_response(Ok(data=[_participant_data(p) for p in participants]))


@router.get("/export")
def export_participants(
    query: ParticipantExportQuery = Depends(),
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    participants = participantRepo.get_participants_for_export(
        db=db,
        date_from=query.date_from,
        date_to=query.date_to,
        reference=query.reference,
    )
    return csv_response(
        "participants", PARTICIPANT_HEADERS, participant_rows(participants)
    )


@router.get(
    "/{participant_id}",
    responses={
        "200": {"model": ParticipantResponseItem},
        "401": {"model": UnauthorizedResponse},
        "404": {"model": NotFoundResponse},
    },
)
def get_participant(
    participant_id: UUID,
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    participant = participantRepo.get_participant_by_id(db=db, id=participant_id)
    if participant is None:
        return common_response(NotFound(message="Participant not found"))

    return common_response(Ok(data=_participant_data(participant)))


@router.post(
    "/",
    responses={
        "200": {"model": ParticipantResponseItem},
        "400": {"model": RedemptionFailureResponse},
        "401": {"model": UnauthorizedResponse},
        "404": {"model": RedemptionFailureResponse},
        "422": {"model": ValidationErrorResponse},
        "500": {"model": InternalServerErrorResponse},
    },
)
def create_participant(
    request: ParticipantCreateRequest,
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    try:
        participant = redemptionRepo.create_participant(
            db=db,
            participant_data=ParticipantData(
                name=request.name,
                email=request.email,
                phone=request.phone,
                national_id=request.national_id,
            ),
            ticket_count=request.ticket_count,
            reference_code=request.reference,
        )
    except RedemptionError as e:
        return common_response(redemption_failure(e))
    except Exception as e:
        logger.exception("Admin participant creation failed")
        raise HTTPException(status_code=500, detail=f"Internal Server Error: {e}")

    logger.info(f"Admin {admin.username} created participant {participant.id}")
    return common_response(Ok(data=_participant_data(participant)))


@router.patch(
    "/{participant_id}/tickets",
    responses={
        "200": {"model": ParticipantResponseItem},
        "400": {"model": RedemptionFailureResponse},
        "401": {"model": UnauthorizedResponse},
        "404": {"model": NotFoundResponse},
        "422": {"model": ValidationErrorResponse},
    },
)
def update_participant_tickets(
    participant_id: UUID,
    request: ParticipantTicketsUpdateRequest,
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    participant = participantRepo.get_participant_for_update(db=db, id=participant_id)
    if participant is None:
        return common_response(NotFound(message="Participant not found"))

    try:
        participant = participantRepo.update_participant_tickets(
            db=db,
            participant=participant,
            add_tickets=request.add_tickets,
            remove_tickets=request.remove_tickets,
        )
    except RedemptionError as e:
        return common_response(redemption_failure(e))

    return common_response(Ok(data=_participant_data(participant)))
