from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from core.exceptions import BadFormat, RedemptionError, ReferenceAlreadyUsed
from core.log import logger
from core.responses import Ok, common_response, redemption_failure
from models import get_db_sync
from repository import redemption as redemptionRepo
from repository import reference as referenceRepo
from repository import ticket as ticketRepo
from schemas.common import InternalServerErrorResponse, ValidationErrorResponse
from schemas.public import (
    GenerateTicketsRequest,
    GenerateTicketsResponse,
    PublicStatsResponse,
    RedemptionFailureResponse,
    ValidateReferenceRequest,
    ValidateReferenceResponse,
)
from validators.reference import is_valid_reference, normalize_reference

router = APIRouter(tags=["Public"])


@router.post(
    "/validate-reference",
    responses={
        "200": {"model": ValidateReferenceResponse},
        "400": {"model": ValidateReferenceResponse},
        "404": {"model": ValidateReferenceResponse},
        "422": {"model": ValidationErrorResponse},
    },
)
def validate_reference(
    request: ValidateReferenceRequest, db: Session = Depends(get_db_sync)
):
    try:
        if not is_valid_reference(request.reference):
            raise BadFormat()
        code = normalize_reference(request.reference)

        availability = referenceRepo.check_available(db=db, code=code)
        if availability.used:
            raise ReferenceAlreadyUsed()
    except RedemptionError as e:
        response = redemption_failure(e)
        response.custom_response = ValidateReferenceResponse(
            valid=False, reason=e.reason, message=e.message
        ).model_dump(mode="json")
        return common_response(response)

    return common_response(
        Ok(
            data=ValidateReferenceResponse(
                valid=True,
                reference=availability.code,
                ticket_count=availability.ticket_count,
                ticket_value=float(availability.ticket_value),
            ).model_dump(mode="json")
        )
    )


@router.post(
    "/generate-tickets",
    responses={
        "200": {"model": GenerateTicketsResponse},
        "400": {"model": RedemptionFailureResponse},
        "404": {"model": RedemptionFailureResponse},
        "422": {"model": ValidationErrorResponse},
        "500": {"model": InternalServerErrorResponse},
    },
)
def generate_tickets(
    request: GenerateTicketsRequest, db: Session = Depends(get_db_sync)
):
    try:
        participant = redemptionRepo.redeem_reference(
            db=db,
            code=request.reference,
            participant_data=request.user_data,
            ticket_count=request.ticket_count,
        )
    except RedemptionError as e:
        return common_response(redemption_failure(e))
    except Exception as e:
        logger.exception(f"Ticket generation failed for {request.reference}")
        raise HTTPException(status_code=500, detail=f"Internal Server Error: {e}")

    return common_response(
        Ok(
            data=GenerateTicketsResponse(
                participant_id=str(participant.id),
                tickets=participant.tickets,
                message="Tickets generated successfully",
            ).model_dump(mode="json")
        )
    )


@router.get("/stats", responses={"200": {"model": PublicStatsResponse}})
def public_stats(db: Session = Depends(get_db_sync)):
    stats = ticketRepo.get_ticket_stats(db=db)
    return common_response(
        Ok(
            data=PublicStatsResponse(
                total_tickets=stats["total"],
                used=stats["used"],
                available=stats["available"],
                percentage_used=stats["percentage_used"],
            ).model_dump(mode="json")
        )
    )
