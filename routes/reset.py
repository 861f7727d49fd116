from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from core.log import logger
from core.responses import Ok, Unauthorized, common_response
from core.security import get_current_admin
from models import get_db_sync
from models.AdminUser import AdminUser
from repository import reset as resetRepo
from schemas.common import InternalServerErrorResponse, UnauthorizedResponse

router = APIRouter(prefix="/admin", tags=["Admin Reset"])


@router.post(
    "/reset",
    responses={
        "401": {"model": UnauthorizedResponse},
        "500": {"model": InternalServerErrorResponse},
    },
)
def reset(
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    try:
        summary = resetRepo.reset_raffle(db=db)
    except Exception as e:
        logger.exception("Raffle reset failed")
        raise HTTPException(status_code=500, detail=f"Internal Server Error: {e}")

    logger.warning(f"Raffle reset requested by {admin.username}")
    return common_response(
        Ok(
            data={
                "success": True,
                "message": "Raffle reset, all participants and tickets were deleted "
                "and every reference is unused again",
                "deleted": summary,
            }
        )
    )
