from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from core.log import logger
from core.responses import BadRequest, Ok, Unauthorized, common_response
from core.security import (
    generate_token_from_admin,
    get_current_admin,
    validated_password,
)
from models import get_db_sync
from models.AdminUser import AdminUser
from repository import admin_user as adminUserRepo
from schemas.auth import (
    AdminUserResponse,
    LoginRequest,
    LoginSuccessResponse,
    MeResponse,
)
from schemas.common import BadRequestResponse, UnauthorizedResponse

router = APIRouter(prefix="/admin", tags=["Admin Auth"])


def _authenticate(db: Session, username: str, password: str):
    admin = adminUserRepo.get_admin_by_username(db=db, username=username)
    if admin is None or not validated_password(admin.password, password):
        logger.info(f"Failed admin login for {username}")
        return None
    return admin


def _admin_response(admin: AdminUser) -> AdminUserResponse:
    return AdminUserResponse(
        id=str(admin.id),
        username=admin.username,
        email=admin.email,
        role=admin.role,
        created_at=admin.created_at,
        updated_at=admin.updated_at,
    )


@router.post("/token/")
def swagger_form_token(
    form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db_sync)
):
    admin = _authenticate(db, form_data.username, form_data.password)
    if admin is None:
        return common_response(BadRequest(message="Invalid Credentials"))

    return {"access_token": generate_token_from_admin(admin), "token_type": "bearer"}


@router.post(
    "/login",
    responses={
        "200": {"model": LoginSuccessResponse},
        "401": {"model": UnauthorizedResponse},
        "400": {"model": BadRequestResponse},
    },
)
def login(request: LoginRequest, db: Session = Depends(get_db_sync)):
    if not request.username or not request.password:
        return common_response(BadRequest(message="Username and password are required"))

    admin = _authenticate(db, request.username, request.password)
    if admin is None:
        return common_response(Unauthorized(message="Invalid Credentials"))

    return common_response(
        Ok(
            data=LoginSuccessResponse(
                token=generate_token_from_admin(admin),
                user=_admin_response(admin),
            ).model_dump(mode="json")
        )
    )


@router.get(
    "/me",
    responses={
        "200": {"model": MeResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def me(admin: AdminUser = Depends(get_current_admin)):
    if admin is None:
        return common_response(Unauthorized(message="Invalid Credentials"))

    return common_response(
        Ok(data=MeResponse(user=_admin_response(admin)).model_dump(mode="json"))
    )
