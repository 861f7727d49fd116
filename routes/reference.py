from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.export import REFERENCE_HEADERS, csv_response, reference_rows
from core.responses import (
    BadRequest,
    NotFound,
    Ok,
    Unauthorized,
    common_response,
)
from core.security import get_current_admin
from models import get_db_sync
from models.AdminUser import AdminUser
from repository import reference as referenceRepo
from schemas.common import (
    BadRequestResponse,
    NotFoundResponse,
    UnauthorizedResponse,
)
from schemas.reference import (
    ReferenceBulkCreateRequest,
    ReferenceBulkCreateResponse,
    ReferenceCreateRequest,
    ReferenceExportQuery,
    ReferenceListResponse,
    ReferenceQuery,
    ReferenceResponseItem,
    ReferenceUpdateRequest,
)

router = APIRouter(prefix="/admin/references", tags=["Admin References"])


@router.get(
    "/",
    responses={
        "200": {"model": ReferenceListResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def list_references(
    query: ReferenceQuery = Depends(),
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    data = referenceRepo.get_references_per_page(
        db=db,
        page=query.page,
        limit=query.limit,
        used=query.used,
        search=query.search,
    )
    return common_response(
        Ok(data=ReferenceListResponse.model_validate(data).model_dump(mode="json"))
    )


@router.get("/export")
def export_references(
    query: ReferenceExportQuery = Depends(),
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    references = referenceRepo.get_references_for_export(db=db, used=query.used)
    return csv_response("references", REFERENCE_HEADERS, reference_rows(references))


@router.post(
    "/",
    responses={
        "200": {"model": ReferenceResponseItem},
        "400": {"model": BadRequestResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def create_reference(
    request: ReferenceCreateRequest,
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    try:
        reference = referenceRepo.insert_reference(
            db=db,
            code=request.reference,
            ticket_count=request.ticket_count,
            ticket_value=request.ticket_value,
        )
    except IntegrityError:
        db.rollback()
        return common_response(BadRequest(message="Reference already exists"))

    return common_response(
        Ok(data=ReferenceResponseItem.model_validate(reference).model_dump(mode="json"))
    )


@router.post(
    "/bulk",
    responses={
        "200": {"model": ReferenceBulkCreateResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def bulk_create_references(
    request: ReferenceBulkCreateRequest,
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    created, errors = referenceRepo.bulk_insert_references(
        db=db, items=request.references
    )
    return common_response(
        Ok(
            data=ReferenceBulkCreateResponse(created=created, errors=errors).model_dump(
                mode="json"
            )
        )
    )


@router.put(
    "/{reference_id}",
    responses={
        "200": {"model": ReferenceResponseItem},
        "401": {"model": UnauthorizedResponse},
        "404": {"model": NotFoundResponse},
    },
)
def update_reference(
    reference_id: UUID,
    request: ReferenceUpdateRequest,
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    reference = referenceRepo.get_reference_by_id(db=db, id=reference_id)
    if reference is None:
        return common_response(NotFound(message="Reference not found"))

    reference = referenceRepo.update_reference(
        db=db,
        reference=reference,
        ticket_count=request.ticket_count,
        ticket_value=request.ticket_value,
        used=request.used,
    )
    return common_response(
        Ok(data=ReferenceResponseItem.model_validate(reference).model_dump(mode="json"))
    )


@router.delete(
    "/{reference_id}",
    responses={
        "401": {"model": UnauthorizedResponse},
        "404": {"model": NotFoundResponse},
    },
)
def delete_reference(
    reference_id: UUID,
    db: Session = Depends(get_db_sync),
    admin: AdminUser = Depends(get_current_admin),
):
    if admin is None:
        return common_response(Unauthorized(message="Unauthorized"))

    reference = referenceRepo.get_reference_by_id(db=db, id=reference_id)
    if reference is None:
        return common_response(NotFound(message="Reference not found"))

    referenceRepo.delete_reference(db=db, reference=reference)
    return common_response(Ok(data={"success": True}))
