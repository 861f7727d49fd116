from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy import select, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import ReferenceAlreadyUsed, ReferenceNotFound
from core.helper import get_current_time_in_timezone
from core.log import logger
from models.Reference import Reference
from schemas.reference import (
    ReferenceAvailability,
    ReferenceBulkItem,
    ReferenceResponseItem,
)
from validators.reference import is_valid_reference, normalize_reference


def get_reference_by_id(db: Session, id: UUID) -> Optional[Reference]:
    query = select(Reference).where(Reference.id == id)
    reference = db.execute(query).scalar()
    return reference


def get_reference_by_code(db: Session, code: str) -> Optional[Reference]:
    query = select(Reference).where(Reference.code == code)
    reference = db.execute(query).scalar()
    return reference


def check_available(db: Session, code: str) -> ReferenceAvailability:
    """Read the current state of a reference without changing it.

    The answer is advisory: another request may redeem the reference right
    after this returns, only mark_used settles who wins.

    Raises:
        ReferenceNotFound: no reference has this code
    """
    reference = get_reference_by_code(db=db, code=code)
    if reference is None:
        raise ReferenceNotFound()

    return ReferenceAvailability(
        code=reference.code,
        used=reference.used,
        ticket_count=reference.ticket_count,
        ticket_value=reference.ticket_value or Decimal("0"),
    )


def mark_used(
    db: Session, code: str, as_of: Optional[datetime] = None
) -> ReferenceAvailability:
    """Flip a reference from unused to used inside the caller's transaction.

    The guarded UPDATE only matches while used is false, so of two
    concurrent transactions exactly one gets a row back; the other blocks on
    the row lock and then matches nothing. Nothing is committed here.

    Returns:
        ReferenceAvailability: state of the reference before the update

    Raises:
        ReferenceNotFound: no reference has this code
        ReferenceAlreadyUsed: the reference was used already
    """
    as_of = as_of or get_current_time_in_timezone()
    stmt = (
        update(Reference)
        .where(Reference.code == code, Reference.used.is_(False))
        .values(used=True, used_at=as_of, updated_at=as_of)
        .returning(Reference.ticket_count, Reference.ticket_value)
    )
    row = db.execute(stmt).first()
    if row is None:
        exists = db.execute(
            select(func.count()).select_from(Reference).where(Reference.code == code)
        ).scalar()
        if not exists:
            raise ReferenceNotFound()
        raise ReferenceAlreadyUsed()

    return ReferenceAvailability(
        code=code,
        used=False,
        ticket_count=row.ticket_count,
        ticket_value=row.ticket_value or Decimal("0"),
    )


def insert_reference(
    db: Session,
    code: str,
    ticket_count: int,
    ticket_value: Decimal = Decimal("0"),
    is_commit: bool = True,
) -> Reference:
    reference = Reference(
        code=code,
        ticket_count=ticket_count,
        ticket_value=ticket_value,
        used=False,
        used_at=None,
    )
    db.add(reference)
    db.flush()
    if is_commit:
        db.commit()
        db.refresh(reference)
    logger.info(f"Reference {code} created with {ticket_count} tickets")
    return reference


def bulk_insert_references(
    db: Session, items: List[ReferenceBulkItem]
) -> Tuple[int, List[str]]:
    """Create every valid item, collecting one error message per rejected item.

    Each insert runs in its own savepoint so a duplicate code only discards
    that item.
    """
    created = 0
    errors: List[str] = []
    for item in items:
        code = item.reference
        if not is_valid_reference(code):
            errors.append(f"Reference {code or 'empty'} is invalid")
            continue
        code = normalize_reference(code)

        if item.ticket_count is None or item.ticket_count < 1:
            errors.append(f"Reference {code}: ticket count must be greater than 0")
            continue

        ticket_value = item.ticket_value if item.ticket_value is not None else Decimal("0")
        if ticket_value < 0:
            errors.append(f"Reference {code}: ticket value must not be negative")
            continue

        try:
            with db.begin_nested():
                insert_reference(
                    db=db,
                    code=code,
                    ticket_count=item.ticket_count,
                    ticket_value=ticket_value,
                    is_commit=False,
                )
            created += 1
        except IntegrityError:
            errors.append(f"Reference {code} already exists")

    db.commit()
    logger.info(f"Bulk reference import: {created} created, {len(errors)} rejected")
    return created, errors


def update_reference(
    db: Session,
    reference: Reference,
    ticket_count: Optional[int] = None,
    ticket_value: Optional[Decimal] = None,
    used: Optional[bool] = None,
    is_commit: bool = True,
) -> Reference:
    if ticket_count is not None:
        reference.ticket_count = ticket_count
    if ticket_value is not None:
        reference.ticket_value = ticket_value
    if used is not None:
        reference.used = used
        # used_at is set exactly when used is true
        reference.used_at = get_current_time_in_timezone() if used else None
    if is_commit:
        db.commit()
        db.refresh(reference)
    return reference


def delete_reference(db: Session, reference: Reference, is_commit: bool = True) -> None:
    logger.info(f"Deleting reference {reference.code}")
    db.delete(reference)
    if is_commit:
        db.commit()


def _filter_references(stmt, used: Optional[bool] = None, search: Optional[str] = None):
    if used is not None:
        stmt = stmt.where(Reference.used.is_(used))
    if search:
        stmt = stmt.where(Reference.code.contains(search.strip()))
    return stmt


def get_references_per_page(
    db: Session,
    page: int,
    limit: int,
    used: Optional[bool] = None,
    search: Optional[str] = None,
) -> dict:
    offset = (page - 1) * limit

    stmt = _filter_references(select(Reference), used=used, search=search)

    total_count = db.scalar(select(func.count()).select_from(stmt.subquery()))

    stmt = stmt.order_by(Reference.created_at.desc()).offset(offset).limit(limit)

    results = db.scalars(stmt).all()
    results_schema = [ReferenceResponseItem.model_validate(r) for r in results]

    return {
        "references": results_schema,
        "total": total_count or 0,
        "page": page,
        "limit": limit,
    }


def get_references_for_export(db: Session, used: Optional[bool] = None) -> List[Reference]:
    stmt = _filter_references(select(Reference), used=used).order_by(
        Reference.created_at.desc()
    )
    return list(db.scalars(stmt).all())
