from datetime import date, datetime, time, timedelta
from typing import List, Optional
from uuid import UUID
from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import Session

from core.exceptions import ValidationFailed
from core.helper import get_current_time_in_timezone
from core.log import logger
from models.Participant import Participant
from repository.redemption import secure_tickets
from repository.ticket import delete_tickets
from schemas.participant import ParticipantResponseItem

SEARCH_LIMIT = 20


def get_participant_by_id(db: Session, id: UUID) -> Optional[Participant]:
    query = select(Participant).where(Participant.id == id)
    participant = db.execute(query).scalar()
    return participant


def get_participant_for_update(db: Session, id: UUID) -> Optional[Participant]:
    # Lock the participant row so concurrent ticket edits queue up
    stmt = select(Participant).where(Participant.id == id).with_for_update(of=Participant)
    return db.execute(stmt).unique().scalar()


def _day_bounds(date_from: Optional[date], date_to: Optional[date]):
    tz = get_current_time_in_timezone().tzinfo
    start = datetime.combine(date_from, time.min, tzinfo=tz) if date_from else None
    # date_to is inclusive
    end = (
        datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=tz)
        if date_to
        else None
    )
    return start, end


def _search_clause(search: str):
    pattern = f"%{search.strip()}%"
    return or_(
        Participant.name.ilike(pattern),
        Participant.email.ilike(pattern),
        Participant.national_id.ilike(pattern),
        Participant.reference_code.contains(search.strip()),
    )


def _filter_participants(
    stmt: Select,
    search: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    reference: Optional[str] = None,
) -> Select:
    if search:
        stmt = stmt.where(_search_clause(search))

    start, end = _day_bounds(date_from, date_to)
    if start is not None:
        stmt = stmt.where(Participant.created_at >= start)
    if end is not None:
        stmt = stmt.where(Participant.created_at < end)

    if reference:
        stmt = stmt.where(Participant.reference_code == reference.strip())
    return stmt


def get_participants_per_page(
    db: Session,
    page: int,
    limit: int,
    search: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    reference: Optional[str] = None,
) -> dict:
    offset = (page - 1) * limit

    stmt = _filter_participants(
        select(Participant),
        search=search,
        date_from=date_from,
        date_to=date_to,
        reference=reference,
    )

    total_count = db.scalar(select(func.count()).select_from(stmt.subquery()))

    stmt = stmt.order_by(Participant.created_at.desc()).offset(offset).limit(limit)

    results = db.scalars(stmt).unique().all()
    results_schema = [ParticipantResponseItem.model_validate(r) for r in results]

    return {
        "participants": results_schema,
        "total": total_count or 0,
        "page": page,
        "limit": limit,
    }


def search_participants(db: Session, query: Optional[str]) -> List[Participant]:
    if not query or not query.strip():
        return []
    stmt = (
        select(Participant)
        .where(_search_clause(query))
        .order_by(Participant.created_at.desc())
        .limit(SEARCH_LIMIT)
    )
    return list(db.scalars(stmt).unique().all())


def get_participants_for_export(
    db: Session,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    reference: Optional[str] = None,
) -> List[Participant]:
    stmt = _filter_participants(
        select(Participant),
        date_from=date_from,
        date_to=date_to,
        reference=reference,
    ).order_by(Participant.created_at.desc())
    return list(db.scalars(stmt).unique().all())


def update_participant_tickets(
    db: Session,
    participant: Participant,
    add_tickets: Optional[int] = None,
    remove_tickets: Optional[List[str]] = None,
) -> Participant:
    """Add freshly allocated tickets and/or release tickets of a participant.

    Released numbers are deleted from the ticket table and can be drawn
    again. The participant row is expected to be locked by the caller.

    Raises:
        ValidationFailed: a number to remove does not belong to the participant
        InsufficientCapacity: not enough free numbers to add
    """
    current = list(participant.tickets or [])
    try:
        if remove_tickets:
            foreign = [n for n in remove_tickets if n not in current]
            if foreign:
                raise ValidationFailed(
                    f"Tickets {', '.join(foreign)} do not belong to this participant"
                )
            delete_tickets(db, remove_tickets)
            current = [n for n in current if n not in set(remove_tickets)]

        added: List[str] = []
        if add_tickets:
            added = secure_tickets(db=db, count=add_tickets)
            current.extend(added)

        # reassign so the JSON column is flagged dirty
        participant.tickets = current
        db.flush()
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(participant)
    logger.info(
        f"Participant {participant.id} tickets updated: "
        f"+{len(added)} -{len(remove_tickets or [])}"
    )
    return participant
