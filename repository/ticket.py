import secrets
import uuid
from typing import Iterable, List, Optional, Set
from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from core.exceptions import InsufficientCapacity
from core.helper import get_current_time_in_timezone
from core.log import logger
from models.Ticket import TICKET_NUMBER_LENGTH, TICKET_NUMBER_SPACE, Ticket
from schemas.ticket import TicketResponseItem

# upper bound on random draws for a single allocate call
MAX_DRAW_ATTEMPTS = TICKET_NUMBER_SPACE
# below this many free numbers allocation samples the free list directly
SAMPLE_FREE_THRESHOLD = TICKET_NUMBER_SPACE // 10
SAMPLE_FREE_FACTOR = 4


def format_ticket_number(value: int) -> str:
    return str(value).zfill(TICKET_NUMBER_LENGTH)


def get_used_ticket_numbers(db: Session) -> Set[str]:
    query = select(Ticket.number).where(Ticket.used.is_(True))
    return set(db.execute(query).scalars().all())


def count_used_tickets(db: Session) -> int:
    query = select(func.count()).select_from(Ticket).where(Ticket.used.is_(True))
    return db.execute(query).scalar() or 0


def allocate_tickets(
    db: Session,
    count: int,
    already_excluded: Optional[Iterable[str]] = None,
    max_attempts: int = MAX_DRAW_ATTEMPTS,
) -> List[str]:
    """Propose ``count`` distinct ticket numbers that are not used yet.

    Numbers are drawn at random from 0000-9999 and rejected when they are in
    the used set or in ``already_excluded``. Near saturation, where most
    draws would miss, the request is sampled from the list of free numbers
    instead. The result is only a proposal, a concurrent call may pick the
    same numbers; claim_tickets settles that at write time.

    Raises:
        InsufficientCapacity: fewer than ``count`` free numbers exist or the
            draw budget ran out before ``count`` numbers were found
    """
    excluded = get_used_ticket_numbers(db)
    if already_excluded:
        excluded |= set(already_excluded)

    free = TICKET_NUMBER_SPACE - len(excluded)
    if count > free:
        logger.warning(f"Ticket pool exhausted: requested {count}, free {free}")
        raise InsufficientCapacity(
            f"Only {max(free, 0)} ticket numbers available, {count} requested"
        )

    if free <= SAMPLE_FREE_THRESHOLD or free < count * SAMPLE_FREE_FACTOR:
        free_numbers = [
            number
            for number in map(format_ticket_number, range(TICKET_NUMBER_SPACE))
            if number not in excluded
        ]
        return secrets.SystemRandom().sample(free_numbers, count)

    chosen: List[str] = []
    attempts = 0
    while len(chosen) < count and attempts < max_attempts:
        attempts += 1
        number = format_ticket_number(secrets.randbelow(TICKET_NUMBER_SPACE))
        if number in excluded:
            continue
        chosen.append(number)
        excluded.add(number)

    if len(chosen) < count:
        logger.warning(
            f"Ticket allocation gave up after {attempts} draws, "
            f"found {len(chosen)} of {count}"
        )
        raise InsufficientCapacity(
            f"Could not find {count} free ticket numbers, try again"
        )

    return chosen


def _insert_statement(db: Session):
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert(Ticket)
    return sqlite.insert(Ticket)


def claim_tickets(db: Session, numbers: List[str]) -> List[str]:
    """Insert used ticket rows for ``numbers``, skipping numbers already used.

    A row that exists with used false is taken over. Returns the numbers
    this call actually claimed, in no particular order.
    """
    if not numbers:
        return []

    now = get_current_time_in_timezone()
    # a fixed insert order keeps overlapping claims from deadlocking
    rows = [
        {
            "id": uuid.uuid4(),
            "number": number,
            "used": True,
            "created_at": now,
            "updated_at": now,
        }
        for number in sorted(set(numbers))
    ]
    stmt = _insert_statement(db).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Ticket.number],
        set_={"used": True, "updated_at": now},
        where=Ticket.used.is_(False),
    ).returning(Ticket.number)

    claimed = db.execute(stmt).scalars().all()
    return list(claimed)


def delete_tickets(db: Session, numbers: Iterable[str]) -> int:
    """Remove ticket rows so their numbers go back to the pool."""
    numbers = list(numbers)
    if not numbers:
        return 0
    result = db.execute(delete(Ticket).where(Ticket.number.in_(numbers)))
    return result.rowcount


def get_ticket_stats(db: Session) -> dict:
    used = count_used_tickets(db)
    return {
        "total": TICKET_NUMBER_SPACE,
        "used": used,
        "available": TICKET_NUMBER_SPACE - used,
        "percentage_used": round(used / TICKET_NUMBER_SPACE * 100, 2),
    }


def get_ticket_distribution(db: Session) -> List[dict]:
    used = count_used_tickets(db)
    return [
        {"name": "used", "value": used},
        {"name": "available", "value": TICKET_NUMBER_SPACE - used},
    ]


def get_tickets_per_page(
    db: Session,
    page: int,
    limit: int,
    used: Optional[bool] = None,
    search: Optional[str] = None,
) -> dict:
    offset = (page - 1) * limit

    stmt = select(Ticket)
    if used is not None:
        stmt = stmt.where(Ticket.used.is_(used))
    if search:
        stmt = stmt.where(Ticket.number.contains(search.strip()))

    total_count = db.scalar(select(func.count()).select_from(stmt.subquery()))

    stmt = stmt.order_by(Ticket.created_at.desc()).offset(offset).limit(limit)

    results = db.scalars(stmt).all()
    results_schema = [TicketResponseItem.model_validate(r) for r in results]

    return {
        "tickets": results_schema,
        "total": total_count or 0,
        "page": page,
        "limit": limit,
    }


def get_ticket_by_number(db: Session, number: str) -> Optional[Ticket]:
    query = select(Ticket).where(Ticket.number == number)
    return db.execute(query).scalar()
