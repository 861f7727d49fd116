from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from core.helper import get_current_time_in_timezone
from core.log import logger
from models.Participant import Participant
from models.Reference import Reference
from models.Ticket import Ticket


def reset_raffle(db: Session) -> dict:
    """Delete every participant and ticket and mark all references unused.

    Runs as a single transaction.
    """
    try:
        participants = db.execute(delete(Participant)).rowcount
        tickets = db.execute(delete(Ticket)).rowcount
        references = db.execute(
            update(Reference)
            .where(Reference.used.is_(True))
            .values(used=False, used_at=None, updated_at=get_current_time_in_timezone())
        ).rowcount
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.warning(
        f"Raffle reset: {participants} participants and {tickets} tickets deleted, "
        f"{references} references released"
    )
    return {
        "participants": participants,
        "tickets": tickets,
        "references": references,
    }
