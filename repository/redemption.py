"""Redeem a reference for a batch of ticket numbers in one transaction.

The flow is check, allocate, then commit. The check and the allocation are
advisory; commit_redemption re-arbitrates both against the database:

* the reference flips to used through a guarded UPDATE, so only one
  transaction per reference gets past it
* ticket rows are inserted with ON CONFLICT, numbers taken by a concurrent
  redemption are replaced by fresh draws or the whole thing fails

Any failure rolls back everything written by the attempt.
"""

from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import (
    BadFormat,
    InsufficientCapacity,
    RedemptionError,
    ReferenceAlreadyUsed,
    ValidationFailed,
)
from core.helper import get_current_time_in_timezone
from core.log import logger
from models.Participant import Participant
from repository.reference import check_available, mark_used
from repository.ticket import allocate_tickets, claim_tickets
from schemas.participant import ParticipantData
from validators.reference import (
    is_valid_reference,
    is_valid_ticket_number,
    normalize_reference,
)

# claim/re-draw cycles before giving up on a batch that keeps colliding
REDEMPTION_MAX_ROUNDS = 5


def secure_tickets(
    db: Session, count: int, proposal: Optional[List[str]] = None
) -> List[str]:
    """Claim exactly ``count`` ticket numbers inside the current transaction.

    Starts from ``proposal`` when given. Numbers lost to a concurrent
    transaction are replaced with new draws; the batch is never shortened.

    Raises:
        InsufficientCapacity: the pool cannot supply ``count`` numbers
    """
    secured: List[str] = []
    proposal = list(proposal) if proposal else allocate_tickets(db, count)

    for round_number in range(1, REDEMPTION_MAX_ROUNDS + 1):
        claimed = set(claim_tickets(db, proposal))
        secured.extend(number for number in proposal if number in claimed)

        missing = count - len(secured)
        if missing == 0:
            return secured

        logger.info(
            f"{len(proposal) - len(claimed)} proposed tickets were taken "
            f"concurrently, redrawing {missing} (round {round_number})"
        )
        proposal = allocate_tickets(db, missing, already_excluded=secured)

    raise InsufficientCapacity(
        f"Could not secure {count} ticket numbers, try again"
    )


def commit_redemption(
    db: Session,
    reference_code: Optional[str],
    participant_data: ParticipantData,
    proposed_tickets: List[str],
    enforce_reference_count: bool = True,
) -> Participant:
    """Persist a participant, its tickets and the used reference atomically.

    ``reference_code`` may be None for tickets gifted from the backoffice.
    With ``enforce_reference_count`` the proposal size must match the
    reference's ticket count.

    On any error the session is rolled back before the exception propagates.
    """
    count = len(proposed_tickets)
    if count < 1:
        raise ValidationFailed("Ticket count must be greater than 0")
    invalid = [n for n in proposed_tickets if not is_valid_ticket_number(n)]
    if invalid:
        raise ValidationFailed(
            f"Invalid ticket numbers: {', '.join(map(str, invalid))}"
        )
    if len(set(proposed_tickets)) != count:
        raise ValidationFailed("Proposed ticket numbers must be distinct")

    now = get_current_time_in_timezone()
    try:
        if reference_code is not None:
            previous = mark_used(db=db, code=reference_code, as_of=now)
            if enforce_reference_count and previous.ticket_count != count:
                raise ValidationFailed(
                    f"Reference {reference_code} entitles {previous.ticket_count} "
                    f"tickets, {count} requested"
                )

        tickets = secure_tickets(db=db, count=count, proposal=proposed_tickets)

        participant = Participant(
            reference_code=reference_code,
            name=participant_data.name,
            email=participant_data.email,
            phone=participant_data.phone,
            national_id=participant_data.national_id,
            tickets=tickets,
            generated_at=now,
        )
        db.add(participant)
        db.flush()
        db.commit()
    except IntegrityError:
        db.rollback()
        if reference_code is None:
            raise
        # unique participant.reference_code caught a second redemption
        logger.info(f"Reference {reference_code} was redeemed concurrently")
        raise ReferenceAlreadyUsed()
    except Exception:
        db.rollback()
        raise

    db.refresh(participant)
    logger.info(
        f"Participant {participant.id} got {len(tickets)} tickets"
        + (f" with reference {reference_code}" if reference_code else "")
    )
    return participant


def redeem_reference(
    db: Session,
    code: str,
    participant_data: ParticipantData,
    ticket_count: Optional[int] = None,
) -> Participant:
    """Public redemption: validate, check, allocate and commit.

    ``ticket_count`` defaults to the reference's count and must match it.

    Raises:
        RedemptionError: one of its subclasses, with a stable ``reason``
    """
    if not is_valid_reference(code):
        raise BadFormat()
    code = normalize_reference(code)

    try:
        availability = check_available(db=db, code=code)
        if availability.used:
            raise ReferenceAlreadyUsed()

        count = ticket_count if ticket_count is not None else availability.ticket_count
        if count != availability.ticket_count:
            raise ValidationFailed(
                f"Reference {code} entitles {availability.ticket_count} tickets, "
                f"{count} requested"
            )

        proposal = allocate_tickets(db=db, count=count)
    except RedemptionError as e:
        db.rollback()
        logger.info(f"Redemption of {code} rejected: {e.reason.value}")
        raise

    try:
        return commit_redemption(
            db=db,
            reference_code=code,
            participant_data=participant_data,
            proposed_tickets=proposal,
        )
    except RedemptionError as e:
        logger.info(f"Redemption of {code} rejected: {e.reason.value}")
        raise


def create_participant(
    db: Session,
    participant_data: ParticipantData,
    ticket_count: int,
    reference_code: Optional[str] = None,
) -> Participant:
    """Backoffice registration, the count is chosen by the admin.

    When a reference is given it is consumed the same way a public
    redemption would consume it.
    """
    if ticket_count < 1:
        raise ValidationFailed("Ticket count must be greater than 0")
    if reference_code is not None:
        if not is_valid_reference(reference_code):
            raise BadFormat()
        reference_code = normalize_reference(reference_code)

    try:
        proposal = allocate_tickets(db=db, count=ticket_count)
    except RedemptionError:
        db.rollback()
        raise

    return commit_redemption(
        db=db,
        reference_code=reference_code,
        participant_data=participant_data,
        proposed_tickets=proposal,
        enforce_reference_count=False,
    )
