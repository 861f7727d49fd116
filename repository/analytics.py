from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.helper import get_current_time_in_timezone, get_start_of_day
from models.Participant import Participant
from models.Reference import Reference
from models.Ticket import TICKET_NUMBER_SPACE
from repository.ticket import count_used_tickets


def _money(value: Decimal) -> float:
    return float(round(value, 2))


def _period_starts(now: Optional[datetime] = None) -> dict:
    """Start of today, one week back and one month back from local midnight."""
    today = get_start_of_day(now or get_current_time_in_timezone())
    month = today.month - 1 or 12
    year = today.year - 1 if today.month == 1 else today.year
    try:
        month_ago = today.replace(year=year, month=month)
    except ValueError:
        # e.g. March 31st has no February counterpart
        month_ago = today.replace(year=year, month=month, day=1) + timedelta(days=31)
        month_ago = month_ago.replace(day=1) - timedelta(days=1)
    return {
        "today": today,
        "week": today - timedelta(days=7),
        "month": month_ago,
    }


def _count_participants_since(db: Session, since: Optional[datetime] = None) -> int:
    stmt = select(func.count()).select_from(Participant)
    if since is not None:
        stmt = stmt.where(Participant.created_at >= since)
    return db.execute(stmt).scalar() or 0


def get_dashboard_stats(db: Session, now: Optional[datetime] = None) -> dict:
    total_participants = _count_participants_since(db)
    total_references = (
        db.execute(select(func.count()).select_from(Reference)).scalar() or 0
    )
    used_references = (
        db.execute(
            select(func.count()).select_from(Reference).where(Reference.used.is_(True))
        ).scalar()
        or 0
    )
    used_tickets = count_used_tickets(db)

    total_value = Decimal("0")
    used_value = Decimal("0")
    total_tickets_with_value = 0
    used_tickets_with_value = 0
    references = db.execute(
        select(Reference.ticket_count, Reference.ticket_value, Reference.used)
    ).all()
    for ticket_count, ticket_value, used in references:
        reference_value = (ticket_value or Decimal("0")) * ticket_count
        total_value += reference_value
        total_tickets_with_value += ticket_count
        if used:
            used_value += reference_value
            used_tickets_with_value += ticket_count

    periods = _period_starts(now)
    revenue = {"today": Decimal("0"), "week": Decimal("0"), "month": Decimal("0")}
    total_revenue = Decimal("0")
    rows = db.execute(
        select(Participant.created_at, Reference.ticket_count, Reference.ticket_value)
        .join(Reference, Participant.reference_code == Reference.code)
    ).all()
    for created_at, ticket_count, ticket_value in rows:
        if not ticket_value or not ticket_count:
            continue
        reference_revenue = ticket_value * ticket_count
        total_revenue += reference_revenue
        if created_at.tzinfo is None:
            # sqlite hands back naive local time
            created_at = created_at.replace(tzinfo=periods["today"].tzinfo)
        for key, start in periods.items():
            if created_at >= start:
                revenue[key] += reference_revenue

    conversion_rate = (
        used_references / total_references * 100 if total_references > 0 else 0.0
    )
    projected_revenue = (
        total_revenue * Decimal(100) / Decimal(str(conversion_rate))
        if conversion_rate > 0
        else total_revenue
    )

    return {
        "total_participants": total_participants,
        "active_participants": total_participants,
        "total_references": total_references,
        "used_references": used_references,
        "available_references": total_references - used_references,
        "total_tickets": TICKET_NUMBER_SPACE,
        "used_tickets": used_tickets,
        "available_tickets": TICKET_NUMBER_SPACE - used_tickets,
        "conversion_rate": conversion_rate,
        "total_value": _money(total_value),
        "used_value": _money(used_value),
        "available_value": _money(total_value - used_value),
        "average_ticket_value": (
            _money(total_value / total_tickets_with_value)
            if total_tickets_with_value > 0
            else 0.0
        ),
        "total_tickets_with_value": total_tickets_with_value,
        "used_tickets_with_value": used_tickets_with_value,
        "revenue_today": _money(revenue["today"]),
        "revenue_this_week": _money(revenue["week"]),
        "revenue_this_month": _money(revenue["month"]),
        "total_revenue": _money(total_revenue),
        "projected_revenue": _money(projected_revenue),
    }


def get_participant_stats(db: Session, now: Optional[datetime] = None) -> dict:
    periods = _period_starts(now)
    return {
        "total": _count_participants_since(db),
        "today": _count_participants_since(db, periods["today"]),
        "this_week": _count_participants_since(db, periods["week"]),
        "this_month": _count_participants_since(db, periods["month"]),
    }


def get_recent_activity(db: Session, limit: int = 10) -> List[dict]:
    """Latest registrations merged with latest reference redemptions."""
    participants = db.execute(
        select(
            Participant.id,
            Participant.name,
            Participant.reference_code,
            Participant.created_at,
        )
        .order_by(Participant.created_at.desc())
        .limit(limit)
    ).all()
    references = db.execute(
        select(Reference.code, Reference.used_at)
        .where(Reference.used.is_(True), Reference.used_at.is_not(None))
        .order_by(Reference.used_at.desc())
        .limit(limit // 2)
    ).all()

    activities = [
        {
            "id": f"participant-{p.id}",
            "type": "participant_registered",
            "description": (
                f"{p.name} registered with reference {p.reference_code}"
                if p.reference_code
                else f"{p.name} registered without reference"
            ),
            "timestamp": p.created_at,
            "metadata": {
                "participant_id": str(p.id),
                "reference": p.reference_code,
            },
        }
        for p in participants
    ]
    activities += [
        {
            "id": f"reference-{r.code}",
            "type": "reference_used",
            "description": f"Reference {r.code} was used",
            "timestamp": r.used_at,
            "metadata": {"reference": r.code},
        }
        for r in references
    ]
    activities.sort(key=lambda item: item["timestamp"], reverse=True)
    return activities[:limit]
