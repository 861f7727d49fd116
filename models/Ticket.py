import uuid
from datetime import datetime
from sqlalchemy import UUID, Boolean, DateTime, String
from sqlalchemy.orm import mapped_column, Mapped
from core.helper import get_current_time_in_timezone
from models import Base

TICKET_NUMBER_LENGTH = 4
# every number from 0000 to 9999
TICKET_NUMBER_SPACE = 10**TICKET_NUMBER_LENGTH


class Ticket(Base):
    __tablename__ = "ticket"

    id: Mapped[str] = mapped_column(
        "id", UUID(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4
    )
    number: Mapped[str] = mapped_column(
        "number", String(TICKET_NUMBER_LENGTH), unique=True, nullable=False
    )
    used: Mapped[bool] = mapped_column(
        "used", Boolean, nullable=False, default=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        "created_at", DateTime(timezone=True), default=get_current_time_in_timezone
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updated_at",
        DateTime(timezone=True),
        default=get_current_time_in_timezone,
        onupdate=get_current_time_in_timezone,
    )
