import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import UUID, Boolean, DateTime, Integer, Numeric, String
from sqlalchemy.orm import mapped_column, Mapped
from core.helper import get_current_time_in_timezone
from models import Base

REFERENCE_CODE_LENGTH = 6


class Reference(Base):
    __tablename__ = "reference"

    id: Mapped[str] = mapped_column(
        "id", UUID(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4
    )
    code: Mapped[str] = mapped_column(
        "code", String(REFERENCE_CODE_LENGTH), unique=True, nullable=False
    )
    ticket_count: Mapped[int] = mapped_column(
        "ticket_count", Integer, nullable=False, default=5
    )
    ticket_value: Mapped[Decimal] = mapped_column(
        "ticket_value", Numeric(10, 2), nullable=False, default=0
    )
    used: Mapped[bool] = mapped_column(
        "used", Boolean, nullable=False, default=False, index=True
    )
    used_at: Mapped[Optional[datetime]] = mapped_column(
        "used_at", DateTime(timezone=True), nullable=True
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
