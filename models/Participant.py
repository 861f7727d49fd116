import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import JSON, UUID, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import mapped_column, Mapped, relationship
from core.helper import get_current_time_in_timezone
from models import Base
from models.Reference import Reference


class Participant(Base):
    __tablename__ = "participant"

    id: Mapped[str] = mapped_column(
        "id", UUID(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4
    )
    # one participant per reference, null for gifted tickets
    reference_code: Mapped[Optional[str]] = mapped_column(
        "reference_code",
        String(6),
        ForeignKey("reference.code", ondelete="SET NULL"),
        unique=True,
        nullable=True,
    )
    name: Mapped[str] = mapped_column("name", String, nullable=False)
    email: Mapped[str] = mapped_column("email", String, nullable=False)
    phone: Mapped[str] = mapped_column("phone", String, nullable=False)
    national_id: Mapped[str] = mapped_column("national_id", String, nullable=False)
    tickets: Mapped[list] = mapped_column(
        "tickets",
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
        default=list,
    )
    generated_at: Mapped[datetime] = mapped_column(
        "generated_at", DateTime(timezone=True), nullable=False
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

    reference: Mapped[Optional[Reference]] = relationship(
        "Reference", foreign_keys=[reference_code], lazy="joined"
    )
