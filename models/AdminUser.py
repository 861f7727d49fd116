import uuid
from datetime import datetime
from sqlalchemy import UUID, DateTime, String
from sqlalchemy.orm import mapped_column, Mapped
from core.helper import get_current_time_in_timezone
from models import Base

ADMIN_ROLE = "admin"


class AdminUser(Base):
    __tablename__ = "admin_user"

    id: Mapped[str] = mapped_column(
        "id", UUID(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4
    )
    username: Mapped[str] = mapped_column(
        "username", String, unique=True, nullable=False
    )
    email: Mapped[str] = mapped_column("email", String, nullable=False)
    password: Mapped[str] = mapped_column("password", String, nullable=False)
    role: Mapped[str] = mapped_column("role", String, nullable=False, default=ADMIN_ROLE)
    created_at: Mapped[datetime] = mapped_column(
        "created_at", DateTime(timezone=True), default=get_current_time_in_timezone
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updated_at",
        DateTime(timezone=True),
        default=get_current_time_in_timezone,
        onupdate=get_current_time_in_timezone,
    )
