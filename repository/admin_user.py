from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from core.log import logger
from core.security import generate_hash_password
from models.AdminUser import ADMIN_ROLE, AdminUser


def get_admin_by_username(db: Session, username: str) -> Optional[AdminUser]:
    stmt = select(AdminUser).where(AdminUser.username == username)
    data = db.execute(stmt).scalar()
    return data


def create_admin_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    role: str = ADMIN_ROLE,
    is_commit: bool = True,
) -> AdminUser:
    admin = AdminUser(
        username=username,
        email=email,
        password=generate_hash_password(password),
        role=role,
    )
    db.add(admin)
    db.flush()
    if is_commit:
        db.commit()
        db.refresh(admin)
    logger.info(f"Admin user {username} created")
    return admin
