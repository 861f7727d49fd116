from sqlalchemy.orm import Session
from core.log import logger
from core.security import generate_hash_password
from repository.admin_user import create_admin_user, get_admin_by_username
from settings import ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_USERNAME


def initial_admin(db: Session, is_commit: bool = True):
    existing = get_admin_by_username(db=db, username=ADMIN_USERNAME)
    if existing is None:
        create_admin_user(
            db=db,
            username=ADMIN_USERNAME,
            email=ADMIN_EMAIL,
            password=ADMIN_PASSWORD,
            is_commit=False,
        )
    else:
        # keep the password in sync with the environment
        existing.password = generate_hash_password(ADMIN_PASSWORD)
        logger.info(f"Admin user {ADMIN_USERNAME} password updated")

    if is_commit:
        db.commit()
