from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt
import pytz
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from core.log import logger
from models import get_db_sync
from models.AdminUser import AdminUser
from settings import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="admin/token/", auto_error=False)


def generate_hash_password(password: str) -> str:
    hash = bcrypt.hashpw(str.encode(password), bcrypt.gensalt())
    return hash.decode()


def validated_password(hash: str, password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hash.encode())
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def generate_token_from_admin(admin: AdminUser) -> str:
    """Issue a signed access token for an admin.

    {
        "id": "aaaa-bbbb-cccc-dddd",
        "username": "admin",
        "role": "admin",
        "exp": 1641455971,
    }
    """
    expire = datetime.now(tz=pytz.timezone("UTC")) + timedelta(
        minutes=float(ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {
        "id": str(admin.id),
        "username": admin.username,
        "role": admin.role,
        "exp": expire,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def get_admin_from_token(db: Session, token: Optional[str]) -> Optional[AdminUser]:
    if not token:
        return None
    try:
        payload = jwt.decode(jwt=token, key=SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired admin token")
        return None
    except jwt.InvalidTokenError:
        logger.info("Rejected invalid admin token")
        return None

    stmt = select(AdminUser).where(AdminUser.username == payload.get("username"))
    admin = db.execute(stmt).scalar()
    if admin is None or str(admin.id) != payload.get("id"):
        return None
    return admin


def get_current_admin(
    db: Session = Depends(get_db_sync), token: Optional[str] = Depends(oauth2_scheme)
) -> Optional[AdminUser]:
    return get_admin_from_token(db, token)

