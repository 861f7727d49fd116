from sqlalchemy import text
from sqlalchemy.orm import Session

from core.log import logger
from models import db, engine


def health_check():
    logger.info(f"run app with database {engine.url.render_as_string(hide_password=True)}")
    with db() as session:
        session.execute(text("SELECT 1"))
    logger.info("successfully connect to database")


def database_is_up(session: Session) -> bool:
    try:
        session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
