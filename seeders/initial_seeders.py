from core.log import logger
from models import factory_session

from seeders.initial_admin import initial_admin
from seeders.initial_reference import initial_reference


def initial_seeders():
    with factory_session() as session:
        initial_admin(db=session, is_commit=True)
        initial_reference(db=session, is_commit=True)
    logger.info("Seed completed")
