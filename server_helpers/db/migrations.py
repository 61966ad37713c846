import logging
import random
import time

from sqlalchemy import MetaData
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


def init_postgres_migrations(engine: Engine, metadata: MetaData, max_ms_to_wait: int,
                             is_running_locally: bool, debug: bool = False):
    """
    Create any tables in ``metadata`` that don't exist yet.

    When several replicas start together each one first sleeps a random
    ``[0, max_ms_to_wait)`` ms so their schema changes don't overlap.
    Tables that already exist are left alone.
    """
    if debug:
        logger.info("Doing Migrations")

    if not is_running_locally and max_ms_to_wait > 0:
        ms_to_wait = random.randrange(max_ms_to_wait)
        if debug:
            logger.info("Waiting %d ms before running migrations", ms_to_wait)
        time.sleep(ms_to_wait / 1000)

    metadata.create_all(engine, checkfirst=True)

    if debug:
        logger.info("Migrations Successful")
