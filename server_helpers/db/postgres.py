import logging
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.engine import URL, Engine
from sqlmodel import Session, create_engine

from server_helpers.db.retry import check_and_retry, validate_conn_or_fail, DEFAULT_MAX_TRIES, DEFAULT_SECONDS_TO_WAIT
from server_helpers.environments import get_optional_env, get_required_env

logger = logging.getLogger(__name__)


def check_required_postgres_envs(prefix: str = ""):
    if get_optional_env(prefix + "DATABASE_URL", "") == "":
        get_required_env(prefix + "DATABASE_NAME")
        get_required_env(prefix + "DATABASE_HOST")
        get_required_env(prefix + "DATABASE_USER")


def postgres_url(prefix: str = "", default: str = "") -> str:
    """Connection URL from ``<prefix>DATABASE_URL`` or the individual DATABASE_* variables.

    ``default`` is returned when neither ``<prefix>DATABASE_URL`` nor
    ``<prefix>DATABASE_HOST`` is set.
    """
    db_url = get_optional_env(prefix + "DATABASE_URL", "")
    if db_url:
        return db_url
    if default and get_optional_env(prefix + "DATABASE_HOST", "") == "":
        return default

    url = URL.create(
        "postgresql",
        username=get_required_env(prefix + "DATABASE_USER"),
        password=get_optional_env(prefix + "DATABASE_PASSWORD", "") or None,
        host=get_required_env(prefix + "DATABASE_HOST"),
        port=int(get_optional_env(prefix + "DATABASE_PORT", "5432")),
        database=get_required_env(prefix + "DATABASE_NAME"),
        query={"sslmode": get_optional_env(prefix + "SSL_MODE", "disable")},
    )
    return url.render_as_string(hide_password=False)


def create_postgres_engine(prefix: str = "", default: str = "", **kwargs) -> Engine:
    return create_engine(postgres_url(prefix, default), **kwargs)


def ping_engine(engine: Engine):
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def check_db_connection(engine: Engine, max_tries: int = DEFAULT_MAX_TRIES,
                        seconds_to_wait: float = DEFAULT_SECONDS_TO_WAIT, debug: bool = False):
    check_and_retry(lambda: ping_engine(engine), max_tries, seconds_to_wait, debug)


def validate_db_conn_or_fail(engine: Engine, debug: bool = False):
    validate_conn_or_fail(lambda: ping_engine(engine), debug, name="DB connection")


def init_postgres(prefix: str = "", debug: bool = False) -> Engine:
    if debug:
        logger.info("Establishing connection with postgres database")

    engine = create_postgres_engine(prefix)

    validate_db_conn_or_fail(engine, debug)
    if debug:
        logger.info("Connection successfully established")
    return engine


def get_session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session
