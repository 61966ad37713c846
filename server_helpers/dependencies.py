from server_helpers.config import DEFAULT_DATABASE_URL
from server_helpers.db import postgres

engine = postgres.create_postgres_engine(default=DEFAULT_DATABASE_URL, pool_pre_ping=True)


def get_session():
    yield from postgres.get_session(engine)
