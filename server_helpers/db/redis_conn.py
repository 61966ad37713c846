import logging

import redis

from server_helpers.db.retry import check_and_retry, validate_conn_or_fail, DEFAULT_MAX_TRIES, DEFAULT_SECONDS_TO_WAIT
from server_helpers.environments import get_optional_env, get_required_env

logger = logging.getLogger(__name__)


def _env_base(use_tls: bool) -> str:
    return "REDIS_TLS" if use_tls else "REDIS"


def check_required_redis_envs(prefix: str = "", use_tls: bool = False):
    base = prefix + _env_base(use_tls)
    if get_optional_env(base + "_URL", "") == "":
        get_required_env(base + "_HOST")


def build_redis_client(prefix: str = "", use_tls: bool = False) -> redis.Redis:
    base = prefix + _env_base(use_tls)
    skip_verify = get_optional_env("USE_TLS_CONFIG", "false") == "true"

    redis_url = get_optional_env(base + "_URL", "")
    if redis_url:
        kwargs = {}
        if skip_verify and redis_url.startswith("rediss://"):
            kwargs["ssl_cert_reqs"] = "none"
        return redis.from_url(redis_url, **kwargs)

    kwargs = {
        "host": get_required_env(base + "_HOST"),
        "port": int(get_optional_env(base + "_PORT", "6379")),
        "password": get_optional_env(base + "_PASSWORD", "") or None,
        "username": get_optional_env(base + "_USER", "") or None,
    }
    if use_tls or skip_verify:
        kwargs["ssl"] = True
        if skip_verify:
            kwargs["ssl_cert_reqs"] = "none"
    return redis.Redis(**kwargs)


def check_redis_connection(client: redis.Redis, max_tries: int = DEFAULT_MAX_TRIES,
                           seconds_to_wait: float = DEFAULT_SECONDS_TO_WAIT, debug: bool = False):
    check_and_retry(client.ping, max_tries, seconds_to_wait, debug)


def validate_redis_conn_or_fail(client: redis.Redis, debug: bool = False):
    validate_conn_or_fail(client.ping, debug, name="Redis connection")


def init_redis(prefix: str = "", use_tls: bool = False, debug: bool = False) -> redis.Redis:
    if debug:
        logger.info("Establishing connection with redis")

    client = build_redis_client(prefix, use_tls)

    validate_redis_conn_or_fail(client, debug)
    if debug:
        logger.info("Successfully established redis connection")
    return client
