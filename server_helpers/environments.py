import logging
import os

logger = logging.getLogger(__name__)


class MissingEnvironmentError(RuntimeError):
    def __init__(self, name: str):
        super().__init__(f"PLEASE SET {name} ENVIRONMENT VARIABLE")
        self.name = name


def get_required_env(name: str) -> str:
    """Return the value of ``name``; raise MissingEnvironmentError if unset or empty."""
    val = os.environ.get(name, "")
    if not val:
        raise MissingEnvironmentError(name)
    return val


def get_optional_env(name: str, default: str) -> str:
    val = os.environ.get(name, "")
    if not val:
        logger.info("Env var: '%s' not found or empty.  Setting to default value: '%s'", name, default)
        return default
    return val
