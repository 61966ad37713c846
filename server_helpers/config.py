import os
from dotenv import load_dotenv

load_dotenv()

DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Upper bound on request bodies read by the request pipeline
MAX_REQUEST_BYTES = int(os.getenv("MAX_REQUEST_BYTES", "524288"))

REQUESTER_ID_HEADER = os.getenv("REQUESTER_ID_HEADER", "X-Requester-Id")
TRACE_ID_HEADER = os.getenv("TRACE_ID_HEADER", "X-Request-Id")

HTTP_CONNECT_TIMEOUT_S = float(os.getenv("HTTP_CONNECT_TIMEOUT_S", "3.0"))
HTTP_READ_TIMEOUT_S = float(os.getenv("HTTP_READ_TIMEOUT_S", "30.0"))


def parse_service_urls(raw: str) -> dict:
    """Parse ``name=url,name2=url2`` into a dict, skipping blank entries."""
    services = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, url = item.partition("=")
        if not sep or not name.strip() or not url.strip():
            raise ValueError(f"Bad SERVICE_HEALTH_URLS entry: '{item}'")
        services[name.strip()] = url.strip()
    return services


# Downstream services reported by /health/services
SERVICE_HEALTH_URLS = parse_service_urls(os.getenv("SERVICE_HEALTH_URLS", ""))

# Used when neither DATABASE_URL nor DATABASE_HOST is set
DEFAULT_DATABASE_URL = "postgresql://user:pass@db:5432/server_helpers"

# Reject requests without a UUID requester id header
REQUIRE_REQUESTER_ID = os.getenv("REQUIRE_REQUESTER_ID", "true").lower() == "true"

# Startup: random jitter before creating tables so replicas don't race
IS_RUNNING_LOCALLY = os.getenv("IS_RUNNING_LOCALLY", "false").lower() == "true"
MIGRATION_MAX_WAIT_MS = int(os.getenv("MIGRATION_MAX_WAIT_MS", "2000"))
