import requests
from server_helpers.config import HTTP_CONNECT_TIMEOUT_S, HTTP_READ_TIMEOUT_S


def http_probe(url: str, timeout=(HTTP_CONNECT_TIMEOUT_S, HTTP_READ_TIMEOUT_S)) -> int:
    """GET ``url``; raise ``requests.RequestException`` unless it answers 2xx.

    Suitable as a probe for ``check_and_retry`` when a service waits on
    another HTTP service at startup.
    """
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.status_code
