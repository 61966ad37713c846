import requests
from fastapi import APIRouter
from server_helpers.config import SERVICE_HEALTH_URLS
from server_helpers.probes import http_probe

router = APIRouter()


@router.get("/health")
def health():
    return {"ok": True}


@router.get("/health/services")
def health_services():
    out = {}
    for name, url in SERVICE_HEALTH_URLS.items():
        try:
            status_code = http_probe(url, timeout=(2, 2))
            out[name] = {"ok": True, "status_code": status_code}
        except requests.HTTPError as e:
            out[name] = {"ok": False, "status_code": e.response.status_code}
        except requests.RequestException as e:
            out[name] = {"ok": False, "error": str(e)}
    return out
