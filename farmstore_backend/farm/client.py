# farm/client.py

"""
FARM MANAGER API CLIENT

All communication with the farm manager (inventory + finance owner) goes
through this module.

- Service-to-service auth: shared secret in the X-Integration-Secret header.
- Every call is bounded by FARM_API["TIMEOUT"].
- Failures raise FarmAPIError; nothing is ever partially returned.
- A timeout is NOT proof that nothing happened remotely: callers treat it as
  a soft, retryable failure.
"""

from __future__ import annotations

import json
import logging
import socket
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15


class FarmAPIError(RuntimeError):
    """Farm manager unreachable, timed out, or rejected the request."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _farm_cfg() -> dict:
    cfg = getattr(settings, "FARM_API", {}) or {}
    return cfg if isinstance(cfg, dict) else {}


def _base_url() -> str:
    base = str(_farm_cfg().get("BASE_URL") or "").strip().rstrip("/")
    if not base:
        raise FarmAPIError("FARM_API BASE_URL is not configured.")
    return base


def _safe_preview(text: str, limit: int = 500) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _farm_request(method: str, path: str, *, body: dict | None = None) -> Any:
    cfg = _farm_cfg()
    url = f"{_base_url()}{path}"
    timeout = int(cfg.get("TIMEOUT") or DEFAULT_TIMEOUT)

    data = None
    if body is not None:
        data = json.dumps(body, ensure_ascii=False, default=str).encode("utf-8")

    req = Request(
        url,
        data=data,
        headers={
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Integration-Secret": str(cfg.get("SECRET") or ""),
        },
        method=method,
    )

    try:
        with urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        raw = ""
        try:
            raw = e.read().decode("utf-8", errors="replace")
        except OSError:
            raw = ""

        message = ""
        try:
            parsed = json.loads(raw) if raw else {}
            if isinstance(parsed, dict):
                message = str(parsed.get("error") or parsed.get("message") or "")
        except ValueError:
            message = ""

        message = message or _safe_preview(raw) or str(e.reason)
        logger.warning(
            "Farm API rejected request",
            extra={"path": path, "status": e.code, "detail": message},
        )
        raise FarmAPIError(f"Farm API error: {e.code} {message}", status_code=e.code) from e
    except (socket.timeout, TimeoutError) as e:
        logger.warning("Farm API timed out", extra={"path": path, "timeout": timeout})
        raise FarmAPIError(f"Farm API timed out after {timeout}s") from e
    except URLError as e:
        logger.warning("Farm API unreachable", extra={"path": path, "reason": str(e.reason)})
        raise FarmAPIError(f"Farm API unreachable: {e.reason}") from e

    try:
        return json.loads(raw) if raw else {}
    except ValueError as e:
        raise FarmAPIError(f"Farm API returned non-JSON: {_safe_preview(raw)}") from e


# ============================================================
# PUBLIC OPERATIONS
# ============================================================


def fetch_public_products(params: dict | None = None) -> Any:
    """Product/stock listing used by the periodic cache resync."""
    query = urlencode(params or {})
    path = "/api/integration/public-products"
    if query:
        path = f"{path}?{query}"
    return _farm_request("GET", path)


def deduct_stock(items: list[dict]) -> dict:
    """
    items: [{"inventoryItemId", "quantity", "productName"}]
    Returns {"errors": [{"product", "reason"}]} (errors may be empty).
    """
    parsed = _farm_request("POST", "/api/integration/deduct-stock", body={"items": items})
    return parsed if isinstance(parsed, dict) else {}


def restore_stock(items: list[dict]) -> dict:
    parsed = _farm_request("POST", "/api/integration/restore-stock", body={"items": items})
    return parsed if isinstance(parsed, dict) else {}


def register_sale(order_data: dict) -> dict:
    """Returns {"financeRecordId": ...}."""
    parsed = _farm_request("POST", "/api/integration/register-sale", body=order_data)
    return parsed if isinstance(parsed, dict) else {}
